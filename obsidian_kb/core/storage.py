"""Vault-relative file storage used by the knowledge base registry and note operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class DirectoryListing:
    """Immediate children of a directory, split by kind."""

    files: list[str] = field(default_factory=list)
    subdirectories: list[str] = field(default_factory=list)


class VaultStorage:
    """File hierarchy rooted at an Obsidian vault.

    Every path is a forward-slash separated string relative to the vault root.
    Creation and modification are separate calls: ``create_file`` refuses to
    overwrite and ``modify_file`` refuses to create.
    """

    def __init__(self, root: Path) -> None:
        self.root = root.resolve(strict=False)

    def _absolute(self, path: str) -> Path:
        candidate = (self.root / path).resolve(strict=False)
        # Filesystem-level sandbox: the path must stay inside the vault
        if not candidate.is_relative_to(self.root):
            raise ValueError(f"Path '{path}' escapes the vault root.")
        return candidate

    def is_file(self, path: str) -> bool:
        return self._absolute(path).is_file()

    def is_directory(self, path: str) -> bool:
        return self._absolute(path).is_dir()

    def read_file(self, path: str) -> str:
        target = self._absolute(path)
        if not target.is_file():
            raise FileNotFoundError(f"File '{path}' not found.")
        with target.open("r", encoding="utf-8", newline="") as handle:
            return handle.read()

    def create_file(self, path: str, text: str) -> None:
        target = self._absolute(path)
        if target.exists():
            raise FileExistsError(f"File '{path}' already exists.")
        with target.open("x", encoding="utf-8", newline="") as handle:
            handle.write(text)

    def modify_file(self, path: str, text: str) -> None:
        target = self._absolute(path)
        if not target.is_file():
            raise FileNotFoundError(f"File '{path}' not found.")
        with target.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)

    def delete_file(self, path: str) -> None:
        target = self._absolute(path)
        if not target.is_file():
            raise FileNotFoundError(f"File '{path}' not found.")
        target.unlink()

    def rename_file(self, old_path: str, new_path: str) -> None:
        source = self._absolute(old_path)
        destination = self._absolute(new_path)
        if not source.is_file():
            raise FileNotFoundError(f"File '{old_path}' not found.")
        if destination.exists():
            raise FileExistsError(f"File '{new_path}' already exists.")
        source.rename(destination)

    def ensure_directory(self, path: str) -> None:
        if not path:
            return
        self._absolute(path).mkdir(parents=True, exist_ok=True)

    def list_directory(self, path: str) -> DirectoryListing:
        """List one level of ``path``; a missing directory yields an empty listing."""
        target = self._absolute(path)
        listing = DirectoryListing()
        if not target.is_dir():
            return listing

        for child in sorted(target.iterdir(), key=lambda entry: entry.name):
            if child.is_dir():
                listing.subdirectories.append(child.name)
            elif child.is_file():
                listing.files.append(child.name)
        return listing
