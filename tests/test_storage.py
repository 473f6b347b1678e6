"""Tests for the vault-relative file storage."""

import pytest

from obsidian_kb.core.storage import VaultStorage


@pytest.fixture
def storage(vault_path):
    return VaultStorage(vault_path)


def test_create_refuses_to_overwrite(storage):
    storage.create_file("a.md", "one")
    with pytest.raises(FileExistsError):
        storage.create_file("a.md", "two")
    assert storage.read_file("a.md") == "one"


def test_modify_refuses_to_create(storage):
    with pytest.raises(FileNotFoundError):
        storage.modify_file("missing.md", "text")
    assert not storage.is_file("missing.md")


def test_newlines_are_preserved(storage):
    storage.create_file("crlf.md", "a\r\nb\n")
    assert storage.read_file("crlf.md") == "a\r\nb\n"


def test_rename_and_delete(storage):
    storage.ensure_directory("x/y")
    storage.create_file("x/a.md", "a")
    storage.create_file("x/y/b.md", "b")

    with pytest.raises(FileExistsError):
        storage.rename_file("x/a.md", "x/y/b.md")

    storage.rename_file("x/a.md", "x/y/a.md")
    assert storage.list_directory("x/y").files == ["a.md", "b.md"]

    storage.delete_file("x/y/a.md")
    with pytest.raises(FileNotFoundError):
        storage.delete_file("x/y/a.md")


def test_list_directory(storage):
    storage.ensure_directory("folder/sub")
    storage.create_file("folder/b.md", "")
    storage.create_file("folder/a.txt", "")

    listing = storage.list_directory("folder")
    assert listing.files == ["a.txt", "b.md"]
    assert listing.subdirectories == ["sub"]
    assert storage.is_directory("folder/sub")
    assert not storage.is_directory("folder/b.md")
    assert storage.list_directory("nowhere").files == []


@pytest.mark.parametrize("path", ["../outside.md", "a/../../outside.md"])
def test_paths_cannot_escape_the_vault(storage, path):
    with pytest.raises(ValueError):
        storage.read_file(path)
    with pytest.raises(ValueError):
        storage.create_file(path, "x")
