"""Configuration loading and vault registry."""

import logging
from pathlib import Path
from typing import Optional

import yaml

from obsidian_kb.constants import CONFIG_PATH
from obsidian_kb.data_models import VaultMetadata, VaultConfiguration

logger = logging.getLogger(__name__)

_VAULT_CONFIGURATION: Optional[VaultConfiguration] = None


def load_vault_configuration(config_path: Path = CONFIG_PATH) -> VaultConfiguration:
    """Load and validate the vault configuration file.

    Args:
        config_path: Path to the YAML configuration file. Defaults to ``vaults.yaml``
        at the repository root, or ``$OBSIDIAN_KB_CONFIG`` when set.

    Returns:
        A fully populated :class:`VaultConfiguration` containing normalized vault
        metadata and the configured default vault name.

    Raises:
        FileNotFoundError: If the configuration file is missing.
        ValueError: If the file exists but does not provide the expected structure
            (missing default, empty mapping, invalid entries, etc.).
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Vault configuration file not found at {config_path}")

    raw_config = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    vaults_section = raw_config.get("vaults")
    if not isinstance(vaults_section, dict) or not vaults_section:
        raise ValueError("Vault configuration must include a non-empty 'vaults' mapping")

    processed: dict[str, VaultMetadata] = {}
    for name, entry in vaults_section.items():
        if not isinstance(entry, dict):
            raise ValueError(f"Vault '{name}' must map to a dictionary of settings")

        raw_path = entry.get("path")
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise ValueError(f"Vault '{name}' is missing a valid 'path' string")

        resolved_path = Path(raw_path).expanduser().resolve(strict=False)
        description = (entry.get("description") or "").strip()

        processed[name] = VaultMetadata(
            name=name,
            path=resolved_path,
            description=description,
            exists=resolved_path.is_dir(),
        )

    default_vault = raw_config.get("default")
    if not isinstance(default_vault, str) or default_vault not in processed:
        raise ValueError("Vault configuration must specify a 'default' vault present in the mapping")

    logger.info("Loaded %d vault(s) from %s (default '%s')", len(processed), config_path, default_vault)
    return VaultConfiguration(default_vault=default_vault, vaults=processed)


def get_vault_configuration() -> VaultConfiguration:
    """Return the vault configuration, loading it on first use."""
    global _VAULT_CONFIGURATION
    if _VAULT_CONFIGURATION is None:
        _VAULT_CONFIGURATION = load_vault_configuration()
    return _VAULT_CONFIGURATION


def set_vault_configuration(configuration: Optional[VaultConfiguration]) -> None:
    """Install (or clear, with ``None``) the process-wide vault configuration."""
    global _VAULT_CONFIGURATION
    _VAULT_CONFIGURATION = configuration
