import os
from dataclasses import dataclass, field
from typing import List

import toml

from .cli_logger import logger
from .errors import ConfigError
from .git import GitPrefix
from .license import DEFAULT_LICENSE_DIRS

CONFIG_FILE = "cargo-bitbake.toml"
KNOWN_KEYS = ("git_prefix", "license_dirs", "templates", "log_file")


@dataclass
class Settings:
    git_prefix: GitPrefix = GitPrefix.DEFAULT
    license_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_LICENSE_DIRS))
    templates: List[str] = field(default_factory=list)
    log_file: bool = False


def load_config(path="."):
    """Read cargo-bitbake.toml from ``path``; returns {} when there is none."""
    config_path = os.path.join(path, CONFIG_FILE)
    if not os.path.exists(config_path):
        return {}
    logger.debug(f"Loading configuration from {config_path}")
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (toml.TomlDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Error decoding TOML file at {config_path}: {e}") from e
    except IOError as e:
        raise ConfigError(f"Error reading configuration file at {config_path}: {e}") from e


def _string_list(key, value, source):
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"'{key}' in {source} must be a list of strings")
    return list(value)


def build_settings(path=".", manifest_metadata=None):
    """Merge ``[package.metadata.bitbake]`` with cargo-bitbake.toml, the file winning.

    Args:
        path: Directory holding the package's Cargo.toml.
        manifest_metadata: The ``package.metadata.bitbake`` table, if any.

    Returns:
        Settings
    """
    merged = {}
    sources = {}
    for source, values in (("Cargo.toml", manifest_metadata or {}), (CONFIG_FILE, load_config(path))):
        for key, value in values.items():
            if key not in KNOWN_KEYS:
                logger.warning(f"Ignoring unknown setting '{key}' in {source}")
                continue
            merged[key] = value
            sources[key] = source

    settings = Settings()
    if "git_prefix" in merged:
        try:
            settings.git_prefix = GitPrefix.parse(merged["git_prefix"])
        except ValueError as e:
            raise ConfigError(f"{e} (in {sources['git_prefix']})") from e
    if "license_dirs" in merged:
        settings.license_dirs = _string_list("license_dirs", merged["license_dirs"], sources["license_dirs"])
    if "templates" in merged:
        # relative template paths are relative to the package directory
        settings.templates = [
            os.path.join(path, template)
            for template in _string_list("templates", merged["templates"], sources["templates"])
        ]
    if "log_file" in merged:
        if not isinstance(merged["log_file"], bool):
            raise ConfigError(f"'log_file' in {sources['log_file']} must be true or false")
        settings.log_file = merged["log_file"]
    return settings
