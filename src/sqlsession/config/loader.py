"""Configuration loading from YAML files."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from sqlsession.config.models import Config, DataSourceConfig
from sqlsession.errors import ConfigurationError

# Drivers whose ``database`` is a path on the local filesystem.
_FILE_DRIVERS = frozenset({"sqlite3"})


def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        data = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML root must be a mapping, not {type(data).__name__}")
    return data


def resolve_database_path(datasource: DataSourceConfig, base_dir: Path) -> DataSourceConfig:
    """
    Anchor a relative file database at ``base_dir``.

    In-memory databases, ``file:`` URIs, absolute paths and
    databases of non-file drivers are returned unchanged.
    """
    database = datasource.database
    if (
        datasource.driver not in _FILE_DRIVERS
        or not database
        or database == ":memory:"
        or database.startswith("file:")
        or Path(database).is_absolute()
    ):
        return datasource
    return datasource.model_copy(update={"database": str(base_dir / database)})


def load_config(config_path: Path | None) -> Config:
    """
    Load configuration from a YAML file or return defaults.

    A relative sqlite3 ``datasource.database`` is taken relative to
    the directory holding the config file, not the working directory.

    Args:
        config_path: Path to YAML config file, or None for defaults.

    Returns:
        Validated Config object.

    Raises:
        FileNotFoundError: If config_path doesn't exist.
        ValueError: If the YAML is invalid or not a mapping.
        ConfigurationError: If the values fail validation.
    """
    if config_path is None:
        return Config()

    data = _read_yaml(config_path)
    try:
        config = Config(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e

    config.datasource = resolve_database_path(config.datasource, config_path.resolve().parent)
    return config
