"""Configuration management for sqlsession."""

from sqlsession.config.loader import load_config
from sqlsession.config.models import (
    Config,
    DataSourceConfig,
    KeyRetrieval,
    LoggingConfig,
    SessionConfig,
)

__all__ = [
    "Config",
    "DataSourceConfig",
    "KeyRetrieval",
    "LoggingConfig",
    "SessionConfig",
    "load_config",
]
