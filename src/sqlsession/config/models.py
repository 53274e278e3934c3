"""Pydantic configuration models for sqlsession."""

from enum import StrEnum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class KeyRetrieval(StrEnum):
    """How a driver is asked to return generated keys."""

    GENERIC = "generic"
    COLUMNS = "columns"


def _default_key_retrieval() -> dict[str, KeyRetrieval]:
    # Oracle drivers reject the generic mode and need explicit key columns.
    return {
        "oracledb": KeyRetrieval.COLUMNS,
        "cx_Oracle": KeyRetrieval.COLUMNS,
    }


class DataSourceConfig(BaseModel):
    """DB-API driver and connection arguments.

    ``autocommit`` left as None keeps the driver's default, which for
    PEP 249 drivers (sqlite3 included) is off: updates made outside
    Session.transaction are rolled back when the session closes. Set
    it to True to have each statement commit on its own.
    """

    driver: str = "sqlite3"
    database: str | None = ":memory:"
    connect_args: dict[str, Any] = Field(default_factory=dict)
    autocommit: bool | None = None
    driver_name: str | None = None

    @field_validator("driver")
    @classmethod
    def validate_driver(cls, v: str) -> str:
        """Validate the driver is a dotted module name."""
        v = v.strip()
        if not v or not all(part.isidentifier() for part in v.split(".")):
            raise ValueError(f"driver must be an importable module name, got {v!r}")
        return v


class SessionConfig(BaseModel):
    """Session behavior configuration."""

    auto_generated_keys: list[str] = Field(default_factory=list)
    key_retrieval: dict[str, KeyRetrieval] = Field(default_factory=_default_key_retrieval)

    @field_validator("auto_generated_keys")
    @classmethod
    def validate_key_columns(cls, v: list[str]) -> list[str]:
        """Reject blank key-column names."""
        if any(not name.strip() for name in v):
            raise ValueError("auto_generated_keys must not contain blank names")
        return [name.strip() for name in v]


class LoggingConfig(BaseModel):
    """Logging configuration for loguru."""

    level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["console", "json"] = "console"
    file: Path | None = None
    rotation: str = "10 MB"
    retention: str = "7 days"
    # Per-statement SQL records (DEBUG); off hides them at any level.
    log_statements: bool = True
    # Threshold for records forwarded from drivers' stdlib loggers.
    driver_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"


class Config(BaseSettings):
    """Root configuration for sqlsession."""

    datasource: DataSourceConfig = Field(default_factory=DataSourceConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "SQLSESSION_",
        "env_nested_delimiter": "__",
    }
