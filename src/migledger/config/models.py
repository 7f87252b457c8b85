"""Pydantic configuration models for migledger."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from migledger.config.options import LedgerOptions


class StorageConfig(BaseModel):
    """Backend selection."""

    backend: Literal["dynamodb", "sqlite"] = "dynamodb"
    sqlite_path: Path = Field(default_factory=lambda: Path("~/.migledger/ledger.db").expanduser())
    sqlite_busy_timeout_seconds: float = Field(default=30.0, ge=0.1, le=600.0)

    @field_validator("sqlite_path", mode="before")
    @classmethod
    def expand_path(cls, v: Path | str) -> Path:
        """Expand user path and resolve to absolute."""
        if isinstance(v, str):
            v = Path(v)
        return v.expanduser().resolve()


class DynamoDBConfig(BaseModel):
    """DynamoDB client and table provisioning configuration."""

    region: str | None = None
    endpoint_url: str | None = None
    connect_timeout_seconds: float = Field(default=10.0, ge=1.0, le=300.0)
    read_timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)
    max_attempts: int = Field(default=5, ge=1, le=20)
    read_capacity_units: int = Field(default=1, ge=1)
    write_capacity_units: int = Field(default=1, ge=1)
    wait_for_tables: bool = True

    @field_validator("endpoint_url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Validate URL format and strip trailing slash."""
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("endpoint_url must start with http:// or https://")
        return v.rstrip("/")


class LoggingConfig(BaseModel):
    """Logging configuration for loguru."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["console", "json"] = "console"
    file: Path | None = None
    rotation: str = "10 MB"
    retention: str = "7 days"


class Config(BaseSettings):
    """Root configuration for migledger."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    dynamodb: DynamoDBConfig = Field(default_factory=DynamoDBConfig)
    ledger: LedgerOptions = Field(default_factory=LedgerOptions)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "MIGLEDGER_",
        "env_nested_delimiter": "__",
    }
