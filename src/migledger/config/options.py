"""Ledger and lock naming options.

Options are plain functions from LedgerOptions to LedgerOptions. They are
applied in order over the defaults, so a later option overrides an earlier
one for the same field. The resolved value is frozen.
"""

from collections.abc import Callable

from pydantic import BaseModel, Field, ValidationError

from migledger.errors import ConfigurationError

DEFAULT_TABLE_NAME = "_migrations"
DEFAULT_LOCK_TABLE_NAME = "_migrations-lock"
DEFAULT_LOCK_ID = "migrations"


class LedgerOptions(BaseModel):
    """Table names and lock key shared by every runner of one migration set."""

    table_name: str = Field(default=DEFAULT_TABLE_NAME, min_length=1, max_length=255)
    lock_table_name: str = Field(default=DEFAULT_LOCK_TABLE_NAME, min_length=1, max_length=255)
    lock_id: str = Field(default=DEFAULT_LOCK_ID, min_length=1)
    lock_retry_interval_seconds: float = Field(default=1.0, gt=0.0, le=60.0)

    model_config = {"frozen": True}


Option = Callable[[LedgerOptions], LedgerOptions]


def with_table_name(table_name: str) -> Option:
    """Set the table recording the migrations that ran."""

    def apply(options: LedgerOptions) -> LedgerOptions:
        return options.model_copy(update={"table_name": table_name})

    return apply


def with_lock_table_name(lock_table_name: str) -> Option:
    """Set the table holding the migration lock."""

    def apply(options: LedgerOptions) -> LedgerOptions:
        return options.model_copy(update={"lock_table_name": lock_table_name})

    return apply


def with_lock_id(lock_id: str) -> Option:
    """Set the key all runners contend for in the lock table."""

    def apply(options: LedgerOptions) -> LedgerOptions:
        return options.model_copy(update={"lock_id": lock_id})

    return apply


def with_lock_retry_interval(seconds: float) -> Option:
    """Set the fixed wait between lock acquisition attempts."""

    def apply(options: LedgerOptions) -> LedgerOptions:
        return options.model_copy(update={"lock_retry_interval_seconds": seconds})

    return apply


def resolve_options(*options: Option, base: LedgerOptions | None = None) -> LedgerOptions:
    """
    Apply options in order over ``base`` (or the defaults).

    The result is re-validated so an option cannot smuggle in an empty
    table name or a non-positive interval.

    Raises:
        ConfigurationError: If the resolved options are invalid.
    """
    resolved = base or LedgerOptions()
    for option in options:
        resolved = option(resolved)
    try:
        return LedgerOptions.model_validate(resolved.model_dump())
    except ValidationError as e:
        raise ConfigurationError(f"Invalid ledger options: {e}") from e
