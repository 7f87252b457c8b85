"""Tests for ledger options."""

import pytest
from pydantic import ValidationError

from migledger.config.options import (
    LedgerOptions,
    resolve_options,
    with_lock_id,
    with_lock_retry_interval,
    with_lock_table_name,
    with_table_name,
)
from migledger.errors import ConfigurationError


class TestLedgerOptionsDefaults:
    """Tests for default names."""

    def test_defaults(self) -> None:
        options = LedgerOptions()
        assert options.table_name == "_migrations"
        assert options.lock_table_name == "_migrations-lock"
        assert options.lock_id == "migrations"
        assert options.lock_retry_interval_seconds == 1.0

    def test_frozen(self) -> None:
        options = LedgerOptions()
        with pytest.raises(ValidationError):
            options.table_name = "other"  # type: ignore[misc]

    def test_empty_table_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LedgerOptions(table_name="")


class TestResolveOptions:
    """Tests for applying option functions."""

    def test_no_options_gives_defaults(self) -> None:
        assert resolve_options() == LedgerOptions()

    def test_each_option_sets_its_field(self) -> None:
        options = resolve_options(
            with_table_name("app_migrations"),
            with_lock_table_name("app_lock"),
            with_lock_id("app"),
            with_lock_retry_interval(0.5),
        )
        assert options.table_name == "app_migrations"
        assert options.lock_table_name == "app_lock"
        assert options.lock_id == "app"
        assert options.lock_retry_interval_seconds == 0.5

    def test_later_option_wins(self) -> None:
        options = resolve_options(with_table_name("first"), with_table_name("second"))
        assert options.table_name == "second"

    def test_options_apply_over_base(self) -> None:
        base = LedgerOptions(lock_id="from-config", table_name="cfg_table")
        options = resolve_options(with_lock_id("override"), base=base)
        assert options.lock_id == "override"
        assert options.table_name == "cfg_table"

    def test_option_functions_are_pure(self) -> None:
        original = LedgerOptions()
        changed = with_table_name("x")(original)
        assert original.table_name == "_migrations"
        assert changed.table_name == "x"

    def test_non_positive_interval_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError, match="lock_retry_interval_seconds"):
            resolve_options(with_lock_retry_interval(0))

    def test_empty_table_name_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError, match="table_name"):
            resolve_options(with_table_name(""))

    def test_invalid_option_over_valid_base(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_options(with_lock_id(""), base=LedgerOptions(table_name="cfg"))
        assert isinstance(exc_info.value.__cause__, ValidationError)
