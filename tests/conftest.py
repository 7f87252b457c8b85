"""Shared pytest fixtures for migledger tests."""

import io
import logging
import sys
from collections.abc import AsyncIterator, Generator
from pathlib import Path

import pytest
from loguru import logger

from migledger.config.options import LedgerOptions
from migledger.storage.sqlite_store import SQLiteStore
from migledger.target import MigrationTarget


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path."""
    return tmp_path / "ledger.db"


@pytest.fixture
def options() -> LedgerOptions:
    """Default names with a short lock poll interval."""
    return LedgerOptions(lock_retry_interval_seconds=0.01)


@pytest.fixture
async def store(db_path: Path) -> AsyncIterator[SQLiteStore]:
    """Provide an initialized SQLite store."""
    s = SQLiteStore(db_path, busy_timeout_seconds=5.0)
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
async def target(store: SQLiteStore, options: LedgerOptions) -> MigrationTarget:
    """Provide a provisioned migration target."""
    t = MigrationTarget(store, base=options)
    await t.provision()
    return t


@pytest.fixture
def log_capture() -> Generator[io.StringIO, None, None]:
    """Capture loguru output to a string buffer."""
    string_io = io.StringIO()
    handler_id = logger.add(string_io, format="{level} {message}")
    yield string_io
    logger.remove(handler_id)


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """Put loguru and stdlib logging back after a test reconfigures them."""
    yield
    logger.remove()
    logger.add(sys.stderr)
    logging.basicConfig(handlers=[], force=True)
