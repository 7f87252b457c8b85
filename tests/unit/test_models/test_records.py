"""Tests for ledger and lock record models."""

import pytest

from migledger.errors import RecordDecodeError
from migledger.models.records import LockRecord, MigrationRecord


class TestMigrationRecordDecode:
    """Tests for decoding raw store items."""

    def test_decodes_valid_item(self) -> None:
        record = MigrationRecord.from_item({"id": "0001", "dirty": False})
        assert record.id == "0001"
        assert record.dirty is False

    def test_ignores_unknown_attributes(self) -> None:
        record = MigrationRecord.from_item({"id": "0001", "dirty": True, "applied_by": "ci"})
        assert record == MigrationRecord(id="0001", dirty=True)

    def test_missing_dirty_is_decode_error(self) -> None:
        with pytest.raises(RecordDecodeError) as exc_info:
            MigrationRecord.from_item({"id": "0001"})
        assert exc_info.value.item == {"id": "0001"}

    def test_missing_id_is_decode_error(self) -> None:
        with pytest.raises(RecordDecodeError):
            MigrationRecord.from_item({"dirty": False})

    def test_non_boolean_dirty_is_decode_error(self) -> None:
        with pytest.raises(RecordDecodeError):
            MigrationRecord.from_item({"id": "0001", "dirty": "false"})

    def test_non_string_id_is_decode_error(self) -> None:
        with pytest.raises(RecordDecodeError):
            MigrationRecord.from_item({"id": 1, "dirty": False})


class TestRecordEncode:
    """Tests for encoding records as store items."""

    def test_migration_record_item(self) -> None:
        assert MigrationRecord(id="0002", dirty=True).to_item() == {"id": "0002", "dirty": True}

    def test_lock_record_item_has_only_id(self) -> None:
        assert LockRecord(id="migrations").to_item() == {"id": "migrations"}
