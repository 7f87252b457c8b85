"""Record models persisted in the ledger and lock tables."""

from typing import Any

from pydantic import BaseModel, StrictBool, StrictStr, ValidationError

from migledger.errors import RecordDecodeError


class MigrationRecord(BaseModel):
    """
    One row of the migrations table.

    ``dirty`` is True while a migration has been started but not confirmed
    finished, and False once it has been applied cleanly.
    """

    id: StrictStr
    dirty: StrictBool

    model_config = {"extra": "ignore", "frozen": True}

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> "MigrationRecord":
        """
        Decode a raw store item.

        Unknown attributes are ignored. Missing or mistyped ``id``/``dirty``
        attributes raise RecordDecodeError.
        """
        try:
            return cls.model_validate(item)
        except ValidationError as e:
            raise RecordDecodeError(f"failed to decode migration record: {e}", item) from e

    def to_item(self) -> dict[str, Any]:
        """Encode as a raw store item."""
        return {"id": self.id, "dirty": self.dirty}


class LockRecord(BaseModel):
    """The single row of the lock table. Its presence means the lock is held."""

    id: StrictStr

    model_config = {"extra": "ignore", "frozen": True}

    def to_item(self) -> dict[str, Any]:
        """Encode as a raw store item."""
        return {"id": self.id}
