"""migledger utility modules."""

from migledger.utils.logging import configure_logging
from migledger.utils.retry import poll_until_true

__all__ = [
    "configure_logging",
    "poll_until_true",
]
