"""Polling utilities.

Uses the backoff library to re-run an async attempt at a fixed
interval until it reports success.
"""

from collections.abc import Callable, Mapping
from typing import Any

import backoff
from loguru import logger


def on_poll(details: Mapping[str, Any]) -> None:
    """Log each unsuccessful attempt."""
    logger.debug(
        "Waiting on {}: attempt={} elapsed={:.1f}s next_in={}s",
        details["target"].__name__,
        details["tries"],
        details["elapsed"],
        details["wait"],
    )


def poll_until_true(interval: float) -> Callable[[Any], Any]:
    """
    Build a decorator that re-runs its target until it returns a truthy value.

    The wait between attempts is constant, there is no jitter and no cap
    on the number of attempts. Exceptions raised by the target are not
    retried and propagate immediately.

    Args:
        interval: Seconds to wait between attempts.
    """
    return backoff.on_predicate(
        backoff.constant,
        interval=interval,
        jitter=None,
        on_backoff=on_poll,
        logger=None,
    )
