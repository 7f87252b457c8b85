"""Logging setup for migledger runners and the CLI.

Everything is logged through loguru. Console output goes to stderr, keeping
stdout for command results. An optional file sink keeps a longer record of
lock waits and ledger transitions across runs.
"""

import logging
import sys

from loguru import logger

from migledger.config.models import LoggingConfig

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> <level>{level: <7}</level> <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {process} | {level: <8} | {name}:{line} - {message}"

# AWS SDK loggers that flood DEBUG with request and credential details
QUIET_LOGGERS = ("botocore", "boto3", "urllib3")


class _InterceptHandler(logging.Handler):
    """Forward stdlib log records (boto3, botocore, aiosqlite) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(config: LoggingConfig) -> None:
    """
    Replace loguru's sinks with the ones described by ``config``.

    The file sink records the process id so the lock activity of several
    runners sharing one log can be told apart. With ``format: json`` both
    sinks emit one serialized record per line.

    Args:
        config: Level, output format and optional log file.
    """
    logger.remove()
    serialize = config.format == "json"

    logger.add(
        sys.stderr,
        format="{message}" if serialize else CONSOLE_FORMAT,
        level=config.level,
        serialize=serialize,
        colorize=not serialize,
    )

    if config.file:
        logger.add(
            config.file,
            format="{message}" if serialize else FILE_FORMAT,
            level=config.level,
            serialize=serialize,
            rotation=config.rotation,
            retention=config.retention,
            compression="gz",
        )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging configured: level={} format={}", config.level, config.format)
