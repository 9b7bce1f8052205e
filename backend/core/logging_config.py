"""
Loguru sinks for the identity service.

Development and test runs log coloured lines to stderr; every other
environment logs JSON. Outside tests two rotating files are written:
`identity.log` with everything at INFO and above, and `merges.log` with only
the merge audit trail (records bound with `merge_audit=True`), which is kept
much longer.
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from core.correlation import get_correlation_id

if TYPE_CHECKING:
    from loguru import Record

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[correlation_id]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level> {extra}"
)

# Logger for merge decisions; also lands in merges.log
merge_audit_logger = logger.bind(merge_audit=True)


def correlation_filter(record: "Record") -> bool:
    """Stamp the request correlation ID ("-" outside a request) on a record."""
    record["extra"]["correlation_id"] = get_correlation_id() or "-"
    return True


def merge_audit_filter(record: "Record") -> bool:
    """Accept only merge audit records, stamping the correlation ID."""
    if not record["extra"].get("merge_audit"):
        return False
    return correlation_filter(record)


def configure_logging(environment: str = "development", log_dir: str = "logs") -> None:
    """
    Replace Loguru's default sink with the service's sinks.

    Args:
        environment: "development" or "test" log readable lines to stderr,
            anything else logs JSON.
        log_dir: Directory for the rotating files. Not used in "test".
    """
    logger.remove()
    readable = environment in ("development", "test")

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT if readable else "{message}",
        level="DEBUG" if readable else "INFO",
        filter=correlation_filter,
        colorize=readable,
        serialize=not readable,
    )

    if environment == "test":
        return

    logs_dir = Path(log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    logger.add(
        str(logs_dir / "identity.log"),
        level="INFO",
        filter=correlation_filter,
        rotation="10 MB",
        retention="7 days",
        serialize=True,
    )
    logger.add(
        str(logs_dir / "merges.log"),
        level="INFO",
        filter=merge_audit_filter,
        rotation="10 MB",
        retention="1 year",
        serialize=True,
    )
