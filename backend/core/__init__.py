"""Correlation IDs, Loguru sinks and Sentry setup shared by the whole app."""

from core.correlation import (
    CORRELATION_HEADER,
    correlation_id_var,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from core.logging_config import configure_logging, merge_audit_logger
from core.sentry_config import init_sentry

__all__ = [
    "CORRELATION_HEADER",
    "configure_logging",
    "correlation_id_var",
    "generate_correlation_id",
    "get_correlation_id",
    "init_sentry",
    "merge_audit_logger",
    "set_correlation_id",
]
