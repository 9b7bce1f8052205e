"""
Request correlation IDs.

Each login, merge or reset request carries a short ID, taken from the
`X-Correlation-ID` request header or generated. It is stamped on every log
line and returned in error bodies so a support report can be traced to the
exact merge that produced it.
"""

import uuid
from contextvars import ContextVar

CORRELATION_HEADER = "X-Correlation-ID"

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """8 lowercase hex characters, short enough to read out over the phone."""
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> str:
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    correlation_id_var.set(correlation_id)
