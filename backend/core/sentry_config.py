"""
Sentry SDK configuration with PII scrubbing.

Login identifiers in this service are phone numbers and email addresses,
so request bodies and user context are stripped before events leave the
process. Only the account ID survives for traceability.
"""

import os
import re
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.types import Event, Hint

# Bodies of these endpoints carry passwords, reset codes or identifiers
_SENSITIVE_PATHS = (
    "/api/auth/login",
    "/api/auth/set-password",
    "/api/auth/forgot-password",
    "/api/auth/reset-password",
)

_PHONE_PATTERN = re.compile(r"\+?\d{10,15}")


def _scrub_phone_numbers(value: str) -> str:
    """Replace anything that looks like a phone number."""
    return _PHONE_PATTERN.sub("[Filtered]", value)


def _before_send(event: Event, hint: Hint) -> Event | None:
    """
    Scrub PII before sending to Sentry.

    Args:
        event: Sentry event.
        hint: Additional context about the event.

    Returns:
        Modified event with PII removed.
    """
    user = event.get("user")
    if user:
        user.pop("email", None)
        user.pop("username", None)
        if "ip_address" in user:
            user["ip_address"] = "{{auto}}"  # Anonymized by Sentry

    request = event.get("request")
    if request and isinstance(request, dict):
        request.pop("cookies", None)
        headers = request.get("headers")
        if isinstance(headers, dict) and "Authorization" in headers:
            headers["Authorization"] = "[Filtered]"
        url = request.get("url")
        if isinstance(url, str):
            request["url"] = _scrub_phone_numbers(url)
            if url.endswith(_SENSITIVE_PATHS):
                request.pop("data", None)

    for breadcrumb in (event.get("breadcrumbs") or {}).get("values", []):
        message = breadcrumb.get("message")
        if isinstance(message, str):
            breadcrumb["message"] = _scrub_phone_numbers(message)

    return event


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    """
    Dynamic sampling based on endpoint.

    Args:
        sampling_context: Context about the request being sampled.

    Returns:
        Sample rate between 0.0 and 1.0.
    """
    if sampling_context.get("parent_sampled") is True:
        return 1.0

    asgi_scope = sampling_context.get("asgi_scope", {})
    path = asgi_scope.get("path", "")

    if path in ["/health", "/api/health"]:
        return 0.0

    # Merges are rare and worth tracing in full
    if path.startswith("/api/auth/merge-accounts"):
        return 1.0

    if path.startswith("/api/admin") or path.startswith("/api/auth"):
        return 0.5

    return 0.2


def init_sentry() -> None:
    """
    Initialize Sentry SDK with FastAPI integration.

    Call this BEFORE creating the FastAPI app instance.
    Sentry is disabled if SENTRY_DSN environment variable is not set.
    """
    dsn = os.getenv("SENTRY_DSN")

    if not dsn:
        return

    environment = os.getenv("ENVIRONMENT", "development")
    release = os.getenv("SENTRY_RELEASE", "unknown")

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        send_default_pii=False,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoguruIntegration(),
        ],
        traces_sampler=_traces_sampler,
        sample_rate=1.0,
        before_send=_before_send,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[
            KeyboardInterrupt,
            SystemExit,
        ],
    )
