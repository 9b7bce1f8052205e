"""
Masking for login identifiers in log lines.

Identifiers are phone numbers or email addresses, both PII.
"""

from typing import Optional


def mask_identifier(identifier: Optional[str]) -> str:
    """
    Mask a phone number or email for logging.

    Args:
        identifier: Raw identifier

    Returns:
        "jo***@example.com" for emails, "+9190***55" for numbers,
        "***" for anything too short to partially reveal
    """
    if not identifier:
        return "***"

    value = identifier.strip()
    if "@" in value:
        local, _, domain = value.partition("@")
        return f"{local[:2]}***@{domain}"

    if len(value) <= 6:
        return "***"
    return f"{value[:5]}***{value[-2:]}"
