"""
Login identifier normalization.

Users type their phone number in whatever shape they remember it
("+919876543210", "919876543210", "9876543210", "98765 43210"), and the
account store holds whatever shape the number was registered with. The
normalizer expands one raw identifier into the small, closed set of
variants that the candidate lookups match against.
"""

import re
from typing import List, Optional

from models.config import settings

_NON_DIGITS = re.compile(r"\D")


class IdentifierNormalizer:
    """Expand a raw identifier into equivalent phone-number variants."""

    def __init__(
        self,
        country_code: Optional[str] = None,
        national_length: Optional[int] = None,
    ):
        """
        Args:
            country_code: Dialling code without "+" (defaults to settings)
            national_length: Digits in a national number (defaults to settings)
        """
        self.country_code = country_code or settings.PHONE_COUNTRY_CODE
        self.national_length = national_length or settings.PHONE_NATIONAL_LENGTH

    def normalize(self, identifier: str) -> List[str]:
        """
        Produce the variants of an identifier.

        The trimmed original is always the first element; variants follow
        in a fixed order with duplicates removed. Nothing is lossy: a value
        that is not a phone number (an email, a generated id) comes back
        as itself plus at most its digits-only form.

        Args:
            identifier: Raw login identifier

        Returns:
            Ordered, deduplicated list of variants
        """
        original = (identifier or "").strip()
        cc = self.country_code
        plus_cc = f"+{cc}"
        variants: List[str] = [original]

        if original.startswith(plus_cc):
            national = original[len(plus_cc) :]
            variants.append(national)
            variants.append(f"{cc}{national}")
        elif (
            original.startswith(cc)
            and len(original) == len(cc) + self.national_length
        ):
            variants.append(f"+{original}")
            variants.append(f"{plus_cc}{original[len(cc):]}")
        elif len(original) == self.national_length:
            variants.append(f"{plus_cc}{original}")
            variants.append(f"{cc}{original}")

        digits = _NON_DIGITS.sub("", original)
        if digits:
            variants.append(digits)
            if len(digits) >= self.national_length:
                variants.append(f"{plus_cc}{digits[-self.national_length:]}")

        return list(dict.fromkeys(variants))

    @staticmethod
    def normalize_email(value: str) -> str:
        """Canonical form of an email address: trimmed and lower-cased."""
        return (value or "").strip().lower()


# Module-level instance for callers that use configured defaults
identifier_normalizer = IdentifierNormalizer()
