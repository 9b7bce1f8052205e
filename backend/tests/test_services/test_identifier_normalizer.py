"""Tests for IdentifierNormalizer."""

import pytest

from services.identifier_normalizer import IdentifierNormalizer


@pytest.fixture
def normalizer() -> IdentifierNormalizer:
    return IdentifierNormalizer(country_code="91", national_length=10)


class TestNormalize:
    """Variant expansion for phone-like identifiers."""

    def test_international_form(self, normalizer) -> None:
        """+91 numbers expand to national and 91-prefixed forms."""
        assert normalizer.normalize("+919876543210") == [
            "+919876543210",
            "9876543210",
            "919876543210",
        ]

    def test_national_form(self, normalizer) -> None:
        """Bare 10-digit numbers gain both prefixed forms."""
        assert normalizer.normalize("9876543210") == [
            "9876543210",
            "+919876543210",
            "919876543210",
        ]

    def test_country_code_without_plus(self, normalizer) -> None:
        """12-character 91-prefixed numbers gain the + forms."""
        assert normalizer.normalize("919876543210") == [
            "919876543210",
            "+919876543210",
        ]

    def test_spaces_and_punctuation(self, normalizer) -> None:
        """Formatted numbers reduce to digits and the +91 form of the last 10."""
        variants = normalizer.normalize("+91 98765-43210")
        assert variants[0] == "+91 98765-43210"
        assert "919876543210" in variants
        assert "+919876543210" in variants

    def test_surrounding_whitespace_trimmed(self, normalizer) -> None:
        variants = normalizer.normalize("  9876543210 ")
        assert variants[0] == "9876543210"

    def test_original_always_first(self, normalizer) -> None:
        for identifier in ["+919876543210", "abc", "user@example.com", "12"]:
            assert normalizer.normalize(identifier)[0] == identifier

    def test_no_duplicates(self, normalizer) -> None:
        for identifier in ["+919876543210", "9876543210", "919876543210"]:
            variants = normalizer.normalize(identifier)
            assert len(variants) == len(set(variants))

    def test_small_closed_set(self, normalizer) -> None:
        for identifier in ["+91 (987) 654-3210", "0091 9876543210", "9876543210"]:
            assert len(normalizer.normalize(identifier)) <= 6

    def test_email_is_not_expanded(self, normalizer) -> None:
        """Identifiers without digits come back unchanged."""
        assert normalizer.normalize("captain@example.com") == ["captain@example.com"]

    def test_short_digits_not_prefixed(self, normalizer) -> None:
        """Fewer than 10 digits never produce a +91 variant."""
        assert normalizer.normalize("12345") == ["12345"]

    def test_other_country_code(self) -> None:
        normalizer = IdentifierNormalizer(country_code="44", national_length=10)
        assert normalizer.normalize("+447700900123") == [
            "+447700900123",
            "7700900123",
            "447700900123",
        ]

    def test_defaults_from_settings(self) -> None:
        normalizer = IdentifierNormalizer()
        assert normalizer.country_code == "91"
        assert normalizer.national_length == 10


class TestNormalizeEmail:
    def test_lowercases_and_trims(self) -> None:
        assert IdentifierNormalizer.normalize_email("  Capt.Singh@Example.COM ") == (
            "capt.singh@example.com"
        )
