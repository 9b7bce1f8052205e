"""Tests for identifier masking in logs."""

import pytest

from helpers.masking import mask_identifier


class TestMaskIdentifier:
    def test_phone_number(self):
        assert mask_identifier("+919035283755") == "+9190***55"

    def test_national_number(self):
        assert mask_identifier("9035283755") == "90352***55"

    def test_email(self):
        assert mask_identifier("rahul@example.com") == "ra***@example.com"

    def test_short_email_local_part(self):
        assert mask_identifier("r@example.com") == "r***@example.com"

    @pytest.mark.parametrize("value", ["", None, "12345", "abcdef"])
    def test_too_short_or_empty(self, value):
        assert mask_identifier(value) == "***"

    def test_strips_whitespace(self):
        assert mask_identifier("  rahul@example.com ") == "ra***@example.com"

    def test_never_contains_full_number(self):
        assert "9035283755" not in mask_identifier("+919035283755")
