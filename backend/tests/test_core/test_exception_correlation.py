"""Tests for exception correlation IDs and their HTTP mapping."""

import pytest

from core.correlation import set_correlation_id
from models.exceptions import (
    AccountNotFoundException,
    DomainException,
    InvalidCredentialsException,
    InvalidMergeDecisionException,
    MergeFailedException,
    MergeSessionNotFoundException,
    PasswordValidationException,
    ResetCodeExpiredException,
    ResetCodeInvalidException,
    ResetNotEligibleException,
)

DOMAIN_EXCEPTIONS = [
    AccountNotFoundException,
    InvalidCredentialsException,
    PasswordValidationException,
    ResetNotEligibleException,
    ResetCodeExpiredException,
    ResetCodeInvalidException,
    MergeSessionNotFoundException,
    MergeFailedException,
]


class TestDomainExceptionCorrelationId:
    """Tests for correlation ID in DomainException."""

    def setup_method(self) -> None:
        set_correlation_id("")

    def test_uses_context_correlation_id(self) -> None:
        set_correlation_id("context1")
        assert DomainException("Test error").correlation_id == "context1"

    def test_generates_id_when_no_context(self) -> None:
        exc = DomainException("Test error")
        assert len(exc.correlation_id) == 8
        assert all(c in "0123456789abcdef" for c in exc.correlation_id)

    def test_explicit_overrides_context(self) -> None:
        set_correlation_id("context_id")
        exc = DomainException("Test error", correlation_id="override")
        assert exc.correlation_id == "override"

    def test_unique_ids_without_context(self) -> None:
        assert (
            DomainException("a").correlation_id != DomainException("b").correlation_id
        )


class TestDefaultMessages:
    def setup_method(self) -> None:
        set_correlation_id("")

    @pytest.mark.parametrize("exception_class", DOMAIN_EXCEPTIONS)
    def test_default_message(self, exception_class: type[DomainException]) -> None:
        exc = exception_class()
        assert exc.message
        assert str(exc) == exc.message

    @pytest.mark.parametrize("exception_class", DOMAIN_EXCEPTIONS)
    def test_uses_context_id(self, exception_class: type[DomainException]) -> None:
        set_correlation_id("inherited")
        assert exception_class().correlation_id == "inherited"

    def test_login_rejection_is_generic(self) -> None:
        assert InvalidCredentialsException().message == "Invalid credentials"

    def test_password_requirements_kept(self) -> None:
        exc = PasswordValidationException("too short", requirements=["min_length:6"])
        assert exc.requirements == ["min_length:6"]


class TestHttpMapping:
    """Error responses echo the request's correlation ID."""

    def test_not_found_carries_header_id(self, client) -> None:
        response = client.get(
            "/api/auth/merge-session/merge_unknown",
            headers={"X-Correlation-ID": "abcd1234"},
        )
        assert response.status_code == 404
        assert response.json() == {
            "detail": "Merge session not found or expired",
            "correlation_id": "abcd1234",
        }
        assert response.headers["X-Correlation-ID"] == "abcd1234"

    def test_invalid_decision_is_422(
        self, client, complete_account, bare_account
    ) -> None:
        session_id = client.post(
            "/api/auth/login",
            json={"identifier": "+919035283755", "password": "x"},
        ).json()["merge_session"]["session_id"]

        response = client.post(
            "/api/auth/merge-accounts",
            json={
                "session_id": session_id,
                "primary_account_id": complete_account.id,
                "duplicate_account_ids": [],
            },
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "At least one duplicate account is required"
