"""
Custom domain exceptions for the identity engine.

These exceptions are raised by the service layer and converted to HTTP
responses by centralized exception handlers in main.py, so services stay
HTTP-agnostic and can be reused from scripts and background jobs.

Every exception carries a correlation ID for Sentry and user error reports.
"""

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: Unique ID for error tracking (auto-generated if not provided).
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        # Use request correlation ID if available, otherwise generate new one
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    pass


class PermissionDeniedException(DomainException):
    """Raised when the caller lacks required permissions."""

    pass


class ValidationException(DomainException):
    """Raised when input validation fails."""

    pass


class AuthenticationException(DomainException):
    """Raised when authentication fails."""

    pass


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    pass


# ============================================================================
# Account & Authentication Exceptions
# ============================================================================


class AccountNotFoundException(NotFoundException):
    """Account not found (or archived)."""

    def __init__(self, message: str = "Account not found"):
        super().__init__(message)


class InvalidCredentialsException(AuthenticationException):
    """
    Login rejected.

    The message is deliberately generic: it never reveals whether the
    identifier or the password caused the mismatch.
    """

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class InsufficientPermissionsException(PermissionDeniedException):
    """Caller is not a platform admin."""

    def __init__(self, message: str = "Admin privileges required"):
        super().__init__(message)


# ============================================================================
# Password Gate Exceptions
# ============================================================================


class PasswordValidationException(ValidationException):
    """Raised when a new password does not meet requirements."""

    def __init__(
        self,
        message: str = "Password does not meet requirements.",
        requirements: list[str] | None = None,
    ):
        super().__init__(message)
        self.requirements = requirements or []


class ResetNotEligibleException(BusinessRuleException):
    """Raised when a reset is requested for an account without a password."""

    def __init__(
        self,
        message: str = "No password has been set for this account yet. Log in to set one.",
    ):
        super().__init__(message)


class ResetCodeExpiredException(DomainException):
    """Raised when the reset code has expired."""

    def __init__(
        self, message: str = "Reset code has expired. Please request a new one."
    ):
        super().__init__(message)


class ResetCodeInvalidException(DomainException):
    """Raised when the reset code does not match."""

    def __init__(
        self, message: str = "Invalid reset code. Please check and try again."
    ):
        super().__init__(message)


# ============================================================================
# Merge Exceptions
# ============================================================================


class MergeSessionNotFoundException(NotFoundException):
    """Raised when a merge session is unknown or has expired."""

    def __init__(self, message: str = "Merge session not found or expired"):
        super().__init__(message)


class InvalidMergeDecisionException(ValidationException):
    """Raised when a merge or skip decision references accounts outside the session."""

    pass


class MergeFailedException(DomainException):
    """
    Raised when the merge transaction fails.

    The transaction has been rolled back in full; callers must restart the
    merge flow rather than assume partial progress.
    """

    def __init__(self, message: str = "Account merge failed"):
        super().__init__(message)
