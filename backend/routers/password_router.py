"""Password setup and reset endpoints."""

from fastapi import APIRouter, Depends, Request

import models.schemas as schemas
from helpers.rate_limiter import (
    FORGOT_PASSWORD_LIMIT,
    RESET_PASSWORD_LIMIT,
    SET_PASSWORD_LIMIT,
    limiter,
)
from routers.identity_router import get_identity_service
from services.identity_service import IdentityService

router = APIRouter(prefix="/auth", tags=["password"])


@router.post("/set-password", response_model=schemas.MessageResponse)
@limiter.limit(SET_PASSWORD_LIMIT)
def set_password(
    request: Request,
    body: schemas.SetPasswordRequest,
    service: IdentityService = Depends(get_identity_service),
) -> schemas.MessageResponse:
    """
    Set a custom password (at least 6 characters, not the liberal token).

    Errors:
    - 404: Unknown account
    - 422: Password rejected
    """
    service.set_password(body.account_id, body.new_password)
    return schemas.MessageResponse(message="Password set successfully")


@router.post("/forgot-password", response_model=schemas.ForgotPasswordResponse)
@limiter.limit(FORGOT_PASSWORD_LIMIT)
def forgot_password(
    request: Request,
    body: schemas.ForgotPasswordRequest,
    service: IdentityService = Depends(get_identity_service),
) -> schemas.ForgotPasswordResponse:
    """
    Send a password reset code to the account's contact number.

    Rate limited to 5 per minute.

    Errors:
    - 400: Account has no password yet (log in to set one)
    - 404: Unknown account
    """
    result = service.request_password_reset(body.account_id)
    return schemas.ForgotPasswordResponse(
        message="Reset code sent",
        expires_in_seconds=result["expires_in_seconds"],
        reset_code=result["reset_code"],
    )


@router.post("/reset-password", response_model=schemas.MessageResponse)
@limiter.limit(RESET_PASSWORD_LIMIT)
def reset_password(
    request: Request,
    body: schemas.ResetPasswordRequest,
    service: IdentityService = Depends(get_identity_service),
) -> schemas.MessageResponse:
    """
    Set a new password using a reset code.

    Errors:
    - 400: Invalid code
    - 410: Code expired
    - 422: New password rejected
    """
    service.reset_password_with_code(
        body.account_id, body.reset_code, body.new_password
    )
    return schemas.MessageResponse(message="Password reset successfully")
