"""Login and account merge endpoints."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

import models.schemas as schemas
from helpers.rate_limiter import LOGIN_LIMIT, MERGE_LIMIT, limiter
from models.exceptions import InvalidCredentialsException
from repositories.database import get_db
from services.identity_service import (
    Authenticated,
    IdentityService,
    MergeRequired,
)
from services.merge_session_store import MergeSessionStore, get_merge_session_store

router = APIRouter(prefix="/auth", tags=["auth"])


def get_identity_service(
    db: Session = Depends(get_db),
    sessions: MergeSessionStore = Depends(get_merge_session_store),
) -> IdentityService:
    return IdentityService(db, sessions)


def _authenticated_response(result: Authenticated) -> schemas.LoginResponse:
    return schemas.LoginResponse(
        success=True,
        message=result.message,
        access_token=result.access_token,
        user=result.account,
        requires_password_setup=result.requires_password_setup,
    )


@router.post("/login", response_model=schemas.LoginResponse)
@limiter.limit(LOGIN_LIMIT)
def login(
    request: Request,
    body: schemas.LoginRequest,
    service: IdentityService = Depends(get_identity_service),
) -> schemas.LoginResponse:
    """
    Log in with a phone number, email or account id.

    When the identifier matches several accounts no token is issued; the
    response carries a merge session listing the candidates instead.

    Errors:
    - 401: No matching account or wrong password
    - 429: Rate limit exceeded
    """
    result = service.authenticate(body.identifier, body.password)

    if isinstance(result, MergeRequired):
        view = service.get_merge_session(result.session_id)
        return schemas.LoginResponse(
            success=False,
            message=result.message,
            requires_merge=True,
            merge_session=schemas.MergeSessionResponse(
                session_id=view.session_id,
                candidates=view.candidates,
                suggested_primary_id=view.suggested_primary_id,
                created_at=view.created_at,
                expires_at=view.expires_at,
            ),
        )
    if isinstance(result, Authenticated):
        return _authenticated_response(result)

    raise InvalidCredentialsException()


@router.get("/merge-session/{session_id}", response_model=schemas.MergeSessionResponse)
def get_merge_session(
    session_id: str,
    service: IdentityService = Depends(get_identity_service),
) -> schemas.MergeSessionResponse:
    """Candidates of a pending merge session, with recommendations."""
    view = service.get_merge_session(session_id)
    return schemas.MergeSessionResponse(
        session_id=view.session_id,
        candidates=view.candidates,
        suggested_primary_id=view.suggested_primary_id,
        created_at=view.created_at,
        expires_at=view.expires_at,
    )


@router.post("/merge-accounts", response_model=schemas.LoginResponse)
@limiter.limit(MERGE_LIMIT)
def merge_accounts(
    request: Request,
    body: schemas.MergeAccountsRequest,
    service: IdentityService = Depends(get_identity_service),
) -> schemas.LoginResponse:
    """
    Merge duplicates into the chosen primary account and log in as it.

    Errors:
    - 404: Session unknown or expired, or primary account gone
    - 422: Account ids not part of the session
    - 500: Merge transaction rolled back
    """
    result = service.merge_accounts(
        session_id=body.session_id,
        primary_account_id=body.primary_account_id,
        duplicate_account_ids=body.duplicate_account_ids,
        strategy=body.strategy,
    )
    return _authenticated_response(result)


@router.post("/skip-merge", response_model=schemas.LoginResponse)
@limiter.limit(MERGE_LIMIT)
def skip_merge(
    request: Request,
    body: schemas.SkipMergeRequest,
    service: IdentityService = Depends(get_identity_service),
) -> schemas.LoginResponse:
    """Log in as one of the session's accounts without merging."""
    result = service.skip_merge(body.session_id, body.selected_account_id)
    return _authenticated_response(result)
