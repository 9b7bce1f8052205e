"""Admin endpoints for password records."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from authentication.auth import get_current_admin_account
from repositories.database import get_db
from services.password_gate import PasswordGate

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/password-records", response_model=schemas.PasswordRecordListResponse)
def list_password_records(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(50, ge=1, le=200, description="Max items to return"),
    db: Session = Depends(get_db),
    current_admin: db_models.Account = Depends(get_current_admin_account),
) -> schemas.PasswordRecordListResponse:
    """Password bootstrap state of every account that has a record."""
    rows, total = PasswordGate(db).list_records(skip=skip, limit=limit)
    return schemas.PasswordRecordListResponse(
        items=[schemas.PasswordStatus(**row) for row in rows],
        total=total,
        skip=skip,
        limit=limit,
        has_more=(skip + len(rows)) < total,
    )


@router.get("/password-status/{account_id}", response_model=schemas.PasswordStatus)
def get_password_status(
    account_id: str,
    db: Session = Depends(get_db),
    current_admin: db_models.Account = Depends(get_current_admin_account),
) -> schemas.PasswordStatus:
    """Password bootstrap state of an account."""
    return schemas.PasswordStatus(**PasswordGate(db).get_status(account_id))


@router.delete("/password-records/{account_id}", response_model=schemas.MessageResponse)
def reset_password_record(
    account_id: str,
    db: Session = Depends(get_db),
    current_admin: db_models.Account = Depends(get_current_admin_account),
) -> schemas.MessageResponse:
    """Return an account to the no-password state."""
    existed = PasswordGate(db).admin_reset(account_id)
    message = (
        "Password record reset" if existed else "No password record; account cleared"
    )
    return schemas.MessageResponse(message=message)
