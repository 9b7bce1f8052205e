from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    InsufficientPermissionsException,
)
from repositories.account_repository import AccountRepository
from repositories.database import get_db

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=15)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM
    )
    return encoded_jwt


def issue_account_token(account_id: str) -> str:
    """Session token for an authenticated account (subject = account id)."""
    return create_access_token(
        data={"sub": account_id},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def decode_access_token(token: str) -> str:
    """
    Return the account id a token was issued for.

    Raises:
        AuthenticationException: Token is malformed, expired or has no subject.
    """
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except jwt.exceptions.InvalidTokenError:
        raise AuthenticationException("Could not validate credentials")

    subject = payload.get("sub")
    if subject is None:
        raise AuthenticationException("Could not validate credentials")
    return str(subject)


async def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> db_models.Account:
    """
    Get the live account named by the bearer token.

    Raises:
        AuthenticationException: Missing or invalid token, or the account
            has since been archived.
    """
    if credentials is None:
        raise AuthenticationException("Not authenticated")

    account_id = decode_access_token(credentials.credentials)
    account = AccountRepository(db).get_active_by_id(account_id)
    if account is None:
        raise AuthenticationException("Could not validate credentials")
    return account


async def get_current_admin_account(
    current_account: db_models.Account = Depends(get_current_account),
) -> db_models.Account:
    """
    Raises:
        InsufficientPermissionsException: Account is not a platform admin.
    """
    if not current_account.is_platform_admin:
        raise InsufficientPermissionsException()
    return current_account
