from enum import Enum

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from datetime import datetime
from typing import Optional, List


class MergeStrategy(str, Enum):
    """How a duplicate account's data is folded into the primary."""

    KEEP_PRIMARY = "keep_primary"
    MERGE_DATA = "merge_data"
    # Reserved; currently behaves like keep_primary
    MANUAL_REVIEW = "manual_review"


class AccountSource(str, Enum):
    """Subsystem an account most likely originated from."""

    QAAQ_MAIN = "qaaq_main"
    LOCAL_APP = "local_app"
    WHATSAPP_BOT = "whatsapp_bot"


# Account Schemas
class AccountPublic(BaseModel):
    """Account as returned to clients (never includes the password)."""

    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    whatsapp_number: Optional[str] = None
    maritime_rank: Optional[str] = None
    current_ship_name: Optional[str] = None
    current_city: Optional[str] = None
    current_country: Optional[str] = None
    question_count: int = 0
    answer_count: int = 0
    login_count: int = 0
    last_login: Optional[datetime] = None
    whatsapp_profile_picture_url: Optional[str] = None
    whatsapp_display_name: Optional[str] = None
    is_platform_admin: bool = False
    # "sailor" when a current ship is on file, otherwise "local"
    user_type: str = "local"

    model_config = ConfigDict(from_attributes=True)

    @field_validator("question_count", "answer_count", "login_count", mode="before")
    @classmethod
    def none_as_zero(cls, v: Optional[int]) -> int:
        return v or 0

    @field_validator("is_platform_admin", mode="before")
    @classmethod
    def none_as_false(cls, v: Optional[bool]) -> bool:
        return bool(v)

    @model_validator(mode="after")
    def derive_user_type(self) -> "AccountPublic":
        self.user_type = "sailor" if self.current_ship_name else "local"
        return self


class CandidateAccount(AccountPublic):
    """An account that may belong to the person logging in, with its score."""

    current_latitude: Optional[str] = None
    current_longitude: Optional[str] = None
    completeness: int = Field(..., ge=0, le=100)
    source: AccountSource


class CandidateWithRecommendation(CandidateAccount):
    recommendation: str


# Login Schemas
class LoginRequest(BaseModel):
    identifier: str = Field(..., min_length=1, max_length=320)
    password: str = Field(default="", max_length=255)


class MergeSessionResponse(BaseModel):
    session_id: str
    candidates: List[CandidateWithRecommendation]
    suggested_primary_id: Optional[str] = None
    created_at: datetime
    expires_at: datetime


class LoginResponse(BaseModel):
    """
    Outcome of a login attempt.

    Exactly one of (access_token + user) or (requires_merge + merge_session)
    is populated.
    """

    success: bool
    message: str
    access_token: Optional[str] = None
    token_type: str = "bearer"
    user: Optional[AccountPublic] = None
    requires_password_setup: bool = False
    requires_merge: bool = False
    merge_session: Optional[MergeSessionResponse] = None


# Merge Schemas
class MergeAccountsRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    primary_account_id: str = Field(..., min_length=1)
    duplicate_account_ids: List[str]
    strategy: MergeStrategy = MergeStrategy.MERGE_DATA


class SkipMergeRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    selected_account_id: str = Field(..., min_length=1)


# Password Schemas
class SetPasswordRequest(BaseModel):
    account_id: str = Field(..., min_length=1)
    new_password: str = Field(..., max_length=255)


class ForgotPasswordRequest(BaseModel):
    account_id: str = Field(..., min_length=1)


class ForgotPasswordResponse(BaseModel):
    message: str
    expires_in_seconds: int
    # Only populated when EXPOSE_RESET_CODE is enabled (development)
    reset_code: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    account_id: str = Field(..., min_length=1)
    reset_code: str = Field(..., min_length=1, max_length=12)
    new_password: str = Field(..., max_length=255)


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class PasswordStatus(BaseModel):
    account_id: str
    has_custom_password: bool
    liberal_login_count: int
    can_use_liberal_login: bool


class PasswordRecordListResponse(BaseModel):
    items: List[PasswordStatus]
    total: int
    skip: int
    limit: int
    has_more: bool
