"""
Identity resolution entry points.

Ties the pieces together for each client-facing operation: a login attempt
finds and ranks candidate accounts, then either authenticates (exactly one
candidate), opens a merge session (several) or rejects (none). Merge and
skip decisions close the session they came from.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Union

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
from authentication.auth import issue_account_token
from helpers.masking import mask_identifier
from models.config import settings
from models.exceptions import (
    AccountNotFoundException,
    InvalidMergeDecisionException,
    MergeSessionNotFoundException,
)
from repositories.account_repository import AccountRepository
from services.candidate_finder import CandidateFinder
from services.completeness_scorer import CompletenessScorer
from services.merge_orchestrator import MergeOrchestrator
from services.merge_session_store import MergeSession, MergeSessionStore
from services.password_gate import PasswordGate


@dataclass
class Authenticated:
    account: schemas.AccountPublic
    access_token: str
    message: str = "Login successful"
    requires_password_setup: bool = False


@dataclass
class MergeRequired:
    session_id: str
    candidates: List[schemas.CandidateAccount]
    created_at: datetime
    expires_at: datetime
    message: str = "Multiple accounts found for this identifier"


@dataclass
class Rejected:
    reason: str = "Invalid credentials"


LoginOutcome = Union[Authenticated, MergeRequired, Rejected]


@dataclass
class MergeSessionView:
    session_id: str
    candidates: List[schemas.CandidateWithRecommendation]
    suggested_primary_id: Optional[str]
    created_at: datetime
    expires_at: datetime


class IdentityService:
    """Login, merge and password flows for one database session."""

    def __init__(self, db: Session, sessions: MergeSessionStore):
        self.db = db
        self.sessions = sessions
        self.accounts = AccountRepository(db)
        self.finder = CandidateFinder(db)
        self.gate = PasswordGate(db)
        self.orchestrator = MergeOrchestrator(db)

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def authenticate(self, identifier: str, password: str) -> LoginOutcome:
        """
        Resolve an identifier to an account and check the password.

        Several matching accounts never authenticate: the caller gets a
        merge session instead, whatever the password.

        Args:
            identifier: Phone number, email or account id as typed
            password: Password as typed

        Returns:
            Authenticated, MergeRequired or Rejected
        """
        ident = (identifier or "").strip()
        masked = mask_identifier(ident)
        if not ident:
            return Rejected()

        found = self.finder.find(ident)
        candidates = CompletenessScorer.rank(found.rows)

        if not candidates:
            logger.info("Login rejected: no matching account", identifier=masked)
            return Rejected()

        if len(candidates) > 1:
            session = self.sessions.create(
                self.sessions.new_session_id(), candidates, ident
            )
            logger.info(
                "Login needs merge decision",
                identifier=masked,
                candidates=len(candidates),
                session_id=session.id,
            )
            return MergeRequired(
                session_id=session.id,
                candidates=session.candidates,
                created_at=session.created_at,
                expires_at=session.expires_at,
            )

        account = self.accounts.get_active_by_id(candidates[0].id)
        if account is None:
            return Rejected()

        check = self.gate.validate(account, password)
        if not check.is_valid:
            logger.info("Login rejected: password mismatch", identifier=masked)
            return Rejected()

        self.accounts.record_login(account)
        logger.info("Login successful", identifier=masked)
        return Authenticated(
            account=schemas.AccountPublic.model_validate(account),
            access_token=issue_account_token(account.id),
            message=check.message,
            requires_password_setup=check.requires_password_setup,
        )

    # ------------------------------------------------------------------
    # Merge sessions
    # ------------------------------------------------------------------

    def _require_session(self, session_id: str) -> MergeSession:
        session = self.sessions.get(session_id)
        if session is None:
            raise MergeSessionNotFoundException()
        return session

    def get_merge_session(self, session_id: str) -> MergeSessionView:
        """
        Raises:
            MergeSessionNotFoundException: Unknown or expired session
        """
        session = self._require_session(session_id)
        return MergeSessionView(
            session_id=session.id,
            candidates=CompletenessScorer.with_recommendations(session.candidates),
            suggested_primary_id=CompletenessScorer.suggest_primary(session.candidates),
            created_at=session.created_at,
            expires_at=session.expires_at,
        )

    def merge_accounts(
        self,
        session_id: str,
        primary_account_id: str,
        duplicate_account_ids: List[str],
        strategy: schemas.MergeStrategy = schemas.MergeStrategy.MERGE_DATA,
    ) -> Authenticated:
        """
        Execute a merge decision taken on a session's candidates.

        The session is deleted only once the merge has committed, so a failed
        merge can be retried from the same session.

        Raises:
            MergeSessionNotFoundException: Unknown or expired session
            InvalidMergeDecisionException: Ids outside the session, no
                duplicates, or the primary listed as a duplicate
            AccountNotFoundException: Primary no longer exists
            MergeFailedException: Transaction rolled back
        """
        session = self._require_session(session_id)

        if primary_account_id not in session.account_ids:
            raise InvalidMergeDecisionException("Invalid primary account ID")
        if not duplicate_account_ids:
            raise InvalidMergeDecisionException(
                "At least one duplicate account is required"
            )
        for duplicate_id in duplicate_account_ids:
            if duplicate_id == primary_account_id:
                raise InvalidMergeDecisionException(
                    "Primary account cannot also be a duplicate"
                )
            if duplicate_id not in session.account_ids:
                raise InvalidMergeDecisionException(
                    f"Invalid duplicate account ID: {duplicate_id}"
                )

        outcome = self.orchestrator.merge(
            primary_account_id, duplicate_account_ids, strategy
        )
        self.sessions.delete(session_id)
        return Authenticated(
            account=outcome.account,
            access_token=outcome.access_token,
            message="Accounts merged successfully",
        )

    def skip_merge(self, session_id: str, selected_account_id: str) -> Authenticated:
        """
        Log in as one of the session's accounts without merging.

        Raises:
            MergeSessionNotFoundException: Unknown or expired session
            InvalidMergeDecisionException: Account not part of the session
            AccountNotFoundException: Account archived since the session opened
        """
        session = self._require_session(session_id)
        if selected_account_id not in session.account_ids:
            raise InvalidMergeDecisionException("Invalid account selection")

        account = self.accounts.get_active_by_id(selected_account_id)
        if account is None:
            raise AccountNotFoundException()

        self.accounts.record_login(account)
        self.sessions.delete(session_id)
        return Authenticated(
            account=schemas.AccountPublic.model_validate(account),
            access_token=issue_account_token(account.id),
            message="Login successful with selected account",
        )

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    def set_password(self, account_id: str, new_password: str) -> None:
        self.gate.set_custom_password(account_id, new_password)

    def request_password_reset(self, account_id: str) -> dict[str, object]:
        """
        Issue a reset code for an account.

        Returns:
            {"reset_code", "expires_in_seconds"}; reset_code is None unless
            EXPOSE_RESET_CODE is enabled

        Raises:
            AccountNotFoundException: Unknown account
            ResetNotEligibleException: No password set yet
        """
        reset = self.gate.generate_reset(account_id)
        return {
            "reset_code": reset.code if settings.EXPOSE_RESET_CODE else None,
            "expires_in_seconds": reset.expires_in_seconds,
        }

    def reset_password_with_code(
        self, account_id: str, code: str, new_password: str
    ) -> None:
        """
        Verify a reset code and set the new password.

        The new password is checked first so a rejected password does not
        burn the code.

        Raises:
            PasswordValidationException: New password rejected
            ResetCodeExpiredException: Code past expiry
            ResetCodeInvalidException: Wrong or no pending code
        """
        self.gate.validate_new_password(new_password)
        self.gate.verify_reset(account_id, code)
        self.gate.complete_reset(account_id, new_password)
