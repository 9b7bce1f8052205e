"""
Liberal, self-bootstrapping password gate.

Accounts imported from older systems arrive without a password. The first
non-empty password presented for such an account becomes its password
(state NO_PASSWORD -> CUSTOM_PASSWORD_SET); from then on the comparison is
literal. Passwords are stored in plaintext: this gate decides who may log
in during migration, it is not a credential vault.

Reset codes are numeric, expire after a configurable window and, once
verified, grant exactly one password change.
"""

import hmac
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from helpers.masking import mask_identifier
from helpers.time_utils import ensure_utc, utc_now
from models.config import settings
from models.exceptions import (
    AccountNotFoundException,
    PasswordValidationException,
    ResetCodeExpiredException,
    ResetCodeInvalidException,
    ResetNotEligibleException,
)
from repositories.account_repository import AccountRepository
from repositories.password_record_repository import PasswordRecordRepository
from services.notification_service import NotificationService

# Compatibility shim for one migrated account whose historical password was
# never imported. Do not add entries.
LEGACY_OVERRIDE_ACCOUNT_ID = "+919439115367"
LEGACY_OVERRIDE_PASSWORD = "Orissa"


class PasswordState(str, Enum):
    NO_PASSWORD = "no_password"
    CUSTOM_PASSWORD_SET = "custom_password_set"


@dataclass
class PasswordCheck:
    """Outcome of one password validation."""

    is_valid: bool
    message: str
    requires_password_setup: bool = False
    bootstrapped: bool = False


@dataclass
class ResetCode:
    code: str
    expires_at: datetime
    expires_in_seconds: int


class PasswordGate:
    """State machine over an account's PasswordRecord."""

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = utc_now,
        notifier: type[NotificationService] = NotificationService,
    ):
        self.db = db
        self.clock = clock
        self.notifier = notifier
        self.accounts = AccountRepository(db)
        self.records = PasswordRecordRepository(db)

    def _load_account(self, account_id: str) -> db_models.Account:
        account = self.accounts.get_active_by_id(account_id)
        if account is None:
            raise AccountNotFoundException()
        return account

    def get_state(self, record: db_models.PasswordRecord) -> PasswordState:
        if record.has_custom_password and record.custom_password:
            return PasswordState.CUSTOM_PASSWORD_SET
        return PasswordState.NO_PASSWORD

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def validate(self, account: db_models.Account, password: str) -> PasswordCheck:
        """
        Check a login password, bootstrapping it on first use.

        Args:
            account: Live account being logged into
            password: Password as typed

        Returns:
            PasswordCheck; never raises for a wrong password
        """
        if (
            account.id == LEGACY_OVERRIDE_ACCOUNT_ID
            and password == LEGACY_OVERRIDE_PASSWORD
        ):
            logger.info(
                "Legacy password override used",
                account_id=mask_identifier(account.id),
            )
            return PasswordCheck(is_valid=True, message="Login successful")

        record = self.records.get_or_create(account)
        liberal = password == settings.LIBERAL_PASSWORD

        if self.get_state(record) == PasswordState.NO_PASSWORD:
            if not password:
                self.db.commit()
                return PasswordCheck(is_valid=False, message="Password required")

            self.records.store_password(record, account, password)
            record.liberal_login_count = (record.liberal_login_count or 0) + 1
            record.last_liberal_login = self.clock()
            self.db.commit()
            logger.info(
                "Password bootstrapped on first login",
                account_id=mask_identifier(account.id),
            )
            return PasswordCheck(
                is_valid=True,
                message=(
                    "First-time login successful. Please set your password."
                    if liberal
                    else "Login successful"
                ),
                requires_password_setup=liberal,
                bootstrapped=True,
            )

        matches = bool(password) and hmac.compare_digest(
            password.encode(), (record.custom_password or "").encode()
        )
        if not matches:
            return PasswordCheck(is_valid=False, message="Invalid credentials")
        return PasswordCheck(
            is_valid=True,
            message="Login successful",
            requires_password_setup=liberal,
        )

    # ------------------------------------------------------------------
    # Setting passwords
    # ------------------------------------------------------------------

    @staticmethod
    def validate_new_password(password: str) -> None:
        """
        Raises:
            PasswordValidationException: Too short or the reserved liberal token
        """
        min_length = settings.PASSWORD_MIN_LENGTH
        if not password or len(password) < min_length:
            raise PasswordValidationException(
                f"Password must be at least {min_length} characters long",
                requirements=[f"min_length:{min_length}"],
            )
        if password == settings.LIBERAL_PASSWORD:
            raise PasswordValidationException(
                "Cannot use the liberal login password as your custom password",
                requirements=["not_reserved"],
            )

    def set_custom_password(self, account_id: str, new_password: str) -> None:
        """
        Set a custom password, whatever the current state.

        Raises:
            PasswordValidationException: Password rejected
            AccountNotFoundException: Unknown or archived account
        """
        self.validate_new_password(new_password)
        account = self._load_account(account_id)
        record = self.records.get_or_create(account)
        self.records.store_password(record, account, new_password)
        self.db.commit()
        logger.info("Custom password set", account_id=mask_identifier(account_id))

    # ------------------------------------------------------------------
    # Reset codes
    # ------------------------------------------------------------------

    def generate_reset(self, account_id: str) -> ResetCode:
        """
        Issue a reset code, replacing any pending one, and hand it to the
        notifier.

        Raises:
            AccountNotFoundException: Unknown or archived account
            ResetNotEligibleException: No password has been set yet
        """
        account = self._load_account(account_id)
        record = self.records.get_or_create(account)
        if self.get_state(record) == PasswordState.NO_PASSWORD:
            self.db.commit()
            raise ResetNotEligibleException()

        expiry = timedelta(minutes=settings.RESET_CODE_EXPIRY_MINUTES)
        code = self.records.generate_code()
        expires_at = self.clock() + expiry
        self.records.set_reset_code(record, code, expires_at)
        self.db.commit()

        expires_in_seconds = int(expiry.total_seconds())
        logger.info("Reset code issued", account_id=mask_identifier(account_id))
        self.notifier.send_reset_code(
            account_id=account.id,
            recipient=account.whatsapp_number,
            code=code,
            expires_in_seconds=expires_in_seconds,
        )
        return ResetCode(
            code=code, expires_at=expires_at, expires_in_seconds=expires_in_seconds
        )

    def verify_reset(self, account_id: str, code: str) -> None:
        """
        Check a reset code. On success the code is consumed and a single-use
        password-change grant is recorded.

        Raises:
            AccountNotFoundException: Unknown or archived account
            ResetCodeExpiredException: Past expiry (the code is cleared)
            ResetCodeInvalidException: Mismatch, or no code pending
        """
        account = self._load_account(account_id)
        record = self.records.get_by_id(account.id)
        if record is None or not record.reset_code:
            raise ResetCodeInvalidException()

        expires_at = ensure_utc(record.reset_code_expires_at)
        if expires_at is None or self.clock() > expires_at:
            self.records.clear_reset_code(record)
            self.db.commit()
            raise ResetCodeExpiredException()

        if not hmac.compare_digest(code.encode(), record.reset_code.encode()):
            raise ResetCodeInvalidException()

        self.records.clear_reset_code(record)
        record.reset_verified_at = self.clock()
        self.db.commit()

    def complete_reset(self, account_id: str, new_password: str) -> None:
        """
        Set a new password using the grant left by `verify_reset`.

        Raises:
            PasswordValidationException: Password rejected
            ResetCodeInvalidException: No unused grant
        """
        self.validate_new_password(new_password)
        account = self._load_account(account_id)
        record = self.records.get_by_id(account.id)
        if record is None or record.reset_verified_at is None:
            raise ResetCodeInvalidException()

        self.records.store_password(record, account, new_password)
        record.reset_verified_at = None
        self.db.commit()
        logger.info("Password reset completed", account_id=mask_identifier(account_id))

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def _status_row(self, record: db_models.PasswordRecord) -> dict[str, object]:
        return {
            "account_id": record.account_id,
            "has_custom_password": record.has_custom_password,
            "liberal_login_count": record.liberal_login_count,
            "can_use_liberal_login": self.get_state(record)
            == PasswordState.NO_PASSWORD,
        }

    def get_status(self, account_id: str) -> dict[str, object]:
        account = self._load_account(account_id)
        record = self.records.get_or_create(account)
        self.db.commit()
        return self._status_row(record)

    def list_records(
        self, skip: int = 0, limit: int = 100
    ) -> tuple[list[dict[str, object]], int]:
        """
        Page through every password record, without passwords or reset codes.

        Returns:
            (status rows ordered by account id, total record count)
        """
        records = self.records.list_page(skip=skip, limit=limit)
        return [self._status_row(r) for r in records], self.records.count()

    def admin_reset(self, account_id: str) -> bool:
        """
        Drop an account's password record and mirrored password, returning it
        to NO_PASSWORD.

        Returns:
            True if a record existed
        """
        account = self._load_account(account_id)
        existed = self.records.delete_for_account(account.id)
        account.password = None
        self.db.commit()
        logger.info(
            "Password record reset by admin", account_id=mask_identifier(account_id)
        )
        return existed

