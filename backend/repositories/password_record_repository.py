"""
Repository for per-account password bootstrap records.
"""

import secrets
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from models.config import settings
from repositories.base import BaseRepository
from repositories.db_models import Account, PasswordRecord


class PasswordRecordRepository(BaseRepository[PasswordRecord]):
    """Repository for PasswordRecord rows, keyed by account id."""

    def __init__(self, db: Session):
        """Initialize the repository."""
        super().__init__(PasswordRecord, db)

    @staticmethod
    def generate_code() -> str:
        """Generate a random numeric code of configured length."""
        max_value = 10**settings.RESET_CODE_LENGTH
        code_int = secrets.randbelow(max_value)
        return str(code_int).zfill(settings.RESET_CODE_LENGTH)

    def get_or_create(self, account: Account) -> PasswordRecord:
        """
        Return the account's record, creating it lazily.

        A legacy account that already carries a password in the accounts
        table starts out with that password set.

        Args:
            account: Account the record belongs to

        Returns:
            Existing or newly added (uncommitted) record
        """
        record = self.get_by_id(account.id)
        if record is not None:
            return record

        now = datetime.now(timezone.utc)
        record = PasswordRecord(
            account_id=account.id,
            has_custom_password=bool(account.password),
            custom_password=account.password or None,
            liberal_login_count=0,
            created_at=now,
            updated_at=now,
        )
        self.add(record)
        self.flush()
        return record

    def store_password(
        self, record: PasswordRecord, account: Account, password: str
    ) -> None:
        """
        Store a password on the record and mirror it onto the account row.

        Does not commit.
        """
        record.custom_password = password
        record.has_custom_password = True
        record.updated_at = datetime.now(timezone.utc)
        account.password = password

    def set_reset_code(
        self, record: PasswordRecord, code: str, expires_at: datetime
    ) -> None:
        """Replace any pending reset code. Does not commit."""
        record.reset_code = code
        record.reset_code_expires_at = expires_at
        record.reset_verified_at = None
        record.updated_at = datetime.now(timezone.utc)

    def clear_reset_code(self, record: PasswordRecord) -> None:
        """Drop the pending reset code. Does not commit."""
        record.reset_code = None
        record.reset_code_expires_at = None
        record.updated_at = datetime.now(timezone.utc)

    def delete_for_account(self, account_id: str) -> bool:
        """
        Delete an account's record (admin reset). Does not commit.

        Returns:
            True if a record existed
        """
        record: Optional[PasswordRecord] = self.get_by_id(account_id)
        if record is None:
            return False
        self.delete(record)
        return True

    def list_page(self, skip: int = 0, limit: int = 100) -> List[PasswordRecord]:
        """Records ordered by account id."""
        return (
            self.db.query(PasswordRecord)
            .order_by(PasswordRecord.account_id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count(self) -> int:
        return self.db.query(PasswordRecord).count()
