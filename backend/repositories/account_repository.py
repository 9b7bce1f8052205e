"""
Account repository for identity lookups, merges and archival.
"""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import func, or_, update
from sqlalchemy.orm import Query, Session

import repositories.db_models as db_models
from helpers.time_utils import epoch_millis
from .base import BaseRepository


class AccountRepository(BaseRepository[db_models.Account]):
    """Repository for Account entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize account repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.Account, db)

    def _active(self) -> Query:
        """Query over accounts that have not been archived."""
        return self.db.query(db_models.Account).filter(
            db_models.Account.is_archived == False  # noqa: E712
        )

    def get_active_by_id(
        self, account_id: str, for_update: bool = False
    ) -> Optional[db_models.Account]:
        """
        Get a non-archived account by canonical identifier.

        Args:
            account_id: Canonical identifier
            for_update: Take a row lock (SELECT ... FOR UPDATE) where the
                dialect supports it

        Returns:
            Account if found and active, None otherwise
        """
        query = self._active().filter(db_models.Account.id == account_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        return query.first()

    # ------------------------------------------------------------------
    # Candidate lookups
    # ------------------------------------------------------------------

    def find_by_id(self, identifier: str) -> List[db_models.Account]:
        """Exact canonical-id match."""
        return self._active().filter(db_models.Account.id == identifier).all()

    def find_by_email(self, identifier: str) -> List[db_models.Account]:
        """Case-insensitive email match."""
        return (
            self._active()
            .filter(func.lower(db_models.Account.email) == identifier.lower())
            .all()
        )

    def find_by_whatsapp_numbers(
        self, variants: Sequence[str]
    ) -> List[db_models.Account]:
        """Alternate-contact number matching any identifier variant."""
        if not variants:
            return []
        return (
            self._active()
            .filter(db_models.Account.whatsapp_number.in_(list(variants)))
            .all()
        )

    def find_by_ids(self, variants: Sequence[str]) -> List[db_models.Account]:
        """Canonical id matching any identifier variant."""
        if not variants:
            return []
        return self._active().filter(db_models.Account.id.in_(list(variants))).all()

    def find_by_fuzzy_name(self, identifier: str) -> List[db_models.Account]:
        """
        Identifier is a substring of the display name AND (a substring of the
        email OR exactly the alternate-contact number).

        Common names can produce false positives; matching is kept as is.
        """
        return (
            self._active()
            .filter(
                db_models.Account.full_name.icontains(identifier, autoescape=True),
                or_(
                    db_models.Account.email.icontains(identifier, autoescape=True),
                    db_models.Account.whatsapp_number == identifier,
                ),
            )
            .all()
        )

    # ------------------------------------------------------------------
    # Merge support
    # ------------------------------------------------------------------

    def reassign_references(self, from_account_id: str, to_account_id: str) -> int:
        """
        Repoint every account foreign key from one account to another.

        Does not commit; runs inside the caller's merge transaction.

        Args:
            from_account_id: Duplicate account being merged away
            to_account_id: Primary account

        Returns:
            Total number of rows updated across all reference tables
        """
        total = 0
        for model, column_name in db_models.ACCOUNT_REFERENCES:
            column = getattr(model, column_name)
            result = self.db.execute(
                update(model)
                .where(column == from_account_id)
                .values({column_name: to_account_id})
                .execution_options(synchronize_session=False)
            )
            total += result.rowcount or 0
        return total

    def archive(
        self, account: db_models.Account, archived_at: Optional[datetime] = None
    ) -> None:
        """
        Archive an account in place.

        The email gets an `_archived_<epoch-ms>` suffix so the address is
        free for the surviving account, and the row is flagged so it can no
        longer authenticate. Does not commit.

        Args:
            account: Account to archive
            archived_at: Archival timestamp (defaults to now)
        """
        archived_at = archived_at or datetime.now(timezone.utc)
        stamp = epoch_millis(archived_at)
        if account.email:
            account.email = f"{account.email}_archived_{stamp}"
        account.is_archived = True
        account.archived_at = archived_at
        account.last_updated = archived_at

    def record_login(self, account: db_models.Account) -> None:
        """
        Update last-login bookkeeping and commit.

        Args:
            account: Account that just authenticated
        """
        account.login_count = (account.login_count or 0) + 1
        account.last_login = datetime.now(timezone.utc)
        self.commit()
        self.refresh(account)
