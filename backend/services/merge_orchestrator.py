"""
Transactional account merge.

Folds one or more duplicate accounts into a primary account inside a single
database transaction. Duplicates are archived, never deleted, and every
row that referenced a duplicate is repointed at the primary. Either the
whole merge commits or nothing does.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, List

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from authentication.auth import issue_account_token
from core.logging_config import merge_audit_logger
from helpers.masking import mask_identifier
from helpers.time_utils import utc_now
from models.exceptions import AccountNotFoundException, MergeFailedException
from repositories.account_repository import AccountRepository

# Copied from a duplicate only where the primary has no value
MERGEABLE_FIELDS = (
    "maritime_rank",
    "current_ship_name",
    "current_ship_imo",
    "current_city",
    "current_country",
    "current_latitude",
    "current_longitude",
    "whatsapp_number",
    "whatsapp_profile_picture_url",
    "whatsapp_display_name",
)

# Added together
SUMMED_FIELDS = ("question_count", "answer_count", "login_count")


@dataclass
class MergeOutcome:
    account: schemas.AccountPublic
    access_token: str
    merged_account_ids: List[str] = field(default_factory=list)
    skipped_account_ids: List[str] = field(default_factory=list)


class MergeOrchestrator:
    """Execute a merge decision against the account store."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock
        self.accounts = AccountRepository(db)

    @staticmethod
    def merge_fields(primary: db_models.Account, duplicate: db_models.Account) -> None:
        """Coalesce profile fields and sum activity counters onto the primary."""
        for field_name in MERGEABLE_FIELDS:
            if getattr(primary, field_name) is None:
                setattr(primary, field_name, getattr(duplicate, field_name))
        for field_name in SUMMED_FIELDS:
            total = (getattr(primary, field_name) or 0) + (
                getattr(duplicate, field_name) or 0
            )
            setattr(primary, field_name, total)

    def merge(
        self,
        primary_account_id: str,
        duplicate_account_ids: Iterable[str],
        strategy: schemas.MergeStrategy = schemas.MergeStrategy.MERGE_DATA,
    ) -> MergeOutcome:
        """
        Merge duplicates into the primary and log the primary in.

        Duplicates that are missing, already archived or equal to the primary
        are skipped, which makes repeating a merge harmless.

        Args:
            primary_account_id: Account that survives
            duplicate_account_ids: Accounts to fold in and archive
            strategy: merge_data copies fields and counters; keep_primary and
                manual_review only move references and archive

        Returns:
            MergeOutcome with the primary's public representation and a token

        Raises:
            AccountNotFoundException: Primary is missing or archived
            MergeFailedException: The transaction failed and was rolled back
        """
        merged: List[str] = []
        skipped: List[str] = []
        now = self.clock()

        try:
            primary = self.accounts.get_active_by_id(primary_account_id, for_update=True)
            if primary is None:
                self.db.rollback()
                raise AccountNotFoundException("Primary account not found")

            for duplicate_id in dict.fromkeys(duplicate_account_ids):
                if duplicate_id == primary.id:
                    continue
                duplicate = self.accounts.get_active_by_id(duplicate_id, for_update=True)
                if duplicate is None:
                    skipped.append(duplicate_id)
                    continue

                if strategy == schemas.MergeStrategy.MERGE_DATA:
                    self.merge_fields(primary, duplicate)

                moved = self.accounts.reassign_references(duplicate.id, primary.id)
                self.accounts.archive(duplicate, now)
                self.db.flush()
                merged.append(duplicate.id)
                merge_audit_logger.info(
                    "Duplicate account merged",
                    primary=mask_identifier(primary.id),
                    duplicate=mask_identifier(duplicate.id),
                    references_moved=moved,
                    strategy=strategy.value,
                )

            primary.last_updated = now
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            merge_audit_logger.error(
                "Account merge rolled back",
                primary=mask_identifier(primary_account_id),
                error=repr(e),
            )
            raise MergeFailedException() from e

        self.accounts.record_login(primary)
        token = issue_account_token(primary.id)

        if skipped:
            logger.info(
                f"Skipped {len(skipped)} missing or archived duplicates",
                primary=mask_identifier(primary.id),
            )
        return MergeOutcome(
            account=schemas.AccountPublic.model_validate(primary),
            access_token=token,
            merged_account_ids=merged,
            skipped_account_ids=skipped,
        )
