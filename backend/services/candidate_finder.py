"""
Candidate account discovery.

Runs five independent lookups for one login identifier and unions the
results in lookup order. A lookup that fails at the database level is
logged and contributes nothing; the remaining lookups still run.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from helpers.masking import mask_identifier
from repositories.account_repository import AccountRepository
from services.identifier_normalizer import IdentifierNormalizer, identifier_normalizer


@dataclass
class CandidateSearchResult:
    """Raw lookup output, possibly holding the same account more than once."""

    rows: List[db_models.Account] = field(default_factory=list)
    failed_lookups: List[str] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.failed_lookups)


class CandidateFinder:
    """Find every live account that could belong to the person logging in."""

    def __init__(
        self, db: Session, normalizer: Optional[IdentifierNormalizer] = None
    ):
        self.db = db
        self.accounts = AccountRepository(db)
        self.normalizer = normalizer or identifier_normalizer

    def find(self, identifier: str) -> CandidateSearchResult:
        """
        Run all lookups for an identifier.

        Args:
            identifier: Raw login identifier

        Returns:
            Rows in discovery order (duplicates included) and the names of
            lookups that failed
        """
        ident = (identifier or "").strip()
        variants = self.normalizer.normalize(ident)

        lookups: List[tuple[str, Callable[[], List[db_models.Account]]]] = [
            ("id", lambda: self.accounts.find_by_id(ident)),
            ("email", lambda: self.accounts.find_by_email(ident)),
            ("whatsapp", lambda: self.accounts.find_by_whatsapp_numbers(variants)),
            ("id_variants", lambda: self.accounts.find_by_ids(variants)),
            ("fuzzy_name", lambda: self.accounts.find_by_fuzzy_name(ident)),
        ]

        result = CandidateSearchResult()
        for name, lookup in lookups:
            try:
                result.rows.extend(lookup())
            except SQLAlchemyError as e:
                logger.warning(
                    "Candidate lookup failed, continuing without it",
                    lookup=name,
                    identifier=mask_identifier(ident),
                    error=str(e),
                )
                # Leave the session usable for the next lookup
                self.db.rollback()
                result.failed_lookups.append(name)

        logger.debug(
            "Candidate lookups finished",
            identifier=mask_identifier(ident),
            rows=len(result.rows),
            failed=result.failed_lookups,
        )
        return result
