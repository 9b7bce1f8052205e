"""
Completeness scoring and ranking of candidate accounts.

Scores tell the person logging in which of their accounts holds the most
data, so the richest one is offered as the account to keep.
"""

from typing import Iterable, List, Optional

import models.schemas as schemas
import repositories.db_models as db_models

# Fields counted toward completeness. Zero counters count as populated.
COMPLETENESS_FIELDS = (
    "full_name",
    "email",
    "maritime_rank",
    "current_ship_name",
    "current_city",
    "question_count",
    "answer_count",
    "whatsapp_number",
    "current_latitude",
    "current_longitude",
    "last_login",
)

QUESTION_BONUS = 2
ANSWER_BONUS = 2
REPEAT_LOGIN_BONUS = 1


def _is_populated(account: db_models.Account, field_name: str) -> bool:
    value = getattr(account, field_name, None)
    return value is not None and value != ""


class CompletenessScorer:
    """Score, classify and rank accounts by how much data they hold."""

    @staticmethod
    def score(account: db_models.Account) -> int:
        """
        Completeness score in [0, 100].

        One point per populated field plus activity bonuses, scaled against
        the number of fields. Bonuses can push the raw value past 100; the
        result is clamped.
        """
        populated = sum(
            1 for field_name in COMPLETENESS_FIELDS if _is_populated(account, field_name)
        )
        bonus = 0
        if (account.question_count or 0) > 0:
            bonus += QUESTION_BONUS
        if (account.answer_count or 0) > 0:
            bonus += ANSWER_BONUS
        if (account.login_count or 0) > 1:
            bonus += REPEAT_LOGIN_BONUS

        raw = round(100 * (populated + bonus) / len(COMPLETENESS_FIELDS))
        return max(0, min(100, raw))

    @staticmethod
    def classify_source(account: db_models.Account) -> schemas.AccountSource:
        """Guess which subsystem created the account from the data it carries."""
        if (account.question_count or 0) > 0 or (account.answer_count or 0) > 0:
            return schemas.AccountSource.QAAQ_MAIN
        if account.whatsapp_number and account.whatsapp_profile_picture_url:
            return schemas.AccountSource.WHATSAPP_BOT
        return schemas.AccountSource.LOCAL_APP

    @classmethod
    def to_candidate(cls, account: db_models.Account) -> schemas.CandidateAccount:
        """Project an account row into a scored candidate."""
        base = schemas.AccountPublic.model_validate(account).model_dump()
        return schemas.CandidateAccount(
            **base,
            current_latitude=account.current_latitude,
            current_longitude=account.current_longitude,
            completeness=cls.score(account),
            source=cls.classify_source(account),
        )

    @classmethod
    def rank(
        cls, accounts: Iterable[db_models.Account]
    ) -> List[schemas.CandidateAccount]:
        """
        Deduplicate by id and sort by completeness.

        The first occurrence of an id wins. Sorting is descending and stable,
        so ties keep discovery order.

        Args:
            accounts: Raw lookup rows, possibly repeating accounts

        Returns:
            One scored candidate per distinct account
        """
        seen: set[str] = set()
        candidates: List[schemas.CandidateAccount] = []
        for account in accounts:
            if account.id in seen:
                continue
            seen.add(account.id)
            candidates.append(cls.to_candidate(account))

        candidates.sort(key=lambda c: c.completeness, reverse=True)
        return candidates

    @staticmethod
    def recommend(candidate: schemas.CandidateAccount) -> str:
        """Advice shown next to each account on the merge screen."""
        if candidate.completeness >= 80:
            return "RECOMMENDED - Most complete profile"
        if (
            candidate.source == schemas.AccountSource.QAAQ_MAIN
            and candidate.question_count > 0
        ):
            return "RECOMMENDED - Active QAAQ user with Q&A history"
        if candidate.login_count > 5:
            return "RECOMMENDED - Frequently used account"
        if candidate.completeness < 30:
            return "ARCHIVE - Incomplete profile, consider merging data into another account"
        return "MERGE - Consider merging data into primary account"

    @classmethod
    def with_recommendations(
        cls, candidates: Iterable[schemas.CandidateAccount]
    ) -> List[schemas.CandidateWithRecommendation]:
        return [
            schemas.CandidateWithRecommendation(
                **candidate.model_dump(), recommendation=cls.recommend(candidate)
            )
            for candidate in candidates
        ]

    @staticmethod
    def suggest_primary(
        candidates: List[schemas.CandidateAccount],
    ) -> Optional[str]:
        """Id of the default primary nomination (the top-ranked candidate)."""
        return candidates[0].id if candidates else None
