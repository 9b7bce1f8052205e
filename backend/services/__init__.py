"""
Services layer for business logic.

This package contains service modules that encapsulate business logic
separate from the API routes.
"""

from .identifier_normalizer import IdentifierNormalizer
from .candidate_finder import CandidateFinder
from .completeness_scorer import CompletenessScorer
from .password_gate import PasswordGate
from .merge_session_store import MergeSessionStore
from .merge_orchestrator import MergeOrchestrator
from .identity_service import IdentityService
from .notification_service import NotificationService

__all__ = [
    "IdentifierNormalizer",
    "CandidateFinder",
    "CompletenessScorer",
    "PasswordGate",
    "MergeSessionStore",
    "MergeOrchestrator",
    "IdentityService",
    "NotificationService",
]
