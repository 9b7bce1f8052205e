"""Models package - Pydantic schemas and domain types."""

from .schemas import AccountSource, MergeStrategy

__all__ = [
    "AccountSource",
    "MergeStrategy",
]
