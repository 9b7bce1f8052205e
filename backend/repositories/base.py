"""
Shared persistence helpers for the account store repositories.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Session

from repositories.database import Base

T = TypeVar("T", bound=Base)  # type: ignore[type-arg]


class BaseRepository(Generic[T]):
    """
    Thin wrapper over a Session for one model class.

    Writes are staged only: nothing here commits except `commit` itself,
    because the account merge must commit once, after every duplicate has
    been folded in.
    """

    def __init__(self, model: type[T], db: Session):
        self.model = model
        self.db = db

    def get_by_id(self, id: Any) -> T | None:
        """Primary-key lookup through the session identity map."""
        return self.db.get(self.model, id)

    def add(self, entity: T) -> None:
        self.db.add(entity)

    def delete(self, entity: T) -> None:
        self.db.delete(entity)

    def flush(self) -> None:
        """Send staged writes so later queries in the transaction see them."""
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def refresh(self, entity: T) -> None:
        self.db.refresh(entity)
