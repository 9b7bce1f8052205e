"""Data access for accounts, password records and account references."""

from .account_repository import AccountRepository
from .base import BaseRepository
from .password_record_repository import PasswordRecordRepository

__all__ = ["AccountRepository", "BaseRepository", "PasswordRecordRepository"]
