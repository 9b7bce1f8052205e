"""
Database models using SQLAlchemy 2.0 style with Mapped type hints.

The `accounts` table is the single source of truth for identities. The
chat, post and like tables only matter here because they carry account
foreign keys that must follow an account when it is merged away.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repositories.database import Base


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class Account(Base):
    __tablename__ = "accounts"

    # Canonical identifier: usually a phone number, otherwise a generated id.
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(
        String(320), unique=True, index=True, nullable=True
    )
    whatsapp_number: Mapped[Optional[str]] = mapped_column(
        String(32), index=True, nullable=True
    )

    # Profile completeness fields
    maritime_rank: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    current_ship_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    current_ship_imo: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    current_city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    current_country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    current_latitude: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    current_longitude: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    whatsapp_profile_picture_url: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True
    )
    whatsapp_display_name: Mapped[Optional[str]] = mapped_column(
        String(200), nullable=True
    )

    # Activity counters
    question_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    answer_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    login_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Plaintext, mirrored from PasswordRecord for legacy readers of this table
    password: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    is_platform_admin: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # Archival (merged-away duplicates are archived, never deleted)
    is_archived: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, index=True
    )
    archived_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    last_updated: Mapped[Optional[datetime]] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now, nullable=True
    )

    password_record: Mapped[Optional["PasswordRecord"]] = relationship(
        "PasswordRecord", back_populates="account", uselist=False
    )


class PasswordRecord(Base):
    """Liberal-login bootstrap state and pending reset code for one account."""

    __tablename__ = "password_records"

    account_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("accounts.id"), primary_key=True
    )
    has_custom_password: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    custom_password: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    liberal_login_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_liberal_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )

    reset_code: Mapped[Optional[str]] = mapped_column(String(12), nullable=True)
    reset_code_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    # Set by a successful code verification, consumed by the next password set
    reset_verified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    account: Mapped["Account"] = relationship(
        "Account", back_populates="password_record"
    )


class ChatConnection(Base):
    __tablename__ = "chat_connections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sender_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("accounts.id"), index=True, nullable=False
    )
    receiver_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("accounts.id"), index=True, nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    connection_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("chat_connections.id"), nullable=True
    )
    sender_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("accounts.id"), index=True, nullable=False
    )
    receiver_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("accounts.id"), index=True, nullable=True
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("accounts.id"), index=True, nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), default="general")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)


class PostLike(Base):
    __tablename__ = "post_likes"
    __table_args__ = (Index("ix_post_likes_post_user", "post_id", "user_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("accounts.id"), index=True, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)


# Every column that names an account. A merge repoints all of them from the
# duplicate to the primary account.
ACCOUNT_REFERENCES = (
    (ChatConnection, "sender_id"),
    (ChatConnection, "receiver_id"),
    (ChatMessage, "sender_id"),
    (ChatMessage, "receiver_id"),
    (Post, "user_id"),
    (PostLike, "user_id"),
)
