"""
GreenThumb Backend - Account and Ban Models
============================================

What:  ORM models for the `accounts` and `bans` tables.
How:   A single `Account` row per user id, tagged with a role. Admins are
       accounts whose role is `admin`; promotion rewrites the tag and keeps
       the row (and therefore the ban history) intact.
Who:   Used by DatabaseInterface and UserService.

Table Design:
    - accounts.id: client-supplied, non-negative integer identity
    - accounts.role: 'user' | 'admin'
    - bans.user_id: the banned account
    - bans.admin_id: the admin who issued the ban
    - bans.expiration_date: NULL means permanent
"""

import enum
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from greenthumb.database import Base


class AccountRole(str, enum.Enum):
    """Role tag carried by every account."""

    USER = "user"
    ADMIN = "admin"


class Account(Base):
    """
    A GreenThumb user. Admin privilege is the `role` tag, not a subtype.

    Bans are loaded eagerly (selectin) since every projection of an
    account includes its ban list.
    """

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
        comment="Client-supplied user identifier",
    )

    role: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=AccountRole.USER.value,
        server_default=text("'user'"),
        comment="Role tag: user, admin",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When this account was registered (UTC)",
    )

    bans: Mapped[List["Ban"]] = relationship(
        "Ban",
        foreign_keys="Ban.user_id",
        lazy="selectin",
        order_by="Ban.id",
        viewonly=True,
    )

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN.value

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, role='{self.role}', bans={len(self.bans)})>"


class Ban(Base):
    """
    A moderation record restricting an account, optionally time-bounded.

    Immutable once created: there is no update path for bans.
    """

    __tablename__ = "bans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("accounts.id"),
        nullable=False,
        comment="The banned account",
    )

    admin_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
        comment="The admin who issued the ban (NULL once that admin is removed)",
    )

    expiration_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        comment="When the ban lapses; NULL means permanent",
    )

    __table_args__ = (
        Index("idx_bans_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Ban(id={self.id}, user_id={self.user_id}, admin_id={self.admin_id}, "
            f"expiration_date='{self.expiration_date}')>"
        )
