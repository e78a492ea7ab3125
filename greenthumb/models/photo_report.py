"""
GreenThumb Backend - Photo Report Model
========================================

What:  ORM model for the `photo_reports` table (user flags on photos).

Lifecycle:
    1. Created unhandled: admin_action, admin_id, handle_date are NULL
    2. Handled exactly once by an admin: all three are set together
    3. Terminal: there is no way back to unhandled

photo_id is a plain integer, not a foreign key: a handled report outlives
the photo it caused to be removed.
"""

import enum
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, SmallInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from greenthumb.database import Base


class AdminAction(enum.IntEnum):
    """Disposition chosen by the admin handling a report."""

    DISMISS = 0
    REMOVE_PHOTO = 1
    REMOVE_PHOTO_AND_BAN = 2


class PhotoReport(Base):
    """A user's report against a photo, awaiting or carrying an admin decision."""

    __tablename__ = "photo_reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    photo_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Reported photo (kept after the photo is removed)",
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("accounts.id"),
        nullable=False,
        comment="Reporter",
    )

    report_text: Mapped[str] = mapped_column(Text, nullable=False)

    report_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    admin_action: Mapped[Optional[int]] = mapped_column(
        SmallInteger,
        nullable=True,
        default=None,
        comment="0 dismiss, 1 remove photo, 2 remove photo and ban; NULL while unhandled",
    )

    admin_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
        default=None,
    )

    handle_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    __table_args__ = (
        Index("idx_photo_reports_report_date", "report_date"),
        Index("idx_photo_reports_admin_id", "admin_id"),
    )

    @property
    def is_handled(self) -> bool:
        return self.admin_action is not None

    def mark_handled(self, action: AdminAction, admin_id: int) -> None:
        """Apply the one-way Unhandled → Handled transition."""
        self.admin_action = int(action)
        self.admin_id = admin_id
        self.handle_date = datetime.now(timezone.utc)

    def __repr__(self) -> str:
        return (
            f"<PhotoReport(id={self.id}, photo_id={self.photo_id}, "
            f"admin_action={self.admin_action})>"
        )
