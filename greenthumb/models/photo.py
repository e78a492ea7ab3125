"""
GreenThumb Backend - Photo and Vote Models
===========================================

What:  ORM models for the `photos` and `photo_votes` tables.
How:   Votes are rows keyed by (photo_id, user_id) with value +1 or -1.
       The composite primary key means a user sits in at most one of the
       up/down vote sets of a photo at any time.

Query Patterns:
    - Newest photos (global / by plant / by user):
      ORDER BY upload_date DESC, id DESC → idx_photos_upload_date
    - Top photos: ORDER BY (SUM(votes.value)) DESC, upload_date DESC
"""

from datetime import datetime, timezone
from typing import List

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, SmallInteger, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from greenthumb.database import Base


class Photo(Base):
    """
    A user-submitted image of a plant.

    `image` is stored as given by the client (URL or encoded payload).
    """

    __tablename__ = "photos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    plant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("plants.id"),
        nullable=False,
        comment="Plant shown in the photo",
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("accounts.id"),
        nullable=False,
        comment="Uploader",
    )

    image: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Image reference or encoded payload, stored verbatim",
    )

    upload_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When the photo was uploaded (UTC)",
    )

    votes: Mapped[List["PhotoVote"]] = relationship(
        "PhotoVote",
        lazy="selectin",
        viewonly=True,
    )

    __table_args__ = (
        Index("idx_photos_upload_date", upload_date.desc()),
        Index("idx_photos_plant_id", "plant_id"),
        Index("idx_photos_user_id", "user_id"),
    )

    @property
    def upvote_ids(self) -> List[int]:
        return sorted(v.user_id for v in self.votes if v.value > 0)

    @property
    def downvote_ids(self) -> List[int]:
        return sorted(v.user_id for v in self.votes if v.value < 0)

    @property
    def rating(self) -> int:
        return len(self.upvote_ids) - len(self.downvote_ids)

    def __repr__(self) -> str:
        return (
            f"<Photo(id={self.id}, plant_id={self.plant_id}, user_id={self.user_id}, "
            f"upload_date='{self.upload_date}')>"
        )


class PhotoVote(Base):
    """One user's vote on one photo: +1 (up) or -1 (down)."""

    __tablename__ = "photo_votes"

    photo_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("photos.id", ondelete="CASCADE"),
        primary_key=True,
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        primary_key=True,
    )

    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    __table_args__ = (
        CheckConstraint("value IN (-1, 1)", name="ck_photo_votes_value"),
    )

    def __repr__(self) -> str:
        return f"<PhotoVote(photo_id={self.photo_id}, user_id={self.user_id}, value={self.value})>"
