"""
GreenThumb Backend - Plant Model
=================================

What:  ORM model for the `plants` catalogue table.
Who:   Used by DatabaseInterface and PlantService. The classifier's class
       ids are plant ids.
"""

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from greenthumb.database import Base


class Plant(Base):
    """A catalogued plant. `name` is fixed at creation; admins may edit `bio`."""

    __tablename__ = "plants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name, set at creation",
    )

    bio: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Free-text description, editable by admins",
    )

    __table_args__ = (
        Index("idx_plants_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Plant(id={self.id}, name='{self.name}')>"
