"""
GreenThumb Backend - ORM Models
================================

Importing this package registers every table on `Base.metadata`
(used by Alembic autogenerate and `Database.create_all()`).
"""

from greenthumb.models.account import Account, AccountRole, Ban
from greenthumb.models.photo import Photo, PhotoVote
from greenthumb.models.photo_report import AdminAction, PhotoReport
from greenthumb.models.plant import Plant

__all__ = [
    "Account",
    "AccountRole",
    "AdminAction",
    "Ban",
    "Photo",
    "PhotoReport",
    "PhotoVote",
    "Plant",
]
