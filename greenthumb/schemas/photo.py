"""
GreenThumb Backend - Photo Schemas
===================================

Request bodies for /photos/* and the Photo JSON projection.
"""

from typing import List, Optional

from pydantic import Field, model_validator

from greenthumb.schemas.common import (
    CamelModel,
    EntityId,
    PaginatedRequest,
    RequestModel,
    UtcDatetime,
)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PhotoAddRequest(RequestModel):
    user_id: EntityId
    plant_id: EntityId
    image: str = Field(min_length=1, description="Image URL or encoded image payload")


class PhotoIdRequest(RequestModel):
    photo_id: EntityId


class PhotoListRequest(PaginatedRequest):
    """
    Paginated listing, optionally narrowed to one user or one plant.

    Supplying neither filter lists photos across the whole site; supplying
    both is rejected.
    """

    user_id: Optional[EntityId] = None
    plant_id: Optional[EntityId] = None

    @model_validator(mode="after")
    def check_single_filter(self) -> "PhotoListRequest":
        if self.user_id is not None and self.plant_id is not None:
            raise ValueError(
                "Parameters 'userId' and 'plantId' may not both be supplied."
            )
        return self


class PhotoVoteRequest(RequestModel):
    """vote: 1 upvote, -1 downvote, 0 withdraw."""

    photo_id: EntityId
    user_id: EntityId
    vote: int = Field(ge=-1, le=1, strict=True)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PhotoResponse(CamelModel):
    """Full Photo projection; vote sets are plain sorted id arrays."""

    id: int
    plant_id: int
    user_id: int
    image: str
    upload_date: UtcDatetime
    upvote_ids: List[int] = Field(default_factory=list)
    downvote_ids: List[int] = Field(default_factory=list)


class PhotoEnvelope(CamelModel):
    photo: PhotoResponse


class PhotoListResponse(CamelModel):
    photos: List[PhotoResponse]
