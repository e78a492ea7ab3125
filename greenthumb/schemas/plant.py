"""
GreenThumb Backend - Plant Schemas
===================================

Request bodies for /plants/* and the Plant JSON projection.

maxPhotos defaults to `settings.plants_max_photos` (3) at parse time, so
services never patch the incoming body.
"""

from typing import List

from pydantic import Field

from greenthumb.config import settings
from greenthumb.schemas.common import CamelModel, EntityId, RequestModel
from greenthumb.schemas.photo import PhotoResponse


def _default_max_photos() -> int:
    return settings.plants_max_photos


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PlantAddRequest(RequestModel):
    admin_id: EntityId
    name: str = Field(min_length=1)
    bio: str = Field(min_length=1)


class PlantByIdRequest(RequestModel):
    plant_id: EntityId
    max_photos: int = Field(default_factory=_default_max_photos, ge=0, strict=True)


class ImagePayload(RequestModel):
    """
    The image sent for identification.

    height/width are the pixel dimensions used to scale the classifier's
    normalized bounding boxes back to image coordinates.
    """

    data: str = Field(min_length=1, description="Image URL or base64-encoded bytes")
    height: int = Field(gt=0, strict=True)
    width: int = Field(gt=0, strict=True)


class PlantByImageRequest(RequestModel):
    image: ImagePayload
    max_photos: int = Field(default_factory=_default_max_photos, ge=0, strict=True)


class PlantByQueryRequest(RequestModel):
    query: str = Field(min_length=1)
    max_photos: int = Field(default_factory=_default_max_photos, ge=0, strict=True)


class PlantUpdateRequest(RequestModel):
    admin_id: EntityId
    plant_id: EntityId
    bio: str = Field(min_length=1)


class PlantRemoveRequest(RequestModel):
    admin_id: EntityId
    plant_id: EntityId


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PlantResponse(CamelModel):
    id: int
    name: str
    bio: str


class PlantEnvelope(CamelModel):
    plant: PlantResponse


class PlantWithPhotos(CamelModel):
    """A plant with its top-rated photos."""

    plant: PlantResponse
    photos: List[PhotoResponse]


class PlantQueryResponse(CamelModel):
    results: List[PlantWithPhotos]


class Point(CamelModel):
    x: float
    y: float


class ImageMatch(CamelModel):
    """One classifier detection resolved to a catalogue plant."""

    plant: PlantResponse
    photos: List[PhotoResponse]
    score: float
    top_left: Point
    bottom_right: Point


class PlantImageResponse(CamelModel):
    results: List[ImageMatch]
