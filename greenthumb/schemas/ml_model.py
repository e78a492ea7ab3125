"""
GreenThumb Backend - ML Model Schemas
======================================

Request body for /mlModel/training/immediate.
"""

from greenthumb.schemas.common import EntityId, RequestModel


class RetrainRequest(RequestModel):
    admin_id: EntityId
