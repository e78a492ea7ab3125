"""
GreenThumb Backend - Shared Schema Building Blocks
===================================================

What:  Base models, the UTC datetime type, pagination fields, error/health
       response models, and the translation of pydantic validation errors
       into the API's client-facing messages.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Optional, Sequence

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from greenthumb.exceptions import ErrorMessages


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; every stored timestamp is UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]

# Upper bound of the INTEGER id columns
MAX_DB_INT = 2**31 - 1

# Non-negative integer identifier (user, plant, photo, report, admin ids);
# JSON booleans are rejected
EntityId = Annotated[int, Field(ge=0, le=MAX_DB_INT, strict=True)]


class CamelModel(BaseModel):
    """Base for response models: camelCase JSON, readable from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RequestModel(BaseModel):
    """Base for request bodies: camelCase JSON, frozen once parsed."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class PaginatedRequest(RequestModel):
    """`startIndex >= 0` and `max > 0`, shared by every list endpoint."""

    start_index: int = Field(
        ge=0, strict=True, description="Offset of the first record to return"
    )
    max_results: int = Field(
        gt=0, strict=True, alias="max", description="Maximum records to return"
    )


class EmptyResponse(CamelModel):
    """`{}`: returned by removals and fire-and-forget triggers."""


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Parameter 'userId' may not be negative.",
            "details": {"field": "userId"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(CamelModel):
    """Health check response showing service and dependency status."""

    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    classifier: str = Field(description="Classifier status: available, unavailable, circuit_open")
    uptime_seconds: float = Field(description="Seconds since service started")


# ══════════════════════════════════════════════════════════════════════════
# Validation error translation
# ══════════════════════════════════════════════════════════════════════════

def _field_name(loc: Sequence[Any]) -> str:
    parts = [str(p) for p in loc if p != "body"]
    return ".".join(parts)


def describe_validation_error(error: Dict[str, Any]) -> str:
    """Turn one pydantic error dict into the API's message vocabulary."""
    loc = tuple(error.get("loc", ()))
    field = _field_name(loc)
    error_type = error.get("type", "")
    ctx = error.get("ctx") or {}

    if error_type == "json_invalid":
        return "Request body is not valid JSON."
    if not field:
        if error_type == "missing":
            return "Missing request body."
        if error_type == "value_error":
            return str(ctx.get("error", error.get("msg", "")))
        return "Request body must be a JSON object."

    if error_type == "missing":
        return ErrorMessages.missing_param(field)
    if error_type == "greater_than_equal" and ctx.get("ge") == 0:
        return ErrorMessages.no_neg(field)
    if error_type == "greater_than" and ctx.get("gt") == 0:
        return ErrorMessages.only_pos(field)
    if error_type == "string_too_short":
        return ErrorMessages.missing_text(field)
    if error_type == "value_error":
        return str(ctx.get("error", error.get("msg", "")))
    return ErrorMessages.invalid_param(field)


def describe_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """Message for the first failing field; the full list goes in `details`."""
    if not errors:
        return "Validation failed"
    return describe_validation_error(errors[0])
