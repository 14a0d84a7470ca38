"""Request and response schemas for item endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

# -- Requests --


class ItemRequest(BaseModel):
    """Body for POST /api/items and PUT /api/items/{id}. Both fields required."""

    name: str = Field(min_length=1, max_length=255)
    quantity: int = Field(ge=0)


# -- Responses --


class ItemResponse(BaseModel):
    id: int
    name: str
    quantity: int
    created_at: str
    updated_at: str


class ItemEventResponse(BaseModel):
    id: int
    item_id: int | None = None
    event_type: str
    payload: dict[str, Any]
    created_at: datetime


class ReplayReportResponse(BaseModel):
    applied: int
    skipped_missing_target: int
    skipped_unknown_type: int
    skipped_malformed: int
    total: int
