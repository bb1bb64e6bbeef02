"""Pydantic models describing Category payloads."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_serializer


def isoformat_utc(value: datetime | None) -> str | None:
    """ISO string with an explicit offset; SQLite hands back naive UTC values."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class CategoryBase(BaseModel):
    name: str = Field(..., max_length=100, description="Unique category name")
    description: str | None = None
    color: str | None = Field(None, max_length=7, description="Hex color, e.g. #RRGGBB")
    active: bool = True


class CategoryRead(CategoryBase):
    id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_serializer("created_at", "updated_at")
    def serialize_timestamps(self, value: datetime | None) -> str | None:
        """Convert datetime to ISO format string."""
        return isoformat_utc(value)

    model_config = {"from_attributes": True}


class CategoryResponse(BaseModel):
    """Body returned by create and update."""

    message: str
    category: CategoryRead
