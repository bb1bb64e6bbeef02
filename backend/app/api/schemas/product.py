"""Pydantic models describing Product payloads."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_serializer

from app.api.schemas.category import CategoryRead, isoformat_utc

ProductStatus = Literal["active", "inactive", "discontinued"]


class ProductBase(BaseModel):
    name: str = Field(..., max_length=255)
    description: str | None = None
    price: Decimal = Field(..., ge=0)
    stock: int = Field(..., ge=0)
    status: ProductStatus = "active"
    category_id: int | None = None


class ProductRead(ProductBase):
    id: int
    category: CategoryRead | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_serializer("price")
    def serialize_price(self, value: Decimal) -> float:
        return float(value)

    @field_serializer("created_at", "updated_at")
    def serialize_timestamps(self, value: datetime | None) -> str | None:
        return isoformat_utc(value)

    model_config = {"from_attributes": True}


class ProductResponse(BaseModel):
    """Body returned by create and update."""

    message: str
    product: ProductRead
