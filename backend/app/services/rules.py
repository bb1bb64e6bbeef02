"""Validation rule tables shared by create and update."""

from __future__ import annotations

from decimal import Decimal

from app.db.models.category import Category
from app.db.models.product import PRODUCT_STATUSES
from app.utils.validators import (
    INT32_MAX,
    RuleTable,
    boolean,
    exists,
    integer,
    max_length,
    max_value,
    min_value,
    numeric,
    one_of,
    required,
    string,
    unique,
)

# Largest value a Numeric(10, 2) column holds
MAX_PRICE = Decimal("99999999.99")

CATEGORY_RULES: RuleTable = {
    "name": [required(), string(), max_length(100), unique(Category, "name")],
    "description": [string()],
    "color": [string(), max_length(7)],
    "active": [boolean()],
}

PRODUCT_RULES: RuleTable = {
    "name": [required(), string(), max_length(255)],
    "description": [string()],
    "price": [required(), numeric(), min_value(0), max_value(MAX_PRICE)],
    "stock": [required(), integer(), min_value(0), max_value(INT32_MAX)],
    "status": [required(), string(), one_of(PRODUCT_STATUSES)],
    "category_id": [integer(), exists(Category, "id")],
}
