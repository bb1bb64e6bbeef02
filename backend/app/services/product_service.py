"""Product persistence: validate, write, reload with category."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.db.models.product import Product
from app.db.models.timestamps import utcnow
from app.services.exceptions import EntityNotFoundError
from app.services.rules import PRODUCT_RULES
from app.utils.validators import fits_integer_column, validate

logger = logging.getLogger(__name__)

CREATED_MESSAGE = "Product created successfully!"
UPDATED_MESSAGE = "Product updated successfully!"
DELETED_MESSAGE = "Product deleted successfully!"

CENTS = Decimal("0.01")


class ProductService:
    """CRUD operations for products."""

    def __init__(self, db: Session):
        self.db = db

    def list(self) -> list[Product]:
        """All products, newest first, with their category loaded."""
        query = (
            select(Product)
            .options(selectinload(Product.category))
            .order_by(Product.created_at.desc(), Product.id.desc())
        )
        return list(self.db.scalars(query).all())

    def get(self, product_id: int) -> Product:
        product = self.db.get(Product, product_id) if fits_integer_column(product_id) else None
        if product is None:
            raise EntityNotFoundError("Product", product_id)
        return product

    def create(self, fields: Any) -> Product:
        """Validate ``fields``, insert the product and attach its category."""
        values = self._validated(fields)

        product = Product(**values)
        self.db.add(product)
        self._commit()
        self._reload(product)

        logger.info(f"Created product {product.id} ({product.name!r})")
        return product

    def update(self, product_id: int, fields: Any) -> Product:
        """Overwrite the validated fields of an existing product."""
        product = self.get(product_id)
        values = self._validated(fields)

        for name, value in values.items():
            setattr(product, name, value)
        product.updated_at = utcnow()
        self._commit()
        self._reload(product)

        logger.info(f"Updated product {product.id}")
        return product

    def delete(self, product_id: int) -> None:
        product = self.get(product_id)
        self.db.delete(product)
        self._commit()
        logger.info(f"Deleted product {product_id}")

    def _validated(self, fields: Any) -> dict[str, Any]:
        values = validate(fields, PRODUCT_RULES, db=self.db)
        values["price"] = values["price"].quantize(CENTS, rounding=ROUND_HALF_UP)
        return values

    def _reload(self, product: Product) -> None:
        # category_id may have changed; drop the stale association first
        self.db.refresh(product)
        self.db.refresh(product, attribute_names=["category"])

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
