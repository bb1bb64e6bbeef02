"""Category persistence: validate, write, reload."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.models.category import Category
from app.db.models.product import Product
from app.db.models.timestamps import utcnow
from app.services.exceptions import EntityNotFoundError
from app.services.rules import CATEGORY_RULES
from app.utils.validators import FieldValidationError, fits_integer_column, validate

logger = logging.getLogger(__name__)

CREATED_MESSAGE = "Category created successfully!"
UPDATED_MESSAGE = "Category updated successfully!"
DELETED_MESSAGE = "Category deleted successfully!"


class CategoryService:
    """CRUD operations for categories."""

    def __init__(self, db: Session):
        self.db = db

    def list(self) -> list[Category]:
        """All categories, newest first."""
        query = select(Category).order_by(Category.created_at.desc(), Category.id.desc())
        return list(self.db.scalars(query).all())

    def list_active(self) -> list[Category]:
        """Active categories for the product form picker."""
        query = select(Category).where(Category.active.is_(True)).order_by(Category.name)
        return list(self.db.scalars(query).all())

    def get(self, category_id: int) -> Category:
        category = self.db.get(Category, category_id) if fits_integer_column(category_id) else None
        if category is None:
            raise EntityNotFoundError("Category", category_id)
        return category

    def create(self, fields: Any) -> Category:
        """Validate ``fields`` and insert a new category."""
        values = validate(fields, CATEGORY_RULES, db=self.db)
        values.setdefault("active", True)

        category = Category(**values)
        self.db.add(category)
        self._commit(values)
        self.db.refresh(category)

        logger.info(f"Created category {category.id} ({category.name!r})")
        return category

    def update(self, category_id: int, fields: Any) -> Category:
        """Overwrite the validated fields of an existing category."""
        category = self.get(category_id)
        values = validate(fields, CATEGORY_RULES, db=self.db, ignore_id=category.id)

        for name, value in values.items():
            setattr(category, name, value)
        category.updated_at = utcnow()
        self._commit(values)
        self.db.refresh(category)

        logger.info(f"Updated category {category.id}")
        return category

    def delete(self, category_id: int) -> None:
        """Remove a category; products that referenced it keep existing with no category."""
        category = self.get(category_id)
        try:
            detached = self.db.execute(
                update(Product)
                .where(Product.category_id == category.id)
                .values(category_id=None, updated_at=utcnow())
            ).rowcount
            self.db.delete(category)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.info(f"Deleted category {category_id}, detached {detached} product(s)")

    def _commit(self, values: dict[str, Any]) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if not _is_duplicate_name(e):
                raise
            # A concurrent insert can win the unique index between check and write
            logger.warning(f"Duplicate category name {values.get('name')!r}: {e}")
            raise FieldValidationError({"name": ["The name has already been taken."]}) from e
        except SQLAlchemyError:
            self.db.rollback()
            raise


def _is_duplicate_name(error: IntegrityError) -> bool:
    """True when ``error`` is the unique index on ``categories.name``."""
    orig = error.orig
    # psycopg exposes the SQLSTATE and constraint; SQLite only a message
    diag = getattr(orig, "diag", None)
    if getattr(orig, "sqlstate", None) == "23505" and diag is not None:
        return diag.constraint_name == "categories_name_key"
    return "UNIQUE constraint failed: categories.name" in str(orig)
