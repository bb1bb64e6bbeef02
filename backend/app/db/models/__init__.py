"""Database models package."""
from app.db.models.category import Category
from app.db.models.product import Product

__all__ = ["Category", "Product"]
