"""Product page and CRUD endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.dependencies.db import DbSession
from app.api.dependencies.session import flash, require_csrf
from app.api.routers.redirects import back_url
from app.api.schemas.category import CategoryRead
from app.api.schemas.product import ProductRead, ProductResponse
from app.services import product_service
from app.services.category_service import CategoryService
from app.services.exceptions import EntityNotFoundError
from app.services.product_service import ProductService
from app.utils.validators import FieldValidationError
from app.web.pages import render_page

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_csrf)])


@router.get("", summary="Products page", response_class=Response)
async def list_products(
    request: Request,
    db: DbSession,
) -> Response:
    """Render the products screen.

    Every product is returned newest first with its category attached,
    alongside the active categories for the form picker.
    """
    try:
        products = ProductService(db).list()
        categories = CategoryService(db).list_active()
    except SQLAlchemyError as e:
        logger.error(f"Database error listing products: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve products",
        ) from e

    return render_page(
        request,
        "Products/Index",
        {
            "products": [ProductRead.model_validate(p).model_dump(mode="json") for p in products],
            "categories": [CategoryRead.model_validate(c).model_dump(mode="json") for c in categories],
        },
        title="Products",
    )


@router.post(
    "",
    summary="Create a product",
    status_code=status.HTTP_201_CREATED,
    response_model=ProductResponse,
)
async def create_product(
    db: DbSession,
    payload: Any = Body(None),
) -> ProductResponse:
    """Persist a product from the modal form and return it with its category."""
    try:
        product = ProductService(db).create(payload)
        return ProductResponse(
            message=product_service.CREATED_MESSAGE,
            product=ProductRead.model_validate(product),
        )
    except FieldValidationError:
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error creating product: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create product",
        ) from e


@router.put(
    "/{product_id}",
    summary="Update existing product",
    response_model=ProductResponse,
)
async def update_product(
    product_id: int,
    db: DbSession,
    payload: Any = Body(None),
) -> ProductResponse:
    """Replace every editable field of a product (no partial patch)."""
    try:
        product = ProductService(db).update(product_id, payload)
        return ProductResponse(
            message=product_service.UPDATED_MESSAGE,
            product=ProductRead.model_validate(product),
        )
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except FieldValidationError:
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error updating product {product_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update product",
        ) from e


@router.delete(
    "/{product_id}",
    summary="Delete product",
    status_code=status.HTTP_303_SEE_OTHER,
    response_class=RedirectResponse,
)
async def delete_product(
    product_id: int,
    request: Request,
    db: DbSession,
) -> RedirectResponse:
    """Permanently delete a product and redirect back with a success flash."""
    try:
        ProductService(db).delete(product_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except SQLAlchemyError as e:
        logger.error(f"Database error deleting product {product_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete product",
        ) from e

    flash(request, "success", product_service.DELETED_MESSAGE)
    return RedirectResponse(back_url(request, "/products"), status_code=status.HTTP_303_SEE_OTHER)
