"""Category page and CRUD endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.dependencies.db import DbSession
from app.api.dependencies.session import flash, require_csrf
from app.api.routers.redirects import back_url
from app.api.schemas.category import CategoryRead, CategoryResponse
from app.services import category_service
from app.services.category_service import CategoryService
from app.services.exceptions import EntityNotFoundError
from app.utils.validators import FieldValidationError
from app.web.pages import render_page

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_csrf)])


@router.get("", summary="Categories page", response_class=Response)
async def list_categories(
    request: Request,
    db: DbSession,
) -> Response:
    """Render the categories screen with every category, newest first."""
    try:
        categories = CategoryService(db).list()
    except SQLAlchemyError as e:
        logger.error(f"Database error listing categories: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve categories",
        ) from e

    return render_page(
        request,
        "Categories/Index",
        {"categories": [CategoryRead.model_validate(c).model_dump(mode="json") for c in categories]},
        title="Categories",
    )


@router.post(
    "",
    summary="Create a category",
    status_code=status.HTTP_201_CREATED,
    response_model=CategoryResponse,
)
async def create_category(
    db: DbSession,
    payload: Any = Body(None),
) -> CategoryResponse:
    """Persist a category from the modal form.

    Names must be unique; ``active`` defaults to true when omitted.
    """
    try:
        category = CategoryService(db).create(payload)
        return CategoryResponse(
            message=category_service.CREATED_MESSAGE,
            category=CategoryRead.model_validate(category),
        )
    except FieldValidationError:
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error creating category: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create category",
        ) from e


@router.put(
    "/{category_id}",
    summary="Update existing category",
    response_model=CategoryResponse,
)
async def update_category(
    category_id: int,
    db: DbSession,
    payload: Any = Body(None),
) -> CategoryResponse:
    """Replace the editable fields of a category.

    The category's own name does not count against uniqueness.
    """
    try:
        category = CategoryService(db).update(category_id, payload)
        return CategoryResponse(
            message=category_service.UPDATED_MESSAGE,
            category=CategoryRead.model_validate(category),
        )
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except FieldValidationError:
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error updating category {category_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update category",
        ) from e


@router.delete(
    "/{category_id}",
    summary="Delete category",
    status_code=status.HTTP_303_SEE_OTHER,
    response_class=RedirectResponse,
)
async def delete_category(
    category_id: int,
    request: Request,
    db: DbSession,
) -> RedirectResponse:
    """Permanently delete a category and redirect back with a success flash.

    Products in the category are kept and left without a category.
    """
    try:
        CategoryService(db).delete(category_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except SQLAlchemyError as e:
        logger.error(f"Database error deleting category {category_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete category",
        ) from e

    flash(request, "success", category_service.DELETED_MESSAGE)
    return RedirectResponse(back_url(request, "/categories"), status_code=status.HTTP_303_SEE_OTHER)
