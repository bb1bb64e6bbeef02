"""Exception handlers that shape validation failures into per-field 422 bodies."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.utils.validators import FieldValidationError, summarize_errors

logger = logging.getLogger(__name__)

HTTP_422_UNPROCESSABLE = 422


def validation_error_body(errors: dict[str, list[str]]) -> dict:
    return {"message": summarize_errors(errors), "errors": errors}


async def field_validation_handler(request: Request, exc: FieldValidationError) -> JSONResponse:
    logger.info(f"Rejected {request.method} {request.url.path}: {sorted(exc.errors)}")
    return JSONResponse(
        status_code=HTTP_422_UNPROCESSABLE,
        content=validation_error_body(exc.errors),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or path parameters, reported in the same shape."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        key = loc[-1] if loc else "body"
        errors.setdefault(key, []).append(error.get("msg", "Invalid value."))
    return JSONResponse(
        status_code=HTTP_422_UNPROCESSABLE,
        content=validation_error_body(errors),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FieldValidationError, field_validation_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
