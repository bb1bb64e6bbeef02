"""Modal form controllers for creating and editing entities over HTTP.

A controller owns one form instance: its field values, per-field errors and
the ``closed -> open -> submitting -> closed | open-with-errors`` lifecycle.
Client-side checks only catch obviously invalid input; the server validates
every submission again.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

import httpx

logger = logging.getLogger(__name__)

CSRF_HEADER = "X-CSRF-TOKEN"
GENERIC_ERROR = "Something went wrong while saving. Please try again."
HTTP_422_UNPROCESSABLE = 422


class FormMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class FormStatus(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    SUBMITTING = "submitting"


class TransportError(RuntimeError):
    """The request never produced a usable response (network or decoding failure)."""


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def _parse_decimal(value: str) -> Decimal | None:
    try:
        number = Decimal(value.strip())
    except (InvalidOperation, AttributeError):
        return None
    return number if number.is_finite() else None


def _parse_int(value: str) -> int | None:
    try:
        return int(value.strip())
    except (ValueError, AttributeError):
        return None


class EntityForm:
    """Field layout and conversions for one entity kind."""

    resource: str = ""
    entity_key: str = ""

    def defaults(self) -> dict[str, Any]:
        raise NotImplementedError

    def seed(self, entity: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    def pre_validate(self, data: dict[str, Any]) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not str(data.get("name", "")).strip():
            errors["name"] = "The name is required."
        return errors

    def serialize(self, data: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    def collection_url(self) -> str:
        return f"/{self.resource}"

    def entity_url(self, entity_id: int) -> str:
        return f"/{self.resource}/{entity_id}"


class CategoryForm(EntityForm):
    resource = "categories"
    entity_key = "category"
    default_color = "#000000"

    def defaults(self) -> dict[str, Any]:
        return {"name": "", "description": "", "color": self.default_color, "active": True}

    def seed(self, entity: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": _as_text(entity.get("name")),
            "description": _as_text(entity.get("description")),
            "color": entity.get("color") or self.default_color,
            "active": bool(entity.get("active", True)),
        }

    def serialize(self, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": data["name"],
            "description": data["description"] or None,
            "color": data["color"] or None,
            "active": bool(data["active"]),
        }


class ProductForm(EntityForm):
    resource = "products"
    entity_key = "product"

    def defaults(self) -> dict[str, Any]:
        return {
            "name": "",
            "description": "",
            "price": "",
            "stock": "0",
            "status": "active",
            "category_id": "",
        }

    def seed(self, entity: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": _as_text(entity.get("name")),
            "description": _as_text(entity.get("description")),
            "price": _as_text(entity.get("price")),
            "stock": _as_text(entity.get("stock")),
            "status": entity.get("status") or "active",
            "category_id": _as_text(entity.get("category_id")),
        }

    def pre_validate(self, data: dict[str, Any]) -> dict[str, str]:
        errors = super().pre_validate(data)

        price = _parse_decimal(_as_text(data.get("price")))
        if price is None or price < 0:
            errors["price"] = "The price must be a positive number."

        stock = _parse_int(_as_text(data.get("stock")))
        if stock is None or stock < 0:
            errors["stock"] = "The stock must be a positive whole number."

        return errors

    def serialize(self, data: dict[str, Any]) -> dict[str, Any]:
        category_id = _parse_int(_as_text(data.get("category_id")))
        return {
            "name": data["name"],
            "description": data["description"] or None,
            "price": float(_parse_decimal(_as_text(data["price"]))),
            "stock": _parse_int(_as_text(data["stock"])),
            "status": data["status"],
            "category_id": category_id,
        }


class FormController:
    """State machine for one create/edit modal."""

    def __init__(
        self,
        form: EntityForm,
        http: httpx.Client,
        csrf_token: str,
        on_success: Callable[[dict[str, Any]], None] | None = None,
    ):
        self.form = form
        self.http = http
        self.csrf_token = csrf_token
        self.on_success = on_success
        self.status = FormStatus.CLOSED
        self.mode: FormMode | None = None
        self.target: dict[str, Any] | None = None
        self.data: dict[str, Any] = form.defaults()
        self.errors: dict[str, str] = {}
        self.general_error: str | None = None

    @property
    def is_open(self) -> bool:
        return self.status is not FormStatus.CLOSED

    @property
    def processing(self) -> bool:
        return self.status is FormStatus.SUBMITTING

    def open_create(self) -> None:
        self._open(FormMode.CREATE, None, self.form.defaults())

    def open_edit(self, entity: dict[str, Any]) -> None:
        self._open(FormMode.EDIT, entity, self.form.seed(entity))

    def close(self) -> None:
        self.status = FormStatus.CLOSED
        self.mode = None
        self.target = None
        self.data = self.form.defaults()
        self.errors = {}
        self.general_error = None

    def change(self, field: str, value: Any) -> None:
        """Set a field; any error shown for it is cleared."""
        if field not in self.data:
            raise KeyError(f"Unknown field {field!r} for {self.form.entity_key}")
        self.data[field] = value
        self.errors.pop(field, None)

    def submit(self) -> bool:
        """Send the form. Returns True when the server accepted it.

        Ignored while a previous submission is in flight.
        """
        if self.status is not FormStatus.OPEN:
            return False

        self.general_error = None
        self.errors = self.form.pre_validate(self.data)
        if self.errors:
            return False

        self.status = FormStatus.SUBMITTING
        try:
            response = self._send(self.form.serialize(self.data))
            body = self._decode(response)
        except TransportError as e:
            logger.error(f"Error saving {self.form.entity_key}: {e}")
            self._fail(GENERIC_ERROR)
            return False

        if response.is_success:
            entity = body.get(self.form.entity_key) if isinstance(body, dict) else None
            if entity is None:
                logger.error(f"Response for {self.form.entity_key} carried no entity: {body!r}")
                self._fail(GENERIC_ERROR)
                return False
            # Saved server-side; the modal closes even if the callback fails
            self.close()
            if self.on_success is not None:
                self.on_success(entity)
            return True

        if response.status_code == HTTP_422_UNPROCESSABLE and isinstance(body, dict) and body.get("errors"):
            self.errors = {
                field: messages[0] if isinstance(messages, list) and messages else str(messages)
                for field, messages in body["errors"].items()
            }
            self.status = FormStatus.OPEN
            return False

        logger.error(f"Error saving {self.form.entity_key}: HTTP {response.status_code} {body!r}")
        self._fail(GENERIC_ERROR)
        return False

    def _open(self, mode: FormMode, entity: dict[str, Any] | None, data: dict[str, Any]) -> None:
        self.status = FormStatus.OPEN
        self.mode = mode
        self.target = entity
        self.data = data
        self.errors = {}
        self.general_error = None

    def _fail(self, message: str) -> None:
        self.general_error = message
        self.status = FormStatus.OPEN

    def _send(self, payload: dict[str, Any]) -> httpx.Response:
        if self.mode is FormMode.EDIT:
            method, url = "PUT", self.form.entity_url(self.target["id"])
        else:
            method, url = "POST", self.form.collection_url()
        try:
            return self.http.request(
                method,
                url,
                json=payload,
                headers={CSRF_HEADER: self.csrf_token, "Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise TransportError(str(e)) from e

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Unreadable response body (HTTP {response.status_code})") from e
