"""Client-held list state for the entity screens."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

import httpx

from app.client.forms import (
    CSRF_HEADER,
    CategoryForm,
    EntityForm,
    FormController,
    ProductForm,
    TransportError,
)

logger = logging.getLogger(__name__)


class EntityList:
    """Local copy of the rows shown on a page.

    Mutated only through ``sync``, ``prepend``, ``replace`` and ``remove``.
    """

    def __init__(self, items: Iterable[dict[str, Any]] = ()):
        self.items: list[dict[str, Any]] = list(items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def ids(self) -> list[int]:
        return [item["id"] for item in self.items]

    def find(self, entity_id: int) -> dict[str, Any] | None:
        return next((item for item in self.items if item["id"] == entity_id), None)

    def sync(self, items: Iterable[dict[str, Any]]) -> None:
        self.items = list(items)

    def prepend(self, entity: dict[str, Any]) -> None:
        self.items = [entity, *self.items]

    def replace(self, entity: dict[str, Any]) -> None:
        self.items = [entity if item["id"] == entity["id"] else item for item in self.items]

    def remove(self, entity_id: int) -> None:
        self.items = [item for item in self.items if item["id"] != entity_id]


def always_confirm(message: str) -> bool:
    return True


class EntityPage:
    """One list screen: loads the page payload and applies local mutations."""

    form_class: type[EntityForm] = EntityForm
    collection_key: str = ""
    delete_prompt: str = "Are you sure you want to delete this item?"

    def __init__(self, http: httpx.Client, confirm: Callable[[str], bool] = always_confirm):
        self.http = http
        self.confirm = confirm
        self.form = self.form_class()
        self.rows = EntityList()
        self.props: dict[str, Any] = {}
        self.csrf_token = ""
        self.flash: dict[str, str] = {}

    def load(self) -> dict[str, Any]:
        """Fetch the JSON page payload and resynchronize the rows."""
        try:
            response = self.http.get(
                self.form.collection_url(),
                headers={"X-Inertia": "true", "Accept": "application/json"},
            )
            response.raise_for_status()
            page = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TransportError(f"Could not load {self.form.collection_url()}: {e}") from e

        self.props = page["props"]
        self.csrf_token = self.props.get("csrf_token", "")
        self.flash = self.props.get("flash") or {}
        self.rows.sync(self.props.get(self.collection_key, []))
        return page

    def create_form(self) -> FormController:
        controller = FormController(self.form_class(), self.http, self.csrf_token, on_success=self.rows.prepend)
        controller.open_create()
        return controller

    def edit_form(self, entity: dict[str, Any]) -> FormController:
        controller = FormController(self.form_class(), self.http, self.csrf_token, on_success=self.rows.replace)
        controller.open_edit(entity)
        return controller

    def delete(self, entity_id: int) -> bool:
        """Delete after confirmation; the row is dropped locally once the server acknowledges."""
        if not self.confirm(self.delete_prompt):
            return False

        try:
            response = self.http.delete(
                self.form.entity_url(entity_id),
                headers={CSRF_HEADER: self.csrf_token},
                follow_redirects=False,
            )
        except httpx.HTTPError as e:
            logger.error(f"Error deleting {self.form.entity_key} {entity_id}: {e}")
            return False

        if response.is_success or response.is_redirect:
            self.rows.remove(entity_id)
            return True

        logger.error(f"Error deleting {self.form.entity_key} {entity_id}: HTTP {response.status_code}")
        return False


class CategoriesPage(EntityPage):
    form_class = CategoryForm
    collection_key = "categories"
    delete_prompt = "Are you sure you want to delete this category?"


class ProductsPage(EntityPage):
    form_class = ProductForm
    collection_key = "products"
    delete_prompt = "Are you sure you want to delete this product?"

    @property
    def categories(self) -> list[dict[str, Any]]:
        """Active categories offered by the product form picker."""
        return list(self.props.get("categories", []))
