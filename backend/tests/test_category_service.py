from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from app.db.models.category import Category
from app.db.models.product import Product
from app.services.exceptions import EntityNotFoundError
from app.utils.validators import FieldValidationError


def test_create_applies_defaults(category_service):
    category = category_service.create({"name": "Electronics"})

    assert category.id is not None
    assert category.name == "Electronics"
    assert category.description is None
    assert category.color is None
    assert category.active is True
    assert category.created_at is not None
    assert category.updated_at is not None


def test_create_then_list_contains_exactly_one_new_row(category_service, category_payload):
    payload = category_payload(name="Garden", description="Outdoor tools", color="#228B22", active=False)

    created = category_service.create(payload)
    rows = category_service.list()

    assert [row.id for row in rows] == [created.id]
    row = rows[0]
    assert (row.name, row.description, row.color, row.active) == ("Garden", "Outdoor tools", "#228B22", False)


def test_list_is_newest_first(category_service):
    first = category_service.create({"name": "First"})
    second = category_service.create({"name": "Second"})

    assert [c.id for c in category_service.list()] == [second.id, first.id]


def test_list_active_skips_inactive_categories(category_service):
    category_service.create({"name": "Visible"})
    category_service.create({"name": "Hidden", "active": False})

    assert [c.name for c in category_service.list_active()] == ["Visible"]


def test_duplicate_name_is_rejected(category_service):
    category_service.create({"name": "Books"})

    with pytest.raises(FieldValidationError) as excinfo:
        category_service.create({"name": "Books"})

    assert excinfo.value.errors == {"name": ["The name has already been taken."]}
    assert len(category_service.list()) == 1


def test_name_is_trimmed_before_uniqueness_check(category_service):
    category_service.create({"name": "Books"})

    with pytest.raises(FieldValidationError):
        category_service.create({"name": "  Books  "})


def test_update_to_another_rows_name_is_rejected(category_service):
    category_service.create({"name": "Books"})
    music = category_service.create({"name": "Music"})

    with pytest.raises(FieldValidationError) as excinfo:
        category_service.update(music.id, {"name": "Books"})

    assert "name" in excinfo.value.errors


def test_update_keeping_own_name_succeeds(category_service):
    books = category_service.create({"name": "Books"})

    updated = category_service.update(books.id, {"name": "Books", "description": "Paper and ebooks"})

    assert updated.name == "Books"
    assert updated.description == "Paper and ebooks"


def test_update_leaves_absent_optional_fields_untouched(category_service):
    books = category_service.create({"name": "Books", "color": "#FF0000", "active": False})

    updated = category_service.update(books.id, {"name": "Novels"})

    assert updated.color == "#FF0000"
    assert updated.active is False


def test_update_clears_fields_sent_as_null(category_service):
    books = category_service.create({"name": "Books", "description": "All kinds"})

    updated = category_service.update(books.id, {"name": "Books", "description": None})

    assert updated.description is None


def test_update_bumps_updated_at(category_service):
    books = category_service.create({"name": "Books"})
    created_at, before = books.created_at, books.updated_at

    updated = category_service.update(books.id, {"name": "Books"})

    assert updated.created_at == created_at
    assert updated.updated_at > before


def test_color_longer_than_seven_characters_is_rejected(category_service):
    with pytest.raises(FieldValidationError) as excinfo:
        category_service.create({"name": "Toys", "color": "#12345678"})

    assert excinfo.value.errors == {"color": ["The color field must not be greater than 7 characters."]}


def test_update_missing_category_raises_not_found(category_service):
    with pytest.raises(EntityNotFoundError):
        category_service.update(999, {"name": "Ghost"})


def test_delete_missing_category_raises_not_found(category_service):
    with pytest.raises(EntityNotFoundError):
        category_service.delete(999)


def test_delete_keeps_products_and_detaches_them(db, category_service, product_service):
    toys = category_service.create({"name": "Toys"})
    product = product_service.create(
        {"name": "Kite", "price": 12, "stock": 3, "status": "active", "category_id": toys.id}
    )

    category_service.delete(toys.id)

    remaining = db.get(Product, product.id)
    db.refresh(remaining)
    assert remaining is not None
    assert remaining.category_id is None
    assert category_service.list() == []


def test_create_rejects_null_active(category_service):
    with pytest.raises(FieldValidationError) as excinfo:
        category_service.create({"name": "Books", "active": None})

    assert excinfo.value.errors == {"active": ["The active field must be true or false."]}
    assert category_service.list() == []


@pytest.mark.parametrize("active", [None, ""])
def test_update_rejects_null_active(category_service, active):
    books = category_service.create({"name": "Books", "active": False})

    with pytest.raises(FieldValidationError) as excinfo:
        category_service.update(books.id, {"name": "Books", "active": active})

    assert excinfo.value.errors == {"active": ["The active field must be true or false."]}
    assert category_service.get(books.id).active is False


def test_duplicate_name_at_commit_is_a_name_error(db, category_service):
    category_service.create({"name": "Books"})
    db.add(Category(name="Books", active=True))

    with pytest.raises(FieldValidationError) as excinfo:
        category_service._commit({"name": "Books"})

    assert excinfo.value.errors == {"name": ["The name has already been taken."]}


def test_other_integrity_errors_are_not_reported_as_duplicates(db, category_service):
    books = category_service.create({"name": "Books"})
    books.active = None

    with pytest.raises(IntegrityError):
        category_service._commit({"name": "Books"})

    db.expire_all()
    assert category_service.get(books.id).active is True


def test_out_of_range_id_is_not_found(category_service):
    with pytest.raises(EntityNotFoundError):
        category_service.delete(10**20)
