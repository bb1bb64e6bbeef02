from __future__ import annotations

from decimal import Decimal

import pytest

from app.services.exceptions import EntityNotFoundError
from app.utils.validators import FieldValidationError


def test_create_attaches_category(category_service, product_service, product_payload):
    electronics = category_service.create({"name": "Electronics"})

    product = product_service.create(product_payload(category_id=electronics.id))

    assert product.id is not None
    assert product.price == Decimal("9.99")
    assert product.stock == 100
    assert product.category is not None
    assert product.category.name == "Electronics"


def test_create_without_category(product_service, product_payload):
    product = product_service.create(product_payload())

    assert product.category_id is None
    assert product.category is None


def test_price_is_rounded_to_cents(product_service, product_payload):
    product = product_service.create(product_payload(price="10.005"))

    assert product.price == Decimal("10.01")


@pytest.mark.parametrize("field", ["price", "stock"])
def test_negative_amounts_are_rejected_on_create(product_service, product_payload, field):
    with pytest.raises(FieldValidationError) as excinfo:
        product_service.create(product_payload(**{field: -1}))

    assert excinfo.value.errors == {field: [f"The {field} field must be at least 0."]}
    assert product_service.list() == []


@pytest.mark.parametrize("field", ["price", "stock"])
def test_negative_amounts_are_rejected_on_update(product_service, product_payload, field):
    product = product_service.create(product_payload())

    with pytest.raises(FieldValidationError):
        product_service.update(product.id, product_payload(**{field: -5}))

    unchanged = product_service.get(product.id)
    assert unchanged.price == Decimal("9.99")
    assert unchanged.stock == 100


def test_unknown_category_is_rejected(product_service, product_payload):
    with pytest.raises(FieldValidationError) as excinfo:
        product_service.create(product_payload(category_id=4242))

    assert excinfo.value.errors == {"category_id": ["The selected category id is invalid."]}


def test_unknown_category_is_rejected_on_update(product_service, product_payload):
    product = product_service.create(product_payload())

    with pytest.raises(FieldValidationError) as excinfo:
        product_service.update(product.id, product_payload(category_id=4242))

    assert "category_id" in excinfo.value.errors


def test_status_must_be_known(product_service, product_payload):
    with pytest.raises(FieldValidationError) as excinfo:
        product_service.create(product_payload(status="archived"))

    assert excinfo.value.errors == {"status": ["The selected status is invalid."]}


def test_required_fields(product_service):
    with pytest.raises(FieldValidationError) as excinfo:
        product_service.create({})

    assert set(excinfo.value.errors) == {"name", "price", "stock", "status"}


def test_name_is_not_unique(product_service, product_payload):
    product_service.create(product_payload())
    product_service.create(product_payload())

    assert len(product_service.list()) == 2


def test_update_with_identical_fields_only_advances_updated_at(product_service, product_payload):
    payload = product_payload()
    product = product_service.create(payload)
    before = {
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "stock": product.stock,
        "status": product.status,
        "category_id": product.category_id,
        "created_at": product.created_at,
    }
    previous_updated_at = product.updated_at

    updated = product_service.update(product.id, payload)

    after = {key: getattr(updated, key) for key in before}
    assert after == before
    assert updated.updated_at > previous_updated_at


def test_update_moves_product_between_categories(category_service, product_service, product_payload):
    books = category_service.create({"name": "Books"})
    music = category_service.create({"name": "Music"})
    product = product_service.create(product_payload(category_id=books.id))

    updated = product_service.update(product.id, product_payload(category_id=music.id))

    assert updated.category.name == "Music"


def test_list_loads_categories_newest_first(category_service, product_service, product_payload):
    books = category_service.create({"name": "Books"})
    older = product_service.create(product_payload(name="Older", category_id=books.id))
    newer = product_service.create(product_payload(name="Newer"))

    rows = product_service.list()

    assert [p.id for p in rows] == [newer.id, older.id]
    assert rows[1].category.name == "Books"
    assert rows[0].category is None


def test_update_missing_product_raises_not_found(product_service, product_payload):
    with pytest.raises(EntityNotFoundError):
        product_service.update(999, product_payload())


def test_delete_removes_row(product_service, product_payload):
    product = product_service.create(product_payload())

    product_service.delete(product.id)

    with pytest.raises(EntityNotFoundError):
        product_service.get(product.id)


def test_delete_missing_product_raises_not_found(product_service):
    with pytest.raises(EntityNotFoundError):
        product_service.delete(999)


# ===== COLUMN LIMITS =====


def test_price_at_column_maximum_is_stored(product_service, product_payload):
    product = product_service.create(product_payload(price="99999999.99"))

    assert product.price == Decimal("99999999.99")


@pytest.mark.parametrize("price", ["100000000.00", 1e30, "1e30"])
def test_price_past_column_maximum_is_rejected(product_service, product_payload, price):
    with pytest.raises(FieldValidationError) as excinfo:
        product_service.create(product_payload(price=price))

    assert excinfo.value.errors == {"price": ["The price field must not be greater than 99999999.99."]}
    assert product_service.list() == []


def test_stock_at_integer_maximum_is_stored(product_service, product_payload):
    product = product_service.create(product_payload(stock=2147483647))

    assert product.stock == 2147483647


@pytest.mark.parametrize("stock", [2147483648, 10**20])
def test_stock_past_integer_maximum_is_rejected(product_service, product_payload, stock):
    with pytest.raises(FieldValidationError) as excinfo:
        product_service.create(product_payload(stock=stock))

    assert excinfo.value.errors == {"stock": ["The stock field must not be greater than 2147483647."]}


@pytest.mark.parametrize("category_id", [2147483647, 2147483648, 10**20])
def test_out_of_range_category_id_is_invalid(product_service, product_payload, category_id):
    with pytest.raises(FieldValidationError) as excinfo:
        product_service.create(product_payload(category_id=category_id))

    assert excinfo.value.errors == {"category_id": ["The selected category id is invalid."]}


def test_out_of_range_id_is_not_found(product_service, product_payload):
    with pytest.raises(EntityNotFoundError):
        product_service.update(10**20, product_payload())
