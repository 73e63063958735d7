import pytest
from fastapi import HTTPException
from sqlalchemy import text

from mixmodas import services
from mixmodas.database import SAMPLE_PRODUCT, Store, init_schema
from mixmodas.schemas import ProductFields


@pytest.fixture
def store(test_settings):
    """Provide an isolated store for each test."""
    store = Store.open(test_settings)
    yield store
    store.dispose()


def test_list_products_empty(store):
    assert services.list_products(store) == []


def test_create_product_assigns_ids(store):
    first = services.create_product(store, ProductFields(name="Dress", price=59.9))
    second = services.create_product(store, ProductFields(name="Hat", price=15))
    assert second.id > first.id
    assert first.description == ""
    assert first.quantity == 0
    assert first.category == "Other"
    assert first.image_path is None


def test_category_filter_ignores_case(store):
    services.create_product(store, ProductFields(name="Tee", price=10, category="Shirts"))
    services.create_product(store, ProductFields(name="Jeans", price=80, category="Pants"))

    names = [p.name for p in services.list_products(store, "sHIRTS")]
    assert names == ["Tee"]
    assert services.list_products(store, "shoes") == []


def test_duplicate_user_keeps_first_record(store):
    services.create_user(store, "Ana", "ana@example.com", "hash-1")
    with pytest.raises(HTTPException) as exc_info:
        services.create_user(store, "Other", "ana@example.com", "hash-2")
    assert exc_info.value.status_code == 500

    user = services.find_user_by_email(store, "ana@example.com")
    assert user.name == "Ana"
    assert user.password_hash == "hash-1"
    assert user.role == "user"


def test_find_unknown_user(store):
    assert services.find_user_by_email(store, "nobody@example.com") is None


def test_query_failure_is_reported_generically(store):
    with store.engine.begin() as conn:
        conn.execute(text("DROP TABLE wishlist_entries"))
        conn.execute(text("DROP TABLE products"))
    with pytest.raises(HTTPException) as exc_info:
        services.list_products(store)
    assert exc_info.value.status_code == 500
    assert exc_info.value.detail == "Error fetching products"


def test_sample_product_seeded_once(test_settings):
    store = Store.open(test_settings.model_copy(update={"seed_sample_product": True}))
    init_schema(store.engine)
    init_schema(store.engine)

    products = services.list_products(store)
    assert [p.name for p in products] == [SAMPLE_PRODUCT["name"]]
    assert products[0].price == pytest.approx(29.99)
    store.dispose()


def test_unreachable_database_is_unavailable(test_settings, tmp_path):
    broken = test_settings.model_copy(
        update={"database_url": f"sqlite:///{tmp_path / 'missing' / 'db.sqlite'}"}
    )
    assert Store.open(broken).available is False
