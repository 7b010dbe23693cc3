# tests/test_services.py
from __future__ import annotations

import threading
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from inventory.core import metrics
from inventory.core.errors import (
    ProductConflictError,
    ProductNotFoundError,
    ProductValidationError,
)
from inventory.schemas.product import ProductCreate, ProductUpdate
from inventory.services import product as service


def _create(db: Session, name: str, quantity: int = 1, **extra) -> object:
    data = ProductCreate(name=name, price=Decimal("9.99"), quantity=quantity, **extra)
    return service.create_product(db, data)


def test_create_then_get_returns_equal_record(db: Session):
    p = _create(db, "Widget", quantity=7, category="Tools", sku="W-1", description="small")
    got = service.get_product_by_id(db, p.id)
    assert got.id == p.id
    assert (got.name, got.description, got.price, got.quantity, got.category, got.sku) == (
        "Widget", "small", Decimal("9.99"), 7, "Tools", "W-1",
    )
    assert got.created_at == got.updated_at


def test_create_increments_created_counter_only_on_success(db: Session):
    before = metrics.counter_value("products_created")
    _create(db, "Counted")
    assert metrics.counter_value("products_created") == before + 1

    with pytest.raises(ProductConflictError):
        _create(db, "Counted")
    with pytest.raises(ProductValidationError):
        _create(db, "Bad", quantity=-1)
    assert metrics.counter_value("products_created") == before + 1


def test_duplicate_sku_conflict_reports_field(db: Session):
    _create(db, "First", sku="DUP-1")
    with pytest.raises(ProductConflictError) as exc:
        _create(db, "Second", sku="DUP-1")
    assert exc.value.field == "sku"
    # nicio scriere parțială
    assert [p.name for p in service.get_all_products(db)] == ["First"]


def test_update_keeps_id_and_created_at(db: Session):
    p = _create(db, "Chair", quantity=3)
    created_at, updated_at = p.created_at, p.updated_at
    before = metrics.counter_value("products_updated")

    upd = service.update_product(
        db, p.id, ProductUpdate(name="Chair v2", price=Decimal("12.00"), quantity=0)
    )
    assert upd.id == p.id
    assert upd.created_at == created_at
    assert upd.updated_at >= updated_at
    assert upd.name == "Chair v2"
    assert upd.quantity == 0
    assert metrics.counter_value("products_updated") == before + 1


def test_update_missing_raises_not_found(db: Session):
    before = metrics.counter_value("products_updated")
    with pytest.raises(ProductNotFoundError):
        service.update_product(db, 404, ProductUpdate(name="x", price=Decimal("1"), quantity=1))
    assert metrics.counter_value("products_updated") == before


def test_update_revalidates_fields(db: Session):
    p = _create(db, "Desk")
    before = metrics.counter_value("products_updated")
    with pytest.raises(ProductValidationError) as exc:
        service.update_product(db, p.id, ProductUpdate(name="Desk", price=Decimal("-0.50"), quantity=1))
    assert [e["field"] for e in exc.value.errors] == ["price"]
    assert metrics.counter_value("products_updated") == before
    assert service.get_product_by_id(db, p.id).price == Decimal("9.99")


def test_update_conflict_leaves_record_and_counter(db: Session):
    a = _create(db, "Sofa", sku="SOFA-1")
    _create(db, "Bed", sku="BED-1")
    before = metrics.counter_value("products_updated")

    with pytest.raises(ProductConflictError) as exc:
        service.update_product(
            db, a.id, ProductUpdate(name="Sofa", price=Decimal("9.99"), quantity=1, sku="BED-1")
        )
    assert exc.value.field == "sku"
    assert metrics.counter_value("products_updated") == before

    got = service.get_product_by_id(db, a.id)
    assert (got.name, got.sku) == ("Sofa", "SOFA-1")


def test_delete_then_get_raises_not_found(db: Session):
    p = _create(db, "Temp")
    before = metrics.counter_value("products_deleted")
    service.delete_product(db, p.id)
    assert metrics.counter_value("products_deleted") == before + 1

    with pytest.raises(ProductNotFoundError):
        service.get_product_by_id(db, p.id)

    # al doilea delete eșuează fără să incrementeze
    with pytest.raises(ProductNotFoundError):
        service.delete_product(db, p.id)
    assert metrics.counter_value("products_deleted") == before + 1


def test_lookup_by_name_and_sku(db: Session):
    p = _create(db, "Cable", sku="CBL-2M")
    assert service.get_product_by_name(db, "Cable").id == p.id
    assert service.get_product_by_sku(db, "CBL-2M").id == p.id
    with pytest.raises(ProductNotFoundError):
        service.get_product_by_name(db, "cable")
    with pytest.raises(ProductNotFoundError):
        service.get_product_by_sku(db, "CBL-3M")


def test_stock_queries_match_quantities(db: Session):
    quantities = {"p0": 0, "p1": 1, "p2": 2, "p5": 5, "p0b": 0, "p9": 9}
    for name, qty in quantities.items():
        _create(db, name, quantity=qty)

    for t in (0, 1, 3, 6, 10):
        got = {p.name for p in service.get_low_stock_products(db, t)}
        assert got == {n for n, q in quantities.items() if q < t}, t

    assert {p.name for p in service.get_out_of_stock_products(db)} == {"p0", "p0b"}
    assert service.get_in_stock_product_count(db) == 4
    assert service.get_total_inventory_count(db) == sum(quantities.values())


def test_counters_are_safe_under_concurrent_increments():
    before = metrics.counter_value("products_created")

    def bump():
        for _ in range(500):
            metrics.PRODUCTS_CREATED.inc()

    threads = [threading.Thread(target=bump) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert metrics.counter_value("products_created") == before + 4000
