"""
Servicii pentru produse (strat între routere și `crud.product`).

- traduce "lipsă" în ProductNotFoundError
- validează payload-urile înainte de persistență (create și update)
- setează createdAt/updatedAt
- incrementează contoarele created/updated/deleted doar după succes
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from inventory.core import metrics
from inventory.core.errors import ProductNotFoundError
from inventory.crud import product as crud
from inventory.models.product import Product
from inventory.schemas.product import ProductCreate, ProductUpdate
from inventory.services.validation import validate_product

logger = logging.getLogger(__name__)

# câmpurile înlocuite integral la update (id/created_at rămân neatinse)
EDITABLE_FIELDS = ("name", "description", "price", "quantity", "category", "sku")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite întoarce datetime naive chiar pentru DateTime(timezone=True)
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _next_updated_at(previous: Optional[datetime]) -> datetime:
    """updatedAt nu scade niciodată, chiar dacă ceasul sistemului sare înapoi."""
    now = _utcnow()
    previous = _as_aware(previous)
    if previous is not None and previous > now:
        return previous
    return now


# -------------------------- Queries --------------------------

def get_all_products(db: Session) -> List[Product]:
    logger.info("Fetching all products")
    return crud.list_all(db)


def get_product_by_id(db: Session, product_id: int) -> Product:
    logger.info("Fetching product with id: %s", product_id)
    obj = crud.get(db, product_id)
    if obj is None:
        logger.warning("Product not found with id: %s", product_id)
        raise ProductNotFoundError.for_field("id", product_id)
    return obj


def get_product_by_name(db: Session, name: str) -> Product:
    logger.info("Fetching product with name: %s", name)
    obj = crud.get_by_name(db, name)
    if obj is None:
        logger.warning("Product not found with name: %s", name)
        raise ProductNotFoundError.for_field("name", name)
    return obj


def get_product_by_sku(db: Session, sku: str) -> Product:
    logger.info("Fetching product with sku: %s", sku)
    obj = crud.get_by_sku(db, sku)
    if obj is None:
        logger.warning("Product not found with sku: %s", sku)
        raise ProductNotFoundError.for_field("sku", sku)
    return obj


def get_products_by_category(db: Session, category: str) -> List[Product]:
    logger.info("Fetching products by category: %s", category)
    return crud.list_by_category(db, category)


def get_low_stock_products(db: Session, threshold: int) -> List[Product]:
    logger.info("Fetching products with quantity less than: %s", threshold)
    return crud.list_by_quantity_below(db, threshold)


def get_out_of_stock_products(db: Session) -> List[Product]:
    logger.info("Fetching out of stock products")
    return crud.list_out_of_stock(db)


def get_in_stock_product_count(db: Session) -> int:
    return crud.count_in_stock(db)


def get_total_inventory_count(db: Session) -> int:
    return crud.sum_quantity(db)


# -------------------------- Commands --------------------------

def create_product(db: Session, data: ProductCreate) -> Product:
    """
    Validează, setează timestamp-urile și persistă.
    Ridică ProductValidationError / ProductConflictError (name sau sku duplicat).
    """
    logger.info("Creating new product: %s", data.name)
    validate_product(data)

    now = _utcnow()
    obj = Product(**{f: getattr(data, f) for f in EDITABLE_FIELDS})
    obj.created_at = now
    obj.updated_at = now

    obj = crud.save(db, obj)
    metrics.PRODUCTS_CREATED.inc()
    logger.info("Product created: %r", obj)
    return obj


def update_product(db: Session, product_id: int, data: ProductUpdate) -> Product:
    """
    Înlocuiește integral câmpurile editabile (fără merge parțial).
    `id` și `created_at` nu se schimbă; `updated_at` avansează.
    """
    logger.info("Updating product with id: %s", product_id)
    obj = get_product_by_id(db, product_id)
    validate_product(data)

    for field in EDITABLE_FIELDS:
        setattr(obj, field, getattr(data, field))
    obj.updated_at = _next_updated_at(obj.updated_at)

    obj = crud.save(db, obj)
    metrics.PRODUCTS_UPDATED.inc()
    return obj


def delete_product(db: Session, product_id: int) -> None:
    logger.info("Deleting product with id: %s", product_id)
    if not crud.exists_by_id(db, product_id):
        logger.warning("Product not found with id: %s", product_id)
        raise ProductNotFoundError.for_field("id", product_id)
    crud.delete_by_id(db, product_id)
    metrics.PRODUCTS_DELETED.inc()
