from __future__ import annotations

import logging
import re
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory.core.errors import ProductConflictError
from inventory.models.product import Product

logger = logging.getLogger(__name__)

# coduri/mesaje pentru UNIQUE violation (pg: 23505; sqlite: "UNIQUE constraint failed")
_UNIQUE_PGCODE = "23505"

# coloana implicată: numele constrângerii (naming convention), DETAIL-ul pg sau mesajul sqlite;
# prima potrivire câștigă, înaintea valorii duplicate din DETAIL
_UNIQUE_FIELD_RE = re.compile(
    r'unique constraint "uq_products_(name|sku)"'
    r"|Key \((name|sku)\)="
    r"|UNIQUE constraint failed: (?:\w+\.)?products\.(name|sku)\b"
)


def _unique_violation_field(exc: IntegrityError) -> Optional[str]:
    """
    Dacă eroarea e o încălcare de unicitate, întoarce câmpul implicat
    ("name" / "sku" / "" când nu se poate deduce). Altfel None.
    """
    orig = getattr(exc, "orig", None)
    pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    msg = str(orig or exc)
    if pgcode is not None:
        if pgcode != _UNIQUE_PGCODE:
            return None
    elif "unique constraint" not in msg.lower():
        return None
    m = _UNIQUE_FIELD_RE.search(msg)
    if m is None:
        return ""
    return next(g for g in m.groups() if g)


# -------------------------- Reads --------------------------

def get(db: Session, product_id: int) -> Optional[Product]:
    """Returnează produsul după ID (sau None)."""
    return db.get(Product, product_id)


def get_by_name(db: Session, name: str) -> Optional[Product]:
    """Returnează produsul după nume (unic) sau None."""
    if not name:
        return None
    q = select(Product).where(Product.name == name)
    return db.execute(q).scalar_one_or_none()


def get_by_sku(db: Session, sku: str) -> Optional[Product]:
    """Returnează produsul după SKU (sau None)."""
    if not sku:
        return None
    q = select(Product).where(Product.sku == sku)
    return db.execute(q).scalar_one_or_none()


def exists_by_id(db: Session, product_id: int) -> bool:
    q = select(func.count(Product.id)).where(Product.id == product_id)
    return bool(db.scalar(q))


def list_all(db: Session) -> List[Product]:
    return list(db.execute(select(Product).order_by(Product.id.asc())).scalars().all())


def list_by_category(db: Session, category: str) -> List[Product]:
    """Potrivire exactă pe categorie (case-sensitive)."""
    q = select(Product).where(Product.category == category).order_by(Product.id.asc())
    return list(db.execute(q).scalars().all())


def list_by_quantity_below(db: Session, threshold: int) -> List[Product]:
    """Produse cu `quantity < threshold` (strict)."""
    q = select(Product).where(Product.quantity < threshold).order_by(Product.id.asc())
    return list(db.execute(q).scalars().all())


def list_out_of_stock(db: Session) -> List[Product]:
    q = select(Product).where(Product.quantity == 0).order_by(Product.id.asc())
    return list(db.execute(q).scalars().all())


def count_in_stock(db: Session) -> int:
    q = select(func.count(Product.id)).where(Product.quantity > 0)
    return int(db.scalar(q) or 0)


def sum_quantity(db: Session) -> int:
    """Suma cantităților; 0 pe tabel gol (SUM întoarce NULL)."""
    q = select(func.coalesce(func.sum(Product.quantity), 0))
    return int(db.scalar(q) or 0)


# -------------------------- Mutations --------------------------

def save(db: Session, obj: Product) -> Product:
    """
    Insert (fără id) sau înlocuire completă (obiect deja persistat).
    Ridică ProductConflictError pe UNIQUE (name/sku); rollback fără scriere parțială.
    """
    db.add(obj)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        field = _unique_violation_field(e)
        if field is None:
            # CHECK / NOT NULL: lăsăm handler-ul global să mapeze
            raise
        if field:
            message = f"Product {field} already exists."
        else:
            message = "Product name or SKU already exists."
        logger.warning("Uniqueness violation on save: %s", message)
        raise ProductConflictError(message, field=field or None) from e
    db.refresh(obj)
    return obj


def delete_by_id(db: Session, product_id: int) -> None:
    """Șterge rândul; verificarea existenței e responsabilitatea apelantului."""
    db.execute(delete(Product).where(Product.id == product_id))
    db.commit()
