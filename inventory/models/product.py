from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory.database import Base

NAME_MAX_LEN = 255
DESCRIPTION_MAX_LEN = 500
CATEGORY_MAX_LEN = 255
SKU_MAX_LEN = 64


class Product(Base):
    """
    Produs din inventar.

    Note:
    - `name` și `sku` sunt UNIQUE la nivel DB; mai multe rânduri cu `sku` NULL sunt permise.
    - `price`/`quantity` au CHECK >= 0 (validarea din servicii rulează înainte).
    - `quantity == 0` înseamnă out-of-stock.
    - Timestamp-urile sunt setate de serviciu, nu de DB (createdAt o singură dată).
    """
    __tablename__ = "products"
    __table_args__ = (
        Index("ix_products_category", "category"),
        Index("ix_products_quantity", "quantity"),
        CheckConstraint("price >= 0", name="price_nonnegative"),
        CheckConstraint("quantity >= 0", name="quantity_nonnegative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(NAME_MAX_LEN), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(DESCRIPTION_MAX_LEN), nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str | None] = mapped_column(String(CATEGORY_MAX_LEN), nullable=True)
    sku: Mapped[str | None] = mapped_column(String(SKU_MAX_LEN), nullable=True, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        # scurtează numele în repr pentru loguri mai curate
        name_preview = (self.name[:32] + "…") if self.name and len(self.name) > 33 else self.name
        return f"<Product id={self.id!r} name={name_preview!r} sku={self.sku!r} qty={self.quantity!r}>"
