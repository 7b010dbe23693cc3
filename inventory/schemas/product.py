from __future__ import annotations

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _quantize_price(v: Decimal) -> Decimal:
    # Aliniază la NUMERIC(12,2) și evită erori de reprezentare
    return v.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _strip_or_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    return v or None


class ProductWrite(BaseModel):
    """
    Payload pentru create/update (înlocuire completă a câmpurilor editabile).

    Aici doar normalizăm (strip, cenți); regulile de business
    (nume ne-gol, preț/cantitate >= 0, lungimi) sunt în `services.validation`.
    `id`, `createdAt`, `updatedAt` trimise de client sunt ignorate.
    """
    name: str
    description: Optional[str] = None
    price: Decimal
    quantity: int
    category: Optional[str] = None
    sku: Optional[str] = None

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [
                {
                    "name": "Laptop",
                    "description": "High-performance laptop",
                    "price": "1299.99",
                    "quantity": 10,
                    "category": "Electronics",
                    "sku": "LAP-001",
                }
            ]
        },
    )

    # --- Validators ---
    @field_validator("name")
    @classmethod
    def _name_strip(cls, v: str) -> str:
        return v.strip()

    @field_validator("description", "category", "sku")
    @classmethod
    def _optional_strip(cls, v: Optional[str]) -> Optional[str]:
        return _strip_or_none(v)

    @field_validator("price")
    @classmethod
    def _price_quantize(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("price must be a finite number")
        return _quantize_price(v)


class ProductCreate(ProductWrite):
    """Payload pentru creare produs."""
    pass


class ProductUpdate(ProductWrite):
    """Payload pentru update (PUT = toate câmpurile editabile)."""
    pass


class ProductRead(BaseModel):
    """Răspuns pentru produs."""
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    quantity: int
    category: Optional[str] = None
    sku: Optional[str] = None
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    model_config = ConfigDict(from_attributes=True)
