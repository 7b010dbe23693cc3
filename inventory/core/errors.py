"""
Erori de domeniu pentru produse.

Ridicate de persistență/servicii; mapate o singură dată la coduri HTTP
în `inventory.main` (400 / 404 / 409).
"""
from __future__ import annotations

from typing import List, Optional, TypedDict


class FieldError(TypedDict):
    field: str
    message: str


class InventoryError(Exception):
    """Bază pentru toate erorile de domeniu."""
    status_code: int = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ProductNotFoundError(InventoryError):
    """Produsul căutat (după id/nume/SKU) nu există."""
    status_code = 404

    @classmethod
    def for_field(cls, field: str, value: object) -> "ProductNotFoundError":
        return cls(f"Product not found with {field}: {value}")


class ProductConflictError(InventoryError):
    """Încălcare de unicitate pe `name` sau `sku`."""
    status_code = 409

    def __init__(self, message: str = "Product name or SKU already exists.", field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class ProductValidationError(InventoryError):
    """Câmpuri invalide (nume gol, preț/cantitate negative etc.)."""
    status_code = 400

    def __init__(self, errors: List[FieldError]) -> None:
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        super().__init__(summary or "Invalid product")
        self.errors = errors


__all__ = [
    "FieldError",
    "InventoryError",
    "ProductNotFoundError",
    "ProductConflictError",
    "ProductValidationError",
]
