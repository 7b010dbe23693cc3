from __future__ import annotations

import logging
import re
from decimal import Decimal
from typing import List, Optional

from inventory.core.errors import FieldError, ProductValidationError
from inventory.models.product import (
    CATEGORY_MAX_LEN,
    DESCRIPTION_MAX_LEN,
    NAME_MAX_LEN,
    SKU_MAX_LEN,
)
from inventory.schemas.product import ProductWrite

logger = logging.getLogger(__name__)

# SKU: litere/cifre + . _ - ; fără spații
SKU_RE = re.compile(r"^[A-Za-z0-9._-]+$")

# NUMERIC(12,2) → max 10 cifre înainte de virgulă
PRICE_MAX = Decimal("9999999999.99")
# INTEGER pe 32 biți (Postgres)
QUANTITY_MAX = 2**31 - 1


def _check_length(errors: List[FieldError], field: str, value: Optional[str], max_len: int) -> None:
    if value is not None and len(value) > max_len:
        errors.append({"field": field, "message": f"must be at most {max_len} characters"})


def product_errors(data: ProductWrite) -> List[FieldError]:
    """Returnează lista de erori pe câmpuri (goală dacă payload-ul e valid)."""
    errors: List[FieldError] = []

    if not data.name or not data.name.strip():
        errors.append({"field": "name", "message": "Product name is required"})
    _check_length(errors, "name", data.name, NAME_MAX_LEN)
    _check_length(errors, "description", data.description, DESCRIPTION_MAX_LEN)
    _check_length(errors, "category", data.category, CATEGORY_MAX_LEN)

    if data.price is None:
        errors.append({"field": "price", "message": "Price is required"})
    elif not data.price.is_finite():
        errors.append({"field": "price", "message": "Price must be a finite number"})
    elif data.price < 0:
        errors.append({"field": "price", "message": "Price must not be negative"})
    elif data.price > PRICE_MAX:
        errors.append({"field": "price", "message": f"Price must be at most {PRICE_MAX}"})

    if data.quantity is None:
        errors.append({"field": "quantity", "message": "Quantity is required"})
    elif data.quantity < 0:
        errors.append({"field": "quantity", "message": "Quantity must not be negative"})
    elif data.quantity > QUANTITY_MAX:
        errors.append({"field": "quantity", "message": f"Quantity must be at most {QUANTITY_MAX}"})

    if data.sku is not None:
        _check_length(errors, "sku", data.sku, SKU_MAX_LEN)
        if not SKU_RE.match(data.sku):
            errors.append({"field": "sku", "message": "Invalid SKU (allowed: letters, digits, . _ -)"})

    return errors


def validate_product(data: ProductWrite) -> None:
    """Ridică ProductValidationError dacă payload-ul încalcă regulile de business."""
    errors = product_errors(data)
    if errors:
        logger.warning("Product validation failed: %s", errors)
        raise ProductValidationError(errors)
