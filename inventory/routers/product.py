from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session

from inventory.database import get_db
from inventory.schemas.product import ProductCreate, ProductRead, ProductUpdate
from inventory.services import product as service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])

# BIGINT (64 biți): valori în afara intervalului nu ajung la DB → 400
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Notă: rutele statice (/out-of-stock, /stats/...) sunt declarate înaintea
# lui /{product_id}, altfel path-ul ar fi parsat ca id → 400.


@router.get(
    "",
    response_model=List[ProductRead],
    summary="Get all products",
)
def get_all_products(db: Session = Depends(get_db)):
    logger.info("GET /api/products - Fetching all products")
    return service.get_all_products(db)


@router.get(
    "/out-of-stock",
    response_model=List[ProductRead],
    summary="Get out of stock products",
)
def get_out_of_stock_products(db: Session = Depends(get_db)):
    logger.info("GET /api/products/out-of-stock - Fetching out of stock products")
    return service.get_out_of_stock_products(db)


@router.get(
    "/stats/in-stock-count",
    response_model=int,
    summary="Get in-stock product count",
)
def get_in_stock_product_count(db: Session = Depends(get_db)):
    logger.info("GET /api/products/stats/in-stock-count - Fetching in-stock product count")
    return service.get_in_stock_product_count(db)


@router.get(
    "/stats/total-inventory",
    response_model=int,
    summary="Get total inventory count",
)
def get_total_inventory_count(db: Session = Depends(get_db)):
    logger.info("GET /api/products/stats/total-inventory - Fetching total inventory count")
    return service.get_total_inventory_count(db)


@router.get(
    "/name/{name}",
    response_model=ProductRead,
    summary="Get a product by name",
)
def get_product_by_name(name: str, db: Session = Depends(get_db)):
    logger.info("GET /api/products/name/%s - Fetching product by name", name)
    return service.get_product_by_name(db, name)


@router.get(
    "/sku/{sku}",
    response_model=ProductRead,
    summary="Get a product by SKU",
)
def get_product_by_sku(sku: str, db: Session = Depends(get_db)):
    logger.info("GET /api/products/sku/%s - Fetching product by SKU", sku)
    return service.get_product_by_sku(db, sku)


@router.get(
    "/category/{category}",
    response_model=List[ProductRead],
    summary="Get products by category",
)
def get_products_by_category(category: str, db: Session = Depends(get_db)):
    logger.info("GET /api/products/category/%s - Fetching products by category", category)
    return service.get_products_by_category(db, category)


@router.get(
    "/low-stock/{threshold}",
    response_model=List[ProductRead],
    summary="Get products with quantity below a threshold",
)
def get_low_stock_products(
    threshold: int = Path(..., ge=INT64_MIN, le=INT64_MAX),
    db: Session = Depends(get_db),
):
    logger.info("GET /api/products/low-stock/%s - Fetching low stock products", threshold)
    return service.get_low_stock_products(db, threshold)


@router.get(
    "/{product_id}",
    response_model=ProductRead,
    summary="Get a product by id",
)
def get_product(
    product_id: int = Path(..., ge=INT64_MIN, le=INT64_MAX),
    db: Session = Depends(get_db),
):
    logger.info("GET /api/products/%s - Fetching product by ID", product_id)
    return service.get_product_by_id(db, product_id)


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    logger.info("POST /api/products - Creating new product: %s", payload.name)
    return service.create_product(db, payload)


@router.put(
    "/{product_id}",
    response_model=ProductRead,
    summary="Update a product",
)
def update_product(
    payload: ProductUpdate,
    product_id: int = Path(..., ge=INT64_MIN, le=INT64_MAX),
    db: Session = Depends(get_db),
):
    logger.info("PUT /api/products/%s - Updating product", product_id)
    return service.update_product(db, product_id, payload)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a product",
)
def delete_product(
    product_id: int = Path(..., ge=INT64_MIN, le=INT64_MAX),
    db: Session = Depends(get_db),
):
    logger.info("DELETE /api/products/%s - Deleting product", product_id)
    service.delete_product(db, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
