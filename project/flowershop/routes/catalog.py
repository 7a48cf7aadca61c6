# flowershop/routes/catalog.py

from fastapi import APIRouter, Request, status
from typing import List, Optional

from flowershop.schemas.bouquet import BouquetColor, FlowerType
from flowershop.schemas.product import Product, Category
from flowershop.services.bouquet import read_bouquet_colors_service, read_flower_types_service
from flowershop.services.catalog import (
    read_products_service,
    read_product_service,
    read_categories_service,
)

router = APIRouter()

# ────────────── PRODUCTS ──────────────
@router.get(
    "/products",
    response_model=List[Product],
    status_code=status.HTTP_200_OK,
    summary="List products",
    responses={200: {"description": "Products, newest first"}},
)
async def read_products(request: Request, category: Optional[str] = None):
    return await read_products_service(request, category)


@router.get(
    "/products/{id}",
    response_model=Product,
    status_code=status.HTTP_200_OK,
    summary="Get a product by ID",
    responses={
        200: {"description": "Product found"},
        404: {"description": "Product not found"},
    },
)
async def read_product(id: int, request: Request):
    return await read_product_service(id, request)


# ────────────── CATEGORIES ──────────────
@router.get(
    "/categories",
    response_model=List[Category],
    status_code=status.HTTP_200_OK,
    summary="List categories",
)
async def read_categories(request: Request):
    return await read_categories_service(request)


# ────────────── CUSTOM BOUQUET BUILDER ──────────────
@router.get(
    "/bouquet-colors",
    response_model=List[BouquetColor],
    status_code=status.HTTP_200_OK,
    summary="Colour themes for custom bouquets",
)
async def read_bouquet_colors(request: Request):
    return await read_bouquet_colors_service(request)


@router.get(
    "/flower-types",
    response_model=List[FlowerType],
    status_code=status.HTTP_200_OK,
    summary="Flower types available in the builder",
)
async def read_flower_types(request: Request):
    return await read_flower_types_service(request)
