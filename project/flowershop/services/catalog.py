# flowershop/services/catalog.py

from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, Request

from flowershop.models.product import Product as ProductModel, Category as CategoryModel
from flowershop.schemas.product import Product, Category


def product_view(db_product: ProductModel) -> Product:
    return Product(
        id=db_product.id,
        name=db_product.name,
        price=db_product.price,
        image=db_product.image or "",
        categories=[c.name for c in db_product.categories],
        badge=db_product.badge,
    )


async def fetch_products_by_ids(db: AsyncSession, ids) -> dict[int, Product]:
    """
    Products that still exist among ids, keyed by id.
    """
    ids = list(set(ids))
    if not ids:
        return {}
    result = await db.execute(select(ProductModel).where(ProductModel.id.in_(ids)))
    return {p.id: product_view(p) for p in result.scalars().all()}


async def read_products_service(request: Request, category: str | None = None) -> list[Product]:
    """
    Catalog listing, optionally limited to one category name.
    """
    db = request.state.db
    log = request.app.state.log

    query = select(ProductModel).order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
    if category:
        query = query.where(ProductModel.categories.any(CategoryModel.name == category))

    result = await db.execute(query)
    products = [product_view(p) for p in result.scalars().all()]

    await log.log_info("catalog", f"{len(products)} products loaded", {"category": category})
    return products


async def read_product_service(id: int, request: Request) -> Product:
    db = request.state.db
    log = request.app.state.log

    result = await db.execute(select(ProductModel).where(ProductModel.id == id))
    db_product = result.scalar_one_or_none()
    if db_product is None:
        await log.log_error("catalog", "Product not found", {"id": id})
        raise HTTPException(status_code=404, detail="Product not found")
    return product_view(db_product)


async def read_categories_service(request: Request) -> list[Category]:
    db = request.state.db
    result = await db.execute(select(CategoryModel).order_by(CategoryModel.name))
    return [Category.model_validate(c) for c in result.scalars().all()]
