# flowershop/services/cart_store.py

"""
Per-user cart rows in the carts table.
Plain data access: errors propagate to the caller.
"""

from sqlalchemy import update, delete
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from flowershop.models.cart import CartLine as CartLineModel


async def fetch_user_cart(db: AsyncSession, user_id: int) -> list[CartLineModel]:
    result = await db.execute(
        select(CartLineModel).where(CartLineModel.user_id == user_id).order_by(CartLineModel.id)
    )
    return list(result.scalars().all())


async def upsert_cart_line(db: AsyncSession, user_id: int, product_id: int, quantity: int) -> None:
    """Sets the quantity of (user, product), creating the row when missing."""
    result = await db.execute(
        update(CartLineModel)
        .where(CartLineModel.user_id == user_id, CartLineModel.product_id == product_id)
        .values(quantity=quantity)
    )
    if result.rowcount == 0:
        db.add(CartLineModel(user_id=user_id, product_id=product_id, quantity=quantity))
    await db.commit()


async def increment_cart_quantity(db: AsyncSession, user_id: int, product_id: int, delta: int) -> None:
    """
    Adds delta in the database itself, so two tabs adding the same product
    both count. Falls back to an insert when the row is gone.
    """
    result = await db.execute(
        update(CartLineModel)
        .where(CartLineModel.user_id == user_id, CartLineModel.product_id == product_id)
        .values(quantity=CartLineModel.quantity + delta)
    )
    if result.rowcount == 0:
        db.add(CartLineModel(user_id=user_id, product_id=product_id, quantity=delta))
    await db.commit()


async def update_cart_quantity(db: AsyncSession, user_id: int, product_id: int, quantity: int) -> None:
    await db.execute(
        update(CartLineModel)
        .where(CartLineModel.user_id == user_id, CartLineModel.product_id == product_id)
        .values(quantity=quantity)
    )
    await db.commit()


async def remove_cart_line(db: AsyncSession, user_id: int, product_id: int) -> None:
    await db.execute(
        delete(CartLineModel).where(CartLineModel.user_id == user_id, CartLineModel.product_id == product_id)
    )
    await db.commit()


async def clear_user_cart(db: AsyncSession, user_id: int) -> None:
    await db.execute(delete(CartLineModel).where(CartLineModel.user_id == user_id))
    await db.commit()
