# flowershop/services/order_store.py

"""
Orders and order_items in the database.
Plain data access: errors propagate to the caller.
"""

import datetime

from sqlalchemy import update, delete
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from flowershop.config import settings
from flowershop.models.order import Order as OrderModel, OrderItem as OrderItemModel
from flowershop.schemas.order import Order, OrderItem, UNASSIGNED


def format_order_number(index: int) -> str:
    return f"{settings.ORDER_NUMBER_PREFIX}{index:03d}"


def driver_name(db_order: OrderModel) -> str:
    driver = db_order.driver
    if driver is None:
        return UNASSIGNED
    if driver.profile is not None and driver.profile.full_name:
        return driver.profile.full_name
    return driver.username or UNASSIGNED


def order_view(db_order: OrderModel) -> Order:
    """Order as the API shows it, driver name resolved from driver_id."""
    return Order(
        id=db_order.id,
        order_number=db_order.order_number or str(db_order.id),
        user_id=db_order.user_id,
        customer_name=(db_order.customer.full_name or "") if db_order.customer else "",
        items=[
            OrderItem(
                product_id=it.product_id,
                product_name=it.name or (it.product.name if it.product else "Unknown"),
                quantity=it.quantity,
                price=it.price,
            )
            for it in db_order.items
        ],
        total_amount=db_order.total_amount,
        phone=db_order.phone,
        date=db_order.date,
        status=db_order.status,
        payment=db_order.payment,
        driver=driver_name(db_order),
        driver_id=db_order.driver_id,
        delivery_address=db_order.delivery_address,
        delivery_option=db_order.delivery_option,
    )


async def create_order_with_items(
    db: AsyncSession,
    *,
    user_id: int,
    total_amount: int,
    phone: str | None,
    payment: str,
    delivery_option: str,
    delivery_address: str | None,
    items: list[dict],
    order_date: datetime.date | None = None,
) -> OrderModel:
    """
    Inserts the order and its items in one transaction.

    The order row is flushed first so the items can reference its id and the
    order number can be derived from it. Nothing is left behind on failure.
    """
    db_order = OrderModel(
        user_id=user_id,
        total_amount=total_amount,
        phone=phone,
        date=order_date or datetime.date.today(),
        status="Pending",
        payment=payment,
        delivery_option=delivery_option,
        delivery_address=delivery_address,
    )
    try:
        db.add(db_order)
        await db.flush()

        db_order.order_number = format_order_number(db_order.id)
        db.add_all([
            OrderItemModel(
                order_id=db_order.id,
                product_id=it["product_id"],
                name=it.get("product_name"),
                quantity=it["quantity"],
                price=it["price"],
            )
            for it in items
        ])
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return db_order


def _orders_query():
    return (
        select(OrderModel)
        .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        .execution_options(populate_existing=True)
    )


async def read_orders(db: AsyncSession, skip: int = 0, limit: int = 100) -> list[OrderModel]:
    result = await db.execute(_orders_query().offset(skip).limit(limit))
    return list(result.scalars().all())


async def read_user_orders(db: AsyncSession, user_id: int) -> list[OrderModel]:
    result = await db.execute(_orders_query().where(OrderModel.user_id == user_id))
    return list(result.scalars().all())


async def read_order(db: AsyncSession, id: int) -> OrderModel | None:
    result = await db.execute(
        select(OrderModel).where(OrderModel.id == id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def order_exists(db: AsyncSession, id: int) -> bool:
    result = await db.execute(select(OrderModel.id).where(OrderModel.id == id))
    return result.scalar_one_or_none() is not None


async def update_order(db: AsyncSession, id: int, **values) -> int:
    """Returns the number of rows changed."""
    result = await db.execute(update(OrderModel).where(OrderModel.id == id).values(**values))
    await db.commit()
    return result.rowcount


async def delete_order(db: AsyncSession, id: int) -> None:
    """Items first, then the order."""
    await db.execute(delete(OrderItemModel).where(OrderItemModel.order_id == id))
    await db.execute(delete(OrderModel).where(OrderModel.id == id))
    await db.commit()
