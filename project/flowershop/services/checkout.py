# flowershop/services/checkout.py

import datetime
import time
from typing import NoReturn

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError

from flowershop.config import settings
from flowershop.schemas.cart import CartLine
from flowershop.schemas.order import DeliveryInfo, Order, OrderItem, UNASSIGNED
from flowershop.services import order_store
from flowershop.services.cart import CartReconciler
from flowershop.services.errors import (
    AuthRequired,
    EmptySelection,
    PersistenceFailed,
    ProfileIncomplete,
    store_message,
)
from flowershop.services.profile import read_profile
from flowershop.services.session import ShopSession


def delivery_fee(delivery_option: str) -> int:
    return settings.DELIVERY_FEE if delivery_option == "delivery" else 0


def compute_totals(lines: list[CartLine], delivery_option: str) -> tuple[int, int, int]:
    """(subtotal, delivery fee, total) for the given lines."""
    subtotal = sum(line.product.price * line.quantity for line in lines)
    fee = delivery_fee(delivery_option)
    return subtotal, fee, subtotal + fee


def snapshot_items(lines: list[CartLine]) -> list[OrderItem]:
    return [
        OrderItem(
            product_id=None if line.product.is_custom else line.product.id,
            product_name=line.product.name,
            quantity=line.quantity,
            price=line.product.price,
        )
        for line in lines
    ]


class CheckoutOrchestrator:
    """
    Turns the selected cart lines of a session into an order.

    Order and items are written in one transaction. If the write fails the
    shopper still gets a local fallback order (not in the database) and a
    PersistenceFailed warning; either way the selected lines leave the cart.
    Missing session or profile aborts before anything is written.
    """

    def __init__(self, session: ShopSession, request: Request, cart: CartReconciler | None = None):
        self.session = session
        self.request = request
        self.db = request.state.db
        self.log = getattr(request.app.state, "log", None)
        self.cart = cart or CartReconciler(session, request)

    async def checkout(self, selected_product_ids: list[int], delivery: DeliveryInfo | None = None) -> Order:
        delivery = delivery or DeliveryInfo()

        # session first, a guest is asked to sign in whatever was selected
        if not self.session.is_authenticated:
            await self._log_warning("Checkout without a session", {"session": self.session.key})
            raise AuthRequired()

        # selection and totals, snapshot taken before any await
        wanted = set(selected_product_ids)
        selected = [line.model_copy(deep=True) for line in self.session.lines if line.product.id in wanted]
        if not selected:
            raise EmptySelection()
        subtotal, fee, total = compute_totals(selected, delivery.delivery_option)
        items = snapshot_items(selected)
        sold_ids = [line.product.id for line in selected]

        # profile
        try:
            profile = await read_profile(self.db, self.session.user_id)
        except SQLAlchemyError as e:
            await self.db.rollback()
            await self._fall_back(items, total, delivery, None, sold_ids, e)
        if profile is None:
            await self._log_warning("Checkout without a profile", {"user_id": self.session.user_id})
            raise ProfileIncomplete()

        phone = delivery.phone or profile.phone

        # order then items, one transaction
        try:
            db_order = await order_store.create_order_with_items(
                self.db,
                user_id=self.session.user_id,
                total_amount=total,
                phone=phone,
                payment=delivery.payment,
                delivery_option=delivery.delivery_option,
                delivery_address=delivery.address or None,
                items=[it.model_dump(include={"product_id", "product_name", "quantity", "price"}) for it in items],
            )
        except SQLAlchemyError as e:
            await self._fall_back(items, total, delivery, profile, sold_ids, e)

        order = Order(
            id=db_order.id,
            order_number=db_order.order_number,
            user_id=db_order.user_id,
            customer_name=profile.full_name or "",
            items=items,
            total_amount=db_order.total_amount,
            phone=db_order.phone,
            date=db_order.date,
            status=db_order.status,
            payment=db_order.payment,
            driver=UNASSIGNED,
            delivery_address=db_order.delivery_address,
            delivery_option=db_order.delivery_option,
        )
        self.session.orders.append(order)

        # sold lines leave the cart, locally and in the carts table
        for product_id in sold_ids:
            await self.cart.remove(product_id)

        if self.log:
            await self.log.log_info("checkout", "Order placed", {
                "id": order.id,
                "order_number": order.order_number,
                "subtotal": subtotal,
                "delivery_fee": fee,
                "total": total,
            })
        return order

    async def _fall_back(self, items, total, delivery: DeliveryInfo, profile, sold_ids, error: Exception) -> NoReturn:
        """Keeps the order in the session only, then reports the failed write."""
        reason = store_message(error, "Failed to persist order to server")
        fallback = Order(
            id=int(time.time() * 1000),
            order_number=order_store.format_order_number(len(self.session.orders) + 1),
            user_id=self.session.user_id,
            customer_name=(profile.full_name or "") if profile else "",
            items=items,
            total_amount=total,
            phone=delivery.phone or (profile.phone if profile else None),
            date=datetime.date.today(),
            status="Pending",
            payment=delivery.payment,
            driver=UNASSIGNED,
            delivery_address=delivery.address or None,
            delivery_option=delivery.delivery_option,
            persisted=False,
        )
        self.session.orders.append(fallback)
        self.session.drop_lines(sold_ids)

        if self.log:
            await self.log.log_error("checkout", f"Order not persisted: {reason}", {
                "fallback_id": fallback.id,
                "order_number": fallback.order_number,
                "total": total,
            })
        raise PersistenceFailed(fallback, reason=reason)

    async def _log_warning(self, message: str, data: dict):
        if self.log:
            await self.log.log_warning("checkout", message, data)
