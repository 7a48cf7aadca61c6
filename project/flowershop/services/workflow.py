# flowershop/services/workflow.py

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError

from flowershop.schemas.order import Order, OrderStatus, UNASSIGNED
from flowershop.services import order_store
from flowershop.services.driver import read_driver
from flowershop.services.errors import (
    AuthorizationSuspected,
    DriverAssignmentLocked,
    DriverNotFound,
    OrderNotFound,
    RemoteWriteFailed,
    store_message,
)
from flowershop.services.session import ShopSession


class OrderWorkflow:
    """
    Admin side of the order lifecycle:
    Pending -> Confirmed -> Preparing -> Ready -> Delivered.

    The store is written first; the session's copy of an order changes only
    once the write went through. Store errors surface as RemoteWriteFailed.
    """

    def __init__(self, session: ShopSession | None, request: Request):
        self.session = session
        self.db = request.state.db
        self.log = getattr(request.app.state, "log", None)
        self.sessions = getattr(request.app.state, "sessions", None)

    # ------------------------------
    # Reads
    # ------------------------------
    async def list_orders(self, skip: int = 0, limit: int = 100) -> list[Order]:
        """
        Persisted orders newest first, then fallbacks still held by live sessions.
        The session keeps the stored orders and only its own fallbacks; other
        sessions' fallbacks are shown here but stay owned by their session.
        """
        stored = [order_store.order_view(o) for o in await order_store.read_orders(self.db, skip, limit)]
        orders = list(stored)
        known = {o.id for o in orders}
        if self.sessions is not None:
            for fallback in self.sessions.fallback_orders():
                if fallback.id not in known:
                    known.add(fallback.id)
                    orders.append(fallback)
        if self.session is not None:
            self.session.orders = stored + self.session.fallback_orders()
        return orders

    async def list_user_orders(self, user_id: int) -> list[Order]:
        return [order_store.order_view(o) for o in await order_store.read_user_orders(self.db, user_id)]

    async def get_order(self, order_id: int) -> Order:
        db_order = await order_store.read_order(self.db, order_id)
        if db_order is None:
            raise OrderNotFound()
        return order_store.order_view(db_order)

    # ------------------------------
    # Transitions
    # ------------------------------
    async def accept(self, order_id: int) -> Order:
        """Pending -> Confirmed. A plain set, so accepting twice changes nothing."""
        return await self.set_status(order_id, "Confirmed")

    async def set_status(self, order_id: int, status: OrderStatus) -> Order:
        """Any status to any status; only the value itself is validated."""
        await self._write(order_id, "status", status=status)
        order = await self.get_order(order_id)
        self._remember(order)
        await self._log_info("Order status updated", {"id": order_id, "status": status})
        return order

    async def assign_driver(self, order_id: int, driver_id: int) -> Order:
        """
        Records the driver by id; the name shown is resolved on read.
        Only for accepted orders, or to replace an already assigned driver.
        """
        current = await self.get_order(order_id)
        driver = await read_driver(self.db, driver_id)
        if driver is None:
            raise DriverNotFound()
        if current.status == "Pending" and current.driver == UNASSIGNED:
            raise DriverAssignmentLocked()

        await self._write(order_id, "driver", driver_id=driver_id)
        order = await self.get_order(order_id)
        self._remember(order)
        await self._log_info("Driver assigned", {"id": order_id, "driver_id": driver_id, "driver": order.driver})
        return order

    async def delete(self, order_id: int) -> None:
        """
        Deletes the items, then the order, then checks the row is really gone.
        A row that survives a successful delete means the store refused it.
        """
        try:
            if not await order_store.order_exists(self.db, order_id):
                raise OrderNotFound()
            await order_store.delete_order(self.db, order_id)
            still_there = await order_store.order_exists(self.db, order_id)
        except SQLAlchemyError as e:
            await self.db.rollback()
            message = store_message(e, "Failed to delete order. Please try again.")
            await self._log_error(f"Delete failed: {message}", {"id": order_id})
            raise RemoteWriteFailed(message)

        if still_there:
            await self._log_error("Order still exists after delete", {"id": order_id})
            raise AuthorizationSuspected()

        if self.session is not None:
            self.session.forget_order(order_id)
        await self._log_info("Order deleted", {"id": order_id})

    # ------------------------------
    # Helpers
    # ------------------------------
    async def _write(self, order_id: int, what: str, **values) -> None:
        try:
            changed = await order_store.update_order(self.db, order_id, **values)
        except SQLAlchemyError as e:
            await self.db.rollback()
            message = store_message(e, f"Failed to update order {what}. Please try again.")
            await self._log_error(f"Order {what} not updated: {message}", {"id": order_id, **values})
            raise RemoteWriteFailed(message)
        if not changed:
            raise OrderNotFound()

    def _remember(self, order: Order) -> None:
        if self.session is not None:
            self.session.replace_order(order)

    async def _log_info(self, message: str, data: dict):
        if self.log:
            await self.log.log_info("workflow", message, data)

    async def _log_error(self, message: str, data: dict):
        if self.log:
            await self.log.log_error("workflow", message, data)
