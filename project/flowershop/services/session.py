# flowershop/services/session.py

from typing import Dict, List, Optional

from flowershop.schemas.cart import CartLine
from flowershop.schemas.order import Order


class ShopSession:
    """
    Local state of one shopper: the cart as the shopper sees it and the
    orders known to this session (persisted ones and local fallbacks).

    Created at login (or on the first request of a guest), discarded at logout.
    """

    def __init__(self, key: str, user_id: Optional[int] = None):
        self.key = key
        self.user_id = user_id
        self.lines: List[CartLine] = []
        self.orders: List[Order] = []
        self.loaded = False

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def find_line(self, product_id: int) -> Optional[CartLine]:
        return next((line for line in self.lines if line.product.id == product_id), None)

    def drop_lines(self, product_ids) -> None:
        ids = set(product_ids)
        self.lines = [line for line in self.lines if line.product.id not in ids]

    def next_custom_id(self) -> int:
        """Custom bouquets get negative ids so they never clash with catalog products."""
        return min([0] + [line.product.id for line in self.lines]) - 1

    def fallback_orders(self) -> List[Order]:
        return [o for o in self.orders if not o.persisted]

    def replace_order(self, order: Order) -> None:
        self.orders = [order if o.id == order.id else o for o in self.orders]

    def forget_order(self, order_id: int) -> None:
        self.orders = [o for o in self.orders if o.id != order_id]


class SessionRegistry:
    """In-process ShopSession holder, one per app (app.state.sessions)."""

    def __init__(self):
        self._sessions: Dict[str, ShopSession] = {}

    @staticmethod
    def user_key(user_id: int) -> str:
        return f"user:{user_id}"

    @staticmethod
    def guest_key(session_id: str) -> str:
        return f"guest:{session_id}"

    def get_or_create(self, key: str, user_id: Optional[int] = None) -> ShopSession:
        session = self._sessions.get(key)
        if session is None:
            session = ShopSession(key, user_id)
            self._sessions[key] = session
        return session

    def discard(self, key: str) -> None:
        self._sessions.pop(key, None)

    def fallback_orders(self) -> List[Order]:
        """Unpersisted orders of every live session, so admins still see them."""
        orders = []
        for session in self._sessions.values():
            orders.extend(session.fallback_orders())
        return orders

    def __len__(self):
        return len(self._sessions)
