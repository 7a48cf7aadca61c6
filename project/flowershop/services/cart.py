# flowershop/services/cart.py

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError

from flowershop.schemas.cart import CartLine
from flowershop.schemas.product import Product
from flowershop.services import cart_store
from flowershop.services.catalog import fetch_products_by_ids
from flowershop.services.session import ShopSession


class CartReconciler:
    """
    Keeps the session's cart and the carts table in step.

    Local state changes first and always sticks. For signed-in shoppers every
    change is then mirrored to the carts table; a failed mirror is logged and
    dropped, the next load() after login takes the table as the truth again.
    Guests only have the local cart. Custom bouquets are not catalog
    products, so they never reach the carts table either.
    """

    def __init__(self, session: ShopSession, request: Request):
        self.session = session
        self.db = request.state.db
        self.log = getattr(request.app.state, "log", None)

    @property
    def lines(self) -> list[CartLine]:
        return self.session.lines

    def subtotal(self, product_ids=None) -> int:
        lines = self.lines
        if product_ids is not None:
            ids = set(product_ids)
            lines = [line for line in lines if line.product.id in ids]
        return sum(line.product.price * line.quantity for line in lines)

    # ------------------------------
    # Load on login
    # ------------------------------
    async def load(self, user_id: int) -> list[CartLine]:
        """
        Rebuilds the local cart from the carts table.
        Rows whose product was deleted are skipped. A failed read gives an
        empty cart so login never blocks on it.
        """
        try:
            rows = await cart_store.fetch_user_cart(self.db, user_id)
            products = await fetch_products_by_ids(self.db, [r.product_id for r in rows])
        except SQLAlchemyError as e:
            await self._rollback()
            await self._log_error("Failed to load cart", e, {"user_id": user_id})
            self.session.lines = []
            self.session.loaded = True
            return self.session.lines

        self.session.lines = [
            CartLine(product=products[r.product_id], quantity=r.quantity)
            for r in rows
            if r.product_id in products and r.quantity >= 1
        ]
        self.session.loaded = True

        if self.log:
            await self.log.log_info("cart", "Cart loaded", {"user_id": user_id, "lines": len(self.lines)})
        return self.session.lines

    # ------------------------------
    # Edits
    # ------------------------------
    async def add(self, product: Product, quantity: int = 1) -> CartLine | None:
        if quantity < 1:
            return self.session.find_line(product.id)

        existing = self.session.find_line(product.id)
        if existing:
            existing.quantity += quantity
            line = existing
        else:
            line = CartLine(product=product, quantity=quantity)
            self.session.lines.append(line)

        if self._remote(product.id):
            if existing:
                await self._mirror(
                    "increment", cart_store.increment_cart_quantity,
                    self.session.user_id, product.id, quantity,
                )
            else:
                await self._mirror(
                    "upsert", cart_store.upsert_cart_line,
                    self.session.user_id, product.id, quantity,
                )
        return line

    async def update_quantity(self, product_id: int, new_quantity: int) -> CartLine | None:
        line = self.session.find_line(product_id)
        if new_quantity < 1 or line is None:
            return line

        line.quantity = new_quantity
        if self._remote(product_id):
            await self._mirror(
                "update", cart_store.update_cart_quantity,
                self.session.user_id, product_id, new_quantity,
            )
        return line

    async def remove(self, product_id: int) -> None:
        self.session.drop_lines([product_id])
        if self._remote(product_id):
            await self._mirror("remove", cart_store.remove_cart_line, self.session.user_id, product_id)

    async def clear(self) -> None:
        self.session.lines = []
        if self.session.is_authenticated:
            await self._mirror("clear", cart_store.clear_user_cart, self.session.user_id)

    # ------------------------------
    # Helpers
    # ------------------------------
    def _remote(self, product_id: int) -> bool:
        """Signed-in carts mirror catalog lines; custom bouquets stay local."""
        return self.session.is_authenticated and product_id > 0

    async def _mirror(self, action: str, call, *args) -> bool:
        try:
            await call(self.db, *args)
            return True
        except SQLAlchemyError as e:
            await self._rollback()
            await self._log_error(f"Cart {action} not mirrored", e, {"args": list(args)})
            return False

    async def _rollback(self):
        try:
            await self.db.rollback()
        except SQLAlchemyError as e:
            await self._log_error("Rollback failed", e)

    async def _log_error(self, message: str, error: Exception, data: dict | None = None):
        if self.log:
            await self.log.log_error("cart", f"{message}: {error}", data)
