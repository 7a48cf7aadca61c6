# flowershop/middleware/db_middleware.py

from starlette.types import ASGIApp, Receive, Scope, Send
from flowershop.utils.database import AsyncSessionLocal

class DBSessionMiddleware:
    """One AsyncSession per HTTP request, available as request.state.db."""

    def __init__(self, app: ASGIApp, session_factory=None):
        self.app = app
        self.session_factory = session_factory or AsyncSessionLocal

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        state = scope.setdefault("state", {})
        state["db"] = self.session_factory()
        try:
            await self.app(scope, receive, send)
        finally:
            # closed only once the response is sent
            await state["db"].close()
