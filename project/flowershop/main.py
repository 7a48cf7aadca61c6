# flowershop/main.py

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
from dotenv import load_dotenv
from contextlib import asynccontextmanager

from flowershop.utils.log import Log
from flowershop.utils import database
from flowershop.middleware.db_middleware import DBSessionMiddleware
from flowershop.services.session import SessionRegistry

# --- environment ---
load_dotenv()


def create_app(bind=None, session_factory=None, log: Log | None = None, seed_catalog: bool = True) -> FastAPI:
    bind = bind or database.engine
    session_factory = session_factory or database.AsyncSessionLocal
    boot_log = log or Log()

    # ────────────── Lifespan ──────────────
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        boot_log.log_info_sync(target="startup", message="lifespan: startup")

        try:
            await database.init_db(bind, session_factory, seed_catalog=seed_catalog)
        except Exception as e:
            boot_log.log_error_sync(target="startup", message=f"Database initialisation failed: {e}")
            raise
        boot_log.log_info_sync(target="startup", message="Database initialised")

        app.state.log = log or Log()
        app.state.sessions = SessionRegistry()
        await app.state.log.log_info(target="startup", message="Async log and session registry ready")

        yield

        await app.state.log.log_info(target="shutdown", message="Stopping", data={"sessions": len(app.state.sessions)})
        await app.state.log.shutdown()
        boot_log.log_info_sync(target="shutdown", message="Log closed")

    app = FastAPI(title="Flower Shop API", lifespan=lifespan)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # request.state.db
    app.add_middleware(DBSessionMiddleware, session_factory=session_factory)

    @app.get("/")
    def read_root():
        return {"status": "active", "system": "Flower Shop API"}

    # ────────────── Routers ──────────────
    from flowershop.routes import admin, auth, cart, catalog, order, profile

    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
    app.include_router(cart.router, prefix="/cart", tags=["cart"])
    app.include_router(order.router, prefix="/order", tags=["order"])
    app.include_router(profile.router, prefix="/profile", tags=["profile"])
    app.include_router(admin.router, prefix="/admin", tags=["admin"])

    return app


app = create_app()

# ────────────── uvicorn ──────────────
if __name__ == "__main__":
    uvicorn.run(
        "flowershop.main:app",
        host="127.0.0.1",
        port=8000,
        log_level="info",
        reload=True
    )
