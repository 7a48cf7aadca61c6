# tests/conftest.py

import os
import tempfile

# settings are read on import, point them at throwaway places first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="flowershop-log-"))
os.environ.setdefault("LOG_PRINT", "0")

from types import SimpleNamespace

import pytest

from flowershop.models.product import Category as CategoryModel, Product as ProductModel
from flowershop.models.profile import Profile as ProfileModel
from flowershop.services.catalog import product_view
from flowershop.services.session import SessionRegistry, ShopSession
from flowershop.utils.database import build_engine, build_session_factory, init_db
from flowershop.utils.log import Log
from flowershop.utils.security import hash_password


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'shop.db'}")
    await init_db(engine, build_session_factory(engine), seed_catalog=False)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def log(tmp_path):
    log = Log(log_dir=str(tmp_path / "log"), log_print=False)
    yield log
    await log.shutdown()


@pytest.fixture
def sessions():
    return SessionRegistry()


@pytest.fixture
def request_ns(db, log, sessions):
    """Stand-in for a FastAPI Request: what the services read from it."""
    return SimpleNamespace(
        state=SimpleNamespace(db=db),
        app=SimpleNamespace(state=SimpleNamespace(log=log, sessions=sessions)),
    )


@pytest.fixture
async def catalog(session_factory):
    """Three products keyed by a short name, as API-facing Product views."""
    async with session_factory() as s:
        birthday = CategoryModel(name="Birthday Flowers")
        rows = {
            "A": ProductModel(name="Rose Box", price=100, image="rose.jpg", categories=[birthday]),
            "B": ProductModel(name="Tulip Bunch", price=250, categories=[]),
            "C": ProductModel(name="Sunflower Jar", price=75, badge="New", categories=[]),
        }
        s.add_all(rows.values())
        await s.commit()
        return {key: product_view(p) for key, p in rows.items()}


@pytest.fixture
async def customer(session_factory):
    async with session_factory() as s:
        profile = ProfileModel(
            email="ana@example.com",
            password=hash_password("secret1"),
            full_name="Ana Cruz",
            phone="09171234567",
            role="customer",
            address="12 Mabini St",
        )
        s.add(profile)
        await s.commit()
        return profile


@pytest.fixture
def user_session(sessions, customer) -> ShopSession:
    session = sessions.get_or_create(SessionRegistry.user_key(customer.id), customer.id)
    session.loaded = True
    return session


@pytest.fixture
def guest_session(sessions) -> ShopSession:
    session = sessions.get_or_create(SessionRegistry.guest_key("tab-1"))
    session.loaded = True
    return session
