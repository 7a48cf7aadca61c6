# flowershop/utils/database.py

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.future import select
from sqlalchemy.pool import StaticPool
from flowershop.config import settings
from flowershop.utils.security import hash_password

# ────────────── Base for models ──────────────
Base = declarative_base()


def build_engine(url: str, echo: bool = False):
    """
    Async engine for url.
    In-memory SQLite keeps one shared connection, otherwise every session
    would see its own empty database.
    """
    if url.startswith("sqlite") and (":memory:" in url or url.endswith("://")):
        return create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(url, echo=echo)


def build_session_factory(bind):
    # expire_on_commit=False: attributes stay readable after commit without lazy IO
    return sessionmaker(bind=bind, class_=AsyncSession, expire_on_commit=False)


# ────────────── Engine and sessions ──────────────
engine = build_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
AsyncSessionLocal = build_session_factory(engine)


# ────────────── Database initialisation ──────────────
SAMPLE_PRODUCTS = [
    {"name": "Joy Bouquet", "price": 1250, "badge": "Special"},
    {"name": "Pure Elegance", "price": 1650, "badge": "Bestseller"},
]
SAMPLE_CATEGORIES = [
    {"name": "Birthday Flowers", "description": "Celebrate special moments"},
    {"name": "Anniversary", "description": "Romantic arrangements"},
    {"name": "Just Because", "description": "Surprise someone"},
]
SAMPLE_BOUQUET_COLORS = [
    {"name": "Blush Pink", "hex_code": "#F4C2C2", "description": "Soft and romantic"},
    {"name": "Sunny Yellow", "hex_code": "#FFD700", "description": "Bright and cheerful"},
]
SAMPLE_FLOWER_TYPES = [
    {"name": "Rose", "category": "Classic"},
    {"name": "Tulip", "category": "Spring"},
    {"name": "Sunflower", "category": "Summer"},
]


async def init_db(bind=None, session_factory=None, seed_catalog: bool = True):
    """
    Creates all tables (if missing) and seeds:
        - the first admin profile from ADMIN_EMAIL / ADMIN_PASSWORD when no admin exists
        - a small sample catalog when the products table is empty
        - sample colours and flower types for the bouquet builder
    """
    bind = bind or engine
    session_factory = session_factory or AsyncSessionLocal

    # every model module must be imported so its table is on Base.metadata
    from flowershop.models import cart, driver, order  # noqa: F401
    from flowershop.models.bouquet import BouquetColor, FlowerType
    from flowershop.models.profile import Profile
    from flowershop.models.product import Category, Product

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with session_factory() as session:
        result = await session.execute(select(Profile).where(Profile.role == "admin"))
        if result.scalars().first() is None:
            session.add(Profile(
                full_name="Administrator",
                email=settings.ADMIN_EMAIL,
                password=hash_password(settings.ADMIN_PASSWORD),
                role="admin",
                address="",
            ))

        if seed_catalog:
            result = await session.execute(select(Product).limit(1))
            if result.scalars().first() is None:
                categories = [Category(**c) for c in SAMPLE_CATEGORIES]
                session.add_all(categories)
                for p in SAMPLE_PRODUCTS:
                    session.add(Product(**p, categories=[categories[0]]))

            result = await session.execute(select(BouquetColor).limit(1))
            if result.scalars().first() is None:
                session.add_all([BouquetColor(**c) for c in SAMPLE_BOUQUET_COLORS])
                session.add_all([FlowerType(**f) for f in SAMPLE_FLOWER_TYPES])

        await session.commit()
