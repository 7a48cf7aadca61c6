# flowershop/models/product.py

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from flowershop.utils.database import Base

product_categories = Table(
    "product_categories",
    Base.metadata,
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


class Category(Base):
    __tablename__ = "categories"

    id          = Column(Integer, primary_key=True, index=True)
    name        = Column(String, unique=True, nullable=False)
    description = Column(Text, nullable=True)
    image       = Column(String, nullable=True)


class Product(Base):
    __tablename__ = "products"

    id    = Column(Integer, primary_key=True, index=True)
    name  = Column(String, nullable=False)
    price = Column(Integer, nullable=False)     # whole pesos
    image = Column(String, nullable=True)
    badge = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    categories = relationship("Category", secondary=product_categories, lazy="selectin")
