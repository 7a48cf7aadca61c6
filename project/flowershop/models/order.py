# flowershop/models/order.py

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from flowershop.utils.database import Base

class Order(Base):
    __tablename__ = "orders"

    id               = Column(Integer, primary_key=True, index=True)
    user_id          = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    order_number     = Column(String, unique=True, nullable=True)     # ORD-001, set right after the first flush
    total_amount     = Column(Integer, nullable=False)                 # items + delivery fee
    phone            = Column(String, nullable=True)
    date             = Column(Date, nullable=False)
    status           = Column(String, nullable=False, default="Pending")
    payment          = Column(String, nullable=False, default="Cash")
    delivery_address = Column(String, nullable=True)
    delivery_option  = Column(String, nullable=False, default="delivery")
    driver_id        = Column(Integer, ForeignKey("drivers.id", ondelete="SET NULL"), nullable=True)
    created_at       = Column(DateTime(timezone=True), server_default=func.now())

    items    = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", lazy="selectin")
    customer = relationship("Profile", lazy="selectin")
    driver   = relationship("Driver", lazy="selectin")


class OrderItem(Base):
    __tablename__ = "order_items"

    id         = Column(Integer, primary_key=True, index=True)
    order_id   = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)   # None for custom bouquets
    name       = Column(String, nullable=True)      # product name at order time
    quantity   = Column(Integer, nullable=False)
    price      = Column(Integer, nullable=False)   # unit price at order time, never updated

    order   = relationship("Order", back_populates="items")
    product = relationship("Product", lazy="selectin")
