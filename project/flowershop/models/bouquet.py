# flowershop/models/bouquet.py

from sqlalchemy import Column, Integer, String, Text, Boolean
from flowershop.utils.database import Base

class BouquetColor(Base):
    __tablename__ = "bouquet_colors"

    id          = Column(Integer, primary_key=True, index=True)
    name        = Column(String, nullable=False)
    hex_code    = Column(String, nullable=True)
    description = Column(Text, nullable=True)


class FlowerType(Base):
    __tablename__ = "flower_types"

    id        = Column(Integer, primary_key=True, index=True)
    name      = Column(String, nullable=False)
    image     = Column(String, nullable=True)
    category  = Column(String, nullable=True)
    available = Column(Boolean, nullable=False, default=True)
