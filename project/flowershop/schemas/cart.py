# flowershop/schemas/cart.py

from pydantic import BaseModel, Field
from typing import List

from flowershop.schemas.product import Product

class CartLine(BaseModel):
    product: Product
    quantity: int = Field(..., ge=1)

class CartItemAdd(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1)

class CartItemUpdate(BaseModel):
    quantity: int

class Cart(BaseModel):
    items: List[CartLine] = Field(default_factory=list)
    subtotal: int = 0
