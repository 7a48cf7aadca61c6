# flowershop/schemas/order.py

from datetime import date as Date
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

OrderStatus = Literal["Pending", "Confirmed", "Preparing", "Ready", "Delivered"]
PaymentMethod = Literal["Cash", "Card"]
DeliveryOption = Literal["delivery", "pickup"]

UNASSIGNED = "Unassigned"


class DeliveryInfo(BaseModel):
    delivery_option: DeliveryOption = "delivery"
    address: Optional[str] = None
    phone: Optional[str] = None
    payment: PaymentMethod = "Cash"

class CheckoutRequest(BaseModel):
    selected_product_ids: List[int] = Field(..., description="Cart lines to turn into the order")
    delivery: DeliveryInfo = Field(default_factory=DeliveryInfo)

class OrderItem(BaseModel):
    product_id: Optional[int] = None
    product_name: str = "Unknown"
    quantity: int = Field(..., ge=1)
    price: int = Field(..., ge=0, description="Unit price frozen at order time")

class Order(BaseModel):
    id: int
    order_number: str
    user_id: Optional[int] = None
    customer_name: str = ""
    items: List[OrderItem] = Field(default_factory=list)
    total_amount: int
    phone: Optional[str] = None
    date: Date
    status: OrderStatus = "Pending"
    payment: PaymentMethod = "Cash"
    driver: str = UNASSIGNED
    driver_id: Optional[int] = None
    delivery_address: Optional[str] = None
    delivery_option: DeliveryOption = "delivery"
    persisted: bool = True

class CheckoutFallback(BaseModel):
    order: Order
    persisted: bool = False
    warning: str

class StatusUpdate(BaseModel):
    status: OrderStatus

class DriverAssignment(BaseModel):
    driver_id: int
