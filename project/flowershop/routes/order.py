# flowershop/routes/order.py

from fastapi import APIRouter, Depends, HTTPException, Request, status
from typing import List

from flowershop.models.profile import Profile
from flowershop.schemas.order import Order
from flowershop.services.errors import FlowerShopError
from flowershop.services.workflow import OrderWorkflow
from flowershop.routes.auth import get_current_user

router = APIRouter()

# ────────────── ORDER HISTORY ──────────────
@router.get(
    "/",
    response_model=List[Order],
    status_code=status.HTTP_200_OK,
    summary="My orders",
    response_description="Newest first",
    responses={401: {"description": "Missing or invalid token"}},
)
async def read_my_orders(request: Request, user: Profile = Depends(get_current_user)):
    try:
        orders = await OrderWorkflow(None, request).list_user_orders(user.id)
        await request.app.state.log.log_info("order", "Order history loaded", {"user_id": user.id, "count": len(orders)})
        return orders
    except Exception as e:
        await request.app.state.log.log_error("order", f"Failed to load order history: {e}", {"user_id": user.id})
        raise


@router.get(
    "/{id}",
    response_model=Order,
    status_code=status.HTTP_200_OK,
    summary="One of my orders",
    responses={
        401: {"description": "Missing or invalid token"},
        404: {"description": "Order not found"},
    },
)
async def read_my_order(id: int, request: Request, user: Profile = Depends(get_current_user)):
    try:
        order = await OrderWorkflow(None, request).get_order(id)
    except FlowerShopError as e:
        raise e.to_http()
    if order.user_id != user.id and user.role != "admin":
        raise HTTPException(status_code=404, detail="Order not found")
    return order
