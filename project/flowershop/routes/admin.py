# flowershop/routes/admin.py

import datetime

from fastapi import APIRouter, Depends, HTTPException, Request, status
from typing import List, Optional
from sqlalchemy.exc import IntegrityError

from flowershop.models.profile import Profile
from flowershop.schemas.driver import Driver, DriverCreate, DriverUpdate
from flowershop.schemas.order import DriverAssignment, Order, StatusUpdate
from flowershop.schemas.report import ReportPeriod, SalesReport
from flowershop.services.driver import create_driver_service, read_drivers_service, update_driver_service
from flowershop.services.errors import FlowerShopError
from flowershop.services.reports import summarize
from flowershop.services.session import ShopSession
from flowershop.services.workflow import OrderWorkflow
from flowershop.routes.auth import open_user_session, require_admin

router = APIRouter()


async def get_admin_session(request: Request, admin: Profile = Depends(require_admin)) -> ShopSession:
    return await open_user_session(request, admin)


# ────────────── ORDERS ──────────────
@router.get(
    "/orders",
    response_model=List[Order],
    status_code=status.HTTP_200_OK,
    summary="All orders",
    response_description="Stored orders newest first, then unsaved fallback orders",
    responses={
        401: {"description": "Missing or invalid token"},
        403: {"description": "Not an admin"},
    },
)
async def read_orders(
    request: Request,
    skip: int = 0,
    limit: int = 100,
    session: ShopSession = Depends(get_admin_session),
):
    try:
        orders = await OrderWorkflow(session, request).list_orders(skip, limit)
        await request.app.state.log.log_info("admin", "Orders loaded", {"count": len(orders)})
        return orders
    except Exception as e:
        await request.app.state.log.log_error("admin", f"Failed to load orders: {e}")
        raise


@router.post(
    "/orders/{id}/accept",
    response_model=Order,
    status_code=status.HTTP_200_OK,
    summary="Accept an order (Confirmed)",
    responses={
        404: {"description": "Order not found"},
        502: {"description": "Store write failed"},
    },
)
async def accept_order(id: int, request: Request, session: ShopSession = Depends(get_admin_session)):
    try:
        return await OrderWorkflow(session, request).accept(id)
    except FlowerShopError as e:
        raise e.to_http()


@router.put(
    "/orders/{id}/status",
    response_model=Order,
    status_code=status.HTTP_200_OK,
    summary="Set an order's status",
    responses={
        404: {"description": "Order not found"},
        422: {"description": "Unknown status"},
        502: {"description": "Store write failed"},
    },
)
async def update_order_status(
    id: int,
    payload: StatusUpdate,
    request: Request,
    session: ShopSession = Depends(get_admin_session),
):
    try:
        return await OrderWorkflow(session, request).set_status(id, payload.status)
    except FlowerShopError as e:
        raise e.to_http()


@router.put(
    "/orders/{id}/driver",
    response_model=Order,
    status_code=status.HTTP_200_OK,
    summary="Assign a driver",
    responses={
        404: {"description": "Order or driver not found"},
        409: {"description": "Order not accepted yet"},
        502: {"description": "Store write failed"},
    },
)
async def assign_driver(
    id: int,
    payload: DriverAssignment,
    request: Request,
    session: ShopSession = Depends(get_admin_session),
):
    try:
        return await OrderWorkflow(session, request).assign_driver(id, payload.driver_id)
    except FlowerShopError as e:
        raise e.to_http()


@router.delete(
    "/orders/{id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an order and its items",
    responses={
        403: {"description": "Row survived the delete, likely a permission problem"},
        404: {"description": "Order not found"},
        502: {"description": "Store write failed"},
    },
)
async def delete_order(id: int, request: Request, session: ShopSession = Depends(get_admin_session)):
    try:
        await OrderWorkflow(session, request).delete(id)
    except FlowerShopError as e:
        raise e.to_http()


# ────────────── DRIVERS ──────────────
@router.get(
    "/drivers",
    response_model=List[Driver],
    status_code=status.HTTP_200_OK,
    summary="All drivers",
)
async def read_drivers(request: Request, _: Profile = Depends(require_admin)):
    return await read_drivers_service(request)


@router.post(
    "/drivers",
    response_model=Driver,
    status_code=status.HTTP_201_CREATED,
    summary="Create a driver account",
    responses={409: {"description": "Email or username already taken"}},
)
async def create_driver(payload: DriverCreate, request: Request, _: Profile = Depends(require_admin)):
    try:
        return await create_driver_service(payload, request)
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email or username already taken")


@router.patch(
    "/drivers/{id}",
    response_model=Driver,
    status_code=status.HTTP_200_OK,
    summary="Update a driver's status or vehicle",
    responses={404: {"description": "Driver not found"}},
)
async def update_driver(id: int, payload: DriverUpdate, request: Request, _: Profile = Depends(require_admin)):
    try:
        return await update_driver_service(id, payload, request)
    except FlowerShopError as e:
        raise e.to_http()


# ────────────── REPORTS ──────────────
@router.get(
    "/reports",
    response_model=SalesReport,
    status_code=status.HTTP_200_OK,
    summary="Orders, cash revenue and deliveries for a period",
)
async def read_report(
    request: Request,
    period: ReportPeriod = "today",
    today: Optional[datetime.date] = None,
    session: ShopSession = Depends(get_admin_session),
):
    orders = await OrderWorkflow(session, request).list_orders(limit=10_000)
    return summarize(orders, period, today)
