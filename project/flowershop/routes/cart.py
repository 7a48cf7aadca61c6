# flowershop/routes/cart.py

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from flowershop.schemas.bouquet import CustomBouquetRequest
from flowershop.schemas.cart import Cart, CartItemAdd, CartItemUpdate
from flowershop.schemas.order import CheckoutFallback, CheckoutRequest, Order
from flowershop.services.bouquet import add_custom_bouquet_service
from flowershop.services.cart import CartReconciler
from flowershop.services.catalog import read_product_service
from flowershop.services.checkout import CheckoutOrchestrator
from flowershop.services.errors import FlowerShopError, PersistenceFailed
from flowershop.services.session import ShopSession
from flowershop.routes.auth import get_shop_session

router = APIRouter()


def cart_view(cart: CartReconciler) -> Cart:
    return Cart(items=list(cart.lines), subtotal=cart.subtotal())


# ────────────── READ ──────────────
@router.get(
    "/",
    response_model=Cart,
    status_code=status.HTTP_200_OK,
    summary="Current cart",
    responses={401: {"description": "No token and no X-Session-Id"}},
)
async def read_cart(request: Request, session: ShopSession = Depends(get_shop_session)):
    return cart_view(CartReconciler(session, request))


# ────────────── ADD ──────────────
@router.post(
    "/items",
    response_model=Cart,
    status_code=status.HTTP_200_OK,
    summary="Add a product to the cart",
    responses={
        200: {"description": "Line added or its quantity increased"},
        404: {"description": "Product not found"},
        422: {"description": "Quantity below 1"},
    },
)
async def add_cart_item(request: Request, item: CartItemAdd, session: ShopSession = Depends(get_shop_session)):
    product = await read_product_service(item.product_id, request)
    cart = CartReconciler(session, request)
    await cart.add(product, item.quantity)
    return cart_view(cart)


@router.post(
    "/custom-bouquets",
    response_model=Cart,
    status_code=status.HTTP_200_OK,
    summary="Add a bouquet from the builder",
    responses={
        200: {"description": "Bouquet added as its own line, priced by size"},
        400: {"description": "Unknown colour, no stems, too many stems or flower unavailable"},
        401: {"description": "Sign in required"},
    },
)
async def add_custom_bouquet(
    request: Request,
    payload: CustomBouquetRequest,
    session: ShopSession = Depends(get_shop_session),
):
    try:
        await add_custom_bouquet_service(payload, session, request)
    except FlowerShopError as e:
        raise e.to_http()
    return cart_view(CartReconciler(session, request))


# ────────────── UPDATE ──────────────
@router.patch(
    "/items/{product_id}",
    response_model=Cart,
    status_code=status.HTTP_200_OK,
    summary="Change a line's quantity",
    response_description="Quantities below 1 are ignored",
)
async def update_cart_item(
    product_id: int,
    item: CartItemUpdate,
    request: Request,
    session: ShopSession = Depends(get_shop_session),
):
    cart = CartReconciler(session, request)
    await cart.update_quantity(product_id, item.quantity)
    return cart_view(cart)


# ────────────── DELETE ──────────────
@router.delete(
    "/items/{product_id}",
    response_model=Cart,
    status_code=status.HTTP_200_OK,
    summary="Remove a line",
    response_description="Removing an absent line is not an error",
)
async def remove_cart_item(product_id: int, request: Request, session: ShopSession = Depends(get_shop_session)):
    cart = CartReconciler(session, request)
    await cart.remove(product_id)
    return cart_view(cart)


@router.delete(
    "/",
    response_model=Cart,
    status_code=status.HTTP_200_OK,
    summary="Empty the cart",
)
async def clear_cart(request: Request, session: ShopSession = Depends(get_shop_session)):
    cart = CartReconciler(session, request)
    await cart.clear()
    return cart_view(cart)


# ────────────── CHECKOUT ──────────────
@router.post(
    "/checkout",
    response_model=Order,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order from selected cart lines",
    responses={
        201: {"description": "Order stored, lines removed from the cart"},
        202: {"model": CheckoutFallback, "description": "Order kept locally only, store write failed"},
        400: {"description": "Nothing selected"},
        401: {"description": "Sign in required"},
        409: {"description": "Profile missing"},
    },
)
async def checkout(request: Request, payload: CheckoutRequest, session: ShopSession = Depends(get_shop_session)):
    orchestrator = CheckoutOrchestrator(session, request)
    try:
        return await orchestrator.checkout(payload.selected_product_ids, payload.delivery)
    except PersistenceFailed as e:
        body = CheckoutFallback(order=e.order, warning=e.message)
        return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content=body.model_dump(mode="json"))
    except FlowerShopError as e:
        raise e.to_http()
