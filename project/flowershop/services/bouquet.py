# flowershop/services/bouquet.py

from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import Request

from flowershop.models.bouquet import BouquetColor as BouquetColorModel, FlowerType as FlowerTypeModel
from flowershop.schemas.bouquet import (
    BOUQUET_SIZES,
    BouquetColor,
    CustomBouquetRequest,
    CustomDetails,
    CustomStems,
    FlowerType,
)
from flowershop.schemas.cart import CartLine
from flowershop.schemas.product import Product
from flowershop.services.cart import CartReconciler
from flowershop.services.errors import AuthRequired, InvalidBouquet
from flowershop.services.session import ShopSession


async def read_bouquet_colors_service(request: Request) -> list[BouquetColor]:
    db = request.state.db
    result = await db.execute(select(BouquetColorModel).order_by(BouquetColorModel.name))
    return [BouquetColor.model_validate(c) for c in result.scalars().all()]


async def read_flower_types_service(request: Request) -> list[FlowerType]:
    """Flower types the builder may offer, available ones only."""
    db = request.state.db
    result = await db.execute(
        select(FlowerTypeModel).where(FlowerTypeModel.available.is_(True)).order_by(FlowerTypeModel.name)
    )
    return [FlowerType.model_validate(f) for f in result.scalars().all()]


async def build_custom_bouquet(db: AsyncSession, payload: CustomBouquetRequest, product_id: int) -> Product:
    """
    Checks the builder choices against the size and the stored colours and
    flower types, then returns the bouquet as a cart product priced by size.

    Raises InvalidBouquet with the message shown to the shopper.
    """
    size = BOUQUET_SIZES[payload.size]

    color = await db.get(BouquetColorModel, payload.color_id)
    if color is None:
        raise InvalidBouquet("Please select a color theme")

    # the same flower picked twice is one stem group
    counts: dict[int, int] = {}
    for stem in payload.stems:
        counts[stem.flower_type_id] = counts.get(stem.flower_type_id, 0) + stem.count
    if not counts:
        raise InvalidBouquet("Please add at least one stem")
    if sum(counts.values()) > size["max_stems"]:
        raise InvalidBouquet(f"Maximum {size['max_stems']} stems allowed for {payload.size} size")

    result = await db.execute(select(FlowerTypeModel).where(FlowerTypeModel.id.in_(list(counts))))
    flowers = {f.id: f for f in result.scalars().all()}
    for flower_type_id in counts:
        flower = flowers.get(flower_type_id)
        if flower is None or not flower.available:
            raise InvalidBouquet(f"Flower type {flower_type_id} is not available")

    first = flowers[next(iter(counts))]
    return Product(
        id=product_id,
        name=f"Custom {payload.size.capitalize()} Bouquet",
        price=size["price"],
        image=first.image or "",
        categories=["Custom"],
        custom=CustomDetails(
            size=payload.size,
            color=color.name,
            flowers=[
                CustomStems(flower_type_id=fid, name=flowers[fid].name, count=count)
                for fid, count in counts.items()
            ],
        ),
    )


async def add_custom_bouquet_service(payload: CustomBouquetRequest, session: ShopSession, request: Request) -> CartLine:
    """
    Puts a custom bouquet in the cart as its own line.
    Signing in comes first, the builder is not open to guests.
    """
    log = request.app.state.log
    if not session.is_authenticated:
        raise AuthRequired("Please sign in to build a custom bouquet.")

    try:
        bouquet = await build_custom_bouquet(request.state.db, payload, session.next_custom_id())
    except InvalidBouquet as e:
        await log.log_warning("bouquet", f"Rejected: {e.message}", {"user_id": session.user_id, "size": payload.size})
        raise

    line = await CartReconciler(session, request).add(bouquet, payload.quantity)
    await log.log_info("bouquet", "Custom bouquet added", {
        "user_id": session.user_id,
        "size": payload.size,
        "price": bouquet.price,
    })
    return line
