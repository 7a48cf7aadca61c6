# tests/test_bouquet.py

import pytest
from sqlalchemy.future import select

from flowershop.models.bouquet import BouquetColor as BouquetColorModel, FlowerType as FlowerTypeModel
from flowershop.models.cart import CartLine as CartLineModel
from flowershop.schemas.bouquet import CustomBouquetRequest
from flowershop.schemas.order import DeliveryInfo
from flowershop.services import order_store
from flowershop.services.bouquet import add_custom_bouquet_service, build_custom_bouquet
from flowershop.services.checkout import CheckoutOrchestrator
from flowershop.services.errors import AuthRequired, InvalidBouquet


@pytest.fixture
async def builder(session_factory):
    """Colour and flower ids by short name; the lily is out of stock."""
    async with session_factory() as s:
        pink = BouquetColorModel(name="Blush Pink", hex_code="#F4C2C2")
        rose = FlowerTypeModel(name="Rose", image="rose-stem.jpg", category="Classic")
        tulip = FlowerTypeModel(name="Tulip", category="Spring")
        lily = FlowerTypeModel(name="Lily", available=False)
        s.add_all([pink, rose, tulip, lily])
        await s.commit()
        return {"pink": pink.id, "rose": rose.id, "tulip": tulip.id, "lily": lily.id}


def request_for(builder, size, stems, color="pink", quantity=1):
    return CustomBouquetRequest(
        size=size,
        color_id=builder[color],
        stems=[{"flower_type_id": builder[name], "count": count} for name, count in stems],
        quantity=quantity,
    )


@pytest.mark.parametrize("size, stems, price", [
    ("small", [("rose", 2)], 250),
    ("medium", [("rose", 3), ("tulip", 3)], 600),
    ("large", [("tulip", 12)], 1200),
])
async def test_price_comes_from_size(db, builder, size, stems, price):
    bouquet = await build_custom_bouquet(db, request_for(builder, size, stems), -1)

    assert bouquet.price == price
    assert bouquet.name == f"Custom {size.capitalize()} Bouquet"
    assert bouquet.categories == ["Custom"]
    assert bouquet.custom.color == "Blush Pink"
    assert bouquet.is_custom


async def test_details_list_each_flower_once(db, builder):
    payload = request_for(builder, "medium", [("rose", 2), ("tulip", 1), ("rose", 1)])

    bouquet = await build_custom_bouquet(db, payload, -1)

    assert [(f.name, f.count) for f in bouquet.custom.flowers] == [("Rose", 3), ("Tulip", 1)]
    assert bouquet.image == "rose-stem.jpg"


@pytest.mark.parametrize("size, stems", [
    ("small", [("rose", 3)]),
    ("small", [("rose", 1), ("tulip", 1), ("rose", 1)]),
    ("medium", [("tulip", 7)]),
])
async def test_stem_limit_per_size(db, builder, size, stems):
    with pytest.raises(InvalidBouquet) as excinfo:
        await build_custom_bouquet(db, request_for(builder, size, stems), -1)
    assert excinfo.value.message.startswith("Maximum")


async def test_needs_stems_and_a_known_colour(db, builder):
    with pytest.raises(InvalidBouquet, match="at least one stem"):
        await build_custom_bouquet(db, request_for(builder, "small", []), -1)

    payload = request_for(builder, "small", [("rose", 1)])
    payload.color_id = 999
    with pytest.raises(InvalidBouquet, match="color theme"):
        await build_custom_bouquet(db, payload, -1)


async def test_unavailable_flower_is_refused(db, builder):
    with pytest.raises(InvalidBouquet, match="not available"):
        await build_custom_bouquet(db, request_for(builder, "medium", [("lily", 2)]), -1)


async def test_guest_cannot_build(request_ns, guest_session, builder):
    with pytest.raises(AuthRequired):
        await add_custom_bouquet_service(request_for(builder, "small", [("rose", 1)]), guest_session, request_ns)
    assert guest_session.lines == []


async def test_each_bouquet_is_its_own_local_line(request_ns, user_session, catalog, builder, session_factory):
    first = await add_custom_bouquet_service(request_for(builder, "small", [("rose", 2)]), user_session, request_ns)
    second = await add_custom_bouquet_service(
        request_for(builder, "medium", [("tulip", 4)], quantity=2), user_session, request_ns
    )

    assert (first.product.id, second.product.id) == (-1, -2)
    assert [(line.product.name, line.quantity) for line in user_session.lines] == [
        ("Custom Small Bouquet", 1),
        ("Custom Medium Bouquet", 2),
    ]
    async with session_factory() as s:
        result = await s.execute(select(CartLineModel))
        assert result.scalars().all() == []


async def test_checkout_with_custom_bouquet(request_ns, user_session, catalog, builder, session_factory):
    line = await add_custom_bouquet_service(request_for(builder, "medium", [("rose", 6)]), user_session, request_ns)

    order = await CheckoutOrchestrator(user_session, request_ns).checkout(
        [line.product.id], DeliveryInfo(delivery_option="delivery")
    )

    assert order.total_amount == 600 + 59
    assert user_session.lines == []
    async with session_factory() as s:
        stored = order_store.order_view(await order_store.read_order(s, order.id))
    assert [(i.product_id, i.product_name, i.price) for i in stored.items] == [
        (None, "Custom Medium Bouquet", 600),
    ]
