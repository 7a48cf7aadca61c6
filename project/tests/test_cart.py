# tests/test_cart.py

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.future import select

from flowershop.models.cart import CartLine as CartLineModel
from flowershop.models.product import Product as ProductModel
from flowershop.services import cart_store
from flowershop.services.cart import CartReconciler


def store_error(*args, **kwargs):
    raise OperationalError("UPDATE carts", {}, Exception("database is locked"))


async def remote_lines(session_factory, user_id):
    async with session_factory() as s:
        result = await s.execute(select(CartLineModel).where(CartLineModel.user_id == user_id))
        return {row.product_id: row.quantity for row in result.scalars().all()}


def local_lines(session):
    return {line.product.id: line.quantity for line in session.lines}


@pytest.mark.parametrize("q1, q2", [(1, 1), (2, 3), (0, 4), (5, 0)])
async def test_sequential_adds_sum_quantities(request_ns, guest_session, catalog, q1, q2):
    cart = CartReconciler(guest_session, request_ns)
    rose = catalog["A"]

    await cart.add(rose, q1)
    await cart.add(rose, q2)

    assert local_lines(guest_session) == {rose.id: q1 + q2}


async def test_add_mirrors_insert_then_increment(request_ns, user_session, catalog, session_factory):
    cart = CartReconciler(user_session, request_ns)
    rose = catalog["A"]

    await cart.add(rose, 2)
    assert await remote_lines(session_factory, user_session.user_id) == {rose.id: 2}

    await cart.add(rose, 3)
    assert await remote_lines(session_factory, user_session.user_id) == {rose.id: 5}
    assert local_lines(user_session) == {rose.id: 5}


async def test_increment_adds_to_remote_quantity_from_another_tab(request_ns, user_session, catalog, session_factory):
    cart = CartReconciler(user_session, request_ns)
    rose = catalog["A"]
    await cart.add(rose, 1)

    # another tab bumps the stored quantity meanwhile
    async with session_factory() as s:
        await cart_store.update_cart_quantity(s, user_session.user_id, rose.id, 4)

    await cart.add(rose, 1)

    assert await remote_lines(session_factory, user_session.user_id) == {rose.id: 5}
    assert local_lines(user_session) == {rose.id: 2}


async def test_guest_cart_never_touches_the_table(request_ns, guest_session, catalog, session_factory):
    cart = CartReconciler(guest_session, request_ns)
    await cart.add(catalog["A"], 2)
    await cart.update_quantity(catalog["A"].id, 7)

    async with session_factory() as s:
        result = await s.execute(select(CartLineModel))
        assert result.scalars().all() == []
    assert local_lines(guest_session) == {catalog["A"].id: 7}


@pytest.mark.parametrize("bad_quantity", [0, -1, -10])
async def test_update_quantity_below_one_is_ignored(request_ns, user_session, catalog, session_factory, bad_quantity):
    cart = CartReconciler(user_session, request_ns)
    await cart.add(catalog["A"], 3)
    before = [line.model_dump() for line in user_session.lines]

    await cart.update_quantity(catalog["A"].id, bad_quantity)

    assert [line.model_dump() for line in user_session.lines] == before
    assert await remote_lines(session_factory, user_session.user_id) == {catalog["A"].id: 3}


async def test_update_quantity_sets_local_and_remote(request_ns, user_session, catalog, session_factory):
    cart = CartReconciler(user_session, request_ns)
    await cart.add(catalog["B"], 1)

    await cart.update_quantity(catalog["B"].id, 6)

    assert local_lines(user_session) == {catalog["B"].id: 6}
    assert await remote_lines(session_factory, user_session.user_id) == {catalog["B"].id: 6}


async def test_remove_absent_product_twice_is_harmless(request_ns, user_session, catalog):
    cart = CartReconciler(user_session, request_ns)
    await cart.add(catalog["A"], 1)
    before = local_lines(user_session)

    await cart.remove(catalog["C"].id)
    await cart.remove(catalog["C"].id)

    assert local_lines(user_session) == before


async def test_remove_and_clear_mirror_deletes(request_ns, user_session, catalog, session_factory):
    cart = CartReconciler(user_session, request_ns)
    await cart.add(catalog["A"], 1)
    await cart.add(catalog["B"], 2)

    await cart.remove(catalog["A"].id)
    assert await remote_lines(session_factory, user_session.user_id) == {catalog["B"].id: 2}

    await cart.clear()
    assert user_session.lines == []
    assert await remote_lines(session_factory, user_session.user_id) == {}


async def test_load_joins_catalog_and_drops_deleted_products(request_ns, user_session, catalog, session_factory):
    async with session_factory() as s:
        await cart_store.upsert_cart_line(s, user_session.user_id, catalog["A"].id, 2)
        await cart_store.upsert_cart_line(s, user_session.user_id, catalog["C"].id, 1)
        product = await s.get(ProductModel, catalog["C"].id)
        await s.delete(product)
        await s.commit()

    lines = await CartReconciler(user_session, request_ns).load(user_session.user_id)

    assert [(line.product.name, line.product.price, line.quantity) for line in lines] == [("Rose Box", 100, 2)]
    assert lines[0].product.categories == ["Birthday Flowers"]


async def test_load_failure_gives_empty_cart(request_ns, user_session, catalog, monkeypatch):
    cart = CartReconciler(user_session, request_ns)
    await cart.add(catalog["A"], 1)
    monkeypatch.setattr(cart_store, "fetch_user_cart", store_error)

    lines = await cart.load(user_session.user_id)

    assert lines == []
    assert user_session.loaded


async def test_failed_mirror_keeps_local_change(request_ns, user_session, catalog, session_factory, monkeypatch):
    monkeypatch.setattr(cart_store, "upsert_cart_line", store_error)
    cart = CartReconciler(user_session, request_ns)

    line = await cart.add(catalog["B"], 2)

    assert line.quantity == 2
    assert local_lines(user_session) == {catalog["B"].id: 2}
    assert await remote_lines(session_factory, user_session.user_id) == {}


async def test_subtotal_for_selection(request_ns, guest_session, catalog):
    cart = CartReconciler(guest_session, request_ns)
    await cart.add(catalog["A"], 2)
    await cart.add(catalog["B"], 1)

    assert cart.subtotal() == 450
    assert cart.subtotal([catalog["B"].id]) == 250
