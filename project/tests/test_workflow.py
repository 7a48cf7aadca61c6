# tests/test_workflow.py

import datetime

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.future import select

from flowershop.models.driver import Driver as DriverModel
from flowershop.models.order import OrderItem as OrderItemModel
from flowershop.models.profile import Profile as ProfileModel
from flowershop.schemas.order import Order
from flowershop.services import order_store
from flowershop.services.errors import (
    AuthorizationSuspected,
    DriverAssignmentLocked,
    DriverNotFound,
    OrderNotFound,
    RemoteWriteFailed,
)
from flowershop.services.reports import summarize
from flowershop.services.workflow import OrderWorkflow


def store_error(*args, **kwargs):
    raise OperationalError("UPDATE orders", {}, Exception("permission denied for table orders"))


async def place_order(session_factory, customer, catalog, option="delivery"):
    async with session_factory() as s:
        db_order = await order_store.create_order_with_items(
            s,
            user_id=customer.id,
            total_amount=200 + (59 if option == "delivery" else 0),
            phone=customer.phone,
            payment="Cash",
            delivery_option=option,
            delivery_address="12 Mabini St",
            items=[{"product_id": catalog["A"].id, "quantity": 2, "price": 100}],
        )
        return db_order.id


@pytest.fixture
async def driver(session_factory):
    async with session_factory() as s:
        profile = ProfileModel(email="ben@example.com", full_name="Ben Reyes", role="driver", address="")
        s.add(profile)
        await s.flush()
        db_driver = DriverModel(profile_id=profile.id, username="ben", vehicle_number="NCR 1234")
        s.add(db_driver)
        await s.commit()
        return db_driver.id


@pytest.fixture
def admin_session(sessions):
    # the admin profile seeded by init_db
    session = sessions.get_or_create("user:1", 1)
    session.loaded = True
    return session


@pytest.fixture
def workflow(admin_session, request_ns):
    return OrderWorkflow(admin_session, request_ns)


async def test_accept_twice_stays_confirmed(workflow, session_factory, customer, catalog):
    order_id = await place_order(session_factory, customer, catalog)

    first = await workflow.accept(order_id)
    second = await workflow.accept(order_id)

    assert first.status == second.status == "Confirmed"
    async with session_factory() as s:
        assert (await order_store.read_order(s, order_id)).status == "Confirmed"


async def test_set_status_allows_any_jump(workflow, session_factory, customer, catalog):
    order_id = await place_order(session_factory, customer, catalog)

    assert (await workflow.set_status(order_id, "Delivered")).status == "Delivered"
    assert (await workflow.set_status(order_id, "Pending")).status == "Pending"


async def test_set_status_unknown_order(workflow):
    with pytest.raises(OrderNotFound):
        await workflow.set_status(404, "Ready")


async def test_assign_driver_needs_accepted_order(workflow, session_factory, customer, catalog, driver):
    order_id = await place_order(session_factory, customer, catalog)

    with pytest.raises(DriverAssignmentLocked):
        await workflow.assign_driver(order_id, driver)

    await workflow.accept(order_id)
    order = await workflow.assign_driver(order_id, driver)

    assert order.driver == "Ben Reyes"
    assert order.driver_id == driver


async def test_assigned_driver_name_is_read_from_profile(workflow, session_factory, customer, catalog, driver):
    order_id = await place_order(session_factory, customer, catalog)
    await workflow.accept(order_id)
    await workflow.assign_driver(order_id, driver)

    async with session_factory() as s:
        db_driver = await s.get(DriverModel, driver)
        profile = await s.get(ProfileModel, db_driver.profile_id)
        profile.full_name = "Benjamin Reyes"
        await s.commit()

    async with session_factory() as s:
        stored = order_store.order_view(await order_store.read_order(s, order_id))
    assert (stored.driver_id, stored.driver) == (driver, "Benjamin Reyes")


async def test_assign_unknown_driver(workflow, session_factory, customer, catalog):
    order_id = await place_order(session_factory, customer, catalog)
    await workflow.accept(order_id)

    with pytest.raises(DriverNotFound):
        await workflow.assign_driver(order_id, 77)


async def test_failed_write_leaves_local_copy(workflow, admin_session, session_factory, customer, catalog, monkeypatch):
    order_id = await place_order(session_factory, customer, catalog)
    await workflow.list_orders()
    monkeypatch.setattr(order_store, "update_order", store_error)

    with pytest.raises(RemoteWriteFailed) as excinfo:
        await workflow.accept(order_id)

    assert "permission denied" in excinfo.value.message
    assert [o.status for o in admin_session.orders] == ["Pending"]


async def test_successful_write_updates_local_copy(workflow, admin_session, session_factory, customer, catalog):
    order_id = await place_order(session_factory, customer, catalog)
    await workflow.list_orders()

    await workflow.set_status(order_id, "Preparing")

    assert [o.status for o in admin_session.orders] == ["Preparing"]


async def test_delete_removes_items_and_order(workflow, admin_session, session_factory, customer, catalog):
    order_id = await place_order(session_factory, customer, catalog)
    await workflow.list_orders()

    await workflow.delete(order_id)

    assert admin_session.orders == []
    async with session_factory() as s:
        assert not await order_store.order_exists(s, order_id)
        result = await s.execute(select(OrderItemModel).where(OrderItemModel.order_id == order_id))
        assert result.scalars().all() == []


async def test_delete_unknown_order(workflow):
    with pytest.raises(OrderNotFound):
        await workflow.delete(12345)


async def test_surviving_row_after_delete(workflow, admin_session, session_factory, customer, catalog, monkeypatch):
    order_id = await place_order(session_factory, customer, catalog)
    await workflow.list_orders()

    async def refused(db, id):
        # the store reports success but removes nothing
        await db.commit()

    monkeypatch.setattr(order_store, "delete_order", refused)

    with pytest.raises(AuthorizationSuspected):
        await workflow.delete(order_id)
    assert [o.id for o in admin_session.orders] == [order_id]


async def test_delete_store_error(workflow, session_factory, customer, catalog, monkeypatch):
    order_id = await place_order(session_factory, customer, catalog)
    monkeypatch.setattr(order_store, "delete_order", store_error)

    with pytest.raises(RemoteWriteFailed):
        await workflow.delete(order_id)
    async with session_factory() as s:
        assert await order_store.order_exists(s, order_id)


async def test_list_orders_includes_unsaved_fallbacks(workflow, sessions, user_session, session_factory, customer, catalog):
    order_id = await place_order(session_factory, customer, catalog)
    fallback = Order(
        id=1_700_000_000_000,
        order_number="ORD-002",
        user_id=customer.id,
        total_amount=75,
        date=datetime.date.today(),
        delivery_option="pickup",
        persisted=False,
    )
    user_session.orders.append(fallback)

    orders = await workflow.list_orders()

    assert [o.id for o in orders] == [order_id, fallback.id]
    assert orders[0].order_number == "ORD-001"
    assert orders[0].customer_name == "Ana Cruz"


async def test_list_user_orders_only_own(workflow, session_factory, customer, catalog):
    own = await place_order(session_factory, customer, catalog)
    async with session_factory() as s:
        other = ProfileModel(email="carla@example.com", full_name="Carla", role="customer", address="")
        s.add(other)
        await s.commit()
    await place_order(session_factory, other, catalog, option="pickup")

    orders = await workflow.list_user_orders(customer.id)

    assert [o.id for o in orders] == [own]


async def test_fallbacks_listed_once_and_owned_by_their_session(
    workflow, admin_session, sessions, user_session, session_factory, customer, catalog
):
    order_id = await place_order(session_factory, customer, catalog)
    fallback = Order(
        id=1_700_000_000_001,
        order_number="ORD-002",
        user_id=customer.id,
        total_amount=259,
        date=datetime.date.today(),
        persisted=False,
    )
    user_session.orders.append(fallback)

    for _ in range(3):
        orders = await workflow.list_orders()

    assert [o.id for o in orders] == [order_id, fallback.id]
    assert sessions.fallback_orders() == [fallback]
    assert [o.id for o in admin_session.orders] == [order_id]
    assert summarize(orders, "all").total_revenue == 259 + 259

    sessions.discard(user_session.key)

    assert [o.id for o in await workflow.list_orders()] == [order_id]
