# flowershop/services/driver.py

from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import Request

from flowershop.models.driver import Driver as DriverModel
from flowershop.models.profile import Profile as ProfileModel
from flowershop.schemas.driver import Driver, DriverCreate, DriverUpdate
from flowershop.services.errors import DriverNotFound
from flowershop.utils.security import hash_password


def driver_view(db_driver: DriverModel) -> Driver:
    profile = db_driver.profile
    return Driver(
        id=db_driver.id,
        profile_id=db_driver.profile_id,
        name=(profile.full_name if profile and profile.full_name else "Unknown"),
        email=(profile.email if profile else "") or "",
        username=db_driver.username,
        phone=(profile.phone if profile else "") or "",
        vehicle_number=db_driver.vehicle_number,
        license_number=db_driver.license_number,
        status=db_driver.status,
        is_available=db_driver.is_available,
        deliveries=db_driver.deliveries,
        rating=db_driver.rating,
    )


async def read_driver(db: AsyncSession, id: int) -> DriverModel | None:
    result = await db.execute(select(DriverModel).where(DriverModel.id == id))
    return result.scalar_one_or_none()


async def read_drivers_service(request: Request) -> list[Driver]:
    db = request.state.db
    result = await db.execute(select(DriverModel).order_by(DriverModel.id))
    return [driver_view(d) for d in result.scalars().all()]


async def create_driver_service(data: DriverCreate, request: Request) -> Driver:
    """
    Driver account: a profile with role driver plus its drivers row,
    written in one transaction.
    """
    db = request.state.db
    log = request.app.state.log

    db_profile = ProfileModel(
        email=str(data.email).strip().lower(),
        password=hash_password(data.password),
        full_name=data.full_name,
        phone=data.phone,
        role="driver",
        address="",
    )
    try:
        db.add(db_profile)
        await db.flush()
        db_driver = DriverModel(
            profile_id=db_profile.id,
            username=data.username,
            vehicle_number=data.vehicle_number,
            license_number=data.license_number,
            status="active",
            is_available=True,
        )
        db_driver.profile = db_profile
        db.add(db_driver)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await log.log_info("driver", "Driver created", {"id": db_driver.id, "username": data.username})
    return driver_view(db_driver)


async def update_driver_service(id: int, driver_update: DriverUpdate, request: Request) -> Driver:
    db = request.state.db
    log = request.app.state.log

    db_driver = await read_driver(db, id)
    if db_driver is None:
        await log.log_error("driver", "Driver not found for update", {"id": id})
        raise DriverNotFound()

    for key, value in driver_update.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(db_driver, key, value)

    db.add(db_driver)
    await db.commit()
    db_driver = await read_driver(db, id)
    await log.log_info("driver", "Driver updated", {"id": id})
    return driver_view(db_driver)
