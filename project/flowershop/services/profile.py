# flowershop/services/profile.py

from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, Request

from flowershop.models.profile import Profile as ProfileModel
from flowershop.schemas.user import UserCreate, ProfileUpdate
from flowershop.utils.security import hash_password


async def read_profile(db: AsyncSession, id: int) -> ProfileModel | None:
    result = await db.execute(select(ProfileModel).where(ProfileModel.id == id))
    return result.scalar_one_or_none()


async def read_profile_by_email(db: AsyncSession, email: str) -> ProfileModel | None:
    result = await db.execute(select(ProfileModel).where(ProfileModel.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def register_profile_service(user: UserCreate, request: Request) -> ProfileModel:
    """
    Creates a customer profile. The password is hashed, the address starts empty.
    Raises IntegrityError when the email is taken.
    """
    db = request.state.db
    log = request.app.state.log

    db_profile = ProfileModel(
        email=str(user.email).strip().lower(),
        password=hash_password(user.password),
        full_name=user.full_name,
        phone=user.phone,
        role="customer",
        address="",
    )
    db.add(db_profile)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(db_profile)

    await log.log_info("profile", "Profile created", {"id": db_profile.id})
    return db_profile


async def read_profile_service(id: int, request: Request) -> ProfileModel:
    db = request.state.db
    log = request.app.state.log

    db_profile = await read_profile(db, id)
    if db_profile is None:
        await log.log_error("profile", "Profile not found", {"id": id})
        raise HTTPException(status_code=404, detail="Profile not found")
    return db_profile


async def update_profile_service(id: int, profile_update: ProfileUpdate, request: Request) -> ProfileModel:
    """
    Self-service edit of phone and address.
    An empty phone is ignored, an empty address clears it.
    """
    db = request.state.db
    log = request.app.state.log

    db_profile = await read_profile_service(id, request)

    values = profile_update.model_dump(exclude_unset=True)
    if values.get("phone"):
        db_profile.phone = values["phone"]
    if "address" in values and values["address"] is not None:
        db_profile.address = values["address"]

    db.add(db_profile)
    await db.commit()
    await log.log_info("profile", "Profile updated", {"id": id, "fields": sorted(values)})
    return db_profile
