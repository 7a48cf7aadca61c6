# flowershop/routes/profile.py

from fastapi import APIRouter, Depends, Request, status

from flowershop.models.profile import Profile
from flowershop.schemas.user import ProfileResponse, ProfileUpdate
from flowershop.services.profile import update_profile_service
from flowershop.routes.auth import get_current_user

router = APIRouter()

@router.get(
    "/me",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="My profile",
)
async def read_me(user: Profile = Depends(get_current_user)):
    return user


@router.patch(
    "/me",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Update my phone or address",
    responses={
        200: {"description": "Profile updated"},
        401: {"description": "Missing or invalid token"},
    },
)
async def update_me(profile_update: ProfileUpdate, request: Request, user: Profile = Depends(get_current_user)):
    try:
        return await update_profile_service(user.id, profile_update, request)
    except Exception as e:
        await request.app.state.log.log_error("profile", f"Failed to update profile: {e}", {"id": user.id})
        raise
