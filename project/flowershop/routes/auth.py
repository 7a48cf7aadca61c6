# flowershop/routes/auth.py

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jwt import encode, decode, ExpiredSignatureError, InvalidTokenError
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy.exc import IntegrityError

from flowershop.config import settings
from flowershop.models.profile import Profile
from flowershop.schemas.user import UserCreate, ProfileResponse
from flowershop.services.cart import CartReconciler
from flowershop.services.profile import read_profile, read_profile_by_email, register_profile_service
from flowershop.services.session import SessionRegistry, ShopSession
from flowershop.utils.security import verify_password

router = APIRouter()

# ────────────── JWT ──────────────
SECRET_KEY = settings.AUTH_SECRET_KEY
ACCESS_TOKEN_EXPIRE_MINUTES = settings.AUTH_TOKEN_EXPIRE_MINUTES
ALGORITHM = "HS256"
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    JWT for data (e.g. {"sub": "12"}) valid for expires_delta (15 minutes by default).
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire})
    return encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


async def get_optional_user(request: Request, token: Optional[str] = Depends(oauth2_scheme)) -> Optional[Profile]:
    """
    Profile behind the bearer token, None when no token was sent.

    **Errors:**
    - 401 – token expired, invalid, or its profile is gone
    """
    if not token:
        return None

    log = request.app.state.log
    try:
        payload = decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id = int(payload.get("sub"))
    except ExpiredSignatureError:
        await log.log_warning("auth", "Token expired")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except (InvalidTokenError, TypeError, ValueError):
        await log.log_warning("auth", "Invalid token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token invalid")

    user = await read_profile(request.state.db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


async def get_current_user(user: Optional[Profile] = Depends(get_optional_user)) -> Profile:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def require_admin(user: Profile = Depends(get_current_user)) -> Profile:
    if user.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return user


async def open_user_session(request: Request, user: Profile) -> ShopSession:
    """
    The user's ShopSession, created and filled from the carts table on first use.
    """
    registry: SessionRegistry = request.app.state.sessions
    session = registry.get_or_create(SessionRegistry.user_key(user.id), user.id)
    if not session.loaded:
        await CartReconciler(session, request).load(user.id)
    return session


async def get_shop_session(
    request: Request,
    user: Optional[Profile] = Depends(get_optional_user),
    x_session_id: Optional[str] = Header(default=None),
) -> ShopSession:
    """
    Signed-in shoppers get their own session; guests keep an ephemeral cart
    under the X-Session-Id they send.
    """
    if user is not None:
        return await open_user_session(request, user)
    if not x_session_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign in or send an X-Session-Id header",
        )
    registry: SessionRegistry = request.app.state.sessions
    session = registry.get_or_create(SessionRegistry.guest_key(x_session_id))
    session.loaded = True
    return session


# ────────────── TOKEN ──────────────
@router.post(
    "/token",
    summary="Sign in and get a JWT",
    responses={
        200: {"description": "Token issued, the shopper's cart is loaded"},
        401: {"description": "Wrong email or password"},
        422: {"description": "Validation error"},
    },
)
async def login_for_access_token(request: Request, form_data: OAuth2PasswordRequestForm = Depends()):
    """
    Checks email (form field `username`) and password, returns a bearer token.
    Signing in starts a fresh session whose cart is read from the carts table.
    """
    log = request.app.state.log
    user = await read_profile_by_email(request.state.db, form_data.username)

    if not user or not verify_password(form_data.password, user.password):
        await log.log_warning("auth", "Failed sign-in", {"username": form_data.username})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Wrong email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        data={"sub": str(user.id)},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )

    registry: SessionRegistry = request.app.state.sessions
    registry.discard(SessionRegistry.user_key(user.id))
    session = await open_user_session(request, user)

    await log.log_info("auth", "Signed in", {"id": user.id, "cart_lines": len(session.lines)})
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": ProfileResponse.model_validate(user).model_dump(),
    }


# ────────────── Sign-up ──────────────
@router.post(
    "/register",
    response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a customer account",
    responses={
        201: {"description": "Account created"},
        400: {"description": "Email already registered"},
        422: {"description": "Validation error"},
    },
)
async def register_user(user: UserCreate, request: Request):
    try:
        return await register_profile_service(user, request)
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"An account with email '{user.email}' already exists",
        )


# ────────────── Sign-out ──────────────
@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Sign out and drop the session's local state",
)
async def logout(request: Request, user: Profile = Depends(get_current_user)):
    request.app.state.sessions.discard(SessionRegistry.user_key(user.id))
    await request.app.state.log.log_info("auth", "Signed out", {"id": user.id})
