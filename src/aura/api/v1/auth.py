"""Account endpoints: registration, JWT login/refresh and the current profile."""

from fastapi import APIRouter, Depends, status

from aura.api.deps import get_auth_service, get_current_user
from aura.models.user import User
from aura.schemas.auth import LoginRequest, RefreshRequest, TokenPair, UserRegister, UserResponse
from aura.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
    description="""
    Creates the user, assigns a unique inbound address for forwarded bank
    alerts and seeds the default categories ("Other" included).

    400 when the e-mail is already registered.
    """,
)
async def register(
    data: UserRegister,
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    user = await auth_service.register(
        email=data.email, password=data.password, full_name=data.full_name
    )
    return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenPair, summary="Exchange credentials for tokens")
async def login(
    data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenPair:
    """401 on bad credentials, 403 for a deactivated account."""
    return await auth_service.login(email=data.email, password=data.password)


@router.post("/refresh", response_model=TokenPair, summary="Exchange a refresh token")
async def refresh(
    data: RefreshRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenPair:
    return await auth_service.refresh_tokens(data.refresh_token)


@router.get("/me", response_model=UserResponse, summary="Current user and inbound address")
async def get_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)
