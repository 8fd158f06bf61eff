"""Account endpoints: register, login, logout and the current user."""

from fastapi import APIRouter, Depends, status  # type: ignore[import-untyped]

from time_ledger.api.auth import create_token_for_user, get_current_user
from time_ledger.api.dependencies import get_accounts, get_config
from time_ledger.api.models import (
    Envelope,
    LoginData,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserResponse,
)
from time_ledger.core.accounts import AccountManager
from time_ledger.core.config import ConfigManager
from time_ledger.core.models import User

router = APIRouter()


@router.post(
    "/register",
    response_model=Envelope[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: RegisterRequest,
    accounts: AccountManager = Depends(get_accounts),
) -> Envelope[UserResponse]:
    """Create an account.

    Example:
        >>> POST /api/v1/register
        {"name": "Ada", "email": "ada@example.com", "password": "password123"}
    """
    user = accounts.register(request.name, request.email, request.password)
    return Envelope[UserResponse](
        message="User created successfully",
        data=UserResponse.from_user(user),
        status=status.HTTP_201_CREATED,
    )


@router.post("/login", response_model=Envelope[LoginData])
async def login(
    request: LoginRequest,
    accounts: AccountManager = Depends(get_accounts),
    config: ConfigManager = Depends(get_config),
) -> Envelope[LoginData]:
    """Exchange credentials for a bearer token.

    Example:
        >>> POST /api/v1/login
        {"email": "ada@example.com", "password": "password123"}
    """
    user = accounts.authenticate(request.email, request.password)
    token = create_token_for_user(config, user)
    return Envelope[LoginData](
        message="Login successful",
        data=LoginData(
            user=UserResponse.from_user(user),
            token=token["access_token"],
            token_type=token["token_type"],
            expires_in=token["expires_in"],
        ),
        status=status.HTTP_200_OK,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    user: User = Depends(get_current_user),
    accounts: AccountManager = Depends(get_accounts),
) -> MessageResponse:
    """Revoke every token issued to the current user."""
    accounts.logout(user.id)
    return MessageResponse(message="User logged out successfully", status=status.HTTP_200_OK)


@router.get("/user", response_model=Envelope[UserResponse])
async def current_user(user: User = Depends(get_current_user)) -> Envelope[UserResponse]:
    """Return the authenticated user."""
    return Envelope[UserResponse](
        message="User retrieved successfully",
        data=UserResponse.from_user(user),
        status=status.HTTP_200_OK,
    )
