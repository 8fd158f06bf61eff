"""Authentication and authorization for the API.

This module provides JWT-based authentication for API endpoints.
Tokens are generated and verified using the secret key from configuration.
A token carries the user id in ``sub`` and the user's token version in
``ver``; logging out bumps the version and so revokes every earlier token.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import Depends  # type: ignore[import-untyped]
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer  # type: ignore[import-untyped]
from jose import JWTError, jwt  # type: ignore[import-untyped]

from time_ledger.api.dependencies import get_config, get_storage
from time_ledger.core.config import ConfigManager
from time_ledger.core.errors import InternalError, Unauthorized
from time_ledger.core.models import User
from time_ledger.core.storage import StorageManager

ALGORITHM = "HS256"

# Missing credentials are reported through Unauthorized, not FastAPI's 403
security = HTTPBearer(auto_error=False)


def create_access_token(
    data: dict[str, Any], secret_key: str, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token.

    Args:
        data: Data to encode in the token
        secret_key: Secret key for encoding
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token string

    Example:
        >>> secret_key = "your-secret-key"
        >>> token = create_access_token(
        ...     data={"sub": "1", "ver": 0},
        ...     secret_key=secret_key,
        ...     expires_delta=timedelta(hours=24)
        ... )
    """
    to_encode = data.copy()

    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=24))

    to_encode.update({"exp": expire, "iat": now})

    encoded_jwt: str = jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)
    return encoded_jwt


def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    config: ConfigManager = Depends(get_config),
) -> dict[str, Any]:
    """Verify JWT token from request.

    Returns:
        Decoded token payload

    Raises:
        Unauthorized: If the token is missing, invalid or expired

    Note:
        This is a dependency function for FastAPI endpoints.
        Use with Depends(verify_token) to protect endpoints.
    """
    if credentials is None:
        raise Unauthorized("Unauthenticated.")

    secret_key = config.get("api.authentication.secret_key")
    if not secret_key:
        raise InternalError("API secret key not configured")

    try:
        payload: dict[str, Any] = jwt.decode(
            credentials.credentials, secret_key, algorithms=[ALGORITHM]
        )
    except JWTError as e:
        raise Unauthorized(f"Invalid authentication credentials: {str(e)}")
    return payload


def get_current_user(
    payload: dict[str, Any] = Depends(verify_token),
    storage: StorageManager = Depends(get_storage),
) -> User:
    """Resolve the token to a live user.

    Raises:
        Unauthorized: If the user is gone or the token was revoked
    """
    try:
        user_id = int(payload.get("sub", ""))
    except (TypeError, ValueError):
        raise Unauthorized("Invalid authentication credentials")

    user = storage.get_user(user_id)
    if user is None or payload.get("ver") != user.token_version:
        raise Unauthorized("Unauthenticated.")
    return user


def get_current_user_id(user: User = Depends(get_current_user)) -> int:
    """The only thing the core needs from authentication."""
    return user.id


def get_token_expiry_seconds(config: ConfigManager) -> int:
    """Get token expiry time in seconds from config.

    Args:
        config: Configuration manager

    Returns:
        Token expiry in seconds
    """
    hours: int = config.get("api.authentication.token_expiry_hours", 24)
    return hours * 3600


def create_token_for_user(config: ConfigManager, user: User) -> dict[str, Any]:
    """Create a complete token response.

    Args:
        config: Configuration manager
        user: User the token authenticates

    Returns:
        Dictionary with access_token, token_type, and expires_in

    Example:
        >>> config = ConfigManager()
        >>> token_data = create_token_for_user(config, user)
        >>> print(token_data["access_token"])
    """
    secret_key = config.ensure_api_secret_key()

    expiry_hours = config.get("api.authentication.token_expiry_hours", 24)
    expires_delta = timedelta(hours=expiry_hours)

    access_token = create_access_token(
        data={"sub": str(user.id), "ver": user.token_version},
        secret_key=secret_key,
        expires_delta=expires_delta,
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": get_token_expiry_seconds(config),
    }
