"""User accounts: registration, credential checks and token revocation."""

import logging
from typing import Optional

from passlib.context import CryptContext  # type: ignore[import-untyped]

from time_ledger.core.clock import Clock, SystemClock
from time_ledger.core.clients import validate_email
from time_ledger.core.errors import NotFound, Unauthorized, ValidationFailed
from time_ledger.core.models import User
from time_ledger.core.storage import StorageManager
from time_ledger.core.validation import is_blank

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

PASSWORD_MIN_LENGTH = 8


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return bool(pwd_context.verify(plain, hashed))


class AccountManager:
    """Manage user accounts."""

    def __init__(self, storage: StorageManager, clock: Optional[Clock] = None):
        self.storage = storage
        self.clock = clock or SystemClock()

    def register(self, name: Optional[str], email: Optional[str], password: Optional[str]) -> User:
        """Create a new user.

        Args:
            name: Display name
            email: Login e-mail, unique regardless of case
            password: Plain password, at least 8 characters

        Returns:
            Created user

        Raises:
            ValidationFailed: Missing fields, short password, e-mail taken
        """
        errors: dict[str, list[str]] = {}
        if is_blank(name):
            errors["name"] = ["We need to know your name!"]
        if is_blank(email):
            errors["email"] = ["We need to know your email!"]
        if is_blank(password):
            errors["password"] = ["You need a password!"]
        elif len(str(password)) < PASSWORD_MIN_LENGTH:
            errors["password"] = ["Please provide a minimum 8 characters password"]
        if errors:
            raise ValidationFailed(next(iter(errors.values()))[0], errors=errors)

        user = User(
            name=str(name).strip(),
            email=validate_email(email),
            password_hash=hash_password(str(password)),
            created_at=self.clock.now(),
        )
        self.storage.save_user(user)
        logger.info("Registered user %s", user.id)
        return user

    def authenticate(self, email: Optional[str], password: Optional[str]) -> User:
        """Check credentials.

        Raises:
            ValidationFailed: If e-mail or password is missing
            NotFound: If no user has the e-mail
            Unauthorized: If the password does not match
        """
        if is_blank(email) or is_blank(password):
            raise ValidationFailed("We need your email and password!")
        user = self.storage.get_user_by_email(str(email))
        if user is None:
            raise NotFound("User not found")
        if not verify_password(str(password), user.password_hash):
            logger.warning("Failed login for user %s", user.id)
            raise Unauthorized("Invalid credentials")
        return user

    def get(self, user_id: int) -> User:
        user = self.storage.get_user(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def logout(self, user_id: int) -> User:
        """Revoke every token issued to the user so far."""
        user = self.get(user_id)
        user.token_version += 1
        self.storage.save_user(user)
        logger.info("User %s logged out", user.id)
        return user
