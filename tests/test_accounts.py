"""Tests for user accounts."""

import pytest  # type: ignore[import-not-found]

from time_ledger.core.accounts import AccountManager, hash_password, verify_password
from time_ledger.core.errors import NotFound, Unauthorized, ValidationFailed
from time_ledger.core.storage import StorageManager


@pytest.fixture
def accounts(storage: StorageManager) -> AccountManager:
    return AccountManager(storage)


class TestAccountManager:
    """Test registration and authentication."""

    def test_register_hashes_password(self, accounts: AccountManager) -> None:
        user = accounts.register("Ada", "Ada@Example.com", "correct horse")

        assert user.id == 1
        assert user.email == "ada@example.com"
        assert user.password_hash != "correct horse"
        assert verify_password("correct horse", user.password_hash)

    def test_register_short_password(self, accounts: AccountManager) -> None:
        with pytest.raises(ValidationFailed, match="minimum 8 characters") as exc:
            accounts.register("Ada", "ada@example.com", "short")
        assert "password" in exc.value.errors

    def test_register_missing_fields(self, accounts: AccountManager) -> None:
        with pytest.raises(ValidationFailed) as exc:
            accounts.register(None, "", None)
        assert set(exc.value.errors) == {"name", "email", "password"}

    def test_register_duplicate_email(self, accounts: AccountManager) -> None:
        accounts.register("Ada", "ada@example.com", "password1")
        with pytest.raises(ValidationFailed, match="already in use"):
            accounts.register("Imposter", "ADA@example.com", "password2")

    def test_authenticate(self, accounts: AccountManager) -> None:
        registered = accounts.register("Ada", "ada@example.com", "password1")
        assert accounts.authenticate(" ada@example.com", "password1").id == registered.id

    def test_authenticate_wrong_password(self, accounts: AccountManager) -> None:
        accounts.register("Ada", "ada@example.com", "password1")
        with pytest.raises(Unauthorized, match="Invalid credentials"):
            accounts.authenticate("ada@example.com", "password2")

    def test_authenticate_unknown_email(self, accounts: AccountManager) -> None:
        with pytest.raises(NotFound, match="User not found"):
            accounts.authenticate("nobody@example.com", "password1")

    def test_authenticate_missing_input(self, accounts: AccountManager) -> None:
        with pytest.raises(ValidationFailed):
            accounts.authenticate("", "password1")

    def test_logout_bumps_token_version(self, accounts: AccountManager) -> None:
        user = accounts.register("Ada", "ada@example.com", "password1")
        assert user.token_version == 0

        accounts.logout(user.id)
        assert accounts.get(user.id).token_version == 1

    def test_get_missing_user(self, accounts: AccountManager) -> None:
        with pytest.raises(NotFound):
            accounts.get(42)


def test_hash_is_salted() -> None:
    assert hash_password("password1") != hash_password("password1")
