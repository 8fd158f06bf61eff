"""Client management scoped to the owning user."""

import logging
import re
from typing import Any, Optional

from time_ledger.core.clock import Clock, SystemClock
from time_ledger.core.errors import Conflict, ValidationFailed
from time_ledger.core.models import Client
from time_ledger.core.ownership import OwnershipGuard
from time_ledger.core.storage import StorageManager
from time_ledger.core.validation import is_blank

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_email(value: Any, field: str = "email") -> str:
    """Normalize and validate an e-mail address.

    Raises:
        ValidationFailed: If the address is malformed or too long
    """
    email = str(value).strip().lower()
    if not EMAIL_RE.match(email):
        raise ValidationFailed.for_field(field, "Please provide a valid email address")
    if len(email) > 255:
        raise ValidationFailed.for_field(field, "Email should not be more than 255 characters")
    return email


class ClientManager:
    """CRUD for clients, always filtered by the requesting user."""

    def __init__(self, storage: StorageManager, clock: Optional[Clock] = None):
        self.storage = storage
        self.clock = clock or SystemClock()
        self.guard = OwnershipGuard(storage)

    def list_clients(self, user_id: int) -> list[Client]:
        return self.storage.load_clients(owner_user_id=user_id)

    def get(self, user_id: int, client_id: int) -> Client:
        return self.guard.client(client_id, user_id)

    def create(
        self,
        user_id: int,
        name: Optional[str],
        email: Optional[str],
        contact_person: Optional[str],
    ) -> Client:
        """Create a client for ``user_id``.

        Raises:
            ValidationFailed: Missing fields, bad e-mail, or e-mail already used
                by another client of the same user
        """
        errors: dict[str, list[str]] = {}
        if is_blank(name):
            errors["name"] = ["We need to know your client name!"]
        if is_blank(email):
            errors["email"] = ["We need to know your client email!"]
        if is_blank(contact_person):
            errors["contact_person"] = ["We need to know the contact person for the client!"]
        if errors:
            raise ValidationFailed(next(iter(errors.values()))[0], errors=errors)

        client = Client(
            owner_user_id=user_id,
            name=str(name).strip(),
            email=validate_email(email),
            contact_person=str(contact_person).strip(),
            created_at=self.clock.now(),
        )
        self.storage.save_client(client)
        logger.info("User %s created client %s", user_id, client.id)
        return client

    def update(
        self,
        user_id: int,
        client_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        contact_person: Optional[str] = None,
    ) -> Client:
        """Update the non-blank fields of a client."""
        client = self.guard.client(client_id, user_id)
        if not is_blank(name):
            client.name = str(name).strip()
        if not is_blank(email):
            client.email = validate_email(email)
            for other in self.storage.load_clients(owner_user_id=user_id):
                if other.id != client.id and other.email == client.email:
                    raise ValidationFailed.for_field(
                        "email", "Email already exists for another client of this user"
                    )
        if not is_blank(contact_person):
            client.contact_person = str(contact_person).strip()
        self.storage.save_client(client)
        return client

    def delete(self, user_id: int, client_id: int) -> None:
        """Delete a client that owns no projects.

        Raises:
            NotFound: If the client is not the user's
            Conflict: If the client still has projects
        """
        client = self.guard.client(client_id, user_id)
        if self.storage.load_projects(client_id=client.id):
            raise Conflict(
                "Cannot delete client with projects. Please delete the projects first."
            )
        self.storage.delete_client(client.id)
        logger.info("User %s deleted client %s", user_id, client.id)
