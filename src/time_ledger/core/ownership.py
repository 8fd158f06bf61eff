"""Owner scoping for every entity lookup.

One predicate decides whether an entity belongs to the requesting user. It is
parameterized per entity type by an owner resolver: the list of user ids the
entity resolves to, directly through its ``owner_user_id`` or transitively
through its parent records. An entity belongs to a user only when every
resolved owner is that user.
"""

from typing import Any, Callable, Optional

from time_ledger.core.errors import NotFound
from time_ledger.core.models import Client, Project, TimeLog
from time_ledger.core.storage import StorageManager

OwnerResolver = Callable[[Any], list[Optional[int]]]


class OwnershipGuard:
    """Resolve entities for a requesting user, or report them as missing."""

    def __init__(self, storage: StorageManager):
        self.storage = storage
        self._resolvers: dict[type, OwnerResolver] = {
            Client: self._client_owners,
            Project: self._project_owners,
            TimeLog: self._time_log_owners,
        }

    def _client_owners(self, client: Client) -> list[Optional[int]]:
        return [client.owner_user_id]

    def _project_owners(self, project: Project) -> list[Optional[int]]:
        client = self.storage.get_client(project.client_id)
        return [project.owner_user_id, client.owner_user_id if client else None]

    def _time_log_owners(self, time_log: TimeLog) -> list[Optional[int]]:
        project = self.storage.get_project(time_log.project_id)
        if project is None:
            return [time_log.owner_user_id, None]
        return [time_log.owner_user_id, *self._project_owners(project)]

    def belongs_to(self, entity: Any, user_id: int) -> bool:
        """Check whether ``entity`` is reachable from ``user_id``."""
        resolver = self._resolvers[type(entity)]
        return all(owner == user_id for owner in resolver(entity))

    def _scoped(self, entity: Any, user_id: int, message: str) -> Any:
        if entity is None or not self.belongs_to(entity, user_id):
            raise NotFound(message)
        return entity

    def client(self, client_id: int, user_id: int) -> Client:
        """Get a client owned by ``user_id``.

        Raises:
            NotFound: If the client is absent or owned by someone else
        """
        client: Client = self._scoped(
            self.storage.get_client(client_id), user_id, "Client not found"
        )
        return client

    def project(self, project_id: int, user_id: int) -> Project:
        """Get a project owned by ``user_id``.

        Raises:
            NotFound: If the project is absent or owned by someone else
        """
        project: Project = self._scoped(
            self.storage.get_project(project_id), user_id, "Project not found."
        )
        return project

    def time_log(self, time_log_id: int, user_id: int) -> TimeLog:
        """Get a time log owned by ``user_id``.

        Raises:
            NotFound: If the log is absent or owned by someone else
        """
        time_log: TimeLog = self._scoped(
            self.storage.get_time_log(time_log_id), user_id, "Project time log not found."
        )
        return time_log
