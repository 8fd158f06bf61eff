"""Tests for owner scoping."""

from datetime import datetime

import pytest  # type: ignore[import-not-found]

from time_ledger.core.errors import NotFound
from time_ledger.core.models import Client, Project, TimeLog, User
from time_ledger.core.ownership import OwnershipGuard
from time_ledger.core.storage import StorageManager


class TestOwnershipGuard:
    """Test that entities resolve only for their owner."""

    def test_owner_sees_entities(
        self, storage: StorageManager, user: User, client: Client, project: Project
    ) -> None:
        guard = OwnershipGuard(storage)
        assert guard.client(client.id, user.id).id == client.id
        assert guard.project(project.id, user.id).id == project.id

    def test_foreign_and_missing_look_the_same(
        self, storage: StorageManager, other_user: User, client: Client, project: Project
    ) -> None:
        """Other users get the same error as for ids that do not exist."""
        guard = OwnershipGuard(storage)

        with pytest.raises(NotFound, match="Client not found"):
            guard.client(client.id, other_user.id)
        with pytest.raises(NotFound, match="Client not found"):
            guard.client(12345, other_user.id)
        with pytest.raises(NotFound, match="Project not found."):
            guard.project(project.id, other_user.id)

    def test_project_needs_owned_client(
        self, storage: StorageManager, user: User, other_user: User, client: Client
    ) -> None:
        """A project pointing at someone else's client is not reachable."""
        foreign_client = storage.save_client(
            Client(owner_user_id=other_user.id, name="Z", email="z@z.test", contact_person="z")
        )
        project = storage.save_project(
            Project(owner_user_id=user.id, client_id=foreign_client.id, title="Odd")
        )
        guard = OwnershipGuard(storage)

        assert not guard.belongs_to(project, user.id)
        assert not guard.belongs_to(project, other_user.id)

    def test_time_log_resolves_through_project(
        self, storage: StorageManager, user: User, other_user: User, project: Project
    ) -> None:
        log = storage.save_time_log(
            TimeLog(
                owner_user_id=user.id,
                project_id=project.id,
                client_id=project.client_id,
                start_time=datetime(2025, 6, 1, 9),
                end_time=datetime(2025, 6, 1, 10),
            )
        )
        guard = OwnershipGuard(storage)

        assert guard.time_log(log.id, user.id).id == log.id
        with pytest.raises(NotFound, match="Project time log not found."):
            guard.time_log(log.id, other_user.id)

        storage.delete_project(project.id)
        with pytest.raises(NotFound):
            guard.time_log(log.id, user.id)
