"""Project management scoped to the owning user."""

import logging
from datetime import date
from typing import Any, Optional

from time_ledger.core.clock import Clock, SystemClock
from time_ledger.core.errors import InternalError, ValidationFailed
from time_ledger.core.models import Project, ProjectStatus
from time_ledger.core.ownership import OwnershipGuard
from time_ledger.core.storage import StorageManager
from time_ledger.core.validation import is_blank

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 255


def _parse_deadline(value: Any) -> Optional[date]:
    if is_blank(value):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationFailed.for_field("deadline", "Project deadline must be a valid date.")


def _parse_client_id(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationFailed.for_field("client_id", "Client ID must be an integer.")


class ProjectManager:
    """CRUD for projects, always filtered by the requesting user."""

    def __init__(self, storage: StorageManager, clock: Optional[Clock] = None):
        self.storage = storage
        self.clock = clock or SystemClock()
        self.guard = OwnershipGuard(storage)

    def _owned_client_id(self, user_id: int, client_id: Any) -> int:
        """Check the client belongs to the user; this is a validation error, not a 404."""
        parsed = _parse_client_id(client_id)
        client = self.storage.get_client(parsed)
        if client is None or not self.guard.belongs_to(client, user_id):
            raise ValidationFailed.for_field("client_id", "Client does not exist for this user.")
        return parsed

    def list_projects(self, user_id: int, client_id: Optional[int] = None) -> list[Project]:
        return self.storage.load_projects(owner_user_id=user_id, client_id=client_id)

    def get(self, user_id: int, project_id: int) -> Project:
        return self.guard.project(project_id, user_id)

    def create(
        self,
        user_id: int,
        title: Optional[str],
        status: Optional[str],
        client_id: Any,
        description: Optional[str] = None,
        deadline: Any = None,
    ) -> Project:
        """Create a project under one of the user's clients.

        Raises:
            ValidationFailed: Missing/invalid fields or a foreign client
        """
        errors: dict[str, list[str]] = {}
        if is_blank(title):
            errors["title"] = ["We need to know the project title!"]
        elif len(str(title)) > TITLE_MAX_LENGTH:
            errors["title"] = ["Project title should not be more than 255 characters."]
        if is_blank(status):
            errors["status"] = ["Project status is required."]
        elif status not in [s.value for s in ProjectStatus]:
            errors["status"] = ["Project status must be either active or completed."]
        if is_blank(client_id):
            errors["client_id"] = ["Client ID is required."]
        if errors:
            raise ValidationFailed(next(iter(errors.values()))[0], errors=errors)

        project = Project(
            owner_user_id=user_id,
            client_id=self._owned_client_id(user_id, client_id),
            title=str(title).strip(),
            status=ProjectStatus(status),
            description=None if is_blank(description) else description,
            deadline=_parse_deadline(deadline),
            created_at=self.clock.now(),
        )
        self.storage.save_project(project)
        logger.info("User %s created project %s", user_id, project.id)
        return project

    def update(
        self,
        user_id: int,
        project_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[str] = None,
        deadline: Any = None,
        client_id: Any = None,
    ) -> Project:
        """Update the non-blank fields of a project.

        An unknown status is ignored. Existing time logs keep the client they
        were created with when the project moves to another client.
        """
        project = self.guard.project(project_id, user_id)
        if not is_blank(title):
            if len(str(title)) > TITLE_MAX_LENGTH:
                raise ValidationFailed.for_field(
                    "title", "Project title should not be more than 255 characters."
                )
            project.title = str(title).strip()
        if not is_blank(description):
            project.description = description
        if status in [s.value for s in ProjectStatus]:
            project.status = ProjectStatus(status)
        if not is_blank(deadline):
            project.deadline = _parse_deadline(deadline)
        if not is_blank(client_id):
            project.client_id = self._owned_client_id(user_id, client_id)
        self.storage.save_project(project)
        return project

    def delete(self, user_id: int, project_id: int) -> int:
        """Delete a project and all of its time logs atomically.

        Returns:
            Number of time logs deleted with the project

        Raises:
            NotFound: If the project is not the user's
            InternalError: If storage fails; nothing is deleted in that case
        """
        project = self.guard.project(project_id, user_id)
        try:
            with self.storage.user_lock(user_id), self.storage.transaction():
                removed = self.storage.delete_time_logs_for_project(project.id)
                self.storage.delete_project(project.id)
        except Exception as e:
            logger.error("Failed to delete project %s: %s", project.id, e)
            raise InternalError(f"Error deleting project: {e}") from e

        logger.info("User %s deleted project %s with %s time logs", user_id, project.id, removed)
        return removed
