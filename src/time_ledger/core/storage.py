"""CSV storage manager with atomic operations and validation."""

import csv
import logging
import os
import shutil
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from time_ledger.core.errors import Conflict, ValidationFailed
from time_ledger.core.intervals import find_overlap
from time_ledger.core.models import Client, Project, TimeLog, User

logger = logging.getLogger(__name__)

USER_FIELDS = ["id", "name", "email", "password_hash", "token_version", "created_at"]
CLIENT_FIELDS = ["id", "owner_user_id", "name", "email", "contact_person", "created_at"]
PROJECT_FIELDS = [
    "id",
    "owner_user_id",
    "client_id",
    "title",
    "description",
    "status",
    "deadline",
    "created_at",
]
TIME_LOG_FIELDS = [
    "id",
    "owner_user_id",
    "project_id",
    "client_id",
    "start_time",
    "end_time",
    "description",
    "hours",
    "tag",
    "created_at",
    "updated_at",
]
SEQUENCE_FIELDS = ["table", "last_id"]

# Locks are shared by every StorageManager pointing at the same directory,
# since the API builds a fresh manager per request.
_registry_lock = threading.Lock()
_store_locks: dict[str, threading.RLock] = {}
_user_locks: dict[tuple[str, int], threading.Lock] = {}


def _store_lock(data_dir: Path) -> threading.RLock:
    key = str(data_dir.resolve())
    with _registry_lock:
        if key not in _store_locks:
            _store_locks[key] = threading.RLock()
        return _store_locks[key]


def _user_lock(data_dir: Path, user_id: int) -> threading.Lock:
    key = (str(data_dir.resolve()), user_id)
    with _registry_lock:
        if key not in _user_locks:
            _user_locks[key] = threading.Lock()
        return _user_locks[key]


def _lock_file(file_obj: Any, exclusive: bool = True) -> None:
    """Lock a file in a cross-platform way.

    Args:
        file_obj: File object to lock
        exclusive: If True, acquire exclusive lock; if False, acquire shared lock
    """
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        mode = msvcrt.LK_NBLCK if exclusive else msvcrt.LK_NBRLCK
        msvcrt.locking(file_obj.fileno(), mode, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        mode = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(file_obj.fileno(), mode)


def _unlock_file(file_obj: Any) -> None:
    """Unlock a file in a cross-platform way.

    Args:
        file_obj: File object to unlock
    """
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        msvcrt.locking(file_obj.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        fcntl.flock(file_obj.fileno(), fcntl.LOCK_UN)


class StorageManager:
    """Manages CSV storage for users, clients, projects and time logs.

    Every write replaces the whole file atomically (temporary file + rename).
    Multi-file operations run inside :meth:`transaction`, which restores the
    previous file contents if anything fails part way.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """Initialize storage manager.

        Args:
            data_dir: Custom data directory. Defaults to ~/.time-ledger/data
        """
        if data_dir is None:
            data_dir = Path.home() / ".time-ledger" / "data"

        self.data_dir = data_dir
        self.users_file = self.data_dir / "users.csv"
        self.clients_file = self.data_dir / "clients.csv"
        self.projects_file = self.data_dir / "projects.csv"
        self.time_logs_file = self.data_dir / "time_logs.csv"
        self.sequences_file = self.data_dir / "sequences.csv"
        self.state_dir = self.data_dir.parent / "state"
        self.backup_dir = self.data_dir.parent / "backups"

        # Ensure directories exist
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self.backup_dir.mkdir(parents=True, exist_ok=True)

        self._lock = _store_lock(self.data_dir)
        self._initialize_files()

    @property
    def _tables(self) -> dict[Path, list[str]]:
        return {
            self.users_file: USER_FIELDS,
            self.clients_file: CLIENT_FIELDS,
            self.projects_file: PROJECT_FIELDS,
            self.time_logs_file: TIME_LOG_FIELDS,
            self.sequences_file: SEQUENCE_FIELDS,
        }

    def _initialize_files(self) -> None:
        """Create CSV files with headers if they don't exist."""
        with self._lock:
            for file_path, fieldnames in self._tables.items():
                if not file_path.exists():
                    self._write_csv_atomic(file_path, fieldnames, [])

    def _write_csv_atomic(
        self, file_path: Path, fieldnames: list[str], rows: list[dict[str, Any]]
    ) -> None:
        """Write CSV file atomically using temporary file and rename.

        Args:
            file_path: Target file path
            fieldnames: CSV field names
            rows: List of row dictionaries
        """
        temp_file = file_path.with_suffix(".tmp")

        try:
            with open(temp_file, "w", newline="", encoding="utf-8") as f:
                _lock_file(f, exclusive=True)

                writer = csv.DictWriter(f, fieldnames=fieldnames)
                writer.writeheader()
                writer.writerows(rows)

                f.flush()
                os.fsync(f.fileno())

                _unlock_file(f)

            temp_file.replace(file_path)

        except Exception:
            if temp_file.exists():
                temp_file.unlink()
            raise

    def _read_csv(self, file_path: Path) -> list[dict[str, Any]]:
        """Read CSV file with locking.

        Args:
            file_path: CSV file to read

        Returns:
            List of row dictionaries
        """
        if not file_path.exists():
            return []

        with open(file_path, encoding="utf-8", newline="") as f:
            _lock_file(f, exclusive=False)

            try:
                reader = csv.DictReader(f)
                rows = list(reader)
            finally:
                _unlock_file(f)

        return rows

    def _next_id(self, table: str) -> int:
        """Allocate the next integer id for ``table``.

        Ids are never reused, even after the highest row is deleted.
        """
        rows = self._read_csv(self.sequences_file)
        last_id = 0
        for row in rows:
            if row["table"] == table:
                last_id = int(row["last_id"])
                break
        else:
            rows.append({"table": table, "last_id": 0})

        next_id = last_id + 1
        for row in rows:
            if row["table"] == table:
                row["last_id"] = next_id
        self._write_csv_atomic(self.sequences_file, SEQUENCE_FIELDS, rows)
        return next_id

    def _upsert(self, file_path: Path, fieldnames: list[str], row: dict[str, Any]) -> None:
        rows = self._read_csv(file_path)
        for i, existing in enumerate(rows):
            if existing["id"] == str(row["id"]):
                rows[i] = row
                break
        else:
            rows.append(row)
        self._write_csv_atomic(file_path, fieldnames, rows)

    def _delete_where(self, file_path: Path, fieldnames: list[str], column: str, value: int) -> int:
        rows = self._read_csv(file_path)
        kept = [r for r in rows if r[column] != str(value)]
        removed = len(rows) - len(kept)
        if removed:
            self._write_csv_atomic(file_path, fieldnames, kept)
        return removed

    @contextmanager
    def transaction(self) -> Iterator["StorageManager"]:
        """Run a group of writes as one all-or-nothing unit.

        The store lock is held for the whole block. If the block raises, every
        table is restored to its contents at entry and the exception
        propagates.

        Example:
            >>> with storage.transaction():
            ...     storage.delete_time_logs_for_project(7)
            ...     storage.delete_project(7)
        """
        with self._lock:
            snapshot = {
                path: path.read_bytes() if path.exists() else None for path in self._tables
            }
            try:
                yield self
            except BaseException:
                logger.warning("Rolling back storage transaction in %s", self.data_dir)
                for path, content in snapshot.items():
                    if content is None:
                        path.unlink(missing_ok=True)
                    else:
                        temp_file = path.with_suffix(".rollback")
                        temp_file.write_bytes(content)
                        temp_file.replace(path)
                raise

    @contextmanager
    def user_lock(self, user_id: int) -> Iterator[None]:
        """Serialize check-then-write sequences for one user."""
        lock = _user_lock(self.data_dir, user_id)
        with lock:
            yield

    def backup(self, label: Optional[str] = None) -> Path:
        """Create backup of all data files.

        Args:
            label: Optional label for backup. Defaults to timestamp

        Returns:
            Path to backup directory
        """
        if label is None:
            label = datetime.now().strftime("%Y%m%d_%H%M%S")

        backup_path = self.backup_dir / label
        backup_path.mkdir(parents=True, exist_ok=True)

        with self._lock:
            for file in self._tables:
                if file.exists():
                    shutil.copy2(file, backup_path / file.name)

        return backup_path

    # User operations

    def save_user(self, user: User) -> User:
        """Insert or update a user.

        Raises:
            ValidationFailed: If another user already has the e-mail
        """
        with self._lock:
            for existing in self.load_users():
                if existing.email == user.email and existing.id != user.id:
                    raise ValidationFailed.for_field(
                        "email", "The email you provided is already in use!"
                    )
            if not user.id:
                user.id = self._next_id("users")
            self._upsert(self.users_file, USER_FIELDS, user.to_dict())
        return user

    def load_users(self) -> list[User]:
        return [User.from_dict(row) for row in self._read_csv(self.users_file)]

    def get_user(self, user_id: int) -> Optional[User]:
        for user in self.load_users():
            if user.id == user_id:
                return user
        return None

    def get_user_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        for user in self.load_users():
            if user.email == email:
                return user
        return None

    # Client operations

    def save_client(self, client: Client) -> Client:
        """Insert or update a client.

        Raises:
            ValidationFailed: If the owner already has a client with the e-mail
        """
        with self._lock:
            for existing in self.load_clients(owner_user_id=client.owner_user_id):
                if existing.email == client.email and existing.id != client.id:
                    raise ValidationFailed.for_field(
                        "email", "Client already exists for this user"
                    )
            if not client.id:
                client.id = self._next_id("clients")
            self._upsert(self.clients_file, CLIENT_FIELDS, client.to_dict())
        return client

    def load_clients(self, owner_user_id: Optional[int] = None) -> list[Client]:
        """Load clients, optionally only those of one owner."""
        clients = [Client.from_dict(row) for row in self._read_csv(self.clients_file)]
        if owner_user_id is not None:
            clients = [c for c in clients if c.owner_user_id == owner_user_id]
        return clients

    def get_client(self, client_id: int) -> Optional[Client]:
        for client in self.load_clients():
            if client.id == client_id:
                return client
        return None

    def delete_client(self, client_id: int) -> bool:
        with self._lock:
            return self._delete_where(self.clients_file, CLIENT_FIELDS, "id", client_id) > 0

    # Project operations

    def save_project(self, project: Project) -> Project:
        with self._lock:
            if not project.id:
                project.id = self._next_id("projects")
            self._upsert(self.projects_file, PROJECT_FIELDS, project.to_dict())
        return project

    def load_projects(
        self, owner_user_id: Optional[int] = None, client_id: Optional[int] = None
    ) -> list[Project]:
        """Load projects filtered by owner and/or client."""
        projects = [Project.from_dict(row) for row in self._read_csv(self.projects_file)]
        if owner_user_id is not None:
            projects = [p for p in projects if p.owner_user_id == owner_user_id]
        if client_id is not None:
            projects = [p for p in projects if p.client_id == client_id]
        return projects

    def get_project(self, project_id: int) -> Optional[Project]:
        for project in self.load_projects():
            if project.id == project_id:
                return project
        return None

    def delete_project(self, project_id: int) -> bool:
        with self._lock:
            return self._delete_where(self.projects_file, PROJECT_FIELDS, "id", project_id) > 0

    # Time log operations

    def save_time_log(self, time_log: TimeLog) -> TimeLog:
        """Insert or update a time log.

        The exclusion rule (no two overlapping intervals per user) is checked
        again here under the store lock, independently of the engine's own
        validation.

        Raises:
            Conflict: If the log overlaps another log of the same owner
        """
        with self._lock:
            others = self.load_time_logs(owner_user_id=time_log.owner_user_id)
            clash = find_overlap(
                time_log.start_time, time_log.end_time, others, exclude_id=time_log.id or None
            )
            if clash is not None:
                logger.warning(
                    "Rejected time log for user %s: overlaps log %s",
                    time_log.owner_user_id,
                    clash.id,
                )
                raise Conflict("Time log overlaps with an existing entry.")

            time_log.recompute_hours()
            if not time_log.id:
                time_log.id = self._next_id("time_logs")
            self._upsert(self.time_logs_file, TIME_LOG_FIELDS, time_log.to_dict())
        return time_log

    def load_time_logs(
        self,
        owner_user_id: Optional[int] = None,
        project_id: Optional[int] = None,
    ) -> list[TimeLog]:
        """Load time logs, most recent start first.

        Args:
            owner_user_id: Only logs of this user
            project_id: Only logs of this project

        Returns:
            List of TimeLog objects
        """
        logs = [TimeLog.from_dict(row) for row in self._read_csv(self.time_logs_file)]
        if owner_user_id is not None:
            logs = [log for log in logs if log.owner_user_id == owner_user_id]
        if project_id is not None:
            logs = [log for log in logs if log.project_id == project_id]
        logs.sort(key=lambda log: (log.start_time, log.id), reverse=True)
        return logs

    def get_time_log(self, time_log_id: int) -> Optional[TimeLog]:
        for log in self.load_time_logs():
            if log.id == time_log_id:
                return log
        return None

    def delete_time_log(self, time_log_id: int) -> bool:
        with self._lock:
            return self._delete_where(self.time_logs_file, TIME_LOG_FIELDS, "id", time_log_id) > 0

    def delete_time_logs_for_project(self, project_id: int) -> int:
        """Delete every time log of a project.

        Returns:
            Number of deleted logs
        """
        with self._lock:
            return self._delete_where(
                self.time_logs_file, TIME_LOG_FIELDS, "project_id", project_id
            )
