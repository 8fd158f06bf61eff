"""Core data models for time tracking."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Optional

HOURS_QUANTUM = Decimal("0.01")


class ProjectStatus(str, Enum):
    """Lifecycle status of a project."""

    ACTIVE = "active"
    COMPLETED = "completed"


class TimeLogTag(str, Enum):
    """Billing tag of a time log."""

    BILLABLE = "billable"
    NON_BILLABLE = "non-billable"

    @classmethod
    def values(cls) -> list[str]:
        return [tag.value for tag in cls]


def round_hours(value: Decimal) -> Decimal:
    """Round an hour amount to two decimals, half away from zero."""
    return value.quantize(HOURS_QUANTUM, rounding=ROUND_HALF_UP)


def compute_hours(start_time: datetime, end_time: Optional[datetime]) -> Optional[Decimal]:
    """Derive billed hours for an interval.

    Only whole elapsed minutes count, so 59 seconds add nothing.

    Args:
        start_time: Interval start
        end_time: Interval end, None while the timer is running

    Returns:
        ``round(minutes / 60, 2)`` or None for a running interval
    """
    if end_time is None:
        return None
    minutes = int((end_time - start_time).total_seconds() // 60)
    return round_hours(Decimal(minutes) / Decimal(60))


def _opt(value: str) -> Optional[str]:
    return value if value else None


@dataclass
class User:
    """Account owning clients, projects and time logs.

    Attributes:
        id: Integer identifier
        name: Display name
        email: Login e-mail, stored lowercased
        password_hash: passlib hash of the password
        token_version: Bumped on logout to revoke issued tokens
        created_at: Creation timestamp
    """

    name: str
    email: str
    password_hash: str
    id: int = 0
    token_version: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        self.email = self.email.strip().lower()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CSV serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "password_hash": self.password_hash,
            "token_version": self.token_version,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        """Create User from dictionary (CSV deserialization)."""
        return cls(
            id=int(data["id"]),
            name=data["name"],
            email=data["email"],
            password_hash=data["password_hash"],
            token_version=int(data.get("token_version") or 0),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass
class Client:
    """Customer a user bills work to.

    Attributes:
        id: Integer identifier
        owner_user_id: Owning user
        name: Client name
        email: Contact e-mail, unique per owner, stored lowercased
        contact_person: Person to talk to
        created_at: Creation timestamp
    """

    owner_user_id: int
    name: str
    email: str
    contact_person: str
    id: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        self.email = self.email.strip().lower()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CSV serialization."""
        return {
            "id": self.id,
            "owner_user_id": self.owner_user_id,
            "name": self.name,
            "email": self.email,
            "contact_person": self.contact_person,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Client":
        """Create Client from dictionary (CSV deserialization)."""
        return cls(
            id=int(data["id"]),
            owner_user_id=int(data["owner_user_id"]),
            name=data["name"],
            email=data["email"],
            contact_person=data["contact_person"],
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass
class Project:
    """Project worked on for a client.

    Attributes:
        id: Integer identifier
        owner_user_id: Owning user
        client_id: Client of the same owner
        title: Project title
        description: Optional description
        status: active or completed
        deadline: Optional due date
        created_at: Creation timestamp
    """

    owner_user_id: int
    client_id: int
    title: str
    status: ProjectStatus = ProjectStatus.ACTIVE
    id: int = 0
    description: Optional[str] = None
    deadline: Optional[date] = None
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CSV serialization."""
        return {
            "id": self.id,
            "owner_user_id": self.owner_user_id,
            "client_id": self.client_id,
            "title": self.title,
            "description": self.description or "",
            "status": self.status.value,
            "deadline": self.deadline.isoformat() if self.deadline else "",
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        """Create Project from dictionary (CSV deserialization)."""
        return cls(
            id=int(data["id"]),
            owner_user_id=int(data["owner_user_id"]),
            client_id=int(data["client_id"]),
            title=data["title"],
            description=_opt(data["description"]),
            status=ProjectStatus(data["status"]),
            deadline=date.fromisoformat(data["deadline"]) if data["deadline"] else None,
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass
class TimeLog:
    """Interval of work on a project.

    Attributes:
        id: Integer identifier
        owner_user_id: Owning user
        project_id: Project worked on
        client_id: Project's client at creation time (not re-synced)
        start_time: When work started
        end_time: When work ended (None while running)
        description: Free text
        hours: Derived from start/end, None while running
        tag: billable, non-billable or None
        created_at: When this record was created
        updated_at: Last update time
    """

    owner_user_id: int
    project_id: int
    client_id: int
    start_time: datetime
    id: int = 0
    end_time: Optional[datetime] = None
    description: str = ""
    hours: Optional[Decimal] = None
    tag: Optional[TimeLogTag] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        self.recompute_hours()

    @property
    def is_running(self) -> bool:
        """Check if this time log is an active timer."""
        return self.end_time is None

    def recompute_hours(self) -> None:
        """Keep ``hours`` consistent with the current start/end pair."""
        self.hours = compute_hours(self.start_time, self.end_time)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CSV serialization."""
        return {
            "id": self.id,
            "owner_user_id": self.owner_user_id,
            "project_id": self.project_id,
            "client_id": self.client_id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else "",
            "description": self.description or "",
            "hours": str(self.hours) if self.hours is not None else "",
            "tag": self.tag.value if self.tag else "",
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeLog":
        """Create TimeLog from dictionary (CSV deserialization).

        Hours are recomputed on load rather than trusted from the file.
        """
        return cls(
            id=int(data["id"]),
            owner_user_id=int(data["owner_user_id"]),
            project_id=int(data["project_id"]),
            client_id=int(data["client_id"]),
            start_time=datetime.fromisoformat(data["start_time"]),
            end_time=datetime.fromisoformat(data["end_time"]) if data["end_time"] else None,
            description=data["description"],
            tag=TimeLogTag(data["tag"]) if data["tag"] else None,
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )
