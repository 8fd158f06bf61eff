"""Pydantic models for API requests and responses.

This module defines the data models used for API requests and responses.
Request models stay permissive (optional strings) so that the core performs
the field validation and reports it with its own messages.
"""

import math
from datetime import date, datetime
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, Field  # type: ignore[import-untyped]

from time_ledger.core.models import Client, Project, TimeLog, User

T = TypeVar("T")

IdValue = Union[int, str]

# ============================================================================
# Envelopes
# ============================================================================


class Envelope(BaseModel, Generic[T]):
    """Standard ``{"message", "data", "status"}`` response body."""

    message: str
    data: Optional[T] = None
    status: int


class MessageResponse(BaseModel):
    """Envelope without data."""

    message: str
    status: int


class Page(BaseModel, Generic[T]):
    """One page of a listing."""

    current_page: int
    data: list[T]
    per_page: int
    total: int
    last_page: int

    @classmethod
    def build(cls, items: list, page: int, per_page: int):  # type: ignore[no-untyped-def,type-arg]
        """Slice ``items`` to the requested page.

        Args:
            items: Already converted response items
            page: 1-based page number
            per_page: Page size

        Returns:
            Page instance
        """
        total = len(items)
        start = (page - 1) * per_page
        return cls(
            current_page=page,
            data=items[start : start + per_page],
            per_page=per_page,
            total=total,
            last_page=max(1, math.ceil(total / per_page)),
        )


# ============================================================================
# Response Models
# ============================================================================


class UserResponse(BaseModel):
    """Response model for a user."""

    id: int
    name: str
    email: str
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, name=user.name, email=user.email, created_at=user.created_at)


class ClientResponse(BaseModel):
    """Response model for a client."""

    id: int
    user_id: int
    name: str
    email: str
    contact_person: str
    created_at: datetime

    @classmethod
    def from_client(cls, client: Client) -> "ClientResponse":
        """Create response from Client model.

        Args:
            client: Client instance from core.models

        Returns:
            ClientResponse instance
        """
        return cls(
            id=client.id,
            user_id=client.owner_user_id,
            name=client.name,
            email=client.email,
            contact_person=client.contact_person,
            created_at=client.created_at,
        )


class ProjectResponse(BaseModel):
    """Response model for a project."""

    id: int
    user_id: int
    client_id: int
    title: str
    description: Optional[str] = None
    status: str
    deadline: Optional[date] = None
    created_at: datetime

    @classmethod
    def from_project(cls, project: Project) -> "ProjectResponse":
        """Create response from Project model.

        Args:
            project: Project instance from core.models

        Returns:
            ProjectResponse instance
        """
        return cls(
            id=project.id,
            user_id=project.owner_user_id,
            client_id=project.client_id,
            title=project.title,
            description=project.description,
            status=project.status.value,
            deadline=project.deadline,
            created_at=project.created_at,
        )


class TimeLogResponse(BaseModel):
    """Response model for a project time log."""

    id: int
    user_id: int
    project_id: int
    client_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    description: str = ""
    hours: Optional[float] = Field(None, description="Null while the log is running")
    tag: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_time_log(cls, time_log: TimeLog) -> "TimeLogResponse":
        """Create response from TimeLog model.

        Args:
            time_log: TimeLog instance from core.models

        Returns:
            TimeLogResponse instance
        """
        return cls(
            id=time_log.id,
            user_id=time_log.owner_user_id,
            project_id=time_log.project_id,
            client_id=time_log.client_id,
            start_time=time_log.start_time,
            end_time=time_log.end_time,
            description=time_log.description,
            hours=float(time_log.hours) if time_log.hours is not None else None,
            tag=time_log.tag.value if time_log.tag else None,
            created_at=time_log.created_at,
            updated_at=time_log.updated_at,
        )


class LoginData(BaseModel):
    """Data returned by a successful login."""

    user: UserResponse
    token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiry in seconds")


class TotalHoursData(BaseModel):
    """Total hours of the matching time logs."""

    total_hours: float


class DateHours(BaseModel):
    date: str
    total_hours: float


class ProjectHours(BaseModel):
    project_id: int
    hours: float


class ClientHours(BaseModel):
    client_id: int
    hours: float


class ReportResponse(BaseModel):
    """Report views."""

    by_date: list[DateHours]
    by_project: list[ProjectHours]
    by_client: list[ClientHours]


# ============================================================================
# Request Models
# ============================================================================


class RegisterRequest(BaseModel):
    """Request model for registration."""

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    """Request model for login."""

    email: Optional[str] = None
    password: Optional[str] = None


class CreateClientRequest(BaseModel):
    """Request model for creating a client."""

    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = None
    contact_person: Optional[str] = Field(None, max_length=255)


class UpdateClientRequest(BaseModel):
    """Request model for updating a client. Blank fields are left alone."""

    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = None
    contact_person: Optional[str] = Field(None, max_length=255)


class CreateProjectRequest(BaseModel):
    """Request model for creating a project."""

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    deadline: Optional[str] = None
    client_id: Optional[IdValue] = None


class UpdateProjectRequest(BaseModel):
    """Request model for updating a project. Blank fields are left alone."""

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    deadline: Optional[str] = None
    client_id: Optional[IdValue] = None


class StartTimeLogRequest(BaseModel):
    """Request model for starting a timer."""

    description: Optional[str] = None
    tag: Any = Field(None, description="billable or non-billable; anything else is ignored")


class CreateTimeLogRequest(BaseModel):
    """Request model for a manual time log."""

    project_id: Optional[IdValue] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    description: Optional[str] = None
    tag: Any = Field(None, description="billable or non-billable; anything else is ignored")


class UpdateTimeLogRequest(BaseModel):
    """Request model for updating a time log. Blank fields are left alone."""

    start_time: Optional[str] = None
    end_time: Optional[str] = None
    description: Optional[str] = None
    tag: Any = Field(None, description="billable or non-billable; anything else is ignored")


# ============================================================================
# System Models
# ============================================================================


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status (healthy, degraded, unhealthy)")
    timestamp: datetime = Field(..., description="Current server time")
    version: str = Field(..., description="API version")
