"""Project endpoints for project management.

This module provides owner-scoped CRUD operations for projects.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status  # type: ignore[import-untyped]

from time_ledger.api.auth import get_current_user_id
from time_ledger.api.dependencies import get_projects
from time_ledger.api.models import (
    CreateProjectRequest,
    Envelope,
    MessageResponse,
    Page,
    ProjectResponse,
    UpdateProjectRequest,
)
from time_ledger.core.projects import ProjectManager

router = APIRouter()


@router.get("", response_model=Envelope[Page[ProjectResponse]])
async def list_projects(
    client_id: Optional[int] = Query(None, description="Only projects of this client"),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    projects: ProjectManager = Depends(get_projects),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[Page[ProjectResponse]]:
    """List the current user's projects.

    Example:
        >>> GET /api/v1/projects?client_id=3
    """
    items = [ProjectResponse.from_project(p) for p in projects.list_projects(user_id, client_id)]
    return Envelope[Page[ProjectResponse]](
        message="Projects retrieved successfully",
        data=Page[ProjectResponse].build(items, page, per_page),
        status=status.HTTP_200_OK,
    )


@router.post("", response_model=Envelope[ProjectResponse], status_code=status.HTTP_201_CREATED)
async def create_project(
    request: CreateProjectRequest,
    projects: ProjectManager = Depends(get_projects),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[ProjectResponse]:
    """Create a project under one of the current user's clients.

    Example:
        >>> POST /api/v1/projects
        {
            "title": "Website",
            "status": "active",
            "client_id": 3,
            "deadline": "2025-12-31"
        }
    """
    project = projects.create(
        user_id,
        title=request.title,
        status=request.status,
        client_id=request.client_id,
        description=request.description,
        deadline=request.deadline,
    )
    return Envelope[ProjectResponse](
        message="Project created successfully",
        data=ProjectResponse.from_project(project),
        status=status.HTTP_201_CREATED,
    )


@router.get("/{project_id}", response_model=Envelope[ProjectResponse])
async def get_project(
    project_id: int,
    projects: ProjectManager = Depends(get_projects),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[ProjectResponse]:
    """Get a specific project by ID."""
    project = projects.get(user_id, project_id)
    return Envelope[ProjectResponse](
        message="Project retrieved successfully",
        data=ProjectResponse.from_project(project),
        status=status.HTTP_200_OK,
    )


@router.put("/{project_id}", response_model=Envelope[ProjectResponse])
@router.patch("/{project_id}", response_model=Envelope[ProjectResponse], include_in_schema=False)
async def update_project(
    project_id: int,
    request: UpdateProjectRequest,
    projects: ProjectManager = Depends(get_projects),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[ProjectResponse]:
    """Update the non-blank fields of a project.

    An unknown status is ignored rather than rejected.
    """
    project = projects.update(
        user_id,
        project_id,
        title=request.title,
        description=request.description,
        status=request.status,
        deadline=request.deadline,
        client_id=request.client_id,
    )
    return Envelope[ProjectResponse](
        message="Project updated successfully",
        data=ProjectResponse.from_project(project),
        status=status.HTTP_200_OK,
    )


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: int,
    projects: ProjectManager = Depends(get_projects),
    user_id: int = Depends(get_current_user_id),
) -> MessageResponse:
    """Delete a project together with its time logs."""
    projects.delete(user_id, project_id)
    return MessageResponse(message="Project deleted successfully", status=status.HTTP_200_OK)
