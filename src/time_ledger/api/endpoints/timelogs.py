"""Project time log endpoints.

This module provides the timer controls (start/stop), manual time log CRUD
and the total-hours query.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status  # type: ignore[import-untyped]

from time_ledger.analysis.reports import ReportAggregator
from time_ledger.api.auth import get_current_user_id
from time_ledger.api.dependencies import get_reports, get_tracker
from time_ledger.api.models import (
    CreateTimeLogRequest,
    Envelope,
    MessageResponse,
    Page,
    StartTimeLogRequest,
    TimeLogResponse,
    TotalHoursData,
    UpdateTimeLogRequest,
)
from time_ledger.core.filters import TimeLogFilters
from time_ledger.core.tracker import TimeTracker

router = APIRouter()


@router.get("", response_model=Envelope[Page[TimeLogResponse]])
async def list_time_logs(
    project_id: Optional[str] = Query(None),
    client_id: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD, on start date"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD, on end date"),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    tracker: TimeTracker = Depends(get_tracker),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[Page[TimeLogResponse]]:
    """List the current user's time logs, most recent start first.

    Example:
        >>> GET /api/v1/project-timelogs?project_id=1&start_date=2025-06-01
    """
    filters = TimeLogFilters.from_params(project_id, client_id, start_date, end_date)
    items = [TimeLogResponse.from_time_log(log) for log in tracker.get_time_logs(user_id, filters)]
    return Envelope[Page[TimeLogResponse]](
        message="Project time logs retrieved successfully.",
        data=Page[TimeLogResponse].build(items, page, per_page),
        status=status.HTTP_200_OK,
    )


@router.get("/total-hours", response_model=Envelope[TotalHoursData])
async def total_hours(
    project_id: Optional[str] = Query(None),
    client_id: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    reports: ReportAggregator = Depends(get_reports),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[TotalHoursData]:
    """Total hours of the matching logs, including a running timer.

    Example:
        >>> GET /api/v1/project-timelogs/total-hours?client_id=2
        {"message": "...", "data": {"total_hours": 12.5}, "status": 200}
    """
    filters = TimeLogFilters.from_params(project_id, client_id, start_date, end_date)
    return Envelope[TotalHoursData](
        message="Total hours calculated successfully.",
        data=TotalHoursData(total_hours=reports.total_hours(user_id, filters)),
        status=status.HTTP_200_OK,
    )


@router.post(
    "/{project_id}/start",
    response_model=Envelope[TimeLogResponse],
    status_code=status.HTTP_201_CREATED,
)
async def start_timer(
    project_id: int,
    request: Optional[StartTimeLogRequest] = None,
    tracker: TimeTracker = Depends(get_tracker),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[TimeLogResponse]:
    """Start a timer on a project."""
    request = request or StartTimeLogRequest()
    time_log = tracker.start(user_id, project_id, request.description, request.tag)
    return Envelope[TimeLogResponse](
        message="Project time log started successfully.",
        data=TimeLogResponse.from_time_log(time_log),
        status=status.HTTP_201_CREATED,
    )


@router.post("/{project_id}/stop", response_model=Envelope[TimeLogResponse])
async def stop_timer(
    project_id: int,
    tracker: TimeTracker = Depends(get_tracker),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[TimeLogResponse]:
    """Stop the running timer of a project."""
    time_log = tracker.stop(user_id, project_id)
    return Envelope[TimeLogResponse](
        message="Project time log stopped successfully.",
        data=TimeLogResponse.from_time_log(time_log),
        status=status.HTTP_200_OK,
    )


@router.post("", response_model=Envelope[TimeLogResponse], status_code=status.HTTP_201_CREATED)
async def create_time_log(
    request: CreateTimeLogRequest,
    tracker: TimeTracker = Depends(get_tracker),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[TimeLogResponse]:
    """Create a time log from explicit times.

    Example:
        >>> POST /api/v1/project-timelogs
        {
            "project_id": 1,
            "start_time": "2025-06-01T09:00:00",
            "end_time": "2025-06-01T10:30:00",
            "tag": "billable"
        }
    """
    time_log = tracker.store(
        user_id,
        request.project_id,
        request.start_time,
        end_time=request.end_time,
        description=request.description,
        tag=request.tag,
    )
    return Envelope[TimeLogResponse](
        message="Project time log created successfully.",
        data=TimeLogResponse.from_time_log(time_log),
        status=status.HTTP_201_CREATED,
    )


@router.get("/{time_log_id}", response_model=Envelope[TimeLogResponse])
async def get_time_log(
    time_log_id: int,
    tracker: TimeTracker = Depends(get_tracker),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[TimeLogResponse]:
    """Get one of the current user's time logs."""
    time_log = tracker.get(user_id, time_log_id)
    return Envelope[TimeLogResponse](
        message="Project time log retrieved successfully.",
        data=TimeLogResponse.from_time_log(time_log),
        status=status.HTTP_200_OK,
    )


@router.put("/{time_log_id}", response_model=Envelope[TimeLogResponse])
@router.patch("/{time_log_id}", response_model=Envelope[TimeLogResponse], include_in_schema=False)
async def update_time_log(
    time_log_id: int,
    request: UpdateTimeLogRequest,
    tracker: TimeTracker = Depends(get_tracker),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[TimeLogResponse]:
    """Update a time log; blank fields and unknown tags are ignored."""
    time_log = tracker.update(
        user_id,
        time_log_id,
        start_time=request.start_time,
        end_time=request.end_time,
        description=request.description,
        tag=request.tag,
    )
    return Envelope[TimeLogResponse](
        message="Project time log updated successfully.",
        data=TimeLogResponse.from_time_log(time_log),
        status=status.HTTP_200_OK,
    )


@router.delete("/{time_log_id}", response_model=MessageResponse)
async def delete_time_log(
    time_log_id: int,
    tracker: TimeTracker = Depends(get_tracker),
    user_id: int = Depends(get_current_user_id),
) -> MessageResponse:
    """Delete one of the current user's time logs."""
    tracker.delete(user_id, time_log_id)
    return MessageResponse(
        message="Project time log deleted successfully.", status=status.HTTP_200_OK
    )
