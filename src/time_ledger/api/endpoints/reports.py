"""Report endpoints.

This module serves the report aggregation as JSON and as downloadable
documents.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status  # type: ignore[import-untyped]

from time_ledger.analysis.reports import ReportAggregator
from time_ledger.api.auth import get_current_user_id
from time_ledger.api.dependencies import get_clock, get_config, get_reports
from time_ledger.api.models import Envelope, ReportResponse
from time_ledger.core.clock import Clock
from time_ledger.core.config import ConfigManager
from time_ledger.export import get_renderer

router = APIRouter()


@router.get("/report", response_model=Envelope[ReportResponse])
async def report(
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD, inclusive"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD, inclusive"),
    reports: ReportAggregator = Depends(get_reports),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[ReportResponse]:
    """Hours of completed time logs by date, project and client.

    Example:
        >>> GET /api/v1/report?start_date=2025-06-01&end_date=2025-06-30
        {
            "message": "Report generated successfully.",
            "data": {
                "by_date": [{"date": "2025-06-02", "total_hours": 2.0}],
                "by_project": [{"project_id": 1, "hours": 2.0}],
                "by_client": [{"client_id": 1, "hours": 2.0}]
            },
            "status": 200
        }
    """
    data = reports.report(user_id, start_date, end_date)
    return Envelope[ReportResponse](
        message="Report generated successfully.",
        data=ReportResponse(**data.to_dict()),
        status=status.HTTP_200_OK,
    )


@router.get("/reports/export")
async def export_report(
    format: Optional[str] = Query(None, pattern="^(markdown|excel)$"),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    reports: ReportAggregator = Depends(get_reports),
    config: ConfigManager = Depends(get_config),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> Response:
    """Download the report as a Markdown or Excel document.

    Without ``format`` the configured ``export.default_format`` is used.
    """
    data = reports.report(user_id, start_date, end_date)
    renderer = get_renderer(format or config.get("export.default_format", "markdown"))
    content = renderer.render(data, generated_at=clock.now())
    return Response(
        content=content,
        media_type=renderer.media_type,
        headers={"Content-Disposition": f'attachment; filename="{renderer.filename}"'},
    )
