"""Markdown report documents."""

from datetime import datetime
from typing import Any

from time_ledger.analysis.reports import ReportData
from time_ledger.export.base import ReportRenderer


class MarkdownRenderer(ReportRenderer):
    """Render a report as printable Markdown tables."""

    media_type = "text/markdown"

    def get_file_extension(self) -> str:
        """Get Markdown file extension.

        Returns:
            '.md'
        """
        return ".md"

    def render(self, report: ReportData, **kwargs: Any) -> bytes:
        """Render the report.

        Args:
            report: Aggregated report
            **kwargs: Additional options
                - title (str): Document title (default: "Time Report Summary")
                - generated_at (datetime): Timestamp printed in the header
        """
        title = kwargs.get("title", "Time Report Summary")
        generated_at = kwargs.get("generated_at") or datetime.now()
        return self._generate_markdown(report, title, generated_at).encode("utf-8")

    def _generate_markdown(self, report: ReportData, title: str, generated_at: datetime) -> str:
        lines = [f"# {title}\n"]

        lines.append(f"**Generated:** {generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n")

        if report.start_date or report.end_date:
            date_range = "**Date Range:** "
            date_range += report.start_date.isoformat() if report.start_date else "Beginning"
            date_range += " to "
            date_range += report.end_date.isoformat() if report.end_date else "Present"
            lines.append(date_range + "\n")

        lines.append(f"**Total Hours:** {report.total_hours:.2f}\n")

        lines.extend(
            self._table("By Date", ("Date", "Total Hours"), report.by_date, ("date", "total_hours"))
        )
        lines.extend(
            self._table("By Project", ("Project ID", "Hours"), report.by_project, ("project_id", "hours"))
        )
        lines.extend(
            self._table("By Client", ("Client ID", "Hours"), report.by_client, ("client_id", "hours"))
        )
        return "\n".join(lines)

    def _table(
        self,
        heading: str,
        headers: tuple[str, str],
        rows: list[dict[str, Any]],
        keys: tuple[str, str],
    ) -> list[str]:
        lines = [f"## {heading}\n"]
        if not rows:
            lines.append("_No data_\n")
            return lines

        lines.append(f"| {headers[0]} | {headers[1]} |")
        lines.append("|---|---:|")
        for row in rows:
            lines.append(f"| {row[keys[0]]} | {row[keys[1]]:.2f} |")
        lines.append("")
        return lines
