"""Excel report documents with formatting and charts."""

from io import BytesIO
from typing import Any

import openpyxl  # type: ignore[import-untyped]
from openpyxl.chart import BarChart, Reference  # type: ignore[import-untyped]
from openpyxl.styles import Alignment, Font, PatternFill  # type: ignore[import-untyped]

from time_ledger.analysis.reports import ReportData
from time_ledger.export.base import ReportRenderer

SHEETS = [
    ("By Date", ("Date", "Total Hours"), "by_date", ("date", "total_hours")),
    ("By Project", ("Project ID", "Hours"), "by_project", ("project_id", "hours")),
    ("By Client", ("Client ID", "Hours"), "by_client", ("client_id", "hours")),
]


class ExcelRenderer(ReportRenderer):
    """Render a report as a workbook with one sheet per view."""

    media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    def get_file_extension(self) -> str:
        """Get Excel file extension.

        Returns:
            '.xlsx'
        """
        return ".xlsx"

    def render(self, report: ReportData, **kwargs: Any) -> bytes:
        """Render the report.

        Args:
            report: Aggregated report
            **kwargs: Additional options
                - include_charts (bool): Add a bar chart to the By Date sheet (default: True)
        """
        wb = openpyxl.Workbook()

        # Remove default sheet
        wb.remove(wb.active)

        for title, headers, attr, keys in SHEETS:
            self._create_sheet(wb, title, headers, getattr(report, attr), keys)

        if kwargs.get("include_charts", True) and report.by_date:
            self._add_date_chart(wb["By Date"], len(report.by_date))

        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    def _create_sheet(
        self,
        wb: Any,
        title: str,
        headers: tuple[str, str],
        rows: list[dict[str, Any]],
        keys: tuple[str, str],
    ) -> None:
        ws = wb.create_sheet(title)

        header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        header_font = Font(bold=True, color="FFFFFF")

        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = header_fill
            cell.font = header_font
            cell.alignment = Alignment(horizontal="center", vertical="center")

        for row, data in enumerate(rows, start=2):
            ws.cell(row, 1, data[keys[0]])
            ws.cell(row, 2, data[keys[1]])

        ws.column_dimensions["A"].width = 15
        ws.column_dimensions["B"].width = 15

    def _add_date_chart(self, ws: Any, count: int) -> None:
        chart = BarChart()
        chart.title = "Hours by Date"
        data = Reference(ws, min_col=2, min_row=1, max_row=count + 1)
        labels = Reference(ws, min_col=1, min_row=2, max_row=count + 1)
        chart.add_data(data, titles_from_data=True)
        chart.set_categories(labels)
        chart.height = 10
        chart.width = 15
        ws.add_chart(chart, "D2")
