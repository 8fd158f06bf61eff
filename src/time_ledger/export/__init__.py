"""Report documents for Time Ledger."""

from time_ledger.export.base import ReportRenderer, get_renderer
from time_ledger.export.excel_format import ExcelRenderer
from time_ledger.export.markdown_format import MarkdownRenderer

__all__ = [
    "ReportRenderer",
    "MarkdownRenderer",
    "ExcelRenderer",
    "get_renderer",
]
