"""Base classes for report documents."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from time_ledger.analysis.reports import ReportData


class ReportRenderer(ABC):
    """Base class for all report renderers."""

    media_type = "application/octet-stream"

    def __init__(self, output_path: Optional[Path] = None):
        """Initialize renderer.

        Args:
            output_path: Path where :meth:`export` writes the document
        """
        self.output_path = Path(output_path) if output_path else None

    @abstractmethod
    def render(self, report: ReportData, **kwargs: Any) -> bytes:
        """Render a report to document bytes.

        Args:
            report: Aggregated report
            **kwargs: Format-specific options
        """
        pass

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get the file extension for this format (e.g., '.md', '.xlsx').

        Returns:
            File extension including the dot
        """
        pass

    @property
    def filename(self) -> str:
        """Download name used by the API."""
        return f"report{self.get_file_extension()}"

    def ensure_output_path(self) -> None:
        """Ensure the output path's parent directory exists."""
        if self.output_path is None:
            raise ValueError("No output path set for this renderer")
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

    def export(self, report: ReportData, **kwargs: Any) -> Path:
        """Render ``report`` and write it to the output path.

        Returns:
            The written path
        """
        self.ensure_output_path()
        assert self.output_path is not None
        self.output_path.write_bytes(self.render(report, **kwargs))
        return self.output_path


def get_renderer(format_name: str, output_path: Optional[Path] = None) -> ReportRenderer:
    """Look up a renderer by format name.

    Raises:
        ValueError: If the format is unknown
    """
    from time_ledger.export.excel_format import ExcelRenderer
    from time_ledger.export.markdown_format import MarkdownRenderer

    renderers: dict[str, type[ReportRenderer]] = {
        "markdown": MarkdownRenderer,
        "excel": ExcelRenderer,
    }
    if format_name not in renderers:
        raise ValueError(f"Unknown report format: {format_name}")
    return renderers[format_name](output_path)
