"""Parsing of request-controlled timestamps and dates.

Inputs are parsed into ``datetime``/``date`` objects before they reach any
query, so filters never carry raw request text.
"""

import re
from datetime import date, datetime
from typing import Any, Optional

from time_ledger.core.errors import ValidationFailed

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_blank(value: Any) -> bool:
    """True for values a lenient update treats as "not supplied"."""
    return value is None or (isinstance(value, str) and not value.strip())


def parse_timestamp(value: Any, field: str) -> datetime:
    """Parse a timestamp into a naive local ``datetime``.

    Accepts ``datetime`` objects and ISO 8601 strings (``T`` or space
    separator, optional ``Z``/offset). Aware values are converted to local
    time. Sub-second precision is dropped.

    Raises:
        ValidationFailed: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationFailed.for_field(
                field, f"The {field.replace('_', ' ')} must be a valid date and time."
            )
    else:
        raise ValidationFailed.for_field(
            field, f"The {field.replace('_', ' ')} must be a valid date and time."
        )

    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone().replace(tzinfo=None)
        except (OverflowError, ValueError):
            raise ValidationFailed.for_field(
                field, f"The {field.replace('_', ' ')} is out of range."
            )
    return parsed.replace(microsecond=0)


def parse_date_filter(value: Optional[str], field: str) -> Optional[date]:
    """Parse a strict ``YYYY-MM-DD`` filter value.

    Blank values mean "no filter".

    Raises:
        ValidationFailed: If the value is not a valid calendar date
    """
    if value is None or is_blank(value):
        return None
    text = value.strip()
    if not _DATE_RE.match(text):
        raise ValidationFailed.for_field(field, f"The {field} must use the YYYY-MM-DD format.")
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValidationFailed.for_field(field, f"The {field} is not a valid date.")
