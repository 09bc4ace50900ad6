"""Client-side filtering and sorting of remote domain records."""

from datetime import date
from typing import Any, Iterable, Optional, Union

from .validation import parse_iso_date

DateLike = Union[date, str]


def _as_date(value: DateLike) -> date:
    if isinstance(value, date):
        return value
    return parse_iso_date(value)


def record_date(record: dict[str, Any], date_field: str) -> Optional[date]:
    """Date part of an ISO date/timestamp field, or None if missing or malformed."""
    raw = record.get(date_field)
    if not isinstance(raw, str) or len(raw) < 10:
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        return None


def filter_records(
    records: Iterable[dict[str, Any]],
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
    date_field: str = "createdAt",
    **equals: Any,
) -> list[dict[str, Any]]:
    """
    Filter records by an inclusive date range and exact field values.

    Args:
        records: Records as returned by the remote service
        start: Earliest date to keep (inclusive)
        end: Latest date to keep (inclusive)
        date_field: Record field holding the ISO date
        **equals: Field name -> required value

    Returns:
        Matching records, in input order

    Raises:
        ValidationError: If start or end is not a valid ISO date
    """
    start_date = _as_date(start) if start is not None else None
    end_date = _as_date(end) if end is not None else None

    matched = []
    for record in records:
        if any(record.get(field) != value for field, value in equals.items()):
            continue
        if start_date or end_date:
            when = record_date(record, date_field)
            if when is None:
                continue
            if start_date and when < start_date:
                continue
            if end_date and when > end_date:
                continue
        matched.append(record)
    return matched


def sort_records(
    records: Iterable[dict[str, Any]],
    field: str,
    descending: bool = True,
) -> list[dict[str, Any]]:
    """Sort records by field. Records missing the field always go last."""
    records = list(records)
    present = [r for r in records if r.get(field) is not None]
    missing = [r for r in records if r.get(field) is None]
    present.sort(key=lambda r: r[field], reverse=descending)
    return present + missing
