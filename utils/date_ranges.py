"""
Date range helpers shared by the reservation validator, listings and availability.
Stays are half-open intervals: [check_in, check_out).
"""

from datetime import date, datetime
from typing import Optional

from dateutil import parser


def overlaps(existing_start: date, existing_end: date, candidate_start: date, candidate_end: date) -> bool:
    """
    True when [candidate_start, candidate_end) intersects [existing_start, existing_end).

    A stay that checks out on the day another one checks in does not overlap
    (same-day turnover).
    """
    return candidate_start < existing_end and candidate_end > existing_start


def stay_nights(check_in: date, check_out: date) -> int:
    return (check_out - check_in).days


def parse_to_date(value) -> date:
    """Converts string/datetime/date to date"""
    if value is None:
        raise ValueError("Date value is None")

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        try:
            return parser.isoparse(value.strip()).date()
        except (ValueError, OverflowError) as exc:
            raise ValueError(f"Invalid date: {value}") from exc

    raise ValueError(f"Unsupported date value: {value!r}")


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    if value is None or value == "":
        return None
    return parse_to_date(value)
