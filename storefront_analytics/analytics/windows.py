"""
Date windows and query parameter parsing.

All windows are inclusive on both ends and expressed as naive UTC datetimes.
A date-only `from` starts at 00:00:00 UTC; a date-only `to` covers the whole
day up to its last microsecond.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Dict, Optional, Sequence

from storefront_analytics.analytics.errors import InvalidParameterError
from storefront_analytics.analytics.records import to_utc_naive


def format_timestamp(value: datetime) -> str:
    """Render a naive UTC datetime as an ISO string with a Z suffix"""
    return value.isoformat(timespec="milliseconds") + "Z"


@dataclass(frozen=True)
class DateWindow:
    """Inclusive [start, end] analysis window"""
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    def to_dict(self) -> Dict[str, str]:
        return {"from": format_timestamp(self.start), "to": format_timestamp(self.end)}


def parse_timestamp(value: str, parameter: str, *, end_of_day: bool = False) -> datetime:
    """
    Parse an ISO date or datetime query value.

    Args:
        value: Raw query string value
        parameter: Parameter name, reported on failure
        end_of_day: Expand a date-only value to the end of that day

    Returns:
        Naive UTC datetime

    Raises:
        InvalidParameterError: If the value is not an ISO date or datetime
    """
    text = value.strip()
    try:
        day = date.fromisoformat(text)
    except ValueError:
        day = None

    if day is not None:
        return datetime.combine(day, time.max if end_of_day else time.min)

    try:
        return to_utc_naive(datetime.fromisoformat(text))
    except ValueError as exc:
        raise InvalidParameterError(
            parameter, "expected an ISO date (YYYY-MM-DD) or datetime", value
        ) from exc


def resolve_window(
    from_value: Optional[str],
    to_value: Optional[str],
    default_days: int,
    now: datetime,
    from_param: str = "from",
    to_param: str = "to",
) -> DateWindow:
    """
    Build the analysis window from optional `from`/`to` values.

    Missing `to` means now; missing `from` means `default_days` before the
    window end.
    """
    end = parse_timestamp(to_value, to_param, end_of_day=True) if to_value else now
    start = (
        parse_timestamp(from_value, from_param)
        if from_value
        else end - timedelta(days=default_days)
    )
    if start > end:
        raise InvalidParameterError(from_param, f"must not be after '{to_param}'", from_value)
    return DateWindow(start=start, end=end)


def resolve_compare_window(
    compare_from: Optional[str],
    compare_to: Optional[str],
) -> Optional[DateWindow]:
    """Comparison window, or None when neither bound is given."""
    if not compare_from and not compare_to:
        return None
    if not compare_from or not compare_to:
        missing = "compareFrom" if not compare_from else "compareTo"
        raise InvalidParameterError(missing, "compareFrom and compareTo must be given together")

    start = parse_timestamp(compare_from, "compareFrom")
    end = parse_timestamp(compare_to, "compareTo", end_of_day=True)
    if start > end:
        raise InvalidParameterError("compareFrom", "must not be after 'compareTo'", compare_from)
    return DateWindow(start=start, end=end)


def trailing_window(now: datetime, days: int) -> DateWindow:
    """Window covering the last `days` days up to now"""
    return DateWindow(start=now - timedelta(days=days), end=now)


def parse_choice(
    value: Optional[str],
    parameter: str,
    choices: Sequence[str],
    default: str,
) -> str:
    """Validate an enumerated parameter, falling back to `default` when omitted"""
    if value is None or value == "":
        return default
    normalized = value.strip().lower()
    if normalized not in choices:
        raise InvalidParameterError(parameter, f"must be one of {list(choices)}", value)
    return normalized


def parse_bounded_int(
    value: Optional[int],
    parameter: str,
    default: int,
    minimum: int,
    maximum: Optional[int] = None,
) -> int:
    """Validate an integer parameter against [minimum, maximum]"""
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        try:
            value = int(value)
        except (TypeError, ValueError) as exc:
            raise InvalidParameterError(parameter, "expected an integer", value) from exc
    if value < minimum or (maximum is not None and value > maximum):
        expected = f"{minimum}..{maximum}" if maximum is not None else f"{minimum} or more"
        raise InvalidParameterError(parameter, f"must be {expected}", value)
    return value
