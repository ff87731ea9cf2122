"""Relative date token resolution and operator-dependent day normalization."""

from datetime import date, datetime
from typing import Any, Callable, Optional

import pytz
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from filter_engine.models.types import FilterOperator

Clock = Callable[[], datetime]

SPECIAL_DATE_VALUES = (
    "now",
    "today",
    "yesterday",
    "tomorrow",
    "thisWeek",
    "lastWeek",
    "thisMonth",
    "lastMonth",
    "thisYear",
    "lastYear",
)

SPECIAL_DATE_LABELS = {
    "now": "Now",
    "today": "Today",
    "yesterday": "Yesterday",
    "tomorrow": "Tomorrow",
    "thisWeek": "This Week (start)",
    "lastWeek": "Last Week (start)",
    "thisMonth": "This Month (start)",
    "lastMonth": "Last Month (start)",
    "thisYear": "This Year (start)",
    "lastYear": "Last Year (start)",
}


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


def is_special_date_value(value: Any) -> bool:
    return isinstance(value, str) and value in SPECIAL_DATE_VALUES


def adjust_datetime_boundary(dt: datetime, boundary_type: str, first_day_of_week: int = 0) -> datetime:
    """
    Adjust a naive datetime to a period boundary.

    Boundary types:
      - start_of_day, end_of_day
      - start_of_week
      - start_of_month, start_of_year

    Parameters:
      - dt: The naive wall-clock datetime to adjust.
      - boundary_type: The type of boundary to adjust to.
      - first_day_of_week: The starting day of the week (0 = Monday, 6 = Sunday).
    """
    if boundary_type == "start_of_day":
        return dt.replace(hour=0, minute=0, second=0, microsecond=0)
    elif boundary_type == "end_of_day":
        return dt.replace(hour=23, minute=59, second=59, microsecond=999999)
    elif boundary_type == "start_of_week":
        weekday = (dt.weekday() - first_day_of_week) % 7
        return (dt - relativedelta(days=weekday)).replace(hour=0, minute=0, second=0, microsecond=0)
    elif boundary_type == "start_of_month":
        return dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    elif boundary_type == "start_of_year":
        return dt.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)

    raise ValueError(f"Unrecognized boundary_type: {boundary_type}")


class DateResolver:
    """Resolves date filter values into concrete UTC instants.

    Relative tokens are computed from the injected clock, in the reference
    timezone. After resolution the instant is normalized by operator so that
    day-granularity comparisons behave intuitively against sub-day storage:

      - ``gte``, ``eq``, ``lt``: start of day
      - ``gt``, ``lte``: end of day
      - ``between``: start of day for the first bound, end of day for the second

    Any other operator leaves the instant untouched.
    """

    def __init__(self, clock: Clock = utc_now, timezone_str: str = "UTC", first_day_of_week: int = 0) -> None:
        self.clock = clock
        self.timezone = pytz.timezone(timezone_str)
        self.first_day_of_week = first_day_of_week

    def _to_local(self, instant: datetime) -> datetime:
        """Naive wall-clock time in the reference timezone."""
        if instant.tzinfo is None:
            instant = pytz.UTC.localize(instant)
        return instant.astimezone(self.timezone).replace(tzinfo=None)

    def _to_utc(self, local: datetime) -> datetime:
        return self.timezone.localize(local).astimezone(pytz.UTC)

    def _boundary(self, instant: datetime, boundary_type: str) -> datetime:
        local = adjust_datetime_boundary(self._to_local(instant), boundary_type, self.first_day_of_week)
        return self._to_utc(local)

    def start_of_day(self, instant: datetime) -> datetime:
        return self._boundary(instant, "start_of_day")

    def end_of_day(self, instant: datetime) -> datetime:
        return self._boundary(instant, "end_of_day")

    def resolve_token(self, value: Any) -> datetime:
        """Resolve a reserved token or parse an absolute date/time.

        Raises:
            ValueError: If the value is neither a token nor a parseable date
        """
        if isinstance(value, datetime):
            return value.astimezone(pytz.UTC) if value.tzinfo else pytz.UTC.localize(value)
        if isinstance(value, date):
            return self._to_utc(datetime(value.year, value.month, value.day))
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Cannot resolve {value!r} as a date")

        if is_special_date_value(value):
            return self._resolve_special(value)

        try:
            parsed = date_parser.isoparse(value.strip())
        except ValueError:
            try:
                parsed = date_parser.parse(value.strip())
            except (ValueError, OverflowError) as e:
                raise ValueError(f"Cannot parse date value {value!r}: {e}")

        if parsed.tzinfo is None:
            # Bare dates and naive timestamps are wall-clock times in the reference timezone
            return self._to_utc(parsed)
        return parsed.astimezone(pytz.UTC)

    def _resolve_special(self, token: str) -> datetime:
        now = self.clock()
        if token == "now":
            return now.astimezone(pytz.UTC) if now.tzinfo else pytz.UTC.localize(now)

        local_now = self._to_local(now)
        if token == "today":
            local = adjust_datetime_boundary(local_now, "start_of_day")
        elif token == "yesterday":
            local = adjust_datetime_boundary(local_now - relativedelta(days=1), "start_of_day")
        elif token == "tomorrow":
            local = adjust_datetime_boundary(local_now + relativedelta(days=1), "start_of_day")
        elif token == "thisWeek":
            local = adjust_datetime_boundary(local_now, "start_of_week", self.first_day_of_week)
        elif token == "lastWeek":
            local = adjust_datetime_boundary(local_now - relativedelta(weeks=1), "start_of_week", self.first_day_of_week)
        elif token == "thisMonth":
            local = adjust_datetime_boundary(local_now, "start_of_month")
        elif token == "lastMonth":
            local = adjust_datetime_boundary(local_now - relativedelta(months=1), "start_of_month")
        elif token == "thisYear":
            local = adjust_datetime_boundary(local_now, "start_of_year")
        elif token == "lastYear":
            local = adjust_datetime_boundary(local_now - relativedelta(years=1), "start_of_year")
        else:
            raise ValueError(f"Unknown special date value: {token}")
        return self._to_utc(local)

    def normalize(self, instant: datetime, operator: Any, is_range_end: bool = False) -> datetime:
        """Snap an instant to a day boundary according to the operator."""
        if operator == FilterOperator.BETWEEN:
            return self.end_of_day(instant) if is_range_end else self.start_of_day(instant)
        if operator in (FilterOperator.GTE, FilterOperator.EQ, FilterOperator.LT):
            return self.start_of_day(instant)
        if operator in (FilterOperator.GT, FilterOperator.LTE):
            return self.end_of_day(instant)
        if instant.tzinfo is None:
            return pytz.UTC.localize(instant)
        return instant

    def resolve(self, value: Any, operator: Any, is_range_end: bool = False) -> datetime:
        """Resolve a raw value and normalize it for the operator."""
        return self.normalize(self.resolve_token(value), operator, is_range_end)

    def try_resolve(self, value: Any, operator: Any, is_range_end: bool = False) -> Optional[datetime]:
        """Like ``resolve`` but returns None for malformed input."""
        try:
            return self.resolve(value, operator, is_range_end)
        except ValueError:
            return None
