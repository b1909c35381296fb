"""View-model transforms: search, chronological grouping, calendar and date helpers."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, Sequence

from django.utils import dateparse, timezone

from .schema import display_title

__all__ = [
    "CalendarDay",
    "CalendarItem",
    "DayGroup",
    "calendar_items",
    "calendar_month",
    "combine_date_time",
    "day_label",
    "filter_records",
    "format_date",
    "format_datetime",
    "format_record_datetime",
    "group_by_day",
    "matches_query",
    "occupies_day",
    "parse_date",
    "parse_datetime",
    "parse_month",
    "parse_time",
    "shift_month",
    "upcoming",
    "weekday_name",
]

SearchField = str | tuple[str, ...]

EVENT_SEARCH_FIELDS: tuple[SearchField, ...] = (
    ("title", "name"),
    "description",
    "location",
    ("organizer_name", "organisers"),
)
SCHOLARSHIP_SEARCH_FIELDS: tuple[SearchField, ...] = (
    "title",
    ("short_description", "description"),
    "location",
    "organizer_name",
)
STUDENT_CLUB_SEARCH_FIELDS: tuple[SearchField, ...] = (
    "name",
    "description",
    "link",
    "universities",
    "topics",
)

SHORT_TITLE_LENGTH = 15


# ---------- search ----------


def _field_text(record: dict[str, Any], field_spec: SearchField) -> str:
    keys = (field_spec,) if isinstance(field_spec, str) else field_spec
    for key in keys:
        value = record.get(key)
        if value is None or value == "" or value == []:
            continue
        if isinstance(value, (list, tuple, set)):
            return ", ".join(str(item) for item in value)
        return str(value)
    return ""


def matches_query(
    record: dict[str, Any], query: str | None, fields: Sequence[SearchField] | None = None
) -> bool:
    """Case-insensitive substring test of ``query`` against the searched fields.

    ``fields`` of ``None`` searches every string value of the record.
    """

    if not (query or "").strip():
        return True
    needle = query.lower()
    if fields is None:
        haystacks = [value for value in record.values() if isinstance(value, str)]
    else:
        haystacks = [_field_text(record, field_spec) for field_spec in fields]
    return any(needle in text.lower() for text in haystacks)


def filter_records(
    records: Iterable[dict[str, Any]], query: str | None, fields: Sequence[SearchField] | None = None
) -> list[dict[str, Any]]:
    return [record for record in records if matches_query(record, query, fields)]


# ---------- dates ----------


def _as_local_naive(value: datetime) -> datetime:
    if timezone.is_aware(value):
        return timezone.localtime(value).replace(tzinfo=None)
    return value


def parse_datetime(value: Any) -> datetime | None:
    """Parse a date, datetime or ISO string into a naive local datetime."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _as_local_naive(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    text = str(value).strip()
    try:
        parsed = dateparse.parse_datetime(text)
        if parsed is not None:
            return _as_local_naive(parsed)
        parsed_date = dateparse.parse_date(text)
    except ValueError:
        return None
    if parsed_date is None:
        return None
    return datetime.combine(parsed_date, time.min)


def parse_date(value: Any) -> date | None:
    parsed = parse_datetime(value)
    return parsed.date() if parsed else None


def _int_or_zero(text: str) -> int:
    try:
        return int(text)
    except (TypeError, ValueError):
        return 0


def parse_time(value: Any) -> time | None:
    """Parse ``HH:MM`` / ``HH:MM:SS``; unreadable components fall back to 0."""

    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    parts = str(value).strip().split(":")
    hours = _int_or_zero(parts[0])
    minutes = _int_or_zero(parts[1]) if len(parts) > 1 else 0
    if not 0 <= hours < 24:
        hours = 0
    if not 0 <= minutes < 60:
        minutes = 0
    return time(hours, minutes)


def combine_date_time(date_value: Any, time_value: Any = None) -> datetime | None:
    """Combine a date with an optional time of day; no time means midnight."""

    base = parse_datetime(date_value)
    if base is None:
        return None
    parsed_time = parse_time(time_value)
    if parsed_time is None:
        return base
    return base.replace(hour=parsed_time.hour, minute=parsed_time.minute, second=0, microsecond=0)


def format_datetime(value: datetime | None) -> str:
    if value is None:
        return "-"
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{value:%b} {value.day}, {value.year}, {hour}:{value:%M} {meridiem}"


def format_date(value: date | None) -> str:
    if value is None:
        return "-"
    return f"{value:%b} {value.day}, {value.year}"


def format_record_datetime(record: dict[str, Any], *, end: bool = False) -> str:
    prefix = "end" if end else "start"
    return format_datetime(combine_date_time(record.get(f"{prefix}_date"), record.get(f"{prefix}_time")))


def day_label(day: date, today: date | None = None) -> str:
    today = today or timezone.localdate()
    if day == today:
        return "Today"
    if day == today + timedelta(days=1):
        return "Tomorrow"
    return f"{day:%b} {day.day}"


def weekday_name(day: date) -> str:
    return f"{day:%A}"


# ---------- chronological grouping ----------


@dataclass
class DayGroup:
    day: date
    records: list[dict[str, Any]] = field(default_factory=list)

    @property
    def label(self) -> str:
        return day_label(self.day)

    @property
    def weekday(self) -> str:
        return weekday_name(self.day)


def _id_sort_key(record: dict[str, Any]) -> tuple[int, float, str]:
    value = record.get("id")
    if value is None or isinstance(value, bool):
        return (2, 0, "")
    if isinstance(value, (int, float)):
        return (0, value, "")
    text = str(value)
    if text.isdigit():
        return (0, int(text), "")
    return (1, 0, text)


def group_by_day(records: Iterable[dict[str, Any]]) -> list[DayGroup]:
    """Group records by the day of their start date, earliest day first.

    Records without a start date are left out. Within a day records are
    ordered by start date and time, ties broken by id.
    """

    grouped: dict[date, list[tuple[datetime, dict[str, Any]]]] = {}
    for record in records:
        start = combine_date_time(record.get("start_date"), record.get("start_time"))
        if start is None:
            continue
        grouped.setdefault(start.date(), []).append((start, record))

    groups: list[DayGroup] = []
    for day in sorted(grouped):
        ordered = sorted(grouped[day], key=lambda pair: (pair[0], _id_sort_key(pair[1])))
        groups.append(DayGroup(day=day, records=[record for _, record in ordered]))
    return groups


# ---------- calendar ----------


@dataclass(frozen=True)
class CalendarItem:
    id: Any
    title: str
    kind: str
    start: datetime
    end: datetime | None = None

    @property
    def short_title(self) -> str:
        if len(self.title) > SHORT_TITLE_LENGTH:
            return self.title[:SHORT_TITLE_LENGTH] + "..."
        return self.title

    @property
    def key(self) -> str:
        return f"{self.kind}-{self.id}"


@dataclass
class CalendarDay:
    day: date
    in_month: bool
    is_today: bool
    items: list[CalendarItem]
    overflow: int = 0


def calendar_items(kind: str, records: Iterable[dict[str, Any]]) -> list[CalendarItem]:
    items: list[CalendarItem] = []
    for record in records:
        start = combine_date_time(record.get("start_date"), record.get("start_time"))
        if start is None:
            continue
        items.append(
            CalendarItem(
                id=record.get("id"),
                title=display_title(record),
                kind=kind,
                start=start,
                end=combine_date_time(record.get("end_date"), record.get("end_time")),
            )
        )
    return items


def occupies_day(item: CalendarItem | dict[str, Any], day: date) -> bool:
    """True when ``day`` falls on or between the item's start and end days."""

    if isinstance(item, CalendarItem):
        start, end = item.start.date(), (item.end.date() if item.end else None)
    else:
        start, end = parse_date(item.get("start_date")), parse_date(item.get("end_date"))
        if start is None:
            return False
    end = end or start
    return day in (start, end) or start <= day <= end


def calendar_month(
    items: Sequence[CalendarItem],
    year: int,
    month: int,
    *,
    today: date | None = None,
    per_day: int = 2,
) -> list[list[CalendarDay]]:
    """Monday-first week rows covering ``year``/``month``."""

    today = today or timezone.localdate()
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    cursor = first - timedelta(days=first.weekday())
    grid_end = last + timedelta(days=6 - last.weekday())

    weeks: list[list[CalendarDay]] = []
    while cursor <= grid_end:
        week: list[CalendarDay] = []
        for _ in range(7):
            day_items = [item for item in items if occupies_day(item, cursor)]
            week.append(
                CalendarDay(
                    day=cursor,
                    in_month=cursor.month == month,
                    is_today=cursor == today,
                    items=day_items[:per_day],
                    overflow=max(0, len(day_items) - per_day),
                )
            )
            cursor += timedelta(days=1)
        weeks.append(week)
    return weeks


def upcoming(items: Iterable[CalendarItem], now: datetime | None = None, limit: int = 10) -> list[CalendarItem]:
    now = now or _as_local_naive(timezone.now())
    future = [item for item in items if item.start >= now]
    return sorted(future, key=lambda item: item.start)[:limit]


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def parse_month(value: str | None, today: date | None = None) -> tuple[int, int]:
    """Parse ``YYYY-MM``; anything else falls back to the current month."""

    today = today or timezone.localdate()
    try:
        year_text, month_text = (value or "").split("-", 1)
        year, month = int(year_text), int(month_text)
    except ValueError:
        return today.year, today.month
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        return today.year, today.month
    return year, month
