"""Timezone helpers: tenant-local wall clock <-> UTC instants"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

TzLike = Union[str, ZoneInfo]


def get_zone(tz: TzLike) -> ZoneInfo:
    if isinstance(tz, ZoneInfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {tz}") from exc


def ensure_utc(value: datetime) -> datetime:
    """Tag naive values (SQLite drops offsets) as UTC, convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_to_utc(day: date, minute_of_day: int, tz: TzLike) -> datetime:
    """UTC instant of a wall-clock minute on a local date."""
    wall = datetime.combine(day, time(minute_of_day // 60, minute_of_day % 60))
    return wall.replace(tzinfo=get_zone(tz)).astimezone(timezone.utc)


def to_instant(value: datetime, tz: TzLike) -> datetime:
    """Naive datetimes are read as tenant-local wall clock."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=get_zone(tz))
    return value.astimezone(timezone.utc)


def to_local(value: datetime, tz: TzLike) -> datetime:
    return ensure_utc(value).astimezone(get_zone(tz))


def local_date(value: datetime, tz: TzLike) -> date:
    return to_local(value, tz).date()


def local_day_bounds(day: date, tz: TzLike) -> Tuple[datetime, datetime]:
    """UTC span [local midnight, next local midnight) of a date."""
    zone = get_zone(tz)
    start = datetime.combine(day, time.min).replace(tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min).replace(tzinfo=zone)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)
