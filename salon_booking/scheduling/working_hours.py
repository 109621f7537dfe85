"""
Working Hours Resolver

Normalizes the loosely-typed weekly schedules stored on tenants and stylists
into a WeeklySchedule with seven canonical English day keys.

Accepted day values:
    None / ""                         closed
    "closed" / "cerrado"              closed
    "09:00-18:00"                     one range
    ["09:00-13:00", "14:00-18:00"]    several ranges
    {"active": true, "open": "09:00", "close": "18:00"}
    {"active": true, "ranges": ["09:00-13:00", ...]}
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from .exceptions import ScheduleValidationError
from .ranges import TimeRange

logger = logging.getLogger(__name__)

DAY_KEYS: Tuple[str, ...] = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)

WEEKDAYS = DAY_KEYS[:5]

# Every spelling we accept for a day key, mapped to the canonical days it covers.
DAY_ALIASES: Dict[str, Tuple[str, ...]] = {
    "monday": ("monday",), "mon": ("monday",),
    "tuesday": ("tuesday",), "tue": ("tuesday",), "tues": ("tuesday",),
    "wednesday": ("wednesday",), "wed": ("wednesday",),
    "thursday": ("thursday",), "thu": ("thursday",), "thur": ("thursday",), "thurs": ("thursday",),
    "friday": ("friday",), "fri": ("friday",),
    "saturday": ("saturday",), "sat": ("saturday",),
    "sunday": ("sunday",), "sun": ("sunday",),
    "lunes": ("monday",), "lun": ("monday",),
    "martes": ("tuesday",), "mar": ("tuesday",),
    "miercoles": ("wednesday",), "miércoles": ("wednesday",), "mie": ("wednesday",), "mié": ("wednesday",),
    "jueves": ("thursday",), "jue": ("thursday",),
    "viernes": ("friday",), "vie": ("friday",),
    "sabado": ("saturday",), "sábado": ("saturday",), "sab": ("saturday",), "sáb": ("saturday",),
    "domingo": ("sunday",), "dom": ("sunday",),
    # legacy group keys
    "lunes_a_viernes": WEEKDAYS,
    "lunes-viernes": WEEKDAYS,
    "lunes a viernes": WEEKDAYS,
    "monday_to_friday": WEEKDAYS,
    "monday-friday": WEEKDAYS,
    "weekdays": WEEKDAYS,
}

CLOSED_TOKENS = frozenset({"closed", "cerrado", "cerrada", "off", "none"})

OPEN_FIELDS = ("open", "start", "inicio")
CLOSE_FIELDS = ("close", "end", "fin")

_HHMM_RE = re.compile(r"^(\d{2}):(\d{2})$")


@dataclass(frozen=True)
class DaySchedule:
    active: bool
    ranges: Tuple[TimeRange, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"active": self.active, "ranges": [r.to_string() for r in self.ranges]}


CLOSED_DAY = DaySchedule(active=False)


@dataclass(frozen=True)
class WeeklySchedule:
    """All seven canonical days, plus the set of days the source declared."""
    days: Mapping[str, DaySchedule]
    declared: FrozenSet[str] = frozenset()

    def day(self, key: str) -> DaySchedule:
        return self.days.get(key, CLOSED_DAY)

    def ranges_for(self, weekday: int) -> Tuple[TimeRange, ...]:
        return self.day(DAY_KEYS[weekday]).ranges

    def declared_ranges_for(self, weekday: int) -> Optional[Tuple[TimeRange, ...]]:
        """None when the day was not declared, so the caller can inherit."""
        key = DAY_KEYS[weekday]
        if key not in self.declared:
            return None
        return self.day(key).ranges

    def is_open_on(self, weekday: int) -> bool:
        return bool(self.ranges_for(weekday))

    def to_dict(self, all_days: bool = False) -> Dict[str, Dict[str, Any]]:
        """
        Canonical form; resolve_schedule(to_dict()) returns an equal schedule.

        By default only declared days are emitted, so a stylist schedule keeps
        inheriting the rest. all_days=True lists all seven, undeclared ones closed.
        """
        return {
            key: self.day(key).to_dict()
            for key in DAY_KEYS
            if all_days or key in self.declared
        }


def canonical_day_keys(token: Any) -> Tuple[str, ...]:
    """Canonical days a raw key covers; empty for unrecognized keys."""
    if not isinstance(token, str):
        return ()
    return DAY_ALIASES.get(token.strip().lower(), ())


def parse_hhmm(token: Any, day: Optional[str]) -> int:
    """'HH:MM' (00:00-23:59) to minute of day."""
    if not isinstance(token, str):
        raise ScheduleValidationError(day, f"time must be an HH:MM string, got {token!r}")
    match = _HHMM_RE.match(token.strip())
    if not match:
        raise ScheduleValidationError(day, f"'{token}' is not in HH:MM format")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ScheduleValidationError(day, f"'{token}' is not a valid 24-hour time")
    return hours * 60 + minutes


def _make_range(open_token: Any, close_token: Any, day: str) -> TimeRange:
    open_min = parse_hhmm(open_token, day)
    close_min = parse_hhmm(close_token, day)
    if close_min <= open_min:
        raise ScheduleValidationError(day, "close must be later than open")
    return TimeRange(open_min, close_min)


def _parse_range_string(value: str, day: str) -> TimeRange:
    parts = value.split("-")
    if len(parts) != 2:
        raise ScheduleValidationError(day, f"'{value}' is not an HH:MM-HH:MM range")
    return _make_range(parts[0].strip(), parts[1].strip(), day)


def _first_present(record: Mapping[str, Any], fields: Tuple[str, ...]) -> Any:
    for field in fields:
        if record.get(field) not in (None, ""):
            return record[field]
    return None


def _parse_range_item(item: Any, day: str) -> TimeRange:
    if isinstance(item, str):
        return _parse_range_string(item.strip(), day)
    if isinstance(item, Mapping):
        return _make_range(_first_present(item, OPEN_FIELDS), _first_present(item, CLOSE_FIELDS), day)
    raise ScheduleValidationError(day, f"unrecognized range {item!r}")


def _validated(ranges: List[TimeRange], day: str) -> DaySchedule:
    if not ranges:
        raise ScheduleValidationError(day, "an active day needs at least one range")
    ordered = sorted(ranges)
    for prev, nxt in zip(ordered, ordered[1:]):
        if nxt.open < prev.close:
            raise ScheduleValidationError(day, f"ranges {prev} and {nxt} overlap")
    return DaySchedule(active=True, ranges=tuple(ordered))


def parse_day_value(value: Any, day: str) -> DaySchedule:
    """Normalize one day's raw value."""
    if value is None or value is False:
        return CLOSED_DAY

    if isinstance(value, str):
        text = value.strip()
        if not text or text.lower() in CLOSED_TOKENS:
            return CLOSED_DAY
        return _validated([_parse_range_string(text, day)], day)

    if isinstance(value, (list, tuple)):
        if not value:
            return CLOSED_DAY
        return _validated([_parse_range_item(item, day) for item in value], day)

    if isinstance(value, Mapping):
        raw_ranges = value.get("ranges")
        open_token = _first_present(value, OPEN_FIELDS)
        close_token = _first_present(value, CLOSE_FIELDS)

        active = value.get("active")
        if active is None:
            active = bool(raw_ranges or open_token or close_token)
        elif not isinstance(active, bool):
            raise ScheduleValidationError(day, f"active must be true or false, got {active!r}")
        if not active:
            return CLOSED_DAY

        if raw_ranges:
            if isinstance(raw_ranges, str):
                raw_ranges = [raw_ranges]
            return _validated([_parse_range_item(item, day) for item in raw_ranges], day)
        if open_token is None and close_token is None:
            raise ScheduleValidationError(day, "an active day needs open and close times")
        return _validated([_make_range(open_token, close_token, day)], day)

    raise ScheduleValidationError(day, f"unrecognized value {value!r}")


def resolve_schedule(raw: Any) -> WeeklySchedule:
    """
    Resolve a raw weekly schedule.

    Group keys (e.g. "lunes_a_viernes") are applied before single-day keys so
    an explicit day always wins. Unknown keys are ignored.
    """
    if isinstance(raw, WeeklySchedule):
        return raw
    if raw is None:
        return WeeklySchedule(days={key: CLOSED_DAY for key in DAY_KEYS})
    if not isinstance(raw, Mapping):
        raise ScheduleValidationError(None, "expected a mapping of weekday to hours")

    group_entries = []
    single_entries = []
    for key, value in raw.items():
        covered = canonical_day_keys(key)
        if not covered:
            logger.debug(f"Ignoring unrecognized schedule key: {key!r}")
            continue
        (group_entries if len(covered) > 1 else single_entries).append((covered, value))

    resolved: Dict[str, DaySchedule] = {}
    for covered, value in group_entries + single_entries:
        day_schedule = parse_day_value(value, covered[0] if len(covered) == 1 else "+".join(covered))
        for day in covered:
            resolved[day] = day_schedule

    return WeeklySchedule(
        days={key: resolved.get(key, CLOSED_DAY) for key in DAY_KEYS},
        declared=frozenset(resolved),
    )


def resolve_optional_schedule(raw: Any) -> Optional[WeeklySchedule]:
    """Stylist variant: None means inherit the tenant schedule entirely."""
    if raw is None:
        return None
    return resolve_schedule(raw)
