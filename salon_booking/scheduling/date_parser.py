"""
Natural-language date and time normalization

Used by the chat/voice layer to turn phrases such as "mañana", "el próximo
viernes", "15 de junio" or "3pm" into canonical YYYY-MM-DD / HH:MM values in
the tenant's timezone.

Parsing is advisory: unparseable input never raises. It degrades to today
(dates) or to a fixed fallback time, and the result is flagged as not
confident so the conversational layer can ask the client to confirm.
"""
import re
import unicodedata
from datetime import date, datetime, timedelta, timezone
from typing import NamedTuple, Optional, Tuple

from .timezones import TzLike, get_zone
from .working_hours import DAY_ALIASES, DAY_KEYS

FALLBACK_TIME = "10:00"
NEXT_WEEKDAY_MAX_DAYS = 13


class ParsedPhrase(NamedTuple):
    value: str
    confident: bool
    rule: str


def _fold(text: str) -> str:
    """Lowercase, strip diacritics, collapse whitespace."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return re.sub(r"\s+", " ", stripped).strip()


# Full weekday names only: three-letter abbreviations are too ambiguous in free text
WEEKDAY_NAMES = {
    _fold(alias): DAY_KEYS.index(days[0])
    for alias, days in DAY_ALIASES.items()
    if len(days) == 1 and len(alias) > 3
}

NEXT_MODIFIERS = frozenset({"next", "following", "proximo", "proxima", "siguiente"})

MONTH_NAMES = {
    "january": 1, "jan": 1, "enero": 1,
    "february": 2, "feb": 2, "febrero": 2,
    "march": 3, "marzo": 3,
    "april": 4, "apr": 4, "abril": 4,
    "may": 5, "mayo": 5,
    "june": 6, "jun": 6, "junio": 6,
    "july": 7, "jul": 7, "julio": 7,
    "august": 8, "aug": 8, "agosto": 8,
    "september": 9, "sep": 9, "sept": 9, "septiembre": 9, "setiembre": 9,
    "october": 10, "oct": 10, "octubre": 10,
    "november": 11, "nov": 11, "noviembre": 11,
    "december": 12, "dec": 12, "diciembre": 12,
}

_DAY_AFTER_TOMORROW_RE = re.compile(r"\b(day after tomorrow|pasado manana)\b")
_TOMORROW_RE = re.compile(r"\b(tomorrow|manana)\b")
_TODAY_RE = re.compile(r"\b(today|hoy)\b")
# "la mañana" is the morning, not tomorrow
_MORNING_RE = re.compile(r"\b(?:(?:por|en|de|a) )?la manana\b")
_ISO_DATE_RE = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")
_DAY_MONTH_RE = re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)?\s+(?:de\s+|of\s+)?([a-z]+)\b")
_MONTH_DAY_RE = re.compile(r"\b([a-z]+)\s+(\d{1,2})(?:st|nd|rd|th)?\b")


def _today_in(tz: TzLike, now: Optional[datetime]) -> date:
    zone = get_zone(tz)
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=zone)
    return now.astimezone(zone).date()


def _next_weekday(today: date, weekday: int, wants_next: bool, max_days: int) -> date:
    """
    Next occurrence strictly after today. A "next" modifier adds a week
    unless that lands more than max_days out, in which case the nearer
    occurrence is kept.
    """
    delta = (weekday - today.weekday()) % 7 or 7
    if wants_next and delta + 7 <= max_days:
        delta += 7
    return today + timedelta(days=delta)


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _roll_forward(month: int, day: int, year: int, today: date) -> Optional[date]:
    """Same month/day in the first year >= `year` that is not before today."""
    for candidate_year in range(year, max(year, today.year) + 2):
        candidate = _safe_date(candidate_year, month, day)
        if candidate is None and month == 2 and day == 29:
            candidate = date(candidate_year, 2, 28)
        if candidate is not None and candidate >= today:
            return candidate
    return None


def _match_weekday(folded: str) -> Optional[Tuple[int, bool]]:
    """(weekday index, has a "next" modifier) for the first weekday name found."""
    words = re.findall(r"[a-z]+", folded)
    weekday = next((WEEKDAY_NAMES[w] for w in words if w in WEEKDAY_NAMES), None)
    if weekday is None:
        return None
    return weekday, bool(NEXT_MODIFIERS.intersection(words))


def _match_day_month(folded: str) -> Optional[Tuple[int, int]]:
    for match in _DAY_MONTH_RE.finditer(folded):
        if match.group(2) in MONTH_NAMES:
            return int(match.group(1)), MONTH_NAMES[match.group(2)]
    for match in _MONTH_DAY_RE.finditer(folded):
        if match.group(1) in MONTH_NAMES:
            return int(match.group(2)), MONTH_NAMES[match.group(1)]
    return None


def interpret_date_phrase(
        text: Optional[str],
        tz: TzLike,
        now: Optional[datetime] = None,
        max_next_days: int = NEXT_WEEKDAY_MAX_DAYS
) -> ParsedPhrase:
    """Resolve a date phrase, reporting which rule matched and how confident it is."""
    today = _today_in(tz, now)
    if not text or not str(text).strip():
        return ParsedPhrase(today.isoformat(), False, "default")

    folded = _MORNING_RE.sub(" ", _fold(str(text)))

    if _DAY_AFTER_TOMORROW_RE.search(folded):
        return ParsedPhrase((today + timedelta(days=2)).isoformat(), True, "keyword")
    if _TOMORROW_RE.search(folded):
        return ParsedPhrase((today + timedelta(days=1)).isoformat(), True, "keyword")
    if _TODAY_RE.search(folded):
        return ParsedPhrase(today.isoformat(), True, "keyword")

    weekday_match = _match_weekday(folded)
    if weekday_match is not None:
        weekday, wants_next = weekday_match
        resolved = _next_weekday(today, weekday, wants_next, max_next_days)
        return ParsedPhrase(resolved.isoformat(), True, "weekday_next" if wants_next else "weekday")

    iso = _ISO_DATE_RE.search(folded)
    if iso:
        year, month, day = (int(g) for g in iso.groups())
        literal = _safe_date(year, month, day)
        if literal is not None:
            if literal >= today:
                return ParsedPhrase(literal.isoformat(), True, "iso")
            rolled = _roll_forward(month, day, year + 1, today)
            if rolled is not None:
                return ParsedPhrase(rolled.isoformat(), True, "iso_rolled")

    day_month = _match_day_month(folded)
    if day_month is not None:
        day, month = day_month
        if _safe_date(2000, month, day) is not None:
            resolved = _roll_forward(month, day, today.year, today)
            if resolved is not None:
                return ParsedPhrase(resolved.isoformat(), True, "day_month")

    return ParsedPhrase(today.isoformat(), False, "default")


def parse_date_phrase(text: Optional[str], tz: TzLike, now: Optional[datetime] = None) -> str:
    """Canonical YYYY-MM-DD for a free-text date phrase (today when unparseable)."""
    return interpret_date_phrase(text, tz, now=now).value


_AMPM_DOTS_RE = re.compile(r"(?<![a-z])([ap])\.?\s*m\.?(?![a-z])")
_FILLER_WORDS = frozenset({"a", "las", "la", "de", "at", "around", "hrs", "horas", "h"})
_TIME_RE = re.compile(r"(\d{1,2})(?::?(\d{2}))?(am|pm|manana|tarde|noche)?")
_NOON_WORDS = ("noon", "midday", "mediodia", "medio dia")
_MIDNIGHT_WORDS = ("midnight", "medianoche")


def interpret_time_phrase(text: Optional[str], fallback: str = FALLBACK_TIME) -> ParsedPhrase:
    """Resolve a time phrase to HH:MM (24-hour)."""
    if not text or not str(text).strip():
        return ParsedPhrase(fallback, False, "default")

    folded = _fold(str(text))
    if folded in _NOON_WORDS:
        return ParsedPhrase("12:00", True, "keyword")
    if folded in _MIDNIGHT_WORDS:
        return ParsedPhrase("00:00", True, "keyword")

    folded = _AMPM_DOTS_RE.sub(lambda m: f" {m.group(1)}m", folded)
    compact = "".join(word for word in folded.split() if word not in _FILLER_WORDS)

    match = _TIME_RE.fullmatch(compact)
    if not match:
        return ParsedPhrase(fallback, False, "default")

    hours = int(match.group(1))
    minutes = int(match.group(2)) if match.group(2) else 0
    suffix = match.group(3)

    if suffix in ("am", "pm", "manana") and not 1 <= hours <= 12:
        return ParsedPhrase(fallback, False, "default")
    if suffix in ("pm", "tarde", "noche") and hours < 12:
        hours += 12
    if suffix in ("am", "manana", "noche") and hours == 12:
        hours = 0
    if hours > 23 or minutes > 59:
        return ParsedPhrase(fallback, False, "default")

    return ParsedPhrase(f"{hours:02d}:{minutes:02d}", True, "clock" if suffix is None else "twelve_hour")


def parse_time_phrase(text: Optional[str], fallback: str = FALLBACK_TIME) -> str:
    """Canonical HH:MM for a free-text time phrase (fallback when unparseable)."""
    return interpret_time_phrase(text, fallback=fallback).value


def combine_local(date_str: str, time_str: str, tz: TzLike) -> datetime:
    """UTC instant for a canonical local date and time."""
    local = datetime.strptime(f"{date_str} {time_str}", "%Y-%m-%d %H:%M")
    return local.replace(tzinfo=get_zone(tz)).astimezone(timezone.utc)
