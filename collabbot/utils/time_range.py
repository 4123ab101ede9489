"""Natural-language time range resolution.

All datetimes leaving this module are naive UTC, matching what the store
persists. A timezone-aware ``now`` makes calendar words ("today",
"yesterday", "thursday") follow the caller's local calendar; a naive ``now``
is read as UTC.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

NUMBER_WORDS = {
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11,
    "twelve": 12, "couple": 2, "couple of": 2, "few": 3,
}

_NUMBER = r"(\d+|a|an|one|two|three|four|five|six|seven|eight|nine|ten|eleven|twelve|couple of|couple|few)"

_UNIT_DELTAS = {
    "minute": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
    "month": timedelta(days=30),
}

_ROLLING_RE = re.compile(
    rf"\b(last|past|previous)\s+(?:{_NUMBER}\s+)?(minute|hour|day|week|month)s?\b"
)
_AGO_RE = re.compile(rf"\b{_NUMBER}\s+(minute|hour|day|week)s?\s+ago\b")
_WEEKDAY_RE = re.compile(r"\b(?:(last|on|this|past)\s+)?(" + "|".join(WEEKDAYS) + r")\b")
_ISO_DATE_RE = re.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b")
_SLASH_DATE_RE = re.compile(r"\b(\d{1,2})/(\d{1,2})(?:/(\d{2}|\d{4}))?\b")
_MONTH_NAME = (
    r"(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)
_MONTH_DAY_RE = re.compile(
    r"\b" + _MONTH_NAME + r"\.?\s+(\d{1,2})(?:st|nd|rd|th)?\b(?:,?\s+(\d{4}))?"
)
_DAY_MONTH_RE = re.compile(
    r"\b(\d{1,2})(?:st|nd|rd|th)?\s+(?:of\s+)?" + _MONTH_NAME + r"\b(?:,?\s+(\d{4}))?"
)
_IN_DAYS_RE = re.compile(rf"\bin\s+{_NUMBER}\s+(day|week)s?\b")


@dataclass(frozen=True)
class TimeRange:
    """A resolved time window, half-open [start, end), naive UTC."""

    start: datetime
    end: datetime
    description: str = ""

    @property
    def start_iso(self) -> str:
        return format_iso(self.start)

    @property
    def end_iso(self) -> str:
        return format_iso(self.end)

    def to_dict(self) -> dict:
        return {
            "start_time": self.start_iso,
            "end_time": self.end_iso,
            "description": self.description,
        }


def utc_now() -> datetime:
    """Current instant as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def format_iso(value: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    value = to_utc_naive(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse an ISO-8601 string or datetime into naive UTC.

    Args:
        value: ISO string (a trailing ``Z`` is accepted), datetime or None

    Returns:
        Naive UTC datetime, or None for empty input

    Raises:
        ValueError: If the string is not ISO-8601
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc_naive(value)
    text = str(value).strip()
    if not text:
        return None
    if text[-1] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    return to_utc_naive(datetime.fromisoformat(text))


def get_zone(name: Optional[str]) -> tzinfo:
    """Look up an IANA zone, falling back to UTC for unknown names."""
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def is_valid_zone(name: str) -> bool:
    try:
        ZoneInfo(name)
        return True
    except (ZoneInfoNotFoundError, ValueError):
        return False


def now_in_zone(zone_name: Optional[str], instant: Optional[datetime] = None) -> datetime:
    """Return ``instant`` (default: now) as an aware datetime in ``zone_name``."""
    if instant is None:
        instant = datetime.now(timezone.utc)
    elif instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(get_zone(zone_name))


def default_window(now: datetime, hours: int = 24) -> TimeRange:
    """The rolling window ending at ``now``."""
    end = to_utc_naive(now)
    label = "the last 24 hours" if hours == 24 else f"the last {hours} hours"
    return TimeRange(start=end - timedelta(hours=hours), end=end, description=label)


def _localize(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def _day_start(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def _end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999000)


def _parse_number(token: Optional[str]) -> int:
    if token is None:
        return 1
    if token.isdigit():
        return int(token)
    return NUMBER_WORDS[token]


def _month_number(token: str) -> int:
    return MONTHS[token[:3]]


def _normalize_year(year: int) -> int:
    if year < 100:
        return 2000 + year
    return year


def _make_range(start: datetime, end: datetime, description: str) -> TimeRange:
    return TimeRange(start=to_utc_naive(start), end=to_utc_naive(end), description=description)


def _day_range(day: datetime, description: str) -> TimeRange:
    start = _day_start(day)
    return _make_range(start, start + timedelta(days=1), description)


def _describe_day(day: datetime) -> str:
    return f"{WEEKDAYS[day.weekday()].capitalize()}, {day.strftime('%B')} {day.day}, {day.year}"


def _match_rolling(text: str, now: datetime) -> Optional[TimeRange]:
    match = _ROLLING_RE.search(text)
    if not match:
        return None
    prefix, number, unit = match.groups()
    # "last week" / "last month" without a count are calendar periods
    if number is None and prefix in ("last", "previous") and unit in ("week", "month"):
        return None
    count = _parse_number(number)
    start = now - _UNIT_DELTAS[unit] * count
    plural = "s" if count != 1 else ""
    label = f"the last {count} {unit}{plural}" if count != 1 else f"the last {unit}"
    return _make_range(start, now, label)


def _match_ago(text: str, now: datetime) -> Optional[TimeRange]:
    match = _AGO_RE.search(text)
    if not match:
        return None
    count = _parse_number(match.group(1))
    unit = match.group(2)
    plural = "s" if count != 1 else ""
    label = f"{count} {unit}{plural} ago"
    if unit == "day":
        return _day_range(now - timedelta(days=count), label)
    if unit == "week":
        start = _day_start(now - timedelta(weeks=count))
        return _make_range(start, start + timedelta(weeks=1), label)
    return _make_range(now - _UNIT_DELTAS[unit] * count, now, label)


def _part_of_day(now: datetime, start_hour: int, end_hour: int, label: str) -> TimeRange:
    start = _day_start(now) + timedelta(hours=start_hour)
    end = _day_start(now) + timedelta(hours=end_hour)
    if now < start:
        # Not reached yet today: refer to the previous day's window
        start -= timedelta(days=1)
        end -= timedelta(days=1)
    elif now < end:
        end = now
    return _make_range(start, end, label)


def _match_keywords(text: str, now: datetime) -> Optional[TimeRange]:
    today = _day_start(now)
    if "day before yesterday" in text:
        return _day_range(today - timedelta(days=2), "the day before yesterday")
    if re.search(r"\byesterday\b", text):
        return _make_range(today - timedelta(days=1), today, "yesterday")
    if re.search(r"\bthis morning\b", text):
        return _part_of_day(now, 6, 12, "this morning")
    if re.search(r"\bthis afternoon\b", text):
        return _part_of_day(now, 12, 18, "this afternoon")
    if re.search(r"\b(this evening|tonight)\b", text):
        return _part_of_day(now, 18, 24, "this evening")
    if re.search(r"\btoday\b", text):
        return _make_range(today, now, "today")
    week_start = today - timedelta(days=today.weekday())
    if re.search(r"\bthis week\b", text):
        return _make_range(week_start, now, "this week")
    if re.search(r"\b(last|previous) week\b", text):
        return _make_range(week_start - timedelta(weeks=1), week_start, "last week")
    month_start = today.replace(day=1)
    if re.search(r"\bthis month\b", text):
        return _make_range(month_start, now, "this month")
    if re.search(r"\b(last|previous) month\b", text):
        previous_start = (month_start - timedelta(days=1)).replace(day=1)
        return _make_range(previous_start, month_start, "last month")
    return None


def _match_weekday(text: str, now: datetime) -> Optional[TimeRange]:
    match = _WEEKDAY_RE.search(text)
    if not match:
        return None
    qualifier, name = match.groups()
    target = WEEKDAYS.index(name)
    days_back = (now.weekday() - target) % 7
    if days_back == 0 and qualifier in ("last", "past"):
        days_back = 7
    day = _day_start(now) - timedelta(days=days_back)
    end = min(day + timedelta(days=1), now)
    return _make_range(day, end, _describe_day(day))


def _calendar_day(now: datetime, year: Optional[int], month: int, day: int) -> Optional[TimeRange]:
    explicit_year = year is not None
    try:
        value = _day_start(now).replace(year=year or now.year, month=month, day=day)
    except ValueError:
        return None
    if not explicit_year and value > now:
        try:
            value = value.replace(year=value.year - 1)
        except ValueError:
            return None
    return _day_range(value, _describe_day(value))


def _match_dates(text: str, now: datetime) -> Optional[TimeRange]:
    match = _ISO_DATE_RE.search(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        return _calendar_day(now, year, month, day)

    match = _MONTH_DAY_RE.search(text)
    if match:
        year = int(match.group(3)) if match.group(3) else None
        return _calendar_day(now, year, _month_number(match.group(1)), int(match.group(2)))

    match = _DAY_MONTH_RE.search(text)
    if match:
        year = int(match.group(3)) if match.group(3) else None
        return _calendar_day(now, year, _month_number(match.group(2)), int(match.group(1)))

    match = _SLASH_DATE_RE.search(text)
    if match:
        year = _normalize_year(int(match.group(3))) if match.group(3) else None
        return _calendar_day(now, year, int(match.group(1)), int(match.group(2)))

    return None


_MATCHERS: List[Callable[[str, datetime], Optional[TimeRange]]] = [
    _match_rolling,
    _match_ago,
    _match_keywords,
    _match_weekday,
    _match_dates,
]


def resolve_time_range(phrase: Optional[str], now: datetime) -> Optional[TimeRange]:
    """
    Resolve a natural-language phrase into a concrete time window.

    Weekday names always resolve to the most recent past occurrence.

    Args:
        phrase: Phrase such as "yesterday", "last thursday" or "past 3 days"
        now: Reference instant

    Returns:
        TimeRange, or None when nothing in the phrase is recognised
    """
    if not phrase or not phrase.strip():
        return None

    text = " ".join(phrase.lower().split())
    local_now = _localize(now)

    for matcher in _MATCHERS:
        result = matcher(text, local_now)
        if result is not None:
            return result
    return None


def resolve_deadline(expression: Optional[str], now: datetime) -> Optional[str]:
    """
    Resolve a relative due date into an end-of-day UTC ISO timestamp.

    Args:
        expression: e.g. "tomorrow", "end of week", "next monday", "3/15"
        now: Reference instant (aware datetimes use their own calendar)

    Returns:
        ISO timestamp string, or None when the expression is not understood
    """
    if not expression or not expression.strip():
        return None

    text = " ".join(expression.lower().split())
    local_now = _localize(now)
    today = _day_start(local_now)
    due: Optional[datetime] = None

    if re.search(r"\btoday\b|\bend of (the )?day\b", text):
        due = today
    elif re.search(r"\btomorrow\b", text):
        due = today + timedelta(days=1)
    elif re.search(r"\bend of (the )?month\b", text):
        last_day = calendar.monthrange(today.year, today.month)[1]
        due = today.replace(day=last_day)
    elif re.search(r"\bend of (the )?week\b|\bthis week\b", text):
        due = today + timedelta(days=(4 - today.weekday()) % 7)
    elif re.search(r"\bnext week\b", text):
        due = today + timedelta(days=(0 - today.weekday()) % 7 or 7)
    else:
        in_days = _IN_DAYS_RE.search(text)
        weekday = _WEEKDAY_RE.search(text)
        if in_days:
            count = _parse_number(in_days.group(1))
            due = today + (timedelta(weeks=count) if in_days.group(2) == "week" else timedelta(days=count))
        elif weekday:
            target = WEEKDAYS.index(weekday.group(2))
            days_ahead = (target - today.weekday()) % 7
            if days_ahead == 0 and "next" in text:
                days_ahead = 7
            due = today + timedelta(days=days_ahead)
        else:
            due = _deadline_date(text, today)

    if due is None:
        try:
            parsed = parse_timestamp(expression)
        except ValueError:
            return None
        return format_iso(parsed) if parsed else None

    return format_iso(_end_of_day(due))


def _deadline_date(text: str, today: datetime) -> Optional[datetime]:
    match = _ISO_DATE_RE.fullmatch(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        try:
            return today.replace(year=year, month=month, day=day)
        except ValueError:
            return None

    match = _SLASH_DATE_RE.search(text)
    if not match:
        return None
    month, day = int(match.group(1)), int(match.group(2))
    explicit_year = match.group(3) is not None
    year = _normalize_year(int(match.group(3))) if explicit_year else today.year
    try:
        due = today.replace(year=year, month=month, day=day)
    except ValueError:
        return None
    if not explicit_year and due < today:
        due = due.replace(year=due.year + 1)
    return due
