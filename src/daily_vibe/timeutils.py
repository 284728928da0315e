"""Timezone-aware day boundaries and timestamp parsing."""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "Asia/Taipei"

# Numeric timestamps below this are seconds since the epoch, above it milliseconds.
_EPOCH_MS_THRESHOLD = 100_000_000_000

# fromisoformat before 3.11 only takes 3 or 6 fractional digits.
_FRACTION_RE = re.compile(r"(?<=:\d\d)\.(\d+)")


def _six_digit_fraction(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def _zone(tz: str | None) -> ZoneInfo:
    return ZoneInfo(tz or DEFAULT_TIMEZONE)


def _local_day(value: date | datetime, tz: str | None) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.astimezone()
        return value.astimezone(_zone(tz)).date()
    return value


def get_day_range(day: date | datetime, tz: str | None = DEFAULT_TIMEZONE) -> tuple[datetime, datetime]:
    """Return the first and last instant of ``day`` in ``tz``."""
    return get_date_range(day, day, tz)


def get_date_range(
    start: date | datetime, end: date | datetime, tz: str | None = DEFAULT_TIMEZONE
) -> tuple[datetime, datetime]:
    """Return the start of ``start``'s day and the end of ``end``'s day in ``tz``."""
    zone = _zone(tz)
    first = datetime.combine(_local_day(start, tz), time.min, tzinfo=zone)
    last = datetime.combine(_local_day(end, tz), time.max, tzinfo=zone)
    return first, last


def is_within_range(timestamp: datetime, start: datetime, end: datetime) -> bool:
    """Inclusive range check."""
    return start <= timestamp <= end


def format_date(value: date | datetime) -> str:
    return value.strftime("%Y-%m-%d")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string, epoch number or datetime into an aware datetime.

    Naive values are taken to be in the machine's local timezone. Anything
    unparseable returns None.
    """
    if not value or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo else value.astimezone()

    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) >= _EPOCH_MS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(_six_digit_fraction, text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.astimezone()


def parse_date_arg(text: str, tz: str | None = DEFAULT_TIMEZONE) -> date:
    """Parse a CLI date argument: YYYY-MM-DD, ``today`` or ``yesterday``."""
    keyword = text.strip().lower()
    today = datetime.now(_zone(tz)).date()
    if keyword == "today":
        return today
    if keyword == "yesterday":
        return today - timedelta(days=1)
    try:
        return date.fromisoformat(keyword)
    except ValueError as e:
        raise ValueError(f"Invalid date '{text}'. Use YYYY-MM-DD, 'today' or 'yesterday'.") from e


def to_utc_iso(value: datetime) -> str:
    """``2025-09-01T08:30:00.000Z`` style string."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
