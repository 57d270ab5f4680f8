"""Date helpers for the fixed YYYY/MM/DD form used by every date field."""

import re
from datetime import date, timedelta

# Fixed-length approximations; months and years are not calendar aware.
UNIT_DAYS = {
    'd': 1,
    'w': 7,
    'm': 30,
    'y': 365,
}

_INTEGER_RE = re.compile(r'[+-]?[0-9]+')
_DIGITS_RE = re.compile(r'[0-9]+')


def format_date(value: date) -> str:
    # strftime does not zero-pad years below 1000 on every platform.
    return f"{value.year:04d}/{value.month:02d}/{value.day:02d}"


def format_today(today: date | None = None) -> str:
    """Return today's local date as YYYY/MM/DD."""
    return format_date(today or date.today())


def validate(date_str: str) -> bool:
    """Check the YYYY/MM/DD shape.

    Month must be 01-12 and day 01-31. There is no month-length or leap-year
    check, so 2025/02/31 is accepted.
    """
    parts = date_str.split('/')
    if len(parts) != 3:
        return False

    year, month, day = parts
    if len(year) != 4 or not _DIGITS_RE.fullmatch(year):
        return False
    if len(month) != 2 or not _DIGITS_RE.fullmatch(month):
        return False
    if not 1 <= int(month) <= 12:
        return False
    if len(day) != 2 or not _DIGITS_RE.fullmatch(day):
        return False
    return 1 <= int(day) <= 31


def _shift(value: int, unit: str, sign: int, today: date | None) -> date:
    base = today or date.today()
    try:
        return base + timedelta(days=sign * value * UNIT_DAYS[unit])
    except OverflowError:
        return date.max if sign * value > 0 else date.min


def cutoff(value: int, unit: str, today: date | None = None) -> str:
    """Date `value` units before today (d/w/m/y)."""
    return format_date(_shift(value, unit, -1, today))


def future(value: int, unit: str, today: date | None = None) -> str:
    """Date `value` units after today (d/w/m/y)."""
    return format_date(_shift(value, unit, 1, today))


def parse_age_token(token: str) -> tuple[int, str] | None:
    """Parse a relative age like '+3d', '+2w', '+1m' or '+1y'.

    Returns (value, unit), or None when the token is malformed or the value
    is not positive.
    """
    trimmed = token.strip()
    if not trimmed.startswith('+'):
        return None

    body = trimmed[1:]
    if len(body) < 2:
        return None

    unit = body[-1]
    if unit not in UNIT_DAYS:
        return None

    number = body[:-1]
    if not _INTEGER_RE.fullmatch(number):
        return None
    value = int(number)
    if value <= 0:
        return None

    return value, unit


def parse_due_input(token: str, today: date | None = None) -> str | None:
    """Resolve a due date typed by the user.

    Accepts absolute dates (2025-12-25 or 2025/12/25) and relative offsets
    (+3d, +2w, +1m, +1y). Returns YYYY/MM/DD or None.
    """
    trimmed = token.strip()
    if trimmed.startswith('+'):
        parsed = parse_age_token(trimmed)
        if parsed is None:
            return None
        value, unit = parsed
        return future(value, unit, today)

    normalized = trimmed.replace('-', '/')
    return normalized if validate(normalized) else None
