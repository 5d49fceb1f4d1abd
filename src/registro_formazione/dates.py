"""Date and clock-time helpers for Italian course data.

Dates travel as "DD/MM/YYYY" strings and times as "HH:MM" (24h) strings, the
formats the extraction prompt asks the oracle for.
"""

import re
from datetime import date

MESI_ITALIANI: tuple[str, ...] = (
    "Gennaio",
    "Febbraio",
    "Marzo",
    "Aprile",
    "Maggio",
    "Giugno",
    "Luglio",
    "Agosto",
    "Settembre",
    "Ottobre",
    "Novembre",
    "Dicembre",
)

# Indexed by date.weekday(): Monday is 0
GIORNI_ITALIANI: tuple[str, ...] = (
    "Lunedì",
    "Martedì",
    "Mercoledì",
    "Giovedì",
    "Venerdì",
    "Sabato",
    "Domenica",
)

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR

_TIME_RE = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")
_DATE_RE = re.compile(r"^([0-9]{1,2})/([0-9]{1,2})/([0-9]{4})$")


def parse_time(value: str | None) -> int | None:
    """Convert "HH:MM" to minutes since midnight.

    Returns None for anything that is not a valid 24-hour clock time.
    """
    if not value:
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour * MINUTES_PER_HOUR + minute


def format_minutes(minutes: int) -> str:
    """Format minutes since midnight as zero-padded "HH:MM"."""
    hour, minute = divmod(minutes, MINUTES_PER_HOUR)
    return f"{hour:02d}:{minute:02d}"


def parse_italian_date(value: str | None) -> date | None:
    """Parse "DD/MM/YYYY" into a date, or None if it is not a real date."""
    if not value:
        return None
    match = _DATE_RE.match(value.strip())
    if not match:
        return None
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_italian_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def filename_date(value: date) -> str:
    """Compact YYYYMMDD stamp used in generated file names."""
    return value.strftime("%Y%m%d")


def italian_month(value: date) -> str:
    return MESI_ITALIANI[value.month - 1]


def italian_weekday(value: date) -> str:
    return GIORNI_ITALIANI[value.weekday()]
