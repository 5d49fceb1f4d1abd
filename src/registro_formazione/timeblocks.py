"""Split lesson time ranges into hourly register blocks.

A session "09:00-17:00" becomes one row per hour in the Registro Ore. Blocks
that touch the exclusion window (the lunch break) are dropped whole, never
shortened, so 09:00-17:00 with a 13:00-14:00 break gives 7 blocks.

Malformed input never raises: the caller gets an empty list and the upstream
record simply produces no rows.
"""

from pydantic import ValidationError

from registro_formazione.dates import MINUTES_PER_HOUR, format_minutes, parse_time
from registro_formazione.logging import get_logger
from registro_formazione.models import ExclusionWindow, HourlyBlock, TimeInterval

log = get_logger(__name__)

# Italian labor-rule lunch break; pass it explicitly where it applies
LUNCH_BREAK = ExclusionWindow(start="13:00", end="14:00")


def format_hours(minutes: int) -> str:
    """Render a duration as hours: 60 -> "1", 30 -> "0.5", 40 -> "0.67"."""
    return f"{minutes / MINUTES_PER_HOUR:.2f}".rstrip("0").rstrip(".")


def duration_hours(start: str, end: str) -> float:
    """Length of an "HH:MM" range in hours, 0.0 if the range is invalid."""
    start_minutes = parse_time(start)
    end_minutes = parse_time(end)
    if start_minutes is None or end_minutes is None or end_minutes <= start_minutes:
        return 0.0
    return (end_minutes - start_minutes) / MINUTES_PER_HOUR


def split_into_hourly_blocks(
    start: str,
    end: str,
    exclusion: ExclusionWindow | None = None,
) -> list[HourlyBlock]:
    """Split [start, end) into consecutive one-hour blocks.

    The walk starts at ``start`` and advances one hour at a time; the last
    step is clamped to ``end`` and labelled with its real length.

    Args:
        start: Start time "HH:MM" (24h).
        end: End time "HH:MM", strictly after start.
        exclusion: Window no block may overlap; blocks overlapping it are
            skipped. None disables the check.

    Returns:
        Blocks in chronological order, or [] for malformed input.
    """
    try:
        interval = TimeInterval.from_strings(start, end)
    except (ValueError, ValidationError):
        log.debug("time_range_rejected", start=start, end=end)
        return []

    blocks: list[HourlyBlock] = []
    current = interval.start_minutes
    while current < interval.end_minutes:
        block_end = min(current + MINUTES_PER_HOUR, interval.end_minutes)

        if exclusion is not None and exclusion.overlaps(current, block_end):
            log.debug(
                "block_excluded",
                start=format_minutes(current),
                end=format_minutes(block_end),
            )
        else:
            blocks.append(
                HourlyBlock(
                    start=format_minutes(current),
                    end=format_minutes(block_end),
                    duration=format_hours(block_end - current),
                )
            )
        current = block_end

    return blocks
