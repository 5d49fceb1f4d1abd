"""FAD (distance learning) calendar entries.

Remote sessions are listed one per day with the date split into the parts the
Italian calendar forms print (giorno, mese, anno, giorno della settimana).
"""

from typing import Iterable

from registro_formazione.dates import italian_month, italian_weekday, parse_italian_date
from registro_formazione.location import classify_location, is_fad
from registro_formazione.logging import get_logger
from registro_formazione.models import FadCalendarEntry, LocationCategory, SessionRecord
from registro_formazione.rows import SessionInput, coerce_sessions
from registro_formazione.timeblocks import duration_hours, format_hours

log = get_logger(__name__)


def is_remote_session(session: SessionRecord) -> bool:
    """Explicit online/FAD markers first, then the location classifier."""
    if is_fad(session.tipo_sede, session.luogo):
        return True
    if session.tipo_sede.strip():
        return False
    return classify_location(session.luogo).category == LocationCategory.REMOTE


def build_fad_calendar(sessions: Iterable[SessionInput] | None) -> list[FadCalendarEntry]:
    """Build calendar entries for the remote sessions, in input order.

    Sessions without a date or a valid time range are skipped. A date that
    cannot be parsed is kept verbatim with empty day/month/year parts.
    """
    entries: list[FadCalendarEntry] = []
    for session in coerce_sessions(sessions):
        if not is_remote_session(session):
            continue
        hours = duration_hours(session.ora_inizio, session.ora_fine)
        if not session.data.strip() or hours <= 0:
            log.warning(
                "fad_session_skipped",
                data=session.data,
                ora_inizio=session.ora_inizio,
                ora_fine=session.ora_fine,
            )
            continue

        day = parse_italian_date(session.data)
        entries.append(
            FadCalendarEntry(
                data=session.data,
                giorno=f"{day.day:02d}" if day else "",
                mese=italian_month(day) if day else "",
                anno=str(day.year) if day else "",
                giorno_settimana=italian_weekday(day) if day else "",
                ora_inizio=session.ora_inizio,
                ora_fine=session.ora_fine,
                durata=format_hours(round(hours * 60)),
            )
        )
    return entries


def total_fad_hours(entries: Iterable[FadCalendarEntry]) -> float:
    return sum(duration_hours(e.ora_inizio, e.ora_fine) for e in entries)
