"""Values for the ``{{KEY}}`` markers of the Word templates.

Every extracted field is available under its own name (nested objects also
as ``KEY.field``). Course-level markers used by the standard templates
(NOME_CORSO, ID_CORSO, DATA_INIZIO, ORE_TOTALI, ...) are derived from the
extracted data when the template did not extract them directly.
"""

from typing import Any, Iterable, Mapping, Optional

from registro_formazione.dates import italian_weekday, parse_italian_date, parse_time
from registro_formazione.models import ExclusionWindow, ExtractedData, Participant, SessionRecord
from registro_formazione.rows import sort_sessions_by_date
from registro_formazione.timeblocks import duration_hours, format_hours, split_into_hourly_blocks


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def flatten_values(data: ExtractedData) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, Mapping):
            for field, nested in value.items():
                values[f"{key}.{field}"] = "" if nested is None else nested
        else:
            values[key] = "" if value is None else value
    return values


def _text(data: ExtractedData, key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value).strip()


def taught_minutes(sessions: Iterable[SessionRecord], exclusion: Optional[ExclusionWindow]) -> int:
    """Minutes covered by register blocks, so the break is not counted."""
    total = 0
    for session in sessions:
        if not session.is_complete:
            continue
        for block in split_into_hourly_blocks(session.ora_inizio, session.ora_fine, exclusion):
            total += parse_time(block.end) - parse_time(block.start)
    return total


def _session_item(session: SessionRecord) -> dict[str, str]:
    day = parse_italian_date(session.data)
    return {
        "data": session.data,
        "giorno_settimana": italian_weekday(day) if day else "",
        "ora_inizio": session.ora_inizio,
        "ora_fine": session.ora_fine,
        "luogo": session.luogo,
        "ore": format_hours(round(duration_hours(session.ora_inizio, session.ora_fine) * 60)),
    }


def _participant_item(participant: Participant, number: int) -> dict[str, str]:
    return {
        "numero": participant.numero or str(number),
        "nome": participant.nome,
        "cognome": participant.cognome,
        "nome_completo": participant.display_name,
        "codice_fiscale": participant.codice_fiscale,
    }


def course_values(
    data: ExtractedData,
    sessions: Iterable[Any],
    participants: list[Participant],
    exclusion: Optional[ExclusionWindow] = None,
) -> dict[str, Any]:
    """Marker values shared by every course-level document.

    SESSIONI and PARTECIPANTI become lists of objects in date / list order,
    ready for row repetition in template tables.
    """
    values = flatten_values(data)
    ordered = sort_sessions_by_date(sessions)
    days = [s.data for s in ordered if parse_italian_date(s.data)]
    minutes = taught_minutes(ordered, exclusion)
    subject = _text(data, "MATERIA")
    section = _text(data, "ID_SEZIONE")

    derived = {
        "NOME_CORSO": subject,
        "CORSO_TITOLO": subject,
        "ID_CORSO": section,
        "CORSO_ID": section,
        "DATA_INIZIO": days[0] if days else "",
        "DATA_FINE": days[-1] if days else "",
        "ORE_TOTALI": format_hours(minutes) if minutes else "",
        "DOCENTE_CF": _text(data, "CODICE_FISCALE_DOCENTE"),
        "NUMERO_PARTECIPANTI": str(len(participants)),
    }
    for key, value in derived.items():
        if _blank(values.get(key)):
            values[key] = value

    values["SESSIONI"] = [_session_item(s) for s in ordered]
    values["PARTECIPANTI"] = [
        _participant_item(p, number) for number, p in enumerate(participants, start=1)
    ]
    return values


def participant_values(
    course: Mapping[str, Any], participant: Participant, number: int
) -> dict[str, Any]:
    """Course values plus the markers of a per-participant certificate."""
    name = participant.display_name
    values = dict(course)
    values.update(
        {
            "PARTECIPANTE_NOME": participant.nome,
            "PARTECIPANTE_COGNOME": participant.cognome,
            "PARTECIPANTE_NOME_COMPLETO": name,
            "NOME_PARTECIPANTE": name,
            "PARTECIPANTE_CF": participant.codice_fiscale,
            "CODICE_FISCALE_PARTECIPANTE": participant.codice_fiscale,
            "PARTECIPANTE_NUMERO": participant.numero or str(number),
        }
    )
    return values
