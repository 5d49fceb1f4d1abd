"""Project extracted sessions into flat Registro Ore rows.

Each session is classified (on-site / remote), split into hourly blocks and
emitted as one ExportRow per block. A session with a missing field is skipped
whole; a bad session never stops the others.
"""

from datetime import date
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from registro_formazione.dates import parse_italian_date
from registro_formazione.location import classify_location
from registro_formazione.logging import get_logger
from registro_formazione.models import ExclusionWindow, ExportRow, SessionRecord
from registro_formazione.timeblocks import split_into_hourly_blocks

log = get_logger(__name__)

SessionInput = Union[SessionRecord, Mapping[str, Any]]


def _coerce_session(index: int, item: Any) -> Optional[SessionRecord]:
    # index is the item's position in the caller's input, for the log only
    if isinstance(item, SessionRecord):
        return item
    if not isinstance(item, Mapping):
        log.warning("session_skipped", index=index, reason="not_an_object")
        return None
    try:
        return SessionRecord.model_validate(dict(item))
    except ValidationError as e:
        log.warning(
            "session_skipped",
            index=index,
            reason="invalid_values",
            error_count=e.error_count(),
        )
        return None


def coerce_sessions(items: Iterable[SessionInput] | None) -> list[SessionRecord]:
    """Turn raw oracle session objects into SessionRecords.

    Items that are neither a SessionRecord nor a mapping, or whose values do
    not validate, are logged and dropped. Completeness is not checked here.
    """
    records = (_coerce_session(index, item) for index, item in enumerate(items or []))
    return [record for record in records if record is not None]


def _date_key(text: str) -> tuple[bool, date]:
    day = parse_italian_date(text)
    return (day is None, day or date.min)


def sort_sessions_by_date(sessions: Iterable[SessionInput] | None) -> list[SessionRecord]:
    """Chronological order; undated sessions go last, in their input order."""
    return sorted(coerce_sessions(sessions), key=lambda session: _date_key(session.data))


def sort_rows_by_date(rows: Iterable[ExportRow]) -> list[ExportRow]:
    """Rows in lesson-date order, blocks of one day kept in their order."""
    return sorted(rows, key=lambda row: _date_key(row.data_lezione))


def project_session_rows(
    sessions: Iterable[SessionInput] | None,
    section_id: str,
    instructor_tax_code: str,
    subject_name: str,
    exclusion: ExclusionWindow | None = None,
) -> list[ExportRow]:
    """Build one export row per hourly block of every valid session.

    Args:
        sessions: Session records or raw oracle mappings, in display order.
        section_id: ID_SEZIONE copied onto every row.
        instructor_tax_code: Instructor codice fiscale copied onto every row.
        subject_name: Used for both MATERIA and CONTENUTI_MATERIA.
        exclusion: Break window passed through to the splitter.

    Returns:
        Rows in input session order, blocks chronological within a session.
    """
    rows: list[ExportRow] = []
    count = 0

    for index, item in enumerate(sessions or []):
        session = _coerce_session(index, item)
        if session is None:
            continue
        count += 1
        if not session.is_complete:
            log.warning(
                "session_skipped",
                index=index,
                reason="missing_fields",
                data=session.data,
                ora_inizio=session.ora_inizio,
                ora_fine=session.ora_fine,
            )
            continue

        location = classify_location(session.luogo)
        blocks = split_into_hourly_blocks(session.ora_inizio, session.ora_fine, exclusion)
        if not blocks:
            log.info(
                "session_without_blocks",
                index=index,
                ora_inizio=session.ora_inizio,
                ora_fine=session.ora_fine,
            )

        for block in blocks:
            rows.append(
                ExportRow(
                    id_sezione=section_id or "",
                    data_lezione=session.data,
                    totale_ore=block.duration,
                    ora_inizio=block.start,
                    ora_fine=block.end,
                    tipologia=location.tipologia,
                    codice_fiscale_docente=instructor_tax_code or "",
                    materia=subject_name or "",
                    contenuti_materia=subject_name or "",
                    svolgimento_sede_lezione=location.svolgimento,
                )
            )

    log.debug("session_rows_projected", sessions=count, rows=len(rows))
    return rows
