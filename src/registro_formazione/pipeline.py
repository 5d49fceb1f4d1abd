"""End-to-end generation: extracted data in, ZIP-ready files out.

    data -> validate -> hourly rows / lesson calendar / attendance / FAD calendar
         -> filled Word templates -> files

Validation errors stop generation; malformed sessions only drop their own rows.
"""

from datetime import date
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel, Field

from registro_formazione.config import RegistroConfig, get_config
from registro_formazione.dates import filename_date
from registro_formazione.errors import ValidationFailedError
from registro_formazione.exports import (
    build_attendance_workbook,
    build_fad_calendar_document,
    build_lesson_calendar_workbook,
    build_registro_workbook,
    build_zip,
    fill_word_template,
    load_word_template,
    safe_filename,
    workbook_to_bytes,
)
from registro_formazione.fad import build_fad_calendar
from registro_formazione.gemini import GeminiExtractor
from registro_formazione.logging import bind_course_context, get_logger
from registro_formazione.models import (
    ExclusionWindow,
    ExtractedData,
    Participant,
    TemplateConfig,
    ValidationReport,
)
from registro_formazione.participants import coerce_participants
from registro_formazione.placeholders import course_values, participant_values
from registro_formazione.rows import coerce_sessions, project_session_rows, sort_rows_by_date
from registro_formazione.templates import DEFAULT_EXCEL_COLUMNS
from registro_formazione.validation import validate_extracted_data

log = get_logger(__name__)

SESSIONS_KEY = "SESSIONI"
PARTICIPANTS_KEY = "PARTECIPANTI"


class GeneratedPackage(BaseModel):
    """Files produced for one course, plus the validation warnings."""

    files: dict[str, bytes] = Field(default_factory=dict)
    report: ValidationReport = Field(default_factory=ValidationReport)
    row_count: int = 0

    def to_zip(self) -> bytes:
        return build_zip(self.files)


def _text(data: ExtractedData, key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value).strip()


def _wants_hourly_register(config: TemplateConfig) -> bool:
    """Templates with export columns or a section ID produce the Registro Ore."""
    if config.post_processing.excel_columns:
        return True
    return any(variable.name == "ID_SEZIONE" for variable in config.variables)


def _session_dates(sessions: Iterable[Any] | None) -> list[str]:
    seen: list[str] = []
    for session in coerce_sessions(sessions):
        day = session.data.strip()
        if day and day not in seen:
            seen.append(day)
    return seen


def _word_documents(
    data: ExtractedData,
    sessions: list[Any],
    participants: list[Participant],
    exclusion: Optional[ExclusionWindow],
    settings: RegistroConfig,
) -> dict[str, bytes]:
    """Fill the configured Word templates; unset templates produce nothing.

    Raises:
        TemplateNotFoundError: If a configured template path is not a .docx file.
    """
    templates: dict[str, Path] = {
        name: path
        for name, path in (
            ("registro_id", settings.registro_id_template),
            ("verbale_ammissione", settings.verbale_ammissione_template),
            ("attestato", settings.attestato_template),
        )
        if path is not None
    }
    if not templates:
        return {}

    section = _text(data, "ID_SEZIONE")
    values = course_values(data, sessions, participants, exclusion)
    files: dict[str, bytes] = {}

    if "registro_id" in templates:
        template = load_word_template(templates["registro_id"])
        name = f"Registro_Presenza_ID_{safe_filename(section, fallback='Corso')}.docx"
        files[name] = fill_word_template(template, values)

    if "verbale_ammissione" in templates:
        template = load_word_template(templates["verbale_ammissione"])
        name = f"Verbale_Ammissione_Esame_{safe_filename(section, fallback='corso')}.docx"
        files[name] = fill_word_template(template, values)

    if "attestato" in templates:
        template = load_word_template(templates["attestato"])
        if not participants:
            log.warning("certificates_skipped", reason="no_participants")
        for number, participant in enumerate(participants, start=1):
            name = (
                f"certificati/Verbale_Finale_{safe_filename(section, fallback='Corso')}"
                f"_{number:02d}_{safe_filename(participant.display_name, fallback='partecipante')}.docx"
            )
            files[name] = fill_word_template(
                template, participant_values(values, participant, number)
            )

    log.info("word_documents_filled", templates=list(templates), files=len(files))
    return files


def generate_package(
    data: ExtractedData,
    config: TemplateConfig,
    settings: Optional[RegistroConfig] = None,
    today: Optional[date] = None,
) -> GeneratedPackage:
    """Validate extracted data and build every document it supports.

    Files come in a fixed order: Registro Ore, Calendario Lezioni, Registro
    Presenze, Calendario FAD, then the Word templates configured in settings
    (Registro presenza ID, Verbale Ammissione Esame, one Verbale Finale per
    participant under ``certificati/``).

    Raises:
        ValidationFailedError: If a required template field is missing.
        TemplateNotFoundError: If a configured Word template cannot be read.
    """
    settings = settings or get_config()
    data = data or {}
    stamp = filename_date(today or date.today())
    bind_course_context(template=config.name, id_sezione=_text(data, "ID_SEZIONE"))

    report = validate_extracted_data(data, config)
    if not report.is_valid:
        log.error("generation_blocked", template=config.name, errors=report.errors)
        raise ValidationFailedError(report)

    sessions = data.get(SESSIONS_KEY) or []
    if not isinstance(sessions, list):
        sessions = []
    section = _text(data, "ID_SEZIONE")
    subject = _text(data, "MATERIA")
    exclusion = settings.lunch_break() if config.post_processing.skip_lunch_break else None
    package = GeneratedPackage(report=report)

    if _wants_hourly_register(config):
        rows = project_session_rows(
            sessions,
            section_id=section,
            instructor_tax_code=_text(data, "CODICE_FISCALE_DOCENTE"),
            subject_name=subject,
            exclusion=exclusion,
        )
        package.row_count = len(rows)
        if rows:
            columns = config.post_processing.excel_columns or DEFAULT_EXCEL_COLUMNS
            name = f"Registro_Ore_{safe_filename(section)}_{stamp}.xlsx"
            package.files[name] = workbook_to_bytes(build_registro_workbook(rows, columns))

            name = f"Calendario_Lezioni_{safe_filename(section, fallback='Corso')}.xlsx"
            calendar = build_lesson_calendar_workbook(sort_rows_by_date(rows))
            package.files[name] = workbook_to_bytes(calendar)
        else:
            log.warning("registro_ore_skipped", reason="no_valid_blocks", sessions=len(sessions))

    participants = coerce_participants(data.get(PARTICIPANTS_KEY))
    if participants:
        dates = _session_dates(sessions)
        names = [participant.display_name for participant in participants]
        name = f"Registro_Presenze_{safe_filename(subject, fallback='Corso')}.xlsx"
        package.files[name] = workbook_to_bytes(build_attendance_workbook(names, dates))

    fad_entries = build_fad_calendar(sessions)
    if fad_entries:
        name = f"Calendario_FAD_{safe_filename(subject, fallback='Corso')}.docx"
        package.files[name] = build_fad_calendar_document(subject, fad_entries)

    package.files.update(_word_documents(data, sessions, participants, exclusion, settings))

    log.info(
        "package_generated",
        template=config.name,
        files=list(package.files),
        rows=package.row_count,
        warnings=len(report.warnings),
    )
    return package


def extract_and_generate(
    text: str,
    config: TemplateConfig,
    extractor: GeminiExtractor,
    settings: Optional[RegistroConfig] = None,
    additional_context: Optional[Mapping[str, Any]] = None,
    today: Optional[date] = None,
) -> GeneratedPackage:
    """Run the oracle on pasted text, then generate the package."""
    data = extractor.extract(config, text, additional_context)
    return generate_package(data, config, settings=settings, today=today)
