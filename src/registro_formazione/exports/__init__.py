"""Writers for the generated registers, calendars and the ZIP bundle."""

from registro_formazione.exports.archive import build_zip, safe_filename
from registro_formazione.exports.documents import build_fad_calendar_document
from registro_formazione.exports.excel import (
    build_attendance_workbook,
    build_lesson_calendar_workbook,
    build_registro_workbook,
    workbook_to_bytes,
)
from registro_formazione.exports.word import (
    fill_word_template,
    find_placeholders,
    load_word_template,
)

__all__ = [
    "build_zip",
    "safe_filename",
    "build_fad_calendar_document",
    "build_attendance_workbook",
    "build_lesson_calendar_workbook",
    "build_registro_workbook",
    "workbook_to_bytes",
    "fill_word_template",
    "find_placeholders",
    "load_word_template",
]
