"""Registro formazione: Italian training-compliance documents from pasted portal text.

Template-driven Gemini extraction, validation, hourly register rows (with the
lunch break skipped), attendance registers and FAD calendars.
"""

from registro_formazione.location import classify_location
from registro_formazione.models import (
    ExclusionWindow,
    ExportRow,
    HourlyBlock,
    SessionRecord,
    TemplateConfig,
    TemplateVariableSpec,
    ValidationReport,
)
from registro_formazione.rows import project_session_rows
from registro_formazione.schema import build_extraction_schema, build_system_instruction
from registro_formazione.timeblocks import LUNCH_BREAK, split_into_hourly_blocks
from registro_formazione.validation import validate_extracted_data

__all__ = [
    "LUNCH_BREAK",
    "ExclusionWindow",
    "ExportRow",
    "HourlyBlock",
    "SessionRecord",
    "TemplateConfig",
    "TemplateVariableSpec",
    "ValidationReport",
    "build_extraction_schema",
    "build_system_instruction",
    "classify_location",
    "project_session_rows",
    "split_into_hourly_blocks",
    "validate_extracted_data",
]
