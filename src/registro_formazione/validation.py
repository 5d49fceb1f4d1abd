"""Check oracle output against the template it was extracted with.

Only a missing required field is blocking. Missing means None, "", zero or
False; an empty list or object is present. Pattern and type mismatches are
reported as warnings, since the oracle is often loose about formatting.
"""

import re
from typing import Any

from registro_formazione.logging import get_logger
from registro_formazione.models import (
    ExtractedData,
    TemplateConfig,
    TemplateVariableSpec,
    ValidationReport,
    VariableType,
)

log = get_logger(__name__)


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_stringify(item) for item in value)
    return str(value)


def _is_missing(value: Any) -> bool:
    # Empty lists and objects count as present
    if isinstance(value, (list, tuple, dict)):
        return False
    return not value


def _runtime_type(value: Any) -> VariableType | None:
    # bool is checked first: it is an int subclass but never a number here
    if isinstance(value, bool):
        return VariableType.BOOLEAN
    if isinstance(value, (int, float)):
        return VariableType.NUMBER
    if isinstance(value, (list, tuple)):
        return VariableType.ARRAY
    return None


def _check_pattern(variable: TemplateVariableSpec, value: Any, report: ValidationReport) -> None:
    try:
        matched = re.search(variable.validation_pattern, _stringify(value))
    except re.error as e:
        report.warnings.append(
            f"{variable.label}: invalid validation pattern {variable.validation_pattern!r} ({e})"
        )
        return
    if not matched:
        report.warnings.append(
            f"{variable.label} does not match the expected format: {_stringify(value)}"
        )


def validate_extracted_data(data: ExtractedData | None, config: TemplateConfig) -> ValidationReport:
    """Validate extracted data against every variable of the template.

    Args:
        data: Oracle payload, field name -> value.
        config: Template the data was extracted with.

    Returns:
        ValidationReport; ``is_valid`` is False only when required fields are missing.
    """
    report = ValidationReport()
    data = data or {}

    for variable in config.variables:
        value = data.get(variable.name)

        if variable.required and _is_missing(value):
            report.errors.append(f"missing required field: {variable.label}")

        if not _is_missing(value) and variable.validation_pattern:
            _check_pattern(variable, value, report)

        if value is None or value == "":
            continue
        expected = variable.type
        if expected in (VariableType.NUMBER, VariableType.BOOLEAN, VariableType.ARRAY):
            if _runtime_type(value) != expected:
                report.warnings.append(
                    f"{variable.label} should be of type {expected.value}: {value!r}"
                )

    log.info(
        "extracted_data_validated",
        template=config.name,
        valid=report.is_valid,
        errors=len(report.errors),
        warnings=len(report.warnings),
    )
    return report
