"""Fill ``{{KEY}}`` placeholders in Word templates with python-docx.

Markers are replaced in body paragraphs, table cells, headers and footers.
A table row whose markers name a list (``{{PARTECIPANTI.nome_completo}}``)
is repeated once per list item. Markers without a value render empty.
"""

import copy
import re
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Any, Iterator, Mapping

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from docx.table import Table, _Row
from docx.text.paragraph import Paragraph

from registro_formazione.errors import TemplateNotFoundError
from registro_formazione.logging import get_logger

log = get_logger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([^{}]+?)\s*\}\}")


def placeholder_text(value: Any) -> str:
    """Render a value for a marker: lists of scalars comma-joined, objects empty."""
    if value is None or isinstance(value, Mapping):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(placeholder_text(item) for item in value if not isinstance(item, Mapping))
    return str(value)


def load_word_template(path: str | Path) -> bytes:
    """Read a .docx template and check python-docx can open it.

    Raises:
        TemplateNotFoundError: If the file is missing or is not a Word document.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
        Document(BytesIO(raw))
    except FileNotFoundError as e:
        raise TemplateNotFoundError(f"Word template not found: {path}") from e
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError) as e:
        raise TemplateNotFoundError(f"Not a Word document: {path}") from e
    return raw


def _substitute(text: str, values: Mapping[str, Any], missing: set[str]) -> str:
    def replace(match: re.Match) -> str:
        key = match.group(1)
        if key not in values:
            missing.add(key)
            return ""
        return placeholder_text(values[key])

    return PLACEHOLDER_PATTERN.sub(replace, text)


def _fill_paragraph(paragraph: Paragraph, values: Mapping[str, Any], missing: set[str]) -> None:
    runs = paragraph.runs
    if "{{" not in "".join(run.text for run in runs):
        return

    for run in runs:
        if "{{" in run.text:
            run.text = _substitute(run.text, values, missing)

    joined = "".join(run.text for run in runs)
    if PLACEHOLDER_PATTERN.search(joined) is None:
        return
    # Marker split across runs: collapse the paragraph into its first run
    runs[0].text = _substitute(joined, values, missing)
    for run in runs[1:]:
        run.text = ""


def _iter_paragraphs(container) -> Iterator[Paragraph]:
    yield from container.paragraphs
    for table in container.tables:
        for row in table.rows:
            for cell in row.cells:
                yield from _iter_paragraphs(cell)


def _containers(document) -> Iterator[Any]:
    yield document
    for section in document.sections:
        for part in (section.header, section.footer):
            # Linked parts would be created on access
            if not part.is_linked_to_previous:
                yield part


def _row_list_name(row: _Row, values: Mapping[str, Any]) -> str | None:
    text = "\n".join(cell.text for cell in row.cells)
    names = {
        key.split(".", 1)[0]
        for key in PLACEHOLDER_PATTERN.findall(text)
        if "." in key and isinstance(values.get(key.split(".", 1)[0]), list)
    }
    return names.pop() if len(names) == 1 else None


def _expand_rows(table: Table, values: Mapping[str, Any], missing: set[str]) -> None:
    for row in list(table.rows):
        name = _row_list_name(row, values)
        if name is None:
            continue

        template_tr = row._tr
        for number, item in enumerate(values[name], start=1):
            fields = item if isinstance(item, Mapping) else {"value": item}
            item_values = dict(values)
            item_values.update({f"{name}.{key}": value for key, value in fields.items()})
            if not item_values.get(f"{name}.numero"):
                item_values[f"{name}.numero"] = str(number)

            new_tr = copy.deepcopy(template_tr)
            template_tr.addprevious(new_tr)
            for cell in _Row(new_tr, table).cells:
                for paragraph in _iter_paragraphs(cell):
                    _fill_paragraph(paragraph, item_values, missing)
        template_tr.getparent().remove(template_tr)


def find_placeholders(template: bytes) -> list[str]:
    """Marker names in a template, in document order, without duplicates."""
    document = Document(BytesIO(template))
    found: dict[str, None] = {}
    for container in _containers(document):
        for paragraph in _iter_paragraphs(container):
            for key in PLACEHOLDER_PATTERN.findall(paragraph.text):
                found.setdefault(key, None)
    return list(found)


def fill_word_template(template: bytes, values: Mapping[str, Any]) -> bytes:
    """Return a copy of the template with every marker replaced."""
    document = Document(BytesIO(template))
    missing: set[str] = set()

    for container in _containers(document):
        for table in container.tables:
            _expand_rows(table, values, missing)
        for paragraph in _iter_paragraphs(container):
            _fill_paragraph(paragraph, values, missing)

    if missing:
        log.warning("placeholders_without_value", keys=sorted(missing))

    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()
