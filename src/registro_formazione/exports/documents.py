"""Word documents built with python-docx."""

from io import BytesIO
from typing import Sequence

from docx import Document
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_PARAGRAPH_ALIGNMENT
from docx.shared import Pt

from registro_formazione.fad import total_fad_hours
from registro_formazione.logging import get_logger
from registro_formazione.models import FadCalendarEntry

log = get_logger(__name__)

FAD_TABLE_HEADER = ("Data", "Giorno", "Mese", "Anno", "Ora Inizio", "Ora Fine", "Ore")


def _heading(document, text: str, size: int = 14) -> None:
    paragraph = document.add_paragraph()
    paragraph.alignment = WD_PARAGRAPH_ALIGNMENT.CENTER
    run = paragraph.add_run(text)
    run.bold = True
    run.font.size = Pt(size)


def build_fad_calendar_document(course_title: str, entries: Sequence[FadCalendarEntry]) -> bytes:
    """Calendario FAD: one table row per remote lesson day, plus total hours."""
    document = Document()
    style = document.styles["Normal"]
    style.font.name = "Arial"
    style.font.size = Pt(10)

    _heading(document, "CALENDARIO ATTIVITÀ FAD")
    if course_title:
        _heading(document, course_title, size=12)

    table = document.add_table(rows=1, cols=len(FAD_TABLE_HEADER), style="Table Grid")
    table.alignment = WD_TABLE_ALIGNMENT.CENTER
    for cell, title in zip(table.rows[0].cells, FAD_TABLE_HEADER):
        cell.text = title
        for run in cell.paragraphs[0].runs:
            run.bold = True

    for entry in entries:
        cells = table.add_row().cells
        values = (
            entry.data,
            f"{entry.giorno_settimana} {entry.giorno}".strip(),
            entry.mese,
            entry.anno,
            entry.ora_inizio,
            entry.ora_fine,
            entry.durata,
        )
        for cell, value in zip(cells, values):
            cell.text = value

    total = f"{total_fad_hours(entries):.2f}".rstrip("0").rstrip(".")
    document.add_paragraph(f"Totale ore FAD: {total}")

    buffer = BytesIO()
    document.save(buffer)
    log.info("fad_calendar_built", days=len(entries), hours=total)
    return buffer.getvalue()
