"""Excel registers built with openpyxl.

The Registro Ore sheet is plain text only: every cell is a string with the
"@" number format, so Excel never turns "09:00" or "1" into a time or number.
"""

from io import BytesIO
from typing import Sequence

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from registro_formazione.logging import get_logger
from registro_formazione.models import ExcelColumn, ExportRow

log = get_logger(__name__)

TEXT_FORMAT = "@"
REGISTRO_SHEET = "Registro"
CALENDAR_SHEET = "Calendario"
ATTENDANCE_SHEET = "RegistroPresenze"

# Registro Ore columns, relabelled for the per-section lesson calendar
LESSON_CALENDAR_COLUMNS: list[ExcelColumn] = [
    ExcelColumn(header="ID_SEZIONE", variable_name="ID_SEZIONE", width=15),
    ExcelColumn(header="DATA LEZIONE", variable_name="DATA_LEZIONE", width=12),
    ExcelColumn(header="TOTALE_ORE", variable_name="TOTALE_ORE", width=10),
    ExcelColumn(header="ORA_INIZIO", variable_name="ORA_INIZIO", width=10),
    ExcelColumn(header="ORA_FINE", variable_name="ORA_FINE", width=10),
    ExcelColumn(header="TIPOLOGIA", variable_name="TIPOLOGIA", width=10),
    ExcelColumn(
        header="CODICE FISCALE DOCENTE", variable_name="CODICE_FISCALE_DOCENTE", width=22
    ),
    ExcelColumn(header="MATERIA", variable_name="MATERIA", width=30),
    ExcelColumn(header="CONTENUTI MATERIA", variable_name="CONTENUTI_MATERIA", width=30),
    ExcelColumn(header="SEDE SVOLGIMENTO", variable_name="SVOLGIMENTO_SEDE_LEZIONE", width=18),
]


def build_registro_workbook(
    rows: Sequence[ExportRow],
    columns: Sequence[ExcelColumn],
    title: str = REGISTRO_SHEET,
) -> Workbook:
    """Write export rows under the given column definitions.

    Each column reads ``variable_name`` from the row dumped by alias; an
    unknown variable name yields empty cells.
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = title

    sheet.append([column.header for column in columns])
    for row in rows:
        record = row.model_dump(by_alias=True)
        sheet.append([str(record.get(column.variable_name, "")) for column in columns])

    for sheet_row in sheet.iter_rows():
        for cell in sheet_row:
            cell.number_format = TEXT_FORMAT

    for index, column in enumerate(columns, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = column.width

    log.info("registro_workbook_built", sheet=title, rows=len(rows), columns=len(columns))
    return workbook


def build_lesson_calendar_workbook(rows: Sequence[ExportRow]) -> Workbook:
    """Calendario Lezioni: the hourly rows in date order, text-only like the register."""
    return build_registro_workbook(rows, LESSON_CALENDAR_COLUMNS, title=CALENDAR_SHEET)


def build_attendance_workbook(participants: Sequence[str], session_dates: Sequence[str]) -> Workbook:
    """Attendance register: one row per participant, one column per lesson day.

    Hour cells are left empty for manual filling. Formulas total each
    participant, each day ("Totali Giorno") and the running total
    ("Ore Cumulative").
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = ATTENDANCE_SHEET

    n_dates = len(session_dates)
    first_col = 2
    last_col = first_col + n_dates - 1
    total_col = last_col + 1
    first_row = 2
    last_row = first_row + len(participants) - 1

    sheet.append(["Nome Corsista", *session_dates, "Totale Ore Corsista"])

    for offset, name in enumerate(participants):
        row = first_row + offset
        sheet.cell(row=row, column=1, value=name)
        if n_dates:
            first = f"{get_column_letter(first_col)}{row}"
            last = f"{get_column_letter(last_col)}{row}"
            sheet.cell(row=row, column=total_col, value=f"=SUM({first}:{last})")

    day_total_row = last_row + 1
    cumulative_row = day_total_row + 1
    sheet.cell(row=day_total_row, column=1, value="Totali Giorno")
    sheet.cell(row=cumulative_row, column=1, value="Ore Cumulative")

    for col in range(first_col, last_col + 1):
        letter = get_column_letter(col)
        if participants:
            sheet.cell(
                row=day_total_row,
                column=col,
                value=f"=SUM({letter}{first_row}:{letter}{last_row})",
            )
        else:
            sheet.cell(row=day_total_row, column=col, value=0)

        if col == first_col:
            formula = f"={letter}{day_total_row}"
        else:
            previous = get_column_letter(col - 1)
            formula = f"={letter}{day_total_row}+{previous}{cumulative_row}"
        sheet.cell(row=cumulative_row, column=col, value=formula)

    sheet.column_dimensions["A"].width = 30
    for col in range(first_col, last_col + 1):
        sheet.column_dimensions[get_column_letter(col)].width = 12
    sheet.column_dimensions[get_column_letter(total_col)].width = 15

    log.info("attendance_workbook_built", participants=len(participants), days=n_dates)
    return workbook


def workbook_to_bytes(workbook: Workbook) -> bytes:
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
