"""Tests for the Excel, Word and ZIP writers."""

import zipfile
from io import BytesIO

from docx import Document
from openpyxl import load_workbook

from registro_formazione.exports import (
    build_attendance_workbook,
    build_fad_calendar_document,
    build_lesson_calendar_workbook,
    build_registro_workbook,
    build_zip,
    safe_filename,
    workbook_to_bytes,
)
from registro_formazione.exports.documents import FAD_TABLE_HEADER
from registro_formazione.fad import build_fad_calendar
from registro_formazione.models import ExcelColumn
from registro_formazione.rows import project_session_rows
from registro_formazione.templates import DEFAULT_EXCEL_COLUMNS
from registro_formazione.timeblocks import LUNCH_BREAK


def _reload(workbook):
    return load_workbook(BytesIO(workbook_to_bytes(workbook)))


class TestRegistroWorkbook:
    def test_header_and_rows(self, registro_ore_data):
        rows = project_session_rows(
            registro_ore_data["SESSIONI"],
            section_id="S-47816",
            instructor_tax_code="RSSMRA80A01H501Z",
            subject_name="Sicurezza sul lavoro",
            exclusion=LUNCH_BREAK,
        )

        sheet = _reload(build_registro_workbook(rows, DEFAULT_EXCEL_COLUMNS))["Registro"]
        values = list(sheet.iter_rows(values_only=True))

        assert values[0] == tuple(c.header for c in DEFAULT_EXCEL_COLUMNS)
        assert len(values) == 1 + 7 + 4 + 3
        assert values[1] == (
            "S-47816",
            "13/01/2025",
            "1",
            "09:00",
            "10:00",
            "1",
            "RSSMRA80A01H501Z",
            "Sicurezza sul lavoro",
            "Sicurezza sul lavoro",
            "1",
        )

    def test_cells_are_text(self, registro_ore_data):
        rows = project_session_rows(
            registro_ore_data["SESSIONI"][:1], "S-1", "RSSMRA80A01H501Z", "Excel", LUNCH_BREAK
        )

        sheet = _reload(build_registro_workbook(rows, DEFAULT_EXCEL_COLUMNS))["Registro"]

        assert sheet["C2"].value == "1"
        assert sheet["C2"].number_format == "@"
        assert sheet["D2"].value == "09:00"

    def test_column_widths_and_unknown_variables(self, registro_ore_data):
        rows = project_session_rows(
            registro_ore_data["SESSIONI"][:1], "S-1", "RSSMRA80A01H501Z", "Excel", LUNCH_BREAK
        )
        columns = [
            ExcelColumn(header="Data", variable_name="DATA_LEZIONE", width=14),
            ExcelColumn(header="Aula", variable_name="AULA", width=8),
        ]

        sheet = _reload(build_registro_workbook(rows, columns))["Registro"]

        assert sheet.column_dimensions["A"].width == 14
        assert sheet["A2"].value == "13/01/2025"
        # empty strings are not stored, so the cell reads back empty
        assert sheet["B2"].value is None


class TestLessonCalendarWorkbook:
    def test_sheet_and_headers(self, registro_ore_data):
        rows = project_session_rows(
            registro_ore_data["SESSIONI"][1:2], "S-1", "RSSMRA80A01H501Z", "Excel", LUNCH_BREAK
        )

        workbook = _reload(build_lesson_calendar_workbook(rows))

        assert workbook.sheetnames == ["Calendario"]
        sheet = workbook["Calendario"]
        assert sheet["G1"].value == "CODICE FISCALE DOCENTE"
        assert sheet["J1"].value == "SEDE SVOLGIMENTO"
        assert sheet["J2"].value == "1"
        assert sheet["J2"].number_format == "@"
        assert sheet.column_dimensions["G"].width == 22
        assert sheet.max_row == 1 + 4


class TestAttendanceWorkbook:
    def test_layout_and_formulas(self):
        workbook = build_attendance_workbook(
            ["Mario Rossi", "Anna Bianchi"], ["13/01/2025", "14/01/2025", "15/01/2025"]
        )

        sheet = _reload(workbook)["RegistroPresenze"]

        assert [c.value for c in sheet[1]] == [
            "Nome Corsista",
            "13/01/2025",
            "14/01/2025",
            "15/01/2025",
            "Totale Ore Corsista",
        ]
        assert sheet["A2"].value == "Mario Rossi"
        assert sheet["E2"].value == "=SUM(B2:D2)"
        assert sheet["E3"].value == "=SUM(B3:D3)"
        assert sheet["A4"].value == "Totali Giorno"
        assert sheet["B4"].value == "=SUM(B2:B3)"
        assert sheet["A5"].value == "Ore Cumulative"
        assert sheet["B5"].value == "=B4"
        assert sheet["C5"].value == "=C4+B5"
        assert sheet["D5"].value == "=D4+C5"

    def test_no_participants(self):
        sheet = build_attendance_workbook([], ["13/01/2025"])["RegistroPresenze"]

        assert sheet["A2"].value == "Totali Giorno"
        assert sheet["B2"].value == 0
        assert sheet["B3"].value == "=B2"


class TestFadCalendarDocument:
    def test_table_and_total(self, registro_ore_data):
        sessions = registro_ore_data["SESSIONI"] + [
            {"data": "16/01/2025", "ora_inizio": "14:00", "ora_fine": "15:30", "luogo": "Online"}
        ]
        entries = build_fad_calendar(sessions)

        document = Document(BytesIO(build_fad_calendar_document("Sicurezza sul lavoro", entries)))

        table = document.tables[0]
        assert tuple(cell.text for cell in table.rows[0].cells) == FAD_TABLE_HEADER
        assert len(table.rows) == 3
        assert [cell.text for cell in table.rows[1].cells] == [
            "15/01/2025",
            "Mercoledì 15",
            "Gennaio",
            "2025",
            "09:00",
            "12:00",
            "3",
        ]
        texts = [p.text for p in document.paragraphs]
        assert "CALENDARIO ATTIVITÀ FAD" in texts
        assert "Sicurezza sul lavoro" in texts
        assert "Totale ore FAD: 4.5" in texts


class TestArchive:
    def test_zip_contains_every_file(self):
        content = build_zip({"a.xlsx": b"xlsx-bytes", "b.docx": b"docx-bytes"})

        with zipfile.ZipFile(BytesIO(content)) as archive:
            assert archive.namelist() == ["a.xlsx", "b.docx"]
            assert archive.read("b.docx") == b"docx-bytes"

    def test_safe_filename(self):
        assert safe_filename("S-47816") == "S_47816"
        assert safe_filename("Sicurezza sul lavoro: parte 2") == "Sicurezza_sul_lavoro_parte_2"
        assert safe_filename("àèì") == "NA"
        assert safe_filename(None, fallback="Corso") == "Corso"
        assert len(safe_filename("x" * 100)) == 30
