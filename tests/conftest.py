"""Shared fixtures for the registro_formazione test suite."""

import pytest
from docx import Document

from registro_formazione.config import RegistroConfig


@pytest.fixture
def settings() -> RegistroConfig:
    return RegistroConfig(
        _env_file=None,
        gemini_api_key="test-key",
        lunch_break_start="13:00",
        lunch_break_end="14:00",
    )


@pytest.fixture
def registro_ore_data() -> dict:
    """Oracle output for the Registro Ore template: two office days and one online day."""
    return {
        "ID_SEZIONE": "S-47816",
        "CODICE_FISCALE_DOCENTE": "RSSMRA80A01H501Z",
        "MATERIA": "Sicurezza sul lavoro",
        "SESSIONI": [
            {
                "data": "13/01/2025",
                "ora_inizio": "09:00",
                "ora_fine": "17:00",
                "luogo": "Milano Porta Venezia - Ufficio",
            },
            {
                "data": "14/01/2025",
                "ora_inizio": "14:00",
                "ora_fine": "18:00",
                "luogo": "In presenza, aula 2",
            },
            {
                "data": "15/01/2025",
                "ora_inizio": "09:00",
                "ora_fine": "12:00",
                "luogo": "Online (Zoom)",
            },
        ],
    }


@pytest.fixture
def make_docx(tmp_path):
    """Write a small Word template: one paragraph per line, optional table rows."""
    def _make(name, paragraphs, table_rows=None):
        document = Document()
        for text in paragraphs:
            document.add_paragraph(text)
        if table_rows:
            table = document.add_table(rows=0, cols=len(table_rows[0]))
            for cells in table_rows:
                row = table.add_row()
                for cell, text in zip(row.cells, cells):
                    cell.text = text
        path = tmp_path / name
        document.save(str(path))
        return path

    return _make
