"""Predefined extraction templates and loading of exported template JSON."""

import json
from pathlib import Path

from pydantic import ValidationError

from registro_formazione.errors import TemplateNotFoundError
from registro_formazione.logging import get_logger
from registro_formazione.models import (
    ExcelColumn,
    PostProcessing,
    TemplateConfig,
    TemplateVariableSpec,
    VariableType,
)

log = get_logger(__name__)

CODICE_FISCALE_PATTERN = r"^[A-Z]{6}[0-9]{2}[A-Z][0-9]{2}[A-Z][0-9]{3}[A-Z]$"

# Column order of the regional Registro Ore upload format
DEFAULT_EXCEL_COLUMNS: list[ExcelColumn] = [
    ExcelColumn(header="ID_SEZIONE", variable_name="ID_SEZIONE", width=15),
    ExcelColumn(header="DATA LEZIONE", variable_name="DATA_LEZIONE", width=12),
    ExcelColumn(header="TOTALE_ORE", variable_name="TOTALE_ORE", width=10),
    ExcelColumn(header="ORA_INIZIO", variable_name="ORA_INIZIO", width=10),
    ExcelColumn(header="ORA_FINE", variable_name="ORA_FINE", width=10),
    ExcelColumn(header="TIPOLOGIA", variable_name="TIPOLOGIA", width=10),
    ExcelColumn(
        header="CODICE FISCALE DOCENTE", variable_name="CODICE_FISCALE_DOCENTE", width=20
    ),
    ExcelColumn(header="MATERIA", variable_name="MATERIA", width=30),
    ExcelColumn(header="CONTENUTI MATERIA", variable_name="CONTENUTI_MATERIA", width=30),
    ExcelColumn(
        header="SVOLGIMENTO SEDE LEZIONE", variable_name="SVOLGIMENTO_SEDE_LEZIONE", width=25
    ),
]

_SESSION_ITEM = {
    "data": TemplateVariableSpec(
        name="data",
        label="Data",
        description="Data della sessione",
        type=VariableType.DATE,
        required=True,
    ),
    "ora_inizio": TemplateVariableSpec(
        name="ora_inizio",
        label="Ora Inizio",
        description="Ora di inizio (HH:MM)",
        required=True,
    ),
    "ora_fine": TemplateVariableSpec(
        name="ora_fine",
        label="Ora Fine",
        description="Ora di fine (HH:MM)",
        required=True,
    ),
    "luogo": TemplateVariableSpec(
        name="luogo",
        label="Luogo",
        description="Sede o luogo della lezione",
        required=True,
    ),
}

_SESSIONS = TemplateVariableSpec(
    name="SESSIONI",
    label="Sessioni",
    description="Array di sessioni con data, orari e luogo",
    type=VariableType.ARRAY,
    required=True,
    extraction_hint=(
        "Estrai TUTTE le sessioni con: data (DD/MM/YYYY), ora_inizio (HH:MM), "
        "ora_fine (HH:MM), luogo/sede"
    ),
    array_item_structure=_SESSION_ITEM,
)

_SUBJECT = TemplateVariableSpec(
    name="MATERIA",
    label="Materia",
    description="Nome della materia/corso",
    required=True,
    extraction_hint="Titolo o nome del corso/materia",
)

REGISTRO_ORE = TemplateConfig(
    id="registro-ore",
    name="Registro Ore Lezione",
    description="Registro con dettaglio orario delle lezioni (con pausa pranzo)",
    template_type="registro_didattico",
    format="xlsx",
    variables=[
        TemplateVariableSpec(
            name="ID_SEZIONE",
            label="ID Sezione",
            description="Identificativo della sezione del corso",
            required=True,
            extraction_hint='Cerca "ID Sezione", "Sezione:", "ID:" nei dati dei moduli',
        ),
        TemplateVariableSpec(
            name="CODICE_FISCALE_DOCENTE",
            label="Codice Fiscale Docente",
            description="Codice fiscale del docente/trainer",
            required=True,
            validation_pattern=CODICE_FISCALE_PATTERN,
            extraction_hint="Codice fiscale del trainer/docente che tiene il corso",
        ),
        _SUBJECT,
        _SESSIONS,
    ],
    post_processing=PostProcessing(
        skip_lunch_break=True,
        excel_columns=DEFAULT_EXCEL_COLUMNS,
    ),
)

REGISTRO_PRESENZE = TemplateConfig(
    id="registro-presenze",
    name="Registro Presenze",
    description="Registro presenze dei corsisti per giornata di lezione",
    template_type="registro_didattico",
    format="xlsx",
    variables=[
        _SUBJECT,
        _SESSIONS,
        TemplateVariableSpec(
            name="PARTECIPANTI",
            label="Partecipanti",
            description="Elenco dei corsisti iscritti",
            type=VariableType.ARRAY,
            required=True,
            extraction_hint="Estrai TUTTI i partecipanti dall'elenco",
            array_item_structure={
                "nome_completo": TemplateVariableSpec(
                    name="nome_completo",
                    label="Nome Completo",
                    description="Nome e cognome del corsista",
                    required=True,
                ),
                "codice_fiscale": TemplateVariableSpec(
                    name="codice_fiscale",
                    label="Codice Fiscale",
                    description="Codice fiscale del corsista",
                    validation_pattern=CODICE_FISCALE_PATTERN,
                ),
            },
        ),
    ],
    custom_prompt_instructions=(
        "Ordina i partecipanti come compaiono nell'elenco. "
        "Non confondere i partecipanti con il docente."
    ),
    post_processing=PostProcessing(skip_lunch_break=True),
)

PREDEFINED_TEMPLATES: dict[str, TemplateConfig] = {
    "registro_ore": REGISTRO_ORE,
    "registro_presenze": REGISTRO_PRESENZE,
}


def get_template(key: str) -> TemplateConfig:
    """Look up a predefined template by key.

    Raises:
        TemplateNotFoundError: If the key is not recognized.
    """
    template = PREDEFINED_TEMPLATES.get(key)
    if template is None:
        raise TemplateNotFoundError(
            f"Unknown template {key!r}. Valid: {list(PREDEFINED_TEMPLATES.keys())}"
        )
    return template


def load_template_config(path: str | Path) -> TemplateConfig:
    """Load a template from an exported JSON file (camelCase keys accepted).

    Raises:
        TemplateNotFoundError: If the file is missing or does not describe a template.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        config = TemplateConfig.model_validate(raw)
    except FileNotFoundError as e:
        raise TemplateNotFoundError(f"Template file not found: {path}") from e
    except (json.JSONDecodeError, ValidationError) as e:
        raise TemplateNotFoundError(f"Invalid template file {path}: {e}") from e

    log.info("template_loaded", path=str(path), template=config.name, variables=len(config.variables))
    return config
