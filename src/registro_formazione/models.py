"""Pydantic models for sessions, template configuration and export rows.

All data structures use Pydantic v2 for validation, serialization, and type safety.
Template models accept the camelCase keys used by exported template JSON files.
"""

from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from registro_formazione.dates import MINUTES_PER_DAY, parse_time

# Shape of the oracle payload: field name -> scalar, list or nested object
FieldValue = Union[str, int, float, bool, None, list[Any], dict[str, Any]]
ExtractedData = Mapping[str, FieldValue]


class TimeInterval(BaseModel):
    """Start/end time of day as minutes since midnight. No overnight ranges."""

    model_config = ConfigDict(frozen=True)

    start_minutes: int = Field(ge=0, lt=MINUTES_PER_DAY)
    end_minutes: int = Field(ge=0, lt=MINUTES_PER_DAY)

    @model_validator(mode="after")
    def _end_after_start(self) -> "TimeInterval":
        if self.end_minutes <= self.start_minutes:
            raise ValueError("end time must be after start time")
        return self

    @classmethod
    def from_strings(cls, start: str, end: str) -> "TimeInterval":
        """Build from an "HH:MM" pair.

        Raises:
            ValueError: If either time is malformed or end is not after start.
        """
        start_minutes = parse_time(start)
        end_minutes = parse_time(end)
        if start_minutes is None or end_minutes is None:
            raise ValueError(f"invalid time range {start!r}-{end!r}")
        return cls(start_minutes=start_minutes, end_minutes=end_minutes)

    @property
    def length_minutes(self) -> int:
        return self.end_minutes - self.start_minutes


class ExclusionWindow(BaseModel):
    """Recurring break that no emitted block may overlap (e.g. lunch 13:00-14:00)."""

    model_config = ConfigDict(frozen=True)

    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def _valid_clock_time(cls, value: str) -> str:
        if parse_time(value) is None:
            raise ValueError(f"invalid time {value!r}, expected HH:MM")
        return value.strip()

    @model_validator(mode="after")
    def _end_after_start(self) -> "ExclusionWindow":
        if self.end_minutes <= self.start_minutes:
            raise ValueError("exclusion window must end after it starts")
        return self

    @property
    def start_minutes(self) -> int:
        return parse_time(self.start)

    @property
    def end_minutes(self) -> int:
        return parse_time(self.end)

    def overlaps(self, start_minutes: int, end_minutes: int) -> bool:
        """Half-open overlap test against [start_minutes, end_minutes)."""
        return start_minutes < self.end_minutes and end_minutes > self.start_minutes


class HourlyBlock(BaseModel):
    """One billing block produced by splitting a session."""

    model_config = ConfigDict(frozen=True)

    start: str  # "09:00"
    end: str  # "10:00"
    duration: str  # "1", or e.g. "0.5" for a trailing partial hour


class LocationCategory(str, Enum):
    ON_SITE = "on_site"
    REMOTE = "remote"


class LocationClassification(BaseModel):
    """Location category plus the TIPOLOGIA / SVOLGIMENTO export codes."""

    model_config = ConfigDict(frozen=True)

    category: LocationCategory
    tipologia: str
    svolgimento: str


class SessionRecord(BaseModel):
    """A single lesson day as returned by the extraction oracle.

    Missing values default to "" so an incomplete session can still be held
    and then skipped by the row projector.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    data: str = ""  # DD/MM/YYYY
    ora_inizio: str = ""  # HH:MM
    ora_fine: str = ""  # HH:MM
    luogo: str = Field(default="", validation_alias=AliasChoices("luogo", "sede"))
    tipo_sede: str = ""  # "Presenza", "Online", "FAD" when the portal states it

    @field_validator("data", "ora_inizio", "ora_fine", "luogo", "tipo_sede", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def is_complete(self) -> bool:
        return all(
            field.strip()
            for field in (self.data, self.ora_inizio, self.ora_fine, self.luogo)
        )


class ExportRow(BaseModel):
    """One spreadsheet row: a session date, one hourly block and shared context.

    Dump with ``by_alias=True`` to get the column names the register format
    expects.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id_sezione: str = Field(alias="ID_SEZIONE")
    data_lezione: str = Field(alias="DATA_LEZIONE")
    totale_ore: str = Field(alias="TOTALE_ORE")
    ora_inizio: str = Field(alias="ORA_INIZIO")
    ora_fine: str = Field(alias="ORA_FINE")
    tipologia: str = Field(alias="TIPOLOGIA")
    codice_fiscale_docente: str = Field(alias="CODICE_FISCALE_DOCENTE")
    materia: str = Field(alias="MATERIA")
    contenuti_materia: str = Field(alias="CONTENUTI_MATERIA")
    svolgimento_sede_lezione: str = Field(alias="SVOLGIMENTO_SEDE_LEZIONE")


class VariableType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    ARRAY = "array"


class TemplateVariableSpec(BaseModel):
    """One field the oracle should extract."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    label: str
    description: str = ""
    type: VariableType = VariableType.STRING
    required: bool = False
    default_value: Optional[str] = None
    extraction_hint: Optional[str] = None
    validation_pattern: Optional[str] = None
    # Only for arrays: structure of each item, keyed by child name
    array_item_structure: Optional[dict[str, "TemplateVariableSpec"]] = None


TemplateVariableSpec.model_rebuild()


class ExcelColumn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    header: str
    variable_name: str
    width: int = 15
    format: str = "text"


class PostProcessing(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    skip_lunch_break: bool = False
    excel_columns: Optional[list[ExcelColumn]] = None


class TemplateConfig(BaseModel):
    """Named bundle of variables to extract plus free-text prompt additions.

    Variable names are expected to be unique; duplicates are not rejected and
    the last one wins in the generated schema.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = ""
    name: str
    description: str = ""
    template_type: str = "altro"
    format: str = "xlsx"
    variables: list[TemplateVariableSpec] = Field(default_factory=list)
    custom_prompt_instructions: Optional[str] = None
    post_processing: PostProcessing = Field(default_factory=PostProcessing)
    version: str = "1.0"


class ValidationReport(BaseModel):
    """Outcome of checking extracted data against a template.

    Errors block document generation; warnings are advisory.
    """

    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class FadCalendarEntry(BaseModel):
    """One remote (FAD) lesson day, split into the parts the calendar prints."""

    model_config = ConfigDict(frozen=True)

    data: str
    giorno: str
    mese: str
    anno: str
    giorno_settimana: str
    ora_inizio: str
    ora_fine: str
    durata: str


class Participant(BaseModel):
    """A course participant as listed by the oracle."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    nome_completo: str = ""
    nome: str = ""
    cognome: str = ""
    codice_fiscale: str = ""
    numero: str = ""  # position in the official participant list

    @field_validator("nome_completo", "nome", "cognome", "codice_fiscale", "numero", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def display_name(self) -> str:
        name = self.nome_completo or f"{self.nome} {self.cognome}"
        return " ".join(name.split())
