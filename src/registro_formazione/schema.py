"""Build the extraction prompt and response schema from a template.

Both outputs go to the Gemini API unchanged: the instruction as
``systemInstruction`` and the schema as ``generationConfig.responseSchema``.
Nothing here parses them back.
"""

from typing import Any, Mapping

from registro_formazione.models import TemplateConfig, TemplateVariableSpec, VariableType

# Gemini Schema.type values
STRING = "STRING"
NUMBER = "NUMBER"
BOOLEAN = "BOOLEAN"
ARRAY = "ARRAY"
OBJECT = "OBJECT"

REQUIRED_TAG = "[OBBLIGATORIO]"
OPTIONAL_TAG = "[OPZIONALE]"

GENERAL_RULES = """REGOLE GENERALI:
- Se un dato non è presente, usa "" (stringa vuota)
- Per le date usa formato DD/MM/YYYY
- Per gli orari usa formato HH:MM (24 ore)
- Estrai TUTTI i dati richiesti con massima precisione
- Per i campi OBBLIGATORI, cerca con attenzione in tutto il testo fornito"""


def _describe_variable(variable: TemplateVariableSpec) -> str:
    hint = f" ({variable.extraction_hint})" if variable.extraction_hint else ""
    tag = REQUIRED_TAG if variable.required else OPTIONAL_TAG
    return f"- {variable.name}: {variable.description}{hint} {tag}"


def build_system_instruction(config: TemplateConfig) -> str:
    """Render the natural-language extraction instruction for a template."""
    variables = "\n".join(_describe_variable(v) for v in config.variables)
    sections = [
        "Sei un esperto di estrazione dati da gestionali formativi italiani.",
        f"Template: {config.name}\nDescrizione: {config.description}",
        f"ESTRAI LE SEGUENTI VARIABILI:\n{variables}",
    ]
    if config.custom_prompt_instructions:
        sections.append(config.custom_prompt_instructions.strip())
    sections.append(GENERAL_RULES)
    return "\n\n".join(sections) + "\n"


def variable_to_schema(variable: TemplateVariableSpec) -> dict[str, Any]:
    """Map one variable to its schema node, recursing into array items."""
    if variable.type == VariableType.NUMBER:
        return {"type": NUMBER}
    if variable.type == VariableType.BOOLEAN:
        return {"type": BOOLEAN}
    if variable.type == VariableType.ARRAY:
        if variable.array_item_structure:
            return {
                "type": ARRAY,
                "items": {
                    "type": OBJECT,
                    "properties": _properties(variable.array_item_structure.values()),
                },
            }
        return {"type": ARRAY, "items": {"type": STRING}}
    # string and date (dates travel as DD/MM/YYYY strings)
    return {"type": STRING}


def _properties(variables) -> dict[str, Any]:
    # Keyed by the child's own name; a duplicate name overwrites the earlier entry
    return {v.name: variable_to_schema(v) for v in variables}


def build_extraction_schema(config: TemplateConfig) -> dict[str, Any]:
    """Build the response schema constraining the oracle's JSON output."""
    return {
        "type": OBJECT,
        "properties": _properties(config.variables),
        "required": [v.name for v in config.variables if v.required],
    }


def build_user_prompt(text: str, additional_context: Mapping[str, Any] | None = None) -> str:
    """User message: the pasted text plus any values the user already typed in."""
    prompt = f"Estrai i dati da questo testo:\n\n{text}"
    if additional_context:
        provided = "\n".join(f"{key}: {value}" for key, value in additional_context.items())
        prompt += (
            "\n\nVALORI GIÀ FORNITI DALL'UTENTE (usa questi se non trovi nel testo):\n"
            f"{provided}\n"
        )
    return prompt
