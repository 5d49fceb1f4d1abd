"""Tests for the extraction instruction and response schema."""

from registro_formazione.models import TemplateConfig, TemplateVariableSpec, VariableType
from registro_formazione.schema import (
    GENERAL_RULES,
    OPTIONAL_TAG,
    REQUIRED_TAG,
    build_extraction_schema,
    build_system_instruction,
    build_user_prompt,
)
from registro_formazione.templates import REGISTRO_ORE


def _template(*variables, **kwargs) -> TemplateConfig:
    return TemplateConfig(name="Prova", description="Template di prova", variables=list(variables), **kwargs)


class TestSystemInstruction:
    def test_lists_every_variable_with_its_tag(self):
        config = _template(
            TemplateVariableSpec(
                name="ID_SEZIONE",
                label="ID Sezione",
                description="Identificativo sezione",
                required=True,
                extraction_hint="Cerca 'Sezione:'",
            ),
            TemplateVariableSpec(name="NOTE", label="Note", description="Note libere"),
        )

        instruction = build_system_instruction(config)

        assert f"- ID_SEZIONE: Identificativo sezione (Cerca 'Sezione:') {REQUIRED_TAG}" in instruction
        assert f"- NOTE: Note libere {OPTIONAL_TAG}" in instruction
        assert "Template: Prova" in instruction
        assert instruction.rstrip().endswith(GENERAL_RULES.splitlines()[-1])

    def test_custom_instructions_come_before_general_rules(self):
        config = _template(custom_prompt_instructions="Ignora i dati del tutor.")

        instruction = build_system_instruction(config)

        assert instruction.index("Ignora i dati del tutor.") < instruction.index("REGOLE GENERALI")

    def test_is_deterministic(self):
        assert build_system_instruction(REGISTRO_ORE) == build_system_instruction(REGISTRO_ORE)


class TestExtractionSchema:
    def test_scalar_types(self):
        config = _template(
            TemplateVariableSpec(name="A", label="A", type=VariableType.STRING),
            TemplateVariableSpec(name="B", label="B", type=VariableType.NUMBER),
            TemplateVariableSpec(name="C", label="C", type=VariableType.BOOLEAN),
            TemplateVariableSpec(name="D", label="D", type=VariableType.DATE),
        )

        schema = build_extraction_schema(config)

        assert schema["type"] == "OBJECT"
        assert schema["properties"] == {
            "A": {"type": "STRING"},
            "B": {"type": "NUMBER"},
            "C": {"type": "BOOLEAN"},
            "D": {"type": "STRING"},
        }

    def test_required_lists_only_required_names_in_order(self):
        config = _template(
            TemplateVariableSpec(name="B", label="B", required=True),
            TemplateVariableSpec(name="A", label="A"),
            TemplateVariableSpec(name="C", label="C", required=True),
        )

        assert build_extraction_schema(config)["required"] == ["B", "C"]

    def test_array_without_structure_holds_strings(self):
        config = _template(TemplateVariableSpec(name="TAGS", label="Tag", type=VariableType.ARRAY))

        assert build_extraction_schema(config)["properties"]["TAGS"] == {
            "type": "ARRAY",
            "items": {"type": "STRING"},
        }

    def test_session_array_becomes_object_items(self):
        sessions = build_extraction_schema(REGISTRO_ORE)["properties"]["SESSIONI"]

        assert sessions["type"] == "ARRAY"
        assert sessions["items"]["type"] == "OBJECT"
        assert set(sessions["items"]["properties"]) == {"data", "ora_inizio", "ora_fine", "luogo"}
        assert sessions["items"]["properties"]["data"] == {"type": "STRING"}

    def test_nested_arrays_recurse(self):
        inner = TemplateVariableSpec(
            name="moduli",
            label="Moduli",
            type=VariableType.ARRAY,
            array_item_structure={
                "ore": TemplateVariableSpec(name="ore", label="Ore", type=VariableType.NUMBER)
            },
        )
        config = _template(
            TemplateVariableSpec(
                name="CORSI",
                label="Corsi",
                type=VariableType.ARRAY,
                array_item_structure={"moduli": inner},
            )
        )

        corsi = build_extraction_schema(config)["properties"]["CORSI"]

        assert corsi["items"]["properties"]["moduli"] == {
            "type": "ARRAY",
            "items": {"type": "OBJECT", "properties": {"ore": {"type": "NUMBER"}}},
        }

    def test_duplicate_names_keep_the_last(self):
        config = _template(
            TemplateVariableSpec(name="X", label="X", type=VariableType.STRING),
            TemplateVariableSpec(name="X", label="X", type=VariableType.NUMBER),
        )

        assert build_extraction_schema(config)["properties"] == {"X": {"type": "NUMBER"}}

    def test_is_deterministic(self):
        assert build_extraction_schema(REGISTRO_ORE) == build_extraction_schema(REGISTRO_ORE)


class TestUserPrompt:
    def test_text_only(self):
        prompt = build_user_prompt("Corso: Excel")

        assert prompt.endswith("Corso: Excel")
        assert "VALORI GIÀ FORNITI" not in prompt

    def test_context_values_are_listed(self):
        prompt = build_user_prompt("Corso: Excel", {"ID_SEZIONE": "S-9"})

        assert "VALORI GIÀ FORNITI" in prompt
        assert "ID_SEZIONE: S-9" in prompt
