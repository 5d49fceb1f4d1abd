"""Generate training-compliance registers from text pasted out of the portal.

Run with:  registro-formazione generate --input corso.txt --output corso.zip
Offline:   registro-formazione generate --data estratto.json --output corso.zip
Templates: registro-formazione generate --data d.json --output c.zip --attestato-template vf.docx
Schema:    registro-formazione schema --template registro_ore
Custom:    registro-formazione schema --template-file my_template.json

Valid template keys: registro_ore, registro_presenze

Exit codes:
  0 = success (ZIP written, or schema JSON on stdout)
  1 = error (message on stderr)
  2 = extracted data is missing required fields
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from registro_formazione.config import get_config
from registro_formazione.errors import RegistroError, ValidationFailedError
from registro_formazione.gemini import GeminiExtractor
from registro_formazione.logging import setup_logging
from registro_formazione.models import TemplateConfig
from registro_formazione.pipeline import generate_package
from registro_formazione.schema import build_extraction_schema, build_system_instruction
from registro_formazione.templates import PREDEFINED_TEMPLATES, get_template, load_template_config

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_DATA = 2


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def _add_template_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--template",
        type=str,
        default="registro_ore",
        help=f"Predefined template key (default: registro_ore). Valid: {', '.join(PREDEFINED_TEMPLATES)}",
    )
    group.add_argument(
        "--template-file",
        type=str,
        default=None,
        help="Path to an exported template JSON file.",
    )


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        prog="registro-formazione",
        description="Turn pasted course data into Registro Ore / Presenze / FAD documents.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    schema_parser = subparsers.add_parser(
        "schema", help="Print the extraction instruction and response schema."
    )
    _add_template_args(schema_parser)

    generate_parser = subparsers.add_parser(
        "generate", help="Extract (or load) course data and write the ZIP package."
    )
    _add_template_args(generate_parser)
    source = generate_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", type=str, help="Text file with the pasted portal data.")
    source.add_argument(
        "--data",
        type=str,
        help="JSON file with already extracted data (skips the Gemini call).",
    )
    generate_parser.add_argument(
        "--context",
        type=str,
        default=None,
        help="JSON file of user-provided values that override extracted ones.",
    )
    generate_parser.add_argument(
        "--output", type=str, required=True, help="Destination ZIP file path."
    )
    generate_parser.add_argument(
        "--registro-id-template",
        type=str,
        default=None,
        help="Registro presenza ID .docx template (overrides REGISTRO_ID_TEMPLATE).",
    )
    generate_parser.add_argument(
        "--verbale-template",
        type=str,
        default=None,
        help="Verbale di ammissione esame .docx template.",
    )
    generate_parser.add_argument(
        "--attestato-template",
        type=str,
        default=None,
        help="Per-participant Verbale Finale .docx template.",
    )
    return parser.parse_args(argv)


def _resolve_template(args: argparse.Namespace) -> TemplateConfig:
    if args.template_file:
        return load_template_config(args.template_file)
    return get_template(args.template)


def _read_json(path: str) -> dict:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def _run_schema(args: argparse.Namespace) -> int:
    template = _resolve_template(args)
    output = {
        "systemInstruction": build_system_instruction(template),
        "responseSchema": build_extraction_schema(template),
    }
    print(json.dumps(output, ensure_ascii=False, indent=2))
    return EXIT_OK


def _word_template_overrides(args: argparse.Namespace) -> dict[str, Path]:
    flags = {
        "registro_id_template": args.registro_id_template,
        "verbale_ammissione_template": args.verbale_template,
        "attestato_template": args.attestato_template,
    }
    return {field: Path(value) for field, value in flags.items() if value}


def _run_generate(args: argparse.Namespace) -> int:
    settings = get_config()
    overrides = _word_template_overrides(args)
    if overrides:
        settings = settings.model_copy(update=overrides)
    template = _resolve_template(args)
    context = _read_json(args.context) if args.context else None

    if args.data:
        data = _read_json(args.data)
        if context:
            data.update(context)
    else:
        text = Path(args.input).read_text(encoding="utf-8")
        extractor = GeminiExtractor.from_config(settings)
        data = extractor.extract(template, text, context)

    try:
        package = generate_package(data, template, settings=settings)
    except ValidationFailedError as e:
        _log("Extracted data is missing required fields:")
        for error in e.report.errors:
            _log(f"  - {error}")
        return EXIT_INVALID_DATA

    for warning in package.report.warnings:
        _log(f"Warning: {warning}")

    if not package.files:
        _log("No documents could be generated from the extracted data.")
        return EXIT_ERROR

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(package.to_zip())
    _log(f"Wrote {output} ({len(package.files)} files, {package.row_count} register rows)")
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()
    args = _parse_args(argv)
    settings = get_config()
    setup_logging(json_output=settings.log_json, log_level=settings.log_level)

    try:
        if args.command == "schema":
            return _run_schema(args)
        return _run_generate(args)
    except (RegistroError, OSError, ValueError) as e:
        _log(f"Error: {e}")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
