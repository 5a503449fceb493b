"""Generate JSON Schema and docs for testsupport.yaml."""

from __future__ import annotations

import json
from pathlib import Path

from testsupport.config import CONFIG_FILENAME, SupportConfig

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"

_BOUNDS = {
    "exclusiveMinimum": ">",
    "minimum": ">=",
    "exclusiveMaximum": "<",
    "maximum": "<=",
}


def generate_json_schema() -> dict:
    schema = SupportConfig.model_json_schema()
    return {"$schema": JSON_SCHEMA_DIALECT, "title": CONFIG_FILENAME, **schema}


def write_json_schema(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(generate_json_schema(), indent=2) + "\n")


def _type_name(field_schema: dict) -> str:
    if "anyOf" in field_schema:
        return " | ".join(_type_name(s) for s in field_schema["anyOf"])
    return field_schema.get("type", "any")


def _field_line(name: str, field_schema: dict) -> str:
    line = f"- `{name}` ({_type_name(field_schema)}): default `{json.dumps(field_schema.get('default'))}`"
    bounds = [f"{op} {field_schema[key]}" for key, op in _BOUNDS.items() if key in field_schema]
    if bounds:
        line += f", must be {' and '.join(bounds)}"
    return line


def generate_schema_doc() -> str:
    """Render one section per top-level key of the config file."""
    schema = SupportConfig.model_json_schema()
    defs = schema.get("$defs", {})

    lines = [
        f"# {CONFIG_FILENAME}",
        "",
        "This doc is generated from the Pydantic models.",
        "",
    ]
    scalars = []
    for section, props in schema.get("properties", {}).items():
        ref = props.get("$ref", "")
        if not ref:
            scalars.append(_field_line(section, props))
            continue
        model = defs.get(ref.removeprefix("#/$defs/"), {})
        lines.append(f"## `{section}`")
        lines.extend(_field_line(f, s) for f, s in model.get("properties", {}).items())
        lines.append("")
    if scalars:
        lines.append("## Top-level keys")
        lines.extend(scalars)
        lines.append("")
    return "\n".join(lines)


def write_schema_doc(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(generate_schema_doc())
