"""
Export a parsed script as JSON for inspection by other tools.

The document is validated against EXPORT_SCHEMA before it is handed out.
It describes structure only; scripts always run from source.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

import jsonschema

from crtz.lang.ast import Action, Node
from crtz.lang.diagnostics import ExportValidationError
from crtz.lang.parser import parse_file
from crtz.lang.program import Program

logger = logging.getLogger(__name__)


_ACTION_SCHEMA = {
    "type": "object",
    "required": ["type"],
    "properties": {
        "type": {"enum": ["set", "signal", "if", "goto", "end", "statement", "show"]},
    },
}

_INT_MAP = {"type": "object", "additionalProperties": {"type": "integer"}}

EXPORT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["npc", "desc", "entry", "variables", "classes", "objects", "nodes"],
    "properties": {
        "npc": {"type": "string"},
        "desc": {"type": "string"},
        "entry": {"type": ["string", "null"]},
        "variables": {
            "type": "object",
            "required": ["ints", "bools", "strings"],
            "properties": {
                "ints": _INT_MAP,
                "bools": {"type": "object", "additionalProperties": {"type": "boolean"}},
                "strings": {"type": "object", "additionalProperties": {"type": "string"}},
            },
        },
        "classes": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["fields", "methods"],
                "properties": {
                    "fields": _INT_MAP,
                    "methods": {
                        "type": "object",
                        "additionalProperties": {
                            "type": "object",
                            "required": ["params", "body"],
                            "properties": {
                                "params": {"type": "array", "items": {"type": "string"}},
                                "body": {"type": "array", "items": _ACTION_SCHEMA},
                            },
                        },
                    },
                },
            },
        },
        "objects": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["class", "fields"],
                "properties": {
                    "class": {"type": "string"},
                    "fields": _INT_MAP,
                },
            },
        },
        "nodes": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "text", "choices", "actions"],
                "properties": {
                    "name": {"type": "string"},
                    "text": {"type": "string"},
                    "line": {"type": "integer"},
                    "choices": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["id", "text", "target"],
                            "properties": {
                                "id": {"type": "integer"},
                                "text": {"type": "string"},
                                "target": {"type": "string"},
                            },
                        },
                    },
                    "actions": {"type": "array", "items": _ACTION_SCHEMA},
                },
            },
        },
        "rooms": {"type": "object"},
        "pictures": {"type": "object"},
    },
}


def action_to_json(action: Action) -> dict[str, Any]:
    data = {"type": action.tag}
    data.update(asdict(action))
    return data


def node_to_json(node: Node) -> dict[str, Any]:
    return {
        "name": node.name,
        "text": node.text,
        "line": node.line,
        "choices": [asdict(choice) for choice in node.choices],
        "actions": [action_to_json(action) for action in node.actions],
    }


def export_program(program: Program) -> dict[str, Any]:
    """
    Build the JSON document for a program.

    Raises:
        ExportValidationError: If the document does not match EXPORT_SCHEMA
    """
    document = {
        "npc": program.npc,
        "desc": program.desc,
        "entry": program.entry,
        "variables": asdict(program.variables),
        "classes": {
            name: {
                "fields": dict(class_def.fields),
                "methods": {
                    method: {
                        "params": list(class_def.method_params.get(method, [])),
                        "body": [action_to_json(action) for action in body],
                    }
                    for method, body in class_def.methods.items()
                },
            }
            for name, class_def in program.classes.items()
        },
        "objects": {
            name: {"class": instance.class_name, "fields": dict(instance.fields)}
            for name, instance in program.objects.items()
        },
        "nodes": [node_to_json(node) for node in program.nodes.values()],
        "rooms": {name: asdict(room) for name, room in program.rooms.items()},
        "pictures": {name: asdict(decl) for name, decl in program.pictures.items()},
    }

    try:
        jsonschema.validate(instance=document, schema=EXPORT_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ExportValidationError(f"Export failed validation: {e.message}") from e

    return document


def compile_script_file(input_path: str | Path, output_path: Optional[str | Path] = None) -> Path:
    """
    Parse a script and write its JSON export.

    Args:
        input_path: Path to .crtz file
        output_path: Path to output .json file (default: same name with .json)

    Returns:
        The path written
    """
    input_path = Path(input_path)
    output_path = input_path.with_suffix('.json') if output_path is None else Path(output_path)

    result = parse_file(input_path)
    document = export_program(result.program)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(document, f, indent=2)

    logger.info(f"Exported {input_path} -> {output_path}")
    return output_path
