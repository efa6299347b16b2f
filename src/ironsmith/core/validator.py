"""JSON Schema validation for engine options and file records.

This module loads the formal JSON Schemas shipped in ``schemas/`` and
validates caller-supplied data against them.
"""

import json
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import Draft7Validator, ValidationError

# ironsmith/core/validator.py -> ironsmith/schemas/
SCHEMA_DIR = Path(__file__).parent.parent / "schemas"


@lru_cache(maxsize=None)
def load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from disk.

    Args:
        name: Schema name without suffix (e.g. ``'options'``)

    Returns:
        Dictionary containing the JSON Schema.

    Raises:
        FileNotFoundError: If schema file doesn't exist
        json.JSONDecodeError: If schema is invalid JSON
    """
    schema_path = SCHEMA_DIR / f"{name}.schema.json"

    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    with schema_path.open("r", encoding="utf-8") as f:
        return json.load(f)  # type: ignore[no-any-return]


def validate_options_with_error_details(options: Mapping[str, Any]) -> dict[str, str]:
    """Validate engine options and collect the problems per option.

    Unknown options are reported under their own name, so callers can drop
    exactly the offending keys and keep the rest.

    Args:
        options: Mapping of option name to value

    Returns:
        Dictionary of option name -> error message. Empty if valid.
    """
    validator = Draft7Validator(load_schema("options"))
    problems: dict[str, str] = {}

    for error in validator.iter_errors(dict(options)):
        if error.path:
            key = str(error.path[0])
            problems.setdefault(key, f"{error.message}")
        elif error.validator == "additionalProperties":
            # Root-level error; name each unexpected key individually
            known = set(validator.schema.get("properties", {}))
            for key in options:
                if key not in known:
                    problems.setdefault(key, "Unknown option")
        else:
            problems.setdefault("<root>", error.message)

    return problems


def validate_record(record: Mapping[str, Any]) -> None:
    """Validate an exported file record.

    Args:
        record: The record dictionary to validate

    Raises:
        ValidationError: If the record doesn't conform to the schema or its
            contents are not raw bytes
    """
    jsonschema.validate(instance=dict(record), schema=load_schema("file_record"))

    if not isinstance(record["contents"], (bytes, bytearray)):
        raise ValidationError(
            f"Record contents must be bytes, got {type(record['contents']).__name__}"
        )
