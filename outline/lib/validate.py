"""
Schema validation for outline documents.

Config files, item documents and CLI operation scripts are checked against
the JSON Schemas in outline/schemas before the engine sees them. A failing
document raises ValidationError naming the schema, the most relevant
violation and where in the document it sits.
"""

import json
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"


class ValidationError(Exception):
    """Document rejected by its schema, or unreadable."""

    def __init__(self, schema_name: str, message: str, path: Optional[str] = None):
        self.schema_name = schema_name
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


# schema name -> compiled validator
_validators: dict[str, Draft7Validator] = {}


def validator_for(schema_name: str) -> Draft7Validator:
    """Compiled validator for outline/schemas/<schema_name>.schema.json."""
    if schema_name not in _validators:
        schema_path = SCHEMAS_DIR / f"{schema_name}.schema.json"
        if not schema_path.exists():
            raise ValidationError(schema_name, f"Schema file not found: {schema_path}")
        schema = json.loads(schema_path.read_text())
        Draft7Validator.check_schema(schema)
        _validators[schema_name] = Draft7Validator(schema)
    return _validators[schema_name]


def _location(error) -> str:
    if not error.absolute_path:
        return "(root)"
    return ".".join(str(p) for p in error.absolute_path)


def validate(data: Any, schema_name: str) -> None:
    """Check data against the named schema ("config", "items" or "ops").

    When several parts of the document are wrong, the deepest, most specific
    violation is reported.

    Raises:
        ValidationError: If validation fails
    """
    error = best_match(validator_for(schema_name).iter_errors(data))
    if error is not None:
        raise ValidationError(schema_name, error.message, _location(error))


def validate_file(filepath: Path, schema_name: str) -> Any:
    """Read a JSON file and validate it. Returns the parsed document."""
    if not filepath.exists():
        raise ValidationError(schema_name, f"File not found: {filepath}")

    try:
        data = json.loads(filepath.read_text())
    except json.JSONDecodeError as e:
        raise ValidationError(schema_name, f"Invalid JSON in {filepath}: {e}") from None

    validate(data, schema_name)
    return data
