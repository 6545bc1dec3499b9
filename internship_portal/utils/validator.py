"""
Schema Validation

Checks the settings file and the JSONL seed collections against the JSON
schemas bundled in ``internship_portal/schemas`` before pydantic builds
models from them. Every failure is reported as a ConfigurationError whose
message lists each offending field with a hint on how to fix it.

Example Usage:
    from internship_portal.utils.validator import ConfigValidator

    validator = ConfigValidator()
    settings = validator.validate_file(Path("config/portal.json"), "portal_settings_schema.json")
    validator.validate_records("phases", raw_phases)
"""

import json
from pathlib import Path
from typing import Any, Iterable, Optional

import structlog
from jsonschema import Draft7Validator, FormatChecker
from jsonschema.exceptions import ValidationError

from internship_portal.utils.errors import ConfigurationError

logger = structlog.get_logger(__name__)

SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"

# jsonschema keyword -> (headline, optional hint built from validator_value)
ERROR_TEMPLATES: dict[str, tuple[str, Optional[str]]] = {
    "type": ("Type mismatch at '{path}': {message}", "Expected type: {expected}"),
    "minLength": ("Value too short at '{path}': {message}", None),
    "minimum": ("Value too small at '{path}': {message}", None),
    "maximum": ("Value too large at '{path}': {message}", None),
    "format": ("Invalid format at '{path}': {message}", "Expected format: {expected}"),
    "enum": ("Invalid value at '{path}': {message}", "Allowed values: {expected}"),
    "additionalProperties": ("Unknown field at '{path}': {message}", "Remove it or check the spelling"),
}


def _read_json(path: Path, what: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.error("invalid_json", what=what, path=str(path), error=str(e))
        raise ConfigurationError(f"Invalid JSON in {what} {path.name}: {e}") from e


def describe_error(error: ValidationError) -> str:
    """One bullet (plus optional hint line) for a single schema violation."""
    path = " -> ".join(str(part) for part in error.absolute_path) or "(root)"

    if error.validator == "required":
        field = error.message.split("'")[1]
        return f"  * Missing required field: '{field}' at {path}"

    headline, hint = ERROR_TEMPLATES.get(
        str(error.validator), ("Validation error at '{path}': {message}", None)
    )
    line = "  * " + headline.format(path=path, message=error.message)
    if hint:
        line += "\n    -> " + hint.format(expected=error.validator_value)
    return line


class ConfigValidator:
    """Validates documents against the bundled JSON schemas."""

    def __init__(self, schema_dir: Optional[Path] = None):
        """
        Args:
            schema_dir: Directory containing ``*_schema.json`` files
                        (defaults to the schemas shipped with the package)
        """
        self.schema_dir = schema_dir or SCHEMA_DIR
        self._schemas: dict[str, dict[str, Any]] = {}
        self._validators: dict[str, Draft7Validator] = {}

    def has_schema(self, schema_name: str) -> bool:
        return (self.schema_dir / schema_name).exists()

    def load_schema(self, schema_name: str) -> dict[str, Any]:
        """
        Read a schema once and keep it for later calls.

        Raises:
            ConfigurationError: If the schema file is missing or not valid JSON
        """
        cached = self._schemas.get(schema_name)
        if cached is not None:
            return cached

        schema_path = self.schema_dir / schema_name
        if not schema_path.exists():
            logger.error("schema_not_found", schema_path=str(schema_path))
            raise ConfigurationError(f"Schema file not found: {schema_path}")

        schema = _read_json(schema_path, "schema")
        self._schemas[schema_name] = schema
        logger.debug("schema_loaded", schema_name=schema_name)
        return schema

    def _validator_for(self, schema_name: str) -> Draft7Validator:
        if schema_name not in self._validators:
            self._validators[schema_name] = Draft7Validator(
                self.load_schema(schema_name), format_checker=FormatChecker()
            )
        return self._validators[schema_name]

    def validate(self, document: dict[str, Any], schema_name: str) -> None:
        """
        Check one document.

        Raises:
            ConfigurationError: Listing every violation found
        """
        errors = sorted(
            self._validator_for(schema_name).iter_errors(document),
            key=lambda error: [str(part) for part in error.absolute_path],
        )
        if not errors:
            return

        logger.warning("validation_failed", schema_name=schema_name, error_count=len(errors))
        lines = [f"\n[X] {schema_name} rejected the document:"]
        lines.extend(describe_error(error) for error in errors)
        lines.append("[!] Fix the fields above and try again.")
        raise ConfigurationError("\n".join(lines))

    def validate_file(self, config_path: Path, schema_name: str) -> dict[str, Any]:
        """
        Read a JSON settings file and check it.

        Returns:
            The parsed document

        Raises:
            ConfigurationError: If the file is missing, is not valid JSON or
                breaks the schema
        """
        if not config_path.exists():
            logger.error("config_file_not_found", config_path=str(config_path))
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            document = _read_json(config_path, "configuration")
        except ConfigurationError as e:
            raise ConfigurationError(
                f"{e}\nCheck for trailing commas, missing quotes, or invalid syntax."
            ) from e

        self.validate(document, schema_name)
        logger.info("config_file_validated", config_path=str(config_path), schema_name=schema_name)
        return document

    def validate_records(self, collection: str, records: Iterable[dict[str, Any]]) -> None:
        """
        Check every record of a seed collection against ``<collection>_schema.json``.

        Collections without a schema file are accepted as they are.

        Raises:
            ConfigurationError: Naming the position of the first invalid record
        """
        schema_name = f"{collection}_schema.json"
        if not self.has_schema(schema_name):
            return

        for position, record in enumerate(records):
            try:
                self.validate(record, schema_name)
            except ConfigurationError as e:
                raise ConfigurationError(
                    f"Seed record #{position} of '{collection}' is invalid:{e}"
                ) from e
