"""
JSON Schema Contract Validators

Validation of raw simulator requests against formal JSON Schema contracts.
Uses the jsonschema library; schemas live in the schema/ directory next to
this module.

Schemas:
- accumulation_request.json
- withdrawal_request.json

Besides the usual validate / is_valid / iter_errors, every validator can
report violations as a field -> message mapping, which is the error format
the simulators return to their callers.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator

import jsonschema
from jsonschema import Draft202012Validator, ValidationError


# =============================================================================
# MESSAGES
# =============================================================================

REQUIRED_MESSAGE = "This field is required"
TYPE_MESSAGE = "Enter a number"
BOOLEAN_MESSAGE = "Must be true or false"
OBJECT_MESSAGE = "Request must be an object of form fields"
REQUEST_KEY = "request"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Loader of JSON Schema files.

    Schemas are read from the schema/ directory of this package and cached
    after the first load.
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Load a JSON Schema file.

        Args:
            schema_name: Schema name without extension (e.g. 'withdrawal_request')

        Returns:
            The schema as a dict

        Raises:
            FileNotFoundError: If the schema file does not exist
            json.JSONDecodeError: If the file is not valid JSON
            ValueError: If the file is not a valid JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # meta-validation
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


def _error_message(error: ValidationError) -> str:
    if error.validator == "enum":
        options = ", ".join(str(option) for option in error.validator_value)
        return f"Choose one of: {options}"
    if error.validator == "type":
        if error.validator_value == "boolean":
            return BOOLEAN_MESSAGE
        if error.validator_value == "object":
            return OBJECT_MESSAGE
        return TYPE_MESSAGE
    return error.message


class ContractValidator:
    """
    Base class of the contract validators.

    Wraps a Draft 2020-12 validator for one schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Validate data against the schema.

        Raises:
            ValidationError: If the data does not match the schema
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        """Check validity without raising."""
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        """Iterate over all validation errors."""
        return self.validator.iter_errors(data)

    def field_errors(self, data: Any) -> Dict[str, str]:
        """
        Validation errors keyed by the offending top-level field.

        Missing required fields are reported under their own name; errors
        not attributable to a field go under REQUEST_KEY. The first error
        per field wins.

        Args:
            data: Raw request

        Returns:
            Mapping field -> message, empty if the request is valid
        """
        errors: Dict[str, str] = {}
        for error in self._leaf_errors(self.iter_errors(data)):
            if error.validator == "required" and isinstance(error.instance, dict):
                for name in error.validator_value:
                    if name not in error.instance:
                        errors.setdefault(name, REQUIRED_MESSAGE)
                continue

            field = str(error.path[0]) if error.path else REQUEST_KEY
            errors.setdefault(field, _error_message(error))
        return errors

    @staticmethod
    def _leaf_errors(errors: Iterator[ValidationError]) -> Iterator[ValidationError]:
        # anyOf / oneOf failures carry the useful errors in their context
        for error in sorted(errors, key=lambda e: list(e.path)):
            if error.context:
                yield from ContractValidator._leaf_errors(iter(error.context))
            else:
                yield error


class AccumulationRequestValidator(ContractValidator):
    """Validator of the accumulation_request contract."""

    def __init__(self):
        super().__init__("accumulation_request")


class WithdrawalRequestValidator(ContractValidator):
    """Validator of the withdrawal_request contract."""

    def __init__(self):
        super().__init__("withdrawal_request")
