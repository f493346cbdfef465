"""JSON Schema validation of persisted form metadata records.

Records come back from whatever store a FormMetadataPort is backed by, so
they are checked against FORM_METADATA_SCHEMA before being decoded. Every
jsonschema validation error is translated into a FieldError and all of them
are reported together in a single MalformedRecordError.
"""

from typing import Any, Dict, List

import jsonschema
from jsonschema import Draft7Validator

from formsync.errors import FieldError, MalformedRecordError
from formsync.types import FieldErrorCode


FORM_KEY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "id": {"type": "string"},
        "version": {"type": ["string", "null"]},
    },
    "required": ["name", "id"],
}

CURSOR_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "value": {"type": "string"},
    },
}

SUBMISSION_EXPORT_METADATA_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "instanceId": {"type": "string"},
        "submissionDate": {"type": "string"},
        "exportDateTime": {"type": "string"},
    },
    "required": ["instanceId", "submissionDate", "exportDateTime"],
}

FORM_METADATA_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "key": FORM_KEY_SCHEMA,
        "formDir": {"type": "string"},
        "hasBeenPulled": {"type": "boolean"},
        "cursor": CURSOR_SCHEMA,
        "lastExportedSubmission": SUBMISSION_EXPORT_METADATA_SCHEMA,
        "submissionVersions": {
            "type": "array",
            "items": {"type": "string"},
        },
    },
    "required": ["key", "formDir", "hasBeenPulled", "cursor"],
}


class RecordValidator:
    """Validates serialized FormMetadata records.

    Examples:
        >>> validator = RecordValidator()
        >>> validator.validate({"formDir": "census-1"})[0].path
        'key'
    """

    def __init__(self, schema: Dict[str, Any] = FORM_METADATA_SCHEMA) -> None:
        Draft7Validator.check_schema(schema)
        self.schema = schema
        self.validator = Draft7Validator(schema)

    def validate(self, data: Any) -> List[FieldError]:
        """Return the list of problems found in data (empty if valid)."""
        errors = sorted(self.validator.iter_errors(data), key=lambda e: list(e.absolute_path))
        return [self._translate_error(error) for error in errors]

    def check(self, data: Any) -> None:
        """Raise MalformedRecordError if data isn't a valid record.

        Raises:
            MalformedRecordError: With one FieldError per problem found
        """
        errors = self.validate(data)
        if errors:
            raise MalformedRecordError(
                f"Malformed form metadata record: {'; '.join(e.message for e in errors)}",
                errors,
            )

    def _translate_error(self, error: jsonschema.ValidationError) -> FieldError:
        path = ".".join(str(p) for p in error.absolute_path)

        if error.validator == "required":
            missing_prop = error.message.split("'")[1] if "'" in error.message else "field"
            full_path = f"{path}.{missing_prop}" if path else missing_prop
            return FieldError(
                path=full_path,
                code=FieldErrorCode.REQUIRED,
                message=f"Field '{full_path}' is required but was not provided",
                expected="required field",
            )

        if error.validator == "type":
            received_type = type(error.instance).__name__
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_TYPE,
                message=f"Field '{path}' has invalid type. Expected {error.validator_value}, got {received_type}",
                expected=error.validator_value,
                received=received_type,
            )

        if error.validator in ("enum", "const"):
            allowed = error.validator_value if error.validator == "enum" else [error.validator_value]
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_VALUE,
                message=f"Field '{path}' must be one of: {', '.join(str(v) for v in allowed)}",
                expected=allowed,
                received=error.instance,
            )

        return FieldError(
            path=path,
            code=FieldErrorCode.CUSTOM,
            message=f"Field '{path}' validation failed: {error.message}",
            expected=error.validator_value,
            received=error.instance,
        )


__all__ = [
    "FORM_METADATA_SCHEMA",
    "RecordValidator",
]
