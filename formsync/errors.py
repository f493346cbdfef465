"""Error types for form synchronization metadata.

Two families of failures are raised by this package:
- MalformedFormDefinitionError: a form definition can't be turned into a key
- MalformedRecordError: a persisted record can't be decoded

Both derive from FormSyncError. Failures raised by a storage port are never
wrapped; they reach the caller unchanged.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from formsync.types import FieldErrorCode


@dataclass(frozen=True)
class FieldError:
    """Per-field decoding error details.

    Attributes:
        path: Dot-notation field path (e.g., "key.id", "lastExportedSubmission.exportDateTime")
        code: Specific error code
        message: Human-readable error description
        expected: Optional - what was expected
        received: Optional - what was actually found

    Examples:
        >>> err = FieldError(
        ...     path="hasBeenPulled",
        ...     code=FieldErrorCode.REQUIRED,
        ...     message="Field 'hasBeenPulled' is required but was not provided",
        ... )
        >>> err.to_dict()["code"]
        'required'
    """
    path: str
    code: FieldErrorCode
    message: str
    expected: Optional[Any] = None
    received: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "path": self.path,
            "code": self.code.value if isinstance(self.code, FieldErrorCode) else self.code,
            "message": self.message,
        }
        if self.expected is not None:
            result["expected"] = self.expected
        if self.received is not None:
            result["received"] = self.received
        return result


class FormSyncError(Exception):
    """Base class for all errors raised by formsync."""


class MalformedFormDefinitionError(FormSyncError):
    """Raised when a form definition lacks the data needed to identify the form.

    That is: the document isn't well-formed, it has no title, no primary
    instance declaration can be found, or the primary instance has no form id.
    """


class MalformedRecordError(FormSyncError):
    """Raised when a persisted metadata record can't be decoded.

    Attributes:
        errors: One FieldError per problem found in the record
    """

    def __init__(self, message: str, errors: Optional[List[FieldError]] = None):
        self.errors: List[FieldError] = list(errors or [])
        super().__init__(message)

    @property
    def paths(self) -> List[str]:
        """Paths of the offending fields."""
        return [error.path for error in self.errors]


__all__ = [
    "FieldError",
    "FormSyncError",
    "MalformedFormDefinitionError",
    "MalformedRecordError",
]
