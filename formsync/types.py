"""Core value types for form synchronization metadata.

This module defines the small immutable values that a FormMetadata record is
composed from:
- FormKey: Stable identifier of a form (name, id and optional version)
- Cursor: Opaque resumption token for incremental pulls
- SubmissionExportMetadata: Bookkeeping for the most recently exported submission
- FieldErrorCode: Error codes used when a persisted record fails to decode

All values are frozen dataclasses with structural equality, and all of them
know how to convert themselves to and from their wire (dict) representation.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from dateutil.parser import isoparse


class FieldErrorCode(str, Enum):
    """Error codes for individual fields of a persisted record.

    Used in FieldError objects attached to a MalformedRecordError.
    """
    REQUIRED = "required"
    INVALID_TYPE = "invalid_type"
    INVALID_FORMAT = "invalid_format"
    INVALID_VALUE = "invalid_value"
    CUSTOM = "custom"


@dataclass(frozen=True)
class FormKey:
    """Identity of a form, used as the lookup key of a metadata store.

    Attributes:
        name: Human readable form title
        id: Form id declared by the form definition
        version: Optional form definition version

    Examples:
        >>> FormKey.of("Census", "census-1") == FormKey(name="Census", id="census-1")
        True
        >>> FormKey.of("Census", "census-1").to_dict()
        {'name': 'Census', 'id': 'census-1'}
    """
    name: str
    id: str
    version: Optional[str] = None

    @classmethod
    def of(cls, name: str, id: str, version: Optional[str] = None) -> "FormKey":
        return cls(name=name, id=id, version=version)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "name": self.name,
            "id": self.id,
        }
        if self.version is not None:
            result["version"] = self.version
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormKey":
        """Create FormKey from dict."""
        return cls(
            name=data["name"],
            id=data["id"],
            version=data.get("version"),
        )


@dataclass(frozen=True)
class Cursor:
    """Opaque resumption token for incremental pulls.

    The token's contents are defined by the pull protocol; this package only
    stores it, compares it and tells the empty cursor apart.

    Examples:
        >>> Cursor.empty().is_empty
        True
        >>> Cursor("abc").to_dict()
        {'value': 'abc'}
    """
    value: str = ""

    @classmethod
    def empty(cls) -> "Cursor":
        """Cursor meaning "start from the beginning"."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.value == ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        if self.is_empty:
            return {}
        return {"value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Cursor":
        """Create Cursor from dict. An empty object decodes to the empty cursor."""
        return cls(value=data.get("value") or "")


@dataclass(frozen=True)
class SubmissionExportMetadata:
    """Marker for the most recent successful export of a form.

    Attributes:
        instance_id: Instance id of the exported submission
        submission_date: When the submission was originally recorded
        export_date_time: When the export took place

    Both timestamps carry a UTC offset and are serialized as ISO 8601 strings.
    """
    instance_id: str
    submission_date: datetime
    export_date_time: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "instanceId": self.instance_id,
            "submissionDate": self.submission_date.isoformat(),
            "exportDateTime": self.export_date_time.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubmissionExportMetadata":
        """Create SubmissionExportMetadata from dict.

        Raises:
            ValueError: If a timestamp can't be parsed or has no UTC offset
        """
        return cls(
            instance_id=data["instanceId"],
            submission_date=_parse_offset_datetime(data["submissionDate"]),
            export_date_time=_parse_offset_datetime(data["exportDateTime"]),
        )


def _parse_offset_datetime(value: str) -> datetime:
    parsed = isoparse(value)
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp '{value}' has no UTC offset")
    return parsed


__all__ = [
    "FieldErrorCode",
    "FormKey",
    "Cursor",
    "SubmissionExportMetadata",
]
