"""FormMetadata: the synchronization state of a single form.

A FormMetadata record tells whether a form's submissions have been pulled,
where an incremental pull should resume, which form versions were seen among
pulled submissions, and which submission was exported last.

Records are immutable. Every `with_*` method returns a new record, and the
ones taking a set of submission versions merge it into the existing set,
never replacing it, so repeated or resumed pulls can't lose versions that
were already recorded.

The form directory is always held relative to the storage root so that a
workspace can be moved or copied, and it is always serialized with `/`
separators so that records written on one platform can be read on another.

Usage:
    >>> from pathlib import Path
    >>> from formsync.types import FormKey
    >>> root = Path("/workspace")
    >>> metadata = FormMetadata.of(FormKey.of("Census", "census-1"), root, root / "forms" / "census-1")
    >>> metadata.to_dict()["formDir"]
    'forms/census-1'
    >>> metadata.with_submission_versions({"2023-01"}).submission_versions
    frozenset({'2023-01'})
"""

import json
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path, PurePath, PurePosixPath
from typing import Any, Dict, FrozenSet, Iterable, Optional, Union

from formsync.errors import FieldError, MalformedFormDefinitionError, MalformedRecordError
from formsync.types import Cursor, FieldErrorCode, FormKey, SubmissionExportMetadata
from formsync.validation import RecordValidator
from formsync.xml_element import XmlElement


PathLike = Union[str, PurePath]

_record_validator = RecordValidator()


def _relativize(root: PurePath, path: PurePath) -> PurePath:
    """Express path relative to root, walking up with '..' when needed.

    Paths on a different anchor than root (e.g. another Windows drive) can't
    be made relative and are returned unchanged.
    """
    try:
        return path.relative_to(root)
    except ValueError:
        pass
    if path.anchor != root.anchor:
        return path
    root_parts, path_parts = root.parts, path.parts
    common = 0
    while common < min(len(root_parts), len(path_parts)) and root_parts[common] == path_parts[common]:
        common += 1
    return type(path)(*([".."] * (len(root_parts) - common)), *path_parts[common:])


def _is_the_main_instance(instance: XmlElement) -> bool:
    # Secondary instances carry an id, the main one wraps a single
    # data element holding the form id
    children = instance.children()
    return (
        not instance.has_attribute("id")
        and len(children) == 1
        and children[0].has_attribute("id")
    )


@dataclass(frozen=True)
class FormMetadata:
    """Synchronization state of one form.

    Attributes:
        key: Identity of the form
        storage_root: Root directory of the workspace holding all form data
        relative_form_dir: Form directory, relative to storage_root. An
            absolute path is relativized when the record is built.
        has_been_pulled: Whether a pull of the form's submissions has completed
        cursor: Where the next incremental pull should resume
        last_exported_submission: Most recent export marker, if any
        submission_versions: Form versions seen among submissions. Not part
            of equality or hashing.
    """
    key: FormKey
    storage_root: PurePath
    relative_form_dir: PurePath
    has_been_pulled: bool = False
    cursor: Cursor = field(default_factory=Cursor.empty)
    last_exported_submission: Optional[SubmissionExportMetadata] = None
    submission_versions: FrozenSet[str] = field(default_factory=frozenset, compare=False)

    def __post_init__(self):
        """Normalize paths and the version set."""
        storage_root = Path(self.storage_root) if isinstance(self.storage_root, str) else self.storage_root
        form_dir = self.relative_form_dir
        if isinstance(form_dir, str):
            form_dir = type(storage_root)(form_dir)
        if form_dir.is_absolute():
            form_dir = _relativize(storage_root, form_dir)
        object.__setattr__(self, "storage_root", storage_root)
        object.__setattr__(self, "relative_form_dir", form_dir)
        if not isinstance(self.submission_versions, frozenset):
            object.__setattr__(self, "submission_versions", frozenset(self.submission_versions))

    @classmethod
    def of(cls, key: FormKey, storage_root: PathLike, form_dir: PathLike) -> "FormMetadata":
        """Default record for a form nothing is known about yet."""
        return cls(key=key, storage_root=storage_root, relative_form_dir=form_dir)

    @classmethod
    def from_definition(cls, storage_root: PathLike, form_file: PathLike, definition: XmlElement) -> "FormMetadata":
        """Build the record of a form discovered from its definition.

        Args:
            storage_root: Root directory of the workspace
            form_file: Location of the form definition; its parent is the form directory
            definition: Parsed root element of the form definition

        Raises:
            MalformedFormDefinitionError: If the title, the main instance or
                the form id can't be found
        """
        titles = definition.find_elements("head", "title")
        name = titles[0].maybe_value() if titles else None
        if name is None:
            raise MalformedFormDefinitionError(f"Form definition {form_file} has no title")

        main_instance = next(
            (e for e in definition.find_elements("head", "model", "instance") if _is_the_main_instance(e)),
            None,
        )
        if main_instance is None:
            raise MalformedFormDefinitionError(
                f"Form definition {form_file} has no main instance with a form id"
            )

        data_element = main_instance.children()[0]
        form_id = data_element.get_attribute_value("id")
        if not form_id:
            raise MalformedFormDefinitionError(f"Form definition {form_file} has an empty form id")

        key = FormKey.of(name, form_id, data_element.get_attribute_value("version"))
        form_file = Path(form_file) if isinstance(form_file, str) else form_file
        return cls.of(key, storage_root, form_file.parent)

    @classmethod
    def from_dict(cls, storage_root: PathLike, data: Dict[str, Any]) -> "FormMetadata":
        """Decode a persisted record.

        Args:
            storage_root: Root directory the record's formDir is relative to
            data: Serialized record, as produced by to_dict()

        Raises:
            MalformedRecordError: If required fields are missing or malformed
        """
        _record_validator.check(data)

        last_exported_submission = None
        if data.get("lastExportedSubmission") is not None:
            try:
                last_exported_submission = SubmissionExportMetadata.from_dict(data["lastExportedSubmission"])
            except (ValueError, OverflowError) as e:
                error = FieldError(
                    path="lastExportedSubmission",
                    code=FieldErrorCode.INVALID_FORMAT,
                    message=f"Field 'lastExportedSubmission' has an invalid timestamp: {e}",
                    expected="ISO 8601 timestamp with UTC offset",
                )
                raise MalformedRecordError(f"Malformed form metadata record: {error.message}", [error]) from e

        storage_root = Path(storage_root) if isinstance(storage_root, str) else storage_root
        portable_parts = PurePosixPath(data["formDir"].replace("\\", "/")).parts
        form_dir = type(storage_root)(*portable_parts) if portable_parts else type(storage_root)()

        return cls(
            key=FormKey.from_dict(data["key"]),
            storage_root=storage_root,
            relative_form_dir=form_dir,
            has_been_pulled=data["hasBeenPulled"],
            cursor=Cursor.from_dict(data["cursor"]),
            last_exported_submission=last_exported_submission,
            submission_versions=frozenset(data.get("submissionVersions") or ()),
        )

    @classmethod
    def from_json(cls, storage_root: PathLike, text: str) -> "FormMetadata":
        """Decode a record from its JSON text.

        Raises:
            MalformedRecordError: If text isn't JSON or isn't a valid record
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedRecordError(f"Form metadata record is not valid JSON: {e}") from e
        return cls.from_dict(storage_root, data)

    @property
    def form_dir(self) -> PurePath:
        """Absolute form directory."""
        return self.storage_root / self.relative_form_dir

    def with_cursor(self, cursor: Cursor) -> "FormMetadata":
        return replace(self, cursor=cursor)

    def without_cursor(self) -> "FormMetadata":
        return replace(self, cursor=Cursor.empty())

    def with_submission_versions(self, submission_versions: Iterable[str]) -> "FormMetadata":
        """Add versions to the recorded ones."""
        return replace(self, submission_versions=self.submission_versions | frozenset(submission_versions))

    def with_has_been_pulled(
        self,
        has_been_pulled: bool,
        submission_versions: Iterable[str] = (),
    ) -> "FormMetadata":
        """Set the pulled flag and add the versions found by the pull."""
        return replace(
            self,
            has_been_pulled=has_been_pulled,
            submission_versions=self.submission_versions | frozenset(submission_versions),
        )

    def with_last_exported_submission(
        self,
        instance_id: str,
        submission_date: datetime,
        export_date_time: datetime,
    ) -> "FormMetadata":
        """Replace the export marker."""
        return replace(
            self,
            last_exported_submission=SubmissionExportMetadata(instance_id, submission_date, export_date_time),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization.

        The storage root is not serialized; formDir always uses '/' separators.
        """
        result: Dict[str, Any] = {
            "key": self.key.to_dict(),
            "formDir": self.relative_form_dir.as_posix(),
            "hasBeenPulled": self.has_been_pulled,
            "cursor": self.cursor.to_dict(),
        }
        if self.last_exported_submission is not None:
            result["lastExportedSubmission"] = self.last_exported_submission.to_dict()
        result["submissionVersions"] = sorted(self.submission_versions)
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)


__all__ = [
    "FormMetadata",
]
