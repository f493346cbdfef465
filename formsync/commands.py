"""State-transition commands over a FormMetadataPort.

Each factory in this module captures the facts a caller has observed (a pull
finished, new submission versions were found, a submission was exported...)
and returns a FormMetadataCommand. Nothing happens until the command is
applied to a port, at which point it runs one read-modify-write cycle:

1. Fetch the current record, or build a default one if the form is unknown
2. Apply an immutable transformation
3. Persist the result

Commands never fail because a record is missing. Errors raised by the port
are logged and propagated unchanged. Re-running a command is always safe:
version updates are unions and the other updates overwrite.

Usage:
    >>> from formsync.port import InMemoryFormMetadataPort
    >>> from formsync.types import Cursor, FormKey
    >>> port = InMemoryFormMetadataPort()
    >>> key = FormKey.of("Census", "census-1")
    >>> command = update_as_pulled(key, "/workspace", "census-1", {"v1"}, cursor=Cursor("page-2"))
    >>> command.apply(port)
    >>> port.fetch(key).has_been_pulled
    True
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional

from formsync.form_metadata import FormMetadata, PathLike
from formsync.log import get_logger
from formsync.port import FormMetadataPort
from formsync.types import Cursor, FormKey

logger = get_logger(__name__)

PortAction = Callable[[FormMetadataPort], None]


@dataclass(frozen=True)
class FormMetadataCommand:
    """A deferred read-modify-write operation on a FormMetadataPort.

    Attributes:
        name: Name of the transition, used in logs
        action: Callable performing the transition against a port
        context: Captured arguments, used in logs
    """
    name: str
    action: PortAction = field(repr=False)
    context: Dict[str, Any] = field(default_factory=dict, compare=False)

    def apply(self, port: FormMetadataPort) -> None:
        """Run this command against port.

        Raises:
            Exception: Whatever the port raises, unchanged
        """
        logger.debug("Applying form metadata command", command=self.name, **self.context)
        try:
            self.action(port)
        except Exception as e:
            logger.error("Form metadata command failed", command=self.name, error=str(e), **self.context)
            raise

    def __call__(self, port: FormMetadataPort) -> None:
        self.apply(port)

    def and_then(self, other: "FormMetadataCommand") -> "FormMetadataCommand":
        """Compose this command with another one, applied right after it.

        The composed command logs as a single command carrying both contexts.
        """
        def action(port: FormMetadataPort) -> None:
            self.action(port)
            other.action(port)

        return FormMetadataCommand(
            name=f"{self.name}+{other.name}",
            action=action,
            context={**self.context, **other.context},
        )


def _fetch_or_default(port: FormMetadataPort, key: FormKey, storage_root: PathLike, form_dir: PathLike) -> FormMetadata:
    metadata = port.fetch(key)
    if metadata is None:
        return FormMetadata.of(key, storage_root, form_dir)
    return metadata


def _form_context(key: FormKey, **extra: Any) -> Dict[str, Any]:
    return {"form_name": key.name, "form_id": key.id, **extra}


def update_as_pulled(
    key: FormKey,
    storage_root: PathLike,
    form_dir: PathLike,
    submission_versions: Iterable[str] = (),
    cursor: Optional[Cursor] = None,
) -> FormMetadataCommand:
    """Record a successful (possibly partial) pull of a form.

    Marks the form as pulled and adds submission_versions to the recorded
    ones. When cursor is given it replaces the stored cursor, otherwise the
    stored cursor is left untouched.

    Args:
        key: Form that was pulled
        storage_root: Workspace root, used if the form has no record yet
        form_dir: Form directory, used if the form has no record yet
        submission_versions: Versions seen among the pulled submissions
        cursor: Where the next incremental pull should resume
    """
    versions = frozenset(submission_versions)

    def action(port: FormMetadataPort) -> None:
        metadata = _fetch_or_default(port, key, storage_root, form_dir).with_has_been_pulled(True, versions)
        if cursor is not None:
            metadata = metadata.with_cursor(cursor)
        port.persist(metadata)

    return FormMetadataCommand(
        name="update_as_pulled",
        action=action,
        context=_form_context(key, versions=sorted(versions), cursor=None if cursor is None else cursor.value),
    )


def update_submission_versions(
    key: FormKey,
    storage_root: PathLike,
    form_dir: PathLike,
    submission_versions: Iterable[str],
) -> FormMetadataCommand:
    """Add newly observed submission versions to a form's record."""
    versions = frozenset(submission_versions)

    def action(port: FormMetadataPort) -> None:
        port.persist(_fetch_or_default(port, key, storage_root, form_dir).with_submission_versions(versions))

    return FormMetadataCommand(
        name="update_submission_versions",
        action=action,
        context=_form_context(key, versions=sorted(versions)),
    )


def update_last_exported_submission(
    key: FormKey,
    instance_id: str,
    submission_date: datetime,
    export_date_time: datetime,
    storage_root: PathLike,
    form_dir: PathLike,
) -> FormMetadataCommand:
    """Record the submission exported last, replacing any previous marker."""
    def action(port: FormMetadataPort) -> None:
        port.persist(
            _fetch_or_default(port, key, storage_root, form_dir)
            .with_last_exported_submission(instance_id, submission_date, export_date_time)
        )

    return FormMetadataCommand(
        name="update_last_exported_submission",
        action=action,
        context=_form_context(key, instance_id=instance_id),
    )


def clean_all_cursors() -> FormMetadataCommand:
    """Reset the cursor of every stored form so the next pulls start over."""
    def action(port: FormMetadataPort) -> None:
        records = [metadata.without_cursor() for metadata in port.fetch_all()]
        port.persist_all(records)
        logger.info("Reset pull cursors", forms=len(records))

    return FormMetadataCommand(name="clean_all_cursors", action=action)


__all__ = [
    "FormMetadataCommand",
    "update_as_pulled",
    "update_submission_versions",
    "update_last_exported_submission",
    "clean_all_cursors",
]
