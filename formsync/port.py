"""Storage port for form metadata records.

FormMetadataPort is the narrow interface commands are written against: fetch
one record by key, fetch them all, and persist one or many. Durable stores
(files, embedded databases...) live outside this package and only need to
satisfy this protocol.

InMemoryFormMetadataPort is a dict-backed implementation guarded by a lock.
Its execute() method runs a whole command while holding the lock, which
serializes read-modify-write cycles against the store.

Usage:
    >>> from formsync.commands import update_submission_versions
    >>> from formsync.types import FormKey
    >>> port = InMemoryFormMetadataPort()
    >>> key = FormKey.of("Census", "census-1")
    >>> port.execute(update_submission_versions(key, "/workspace", "census-1", {"v1"}))
    >>> port.fetch(key).submission_versions
    frozenset({'v1'})
"""

import threading
from typing import Callable, Dict, Iterable, List, Optional

from typing_extensions import Protocol, runtime_checkable

from formsync.form_metadata import FormMetadata
from formsync.log import get_logger
from formsync.types import FormKey

logger = get_logger(__name__)


@runtime_checkable
class FormMetadataPort(Protocol):
    """Capabilities a metadata store must offer to commands."""

    def fetch(self, key: FormKey) -> Optional[FormMetadata]:
        """Return the record stored under key, or None."""
        ...

    def fetch_all(self) -> List[FormMetadata]:
        """Return every stored record, in no particular order."""
        ...

    def persist(self, metadata: FormMetadata) -> None:
        """Insert or replace the record stored under metadata.key."""
        ...

    def persist_all(self, metadata: Iterable[FormMetadata]) -> None:
        """Insert or replace several records."""
        ...


class InMemoryFormMetadataPort:
    """Dict-backed FormMetadataPort.

    Examples:
        >>> from formsync.types import FormKey
        >>> port = InMemoryFormMetadataPort()
        >>> key = FormKey.of("Census", "census-1")
        >>> port.fetch(key) is None
        True
        >>> port.persist(FormMetadata.of(key, "/workspace", "census-1"))
        >>> key in port
        True
    """

    def __init__(self, records: Optional[Iterable[FormMetadata]] = None):
        self._lock = threading.RLock()
        self._records: Dict[FormKey, FormMetadata] = {}
        if records is not None:
            self.persist_all(records)

    def fetch(self, key: FormKey) -> Optional[FormMetadata]:
        with self._lock:
            return self._records.get(key)

    def fetch_all(self) -> List[FormMetadata]:
        with self._lock:
            return list(self._records.values())

    def persist(self, metadata: FormMetadata) -> None:
        with self._lock:
            self._records[metadata.key] = metadata

    def persist_all(self, metadata: Iterable[FormMetadata]) -> None:
        with self._lock:
            for record in metadata:
                self._records[record.key] = record

    def execute(self, command: Callable[[FormMetadataPort], None]) -> None:
        """Run a command against this store while holding its lock.

        Commands running through execute() can't interleave their fetch and
        persist steps, so concurrent version unions don't lose updates.
        """
        with self._lock:
            command(self)

    def clear(self) -> None:
        with self._lock:
            logger.debug("Clearing form metadata store", records=len(self._records))
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._records


__all__ = [
    "FormMetadataPort",
    "InMemoryFormMetadataPort",
]
