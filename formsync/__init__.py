"""formsync: form synchronization metadata store.

formsync keeps one record per known form describing its synchronization state:
- Whether the form's submissions have been pulled
- A cursor telling where the next incremental pull resumes
- The form versions seen among pulled submissions
- The submission that was exported last

Records are immutable values. They are read and written through an injected
storage port by small deferred commands, so pull, export and discovery
pipelines never touch storage directly.

Basic usage:
    >>> from formsync import FormKey, InMemoryFormMetadataPort, update_as_pulled
    >>> port = InMemoryFormMetadataPort()
    >>> key = FormKey.of("Census", "census-1")
    >>> update_as_pulled(key, "/workspace", "census-1", {"2023-01"}).apply(port)
    >>> sorted(port.fetch(key).submission_versions)
    ['2023-01']
"""

__version__ = "0.1.0"

# Version info
VERSION = (0, 1, 0)

# Core exports
from formsync.commands import (
    FormMetadataCommand,
    clean_all_cursors,
    update_as_pulled,
    update_last_exported_submission,
    update_submission_versions,
)
from formsync.errors import FormSyncError, MalformedFormDefinitionError, MalformedRecordError
from formsync.form_metadata import FormMetadata
from formsync.port import FormMetadataPort, InMemoryFormMetadataPort
from formsync.types import Cursor, FormKey, SubmissionExportMetadata

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "FormKey",
    "Cursor",
    "SubmissionExportMetadata",
    "FormMetadata",
    "FormMetadataPort",
    "InMemoryFormMetadataPort",
    "FormMetadataCommand",
    "update_as_pulled",
    "update_submission_versions",
    "update_last_exported_submission",
    "clean_all_cursors",
    "FormSyncError",
    "MalformedFormDefinitionError",
    "MalformedRecordError",
]
