"""Unit tests for the in-memory storage port."""

import threading
from pathlib import PurePosixPath

from formsync.commands import update_submission_versions
from formsync.form_metadata import FormMetadata
from formsync.port import FormMetadataPort, InMemoryFormMetadataPort
from formsync.types import Cursor, FormKey


ROOT = PurePosixPath("/workspace")
CENSUS = FormKey.of("Census", "census-1")
SURVEY = FormKey.of("Survey", "survey-1")


class TestProtocol:
    """Test conformance to FormMetadataPort."""

    def test_in_memory_port_is_a_port(self):
        """Should satisfy the runtime-checkable protocol."""
        assert isinstance(InMemoryFormMetadataPort(), FormMetadataPort)

    def test_unrelated_object_is_not_a_port(self):
        """Should not accept objects lacking the port methods."""
        assert not isinstance(object(), FormMetadataPort)


class TestInMemoryPort:
    """Test fetch and persist semantics."""

    def test_fetch_missing(self):
        """Should return None for unknown keys."""
        assert InMemoryFormMetadataPort().fetch(CENSUS) is None

    def test_persist_inserts(self):
        """Should store records without prior entry."""
        port = InMemoryFormMetadataPort()
        metadata = FormMetadata.of(CENSUS, ROOT, "census-1")

        port.persist(metadata)

        assert port.fetch(CENSUS) is metadata
        assert CENSUS in port
        assert len(port) == 1

    def test_last_write_wins(self):
        """Should replace the record stored under the same key."""
        port = InMemoryFormMetadataPort()
        port.persist(FormMetadata.of(CENSUS, ROOT, "census-1"))
        updated = FormMetadata.of(CENSUS, ROOT, "census-1").with_cursor(Cursor("page-2"))

        port.persist(updated)

        assert port.fetch(CENSUS).cursor == Cursor("page-2")
        assert len(port) == 1

    def test_persist_all_and_fetch_all(self):
        """Should store and return several records."""
        records = [FormMetadata.of(CENSUS, ROOT, "census-1"), FormMetadata.of(SURVEY, ROOT, "survey-1")]
        port = InMemoryFormMetadataPort()

        port.persist_all(records)

        assert sorted(m.key.id for m in port.fetch_all()) == ["census-1", "survey-1"]

    def test_initial_records(self):
        """Should accept initial records."""
        port = InMemoryFormMetadataPort([FormMetadata.of(CENSUS, ROOT, "census-1")])

        assert port.fetch(CENSUS) is not None

    def test_fetch_all_returns_a_snapshot(self):
        """Should not expose the internal storage."""
        port = InMemoryFormMetadataPort([FormMetadata.of(CENSUS, ROOT, "census-1")])

        port.fetch_all().clear()

        assert len(port) == 1

    def test_clear(self):
        """Should drop every record."""
        port = InMemoryFormMetadataPort([FormMetadata.of(CENSUS, ROOT, "census-1")])

        port.clear()

        assert len(port) == 0
        assert CENSUS not in port


class TestExecute:
    """Test running commands under the store lock."""

    def test_execute_runs_command(self):
        """Should apply the command to the store."""
        port = InMemoryFormMetadataPort()

        port.execute(update_submission_versions(CENSUS, ROOT, "census-1", {"v1"}))

        assert port.fetch(CENSUS).submission_versions == {"v1"}

    def test_execute_accepts_plain_callables(self):
        """Should accept any callable over a port."""
        port = InMemoryFormMetadataPort()

        port.execute(lambda p: p.persist(FormMetadata.of(CENSUS, ROOT, "census-1")))

        assert CENSUS in port

    def test_concurrent_version_updates_are_not_lost(self):
        """Should serialize read-modify-write cycles run through execute."""
        port = InMemoryFormMetadataPort()

        def worker(worker_id):
            for i in range(25):
                port.execute(update_submission_versions(CENSUS, ROOT, "census-1", {f"w{worker_id}-v{i}"}))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(port.fetch(CENSUS).submission_versions) == 8 * 25
