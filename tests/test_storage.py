"""
Tests for document storage backends.
"""

import os

import pytest

from offering_ledger.config import StorageSettings
from offering_ledger.models import DetailLine, LedgerDocument
from offering_ledger.services.storage import (
    DocumentCorruptedError,
    InMemoryDocumentStorage,
    LocalFileDocumentStorage,
    StorageWriteError,
)
from offering_ledger.services.storage import local_file


def sample_document() -> LedgerDocument:
    document = LedgerDocument.empty()
    document.counting = {"Monday": {"Evening": {5000: 4}}}
    document.expense_details["Operations"] = [DetailLine(name="Flowers", amount=30000)]
    document.expenses["Operations"] = 30000
    return document


class TestLocalFileStorage:
    """Tests for the JSON file backend."""

    @pytest.fixture
    def storage(self, tmp_path):
        storage = LocalFileDocumentStorage(path=tmp_path / "ledger" / "doc.json", write_attempts=2)
        storage.prepare()
        return storage

    def test_missing_file_loads_none(self, storage):
        assert storage.load() is None

    def test_round_trip(self, storage):
        document = sample_document()
        storage.save(document)

        assert storage.path.exists()
        assert storage.load() == document

    def test_save_leaves_no_temp_files(self, storage):
        storage.save(sample_document())
        storage.save(sample_document())
        assert [p.name for p in storage.path.parent.iterdir()] == ["doc.json"]

    def test_corrupted_file(self, storage):
        storage.path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DocumentCorruptedError):
            storage.load()

    def test_wrong_shape(self, storage):
        storage.path.write_text('{"bank_records": [{"amount": 5}]}', encoding="utf-8")
        with pytest.raises(DocumentCorruptedError):
            storage.load()

    def test_clear(self, storage):
        storage.save(sample_document())
        storage.clear()
        assert storage.load() is None
        storage.clear()

    def test_write_failure_is_retried_then_raised(self, storage, monkeypatch):
        """Every attempt fails: the error surfaces as StorageWriteError."""
        calls = []

        def failing_replace(src, dst):
            calls.append(src)
            raise PermissionError("locked")

        monkeypatch.setattr(local_file.os, "replace", failing_replace)

        with pytest.raises(StorageWriteError):
            storage.save(sample_document())
        assert len(calls) == 2
        assert not any(os.path.exists(src) for src in calls)

    def test_previous_document_survives_failed_write(self, storage, monkeypatch):
        original = sample_document()
        storage.save(original)

        def failing_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(local_file.os, "replace", failing_replace)
        with pytest.raises(StorageWriteError):
            storage.save(LedgerDocument.empty())
        monkeypatch.undo()

        assert storage.load() == original


class TestStorageSettings:
    """Tests for where the document is stored."""

    def test_document_path(self, tmp_path):
        settings = StorageSettings(data_dir=tmp_path, storage_key="grace_ledger_v1")
        assert settings.document_path == tmp_path / "grace_ledger_v1.json"

    def test_storage_key_rejects_separators(self):
        with pytest.raises(ValueError):
            StorageSettings(storage_key="../elsewhere")


class TestInMemoryStorage:
    """Tests for the in-memory backend."""

    def test_load_returns_a_copy(self):
        document = sample_document()
        storage = InMemoryDocumentStorage(document)

        loaded = storage.load()
        assert loaded == document
        assert loaded is not document

    def test_save_counts(self):
        storage = InMemoryDocumentStorage()
        assert storage.load() is None
        storage.save(sample_document())
        storage.save(sample_document())
        assert storage.save_count == 2
        storage.clear()
        assert storage.load() is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
