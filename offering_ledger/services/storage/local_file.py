"""
Local File Storage Implementation

The document is written as pretty-printed JSON to
<data_dir>/<storage_key>.json.

IMPORTANT: Writes are atomic. The JSON goes to a temporary file in the
same directory which then replaces the real one, so a crash mid-write
leaves the previous document intact rather than half a file.

Transient OS errors (locked file, full disk briefly freed, network
drive hiccup) are retried with exponential backoff.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from offering_ledger.config import get_settings
from offering_ledger.models.ledger import LedgerDocument
from offering_ledger.services.storage.interface import (
    DocumentCorruptedError,
    DocumentStorageInterface,
    StorageError,
    StorageWriteError,
)


class LocalFileDocumentStorage(DocumentStorageInterface):
    """
    Stores the ledger document in a single JSON file.

    Path and retry count default to StorageSettings.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        write_attempts: Optional[int] = None,
    ):
        settings = get_settings().storage
        self.path = Path(path) if path is not None else settings.document_path
        self.write_attempts = write_attempts or settings.write_attempts

    def prepare(self) -> None:
        """
        Make sure the data directory exists.

        Raises:
            StorageError: If the directory can't be created
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self.path.parent}: {e}")

    def load(self) -> Optional[LedgerDocument]:
        if not self.path.exists():
            return None

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}")

        try:
            return LedgerDocument.model_validate_json(raw)
        except ValidationError as e:
            raise DocumentCorruptedError(
                f"Stored document at {self.path} is not a valid ledger: "
                f"{e.error_count()} problem(s)"
            )
        except ValueError as e:
            raise DocumentCorruptedError(f"Stored document at {self.path} is unreadable: {e}")

    def save(self, document: LedgerDocument) -> None:
        payload = document.to_json()

        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self.write_attempts),
                wait=wait_exponential(multiplier=0.1, max=2),
                retry=retry_if_exception_type(OSError),
                reraise=True,
            ):
                with attempt:
                    self._write_atomic(payload)
        except OSError as e:
            raise StorageWriteError(f"Failed to save document to {self.path}: {e}")

    def _write_atomic(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.stem}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Failed to remove {self.path}: {e}")
