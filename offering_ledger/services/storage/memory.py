"""In-memory storage, for tests and when no data directory is available."""

from typing import Optional

from offering_ledger.models.ledger import LedgerDocument
from offering_ledger.services.storage.interface import DocumentStorageInterface


class InMemoryDocumentStorage(DocumentStorageInterface):
    """
    Keeps the serialized document in a string.

    Storing JSON rather than the object means a load always returns a
    fresh copy, the same as reading a file would.
    """

    def __init__(self, document: Optional[LedgerDocument] = None):
        self._payload: Optional[str] = document.to_json() if document else None
        self.save_count = 0

    def load(self) -> Optional[LedgerDocument]:
        if self._payload is None:
            return None
        return LedgerDocument.model_validate_json(self._payload)

    def save(self, document: LedgerDocument) -> None:
        self._payload = document.to_json()
        self.save_count += 1

    def clear(self) -> None:
        self._payload = None
