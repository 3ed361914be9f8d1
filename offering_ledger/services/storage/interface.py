"""
Abstract Document Storage Interface

DESIGN DECISION: The ledger is a single document, so storage is a single
slot: load it, overwrite it, clear it. There is no query surface.

Implementations:
1. LocalFileDocumentStorage - JSON file on disk (the application default)
2. InMemoryDocumentStorage - for tests and as a fallback when the data
   directory can't be prepared

The interface is synchronous. Saves run on the store's background worker,
so a slow disk never blocks the UI thread.
"""

from abc import ABC, abstractmethod
from typing import Optional

from offering_ledger.models.ledger import LedgerDocument


class DocumentStorageInterface(ABC):
    """
    Abstract interface for ledger document storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self) -> Optional[LedgerDocument]:
        """
        Read the stored document.

        Returns:
            The document, or None if nothing has been stored yet

        Raises:
            DocumentCorruptedError: If stored data can't be parsed
        """
        pass

    @abstractmethod
    def save(self, document: LedgerDocument) -> None:
        """
        Overwrite the stored document.

        Raises:
            StorageWriteError: If the write fails
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored document. A missing document is not an error."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DocumentCorruptedError(StorageError):
    """Stored document exists but can't be read back."""
    pass


class StorageWriteError(StorageError):
    """Document could not be written."""
    pass
