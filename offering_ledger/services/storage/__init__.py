"""
Storage Services Package

Provides the abstract document storage interface and its implementations.
The local JSON file is the default backend.
"""

from offering_ledger.services.storage.interface import (
    DocumentCorruptedError,
    DocumentStorageInterface,
    StorageError,
    StorageWriteError,
)
from offering_ledger.services.storage.local_file import LocalFileDocumentStorage
from offering_ledger.services.storage.memory import InMemoryDocumentStorage

__all__ = [
    # Interface
    "DocumentStorageInterface",
    # Exceptions
    "DocumentCorruptedError",
    "StorageError",
    "StorageWriteError",
    # Implementations
    "InMemoryDocumentStorage",
    "LocalFileDocumentStorage",
]
