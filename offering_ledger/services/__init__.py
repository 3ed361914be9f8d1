"""Services package."""

from offering_ledger.services.storage import (
    DocumentCorruptedError,
    DocumentStorageInterface,
    InMemoryDocumentStorage,
    LocalFileDocumentStorage,
    StorageError,
    StorageWriteError,
)
from offering_ledger.services.transfer import (
    DocumentImportError,
    convert_legacy_document,
    default_export_filename,
    export_document,
    import_document,
    import_file,
    is_legacy_document,
    normalize_export_filename,
    write_export,
)

__all__ = [
    # Storage services
    "DocumentCorruptedError",
    "DocumentStorageInterface",
    "InMemoryDocumentStorage",
    "LocalFileDocumentStorage",
    "StorageError",
    "StorageWriteError",
    # Import / export
    "DocumentImportError",
    "convert_legacy_document",
    "default_export_filename",
    "export_document",
    "import_document",
    "import_file",
    "is_legacy_document",
    "normalize_export_filename",
    "write_export",
]
