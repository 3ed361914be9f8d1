"""
Main Orchestrator for the Offering Ledger

This module ties together all the components and defines the flows for:
1. Ledger changes (command → reducer → new document → background save)
2. Reports (document → summary/projections → narrative text)

DESIGN DECISION: The orchestrator enforces the boundaries:
- The document only ever changes through apply_command, reset, or a
  successful import
- A rejected command leaves the document untouched and reaches the
  caller as an exception
- Saving happens on a single background worker, in submission order,
  so the UI never waits on disk and the last write always wins
- Every step is logged
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from offering_ledger.activity import ActivityLogger
from offering_ledger.agents import NarrativeAgent
from offering_ledger.aggregation import summarize
from offering_ledger.config import AppSettings, get_settings
from offering_ledger.errors import MutationError
from offering_ledger.models.ledger import LedgerDocument, utc_now
from offering_ledger.models.report import LedgerSummary, ReportLine, ReportTotals
from offering_ledger.models.validation import ValidationResult
from offering_ledger.mutations import LedgerCommand, apply_command
from offering_ledger.reports import (
    canonical_report,
    canonical_totals,
    editable_report,
    editable_totals,
)
from offering_ledger.services.storage import (
    DocumentStorageInterface,
    InMemoryDocumentStorage,
    LocalFileDocumentStorage,
    StorageError,
)
from offering_ledger.services.transfer import (
    DocumentImportError,
    build_document,
    export_document,
    is_legacy_document,
    normalize_export_filename,
    parse_payload,
    write_export,
)
from offering_ledger.validation import LedgerValidator


class LedgerStore:
    """
    Holds the current ledger document.

    Flow per command:
    1. Apply → reducer returns a new document (or raises)
    2. Swap → the new document becomes current
    3. Save → submitted to the background worker (fire-and-forget)
    4. Log → activity event

    Save failures are logged and kept in last_save_error; they never
    reach the dispatch caller.
    """

    def __init__(
        self,
        storage: Optional[DocumentStorageInterface] = None,
        activity_logger: Optional[ActivityLogger] = None,
        clock: Callable[[], datetime] = utc_now,
        validator: Optional[LedgerValidator] = None,
    ):
        self._storage = storage or InMemoryDocumentStorage()
        self._activity = activity_logger or ActivityLogger()
        self._clock = clock
        self._validator = validator or LedgerValidator()

        self._lock = threading.RLock()
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="ledger-save",
        )
        self._last_save: Optional[Future] = None
        self.last_save_error: Optional[str] = None

        self._document = self._load()

    @property
    def document(self) -> LedgerDocument:
        return self._document

    def _load(self) -> LedgerDocument:
        source = type(self._storage).__name__
        try:
            stored = self._storage.load()
        except StorageError as e:
            self._activity.log_load_failed(str(e))
            return LedgerDocument.empty(self._clock())

        self._activity.log_document_loaded(source, found=stored is not None)
        return stored if stored is not None else LedgerDocument.empty(self._clock())

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def _save(self, document: LedgerDocument) -> None:
        """Runs on the background worker."""
        try:
            self._storage.save(document)
        except StorageError as e:
            self.last_save_error = str(e)
            self._activity.log_save_failed(str(e))
            return
        self.last_save_error = None
        self._activity.log_document_saved(type(self._storage).__name__)

    def _schedule_save(self, document: LedgerDocument) -> None:
        self._last_save = self._executor.submit(self._save, document)

    def flush(self, timeout: Optional[float] = None) -> None:
        """Wait until every submitted save has finished."""
        pending = self._last_save
        if pending is not None:
            pending.result(timeout=timeout)

    def close(self) -> None:
        self.flush()
        self._executor.shutdown(wait=True)

    # =========================================================================
    # CHANGES
    # =========================================================================

    def dispatch(self, command: LedgerCommand) -> LedgerDocument:
        """
        Apply a command to the current document.

        Returns:
            The current document after the command

        Raises:
            MutationError: If the command was rejected (document unchanged)
        """
        with self._lock:
            try:
                next_doc = apply_command(self._document, command, self._clock())
            except MutationError as e:
                self._activity.log_command_rejected(command.kind, str(e))
                raise

            if next_doc is self._document:
                self._activity.log_command_ignored(command.kind)
                return self._document

            self._document = next_doc
            self._schedule_save(next_doc)

        self._activity.log_command_applied(
            command.kind,
            command.model_dump(mode="json", exclude={"kind"}),
        )
        return next_doc

    def reset(self) -> LedgerDocument:
        """Discard everything and start from the default document."""
        with self._lock:
            self._document = LedgerDocument.empty(self._clock())
            self._schedule_save(self._document)
        self._activity.log_document_reset()
        return self._document

    def replace(self, document: LedgerDocument, reason: str = "replaced") -> LedgerDocument:
        """Swap in a complete document (used by import)."""
        with self._lock:
            self._document = document
            self._schedule_save(document)
        self._activity.log_document_replaced(reason)
        return document

    # =========================================================================
    # FILES
    # =========================================================================

    def export_payload(
        self,
        filename: Optional[str] = None,
        prefix: Optional[str] = None,
    ) -> tuple[str, bytes]:
        """
        (file name, JSON bytes) for a download.

        Nothing is logged here; call record_export once the download
        actually happens.
        """
        prefix = prefix or get_settings().app.export_filename_prefix
        name = normalize_export_filename(filename, prefix=prefix)
        return name, export_document(self._document)

    def record_export(self, filename: str, size: int) -> None:
        self._activity.log_document_exported(filename, size)

    def export_to(
        self,
        directory: Path,
        filename: Optional[str] = None,
        prefix: Optional[str] = None,
    ) -> Path:
        """Write the export file into a directory and return its path."""
        prefix = prefix or get_settings().app.export_filename_prefix
        target = write_export(self._document, directory, filename, prefix=prefix)
        self.record_export(target.name, target.stat().st_size)
        return target

    def import_from(
        self,
        source: Union[bytes, str, Path],
        filename: Optional[str] = None,
    ) -> ValidationResult:
        """
        Replace the current document with an imported one.

        Args:
            source: File content (bytes/str) or a path to the file
            filename: Name used in log messages

        Returns:
            Invariant check of the imported document

        Raises:
            DocumentImportError: If the file isn't a ledger document.
                The current document is kept.
        """
        if isinstance(source, Path):
            filename = filename or source.name
            try:
                payload: Union[bytes, str] = source.read_bytes()
            except OSError as e:
                self._activity.log_import_failed(filename, str(e))
                raise DocumentImportError(f"Cannot read {source}: {e}")
        else:
            payload = source
        filename = filename or "upload"

        try:
            data = parse_payload(payload)
            legacy = is_legacy_document(data)
            document = build_document(data)
        except DocumentImportError as e:
            self._activity.log_import_failed(filename, str(e))
            raise

        result = self._validator.check_invariants(document)
        self.replace(document, reason=f"imported {filename}")
        self._activity.log_document_imported(filename, len(result.issues), legacy)
        return result


class ReportFlow:
    """
    Read-side flow for the report and reconciliation pages.

    Nothing here changes the document.
    """

    def __init__(
        self,
        store: LedgerStore,
        narrative_agent: Optional[NarrativeAgent] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        self._store = store
        self._agent = narrative_agent
        self._settings = app_settings or get_settings().app

    @property
    def settings(self) -> AppSettings:
        return self._settings

    def summary(self) -> LedgerSummary:
        return summarize(
            self._store.document,
            tolerance=self._settings.settle_tolerance,
            first=self._settings.honorarium_category,
        )

    def canonical(self) -> tuple[list[ReportLine], ReportTotals]:
        document = self._store.document
        return (
            canonical_report(document, first=self._settings.honorarium_category),
            canonical_totals(document),
        )

    def editable(self) -> tuple[list[ReportLine], ReportTotals]:
        document = self._store.document
        return (
            editable_report(document, first=self._settings.honorarium_category),
            editable_totals(document),
        )

    async def narrative(self) -> str:
        """Narrative summary text. Never raises."""
        if self._agent is None:
            self._agent = NarrativeAgent()
        return await self._agent.generate_report(self.summary())


def create_app_components(
    use_storage: bool = True,
) -> tuple[LedgerStore, ReportFlow]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to persist to the local data directory.
                    Set to False for an in-memory ledger.

    Returns:
        (ledger_store, report_flow)
    """
    activity_logger = ActivityLogger()
    storage: DocumentStorageInterface

    if use_storage:
        try:
            local = LocalFileDocumentStorage()
            local.prepare()
            storage = local
        except StorageError as e:
            # Data directory unusable - continue in memory
            activity_logger.log_error("storage_unavailable", str(e))
            storage = InMemoryDocumentStorage()
    else:
        storage = InMemoryDocumentStorage()

    store = LedgerStore(storage=storage, activity_logger=activity_logger)
    report_flow = ReportFlow(
        store=store,
        narrative_agent=NarrativeAgent(activity=activity_logger),
    )
    return store, report_flow
