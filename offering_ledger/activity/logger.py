"""
Activity Logger

DESIGN DECISION: Every significant action is logged as a structured
event. This provides:
1. Traceability of every change to the ledger
2. Debugging capability
3. Visibility into background failures (saves run off the UI thread)

The activity logger:
- Is synchronous; it only writes log lines
- Has no storage backend; events exist only in the log output
"""

from typing import Any, Optional

import structlog

from offering_ledger.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivitySeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class ActivityLogger:
    """
    Central activity logging service.

    Args:
        logger: Anything with debug/info/warning/error methods taking
                an event name and keyword fields. Defaults to structlog.
    """

    def __init__(self, logger: Optional[Any] = None):
        self._logger = logger or structlog.get_logger("offering_ledger")

    def log(self, event: ActivityEvent) -> ActivityEvent:
        """Write an event to the log and return it."""
        log_dict = event.to_log_dict()

        if event.severity == ActivitySeverity.ERROR:
            self._logger.error("activity_event", **log_dict)
        elif event.severity == ActivitySeverity.WARNING:
            self._logger.warning("activity_event", **log_dict)
        elif event.severity == ActivitySeverity.DEBUG:
            self._logger.debug("activity_event", **log_dict)
        else:
            self._logger.info("activity_event", **log_dict)

        return event

    def log_command_applied(self, command_kind: str, details: dict) -> None:
        self.log(ActivityEventBuilder.command_applied(command_kind, details))

    def log_command_ignored(self, command_kind: str) -> None:
        self.log(ActivityEventBuilder.command_ignored(command_kind))

    def log_command_rejected(self, command_kind: str, reason: str) -> None:
        self.log(ActivityEventBuilder.command_rejected(command_kind, reason))

    def log_document_loaded(self, source: str, found: bool) -> None:
        self.log(ActivityEventBuilder.document_loaded(source, found))

    def log_document_reset(self) -> None:
        self.log(ActivityEventBuilder.document_reset())

    def log_document_replaced(self, reason: str) -> None:
        self.log(ActivityEventBuilder.document_replaced(reason))

    def log_document_saved(self, target: str) -> None:
        self.log(ActivityEventBuilder.document_saved(target))

    def log_save_failed(self, error_message: str) -> None:
        self.log(ActivityEventBuilder.save_failed(error_message))

    def log_load_failed(self, error_message: str) -> None:
        self.log(ActivityEventBuilder.load_failed(error_message))

    def log_document_imported(self, filename: str, issue_count: int, legacy: bool) -> None:
        self.log(ActivityEventBuilder.document_imported(filename, issue_count, legacy))

    def log_import_failed(self, filename: str, error_message: str) -> None:
        self.log(ActivityEventBuilder.import_failed(filename, error_message))

    def log_document_exported(self, filename: str, size: int) -> None:
        self.log(ActivityEventBuilder.document_exported(filename, size))

    def log_narrative_generated(self, model_name: str, length: int) -> None:
        self.log(ActivityEventBuilder.narrative_generated(model_name, length))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.log(ActivityEventBuilder.system_error(error_type, error_message, details))

    def log_external_service_error(self, service: str, error_message: str) -> None:
        self.log(ActivityEventBuilder.external_service_error(service, error_message))
