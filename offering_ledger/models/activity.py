"""
Activity Models for the Offering Ledger

Every mutation, import, export and reset produces an activity event.
This provides:
1. Traceability in the application log
2. Debugging information when something goes wrong
3. A record of external-service failures that the UI only shows as
   a fallback message

DESIGN DECISION: Events are log lines only. There is no history store;
the document itself is the only persisted state.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from offering_ledger.models.ledger import utc_now


class ActivityEventType(str, Enum):
    """Types of events we log."""
    # Mutations
    COMMAND_APPLIED = "command_applied"
    COMMAND_IGNORED = "command_ignored"
    COMMAND_REJECTED = "command_rejected"

    # Document lifecycle
    DOCUMENT_LOADED = "document_loaded"
    DOCUMENT_RESET = "document_reset"
    DOCUMENT_REPLACED = "document_replaced"

    # Persistence
    DOCUMENT_SAVED = "document_saved"
    SAVE_FAILED = "save_failed"
    LOAD_FAILED = "load_failed"

    # Files
    DOCUMENT_IMPORTED = "document_imported"
    IMPORT_FAILED = "import_failed"
    DOCUMENT_EXPORTED = "document_exported"

    # Narrative report
    NARRATIVE_GENERATED = "narrative_generated"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single activity event."""

    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )
    event_type: ActivityEventType = Field(
        ...,
        description="Type of event"
    )
    severity: ActivitySeverity = Field(
        default=ActivitySeverity.INFO,
        description="Event severity"
    )
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None
    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.command_applied("add_detail", {...})
        event = ActivityEventBuilder.save_failed("disk full")
    """

    @staticmethod
    def command_applied(command_kind: str, details: dict) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.COMMAND_APPLIED,
            description=f"Ledger updated: {command_kind}",
            details={"command": command_kind, **details},
            is_user_action=True,
        )

    @staticmethod
    def command_ignored(command_kind: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.COMMAND_IGNORED,
            severity=ActivitySeverity.DEBUG,
            description=f"No change: {command_kind}",
            details={"command": command_kind},
            is_user_action=True,
        )

    @staticmethod
    def command_rejected(command_kind: str, reason: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.COMMAND_REJECTED,
            severity=ActivitySeverity.WARNING,
            description=f"Request rejected: {command_kind}",
            details={"command": command_kind},
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def document_loaded(source: str, found: bool) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DOCUMENT_LOADED,
            description=(
                f"Ledger loaded from {source}"
                if found
                else f"No ledger in {source}, starting fresh"
            ),
            details={"source": source, "found": found},
        )

    @staticmethod
    def document_reset() -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DOCUMENT_RESET,
            severity=ActivitySeverity.WARNING,
            description="All ledger data was reset",
            is_user_action=True,
        )

    @staticmethod
    def document_replaced(reason: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DOCUMENT_REPLACED,
            description=f"Ledger replaced: {reason}",
            details={"reason": reason},
        )

    @staticmethod
    def document_saved(target: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DOCUMENT_SAVED,
            severity=ActivitySeverity.DEBUG,
            description=f"Ledger saved to {target}",
            details={"target": target},
        )

    @staticmethod
    def save_failed(error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SAVE_FAILED,
            severity=ActivitySeverity.ERROR,
            description="Ledger could not be saved",
            error_message=error_message,
        )

    @staticmethod
    def load_failed(error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOAD_FAILED,
            severity=ActivitySeverity.ERROR,
            description="Stored ledger could not be read, starting fresh",
            error_message=error_message,
        )

    @staticmethod
    def document_imported(
        filename: str,
        issue_count: int,
        legacy: bool,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DOCUMENT_IMPORTED,
            description=f"Ledger imported from {filename}",
            details={
                "filename": filename,
                "issue_count": issue_count,
                "legacy_format": legacy,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_failed(filename: str, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.IMPORT_FAILED,
            severity=ActivitySeverity.WARNING,
            description=f"Import rejected: {filename}",
            details={"filename": filename},
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def document_exported(filename: str, size: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DOCUMENT_EXPORTED,
            description=f"Ledger exported as {filename}",
            details={"filename": filename, "size_bytes": size},
            is_user_action=True,
        )

    @staticmethod
    def narrative_generated(model_name: str, length: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.NARRATIVE_GENERATED,
            description="Narrative report generated",
            details={"model": model_name, "length": length},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SYSTEM_ERROR,
            severity=ActivitySeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )

    @staticmethod
    def external_service_error(service: str, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.EXTERNAL_SERVICE_ERROR,
            severity=ActivitySeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={"service": service},
        )
