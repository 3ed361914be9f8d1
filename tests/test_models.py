"""
Tests for the Offering Ledger

Test strategy:
1. Unit tests for individual components (models, validators, engine)
2. Flow tests for the store with in-memory storage
3. No real API calls in tests (the Gemini model is a stub)
"""

import pytest
from datetime import date, datetime, timezone

from offering_ledger.models import (
    DENOMINATIONS,
    HONORARIUM_CATEGORY,
    INITIAL_EXPENSE_CATEGORIES,
    WITHDRAWAL_MARKER_LABEL,
    BankRecord,
    BankRecordType,
    DetailKind,
    DetailLine,
    ExpenseBook,
    LedgerDocument,
    ReportOverride,
    ServiceDay,
    ServiceTime,
    ValidationIssue,
    ValidationResult,
)
from offering_ledger.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)


class TestLedgerModels:
    """Tests for the document Pydantic models."""

    def test_detail_line_defaults(self):
        """Test DetailLine defaults to an unlinked expense."""
        line = DetailLine(name="Taxi", amount=12000)
        assert line.kind == DetailKind.EXPENSE
        assert line.is_linked is False
        assert line.is_synced is False
        assert line.is_withdrawal_marker is False
        assert line.display_name == "Taxi"

    def test_detail_line_ids_are_unique(self):
        """Two identical lines still get different ids."""
        first = DetailLine(name="Taxi", amount=12000)
        second = DetailLine(name="Taxi", amount=12000)
        assert first.id != second.id

    def test_detail_line_strips_whitespace(self):
        """Test that whitespace is stripped from names."""
        line = DetailLine(name="  Snacks  ", amount=100)
        assert line.name == "Snacks"

    def test_detail_line_rejects_negative_amount(self):
        """Test that negative amounts are rejected at the model level."""
        with pytest.raises(ValueError):
            DetailLine(name="Test", amount=-100)

    def test_withdrawal_marker_display_name(self):
        """Test the marker always displays its fixed label."""
        marker = DetailLine(name="anything", kind=DetailKind.WITHDRAWAL_MARKER)
        assert marker.is_withdrawal_marker is True
        assert marker.display_name == WITHDRAWAL_MARKER_LABEL

    def test_bank_record_signed_amount(self):
        """Deposits count positive, withdrawals negative."""
        deposit = BankRecord(name="Sunday offering", amount=50000)
        withdraw = BankRecord(name="Travel", amount=12000, type=BankRecordType.WITHDRAW)
        assert deposit.signed_amount == 50000
        assert withdraw.signed_amount == -12000

    def test_bank_record_requires_name(self):
        """Test that an empty bank record name is rejected."""
        with pytest.raises(ValueError):
            BankRecord(name="   ", amount=100)

    def test_report_override_is_empty(self):
        """Test the inherit-everything override."""
        assert ReportOverride().is_empty is True
        assert ReportOverride(name="Guest speaker").is_empty is False
        assert ReportOverride(amount=0).is_empty is False


class TestLedgerDocument:
    """Tests for the LedgerDocument container."""

    def test_empty_document_seeds_categories(self):
        """Test the default document seeds institutional categories at zero."""
        document = LedgerDocument.empty()
        assert list(document.expenses) == list(INITIAL_EXPENSE_CATEGORIES)
        assert all(amount == 0 for amount in document.expenses.values())
        assert list(document.expenses)[0] == HONORARIUM_CATEGORY
        assert document.personal_expenses == {}
        assert document.bank_records == []
        assert document.report_overrides == {}

    def test_empty_document_uses_given_time(self):
        """Test last_updated comes from the caller's clock."""
        now = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        assert LedgerDocument.empty(now).last_updated == now

    def test_book_accessors(self):
        """Test amounts()/details() select the right namespace."""
        document = LedgerDocument.empty()
        document.personal_expenses["Travel"] = 0
        assert "Travel" in document.amounts(ExpenseBook.PERSONAL)
        assert "Travel" not in document.amounts(ExpenseBook.INSTITUTIONAL)
        assert document.details(ExpenseBook.PERSONAL) is document.personal_expense_details

    def test_find_detail(self):
        """Test lookup by id within a category."""
        document = LedgerDocument.empty()
        line = DetailLine(name="Flowers", amount=30000)
        document.expense_details["Operations"] = [line]
        assert document.find_detail(ExpenseBook.INSTITUTIONAL, "Operations", line.id) is line
        assert document.find_detail(ExpenseBook.INSTITUTIONAL, "Praise Team", line.id) is None

    def test_json_roundtrip_keeps_integer_denominations(self):
        """Denomination keys come back as integers after a JSON trip."""
        document = LedgerDocument.empty()
        document.counting = {"Monday": {"Dawn": {50000: 2, 100: 7}}}
        document.manual_count = {10000: 3}
        document.expense_details["Operations"] = [
            DetailLine(name="Flowers", amount=30000, entry_date=date(2026, 3, 2))
        ]
        document.expenses["Operations"] = 30000

        restored = LedgerDocument.model_validate_json(document.to_json())

        assert restored.counting["Monday"]["Dawn"][50000] == 2
        assert restored.manual_count[10000] == 3
        assert restored == document

    def test_constants(self):
        """Test the fixed days, times and denominations."""
        assert [day.value for day in ServiceDay] == ["Sunday", "Monday", "Tuesday", "Wednesday"]
        assert [time.value for time in ServiceTime] == ["Dawn", "Midday", "Evening"]
        assert DENOMINATIONS == (50000, 10000, 5000, 1000, 100)


class TestActivityModels:
    """Tests for activity event models."""

    def test_activity_event_creation(self):
        """Test ActivityEvent model creation."""
        event = ActivityEvent(
            event_type=ActivityEventType.DOCUMENT_SAVED,
            description="Saved",
        )
        assert event.severity == ActivitySeverity.INFO
        assert event.is_user_action is False

    def test_activity_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = ActivityEventBuilder.command_applied(
            "add_detail", {"category": "Operations"}
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "command_applied"
        assert log_dict["details"]["command"] == "add_detail"
        assert log_dict["details"]["category"] == "Operations"
        assert log_dict["is_user_action"] is True

    def test_builder_save_failed_is_error(self):
        """Test ActivityEventBuilder.save_failed."""
        event = ActivityEventBuilder.save_failed("disk full")
        assert event.event_type == ActivityEventType.SAVE_FAILED
        assert event.severity == ActivitySeverity.ERROR
        assert event.error_message == "disk full"

    def test_builder_command_rejected_is_warning(self):
        """Test ActivityEventBuilder.command_rejected."""
        event = ActivityEventBuilder.command_rejected("add_category", "Please enter a name")
        assert event.severity == ActivitySeverity.WARNING
        assert event.error_message == "Please enter a name"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="expenses.Operations",
                    issue_type="total_mismatch",
                    message="Total does not match",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="expense_details.Operations",
                    issue_type="orphan_counterpart",
                    message="Source missing",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.warnings == ["Source missing"]

    def test_validation_issue_rejects_unknown_severity(self):
        """Test severity is restricted."""
        with pytest.raises(ValueError):
            ValidationIssue(
                field="x",
                issue_type="y",
                message="z",
                severity="fatal",
            )


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
