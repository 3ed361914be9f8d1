"""
Tests for the aggregation engine.
"""

import pytest

from offering_ledger.aggregation import (
    attendance_total,
    bank_net,
    counting_total,
    day_income_total,
    is_time_valid,
    manual_cash_total,
    net_book_balance,
    ordered_categories,
    physical_cash_total,
    reconciliation_difference,
    reconciliation_status,
    report_expense_total,
    summarize,
    total_accumulated_offering,
    total_attendance,
    total_expenses,
)
from offering_ledger.models import (
    HONORARIUM_CATEGORY,
    BankRecord,
    BankRecordType,
    DetailLine,
    LedgerDocument,
    ReconciliationStatus,
    ReportOverride,
)


def make_document() -> LedgerDocument:
    """Monday dawn 120,000 counted, 30,000 spent on Operations."""
    document = LedgerDocument.empty()
    document.counting = {"Monday": {"Dawn": {50000: 2, 10000: 2}}}
    document.attendance = {"Monday": {"Dawn": 40, "Evening": 55}}
    document.expense_details["Operations"] = [DetailLine(name="Flowers", amount=30000)]
    document.expenses["Operations"] = 30000
    return document


class TestSlots:
    """Tests for day/time validity."""

    def test_sunday_only_has_evening(self):
        """Sunday dawn and midday don't exist."""
        assert is_time_valid("Sunday", "Dawn") is False
        assert is_time_valid("Sunday", "Midday") is False
        assert is_time_valid("Sunday", "Evening") is True
        assert is_time_valid("Tuesday", "Dawn") is True

    def test_unknown_labels_are_invalid(self):
        assert is_time_valid("Friday", "Dawn") is False
        assert is_time_valid("Monday", "Noon") is False

    def test_invalid_slot_counts_as_zero(self):
        """Stored data for a slot that doesn't exist is ignored."""
        document = LedgerDocument.empty()
        document.counting = {"Sunday": {"Dawn": {50000: 10}, "Evening": {1000: 3}}}
        document.attendance = {"Sunday": {"Midday": 99, "Evening": 20}}

        assert counting_total(document, "Sunday", "Dawn") == 0
        assert day_income_total(document, "Sunday") == 3000
        assert attendance_total(document, "Sunday", "Midday") == 0
        assert total_attendance(document) == 20


class TestTotals:
    """Tests for income, expense and balance totals."""

    def test_income_and_expenses(self):
        document = make_document()
        assert counting_total(document, "Monday", "Dawn") == 120000
        assert total_accumulated_offering(document) == 120000
        assert total_expenses(document) == 30000
        assert net_book_balance(document) == 90000
        assert total_attendance(document) == 95

    def test_total_expenses_is_sum_of_categories(self):
        """Total expenses always equal the sum of category totals."""
        document = make_document()
        document.expenses["Praise Team"] = 5000
        assert total_expenses(document) == sum(document.expenses.values())

    def test_bank_net(self):
        """Deposits minus withdrawals."""
        document = LedgerDocument.empty()
        document.bank_records = [
            BankRecord(name="Deposit", amount=100000),
            BankRecord(name="Travel", amount=12000, type=BankRecordType.WITHDRAW),
        ]
        assert bank_net(document) == 88000


class TestReconciliation:
    """Tests for the physical-vs-book comparison."""

    def test_reconciliation_identity(self):
        document = make_document()
        document.manual_count = {10000: 5}
        document.bank_records = [BankRecord(name="Deposit", amount=40000)]

        assert manual_cash_total(document) == 50000
        assert physical_cash_total(document) == 90000
        assert (
            physical_cash_total(document) - net_book_balance(document)
            == reconciliation_difference(document)
        )
        assert reconciliation_status(document) == ReconciliationStatus.SETTLED

    @pytest.mark.parametrize("extra,expected", [
        (0, ReconciliationStatus.SETTLED),
        (9, ReconciliationStatus.SETTLED),
        (-9, ReconciliationStatus.SETTLED),
        (10, ReconciliationStatus.SURPLUS),
        (-10, ReconciliationStatus.SHORTAGE),
    ])
    def test_tolerance_boundary(self, extra, expected):
        """Differences strictly under 10 count as settled."""
        document = make_document()
        document.bank_records = [
            BankRecord(name="Deposit", amount=90000),
            BankRecord(
                name="Adjustment",
                amount=abs(extra),
                type=BankRecordType.DEPOSIT if extra >= 0 else BankRecordType.WITHDRAW,
            ),
        ]
        assert reconciliation_difference(document) == extra
        assert reconciliation_status(document) == expected


class TestReportFigures:
    """Tests for ordering and report totals."""

    def test_honorarium_leads(self):
        document = LedgerDocument.empty()
        document.expenses = {"Operations": 0, "Praise Team": 0, HONORARIUM_CATEGORY: 0}
        assert ordered_categories(document) == [
            HONORARIUM_CATEGORY,
            "Operations",
            "Praise Team",
        ]

    def test_report_total_uses_overrides(self):
        document = make_document()
        document.report_overrides["Operations"] = ReportOverride(amount=25000)
        assert report_expense_total(document) == 25000
        assert total_expenses(document) == 30000

    def test_summarize(self):
        summary = summarize(make_document())
        assert summary.total_offering == 120000
        assert summary.net_book_balance == 90000
        assert summary.day_income["Monday"] == 120000
        assert summary.expense_breakdown[0].category == HONORARIUM_CATEGORY
        assert summary.reconciliation_status == ReconciliationStatus.SHORTAGE


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
