"""
Tests for the canonical and editable report projections.
"""

import pytest

from offering_ledger.models import (
    HONORARIUM_CATEGORY,
    DetailKind,
    DetailLine,
    LedgerDocument,
    ReportOverride,
)
from offering_ledger.reports import (
    canonical_report,
    canonical_totals,
    editable_report,
    editable_totals,
)


@pytest.fixture
def document():
    doc = LedgerDocument.empty()
    doc.counting = {"Wednesday": {"Evening": {50000: 4}}}
    doc.attendance = {"Wednesday": {"Evening": 80}}
    doc.expense_details[HONORARIUM_CATEGORY] = [DetailLine(name="Rev. Kim", amount=100000)]
    doc.expenses[HONORARIUM_CATEGORY] = 100000
    doc.expense_details["Operations"] = [
        DetailLine(name="Flowers", amount=30000),
        DetailLine(name="ignored", kind=DetailKind.WITHDRAWAL_MARKER),
    ]
    doc.expenses["Operations"] = 30000
    return doc


class TestCanonicalReport:
    """Tests for the report as recorded."""

    def test_rows_follow_category_order(self, document):
        rows = canonical_report(document)
        assert [row.category for row in rows] == list(document.expenses)
        assert rows[0].category == HONORARIUM_CATEGORY

    def test_detail_names_skip_markers(self, document):
        operations = next(
            row for row in canonical_report(document) if row.category == "Operations"
        )
        assert operations.detail_names == ["Flowers"]
        assert operations.amount == operations.canonical_amount == 30000

    def test_totals(self, document):
        totals = canonical_totals(document)
        assert totals.income == 200000
        assert totals.expenses == 130000
        assert totals.net_balance == 70000
        assert totals.attendance == 80


class TestEditableReport:
    """Tests for the presentation copy."""

    def test_without_overrides_matches_canonical(self, document):
        assert editable_report(document) == canonical_report(document)
        assert editable_totals(document) == canonical_totals(document)

    def test_override_replaces_only_given_parts(self, document):
        document.report_overrides["Operations"] = ReportOverride(amount=20000)
        document.report_overrides[HONORARIUM_CATEGORY] = ReportOverride(name="Guest speaker")

        rows = {row.category: row for row in editable_report(document)}

        assert rows["Operations"].display_name == "Operations"
        assert rows["Operations"].amount == 20000
        assert rows["Operations"].canonical_amount == 30000
        assert rows["Operations"].is_overridden is True
        assert rows[HONORARIUM_CATEGORY].display_name == "Guest speaker"
        assert rows[HONORARIUM_CATEGORY].amount == 100000
        assert rows["Praise Team"].is_overridden is False

    def test_editable_totals_use_overrides(self, document):
        document.report_overrides["Operations"] = ReportOverride(amount=20000)
        totals = editable_totals(document)
        assert totals.expenses == 120000
        assert totals.net_balance == 80000
        assert totals.attendance == 80
        assert document.expenses["Operations"] == 30000


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
