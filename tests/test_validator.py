"""
Tests for input coercion and the invariant checker.
"""

import pytest

from offering_ledger.models import DetailLine, LedgerDocument
from offering_ledger.validation import (
    LedgerValidator,
    coerce_digits,
    coerce_non_negative_int,
    normalize_name,
)


class TestCoercion:
    """Tests for free-text number coercion."""

    @pytest.mark.parametrize("raw,expected", [
        ("12", 12),
        ("1,200", 1200),
        ("12abc", 12),
        ("abc", 0),
        ("", 0),
        ("-500", 0),
        (None, 0),
        (3.7, 3),
        (-2, 0),
        (True, 0),
    ])
    def test_coerce_non_negative_int(self, raw, expected):
        """Test quantity/amount coercion rules."""
        assert coerce_non_negative_int(raw) == expected

    def test_coerce_digits_strips_currency(self):
        """Test that currency symbols and separators are dropped."""
        assert coerce_digits("₩1,200원") == 1200
        assert coerce_digits("") == 0
        assert coerce_digits(None) == 0
        assert coerce_digits(500) == 500

    def test_normalize_name(self):
        """Test name trimming."""
        assert normalize_name("  Snacks ") == "Snacks"
        assert normalize_name(None) == ""
        assert normalize_name("   ") == ""


class TestInvariantChecker:
    """Tests for LedgerValidator.check_invariants."""

    @pytest.fixture
    def validator(self):
        return LedgerValidator()

    def test_empty_document_is_valid(self, validator):
        """The default document has no issues."""
        result = validator.check_invariants(LedgerDocument.empty())
        assert result.is_valid is True
        assert result.issues == []

    def test_total_mismatch(self, validator):
        """A total that differs from its lines is an error."""
        document = LedgerDocument.empty()
        document.expense_details["Operations"] = [DetailLine(name="Flowers", amount=30000)]
        document.expenses["Operations"] = 10000

        result = validator.check_invariants(document)

        assert result.is_valid is False
        assert any(issue.issue_type == "total_mismatch" for issue in result.issues)

    def test_broken_link(self, validator):
        """A synced personal line without a counterpart is an error."""
        document = LedgerDocument.empty()
        orphan = DetailLine(
            name="Taxi",
            amount=12000,
            linked_category="Operations",
            linked_detail_id=DetailLine(name="gone").id,
        )
        document.personal_expenses["Travel"] = 12000
        document.personal_expense_details["Travel"] = [orphan]

        result = validator.check_invariants(document)

        assert result.is_valid is False
        assert any(issue.issue_type == "broken_link" for issue in result.issues)

    def test_orphan_counterpart_is_warning(self, validator):
        """A linked institutional line whose source is gone is only a warning."""
        document = LedgerDocument.empty()
        document.expense_details["Operations"] = [
            DetailLine(name="Taxi", amount=12000, source_detail_id=DetailLine(name="x").id)
        ]
        document.expenses["Operations"] = 12000

        result = validator.check_invariants(document)

        assert result.is_valid is True
        assert len(result.warnings) == 1

    def test_user_friendly_summary(self, validator):
        """Test the message shown after an import."""
        clean = validator.check_invariants(LedgerDocument.empty())
        assert "consistent" in validator.get_user_friendly_summary(clean)

        document = LedgerDocument.empty()
        document.expenses["Operations"] = 5
        broken = validator.check_invariants(document)
        summary = validator.get_user_friendly_summary(broken)
        assert "inconsistencies" in summary
        assert "Operations" in summary


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
