"""
Tests for the linkage manager.

These call the manager directly on a document built in the test; the
reducer-level behaviour is covered in test_mutations.py.
"""

import pytest

from offering_ledger.errors import InvalidRequestError, LinkedDetailError
from offering_ledger.linkage import (
    add_personal_detail,
    clear_withdrawal_marker,
    edit_personal_detail,
    ensure_institutional_line_editable,
    has_withdrawal_marker,
    mark_withdrawn,
    relink_by_value,
    remove_personal_detail,
)
from offering_ledger.models import DetailLine, LedgerDocument


@pytest.fixture
def document():
    doc = LedgerDocument.empty()
    doc.personal_expenses["Travel"] = 0
    return doc


class TestPersonalSync:
    """Tests for counterpart creation, movement and removal."""

    def test_add_with_sync_creates_counterpart(self, document):
        line = add_personal_detail(document, "Travel", "Taxi", 12000, "Operations")

        counterpart = document.expense_details["Operations"][0]
        assert counterpart.source_detail_id == line.id
        assert line.linked_detail_id == counterpart.id
        assert line.linked_category == "Operations"
        assert document.expenses["Operations"] == 12000
        assert document.personal_expenses["Travel"] == 12000

    def test_unknown_target_means_no_sync(self, document):
        line = add_personal_detail(document, "Travel", "Taxi", 12000, "Nowhere")
        assert line.is_synced is False
        assert "Nowhere" not in document.expense_details

    def test_edit_updates_counterpart_in_place(self, document):
        line = add_personal_detail(document, "Travel", "Taxi", 12000, "Operations")
        edit_personal_detail(document, "Travel", line.id, "Bus", 3000)

        counterpart = document.expense_details["Operations"][0]
        assert (counterpart.name, counterpart.amount) == ("Bus", 3000)
        assert document.expenses["Operations"] == 3000

    def test_edit_disconnect_removes_counterpart(self, document):
        line = add_personal_detail(document, "Travel", "Taxi", 12000, "Operations")
        edit_personal_detail(document, "Travel", line.id, "Taxi", 12000, disconnect=True)

        assert document.expense_details["Operations"] == []
        assert document.expenses["Operations"] == 0
        assert line.is_synced is False

    def test_remove_drops_counterpart(self, document):
        line = add_personal_detail(document, "Travel", "Taxi", 12000, "Operations")
        remove_personal_detail(document, "Travel", line.id)

        assert document.personal_expenses["Travel"] == 0
        assert document.expenses["Operations"] == 0

    def test_duplicate_lines_keep_their_own_counterparts(self, document):
        """Two identical lines are still told apart by id."""
        first = add_personal_detail(document, "Travel", "Taxi", 12000, "Operations")
        second = add_personal_detail(document, "Travel", "Taxi", 12000, "Operations")
        edit_personal_detail(document, "Travel", second.id, "Taxi", 15000)

        counterparts = document.expense_details["Operations"]
        assert [c.amount for c in counterparts] == [12000, 15000]
        assert counterparts[0].source_detail_id == first.id

    def test_unknown_line_raises(self, document):
        with pytest.raises(InvalidRequestError):
            remove_personal_detail(document, "Travel", DetailLine(name="x").id)

    def test_counterpart_is_locked(self, document):
        add_personal_detail(document, "Travel", "Taxi", 12000, "Operations")
        counterpart = document.expense_details["Operations"][0]

        with pytest.raises(LinkedDetailError) as exc_info:
            ensure_institutional_line_editable(document, "Operations", counterpart)
        assert exc_info.value.source_category == "Travel"


class TestWithdrawalMarker:
    """Tests for the withdrawal marker."""

    def test_mark_withdrawn_is_idempotent(self, document):
        assert mark_withdrawn(document, "Travel") is True
        assert mark_withdrawn(document, "Travel") is False

        markers = [
            line for line in document.personal_expense_details["Travel"]
            if line.is_withdrawal_marker
        ]
        assert len(markers) == 1

    def test_marker_does_not_change_total(self, document):
        add_personal_detail(document, "Travel", "Taxi", 12000)
        mark_withdrawn(document, "Travel")
        assert document.personal_expenses["Travel"] == 12000

    def test_clear_marker(self, document):
        mark_withdrawn(document, "Travel")
        assert clear_withdrawal_marker(document, "Travel") is True
        assert has_withdrawal_marker(document, "Travel") is False
        assert clear_withdrawal_marker(document, "Travel") is False


class TestRelinkByValue:
    """Tests for rebuilding links in documents that never stored them."""

    def test_pairs_lines_in_order(self):
        document = LedgerDocument.empty()
        document.personal_expenses["Travel"] = 24000
        document.personal_expense_details["Travel"] = [
            DetailLine(name="Taxi", amount=12000),
            DetailLine(name="Taxi", amount=12000),
            DetailLine(name="Snacks", amount=500),
        ]
        document.expenses["Operations"] = 24000
        document.expense_details["Operations"] = [
            DetailLine(name="Taxi", amount=12000),
            DetailLine(name="Taxi", amount=12000),
        ]

        assert relink_by_value(document) == 2

        personal = document.personal_expense_details["Travel"]
        institutional = document.expense_details["Operations"]
        assert personal[0].linked_detail_id == institutional[0].id
        assert personal[1].linked_detail_id == institutional[1].id
        assert personal[2].is_synced is False
        assert relink_by_value(document) == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
