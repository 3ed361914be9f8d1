"""
Linkage Manager

Keeps three entity families consistent with each other:
1. Personal-expense detail lines
2. Their institutional-expense counterparts (created by "sync")
3. Bank withdrawals executed against a personal category

LINK MODEL:
- personal.linked_category / personal.linked_detail_id -> counterpart
- counterpart.source_detail_id -> personal line
- A counterpart always has the same name and amount as its source

State per personal line: unsynced, or synced(category).

IMPORTANT: These functions mutate the document they are given. The
mutation layer only ever passes its own private copy, so callers of the
mutation layer never observe a partially-updated document.

Counterpart lookups degrade gracefully: if a counterpart can't be found
the personal-side change still completes and the link is cleared.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from offering_ledger.errors import InvalidRequestError, LinkedDetailError
from offering_ledger.models.ledger import (
    DetailKind,
    DetailLine,
    ExpenseBook,
    LedgerDocument,
    WITHDRAWAL_MARKER_LABEL,
)


def recompute_total(
    document: LedgerDocument,
    book: ExpenseBook,
    category: str,
) -> int:
    """Set the category total to the sum of its lines and return it."""
    total = sum(line.amount for line in document.details(book).get(category, []))
    document.amounts(book)[category] = total
    return total


def _clear_link(line: DetailLine) -> None:
    line.linked_category = None
    line.linked_detail_id = None


def _locate_counterpart(
    document: LedgerDocument,
    line: DetailLine,
) -> Optional[tuple[str, int]]:
    """
    Find (category, index) of the counterpart of a personal line.

    Looks in the linked category first, then scans every institutional
    category for a line whose source is this personal line.
    """
    if line.linked_category is not None and line.linked_detail_id is not None:
        lines = document.expense_details.get(line.linked_category, [])
        for index, candidate in enumerate(lines):
            if candidate.id == line.linked_detail_id:
                return line.linked_category, index

    for category, lines in document.expense_details.items():
        for index, candidate in enumerate(lines):
            if candidate.source_detail_id == line.id:
                return category, index

    return None


def _attach_counterpart(
    document: LedgerDocument,
    line: DetailLine,
    target_category: str,
) -> Optional[DetailLine]:
    """Create the institutional counterpart of a personal line."""
    if target_category not in document.expenses:
        _clear_link(line)
        return None

    counterpart = DetailLine(
        name=line.name,
        amount=line.amount,
        entry_date=line.entry_date,
        source_detail_id=line.id,
    )
    document.expense_details.setdefault(target_category, []).append(counterpart)
    line.linked_category = target_category
    line.linked_detail_id = counterpart.id
    recompute_total(document, ExpenseBook.INSTITUTIONAL, target_category)
    return counterpart


def _detach_counterpart(document: LedgerDocument, line: DetailLine) -> bool:
    """
    Remove the counterpart of a personal line, if there is one.

    Returns True when a counterpart was found and removed.
    """
    location = _locate_counterpart(document, line)
    _clear_link(line)
    if location is None:
        return False

    category, index = location
    del document.expense_details[category][index]
    recompute_total(document, ExpenseBook.INSTITUTIONAL, category)
    return True


def _normalize_target(
    document: LedgerDocument,
    sync_category: Optional[str],
) -> Optional[str]:
    """Unknown or empty sync targets count as "no target"."""
    if sync_category and sync_category in document.expenses:
        return sync_category
    return None


# =============================================================================
# PERSONAL DETAIL LINES
# =============================================================================

def add_personal_detail(
    document: LedgerDocument,
    category: str,
    name: str,
    amount: int,
    sync_category: Optional[str] = None,
    entry_date: Optional[date] = None,
) -> DetailLine:
    """
    Append a personal line, and its counterpart when a sync target is given.
    """
    line = DetailLine(name=name, amount=amount, entry_date=entry_date)
    document.personal_expense_details.setdefault(category, []).append(line)
    recompute_total(document, ExpenseBook.PERSONAL, category)

    target = _normalize_target(document, sync_category)
    if target is not None:
        _attach_counterpart(document, line, target)

    return line


def edit_personal_detail(
    document: LedgerDocument,
    category: str,
    detail_id: UUID,
    name: str,
    amount: int,
    sync_category: Optional[str] = None,
    disconnect: bool = False,
) -> DetailLine:
    """
    Rename/re-amount a personal line and carry the change to its counterpart.

    - disconnect: the counterpart is removed and the line becomes unsynced
    - a different sync target: the counterpart moves to the new category
    - same or no target while synced: the counterpart is updated in place
    - unsynced and no target: only the personal line changes
    """
    line = document.find_detail(ExpenseBook.PERSONAL, category, detail_id)
    if line is None:
        raise InvalidRequestError(f"No such expense line in '{category}'")
    if line.is_withdrawal_marker:
        raise InvalidRequestError("The withdrawal marker can't be edited")

    line.name = name
    line.amount = amount
    recompute_total(document, ExpenseBook.PERSONAL, category)

    target = _normalize_target(document, sync_category)
    current = line.linked_category if line.is_synced else None

    if disconnect:
        _detach_counterpart(document, line)
    elif target is not None and target != current:
        _detach_counterpart(document, line)
        _attach_counterpart(document, line, target)
    elif current is not None:
        location = _locate_counterpart(document, line)
        if location is None:
            _clear_link(line)
        else:
            linked_category, index = location
            counterpart = document.expense_details[linked_category][index]
            counterpart.name = name
            counterpart.amount = amount
            line.linked_category = linked_category
            recompute_total(document, ExpenseBook.INSTITUTIONAL, linked_category)

    return line


def remove_personal_detail(
    document: LedgerDocument,
    category: str,
    detail_id: UUID,
) -> DetailLine:
    """Delete a personal line together with its counterpart."""
    lines = document.personal_expense_details.get(category, [])
    for index, line in enumerate(lines):
        if line.id == detail_id:
            break
    else:
        raise InvalidRequestError(f"No such expense line in '{category}'")

    del lines[index]
    recompute_total(document, ExpenseBook.PERSONAL, category)
    _detach_counterpart(document, line)
    return line


# =============================================================================
# INSTITUTIONAL GUARD
# =============================================================================

def find_source_category(
    document: LedgerDocument,
    counterpart: DetailLine,
) -> Optional[str]:
    """Personal category holding the source of a linked institutional line."""
    if counterpart.source_detail_id is None:
        return None
    for category, lines in document.personal_expense_details.items():
        if any(line.id == counterpart.source_detail_id for line in lines):
            return category
    return None


def ensure_institutional_line_editable(
    document: LedgerDocument,
    category: str,
    line: DetailLine,
) -> None:
    """Refuse direct changes to a line that is owned by a personal expense."""
    if line.is_linked:
        raise LinkedDetailError(
            category=category,
            line_name=line.name,
            source_category=find_source_category(document, line),
        )


# =============================================================================
# CATEGORY-LEVEL CASCADES
# =============================================================================

def retarget_links(document: LedgerDocument, old_name: str, new_name: str) -> int:
    """Point personal links at a renamed institutional category."""
    changed = 0
    for lines in document.personal_expense_details.values():
        for line in lines:
            if line.linked_category == old_name:
                line.linked_category = new_name
                changed += 1
    return changed


def unlink_institutional_category(document: LedgerDocument, category: str) -> int:
    """Personal lines synced with a deleted institutional category become unsynced."""
    changed = 0
    for lines in document.personal_expense_details.values():
        for line in lines:
            if line.linked_category == category:
                _clear_link(line)
                changed += 1
    return changed


def drop_counterparts_of_personal_category(
    document: LedgerDocument,
    category: str,
) -> int:
    """Remove the counterparts of every line of a personal category."""
    removed = 0
    for line in document.personal_expense_details.get(category, []):
        if _detach_counterpart(document, line):
            removed += 1
    return removed


# =============================================================================
# BANK WITHDRAWAL MARKERS
# =============================================================================

def has_withdrawal_marker(document: LedgerDocument, category: str) -> bool:
    return any(
        line.is_withdrawal_marker
        for line in document.personal_expense_details.get(category, [])
    )


def mark_withdrawn(
    document: LedgerDocument,
    category: str,
    entry_date: Optional[date] = None,
) -> bool:
    """
    Flag a personal category as withdrawn.

    Idempotent: returns False when the marker is already there.
    The category total is NOT reduced - the marker carries no amount.
    """
    if has_withdrawal_marker(document, category):
        return False
    document.personal_expense_details.setdefault(category, []).append(
        DetailLine(
            name=WITHDRAWAL_MARKER_LABEL,
            amount=0,
            entry_date=entry_date,
            kind=DetailKind.WITHDRAWAL_MARKER,
        )
    )
    recompute_total(document, ExpenseBook.PERSONAL, category)
    return True


def clear_withdrawal_marker(document: LedgerDocument, category: str) -> bool:
    """Drop the withdrawal marker of a personal category, if present."""
    lines = document.personal_expense_details.get(category)
    if not lines:
        return False
    kept = [line for line in lines if not line.is_withdrawal_marker]
    if len(kept) == len(lines):
        return False
    document.personal_expense_details[category] = kept
    recompute_total(document, ExpenseBook.PERSONAL, category)
    return True


# =============================================================================
# VALUE-BASED RELINKING (legacy documents)
# =============================================================================

def relink_by_value(document: LedgerDocument) -> int:
    """
    Recreate sync links for documents that never stored them.

    Each unsynced personal line claims the first unclaimed institutional
    line with the same name and amount. Duplicate (name, amount) pairs
    are paired in order of appearance.
    """
    claimed: set[UUID] = set()
    for lines in document.expense_details.values():
        for line in lines:
            if line.is_linked:
                claimed.add(line.id)

    linked = 0
    for lines in document.personal_expense_details.values():
        for line in lines:
            if line.is_synced or line.is_withdrawal_marker:
                continue
            match = _first_unclaimed(document, line, claimed)
            if match is None:
                continue
            category, counterpart = match
            claimed.add(counterpart.id)
            counterpart.source_detail_id = line.id
            line.linked_category = category
            line.linked_detail_id = counterpart.id
            linked += 1
    return linked


def _first_unclaimed(
    document: LedgerDocument,
    line: DetailLine,
    claimed: set[UUID],
) -> Optional[tuple[str, DetailLine]]:
    for category, candidates in document.expense_details.items():
        for candidate in candidates:
            if candidate.id in claimed:
                continue
            if candidate.name == line.name and candidate.amount == line.amount:
                return category, candidate
    return None
