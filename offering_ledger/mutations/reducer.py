"""
Mutation Reducer

apply_command(document, command, now) -> document

GUARANTEES:
- The input document is never modified. Changes are made on a deep copy.
- Every change stamps last_updated with the operation's timestamp.
- A no-op (adding an existing category, renaming to the same name, ...)
  returns the SAME document object, unstamped.
- A rejected request raises a MutationError before anything is copied.

Validation policy:
- Quantities/amounts are coerced to non-negative integers, never rejected
- Names are trimmed; empty category and line names are rejected
- Service slots that don't exist are rejected
"""

from datetime import date, datetime
from typing import Callable, Optional

from offering_ledger.aggregation.engine import is_time_valid
from offering_ledger.errors import InvalidRequestError
from offering_ledger.linkage import manager as linkage
from offering_ledger.models.ledger import (
    DENOMINATIONS,
    BankRecord,
    BankRecordType,
    DetailLine,
    ExpenseBook,
    LedgerDocument,
    ReportOverride,
)
from offering_ledger.mutations.commands import (
    AddBankRecord,
    AddCategory,
    AddDetail,
    DeleteCategory,
    EditDetail,
    LedgerCommand,
    RemoveBankRecord,
    RemoveDetail,
    RenameCategory,
    ResetReportOverrides,
    SetReportOverride,
    UpdateAttendance,
    UpdateCounting,
    UpdateManualCount,
)
from offering_ledger.validation.validator import (
    coerce_digits,
    coerce_non_negative_int,
    normalize_name,
)


def _copy(document: LedgerDocument) -> LedgerDocument:
    return document.model_copy(deep=True)


def _entry_date(now: datetime) -> date:
    """Calendar day of the operation in local time."""
    if now.tzinfo is None:
        return now.date()
    return now.astimezone().date()


def _require_slot(day: str, time: str) -> None:
    if not is_time_valid(day, time):
        raise InvalidRequestError(f"There is no {time} service on {day}")


def _require_denomination(denomination: int) -> None:
    if denomination not in DENOMINATIONS:
        raise InvalidRequestError(f"Unknown denomination: {denomination}")


def _require_category(document: LedgerDocument, book: ExpenseBook, category: str) -> None:
    if category not in document.amounts(book):
        raise InvalidRequestError(f"Unknown category: '{category}'")


def _require_line(
    document: LedgerDocument,
    book: ExpenseBook,
    category: str,
    detail_id,
) -> DetailLine:
    _require_category(document, book, category)
    line = document.find_detail(book, category, detail_id)
    if line is None:
        raise InvalidRequestError(f"No such expense line in '{category}'")
    return line


def _rename_key(mapping: dict, old: str, new: str) -> dict:
    """Rename a key while keeping the mapping's order."""
    return {(new if key == old else key): value for key, value in mapping.items()}


# =============================================================================
# COUNTS
# =============================================================================

def _update_counting(document, command: UpdateCounting, now) -> LedgerDocument:
    _require_slot(command.day, command.time)
    _require_denomination(command.denomination)
    quantity = coerce_non_negative_int(command.value)

    next_doc = _copy(document)
    slot = next_doc.counting.setdefault(command.day, {}).setdefault(command.time, {})
    slot[command.denomination] = quantity
    return next_doc


def _update_attendance(document, command: UpdateAttendance, now) -> LedgerDocument:
    _require_slot(command.day, command.time)
    count = coerce_non_negative_int(command.value)

    next_doc = _copy(document)
    next_doc.attendance.setdefault(command.day, {})[command.time] = count
    return next_doc


def _update_manual_count(document, command: UpdateManualCount, now) -> LedgerDocument:
    _require_denomination(command.denomination)
    quantity = coerce_non_negative_int(command.value)

    next_doc = _copy(document)
    next_doc.manual_count[command.denomination] = quantity
    return next_doc


# =============================================================================
# CATEGORIES
# =============================================================================

def _add_category(document, command: AddCategory, now) -> LedgerDocument:
    name = normalize_name(command.name)
    if not name:
        raise InvalidRequestError("Please enter a category name")
    if name in document.amounts(command.book):
        return document

    next_doc = _copy(document)
    next_doc.amounts(command.book)[name] = 0
    return next_doc


def _rename_category(document, command: RenameCategory, now) -> LedgerDocument:
    old = command.old_name
    new = normalize_name(command.new_name)
    book = command.book
    if not new or new == old:
        return document
    _require_category(document, book, old)
    if new in document.amounts(book):
        return document

    next_doc = _copy(document)
    if book == ExpenseBook.PERSONAL:
        next_doc.personal_expenses = _rename_key(next_doc.personal_expenses, old, new)
        next_doc.personal_expense_details = _rename_key(
            next_doc.personal_expense_details, old, new
        )
        for record in next_doc.bank_records:
            if record.personal_category == old:
                record.personal_category = new
    else:
        next_doc.expenses = _rename_key(next_doc.expenses, old, new)
        next_doc.expense_details = _rename_key(next_doc.expense_details, old, new)
        next_doc.report_overrides = _rename_key(next_doc.report_overrides, old, new)
        linkage.retarget_links(next_doc, old, new)
    return next_doc


def _delete_category(document, command: DeleteCategory, now) -> LedgerDocument:
    name = command.name
    book = command.book
    if name not in document.amounts(book) and name not in document.details(book):
        return document

    next_doc = _copy(document)
    if book == ExpenseBook.PERSONAL:
        linkage.drop_counterparts_of_personal_category(next_doc, name)
        for record in next_doc.bank_records:
            if record.personal_category == name:
                record.personal_category = None
    else:
        linkage.unlink_institutional_category(next_doc, name)
        next_doc.report_overrides.pop(name, None)

    next_doc.amounts(book).pop(name, None)
    next_doc.details(book).pop(name, None)
    return next_doc


# =============================================================================
# DETAIL LINES
# =============================================================================

def _add_detail(document, command: AddDetail, now) -> LedgerDocument:
    _require_category(document, command.book, command.category)
    name = normalize_name(command.name)
    if not name:
        raise InvalidRequestError("Please enter what the expense was for")
    amount = coerce_non_negative_int(command.amount)
    entry_date = _entry_date(now)

    next_doc = _copy(document)
    if command.book == ExpenseBook.PERSONAL:
        linkage.add_personal_detail(
            next_doc,
            command.category,
            name,
            amount,
            sync_category=command.sync_category,
            entry_date=entry_date,
        )
    else:
        next_doc.expense_details.setdefault(command.category, []).append(
            DetailLine(name=name, amount=amount, entry_date=entry_date)
        )
        linkage.recompute_total(next_doc, ExpenseBook.INSTITUTIONAL, command.category)
    return next_doc


def _edit_detail(document, command: EditDetail, now) -> LedgerDocument:
    line = _require_line(document, command.book, command.category, command.detail_id)
    name = normalize_name(command.name)
    if not name:
        raise InvalidRequestError("Please enter what the expense was for")
    amount = coerce_non_negative_int(command.amount)

    if command.book == ExpenseBook.PERSONAL:
        if line.is_withdrawal_marker:
            raise InvalidRequestError("The withdrawal marker can't be edited")
        next_doc = _copy(document)
        linkage.edit_personal_detail(
            next_doc,
            command.category,
            command.detail_id,
            name,
            amount,
            sync_category=command.sync_category,
            disconnect=command.disconnect,
        )
        return next_doc

    linkage.ensure_institutional_line_editable(document, command.category, line)
    next_doc = _copy(document)
    target = next_doc.find_detail(command.book, command.category, command.detail_id)
    target.name = name
    target.amount = amount
    linkage.recompute_total(next_doc, ExpenseBook.INSTITUTIONAL, command.category)
    return next_doc


def _remove_detail(document, command: RemoveDetail, now) -> LedgerDocument:
    line = _require_line(document, command.book, command.category, command.detail_id)

    if command.book == ExpenseBook.PERSONAL:
        next_doc = _copy(document)
        linkage.remove_personal_detail(next_doc, command.category, command.detail_id)
        return next_doc

    linkage.ensure_institutional_line_editable(document, command.category, line)
    next_doc = _copy(document)
    next_doc.expense_details[command.category] = [
        kept for kept in next_doc.expense_details[command.category]
        if kept.id != command.detail_id
    ]
    linkage.recompute_total(next_doc, ExpenseBook.INSTITUTIONAL, command.category)
    return next_doc


# =============================================================================
# BANK RECORDS
# =============================================================================

def _add_bank_record(document, command: AddBankRecord, now) -> LedgerDocument:
    personal_category: Optional[str] = None

    if command.type == BankRecordType.WITHDRAW and command.personal_category:
        personal_category = command.personal_category
        _require_category(document, ExpenseBook.PERSONAL, personal_category)
        name = personal_category
        amount = document.personal_expenses[personal_category]
    else:
        name = normalize_name(command.name)
        amount = coerce_non_negative_int(command.amount)

    if not name:
        raise InvalidRequestError("Please enter a description for the bank record")

    entry_date = _entry_date(now)
    next_doc = _copy(document)
    next_doc.bank_records.append(BankRecord(
        name=name,
        amount=amount,
        type=command.type,
        entry_date=entry_date,
        personal_category=personal_category,
    ))
    if personal_category is not None:
        linkage.mark_withdrawn(next_doc, personal_category, entry_date)
    return next_doc


def _remove_bank_record(document, command: RemoveBankRecord, now) -> LedgerDocument:
    for index, record in enumerate(document.bank_records):
        if record.id == command.record_id:
            break
    else:
        raise InvalidRequestError("No such bank record")

    next_doc = _copy(document)
    removed = next_doc.bank_records.pop(index)

    category = removed.personal_category
    if removed.type == BankRecordType.WITHDRAW and category is not None:
        still_withdrawn = any(
            other.type == BankRecordType.WITHDRAW
            and other.personal_category == category
            for other in next_doc.bank_records
        )
        if not still_withdrawn:
            linkage.clear_withdrawal_marker(next_doc, category)
    return next_doc


# =============================================================================
# REPORT OVERRIDES
# =============================================================================

def _set_report_override(document, command: SetReportOverride, now) -> LedgerDocument:
    _require_category(document, ExpenseBook.INSTITUTIONAL, command.category)
    override = ReportOverride(
        name=normalize_name(command.name) or None,
        amount=None if command.amount is None else coerce_digits(command.amount),
    )
    if document.report_overrides.get(command.category) == override:
        return document
    if override.is_empty and command.category not in document.report_overrides:
        return document

    next_doc = _copy(document)
    if override.is_empty:
        next_doc.report_overrides.pop(command.category, None)
    else:
        next_doc.report_overrides[command.category] = override
    return next_doc


def _reset_report_overrides(document, command: ResetReportOverrides, now) -> LedgerDocument:
    if not document.report_overrides:
        return document
    next_doc = _copy(document)
    next_doc.report_overrides = {}
    return next_doc


_HANDLERS: dict[type, Callable] = {
    UpdateCounting: _update_counting,
    UpdateAttendance: _update_attendance,
    UpdateManualCount: _update_manual_count,
    AddCategory: _add_category,
    RenameCategory: _rename_category,
    DeleteCategory: _delete_category,
    AddDetail: _add_detail,
    EditDetail: _edit_detail,
    RemoveDetail: _remove_detail,
    AddBankRecord: _add_bank_record,
    RemoveBankRecord: _remove_bank_record,
    SetReportOverride: _set_report_override,
    ResetReportOverrides: _reset_report_overrides,
}


def apply_command(
    document: LedgerDocument,
    command: LedgerCommand,
    now: datetime,
) -> LedgerDocument:
    """
    Apply one command and return the resulting document.

    Raises:
        InvalidRequestError: the request is structurally invalid
        LinkedDetailError: a linked institutional line was changed directly
    """
    handler = _HANDLERS.get(type(command))
    if handler is None:
        raise InvalidRequestError(f"Unsupported command: {type(command).__name__}")

    next_doc = handler(document, command, now)
    if next_doc is document:
        return document

    next_doc.last_updated = now
    return next_doc
