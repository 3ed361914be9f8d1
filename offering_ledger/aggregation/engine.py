"""
Aggregation Engine

Pure functions that derive every total from a ledger document.

DESIGN DECISION: Nothing is cached. The document is small and every
figure is recomputed on read, so a total can never go stale after a
mutation.

All amounts are integers (KRW). The settle tolerance is a policy choice
that absorbs small counting mistakes, not floating point noise.
"""

from typing import Union

from offering_ledger.models.ledger import (
    DAYS,
    HONORARIUM_CATEGORY,
    INVALID_SLOTS,
    TIMES,
    LedgerDocument,
    ServiceDay,
    ServiceTime,
)
from offering_ledger.models.report import (
    CategoryTotal,
    LedgerSummary,
    ReconciliationStatus,
)


DEFAULT_SETTLE_TOLERANCE = 10

DayLike = Union[ServiceDay, str]
TimeLike = Union[ServiceTime, str]


def _day_key(day: DayLike) -> str:
    return day.value if isinstance(day, ServiceDay) else str(day)


def _time_key(time: TimeLike) -> str:
    return time.value if isinstance(time, ServiceTime) else str(time)


def is_time_valid(day: DayLike, time: TimeLike) -> bool:
    """
    Whether a service exists at this day/time.

    Unknown labels are treated as invalid.
    """
    try:
        slot = (ServiceDay(_day_key(day)), ServiceTime(_time_key(time)))
    except ValueError:
        return False
    return slot not in INVALID_SLOTS


def _face_value_sum(quantities: dict[int, int]) -> int:
    return sum(int(face) * int(qty or 0) for face, qty in quantities.items())


# =============================================================================
# INCOME
# =============================================================================

def counting_total(document: LedgerDocument, day: DayLike, time: TimeLike) -> int:
    """Cash counted for one service. 0 for slots that don't exist."""
    if not is_time_valid(day, time):
        return 0
    quantities = document.counting.get(_day_key(day), {}).get(_time_key(time), {})
    return _face_value_sum(quantities)


def day_income_total(document: LedgerDocument, day: DayLike) -> int:
    return sum(counting_total(document, day, time) for time in TIMES)


def total_accumulated_offering(document: LedgerDocument) -> int:
    return sum(day_income_total(document, day) for day in DAYS)


# =============================================================================
# ATTENDANCE
# =============================================================================

def attendance_total(document: LedgerDocument, day: DayLike, time: TimeLike) -> int:
    """Headcount for one service, missing entries count as zero."""
    if not is_time_valid(day, time):
        return 0
    return int(
        document.attendance.get(_day_key(day), {}).get(_time_key(time), 0) or 0
    )


def day_attendance_total(document: LedgerDocument, day: DayLike) -> int:
    return sum(attendance_total(document, day, time) for time in TIMES)


def total_attendance(document: LedgerDocument) -> int:
    return sum(day_attendance_total(document, day) for day in DAYS)


# =============================================================================
# EXPENSES
# =============================================================================

def total_expenses(document: LedgerDocument) -> int:
    return sum(document.expenses.values())


def total_personal_expenses(document: LedgerDocument) -> int:
    return sum(document.personal_expenses.values())


def net_book_balance(document: LedgerDocument) -> int:
    """What should be left according to the books."""
    return total_accumulated_offering(document) - total_expenses(document)


# =============================================================================
# PHYSICAL ASSETS & RECONCILIATION
# =============================================================================

def manual_cash_total(document: LedgerDocument) -> int:
    """Value of the physically recounted cash."""
    return _face_value_sum(document.manual_count)


def bank_net(document: LedgerDocument) -> int:
    """Deposits minus withdrawals."""
    return sum(record.signed_amount for record in document.bank_records)


def physical_cash_total(document: LedgerDocument) -> int:
    return manual_cash_total(document) + bank_net(document)


def reconciliation_difference(document: LedgerDocument) -> int:
    """Positive when assets exceed the book balance."""
    return physical_cash_total(document) - net_book_balance(document)


def reconciliation_status(
    document: LedgerDocument,
    tolerance: int = DEFAULT_SETTLE_TOLERANCE,
) -> ReconciliationStatus:
    difference = reconciliation_difference(document)
    if abs(difference) < tolerance:
        return ReconciliationStatus.SETTLED
    if difference > 0:
        return ReconciliationStatus.SURPLUS
    return ReconciliationStatus.SHORTAGE


def is_settled(
    document: LedgerDocument,
    tolerance: int = DEFAULT_SETTLE_TOLERANCE,
) -> bool:
    return reconciliation_status(document, tolerance) == ReconciliationStatus.SETTLED


# =============================================================================
# REPORTS
# =============================================================================

def report_amount(document: LedgerDocument, category: str) -> int:
    """Override amount when set, canonical amount otherwise."""
    override = document.report_overrides.get(category)
    if override is not None and override.amount is not None:
        return override.amount
    return document.expenses.get(category, 0)


def report_expense_total(document: LedgerDocument) -> int:
    return sum(report_amount(document, category) for category in document.expenses)


def report_net_balance(document: LedgerDocument) -> int:
    return total_accumulated_offering(document) - report_expense_total(document)


def ordered_categories(
    document: LedgerDocument,
    first: str = HONORARIUM_CATEGORY,
) -> list[str]:
    """
    Institutional categories in report order.

    The honorarium category leads when present; the rest keep
    the document's key order.
    """
    categories = list(document.expenses)
    if first in document.expenses:
        categories.remove(first)
        categories.insert(0, first)
    return categories


def summarize(
    document: LedgerDocument,
    tolerance: int = DEFAULT_SETTLE_TOLERANCE,
    first: str = HONORARIUM_CATEGORY,
) -> LedgerSummary:
    """Compute every aggregate in one pass over the public functions."""
    return LedgerSummary(
        total_offering=total_accumulated_offering(document),
        total_expenses=total_expenses(document),
        total_personal_expenses=total_personal_expenses(document),
        net_book_balance=net_book_balance(document),
        total_attendance=total_attendance(document),
        manual_cash_total=manual_cash_total(document),
        bank_net=bank_net(document),
        physical_cash_total=physical_cash_total(document),
        reconciliation_difference=reconciliation_difference(document),
        reconciliation_status=reconciliation_status(document, tolerance),
        report_expense_total=report_expense_total(document),
        report_net_balance=report_net_balance(document),
        day_income={day.value: day_income_total(document, day) for day in DAYS},
        day_attendance={
            day.value: day_attendance_total(document, day) for day in DAYS
        },
        expense_breakdown=[
            CategoryTotal(
                category=category,
                amount=document.expenses[category],
                line_count=len(document.expense_details.get(category, [])),
            )
            for category in ordered_categories(document, first)
        ],
    )
