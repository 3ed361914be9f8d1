"""Aggregation package."""

from offering_ledger.aggregation.engine import (
    DEFAULT_SETTLE_TOLERANCE,
    attendance_total,
    bank_net,
    counting_total,
    day_attendance_total,
    day_income_total,
    is_settled,
    is_time_valid,
    manual_cash_total,
    net_book_balance,
    ordered_categories,
    physical_cash_total,
    reconciliation_difference,
    reconciliation_status,
    report_amount,
    report_expense_total,
    report_net_balance,
    summarize,
    total_accumulated_offering,
    total_attendance,
    total_expenses,
    total_personal_expenses,
)

__all__ = [
    "DEFAULT_SETTLE_TOLERANCE",
    "attendance_total",
    "bank_net",
    "counting_total",
    "day_attendance_total",
    "day_income_total",
    "is_settled",
    "is_time_valid",
    "manual_cash_total",
    "net_book_balance",
    "ordered_categories",
    "physical_cash_total",
    "reconciliation_difference",
    "reconciliation_status",
    "report_amount",
    "report_expense_total",
    "report_net_balance",
    "summarize",
    "total_accumulated_offering",
    "total_attendance",
    "total_expenses",
    "total_personal_expenses",
]
