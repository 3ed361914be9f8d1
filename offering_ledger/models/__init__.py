"""
Data Models Package

This package contains all Pydantic models used by the Offering Ledger.
The ledger document and everything derived from it conform to these schemas.
"""

from offering_ledger.models.ledger import (
    DAYS,
    DENOMINATIONS,
    HONORARIUM_CATEGORY,
    INITIAL_EXPENSE_CATEGORIES,
    INVALID_SLOTS,
    TIMES,
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
    utc_now,
)
from offering_ledger.models.report import (
    CategoryTotal,
    LedgerSummary,
    ReconciliationStatus,
    ReportLine,
    ReportTotals,
)
from offering_ledger.models.validation import (
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Document models
    "DAYS",
    "DENOMINATIONS",
    "HONORARIUM_CATEGORY",
    "INITIAL_EXPENSE_CATEGORIES",
    "INVALID_SLOTS",
    "TIMES",
    "WITHDRAWAL_MARKER_LABEL",
    "BankRecord",
    "BankRecordType",
    "DetailKind",
    "DetailLine",
    "ExpenseBook",
    "LedgerDocument",
    "ReportOverride",
    "ServiceDay",
    "ServiceTime",
    "utc_now",
    # Derived models
    "CategoryTotal",
    "LedgerSummary",
    "ReconciliationStatus",
    "ReportLine",
    "ReportTotals",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
]
