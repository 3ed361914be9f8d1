"""
Report View Projection

Two read surfaces over the institutional expense set:
- canonical report: expenses/expense_details as recorded
- editable report: the same rows with per-category name/amount overrides

IMPORTANT: Nothing here writes to the document. Overrides are changed
only through the SetReportOverride / ResetReportOverrides commands, and
they never feed back into expenses or expense_details.
"""

from offering_ledger.aggregation.engine import (
    ordered_categories,
    report_expense_total,
    total_accumulated_offering,
    total_attendance,
    total_expenses,
)
from offering_ledger.models.ledger import HONORARIUM_CATEGORY, LedgerDocument
from offering_ledger.models.report import ReportLine, ReportTotals


def _detail_names(document: LedgerDocument, category: str) -> list[str]:
    return [
        line.display_name
        for line in document.expense_details.get(category, [])
        if not line.is_withdrawal_marker
    ]


def canonical_report(
    document: LedgerDocument,
    first: str = HONORARIUM_CATEGORY,
) -> list[ReportLine]:
    """Rows of the settlement report, honorarium first."""
    rows = []
    for category in ordered_categories(document, first):
        amount = document.expenses[category]
        rows.append(ReportLine(
            category=category,
            display_name=category,
            amount=amount,
            canonical_amount=amount,
            detail_names=_detail_names(document, category),
        ))
    return rows


def editable_report(
    document: LedgerDocument,
    first: str = HONORARIUM_CATEGORY,
) -> list[ReportLine]:
    """
    Rows of the presentation copy.

    A category without an override (or with a None part) inherits the
    canonical name/amount.
    """
    rows = []
    for line in canonical_report(document, first):
        override = document.report_overrides.get(line.category)
        if override is None or override.is_empty:
            rows.append(line)
            continue
        rows.append(line.model_copy(update={
            "display_name": override.name if override.name is not None else line.display_name,
            "amount": override.amount if override.amount is not None else line.amount,
            "is_overridden": True,
        }))
    return rows


def canonical_totals(document: LedgerDocument) -> ReportTotals:
    income = total_accumulated_offering(document)
    expenses = total_expenses(document)
    return ReportTotals(
        income=income,
        expenses=expenses,
        net_balance=income - expenses,
        attendance=total_attendance(document),
    )


def editable_totals(document: LedgerDocument) -> ReportTotals:
    income = total_accumulated_offering(document)
    expenses = report_expense_total(document)
    return ReportTotals(
        income=income,
        expenses=expenses,
        net_balance=income - expenses,
        attendance=total_attendance(document),
    )
