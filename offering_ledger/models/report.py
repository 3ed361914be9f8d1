"""
Derived Models

Nothing in this module is persisted. These are the shapes the aggregation
engine and the report projection hand to the UI and to the narrative agent.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ReconciliationStatus(str, Enum):
    """
    Outcome of comparing physical assets against the book balance.

    SETTLED means the difference is within tolerance.
    """
    SETTLED = "settled"
    SURPLUS = "surplus"      # More cash/bank than the books say
    SHORTAGE = "shortage"    # Less cash/bank than the books say


class CategoryTotal(BaseModel):
    """One category's total, for breakdowns."""

    category: str
    amount: int
    line_count: int = Field(default=0, ge=0)


class LedgerSummary(BaseModel):
    """
    Every aggregate figure of a ledger document in one place.

    Built by aggregation.summarize(). The narrative agent only ever sees
    this object, never the document itself.
    """

    total_offering: int
    total_expenses: int
    total_personal_expenses: int
    net_book_balance: int

    total_attendance: int

    manual_cash_total: int
    bank_net: int
    physical_cash_total: int
    reconciliation_difference: int
    reconciliation_status: ReconciliationStatus

    report_expense_total: int
    report_net_balance: int

    day_income: dict[str, int] = Field(default_factory=dict)
    day_attendance: dict[str, int] = Field(default_factory=dict)
    expense_breakdown: list[CategoryTotal] = Field(default_factory=list)

    @property
    def is_settled(self) -> bool:
        return self.reconciliation_status == ReconciliationStatus.SETTLED


class ReportLine(BaseModel):
    """A row of the settlement report table."""

    category: str = Field(
        ...,
        description="Category key in the document"
    )
    display_name: str = Field(
        ...,
        description="Name shown on the report"
    )
    amount: int
    canonical_amount: int
    detail_names: list[str] = Field(default_factory=list)
    is_overridden: bool = False


class ReportTotals(BaseModel):
    """Bottom lines of a report projection."""

    income: int
    expenses: int
    net_balance: int
    attendance: Optional[int] = None
