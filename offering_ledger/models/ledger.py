"""
Core Data Models for the Offering Ledger

The whole ledger is ONE document. Every screen reads from it and every user
action replaces it with a new version.

DESIGN DECISION: The document stores raw inputs only, plus the per-category
expense totals which are kept equal to the sum of their detail lines.
Everything else (income totals, bank net, reconciliation) is derived on read
by the aggregation engine.

Links between entities use generated ids instead of matching by value:
- A personal detail line points at its institutional counterpart
  (linked_category + linked_detail_id)
- The counterpart points back at its source (source_detail_id)
- A bank withdrawal points at the personal category it settles
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)


# =============================================================================
# ENUMS & CONSTANTS
# =============================================================================

class ServiceDay(str, Enum):
    """Assembly days, in display order."""
    SUNDAY = "Sunday"
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"


class ServiceTime(str, Enum):
    """Service time slots, in display order."""
    DAWN = "Dawn"
    MIDDAY = "Midday"
    EVENING = "Evening"


class ExpenseBook(str, Enum):
    """
    The two independent expense namespaces.

    INSTITUTIONAL expenses are what the church pays and reports.
    PERSONAL expenses are reimbursable spending by the treasurer.
    """
    INSTITUTIONAL = "institutional"
    PERSONAL = "personal"


class DetailKind(str, Enum):
    """
    What a detail line represents.

    WITHDRAWAL_MARKER replaces the reserved marker name: it flags that a
    bank withdrawal was executed for the category and carries no amount.
    """
    EXPENSE = "expense"
    WITHDRAWAL_MARKER = "withdrawal_marker"


class BankRecordType(str, Enum):
    """Direction of a bank record."""
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


DAYS: tuple[ServiceDay, ...] = tuple(ServiceDay)
TIMES: tuple[ServiceTime, ...] = tuple(ServiceTime)

# Face values in KRW, largest first
DENOMINATIONS: tuple[int, ...] = (50000, 10000, 5000, 1000, 100)

HONORARIUM_CATEGORY = "Instructor Honorarium"

INITIAL_EXPENSE_CATEGORIES: tuple[str, ...] = (
    HONORARIUM_CATEGORY,
    "Lodging & Hospitality",
    "Church Appreciation",
    "Praise Team",
    "Superintendent Honorarium",
    "Staff Honorarium",
    "Operations",
    "Printing & Promotion",
    "Evaluation Meeting",
)

WITHDRAWAL_MARKER_LABEL = "[Withdrawn from bank]"

# Sunday only has the evening service
INVALID_SLOTS: frozenset[tuple[ServiceDay, ServiceTime]] = frozenset({
    (ServiceDay.SUNDAY, ServiceTime.DAWN),
    (ServiceDay.SUNDAY, ServiceTime.MIDDAY),
})


def utc_now() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


# =============================================================================
# LINE-LEVEL MODELS
# =============================================================================

class DetailLine(BaseModel):
    """
    A single dated, named, amount-bearing entry under an expense category.

    Insertion order in the category's list is display order.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Stable line identifier"
    )
    name: str = Field(
        ...,
        description="What the money was spent on"
    )
    amount: int = Field(
        default=0,
        ge=0,
        description="Amount in KRW"
    )
    entry_date: Optional[date] = Field(
        default=None,
        description="Day the line was recorded"
    )
    kind: DetailKind = Field(
        default=DetailKind.EXPENSE
    )

    # Personal line -> institutional counterpart
    linked_category: Optional[str] = None
    linked_detail_id: Optional[UUID] = None

    # Institutional counterpart -> personal source
    source_detail_id: Optional[UUID] = None

    @property
    def is_linked(self) -> bool:
        """True for institutional lines created by personal-expense sync."""
        return self.source_detail_id is not None

    @property
    def is_synced(self) -> bool:
        """True for personal lines that have an institutional counterpart."""
        return self.linked_detail_id is not None

    @property
    def is_withdrawal_marker(self) -> bool:
        return self.kind == DetailKind.WITHDRAWAL_MARKER

    @property
    def display_name(self) -> str:
        if self.is_withdrawal_marker:
            return WITHDRAWAL_MARKER_LABEL
        return self.name


class BankRecord(BaseModel):
    """A deposit into or withdrawal from the assembly bank account."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1)
    amount: int = Field(default=0, ge=0, description="Amount in KRW")
    type: BankRecordType = BankRecordType.DEPOSIT
    entry_date: Optional[date] = None
    personal_category: Optional[str] = Field(
        default=None,
        description="Personal category this withdrawal settles"
    )

    @property
    def signed_amount(self) -> int:
        """Positive for deposits, negative for withdrawals."""
        if self.type == BankRecordType.WITHDRAW:
            return -self.amount
        return self.amount


class ReportOverride(BaseModel):
    """
    Presentation-only replacement for one category in the editable report.

    None means "inherit the canonical value".
    """
    name: Optional[str] = None
    amount: Optional[int] = Field(default=None, ge=0)

    @property
    def is_empty(self) -> bool:
        return self.name is None and self.amount is None


# =============================================================================
# THE DOCUMENT
# =============================================================================

class LedgerDocument(BaseModel):
    """
    The single ledger document.

    CRITICAL: expenses[c] always equals the sum of expense_details[c]
    amounts (same for the personal pair). Only the mutation layer writes
    these maps, and it recomputes the total whenever a line changes.
    """

    counting: dict[str, dict[str, dict[int, int]]] = Field(
        default_factory=dict,
        description="day -> time -> denomination -> quantity"
    )
    manual_count: dict[int, int] = Field(
        default_factory=dict,
        description="Physically recounted cash: denomination -> quantity"
    )
    attendance: dict[str, dict[str, int]] = Field(
        default_factory=dict,
        description="day -> time -> headcount"
    )

    expenses: dict[str, int] = Field(default_factory=dict)
    expense_details: dict[str, list[DetailLine]] = Field(default_factory=dict)
    personal_expenses: dict[str, int] = Field(default_factory=dict)
    personal_expense_details: dict[str, list[DetailLine]] = Field(
        default_factory=dict
    )

    bank_records: list[BankRecord] = Field(default_factory=list)

    report_overrides: dict[str, ReportOverride] = Field(default_factory=dict)

    last_updated: datetime = Field(default_factory=utc_now)

    @classmethod
    def empty(cls, now: Optional[datetime] = None) -> "LedgerDocument":
        """
        The default document: nothing recorded, institutional
        categories pre-seeded at zero.
        """
        return cls(
            expenses={name: 0 for name in INITIAL_EXPENSE_CATEGORIES},
            last_updated=now or utc_now(),
        )

    def amounts(self, book: ExpenseBook) -> dict[str, int]:
        """Category -> total map for the given book."""
        if book == ExpenseBook.PERSONAL:
            return self.personal_expenses
        return self.expenses

    def details(self, book: ExpenseBook) -> dict[str, list[DetailLine]]:
        """Category -> detail lines map for the given book."""
        if book == ExpenseBook.PERSONAL:
            return self.personal_expense_details
        return self.expense_details

    def find_detail(
        self,
        book: ExpenseBook,
        category: str,
        detail_id: UUID,
    ) -> Optional[DetailLine]:
        """Look up a line by id inside one category."""
        for line in self.details(book).get(category, []):
            if line.id == detail_id:
                return line
        return None

    def to_json(self) -> str:
        """Pretty-printed JSON, as written to storage and export files."""
        return self.model_dump_json(indent=2)
