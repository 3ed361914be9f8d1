"""
Ledger Commands

Every user action is expressed as one of these commands. The reducer
turns (document, command) into a new document.

Raw user input (text typed into a form) is carried as-is in the
value/amount fields; the reducer does the coercion. This keeps the
coercion rules in one place.
"""

from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from offering_ledger.models.ledger import BankRecordType, ExpenseBook

RawNumber = Union[int, float, str, None]


class UpdateCounting(BaseModel):
    """Set the quantity of one denomination for one service."""
    kind: Literal["update_counting"] = "update_counting"
    day: str
    time: str
    denomination: int
    value: RawNumber = None


class UpdateAttendance(BaseModel):
    """Set the headcount of one service."""
    kind: Literal["update_attendance"] = "update_attendance"
    day: str
    time: str
    value: RawNumber = None


class UpdateManualCount(BaseModel):
    """Set the quantity of one denomination in the manual cash recount."""
    kind: Literal["update_manual_count"] = "update_manual_count"
    denomination: int
    value: RawNumber = None


class AddCategory(BaseModel):
    kind: Literal["add_category"] = "add_category"
    book: ExpenseBook = ExpenseBook.INSTITUTIONAL
    name: str = ""


class RenameCategory(BaseModel):
    kind: Literal["rename_category"] = "rename_category"
    book: ExpenseBook = ExpenseBook.INSTITUTIONAL
    old_name: str
    new_name: str = ""


class DeleteCategory(BaseModel):
    kind: Literal["delete_category"] = "delete_category"
    book: ExpenseBook = ExpenseBook.INSTITUTIONAL
    name: str


class AddDetail(BaseModel):
    """
    Add a detail line to a category.

    sync_category only applies to the personal book: the line is
    mirrored into that institutional category.
    """
    kind: Literal["add_detail"] = "add_detail"
    book: ExpenseBook = ExpenseBook.INSTITUTIONAL
    category: str
    name: str = ""
    amount: RawNumber = None
    sync_category: Optional[str] = None


class EditDetail(BaseModel):
    """
    Rename/re-amount a detail line.

    For personal lines, sync_category moves the link and disconnect
    removes it. Both are ignored for institutional lines.
    """
    kind: Literal["edit_detail"] = "edit_detail"
    book: ExpenseBook = ExpenseBook.INSTITUTIONAL
    category: str
    detail_id: UUID
    name: str = ""
    amount: RawNumber = None
    sync_category: Optional[str] = None
    disconnect: bool = False


class RemoveDetail(BaseModel):
    kind: Literal["remove_detail"] = "remove_detail"
    book: ExpenseBook = ExpenseBook.INSTITUTIONAL
    category: str
    detail_id: UUID


class AddBankRecord(BaseModel):
    """
    Record a bank deposit or withdrawal.

    A withdrawal against a personal category takes that category's name
    and current total, and marks the category as withdrawn.
    """
    kind: Literal["add_bank_record"] = "add_bank_record"
    name: str = ""
    amount: RawNumber = None
    type: BankRecordType = BankRecordType.DEPOSIT
    personal_category: Optional[str] = None


class RemoveBankRecord(BaseModel):
    kind: Literal["remove_bank_record"] = "remove_bank_record"
    record_id: UUID


class SetReportOverride(BaseModel):
    """
    Override a category's name and/or amount on the editable report.

    None leaves that part inherited from the canonical report.
    """
    kind: Literal["set_report_override"] = "set_report_override"
    category: str
    name: Optional[str] = None
    amount: RawNumber = None


class ResetReportOverrides(BaseModel):
    kind: Literal["reset_report_overrides"] = "reset_report_overrides"


LedgerCommand = Annotated[
    Union[
        UpdateCounting,
        UpdateAttendance,
        UpdateManualCount,
        AddCategory,
        RenameCategory,
        DeleteCategory,
        AddDetail,
        EditDetail,
        RemoveDetail,
        AddBankRecord,
        RemoveBankRecord,
        SetReportOverride,
        ResetReportOverrides,
    ],
    Field(discriminator="kind"),
]
