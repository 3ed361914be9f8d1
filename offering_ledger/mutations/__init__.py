"""Mutation package: commands and the reducer that applies them."""

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
from offering_ledger.mutations.reducer import apply_command

__all__ = [
    "AddBankRecord",
    "AddCategory",
    "AddDetail",
    "DeleteCategory",
    "EditDetail",
    "LedgerCommand",
    "RemoveBankRecord",
    "RemoveDetail",
    "RenameCategory",
    "ResetReportOverrides",
    "SetReportOverride",
    "UpdateAttendance",
    "UpdateCounting",
    "UpdateManualCount",
    "apply_command",
]
