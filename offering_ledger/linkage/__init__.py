"""Linkage package."""

from offering_ledger.linkage.manager import (
    add_personal_detail,
    clear_withdrawal_marker,
    drop_counterparts_of_personal_category,
    edit_personal_detail,
    ensure_institutional_line_editable,
    find_source_category,
    has_withdrawal_marker,
    mark_withdrawn,
    recompute_total,
    relink_by_value,
    remove_personal_detail,
    retarget_links,
    unlink_institutional_category,
)

__all__ = [
    "add_personal_detail",
    "clear_withdrawal_marker",
    "drop_counterparts_of_personal_category",
    "edit_personal_detail",
    "ensure_institutional_line_editable",
    "find_source_category",
    "has_withdrawal_marker",
    "mark_withdrawn",
    "recompute_total",
    "relink_by_value",
    "remove_personal_detail",
    "retarget_links",
    "unlink_institutional_category",
]
