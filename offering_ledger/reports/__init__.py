"""Report view projection."""

from offering_ledger.reports.projection import (
    canonical_report,
    canonical_totals,
    editable_report,
    editable_totals,
)

__all__ = [
    "canonical_report",
    "canonical_totals",
    "editable_report",
    "editable_totals",
]
