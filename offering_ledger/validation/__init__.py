"""Validation package."""

from offering_ledger.validation.validator import (
    LedgerValidator,
    coerce_digits,
    coerce_non_negative_int,
    normalize_name,
)

__all__ = [
    "LedgerValidator",
    "coerce_digits",
    "coerce_non_negative_int",
    "normalize_name",
]
