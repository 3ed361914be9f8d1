"""
Input Coercion and Invariant Checking

Two jobs live here:

COERCION (used by every mutation):
- Quantity/amount text becomes a non-negative integer
- Non-numeric or empty input becomes 0
- Names are trimmed; empty names are rejected by the caller

INVARIANT CHECKING (used after imports and in tests):
- Category totals equal the sum of their lines
- No negative amounts or quantities
- Sync links point at an existing counterpart with the same name/amount
- At most one withdrawal marker per personal category

IMPORTANT: The checker never fixes anything. It reports issues.
"""

import re
from typing import Any, Optional

from offering_ledger.models.ledger import (
    DetailLine,
    ExpenseBook,
    LedgerDocument,
)
from offering_ledger.models.validation import ValidationIssue, ValidationResult


_LEADING_INT = re.compile(r"^[+-]?\d+")


def coerce_non_negative_int(value: Any) -> int:
    """
    Coerce free-text quantity/amount input to a non-negative integer.

    "12" -> 12, "1,200" -> 1200, "12abc" -> 12, "abc" -> 0, "" -> 0,
    "-500" -> 0, 3.7 -> 3, None -> 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float):
        if value != value:  # NaN
            return 0
        return max(0, int(value))

    text = str(value).strip().replace(",", "").replace("_", "")
    match = _LEADING_INT.match(text)
    if not match:
        return 0
    return max(0, int(match.group()))


def coerce_digits(value: Any) -> int:
    """
    Keep only the digits of the input ("₩1,200원" -> 1200).

    Used by the editable report, where amounts are typed with
    currency symbols and separators.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return max(0, value)
    digits = re.sub(r"[^0-9]", "", str(value or ""))
    return int(digits) if digits else 0


def normalize_name(value: Optional[str]) -> str:
    """Trim a user-entered name. Returns "" for missing input."""
    if value is None:
        return ""
    return str(value).strip()


class LedgerValidator:
    """
    Checks a ledger document against its invariants.

    Errors mean the document is internally inconsistent.
    Warnings flag data the UI would never produce but that does not
    break any computation.
    """

    def _check_book(
        self,
        document: LedgerDocument,
        book: ExpenseBook,
    ) -> list[ValidationIssue]:
        issues = []
        amounts = document.amounts(book)
        details = document.details(book)
        prefix = "personal_expenses" if book == ExpenseBook.PERSONAL else "expenses"

        for category, lines in details.items():
            if category not in amounts:
                issues.append(ValidationIssue(
                    field=f"{prefix}.{category}",
                    issue_type="orphan_details",
                    message=f"Detail lines exist for unknown category '{category}'",
                    severity="error",
                    suggested_fix="Add the category or remove its lines",
                ))

        for category, total in amounts.items():
            if total < 0:
                issues.append(ValidationIssue(
                    field=f"{prefix}.{category}",
                    issue_type="negative_amount",
                    message=f"Category '{category}' has a negative total ({total})",
                    severity="error",
                ))
            lines = details.get(category, [])
            line_sum = sum(line.amount for line in lines)
            if line_sum != total:
                issues.append(ValidationIssue(
                    field=f"{prefix}.{category}",
                    issue_type="total_mismatch",
                    message=(
                        f"Category '{category}' total is {total} "
                        f"but its lines add up to {line_sum}"
                    ),
                    severity="error",
                    suggested_fix="Recompute the category total from its lines",
                ))

            if book == ExpenseBook.PERSONAL:
                markers = [line for line in lines if line.is_withdrawal_marker]
                if len(markers) > 1:
                    issues.append(ValidationIssue(
                        field=f"{prefix}.{category}",
                        issue_type="duplicate_marker",
                        message=(
                            f"Category '{category}' has {len(markers)} "
                            "withdrawal markers"
                        ),
                        severity="error",
                    ))

        return issues

    def _find_counterpart(
        self,
        document: LedgerDocument,
        line: DetailLine,
    ) -> Optional[DetailLine]:
        if line.linked_category is None or line.linked_detail_id is None:
            return None
        return document.find_detail(
            ExpenseBook.INSTITUTIONAL,
            line.linked_category,
            line.linked_detail_id,
        )

    def _check_links(self, document: LedgerDocument) -> list[ValidationIssue]:
        issues = []
        personal_ids = set()

        for category, lines in document.personal_expense_details.items():
            for line in lines:
                personal_ids.add(line.id)
                if not line.is_synced:
                    continue
                counterpart = self._find_counterpart(document, line)
                field = f"personal_expense_details.{category}"
                if counterpart is None:
                    issues.append(ValidationIssue(
                        field=field,
                        issue_type="broken_link",
                        message=(
                            f"'{line.name}' is synced with "
                            f"'{line.linked_category}' but its counterpart is missing"
                        ),
                        severity="error",
                        suggested_fix="Edit the line and reselect its category",
                    ))
                elif (
                    counterpart.name != line.name
                    or counterpart.amount != line.amount
                    or counterpart.source_detail_id != line.id
                ):
                    issues.append(ValidationIssue(
                        field=field,
                        issue_type="link_mismatch",
                        message=(
                            f"'{line.name}' differs from its counterpart "
                            f"in '{line.linked_category}'"
                        ),
                        severity="error",
                    ))

        for category, lines in document.expense_details.items():
            for line in lines:
                if line.is_linked and line.source_detail_id not in personal_ids:
                    issues.append(ValidationIssue(
                        field=f"expense_details.{category}",
                        issue_type="orphan_counterpart",
                        message=(
                            f"'{line.name}' in '{category}' is marked as linked "
                            "but its personal source no longer exists"
                        ),
                        severity="warning",
                    ))

        return issues

    def _check_counts(self, document: LedgerDocument) -> list[ValidationIssue]:
        issues = []
        for day, slots in document.counting.items():
            for time, quantities in slots.items():
                if any(qty < 0 for qty in quantities.values()):
                    issues.append(ValidationIssue(
                        field=f"counting.{day}.{time}",
                        issue_type="negative_amount",
                        message=f"Negative quantity in {day} {time} count",
                        severity="error",
                    ))
        if any(qty < 0 for qty in document.manual_count.values()):
            issues.append(ValidationIssue(
                field="manual_count",
                issue_type="negative_amount",
                message="Negative quantity in manual cash count",
                severity="error",
            ))
        for day, slots in document.attendance.items():
            for time, count in slots.items():
                if count < 0:
                    issues.append(ValidationIssue(
                        field=f"attendance.{day}.{time}",
                        issue_type="negative_amount",
                        message=f"Negative headcount for {day} {time}",
                        severity="error",
                    ))
        return issues

    def check_invariants(self, document: LedgerDocument) -> ValidationResult:
        """Run every invariant check and collect the issues."""
        issues = []
        issues.extend(self._check_counts(document))
        issues.extend(self._check_book(document, ExpenseBook.INSTITUTIONAL))
        issues.extend(self._check_book(document, ExpenseBook.PERSONAL))
        issues.extend(self._check_links(document))

        return ValidationResult(
            is_valid=not any(issue.severity == "error" for issue in issues),
            issues=issues,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Summary shown after importing a file."""
        if not result.issues:
            return "✅ The ledger is consistent."

        lines = []
        if result.has_errors:
            lines.append("❌ The ledger has inconsistencies:")
            for issue in result.errors:
                lines.append(f"   • {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
