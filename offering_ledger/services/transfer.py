"""
File Import / Export

Export writes the exact document as pretty-printed JSON.
Import reads a file back, accepting two formats:

1. Files exported by this application (the LedgerDocument schema)
2. Files exported by the earlier web version of the ledger, which used
   camelCase keys, Korean day/time labels, a "__manual__"/"__cash__"
   pseudo-slot for the manual cash count, a reserved marker line name
   and report2Expenses/report2Names maps. These are converted, and the
   sync links the old format never stored are recreated by matching
   name and amount.

IMPORTANT: Import either returns a complete, valid document or raises
DocumentImportError. The caller's current document is never touched.
"""

import json
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from offering_ledger.linkage import relink_by_value
from offering_ledger.models.ledger import (
    DENOMINATIONS,
    INITIAL_EXPENSE_CATEGORIES,
    WITHDRAWAL_MARKER_LABEL,
    BankRecordType,
    DetailKind,
    LedgerDocument,
)
from offering_ledger.validation.validator import coerce_non_negative_int


DEFAULT_EXPORT_PREFIX = "church_finance"

# Earlier web version
LEGACY_DAY_NAMES = {
    "주일": "Sunday",
    "월요일": "Monday",
    "화요일": "Tuesday",
    "수요일": "Wednesday",
}
LEGACY_TIME_NAMES = {
    "새벽": "Dawn",
    "낮": "Midday",
    "저녁": "Evening",
}
LEGACY_CATEGORY_NAMES = dict(zip(
    (
        "강사사례", "숙박 및 접대비", "교회감사", "찬양단",
        "감리사사례", "실무진사례", "진행비", "인쇄홍보비", "평가회비",
    ),
    INITIAL_EXPENSE_CATEGORIES,
))
LEGACY_MARKER_NAME = "[통장출금완료]"
LEGACY_MANUAL_DAY = "__manual__"
LEGACY_MANUAL_TIME = "__cash__"
LEGACY_KEYS = frozenset({
    "expenseDetails",
    "personalExpenses",
    "personalExpenseDetails",
    "bankDeposits",
    "report2Expenses",
    "report2Names",
    "lastUpdated",
})

_LEGACY_DATE = re.compile(r"^(\d{1,2})\.(\d{1,2})$")


class DocumentImportError(Exception):
    """The file is not a readable ledger document."""
    pass


# =============================================================================
# EXPORT
# =============================================================================

def default_export_filename(
    today: Optional[date] = None,
    prefix: str = DEFAULT_EXPORT_PREFIX,
) -> str:
    """church_finance_YYYY-MM-DD.json"""
    today = today or date.today()
    return f"{prefix}_{today.isoformat()}.json"


def normalize_export_filename(
    filename: Optional[str],
    today: Optional[date] = None,
    prefix: str = DEFAULT_EXPORT_PREFIX,
) -> str:
    """Blank names get the dated default; ".json" is appended when missing."""
    name = (filename or "").strip()
    if not name:
        return default_export_filename(today, prefix)
    if not name.endswith(".json"):
        name = f"{name}.json"
    return name


def export_document(document: LedgerDocument) -> bytes:
    """Serialized export payload."""
    return document.to_json().encode("utf-8")


def write_export(
    document: LedgerDocument,
    directory: Path,
    filename: Optional[str] = None,
    prefix: str = DEFAULT_EXPORT_PREFIX,
) -> Path:
    """Write the export file and return its path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / normalize_export_filename(filename, prefix=prefix)
    target.write_bytes(export_document(document))
    return target


# =============================================================================
# IMPORT
# =============================================================================

def parse_payload(payload: Union[bytes, str]) -> dict[str, Any]:
    """
    Decode an exported file's content into a JSON object.

    Raises:
        DocumentImportError: If the content is not a JSON object
    """
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise DocumentImportError(f"File is not UTF-8 text: {e}")

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise DocumentImportError(f"File is not valid JSON: {e.msg} (line {e.lineno})")

    if not isinstance(data, dict):
        raise DocumentImportError("File does not contain a ledger document")
    return data


def build_document(data: dict[str, Any]) -> LedgerDocument:
    """
    Turn a decoded file into a document, converting the old format.

    Raises:
        DocumentImportError: If the data is not a valid ledger document
    """
    try:
        if is_legacy_document(data):
            return convert_legacy_document(data)
        return LedgerDocument.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise DocumentImportError(
            f"File is not a valid ledger document: {location}: {first['msg']}"
        )
    except (TypeError, ValueError, AttributeError) as e:
        raise DocumentImportError(f"File is not a valid ledger document: {e}")


def import_document(payload: Union[bytes, str]) -> LedgerDocument:
    """
    Parse an exported file's content.

    Raises:
        DocumentImportError: If the content is not a ledger document
    """
    return build_document(parse_payload(payload))


def import_file(path: Path) -> LedgerDocument:
    """Read and parse an exported file."""
    try:
        payload = Path(path).read_bytes()
    except OSError as e:
        raise DocumentImportError(f"Cannot read {path}: {e}")
    return import_document(payload)


def is_legacy_document(data: dict[str, Any]) -> bool:
    return bool(LEGACY_KEYS.intersection(data))


# =============================================================================
# LEGACY CONVERSION
# =============================================================================

def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _legacy_year(data: dict[str, Any]) -> int:
    raw = data.get("lastUpdated")
    if isinstance(raw, str):
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).year
        except ValueError:
            pass
    return date.today().year


def _legacy_date(raw: Any, year: int) -> Optional[date]:
    """Old lines carry "MM.DD" without a year."""
    if not isinstance(raw, str):
        return None
    match = _LEGACY_DATE.match(raw.strip())
    if not match:
        return None
    try:
        return date(year, int(match.group(1)), int(match.group(2)))
    except ValueError:
        return None


def _denomination_map(raw: Any) -> dict[int, int]:
    quantities = {}
    if not isinstance(raw, dict):
        return quantities
    for face, qty in raw.items():
        try:
            face_value = int(face)
        except (TypeError, ValueError):
            continue
        if face_value in DENOMINATIONS:
            quantities[face_value] = coerce_non_negative_int(qty)
    return quantities


def _legacy_lines(raw: Any, year: int, personal: bool) -> list[dict[str, Any]]:
    lines = []
    has_marker = False
    for item in _as_list(raw):
        if not isinstance(item, dict):
            continue
        name = str(item.get("name") or "").strip()
        entry_date = _legacy_date(item.get("date"), year)

        if personal and name == LEGACY_MARKER_NAME:
            if has_marker:
                continue
            has_marker = True
            lines.append({
                "name": WITHDRAWAL_MARKER_LABEL,
                "amount": 0,
                "entry_date": entry_date,
                "kind": DetailKind.WITHDRAWAL_MARKER,
            })
            continue

        if not name:
            continue
        lines.append({
            "name": name,
            "amount": coerce_non_negative_int(item.get("amount")),
            "entry_date": entry_date,
        })
    return lines


def _legacy_book(
    totals: Any,
    details: Any,
    year: int,
    personal: bool,
) -> tuple[dict[str, int], dict[str, list[dict[str, Any]]]]:
    """
    Convert one expense book. Totals are recomputed from the lines so
    the converted book always satisfies total == sum(lines).
    """
    totals = _as_dict(totals)
    details = _as_dict(details)

    amounts: dict[str, int] = {}
    lines_by_category: dict[str, list[dict[str, Any]]] = {}
    for category in totals:
        name = category if personal else LEGACY_CATEGORY_NAMES.get(category, category)
        lines = _legacy_lines(details.get(category), year, personal)
        amounts[name] = sum(line["amount"] for line in lines)
        if lines:
            lines_by_category[name] = lines
    return amounts, lines_by_category


def convert_legacy_document(data: dict[str, Any]) -> LedgerDocument:
    """
    Convert a document saved by the earlier web version.

    Raises:
        ValidationError: If the converted data still isn't a valid document
    """
    year = _legacy_year(data)

    counting: dict[str, dict[str, dict[int, int]]] = {}
    manual_count: dict[int, int] = {}
    for day, slots in _as_dict(data.get("counting")).items():
        if not isinstance(slots, dict):
            continue
        if day == LEGACY_MANUAL_DAY:
            manual_count = _denomination_map(slots.get(LEGACY_MANUAL_TIME))
            continue
        day_name = LEGACY_DAY_NAMES.get(day, day)
        for time, quantities in slots.items():
            time_name = LEGACY_TIME_NAMES.get(time, time)
            counting.setdefault(day_name, {})[time_name] = _denomination_map(quantities)

    attendance: dict[str, dict[str, int]] = {}
    for day, slots in _as_dict(data.get("attendance")).items():
        if not isinstance(slots, dict):
            continue
        day_name = LEGACY_DAY_NAMES.get(day, day)
        for time, count in slots.items():
            time_name = LEGACY_TIME_NAMES.get(time, time)
            attendance.setdefault(day_name, {})[time_name] = coerce_non_negative_int(count)

    expenses, expense_details = _legacy_book(
        data.get("expenses"), data.get("expenseDetails"), year, personal=False
    )
    personal_expenses, personal_expense_details = _legacy_book(
        data.get("personalExpenses"), data.get("personalExpenseDetails"), year, personal=True
    )

    bank_records = []
    for item in _as_list(data.get("bankDeposits")):
        if not isinstance(item, dict):
            continue
        name = str(item.get("name") or "").strip()
        if not name:
            continue
        record_type = (
            BankRecordType.WITHDRAW
            if item.get("type") == "withdraw"
            else BankRecordType.DEPOSIT
        )
        settles = record_type == BankRecordType.WITHDRAW and name in personal_expenses
        bank_records.append({
            "name": name,
            "amount": coerce_non_negative_int(item.get("amount")),
            "type": record_type,
            "entry_date": _legacy_date(item.get("date"), year),
            "personal_category": name if settles else None,
        })

    override_amounts = _as_dict(data.get("report2Expenses"))
    override_names = _as_dict(data.get("report2Names"))
    report_overrides = {}
    for category in list(override_amounts) + list(override_names):
        name = LEGACY_CATEGORY_NAMES.get(category, category)
        if name not in expenses or name in report_overrides:
            continue
        display = str(override_names.get(category) or "").strip() or None
        amount = override_amounts.get(category)
        report_overrides[name] = {
            "name": display,
            "amount": None if amount is None else coerce_non_negative_int(amount),
        }

    payload: dict[str, Any] = {
        "counting": counting,
        "manual_count": manual_count,
        "attendance": attendance,
        "expenses": expenses,
        "expense_details": expense_details,
        "personal_expenses": personal_expenses,
        "personal_expense_details": personal_expense_details,
        "bank_records": bank_records,
        "report_overrides": report_overrides,
    }
    if data.get("lastUpdated"):
        payload["last_updated"] = data["lastUpdated"]

    document = LedgerDocument.model_validate(payload)
    relink_by_value(document)
    return document
