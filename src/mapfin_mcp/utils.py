"""Utility functions for reading raw sheet records."""

import json
import math
import re
from datetime import date, datetime
from typing import Any

from .constants import PERSON_ALL


AMOUNT_FIELDS = ("inr_amount", "amount_inr", "amount")

_CURRENCY_CHARS = re.compile(r"[₹$€£,\s]")


class MalformedRecordError(ValueError):
    """Record is missing a field required for aggregation."""

    pass


def parse_amount(value: Any) -> float | None:
    """Parse a monetary value from the sheet.

    Handles numbers and strings like "$50", "₹1,000" or "1000".

    Returns:
        The parsed float, or None if the value is empty, not numeric, or
        not finite ("NaN", "inf").
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    else:
        cleaned = _CURRENCY_CHARS.sub("", str(value))
        if not cleaned:
            return None
        try:
            result = float(cleaned)
        except ValueError:
            return None
    return result if math.isfinite(result) else None


def parse_date(value: Any) -> datetime:
    """Parse a calendar day into a datetime at midnight.

    Accepts date, datetime, or ISO strings ("2024-12-01" or with a time part).

    Raises:
        ValueError: If the value is empty or not a date.
        TypeError: If the value has an unsupported type.
    """
    if isinstance(value, datetime):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise TypeError(f"Expected date, datetime or ISO string, got {type(value).__name__}")

    text = value.strip()
    if not text:
        raise ValueError("Empty date")
    # Only the calendar day matters
    parsed = datetime.fromisoformat(text[:10])
    return datetime(parsed.year, parsed.month, parsed.day)


def record_date(record: dict, field: str = "date") -> datetime:
    """Get the calendar day of a record.

    Raises:
        MalformedRecordError: If the field is missing or not a date.
    """
    value = record.get(field)
    if value is None or value == "":
        raise MalformedRecordError(f"Record {record.get('id')!r} has no {field}")
    try:
        return parse_date(value)
    except (TypeError, ValueError) as e:
        raise MalformedRecordError(
            f"Record {record.get('id')!r} has invalid {field}: {value!r}"
        ) from e


def record_amount(record: dict, field: str | None = None) -> float:
    """Get the monetary amount of a record.

    Args:
        record: Raw record dict.
        field: Amount field to read. If None, the first present field from
            AMOUNT_FIELDS is used.

    Raises:
        MalformedRecordError: If no usable amount is present.
    """
    fields = (field,) if field else AMOUNT_FIELDS
    for name in fields:
        if name in record:
            amount = parse_amount(record[name])
            if amount is None:
                break
            return amount
    raise MalformedRecordError(f"Record {record.get('id')!r} has no amount")


def parse_bool(value: Any) -> bool | None:
    """Parse a sheet checkbox value ("TRUE", "false", 1, True...).

    Returns:
        The boolean, or None when the cell is empty or unrecognized.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "yes", "1", "y"):
            return True
        if text in ("false", "no", "0", "n"):
            return False
    return None


def parse_tags(value: Any) -> list[dict]:
    """Decode an expense's tags.

    The sheet stores tags as a JSON string; already-decoded lists pass through.
    """
    if not value:
        return []
    if isinstance(value, list):
        return [tag for tag in value if isinstance(tag, dict)]
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            return []
        if isinstance(decoded, list):
            return [tag for tag in decoded if isinstance(tag, dict)]
    return []


def is_reimbursed(expense: dict) -> bool:
    """Check if an expense has been reimbursed (excluded from totals)."""
    return expense.get("reimbursement_status") == "reimbursed"


def matches_person(record: dict, person_id: str | None) -> bool:
    """Check if a record belongs to a person.

    None or "all" selects every record (aggregate view).
    """
    if not person_id or person_id == PERSON_ALL:
        return True
    return record.get("person_id") == person_id
