"""Record filtering for list and totals views.

Every filter returns a new list in the original order and never mutates its
input. Criteria left as None (or empty) impose no constraint; present criteria
are combined with AND, values inside a multi-valued criterion with OR.

Reimbursed expenses stay in list views and are dropped only for totals, via
`exclude_reimbursed`.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from .constants import EXPENSE_CATEGORY_LABELS
from .utils import (
    MalformedRecordError,
    is_reimbursed,
    matches_person,
    parse_amount,
    parse_tags,
    record_date,
)


logger = logging.getLogger(__name__)


def filter_by_person(records: Iterable[dict], person_id: str | None = None) -> list[dict]:
    """Keep records owned by a person; None or "all" keeps everything."""
    return [r for r in records if matches_person(r, person_id)]


def filter_by_date_range(
    records: Iterable[dict],
    start: datetime | None = None,
    end: datetime | None = None,
    date_field: str = "date",
) -> list[dict]:
    """Keep records dated within [start, end], both ends inclusive.

    Records without a usable date are skipped when a bound is given.
    """
    if start is None and end is None:
        return list(records)

    result = []
    for record in records:
        try:
            day = record_date(record, date_field)
        except MalformedRecordError as e:
            logger.warning("Skipping record: %s", e)
            continue
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        result.append(record)
    return result


def exclude_reimbursed(expenses: Iterable[dict]) -> list[dict]:
    """Drop reimbursed expenses; used only when computing totals."""
    return [e for e in expenses if not is_reimbursed(e)]


def tag_names(expense: dict) -> list[str]:
    """Names of the tags attached to an expense."""
    return [str(tag.get("name", "")) for tag in parse_tags(expense.get("tags"))]


def matches_search(
    expense: dict,
    query: str,
    category_labels: dict[str, str] | None = None,
) -> bool:
    """Case-insensitive match on description, category label, payment specifics and tags."""
    needle = query.strip().lower()
    if not needle:
        return True

    labels = category_labels if category_labels is not None else EXPENSE_CATEGORY_LABELS
    category = str(expense.get("category") or "")
    haystack = [
        str(expense.get("description") or ""),
        labels.get(category, category),
        str(expense.get("payment_specifics") or ""),
        *tag_names(expense),
    ]
    return any(needle in field.lower() for field in haystack)


def filter_records(
    records: Iterable[dict],
    *,
    person_id: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    categories: Iterable[str] | None = None,
    payment_methods: Iterable[str] | None = None,
    payment_specifics: Iterable[str] | None = None,
    tag_ids: Iterable[str] | None = None,
    statuses: Iterable[str] | None = None,
    amount_min: float | None = None,
    amount_max: float | None = None,
    search: str | None = None,
    category_labels: dict[str, str] | None = None,
    date_field: str = "date",
    amount_field: str = "inr_amount",
) -> list[dict]:
    """Apply every present criterion to a record collection.

    Args:
        records: Raw records (expenses, net worth entries, ...).
        person_id: Owner filter; None or "all" for the aggregate view.
        start: Inclusive lower date bound.
        end: Inclusive upper date bound.
        categories: Allowed category codes.
        payment_methods: Allowed payment methods.
        payment_specifics: Allowed payment specifics (card names etc.).
        tag_ids: Record must carry at least one of these tag ids.
        statuses: Allowed reimbursement statuses.
        amount_min: Inclusive minimum amount.
        amount_max: Inclusive maximum amount.
        search: Free text query, see `matches_search`.
        category_labels: Labels used by the free text search.
        date_field: Field holding the record date.
        amount_field: Field holding the amount for range filters.

    Returns:
        Matching records in their original order.
    """
    category_set = set(categories or ())
    method_set = set(payment_methods or ())
    specifics_set = set(payment_specifics or ())
    tag_set = set(tag_ids or ())
    status_set = set(statuses or ())

    result = filter_by_person(records, person_id)
    result = filter_by_date_range(result, start, end, date_field)

    if category_set:
        result = [r for r in result if r.get("category") in category_set]
    if method_set:
        result = [r for r in result if r.get("payment_method") in method_set]
    if specifics_set:
        result = [r for r in result if r.get("payment_specifics") in specifics_set]
    if tag_set:
        result = [
            r for r in result
            if any(tag.get("id") in tag_set for tag in parse_tags(r.get("tags")))
        ]
    if status_set:
        # Blank status cells mean "none"
        result = [r for r in result if (r.get("reimbursement_status") or "none") in status_set]

    if amount_min is not None or amount_max is not None:
        in_range = []
        for record in result:
            amount = parse_amount(record.get(amount_field))
            if amount is None:
                continue
            if amount_min is not None and amount < amount_min:
                continue
            if amount_max is not None and amount > amount_max:
                continue
            in_range.append(record)
        result = in_range

    if search:
        result = [r for r in result if matches_search(r, search, category_labels)]

    return result
