"""Current vs previous comparisons for stat cards."""

import logging
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

from .aggregation import aggregate_by_category, calculate_total
from .dates import (
    get_last_month_range,
    get_month_range,
    get_previous_ytd_range,
    get_ytd_range,
    shift_months,
    to_day,
)
from .filters import filter_by_person
from .utils import MalformedRecordError, record_date


logger = logging.getLogger(__name__)


def calculate_comparison(current: float, previous: float) -> dict[str, float]:
    """Compare two values.

    change_percent is (current - previous) / previous * 100 when previous > 0,
    exactly 100 when previous is 0 and current > 0, and 0 otherwise.
    """
    change = current - previous
    if previous > 0:
        change_percent = (current - previous) / previous * 100
    elif current > 0:
        change_percent = 100.0
    else:
        change_percent = 0.0

    return {
        "current": current,
        "previous": previous,
        "change": change,
        "change_percent": change_percent,
    }


def _stat_card(current: float, previous: float, **extra: Any) -> dict[str, Any]:
    comparison = calculate_comparison(current, previous)
    return {
        "total": comparison["current"],
        "previous_total": comparison["previous"],
        "change": comparison["change"],
        "change_percent": comparison["change_percent"],
        **extra,
    }


def compare_ytd(
    expenses: Iterable[dict],
    reference_date: date | datetime | str | None = None,
    person_id: str | None = None,
) -> dict[str, Any]:
    """Year-to-date spending vs the same day count of the prior year.

    Returns:
        {"total", "previous_total", "change", "change_percent", "label",
        "previous_label"}
    """
    expenses = filter_by_person(expenses, person_id)
    current_range = get_ytd_range(reference_date)
    previous_range = get_previous_ytd_range(reference_date)

    return _stat_card(
        calculate_total(expenses, current_range),
        calculate_total(expenses, previous_range),
        label=current_range.label,
        previous_label=previous_range.label,
    )


def _months_with_data(expenses: Iterable[dict]) -> set[datetime]:
    """Month starts of every month holding at least one dated expense."""
    months = set()
    for expense in expenses:
        try:
            day = record_date(expense)
        except MalformedRecordError as e:
            logger.warning("Skipping malformed expense: %s", e)
            continue
        months.add(day.replace(day=1))
    return months


def compare_last_month(
    expenses: Iterable[dict],
    reference_date: date | datetime | str | None = None,
    person_id: str | None = None,
) -> dict[str, Any]:
    """Last complete month's spending vs the month before it.

    If the month preceding the reference month has no expenses, the most
    recent earlier month with expenses is used instead.

    Returns:
        {"total", "previous_total", "change", "change_percent",
        "display_month", "previous_month", "is_fallback"}
    """
    expenses = filter_by_person(expenses, person_id)
    current_month = to_day(reference_date).replace(day=1)
    last_month = get_last_month_range(reference_date).start

    months = _months_with_data(expenses)
    is_fallback = False
    if last_month not in months:
        earlier = [m for m in months if m < current_month]
        if earlier:
            last_month = max(earlier)
            is_fallback = True

    month_before = shift_months(last_month, -1)
    last_range = get_month_range(last_month.year, last_month.month)
    before_range = get_month_range(month_before.year, month_before.month)

    return _stat_card(
        calculate_total(expenses, last_range),
        calculate_total(expenses, before_range),
        display_month=last_range.label,
        previous_month=before_range.label,
        is_fallback=is_fallback,
    )


def current_month_spending(
    expenses: Iterable[dict],
    reference_date: date | datetime | str | None = None,
    person_id: str | None = None,
) -> dict[str, Any]:
    """Spending in the reference month.

    Falls back to the month of the most recent expense when the reference
    month is empty. Reimbursed expenses are listed but not totaled.
    """
    expenses = filter_by_person(expenses, person_id)
    current_month = to_day(reference_date).replace(day=1)
    target_month = current_month

    months = _months_with_data(expenses)
    if months and current_month not in months:
        target_month = max(months)

    month_range = get_month_range(target_month.year, target_month.month)
    month_expenses = []
    for expense in expenses:
        try:
            day = record_date(expense)
        except MalformedRecordError:
            continue
        if month_range.contains(day):
            month_expenses.append(expense)

    by_category = {
        item["category"]: item["value"]
        for item in aggregate_by_category(month_expenses)
    }

    return {
        "expenses": month_expenses,
        "total": calculate_total(month_expenses),
        "by_category": by_category,
        "display_month": month_range.label,
        "is_current_month": target_month == current_month,
    }
