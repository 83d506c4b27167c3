"""Aggregation of raw records into chart-ready series and summaries.

All functions are pure: inputs are never mutated and every result is
recomputed from the raw collection. Sums are float accumulations seeded at
0.0 with no rounding; display rounding belongs to `formatting`.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from .constants import (
    ASSET_CATEGORY_LABELS,
    CHART_COLORS,
    EXPENSE_CATEGORY_LABELS,
    GOAL_TYPE_LABELS,
    LIABILITY_CATEGORY_LABELS,
    OTHER_COLOR,
)
from .dates import MONTHLY, TimeRange, format_period_label, generate_buckets
from .filters import exclude_reimbursed, filter_by_person
from .utils import (
    MalformedRecordError,
    parse_amount,
    record_amount,
    record_date,
)


logger = logging.getLogger(__name__)


def _dated_amounts(
    records: Iterable[dict],
    time_range: TimeRange | None,
    date_field: str,
    amount_field: str | None,
) -> list[tuple[Any, float, dict]]:
    """Collect (day, amount, record) for well-formed records inside the range."""
    result = []
    for record in records:
        try:
            day = record_date(record, date_field) if time_range is not None else None
            amount = record_amount(record, amount_field)
        except MalformedRecordError as e:
            logger.warning("Skipping malformed record: %s", e)
            continue
        if time_range is not None and not time_range.contains(day):
            continue
        result.append((day, amount, record))
    return result


def calculate_total(
    records: Iterable[dict],
    time_range: TimeRange | None = None,
    exclude_reimbursed_records: bool = True,
    date_field: str = "date",
    amount_field: str | None = None,
) -> float:
    """Sum record amounts, optionally restricted to a time range."""
    if exclude_reimbursed_records:
        records = exclude_reimbursed(records)
    total = 0.0
    for _, amount, _ in _dated_amounts(records, time_range, date_field, amount_field):
        total += amount
    return total


def aggregate_by_period(
    records: Iterable[dict],
    time_range: TimeRange,
    granularity: str | None = None,
    exclude_reimbursed_records: bool = True,
    with_categories: bool = False,
    date_field: str = "date",
    amount_field: str | None = None,
) -> list[dict[str, Any]]:
    """Sum amounts per calendar bucket of a time range.

    Args:
        records: Raw records; malformed ones are skipped.
        time_range: Range to bucket.
        granularity: Bucket size; defaults to the range's granularity.
        exclude_reimbursed_records: Drop reimbursed expenses from the sums.
        with_categories: Add a `by_category` mapping per bucket. Categories
            absent from a bucket are omitted, not zero-filled.
        date_field: Field holding the record date.
        amount_field: Field holding the amount (see `record_amount`).

    Returns:
        One dict per bucket, in order: {"period", "total"[, "by_category"]}.
    """
    granularity = granularity or time_range.granularity
    if granularity is None:
        raise ValueError("Granularity is required when the time range has none")

    buckets = generate_buckets(time_range.start, time_range.end, granularity)
    totals = {bucket.label: 0.0 for bucket in buckets}
    breakdowns: dict[str, dict[str, float]] = {bucket.label: {} for bucket in buckets}

    if exclude_reimbursed_records:
        records = exclude_reimbursed(records)

    for day, amount, record in _dated_amounts(records, time_range, date_field, amount_field):
        label = format_period_label(day, granularity)
        totals[label] += amount
        if with_categories:
            category = str(record.get("category") or "")
            breakdown = breakdowns[label]
            breakdown[category] = breakdown.get(category, 0.0) + amount

    result = []
    for bucket in buckets:
        point: dict[str, Any] = {"period": bucket.label, "total": totals[bucket.label]}
        if with_categories:
            point["by_category"] = breakdowns[bucket.label]
        result.append(point)
    return result


def aggregate_by_category(
    records: Iterable[dict],
    category_labels: dict[str, str] | None = None,
    colors: Sequence[str] | None = None,
    exclude_reimbursed_records: bool = True,
    amount_field: str | None = None,
) -> list[dict[str, Any]]:
    """Sum amounts per category for allocation (pie) charts.

    Colors are assigned by rank: the Nth category in descending-value order
    gets colors[N % len(colors)].

    Returns:
        [{"category", "name", "value", "color", "percentage"}] sorted by
        value, descending. Percentages are 0 when the total is 0.
    """
    labels = category_labels if category_labels is not None else EXPENSE_CATEGORY_LABELS
    palette = list(colors) if colors else CHART_COLORS

    if exclude_reimbursed_records:
        records = exclude_reimbursed(records)

    by_category: dict[str, float] = {}
    total = 0.0
    for _, amount, record in _dated_amounts(records, None, "date", amount_field):
        category = str(record.get("category") or "")
        by_category[category] = by_category.get(category, 0.0) + amount
        total += amount

    ranked = sorted(by_category.items(), key=lambda item: item[1], reverse=True)
    return [
        {
            "category": category,
            "name": labels.get(category, category),
            "value": value,
            "color": palette[index % len(palette)],
            "percentage": (value / total * 100) if total > 0 else 0.0,
        }
        for index, (category, value) in enumerate(ranked)
    ]


def limit_top_n(
    data: list[dict[str, Any]],
    limit: int = 8,
    other_color: str = OTHER_COLOR,
) -> list[dict[str, Any]]:
    """Keep the top (limit - 1) entries and merge the rest into "Other".

    Expects `data` sorted by value, descending. The "Other" percentage is
    computed against the total of all entries.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")
    if len(data) <= limit:
        return list(data)

    top_items = data[:limit - 1]
    other_items = data[limit - 1:]

    other_total = sum(item["value"] for item in other_items)
    total_value = sum(item["value"] for item in data)

    return [
        *top_items,
        {
            "category": None,
            "name": "Other",
            "value": other_total,
            "color": other_color,
            "percentage": (other_total / total_value * 100) if total_value > 0 else 0.0,
        },
    ]


# ============================================================================
# Net worth
# ============================================================================

def get_latest_snapshot(
    entries: Iterable[dict],
    person_id: str | None = None,
) -> dict[str, Any]:
    """Get the entries sharing the latest report date.

    The latest date is the maximum `report_date` string; every entry on that
    date is summed (no deduplication).

    Returns:
        {"date", "total", "by_category", "entries"}; date is None when there
        are no dated entries.
    """
    filtered = [e for e in filter_by_person(entries, person_id) if e.get("report_date")]
    if not filtered:
        return {"date": None, "total": 0.0, "by_category": {}, "entries": []}

    latest_date = max(str(e["report_date"]) for e in filtered)
    latest_entries = [e for e in filtered if str(e["report_date"]) == latest_date]

    total = 0.0
    by_category: dict[str, float] = {}
    for entry in latest_entries:
        try:
            amount = record_amount(entry, "amount_inr")
        except MalformedRecordError as e:
            logger.warning("Skipping malformed net worth entry: %s", e)
            continue
        category = str(entry.get("category") or "")
        total += amount
        by_category[category] = by_category.get(category, 0.0) + amount

    return {
        "date": latest_date,
        "total": total,
        "by_category": by_category,
        "entries": latest_entries,
    }


def aggregate_net_worth_by_period(
    entries: Iterable[dict],
    time_range: TimeRange,
    granularity: str | None = None,
    person_id: str | None = None,
) -> list[dict[str, Any]]:
    """Net worth per bucket, only for buckets that contain a report.

    Each person contributes their latest report inside the bucket, so people
    reporting on different days of the same month are all counted.
    `report_date` is the latest of those dates.

    Returns:
        [{"period", "report_date", "total", "by_category"}] in bucket order.
    """
    granularity = granularity or time_range.granularity or MONTHLY
    buckets = generate_buckets(time_range.start, time_range.end, granularity)

    by_label: dict[str, list[dict]] = {}
    for entry in filter_by_person(entries, person_id):
        try:
            day = record_date(entry, "report_date")
        except MalformedRecordError as e:
            logger.warning("Skipping malformed net worth entry: %s", e)
            continue
        if time_range.contains(day):
            by_label.setdefault(format_period_label(day, granularity), []).append(entry)

    result = []
    for bucket in buckets:
        bucket_entries = by_label.get(bucket.label)
        if not bucket_entries:
            continue
        by_person: dict[Any, list[dict]] = {}
        for entry in bucket_entries:
            by_person.setdefault(entry.get("person_id"), []).append(entry)

        total = 0.0
        by_category: dict[str, float] = {}
        for person_entries in by_person.values():
            snapshot = get_latest_snapshot(person_entries)
            total += snapshot["total"]
            for category, amount in snapshot["by_category"].items():
                by_category[category] = by_category.get(category, 0.0) + amount

        result.append({
            "period": bucket.label,
            "report_date": max(str(e["report_date"]) for e in bucket_entries),
            "total": total,
            "by_category": by_category,
        })
    return result


def aggregate_net_worth_with_liabilities(
    entries: Iterable[dict],
    liabilities: Iterable[dict],
    time_range: TimeRange,
    person_id: str | None = None,
) -> list[dict[str, Any]]:
    """Monthly net worth with current liabilities subtracted.

    Liabilities have no history, so today's outstanding total applies to
    every period and is reported as a negative number.
    """
    points = aggregate_net_worth_by_period(entries, time_range, MONTHLY, person_id)
    total_liabilities = summarize_liabilities(liabilities, person_id)["total_outstanding"]

    return [
        {
            **point,
            "assets": point["total"],
            "liabilities": -total_liabilities,
            "net_worth": point["total"] - total_liabilities,
        }
        for point in points
    ]


def aggregate_net_worth_by_category(
    entries: Iterable[dict],
    category_labels: dict[str, str] | None = None,
    colors: Sequence[str] | None = None,
    person_id: str | None = None,
) -> list[dict[str, Any]]:
    """Allocation of the latest snapshot by asset category."""
    snapshot = get_latest_snapshot(entries, person_id)
    return aggregate_by_category(
        snapshot["entries"],
        category_labels if category_labels is not None else ASSET_CATEGORY_LABELS,
        colors,
        exclude_reimbursed_records=False,
        amount_field="amount_inr",
    )


# ============================================================================
# Liabilities, budgets, goals
# ============================================================================

def summarize_liabilities(
    liabilities: Iterable[dict],
    person_id: str | None = None,
) -> dict[str, Any]:
    """Total outstanding balance and EMI, with a per-category split."""
    total_outstanding = 0.0
    total_emi = 0.0
    categories: dict[str, dict[str, Any]] = {}

    for liability in filter_by_person(liabilities, person_id):
        try:
            outstanding = record_amount(liability, "outstanding")
        except MalformedRecordError as e:
            logger.warning("Skipping malformed liability: %s", e)
            continue
        category = str(liability.get("category") or "")
        total_outstanding += outstanding
        total_emi += parse_amount(liability.get("emi")) or 0.0

        if category not in categories:
            categories[category] = {
                "category": category,
                "name": LIABILITY_CATEGORY_LABELS.get(category, category),
                "outstanding": 0.0,
                "count": 0,
            }
        categories[category]["outstanding"] += outstanding
        categories[category]["count"] += 1

    return {
        "total_outstanding": total_outstanding,
        "total_emi": total_emi,
        "by_category": sorted(categories.values(), key=lambda c: c["outstanding"], reverse=True),
    }


def total_monthly_budget(budgets: Iterable[dict]) -> float:
    """Sum of all monthly budget limits."""
    total = 0.0
    for budget in budgets:
        total += parse_amount(budget.get("monthly_limit")) or 0.0
    return total


def calculate_budget_usage(
    expenses: Iterable[dict],
    budgets: Iterable[dict],
    time_range: TimeRange,
    person_id: str | None = None,
) -> dict[str, Any]:
    """Compare spending in a range against monthly budget limits."""
    expenses = exclude_reimbursed(filter_by_person(expenses, person_id))
    spent_by_category: dict[str, float] = {}
    total = 0.0
    for _, amount, record in _dated_amounts(expenses, time_range, "date", "inr_amount"):
        category = str(record.get("category") or "")
        spent_by_category[category] = spent_by_category.get(category, 0.0) + amount
        total += amount

    budget_total = 0.0
    categories = []
    for budget in budgets:
        try:
            limit = record_amount(budget, "monthly_limit")
        except MalformedRecordError as e:
            logger.warning("Skipping malformed budget: %s", e)
            continue
        category = str(budget.get("category") or "")
        spent = spent_by_category.get(category, 0.0)
        budget_total += limit
        categories.append({
            "category": category,
            "name": EXPENSE_CATEGORY_LABELS.get(category, category),
            "limit": limit,
            "spent": spent,
            "percentage": (spent / limit * 100) if limit > 0 else 0.0,
            "remaining": limit - spent,
        })

    return {
        "total": total,
        "budget": budget_total,
        "percentage": (total / budget_total * 100) if budget_total > 0 else 0.0,
        "remaining": budget_total - total,
        "categories": categories,
    }


def calculate_goal_progress(goals: Iterable[dict]) -> dict[str, Any]:
    """Progress toward each goal plus portfolio-level totals.

    Progress is capped at 100; a goal is on track from 50% progress.
    """
    items = []
    for goal in goals:
        target = parse_amount(goal.get("target_amount")) or 0.0
        current = parse_amount(goal.get("current_amount")) or 0.0
        progress = min(current / target * 100, 100.0) if target > 0 else 0.0
        goal_type = goal.get("type") or ""
        items.append({
            "id": goal.get("id"),
            "name": goal.get("name"),
            "type": goal_type,
            "type_label": GOAL_TYPE_LABELS.get(goal_type, goal_type),
            "target": target,
            "current": current,
            "progress": progress,
            "remaining": max(0.0, target - current),
            "target_date": goal.get("target_date") or None,
            "on_track": progress >= 50,
        })

    count = len(items)
    return {
        "goals": items,
        "summary": {
            "count": count,
            "on_track": sum(1 for g in items if g["on_track"]),
            "total_target": sum(g["target"] for g in items),
            "total_current": sum(g["current"] for g in items),
            "average_progress": (sum(g["progress"] for g in items) / count) if count else 0.0,
        },
    }
