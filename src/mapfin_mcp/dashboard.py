"""Dashboard views composed from raw collections.

Each builder takes already-loaded collections and returns a JSON-ready dict.
Nothing is cached; every call recomputes from the raw records.
"""

from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

from .aggregation import (
    aggregate_by_category,
    aggregate_by_period,
    aggregate_net_worth_by_category,
    aggregate_net_worth_by_period,
    aggregate_net_worth_with_liabilities,
    calculate_budget_usage,
    calculate_goal_progress,
    calculate_total,
    get_latest_snapshot,
    limit_top_n,
    summarize_liabilities,
    total_monthly_budget,
)
from .comparison import (
    calculate_comparison,
    compare_last_month,
    compare_ytd,
    current_month_spending,
)
from .constants import (
    CHART_COLORS,
    EXPENSE_CATEGORY_COLORS,
    EXPENSE_CATEGORY_LABELS,
    OTHER_COLOR,
    PAYMENT_METHOD_LABELS,
    REIMBURSEMENT_STATUS_LABELS,
)
from .dates import (
    get_month_range,
    get_previous_period_range,
    resolve_time_range,
    to_day,
)
from .filters import filter_records
from .runway import calculate_runway


def build_home_summary(
    net_worth_entries: Sequence[dict],
    liabilities: Sequence[dict],
    expenses: Sequence[dict],
    budgets: Sequence[dict],
    goals: Sequence[dict],
    reference_date: date | datetime | str | None = None,
    person_id: str | None = None,
) -> dict[str, Any]:
    """Headline figures for the home page."""
    snapshot = get_latest_snapshot(net_worth_entries, person_id)
    liability_total = summarize_liabilities(liabilities, person_id)["total_outstanding"]
    month = current_month_spending(expenses, reference_date, person_id)
    goal_progress = calculate_goal_progress(goals)
    total_budget = total_monthly_budget(budgets)

    return {
        "net_worth": {
            "assets": snapshot["total"],
            "liabilities": liability_total,
            "net_worth": snapshot["total"] - liability_total,
            "as_of": snapshot["date"],
            "by_category": snapshot["by_category"],
        },
        "monthly_spending": {
            "total": month["total"],
            "by_category": month["by_category"],
            "display_month": month["display_month"],
            "is_current_month": month["is_current_month"],
            "budget": total_budget,
        },
        "ytd": compare_ytd(expenses, reference_date, person_id),
        "last_month": compare_last_month(expenses, reference_date, person_id),
        "runway": calculate_runway(net_worth_entries, budgets, person_id),
        "goals": goal_progress["summary"],
    }


def describe_expense(expense: dict) -> dict[str, Any]:
    """Copy of an expense with display labels for its coded fields."""
    category = str(expense.get("category") or "")
    method = str(expense.get("payment_method") or "")
    status = str(expense.get("reimbursement_status") or "none")
    return {
        **expense,
        "category_name": EXPENSE_CATEGORY_LABELS.get(category, category),
        "category_color": EXPENSE_CATEGORY_COLORS.get(category, OTHER_COLOR),
        "payment_method_label": PAYMENT_METHOD_LABELS.get(method, method),
        "status_label": REIMBURSEMENT_STATUS_LABELS.get(status, status),
    }


def sorted_transactions(expenses: Sequence[dict]) -> list[dict[str, Any]]:
    """Labeled expenses, newest first; undated rows go last."""
    ordered = sorted(expenses, key=lambda e: str(e.get("date") or ""), reverse=True)
    return [describe_expense(e) for e in ordered]


def build_expenses_view(
    expenses: Sequence[dict],
    budgets: Sequence[dict],
    preset: str = "6M",
    reference_date: date | datetime | str | None = None,
    person_id: str | None = None,
    criteria: dict[str, Any] | None = None,
    top_n: int = 8,
    with_categories: bool = True,
) -> dict[str, Any]:
    """Expense charts, totals and the transaction list for a preset range.

    Args:
        expenses: Raw expenses.
        budgets: Raw budgets.
        preset: Time range preset.
        reference_date: Last day of the range (defaults to today).
        person_id: Person filter; None or "all" for both people.
        criteria: Extra `filter_records` keyword criteria.
        top_n: Slice limit for the category breakdown.
        with_categories: Include the per-category split in the series.

    Raises:
        InvalidPresetError: If the preset is unknown.
    """
    time_range = resolve_time_range(preset, reference_date)
    criteria = dict(criteria or {})

    listed = filter_records(
        expenses,
        person_id=person_id,
        start=time_range.start,
        end=time_range.end,
        **criteria,
    )
    previous_range = get_previous_period_range(time_range)
    previous = filter_records(
        expenses,
        person_id=person_id,
        start=previous_range.start,
        end=previous_range.end,
        **criteria,
    )

    total = calculate_total(listed, time_range)
    day = to_day(reference_date)

    return {
        "range": time_range.to_dict(),
        "total": total,
        "comparison": calculate_comparison(total, calculate_total(previous, previous_range)),
        "series": aggregate_by_period(listed, time_range, with_categories=with_categories),
        "by_category": limit_top_n(aggregate_by_category(listed, colors=CHART_COLORS), top_n),
        "budget": calculate_budget_usage(
            expenses, budgets, get_month_range(day.year, day.month), person_id
        ),
        "transactions": sorted_transactions(listed),
        "transaction_count": len(listed),
    }


def build_wealth_view(
    net_worth_entries: Sequence[dict],
    liabilities: Sequence[dict],
    budgets: Sequence[dict],
    preset: str = "1Y",
    reference_date: date | datetime | str | None = None,
    person_id: str | None = None,
) -> dict[str, Any]:
    """Net worth snapshot, history, allocation, liabilities and runway.

    Raises:
        InvalidPresetError: If the preset is unknown.
    """
    time_range = resolve_time_range(preset, reference_date)
    snapshot = get_latest_snapshot(net_worth_entries, person_id)
    liability_summary = summarize_liabilities(liabilities, person_id)

    return {
        "range": time_range.to_dict(),
        "as_of": snapshot["date"],
        "assets": snapshot["total"],
        "liabilities": liability_summary,
        "net_worth": snapshot["total"] - liability_summary["total_outstanding"],
        "allocation": aggregate_net_worth_by_category(net_worth_entries, person_id=person_id),
        "history": aggregate_net_worth_by_period(
            net_worth_entries, time_range, person_id=person_id
        ),
        "history_with_liabilities": aggregate_net_worth_with_liabilities(
            net_worth_entries, liabilities, time_range, person_id
        ),
        "runway": calculate_runway(net_worth_entries, budgets, person_id),
    }


def build_goals_view(goals: Sequence[dict]) -> dict[str, Any]:
    """Goal progress list with summary totals."""
    return calculate_goal_progress(goals)

