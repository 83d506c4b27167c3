"""Liquidity and emergency runway calculations."""

import logging
from collections.abc import Iterable
from typing import Any

from .aggregation import get_latest_snapshot
from .constants import (
    ASSET_CATEGORY_LABELS,
    ASSET_LIQUIDITY,
    EXPENSE_CATEGORY_CRITICAL,
    EXPENSE_CATEGORY_LABELS,
)
from .utils import MalformedRecordError, parse_bool, record_amount


logger = logging.getLogger(__name__)


def is_liquid(category: str) -> bool:
    """Check the static liquidity table; unknown categories are illiquid."""
    return ASSET_LIQUIDITY.get(category) == "liquid"


def is_critical(budget: dict) -> bool:
    """Critical flag of a budget: explicit override, else the category default."""
    override = parse_bool(budget.get("is_critical"))
    if override is not None:
        return override
    return EXPENSE_CATEGORY_CRITICAL.get(str(budget.get("category") or ""), False)


def classify_assets(by_category: dict[str, float]) -> dict[str, Any]:
    """Split per-category asset totals into liquid and illiquid."""
    liquid = 0.0
    illiquid = 0.0
    categories = []
    for category, amount in by_category.items():
        liquid_flag = is_liquid(category)
        if liquid_flag:
            liquid += amount
        else:
            illiquid += amount
        categories.append({
            "category": category,
            "name": ASSET_CATEGORY_LABELS.get(category, category),
            "amount": amount,
            "liquid": liquid_flag,
        })

    return {
        "liquid_assets": liquid,
        "illiquid_assets": illiquid,
        "categories": categories,
    }


def critical_monthly_budget(budgets: Iterable[dict]) -> dict[str, Any]:
    """Sum the monthly limits of critical budget categories."""
    total = 0.0
    critical = []
    for budget in budgets:
        if not is_critical(budget):
            continue
        try:
            limit = record_amount(budget, "monthly_limit")
        except MalformedRecordError as e:
            logger.warning("Skipping malformed budget: %s", e)
            continue
        category = str(budget.get("category") or "")
        total += limit
        critical.append({
            "category": category,
            "name": EXPENSE_CATEGORY_LABELS.get(category, category),
            "monthly_limit": limit,
        })

    return {"total": total, "categories": critical}


def calculate_runway(
    net_worth_entries: Iterable[dict],
    budgets: Iterable[dict],
    person_id: str | None = None,
) -> dict[str, Any]:
    """Estimate how many months liquid assets cover critical expenses.

    Only the latest net worth snapshot counts. A zero critical budget gives
    a runway of 0 rather than infinity.

    Args:
        net_worth_entries: Raw net worth entries.
        budgets: Raw budgets.
        person_id: Person to evaluate; None or "all" for the aggregate.

    Returns:
        {"liquid_assets", "illiquid_assets", "critical_monthly_budget",
        "runway_months", "snapshot_date", "assets", "critical_categories"}
    """
    snapshot = get_latest_snapshot(net_worth_entries, person_id)
    assets = classify_assets(snapshot["by_category"])
    critical = critical_monthly_budget(budgets)

    liquid = assets["liquid_assets"]
    monthly = critical["total"]
    return {
        "liquid_assets": liquid,
        "illiquid_assets": assets["illiquid_assets"],
        "critical_monthly_budget": monthly,
        "runway_months": (liquid / monthly) if monthly > 0 else 0.0,
        "snapshot_date": snapshot["date"],
        "assets": assets["categories"],
        "critical_categories": critical["categories"],
    }
