"""Tests for liquidity and emergency runway."""

import pytest

from mapfin_mcp.runway import (
    calculate_runway,
    classify_assets,
    critical_monthly_budget,
    is_critical,
    is_liquid,
)


class TestLiquidity:
    """Test asset liquidity classification."""

    def test_known_categories(self):
        assert is_liquid("mutual_funds")
        assert is_liquid("gold")
        assert not is_liquid("epf")
        assert not is_liquid("real_estate")

    def test_unknown_is_illiquid(self):
        assert not is_liquid("art_collection")

    def test_classify_assets(self):
        result = classify_assets({"liquid_cash": 90000.0, "ppf": 300000.0})
        assert result["liquid_assets"] == 90000
        assert result["illiquid_assets"] == 300000
        assert result["categories"][1] == {
            "category": "ppf", "name": "PPF", "amount": 300000.0, "liquid": False,
        }


class TestCriticalBudget:
    """Test critical flags on budgets."""

    def test_override_wins(self):
        assert is_critical({"category": "leisure", "is_critical": True})
        assert not is_critical({"category": "groceries", "is_critical": "FALSE"})

    def test_default_table(self):
        assert is_critical({"category": "groceries", "is_critical": ""})
        assert not is_critical({"category": "food_dining"})
        assert not is_critical({"category": "unknown"})

    def test_critical_total(self, sample_budgets):
        result = critical_monthly_budget(sample_budgets)
        assert result["total"] == 20000
        assert [c["category"] for c in result["categories"]] == ["groceries", "transport_travel"]


class TestRunway:
    """Test runway months."""

    def test_basic_runway(self):
        """Test 90,000 liquid over a 15,000 critical budget."""
        entries = [{"person_id": "manan", "report_date": "2024-12-01",
                    "category": "liquid_cash", "amount_inr": 90000}]
        budgets = [{"category": "groceries", "monthly_limit": 15000, "is_critical": True}]
        result = calculate_runway(entries, budgets)
        assert result["critical_monthly_budget"] == 15000
        assert result["runway_months"] == 6

    def test_aggregate(self, sample_net_worth, sample_budgets):
        result = calculate_runway(sample_net_worth, sample_budgets)
        assert result["liquid_assets"] == pytest.approx(1945000)
        assert result["illiquid_assets"] == 0
        assert result["runway_months"] == pytest.approx(97.25)
        assert result["snapshot_date"] == "2024-12-01"

    def test_person(self, sample_net_worth, sample_budgets):
        result = calculate_runway(sample_net_worth, sample_budgets, "partner")
        assert result["liquid_assets"] == pytest.approx(90000)
        assert result["runway_months"] == pytest.approx(4.5)

    def test_zero_critical_budget(self, sample_net_worth):
        """Test that no critical budget gives 0 months, not infinity."""
        budgets = [{"category": "leisure", "monthly_limit": 5000}]
        result = calculate_runway(sample_net_worth, budgets)
        assert result["critical_monthly_budget"] == 0
        assert result["runway_months"] == 0

    def test_no_net_worth(self, sample_budgets):
        result = calculate_runway([], sample_budgets)
        assert result["liquid_assets"] == 0
        assert result["runway_months"] == 0
        assert result["snapshot_date"] is None
