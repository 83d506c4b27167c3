"""Tests for dashboard view builders."""

import pytest

from mapfin_mcp.dashboard import (
    build_expenses_view,
    build_goals_view,
    build_home_summary,
    build_wealth_view,
    describe_expense,
    sorted_transactions,
)
from mapfin_mcp.dates import InvalidPresetError


class TestTransactions:
    """Test labeled transaction lists."""

    def test_describe_expense(self, sample_expenses):
        described = describe_expense(sample_expenses[5])
        assert described["category_name"] == "Utilities & Rent"
        assert described["payment_method_label"] == "Transfer"
        assert described["status_label"] == "None"
        assert "category_name" not in sample_expenses[5]

    def test_unknown_codes_pass_through(self):
        described = describe_expense({"category": "pets", "payment_method": "cheque"})
        assert described["category_name"] == "pets"
        assert described["payment_method_label"] == "cheque"

    def test_sorted_newest_first(self, sample_expenses):
        ordered = sorted_transactions(sample_expenses + [{"id": "undated"}])
        assert [e["id"] for e in ordered][:2] == ["e1", "e4"]
        assert ordered[-1]["id"] == "undated"


class TestViews:
    """Test composed dashboard views."""

    def test_home_summary_for_person(
        self, sample_net_worth, sample_liabilities, sample_expenses, sample_budgets, sample_goals
    ):
        summary = build_home_summary(
            sample_net_worth, sample_liabilities, sample_expenses, sample_budgets, sample_goals,
            reference_date="2024-12-31",
            person_id="manan",
        )
        assert summary["net_worth"]["assets"] == 1855000
        assert summary["net_worth"]["liabilities"] == 500000
        assert summary["net_worth"]["net_worth"] == 1355000
        assert summary["monthly_spending"]["is_current_month"] is True
        assert summary["ytd"]["previous_total"] == pytest.approx(2000)

    def test_expenses_view_compares_previous_period(self, sample_expenses, sample_budgets):
        view = build_expenses_view(sample_expenses, sample_budgets, "1M", "2024-12-31")
        assert view["range"]["start"] == "2024-11-30"
        assert view["total"] == pytest.approx(3500)
        assert view["comparison"]["previous"] == pytest.approx(1650)
        assert view["budget"]["total"] == pytest.approx(3500)

    def test_expenses_view_top_n(self, sample_expenses, sample_budgets):
        view = build_expenses_view(sample_expenses, sample_budgets, "ALL", "2024-12-31", top_n=2)
        assert [c["name"] for c in view["by_category"]] == ["Utilities & Rent", "Other"]

    def test_expenses_view_invalid_preset(self, sample_expenses, sample_budgets):
        with pytest.raises(InvalidPresetError):
            build_expenses_view(sample_expenses, sample_budgets, "2W")

    def test_wealth_view(self, sample_net_worth, sample_liabilities, sample_budgets):
        view = build_wealth_view(
            sample_net_worth, sample_liabilities, sample_budgets, "1Y", "2024-12-31"
        )
        assert view["net_worth"] == pytest.approx(1425000)
        assert view["allocation"][0]["category"] == "mutual_funds"
        assert view["history_with_liabilities"][-1]["net_worth"] == pytest.approx(1425000)

    def test_goals_view(self, sample_goals):
        assert len(build_goals_view(sample_goals)["goals"]) == 3
