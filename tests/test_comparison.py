"""Tests for current vs previous comparisons."""

import pytest

from mapfin_mcp.comparison import (
    calculate_comparison,
    compare_last_month,
    compare_ytd,
    current_month_spending,
)


class TestCalculateComparison:
    """Test change percent policy."""

    def test_regular_change(self):
        result = calculate_comparison(150, 100)
        assert result == {"current": 150, "previous": 100, "change": 50, "change_percent": 50.0}

    def test_decrease(self):
        assert calculate_comparison(75, 100)["change_percent"] == -25.0

    def test_from_zero(self):
        """Test that growth from nothing reports exactly 100 percent."""
        result = calculate_comparison(500, 0)
        assert result["change_percent"] == 100.0
        assert result["change"] == 500

    def test_both_zero(self):
        """Test that no data in either period gives 0, not NaN."""
        result = calculate_comparison(0, 0)
        assert result["change_percent"] == 0.0
        assert result["change"] == 0


class TestCompareYtd:
    """Test year to date comparison."""

    def test_ytd(self, sample_expenses):
        result = compare_ytd(sample_expenses, "2024-12-31")
        assert result["total"] == pytest.approx(30150)
        assert result["previous_total"] == pytest.approx(2000)
        assert result["change_percent"] == pytest.approx(1407.5)
        assert result["label"] == "YTD 2024"
        assert result["previous_label"] == "YTD 2023"

    def test_previous_window_stops_at_same_day(self, sample_expenses):
        """Test that a mid-November reference excludes Nov 15 of last year."""
        result = compare_ytd(sample_expenses, "2024-11-10")
        assert result["previous_total"] == 0
        assert result["change_percent"] == 100.0

    def test_no_expenses(self):
        result = compare_ytd([], "2024-12-31")
        assert result["total"] == 0
        assert result["previous_total"] == 0
        assert result["change_percent"] == 0

    def test_person(self, sample_expenses):
        result = compare_ytd(sample_expenses, "2024-12-31", "partner")
        assert result["total"] == pytest.approx(1200)
        assert result["previous_total"] == 0


class TestCompareLastMonth:
    """Test last complete month comparison."""

    def test_last_month(self, sample_expenses):
        result = compare_last_month(sample_expenses, "2024-12-31")
        assert result["display_month"] == "November 2024"
        assert result["previous_month"] == "October 2024"
        assert result["total"] == pytest.approx(1650)
        assert result["previous_total"] == pytest.approx(25000)
        assert result["change_percent"] == pytest.approx(-93.4)
        assert result["is_fallback"] is False

    def test_falls_back_to_latest_month_with_data(self, sample_expenses):
        result = compare_last_month(sample_expenses, "2025-02-15")
        assert result["is_fallback"] is True
        assert result["display_month"] == "December 2024"
        assert result["previous_month"] == "November 2024"
        assert result["total"] == pytest.approx(3500)
        assert result["previous_total"] == pytest.approx(1650)

    def test_no_data_keeps_calendar_month(self):
        result = compare_last_month([], "2025-02-15")
        assert result["display_month"] == "January 2025"
        assert result["is_fallback"] is False
        assert result["change_percent"] == 0


class TestCurrentMonthSpending:
    """Test the reference month spending card."""

    def test_current_month(self, sample_expenses):
        result = current_month_spending(sample_expenses, "2024-12-31")
        assert result["total"] == pytest.approx(3500)
        assert result["by_category"] == {"groceries": 3500.0}
        assert result["display_month"] == "December 2024"
        assert result["is_current_month"] is True

    def test_falls_back_to_latest_month(self, sample_expenses):
        result = current_month_spending(sample_expenses, "2025-01-10")
        assert result["display_month"] == "December 2024"
        assert result["is_current_month"] is False

    def test_reimbursed_listed_but_not_totaled(self, sample_expenses):
        result = current_month_spending(sample_expenses, "2024-11-30", "partner")
        assert [e["id"] for e in result["expenses"]] == ["e3", "e4"]
        assert result["total"] == pytest.approx(1200)
