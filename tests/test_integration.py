"""Integration tests with a running spreadsheet proxy.

These tests require the MAPFIN_API_URL environment variable to be set.
Run with: MAPFIN_API_URL=http://localhost:3001/api pytest tests/test_integration.py -v
"""

import os

import pytest

from mapfin_mcp.aggregation import aggregate_by_period, calculate_total
from mapfin_mcp.comparison import compare_ytd
from mapfin_mcp.dates import resolve_time_range
from mapfin_mcp.runway import calculate_runway
from mapfin_mcp.sheets_client import SHEETS, SheetsClient, SheetsLoader


# Skip all tests in this module if MAPFIN_API_URL is not set
pytestmark = pytest.mark.skipif(
    os.environ.get("MAPFIN_API_URL") is None,
    reason="MAPFIN_API_URL environment variable not set",
)


@pytest.fixture
def live_client() -> SheetsClient:
    """Create client against the real proxy."""
    return SheetsClient(os.environ["MAPFIN_API_URL"])


class TestIntegrationProxy:
    """Integration tests for the proxy client."""

    @pytest.mark.asyncio
    async def test_health(self, live_client: SheetsClient):
        """Test that the proxy answers its health check."""
        result = await live_client.health()
        assert isinstance(result, dict)

    @pytest.mark.asyncio
    async def test_load_all_collections(self, live_client: SheetsClient):
        """Test that every collection loads as a list of records."""
        results = await SheetsLoader(live_client).load_many(*SHEETS)
        for name, result in results.items():
            assert result.ok, f"{name}: {result.error}"
            assert all(isinstance(r, dict) for r in result.records)


class TestIntegrationAggregation:
    """Integration tests running aggregations over live data."""

    @pytest.mark.asyncio
    async def test_series_matches_total(self, live_client: SheetsClient):
        """Test that bucket totals add up to the range total."""
        expenses = await live_client.fetch_all("expenses")
        time_range = resolve_time_range("1Y")

        series = aggregate_by_period(expenses, time_range)

        assert sum(p["total"] for p in series) == pytest.approx(calculate_total(expenses, time_range))

    @pytest.mark.asyncio
    async def test_comparisons_and_runway(self, live_client: SheetsClient):
        """Test that headline figures are finite numbers."""
        expenses = await live_client.fetch_all("expenses")
        net_worth = await live_client.fetch_all("net_worth")
        budgets = await live_client.fetch_all("budgets")

        ytd = compare_ytd(expenses)
        runway = calculate_runway(net_worth, budgets)

        assert ytd["change_percent"] == ytd["change_percent"]  # not NaN
        assert runway["runway_months"] >= 0
