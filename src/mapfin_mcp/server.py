"""MCP Server for MapFin household finance dashboards."""

import asyncio
import json
import logging
import sys
from typing import Any

from mcp.server import Server
from mcp.types import Resource, TextContent, Tool

from .aggregation import (
    aggregate_by_category,
    calculate_budget_usage,
    limit_top_n,
    summarize_liabilities,
)
from .comparison import compare_last_month, compare_ytd
from .config import Settings
from .constants import CHART_COLORS
from .dashboard import (
    build_expenses_view,
    build_goals_view,
    build_home_summary,
    build_wealth_view,
    sorted_transactions,
)
from .dates import get_month_range, resolve_time_range, to_day
from .filters import filter_records
from .formatting import format_change, format_currency, format_currency_full, format_percent
from .runway import calculate_runway
from .sheets_client import SheetsApiError, SheetsClient, SheetsLoader


logger = logging.getLogger(__name__)

# Initialize MCP server
server = Server("mapfin-mcp")

# Global state
_settings: Settings | None = None
_client: SheetsClient | None = None


def get_settings() -> Settings:
    """Get or load settings from the environment."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def get_client() -> SheetsClient:
    """Get or create the spreadsheet proxy client."""
    global _client
    if _client is None:
        settings = get_settings()
        _client = SheetsClient(settings.api_url, timeout=settings.timeout)
    return _client


def init_for_testing(client: SheetsClient, settings: Settings | None = None) -> None:
    """Initialize server with a test client.

    Args:
        client: SheetsClient, usually backed by an httpx.MockTransport.
        settings: Optional settings; defaults are used when omitted.
    """
    global _client, _settings
    _client = client
    _settings = settings or Settings()


def get_loader() -> SheetsLoader:
    """Loader over the current client."""
    return SheetsLoader(get_client())


async def _load(*collections: str) -> list[list[dict[str, Any]]]:
    """Fetch fresh copies of several collections.

    Raises:
        SheetsApiError: If any collection failed to load.
    """
    results = await get_loader().load_many(*collections)
    failed = [r for r in results.values() if not r.ok]
    if failed:
        for r in failed:
            logger.error("Failed to load %s: %s", r.collection, r.error)
        raise SheetsApiError("; ".join(f"{r.collection}: {r.error}" for r in failed))
    return [results[name].records for name in collections]


def _text(result: Any) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(result, ensure_ascii=False, indent=2, default=str))]


def _criteria(arguments: dict[str, Any]) -> dict[str, Any]:
    """Extract record filter criteria from tool arguments."""
    return {
        "categories": arguments.get("categories"),
        "payment_methods": arguments.get("payment_methods"),
        "payment_specifics": arguments.get("payment_specifics"),
        "tag_ids": arguments.get("tag_ids"),
        "statuses": arguments.get("statuses"),
        "amount_min": arguments.get("amount_min"),
        "amount_max": arguments.get("amount_max"),
        "search": arguments.get("search"),
    }


def _parse_month(month: str | None, reference_date: str | None) -> tuple[int, int]:
    """Parse "YYYY-MM", defaulting to the reference month."""
    if not month:
        day = to_day(reference_date)
        return day.year, day.month
    try:
        year, month_num = map(int, month.split("-"))
    except (ValueError, AttributeError):
        raise ValueError(f"Invalid month, expected YYYY-MM: {month!r}") from None
    if not 1 <= month_num <= 12:
        raise ValueError(f"Invalid month, expected YYYY-MM: {month!r}")
    return year, month_num


# ============================================================================
# Tools
# ============================================================================

_PERSON = {
    "type": "string",
    "description": "Person id, or 'all' for the household aggregate",
}
_REFERENCE_DATE = {
    "type": "string",
    "description": "Reference day YYYY-MM-DD (defaults to today)",
}
_PRESET = {
    "type": "string",
    "enum": ["1M", "3M", "6M", "1Y", "2Y", "3Y", "5Y", "ALL"],
    "description": "Time range preset; granularity follows (monthly, quarterly, yearly)",
}
_FILTERS = {
    "categories": {"type": "array", "items": {"type": "string"}, "description": "Expense category codes"},
    "payment_methods": {"type": "array", "items": {"type": "string"}},
    "payment_specifics": {"type": "array", "items": {"type": "string"}, "description": "Card or account names"},
    "tag_ids": {"type": "array", "items": {"type": "string"}},
    "statuses": {
        "type": "array",
        "items": {"type": "string", "enum": ["none", "pending", "reimbursed"]},
    },
    "amount_min": {"type": "number"},
    "amount_max": {"type": "number"},
    "search": {
        "type": "string",
        "description": "Text matched against description, category, payment specifics and tags",
    },
}


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="get_dashboard",
            description="Home summary: net worth, this month's spending, YTD and month-over-month comparisons, emergency runway, goals.",
            inputSchema={
                "type": "object",
                "properties": {"person_id": _PERSON, "reference_date": _REFERENCE_DATE},
            },
        ),
        Tool(
            name="analyze_expenses",
            description="Expense time series by period, category breakdown, totals vs previous period and matching transactions.",
            inputSchema={
                "type": "object",
                "properties": {
                    "preset": {**_PRESET, "default": "6M"},
                    "person_id": _PERSON,
                    "reference_date": _REFERENCE_DATE,
                    "top_n": {"type": "integer", "default": 8},
                    "with_categories": {"type": "boolean", "default": True},
                    **_FILTERS,
                },
            },
        ),
        Tool(
            name="get_expense_breakdown",
            description="Spending allocation by category (pie chart data) for a time range.",
            inputSchema={
                "type": "object",
                "properties": {
                    "preset": {**_PRESET, "default": "1M"},
                    "person_id": _PERSON,
                    "reference_date": _REFERENCE_DATE,
                    "top_n": {"type": "integer", "default": 8},
                },
            },
        ),
        Tool(
            name="compare_expenses",
            description="Compare spending: 'ytd' (year to date vs last year) or 'last_month' (last complete month vs the month before).",
            inputSchema={
                "type": "object",
                "properties": {
                    "comparison": {"type": "string", "enum": ["ytd", "last_month"], "default": "ytd"},
                    "person_id": _PERSON,
                    "reference_date": _REFERENCE_DATE,
                },
            },
        ),
        Tool(
            name="search_expenses",
            description="List expenses matching filters, newest first. Reimbursed expenses are included.",
            inputSchema={
                "type": "object",
                "properties": {
                    "person_id": _PERSON,
                    "start_date": {"type": "string", "description": "YYYY-MM-DD"},
                    "end_date": {"type": "string", "description": "YYYY-MM-DD"},
                    "limit": {"type": "integer", "default": 50},
                    **_FILTERS,
                },
            },
        ),
        Tool(
            name="get_net_worth",
            description="Latest net worth snapshot, allocation by asset class, history and liabilities.",
            inputSchema={
                "type": "object",
                "properties": {
                    "preset": {**_PRESET, "default": "1Y"},
                    "person_id": _PERSON,
                    "reference_date": _REFERENCE_DATE,
                },
            },
        ),
        Tool(
            name="get_runway",
            description="Emergency runway: months of critical expenses covered by liquid assets.",
            inputSchema={"type": "object", "properties": {"person_id": _PERSON}},
        ),
        Tool(
            name="get_liabilities",
            description="Outstanding loans and cards with total EMI.",
            inputSchema={"type": "object", "properties": {"person_id": _PERSON}},
        ),
        Tool(
            name="check_budget",
            description="Spending vs monthly budget limits, overall and per category.",
            inputSchema={
                "type": "object",
                "properties": {
                    "month": {"type": "string", "description": "Month YYYY-MM (defaults to the reference month)"},
                    "person_id": _PERSON,
                    "reference_date": _REFERENCE_DATE,
                },
            },
        ),
        Tool(
            name="get_goals",
            description="Progress toward net worth, savings and purchase goals.",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="add_expense",
            description="Record a new expense.",
            inputSchema={
                "type": "object",
                "properties": {
                    "date": {"type": "string"},
                    "description": {"type": "string"},
                    "category": {"type": "string"},
                    "inr_amount": {"type": "number"},
                    "payment_method": {"type": "string"},
                    "payment_specifics": {"type": "string"},
                    "person_id": {"type": "string"},
                    "reimbursement_status": {"type": "string", "default": "none"},
                    "tags": {"type": "array", "items": {"type": "object"}},
                },
                "required": ["date", "category", "inr_amount", "person_id"],
            },
        ),
        Tool(
            name="update_expense",
            description="Replace an existing expense by id.",
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "expense": {"type": "object", "description": "Full expense fields"},
                },
                "required": ["id", "expense"],
            },
        ),
        Tool(
            name="delete_expense",
            description="Delete an expense by id.",
            inputSchema={
                "type": "object",
                "properties": {"id": {"type": "string"}},
                "required": ["id"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    arguments = arguments or {}
    person_id = arguments.get("person_id")
    reference_date = arguments.get("reference_date")
    logger.info("Tool call: %s", name)

    if name == "get_dashboard":
        net_worth, liabilities, expenses, budgets, goals = await _load(
            "net_worth", "liabilities", "expenses", "budgets", "goals"
        )
        result = build_home_summary(
            net_worth, liabilities, expenses, budgets, goals,
            reference_date=reference_date,
            person_id=person_id,
        )
        display = get_settings().display
        result["display"] = {
            "net_worth": format_currency(result["net_worth"]["net_worth"], display),
            "net_worth_full": format_currency_full(result["net_worth"]["net_worth"], display),
            "monthly_spending": format_currency(result["monthly_spending"]["total"], display),
            "ytd_change": format_percent(result["ytd"]["change_percent"]),
            "last_month_change": format_percent(result["last_month"]["change_percent"]),
            "last_month_summary": format_change(
                result["last_month"]["total"],
                result["last_month"]["previous_total"],
                display,
                period=result["last_month"]["previous_month"],
            ),
            "runway_months": f"{result['runway']['runway_months']:.1f}",
        }
        return _text(result)

    elif name == "analyze_expenses":
        expenses, budgets = await _load("expenses", "budgets")
        result = build_expenses_view(
            expenses,
            budgets,
            preset=arguments.get("preset", "6M"),
            reference_date=reference_date,
            person_id=person_id,
            criteria=_criteria(arguments),
            top_n=arguments.get("top_n", 8),
            with_categories=arguments.get("with_categories", True),
        )
        return _text(result)

    elif name == "get_expense_breakdown":
        (expenses,) = await _load("expenses")
        time_range = resolve_time_range(arguments.get("preset", "1M"), reference_date)
        listed = filter_records(
            expenses, person_id=person_id, start=time_range.start, end=time_range.end
        )
        result = {
            "range": time_range.to_dict(),
            "categories": limit_top_n(
                aggregate_by_category(listed, colors=CHART_COLORS),
                arguments.get("top_n", 8),
            ),
        }
        return _text(result)

    elif name == "compare_expenses":
        (expenses,) = await _load("expenses")
        comparison = arguments.get("comparison", "ytd")
        if comparison == "ytd":
            result = compare_ytd(expenses, reference_date, person_id)
        elif comparison == "last_month":
            result = compare_last_month(expenses, reference_date, person_id)
        else:
            raise ValueError(f"Unknown comparison: {comparison}")
        return _text(result)

    elif name == "search_expenses":
        (expenses,) = await _load("expenses")
        start = arguments.get("start_date")
        end = arguments.get("end_date")
        matches = filter_records(
            expenses,
            person_id=person_id,
            start=to_day(start) if start else None,
            end=to_day(end) if end else None,
            **_criteria(arguments),
        )
        limit = arguments.get("limit", 50)
        result = {
            "transactions": sorted_transactions(matches)[:limit],
            "returned_count": min(len(matches), limit),
            "total_found": len(matches),
        }
        return _text(result)

    elif name == "get_net_worth":
        net_worth, liabilities, budgets = await _load("net_worth", "liabilities", "budgets")
        result = build_wealth_view(
            net_worth, liabilities, budgets,
            preset=arguments.get("preset", "1Y"),
            reference_date=reference_date,
            person_id=person_id,
        )
        return _text(result)

    elif name == "get_runway":
        net_worth, budgets = await _load("net_worth", "budgets")
        return _text(calculate_runway(net_worth, budgets, person_id))

    elif name == "get_liabilities":
        (liabilities,) = await _load("liabilities")
        return _text(summarize_liabilities(liabilities, person_id))

    elif name == "check_budget":
        expenses, budgets = await _load("expenses", "budgets")
        year, month = _parse_month(arguments.get("month"), reference_date)
        month_range = get_month_range(year, month)
        result = calculate_budget_usage(expenses, budgets, month_range, person_id)
        result["month"] = month_range.label
        return _text(result)

    elif name == "get_goals":
        (goals,) = await _load("goals")
        return _text(build_goals_view(goals))

    elif name == "add_expense":
        expense = {key: value for key, value in arguments.items() if value is not None}
        expense.setdefault("reimbursement_status", "none")
        return _text(await get_client().create("expenses", expense))

    elif name == "update_expense":
        return _text(await get_client().update("expenses", arguments["id"], arguments["expense"]))

    elif name == "delete_expense":
        return _text(await get_client().delete("expenses", arguments["id"]))

    else:
        raise ValueError(f"Unknown tool: {name}")


# ============================================================================
# Resources
# ============================================================================

RESOURCE_COLLECTIONS = {
    "mapfin://people": "people",
    "mapfin://budgets": "budgets",
    "mapfin://tags": "tags",
    "mapfin://cards": "cards",
}


@server.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    return [
        Resource(
            uri="mapfin://people",
            name="People",
            description="Household members",
            mimeType="application/json",
        ),
        Resource(
            uri="mapfin://budgets",
            name="Budgets",
            description="Monthly budget limits per category",
            mimeType="application/json",
        ),
        Resource(
            uri="mapfin://tags",
            name="Tags",
            description="Expense tags",
            mimeType="application/json",
        ),
        Resource(
            uri="mapfin://cards",
            name="Cards",
            description="Credit and debit cards used as payment specifics",
            mimeType="application/json",
        ),
        Resource(
            uri="mapfin://health",
            name="Proxy Health",
            description="Spreadsheet proxy status",
            mimeType="application/json",
        ),
    ]


@server.read_resource()
async def read_resource(uri: str) -> str:
    """Read resource content."""
    uri = str(uri)
    client = get_client()

    if uri in RESOURCE_COLLECTIONS:
        result: Any = await client.fetch_all(RESOURCE_COLLECTIONS[uri])
    elif uri == "mapfin://health":
        result = await client.health()
    else:
        raise ValueError(f"Unknown resource: {uri}")

    return json.dumps(result, ensure_ascii=False, indent=2)


# ============================================================================
# Main
# ============================================================================

def main() -> None:
    """Run the MCP server."""
    from mcp.server.stdio import stdio_server

    settings = get_settings()
    # stdout carries the MCP protocol
    logging.basicConfig(
        stream=sys.stderr,
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    async def run():
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())

    asyncio.run(run())


if __name__ == "__main__":
    main()
