"""Test fixtures for MapFin MCP server tests."""

import json
from typing import Any, Callable

import httpx
import pytest

from mapfin_mcp.sheets_client import SHEETS, SheetsClient


BASE_URL = "http://sheets.test/api"


@pytest.fixture
def sample_expenses() -> list[dict]:
    """Expenses for two people across Oct 2023 - Dec 2024.

    Amounts mix numbers and sheet strings; e4 is reimbursed, e6 has a blank
    reimbursement status.
    """
    return [
        {
            "id": "e1",
            "date": "2024-12-02",
            "description": "BigBasket order",
            "category": "groceries",
            "inr_amount": "₹3,500",
            "payment_method": "upi",
            "payment_specifics": "GPay",
            "person_id": "manan",
            "reimbursement_status": "none",
            "tags": [{"id": "t1", "name": "Weekly"}],
        },
        {
            "id": "e2",
            "date": "2024-11-05",
            "description": "Dinner",
            "category": "food_dining",
            "inr_amount": 450,
            "payment_method": "credit_card",
            "payment_specifics": "HDFC Regalia",
            "person_id": "manan",
            "reimbursement_status": "none",
            "tags": [],
        },
        {
            "id": "e3",
            "date": "2024-11-20",
            "description": "Cab to office",
            "category": "transport_travel",
            "inr_amount": 1200,
            "payment_method": "credit_card",
            "payment_specifics": "HDFC Regalia",
            "person_id": "partner",
            "reimbursement_status": "pending",
            "tags": json.dumps([{"id": "t2", "name": "Work"}]),
        },
        {
            "id": "e4",
            "date": "2024-11-22",
            "description": "Concert tickets",
            "category": "leisure",
            "inr_amount": 5000,
            "payment_method": "debit_card",
            "payment_specifics": "SBI Debit",
            "person_id": "partner",
            "reimbursement_status": "reimbursed",
            "tags": "",
        },
        {
            "id": "e5",
            "date": "2023-11-15",
            "description": "Groceries",
            "category": "groceries",
            "inr_amount": 2000,
            "payment_method": "upi",
            "payment_specifics": "GPay",
            "person_id": "manan",
            "reimbursement_status": "none",
            "tags": [],
        },
        {
            "id": "e6",
            "date": "2024-10-10",
            "description": "Rent",
            "category": "utilities_rent",
            "inr_amount": 25000,
            "payment_method": "transfer",
            "payment_specifics": "",
            "person_id": "manan",
            "reimbursement_status": "",
            "tags": [],
        },
    ]


@pytest.fixture
def sample_net_worth() -> list[dict]:
    """Monthly net worth reports for two people."""
    return [
        {"id": "n1", "person_id": "manan", "report_date": "2024-11-01",
         "category": "mutual_funds", "amount_inr": 1750000},
        {"id": "n2", "person_id": "manan", "report_date": "2024-12-01",
         "category": "mutual_funds", "amount_inr": 1855000},
        {"id": "n3", "person_id": "partner", "report_date": "2024-12-01",
         "category": "liquid_cash", "amount_inr": "₹90,000"},
        {"id": "n4", "person_id": "partner", "report_date": "2024-11-01",
         "category": "epf", "amount_inr": 500000},
    ]


@pytest.fixture
def sample_liabilities() -> list[dict]:
    """One home loan and one credit card balance."""
    return [
        {"id": "l1", "person_id": "manan", "category": "home_loan",
         "outstanding": 500000, "interest_rate": 8.5, "emi": 25000},
        {"id": "l2", "person_id": "partner", "category": "credit_card",
         "outstanding": "₹20,000", "interest_rate": "", "emi": ""},
    ]


@pytest.fixture
def sample_budgets() -> list[dict]:
    """Budgets covering explicit, blank, string and missing critical flags."""
    return [
        {"id": "b1", "category": "groceries", "monthly_limit": 15000, "is_critical": "TRUE"},
        {"id": "b2", "category": "food_dining", "monthly_limit": 8000, "is_critical": ""},
        {"id": "b3", "category": "utilities_rent", "monthly_limit": 30000, "is_critical": "FALSE"},
        {"id": "b4", "category": "transport_travel", "monthly_limit": 5000},
    ]


@pytest.fixture
def sample_goals() -> list[dict]:
    """Goals at 50%, over 100% and with a zero target."""
    return [
        {"id": "g1", "name": "Net worth 50L", "type": "net_worth",
         "target_amount": 5000000, "current_amount": 2500000, "target_date": "2026-12-31"},
        {"id": "g2", "name": "New laptop", "type": "purchase",
         "target_amount": 100000, "current_amount": 150000, "target_date": ""},
        {"id": "g3", "name": "Holiday fund", "type": "savings",
         "target_amount": 0, "current_amount": 100},
    ]


@pytest.fixture
def sheets_data(
    sample_expenses: list[dict],
    sample_net_worth: list[dict],
    sample_liabilities: list[dict],
    sample_budgets: list[dict],
    sample_goals: list[dict],
) -> dict[str, list[dict]]:
    """Proxy contents keyed by sheet name."""
    return {
        "People": [
            {"id": "manan", "name": "Manan"},
            {"id": "partner", "name": "Partner"},
        ],
        "NetWorthEntries": sample_net_worth,
        "Liabilities": sample_liabilities,
        "Expenses": sample_expenses,
        "Budgets": sample_budgets,
        "Goals": sample_goals,
        "Tags": [{"id": "t1", "name": "Weekly"}, {"id": "t2", "name": "Work"}],
        "Cards": [{"id": "c1", "name": "HDFC Regalia", "person_id": "manan"}],
    }


@pytest.fixture
def sheets_transport() -> Callable[..., httpx.MockTransport]:
    """Factory for a MockTransport emulating the spreadsheet proxy.

    The returned transport records every request in `transport.requests`.
    """

    def make(data: dict[str, Any], failing: tuple[str, ...] = ()) -> httpx.MockTransport:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            path = request.url.path.removeprefix("/api/")
            sheet, _, record_id = path.partition("/")

            if sheet == "health":
                return httpx.Response(200, json={"status": "ok"})
            if sheet in failing:
                return httpx.Response(500, json={"error": f"{sheet} unavailable"})
            if sheet not in SHEETS.values():
                return httpx.Response(404, json={"error": "Sheet not found"})

            if request.method == "GET":
                return httpx.Response(200, json=data.get(sheet, []))
            if request.method == "POST":
                body = json.loads(request.content)
                return httpx.Response(200, json={"success": True, "id": "new-id", "data": {"id": "new-id", **body}})
            if request.method == "PUT":
                body = json.loads(request.content)
                return httpx.Response(200, json={"success": True, "data": {**body, "id": record_id}})
            if request.method == "DELETE":
                return httpx.Response(200, json={"success": True})
            return httpx.Response(405, json={"error": "Method not allowed"})

        transport = httpx.MockTransport(handler)
        transport.requests = requests
        return transport

    return make


@pytest.fixture
def sheets_client(sheets_data: dict, sheets_transport) -> SheetsClient:
    """Client backed by the mock proxy with sample data."""
    return SheetsClient(BASE_URL, transport=sheets_transport(sheets_data))
