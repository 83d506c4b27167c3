"""HTTP client for the spreadsheet REST proxy.

The proxy exposes one collection per sheet:
GET /{Sheet}, POST /{Sheet}, PUT /{Sheet}/{id}, DELETE /{Sheet}/{id}.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from .utils import parse_tags


logger = logging.getLogger(__name__)

# Collection names mapped to sheet names
SHEETS = {
    "people": "People",
    "net_worth": "NetWorthEntries",
    "liabilities": "Liabilities",
    "expenses": "Expenses",
    "income": "Income",
    "budgets": "Budgets",
    "goals": "Goals",
    "categories": "Categories",
    "cards": "Cards",
    "tags": "Tags",
}


class SheetsApiError(Exception):
    """Error talking to the spreadsheet proxy."""

    pass


def sheet_name(collection: str) -> str:
    """Resolve a collection name to its sheet.

    Raises:
        ValueError: If the collection is unknown.
    """
    try:
        return SHEETS[collection]
    except KeyError:
        raise ValueError(f"Unknown collection: {collection}") from None


def _encode_record(collection: str, data: dict[str, Any]) -> dict[str, Any]:
    """Prepare a record for the sheet (expense tags are stored as JSON)."""
    payload = dict(data)
    if collection == "expenses" and "tags" in payload:
        tags = payload.pop("tags")
        if tags:
            payload["tags"] = tags if isinstance(tags, str) else json.dumps(tags)
    return payload


def _decode_record(collection: str, record: dict[str, Any]) -> dict[str, Any]:
    if collection == "expenses":
        return {**record, "tags": parse_tags(record.get("tags"))}
    return record


class SheetsClient:
    """Async CRUD client for the spreadsheet proxy."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Proxy base URL, e.g. "http://localhost:3001/api".
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def _request(self, method: str, path: str, payload: dict | None = None) -> Any:
        url = f"{self.base_url}/{path}"
        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            try:
                response = await client.request(
                    method,
                    url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
            except httpx.HTTPError as e:
                logger.warning("%s %s failed: %s", method, url, e)
                raise SheetsApiError(f"HTTP error calling {path}: {e}") from e

        if response.status_code >= 400:
            try:
                message = response.json().get("error")
            except (ValueError, AttributeError):
                message = None
            logger.warning("%s %s returned %s", method, url, response.status_code)
            raise SheetsApiError(message or f"HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise SheetsApiError(f"Invalid JSON response from {path}: {e}") from e

    async def fetch_all(self, collection: str) -> list[dict[str, Any]]:
        """Fetch every record of a collection.

        Raises:
            SheetsApiError: If the proxy request fails.
        """
        data = await self._request("GET", sheet_name(collection))
        if not isinstance(data, list):
            raise SheetsApiError(f"Expected a list from {collection}, got {type(data).__name__}")
        return [_decode_record(collection, r) for r in data if isinstance(r, dict)]

    async def create(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Append a record; the proxy generates an id when none is given."""
        return await self._request("POST", sheet_name(collection), _encode_record(collection, data))

    async def update(self, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Replace the record with the given id."""
        return await self._request(
            "PUT",
            f"{sheet_name(collection)}/{record_id}",
            _encode_record(collection, data),
        )

    async def delete(self, collection: str, record_id: str) -> dict[str, Any]:
        """Delete the record with the given id."""
        return await self._request("DELETE", f"{sheet_name(collection)}/{record_id}")

    async def health(self) -> dict[str, Any]:
        """Check that the proxy is reachable."""
        return await self._request("GET", "health")


@dataclass
class LoadResult:
    """Outcome of loading one collection."""

    collection: str
    records: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SheetsLoader:
    """Explicit pull of raw collections for the presentation layer."""

    def __init__(self, client: SheetsClient):
        self.client = client

    async def load(self, collection: str) -> LoadResult:
        """Load a collection, reporting proxy failures instead of raising."""
        try:
            records = await self.client.fetch_all(collection)
        except SheetsApiError as e:
            return LoadResult(collection=collection, error=str(e))
        return LoadResult(collection=collection, records=records)

    async def load_many(self, *collections: str) -> dict[str, LoadResult]:
        """Load several collections, keyed by collection name."""
        return {name: await self.load(name) for name in collections}
