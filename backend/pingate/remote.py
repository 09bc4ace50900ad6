"""Client for the remote data service (expenses, income, investments, lends)."""

import logging
from datetime import date
from typing import Any, Optional
from urllib.parse import quote

import requests

from .config import get_api_host, get_api_timeout
from .exceptions import RemoteServiceError
from .json_helper import dumps as json_dumps
from .json_helper import loads as json_loads
from .validation import validate_expense, validate_record_domain, validate_user_id

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def list_path(domain: str, user_id: str) -> str:
    return f"/api/v1/{domain}/all/{quote(str(user_id), safe='')}"


def add_path(domain: str) -> str:
    return f"/api/v1/{domain}/add{domain.capitalize()}"


class RemoteDataClient:
    """
    JSON-over-HTTPS client.

    Every endpoint answers {"status": ..., "data": ...}; methods return the
    data member. Fractional numbers come back as Decimal.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or get_api_host()).rstrip("/")
        self.timeout = timeout or get_api_timeout()
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, payload: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        body = json_dumps(payload) if payload is not None else None

        try:
            response = self.session.request(
                method, url, data=body, headers=JSON_HEADERS, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise RemoteServiceError("Failed to reach remote service") from e

        if not response.ok:
            logger.error(f"{method} {path} returned HTTP {response.status_code}")
            raise RemoteServiceError(f"HTTP error! status: {response.status_code}", response.status_code)

        try:
            result = json_loads(response.text)
        except ValueError as e:
            raise RemoteServiceError("Remote service returned invalid JSON", response.status_code) from e

        if not isinstance(result, dict) or "data" not in result:
            raise RemoteServiceError("Remote service response has no data", response.status_code)

        return result["data"]

    def fetch_records(self, domain: str, user_id: str) -> list[dict[str, Any]]:
        """
        Fetch all records of a domain for a user.

        Raises:
            ValidationError: If domain or user_id is invalid
            RemoteServiceError: If the call fails
        """
        validate_record_domain(domain)
        validate_user_id(user_id)

        data = self._request("GET", list_path(domain, user_id))
        if not isinstance(data, list):
            raise RemoteServiceError(f"Expected a list of {domain} records")

        logger.info(f"Fetched {len(data)} {domain} records")
        return data

    def add_record(self, domain: str, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Create a record of a domain.

        Raises:
            ValidationError: If domain is invalid
            RemoteServiceError: If the call fails
        """
        validate_record_domain(domain)

        data = self._request("POST", add_path(domain), payload)
        if not isinstance(data, dict):
            raise RemoteServiceError(f"Expected the created {domain} record")

        logger.info(f"Added {domain} record {data.get('id', '')}".rstrip())
        return data

    def fetch_expenses(self, user_id: str) -> list[dict[str, Any]]:
        return self.fetch_records("expense", user_id)

    def fetch_incomes(self, user_id: str) -> list[dict[str, Any]]:
        return self.fetch_records("income", user_id)

    def fetch_investments(self, user_id: str) -> list[dict[str, Any]]:
        return self.fetch_records("investment", user_id)

    def fetch_lends(self, user_id: str) -> list[dict[str, Any]]:
        return self.fetch_records("lend", user_id)

    def add_expense(self, payload: dict[str, Any], today: Optional[date] = None) -> dict[str, Any]:
        """Validate then create an expense. The title is sent trimmed."""
        validate_expense(payload, today)
        body = dict(payload)
        body["title"] = body["title"].strip()
        body["remarks"] = (body.get("remarks") or "").strip()
        return self.add_record("expense", body)

    def close(self) -> None:
        self.session.close()
