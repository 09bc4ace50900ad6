"""Per-list filter preferences remembered between visits."""

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional

from .constants import FILTER_SORT_FIELDS, FILTER_TIMEFRAMES
from .exceptions import StoreFailureError
from .records import record_date, sort_records
from .store import KeyValueStore
from .validation import validate_record_domain

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("title", "category", "remarks")


def filters_key(domain: str) -> str:
    return f"{domain}_filters"


@dataclass
class FilterPreferences:
    timeframe: str = "year"
    year: str = ""
    categories: list[str] = field(default_factory=list)
    sort_by: str = "date"
    sort_ascending: bool = False

    @classmethod
    def defaults(cls, today: Optional[date] = None) -> "FilterPreferences":
        return cls(year=str((today or date.today()).year))

    @classmethod
    def from_dict(cls, data: dict[str, Any], today: Optional[date] = None) -> "FilterPreferences":
        """Build from a stored record. Missing or unknown values fall back to the defaults."""
        prefs = cls.defaults(today)
        if data.get("timeframe") in FILTER_TIMEFRAMES:
            prefs.timeframe = data["timeframe"]
        if isinstance(data.get("year"), str) and data["year"]:
            prefs.year = data["year"]
        if isinstance(data.get("categories"), list):
            prefs.categories = [c for c in data["categories"] if isinstance(c, str)]
        if data.get("sortBy") in FILTER_SORT_FIELDS:
            prefs.sort_by = data["sortBy"]
        prefs.sort_ascending = data.get("sortAscending") is True
        return prefs

    def to_dict(self) -> dict[str, Any]:
        return {
            "timeframe": self.timeframe,
            "year": self.year,
            "categories": list(self.categories),
            "sortBy": self.sort_by,
            "sortAscending": self.sort_ascending,
        }

    def apply(
        self,
        records: Iterable[dict[str, Any]],
        date_field: str,
        search: str = "",
    ) -> list[dict[str, Any]]:
        """
        Filter and sort records the way the list screen shows them.

        Args:
            records: Records of one domain
            date_field: Record field holding the ISO date, e.g. incomeDate
            search: Case-insensitive text matched against title, category and remarks

        Returns:
            Matching records, sorted by date or amount
        """
        matched = []
        query = search.strip().lower()
        for record in records:
            if self.timeframe == "year":
                when = record_date(record, date_field)
                if when is None or str(when.year) != self.year:
                    continue
            if self.categories and record.get("category") not in self.categories:
                continue
            if query and not any(
                query in str(record.get(name) or "").lower() for name in SEARCH_FIELDS
            ):
                continue
            matched.append(record)

        sort_field = date_field if self.sort_by == "date" else "amount"
        return sort_records(matched, sort_field, descending=not self.sort_ascending)


class FilterPreferenceStore:
    """Loads and saves FilterPreferences for one record domain."""

    def __init__(self, store: KeyValueStore, domain: str):
        validate_record_domain(domain)
        self.store = store
        self.domain = domain
        self.key = filters_key(domain)

    async def load(self, today: Optional[date] = None) -> FilterPreferences:
        """Saved preferences, or the defaults when none are stored or they cannot be read."""
        try:
            raw = await self.store.get(self.key)
        except StoreFailureError as e:
            logger.error(f"Failed to load {self.key}: {e}")
            return FilterPreferences.defaults(today)

        if raw is None:
            return FilterPreferences.defaults(today)
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning(f"Ignoring unreadable {self.key}")
            return FilterPreferences.defaults(today)
        if not isinstance(data, dict):
            return FilterPreferences.defaults(today)
        return FilterPreferences.from_dict(data, today)

    async def save(self, prefs: FilterPreferences) -> bool:
        try:
            await self.store.set(self.key, json.dumps(prefs.to_dict()))
        except StoreFailureError as e:
            logger.error(f"Failed to save {self.key}: {e}")
            return False
        return True
