"""
Listing search adapter.

Translates resolved assistant filters into a bounded query against the
POSTS table and maps the rows to listing summaries.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from code_modules.assistant_types import ListingSummary, SearchResult
from code_modules.sql_queries_loader import SqlQueryLoader

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


def _to_int(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _parse_images(raw) -> List[str]:
    if not raw:
        return []
    if isinstance(raw, (list, tuple)):
        return [str(image) for image in raw]
    text = str(raw).strip()
    if text.startswith("["):
        try:
            return [str(image) for image in json.loads(text)]
        except json.JSONDecodeError:
            pass
    return [part.strip() for part in text.split(",") if part.strip()]


def to_listing_summary(row: Dict[str, Any]) -> ListingSummary:
    return ListingSummary(
        id=str(row.get("id")),
        title=row.get("title") or "",
        city=row.get("city"),
        country=row.get("country"),
        address=row.get("address"),
        price=_to_int(row.get("price")),
        bedroom=_to_int(row.get("bedroom")),
        bathroom=_to_int(row.get("bathroom")),
        type=row.get("type"),
        property=row.get("property"),
        images=_parse_images(row.get("images")),
    )


class ListingSearchAdapter:
    """
    Read-only search over the listing store.

    Args:
        adb_client: Object exposing fetch_records(query, params).
        page_size (int): Maximum listings returned by one search.
    """

    def __init__(self, adb_client, page_size: int = DEFAULT_PAGE_SIZE, sql_loader: SqlQueryLoader = None):
        self.adb_client = adb_client
        self.page_size = page_size
        self.sql_loader = sql_loader or SqlQueryLoader()

    def _query(self, filters: Dict[str, Any]) -> SearchResult:
        statement = self.sql_loader.search_posts(
            location=filters.get("location"),
            property_type=filters.get("property_type"),
            action=filters.get("action"),
            bedrooms=_to_int(filters.get("bedrooms")),
            min_price=_to_int(filters.get("min_price")),
            max_price=_to_int(filters.get("max_price")),
            limit=self.page_size,
        )
        rows = self.adb_client.fetch_records(statement["query"], statement["params"])
        posts = [to_listing_summary(row) for row in rows[: self.page_size]]
        return SearchResult(count=len(posts), posts=posts)

    def search(self, filters: Dict[str, Any]) -> SearchResult:
        """
        Search on behalf of the assistant.

        Without a location nothing is queried. Store failures are logged
        and reported as an empty result.
        """
        if not filters.get("location"):
            return SearchResult.empty()
        try:
            result = self._query(filters)
        except Exception as e:
            logger.error("Listing search failed for %s: %s", filters, e)
            return SearchResult.empty()
        logger.info("Listing search for %r returned %d post(s)", filters.get("location"), result.count)
        return result

    def browse(self, filters: Dict[str, Any]) -> SearchResult:
        """
        Every listing for the listing page, matched on city only with an
        exact bedroom count. Filters are optional and store errors
        propagate to the caller.
        """
        statement = self.sql_loader.list_posts(
            city=filters.get("location"),
            property_type=filters.get("property_type"),
            action=filters.get("action"),
            bedroom=_to_int(filters.get("bedrooms")),
            min_price=_to_int(filters.get("min_price")),
            max_price=_to_int(filters.get("max_price")),
        )
        rows = self.adb_client.fetch_records(statement["query"], statement["params"])
        posts = [to_listing_summary(row) for row in rows]
        return SearchResult(count=len(posts), posts=posts)
