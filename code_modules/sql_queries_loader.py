"""
SQL query loader for the PrimeNest listing tables.

Queries are returned together with their bind parameters; user input is
never interpolated into the SQL text.
"""
from typing import Any, Dict, Optional

LISTING_COLUMNS = (
    "ID, TITLE, CITY, COUNTRY, ADDRESS, PRICE, BEDROOM, BATHROOM, TYPE, PROPERTY, IMAGES"
)


class SqlQueryLoader:
    """
    Loads SQL Queries
    """
    @staticmethod
    def search_posts(
        location: Optional[str] = None,
        property_type: Optional[str] = None,
        action: Optional[str] = None,
        bedrooms: Optional[int] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        limit: int = 10,
    ) -> Dict[str, Any]:
        """
        Build a conjunctive listing search.

        Location is a case-insensitive substring match on city, country or
        address. Property type and action match exactly unless "any";
        bedrooms is a minimum; each price bound is optional.
        """
        conditions = []
        params: Dict[str, Any] = {}

        if location:
            conditions.append(
                "(LOWER(CITY) LIKE :location OR LOWER(COUNTRY) LIKE :location"
                " OR LOWER(ADDRESS) LIKE :location)"
            )
            params["location"] = f"%{location.strip().lower()}%"
        if property_type and property_type != "any":
            conditions.append("PROPERTY = :property")
            params["property"] = property_type
        if action and action != "any":
            conditions.append("TYPE = :action")
            params["action"] = action
        if bedrooms is not None:
            conditions.append("BEDROOM >= :bedrooms")
            params["bedrooms"] = int(bedrooms)
        if min_price is not None:
            conditions.append("PRICE >= :min_price")
            params["min_price"] = int(min_price)
        if max_price is not None:
            conditions.append("PRICE <= :max_price")
            params["max_price"] = int(max_price)

        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        params["limit"] = int(limit)
        return {
            "query": (
                f"SELECT {LISTING_COLUMNS} FROM POSTS{where}"
                " ORDER BY CREATED_AT DESC FETCH FIRST :limit ROWS ONLY"
            ),
            "params": params,
        }

    @staticmethod
    def list_posts(
        city: Optional[str] = None,
        property_type: Optional[str] = None,
        action: Optional[str] = None,
        bedroom: Optional[int] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Build the listing page query.

        City is a case-insensitive substring match on CITY alone and
        bedroom matches exactly. Every match is returned.
        """
        conditions = []
        params: Dict[str, Any] = {}

        if city:
            conditions.append("LOWER(CITY) LIKE :city")
            params["city"] = f"%{city.strip().lower()}%"
        if property_type and property_type != "any":
            conditions.append("PROPERTY = :property")
            params["property"] = property_type
        if action and action != "any":
            conditions.append("TYPE = :action")
            params["action"] = action
        if bedroom is not None:
            conditions.append("BEDROOM = :bedroom")
            params["bedroom"] = int(bedroom)
        if min_price is not None:
            conditions.append("PRICE >= :min_price")
            params["min_price"] = int(min_price)
        if max_price is not None:
            conditions.append("PRICE <= :max_price")
            params["max_price"] = int(max_price)

        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        return {
            "query": f"SELECT {LISTING_COLUMNS} FROM POSTS{where} ORDER BY CREATED_AT DESC",
            "params": params,
        }
