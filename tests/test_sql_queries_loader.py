import pytest
from code_modules.sql_queries_loader import SqlQueryLoader


def test_search_posts_all_filters():
    result = SqlQueryLoader.search_posts(
        location="Lagos",
        property_type="apartment",
        action="rent",
        bedrooms=2,
        min_price=100000,
        max_price=500000,
        limit=10,
    )

    query = result["query"]
    params = result["params"]

    assert "FROM POSTS" in query
    assert "LOWER(CITY) LIKE :location" in query
    assert "LOWER(COUNTRY) LIKE :location" in query
    assert "LOWER(ADDRESS) LIKE :location" in query
    assert "PROPERTY = :property" in query
    assert "TYPE = :action" in query
    assert "BEDROOM >= :bedrooms" in query
    assert "PRICE >= :min_price" in query
    assert "PRICE <= :max_price" in query
    assert "FETCH FIRST :limit ROWS ONLY" in query

    assert params == {
        "location": "%lagos%",
        "property": "apartment",
        "action": "rent",
        "bedrooms": 2,
        "min_price": 100000,
        "max_price": 500000,
        "limit": 10,
    }


def test_search_posts_skips_neutral_filters():
    result = SqlQueryLoader.search_posts(location="Abuja", property_type="any", action="any")

    assert "PROPERTY" not in result["query"].split("WHERE")[1]
    assert "TYPE =" not in result["query"]
    assert set(result["params"]) == {"location", "limit"}


def test_search_posts_without_filters_has_no_where_clause():
    result = SqlQueryLoader.search_posts(limit=5)

    assert "WHERE" not in result["query"]
    assert result["params"] == {"limit": 5}


def test_search_posts_never_interpolates_user_input():
    location = "x' OR 1=1 --"

    result = SqlQueryLoader.search_posts(location=location)

    assert location not in result["query"]
    assert result["params"]["location"] == "%x' or 1=1 --%"


def test_list_posts_matches_city_and_exact_bedrooms_without_limit():
    result = SqlQueryLoader.list_posts(
        city=" Lagos ",
        property_type="house",
        action="buy",
        bedroom=3,
        min_price=100000,
        max_price=900000,
    )

    query = result["query"]
    assert "LOWER(CITY) LIKE :city" in query
    assert "COUNTRY" not in query.split("WHERE")[1]
    assert "ADDRESS" not in query.split("WHERE")[1]
    assert "BEDROOM = :bedroom" in query
    assert "FETCH FIRST" not in query
    assert result["params"] == {
        "city": "%lagos%",
        "property": "house",
        "action": "buy",
        "bedroom": 3,
        "min_price": 100000,
        "max_price": 900000,
    }


def test_list_posts_without_filters_selects_everything():
    result = SqlQueryLoader.list_posts(property_type="any", action="any")

    assert "WHERE" not in result["query"]
    assert result["params"] == {}
