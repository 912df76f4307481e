"""
Listing API routes.

Backs the /list page the assistant's search URLs point to. Every match is
returned; city is matched on its own and bedroom exactly.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
def get_posts(
    req: Request,
    city: Optional[str] = None,
    type: Optional[str] = None,
    property: Optional[str] = None,
    bedroom: Optional[int] = None,
    min_price: Optional[int] = Query(default=None, alias="minPrice"),
    max_price: Optional[int] = Query(default=None, alias="maxPrice"),
    ):
    """
    Return one page of listings matching the query parameters.

    A zero or negative price bound is treated as absent.
    """
    filters = {
        "location": city,
        "action": type or "any",
        "property_type": property or "any",
        "bedrooms": bedroom or None,
        "min_price": min_price if min_price and min_price > 0 else None,
        "max_price": max_price if max_price and max_price > 0 else None,
    }
    try:
        result = req.app.state.chat_service.listing_search.browse(filters)
    except Exception:
        logger.exception("Listing page query failed")
        return JSONResponse(status_code=500, content={"message": "Failed to get posts"})
    return [post.to_dict() for post in result.posts]
