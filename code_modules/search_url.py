"""
Builds the frontend listing URL for a resolved search.
"""
from typing import Optional
from urllib.parse import urlencode

from code_modules.assistant_types import ResolvedIntent

LIST_PATH = "/list"


def build_search_url(intent: ResolvedIntent) -> Optional[str]:
    """
    Return /list?city=..&type=..&property=..&bedroom=..&minPrice=..&maxPrice=..
    for the resolved filters, omitting neutral values. None without a location.
    """
    if not intent.location:
        return None
    params = [("city", intent.location)]
    if intent.action != "any":
        params.append(("type", intent.action))
    if intent.property_type != "any":
        params.append(("property", intent.property_type))
    if intent.bedrooms is not None:
        params.append(("bedroom", intent.bedrooms))
    if intent.price_range.min is not None:
        params.append(("minPrice", intent.price_range.min))
    if intent.price_range.max is not None:
        params.append(("maxPrice", intent.price_range.max))
    return f"{LIST_PATH}?{urlencode(params)}"
