"""
Query construction for the enriched post listing.

Builds the MongoDB filter and aggregation pipeline behind ``GET /posts``:

    $match -> $sort -> $skip -> $limit -> $lookup -> $unwind -> $project

Sorting and paging run before the join so that ``createdAt``/``updatedAt``
stay available as sort keys and only one page of posts is joined. The
``$lookup``/``$unwind`` pair keeps posts whose user does not exist
(``preserveNullAndEmptyArrays``), and ``users._id`` is unique, so the join
never changes the number or order of rows.
"""

import math
from typing import Any, Dict, List, Optional

SORTABLE_FIELDS = {
    "createdAt": "createdAt",
    "updatedAt": "updatedAt",
    "title": "title",
    "description": "description",
    "photo": "photo",
    "userId": "userId",
    "id": "_id",
    "_id": "_id",
}

SORT_ORDERS = {"asc": 1, "desc": -1}

# MongoDB treats NaN as equal to NaN and orders it below every number.
NOT_A_NUMBER = float("nan")

USER_DETAIL_FIELDS = ("firstName", "lastName", "email")


def description_as_number() -> Dict[str, Any]:
    """Expression evaluating ``description`` as a double, or null when it is not numeric."""
    return {
        "$convert": {
            "input": "$description",
            "to": "double",
            "onError": None,
            "onNull": None,
        }
    }


def build_description_filter(
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Build the ``$match`` filter for the ``min``/``max`` query parameters.

    ``description`` is a string field; bounds apply to its numeric value.
    Posts whose description does not parse as a number (or parses as NaN)
    are excluded as soon as either bound is given.

    Args:
        min_value: Inclusive lower bound
        max_value: Inclusive upper bound

    Returns:
        Filter document usable by both ``$match`` and ``count_documents``
    """
    if min_value is None and max_value is None:
        return {}

    value = description_as_number()
    conditions: List[Dict[str, Any]] = [
        {"$isNumber": value},
        {"$ne": [value, NOT_A_NUMBER]},
    ]
    if min_value is not None:
        conditions.append({"$gte": [value, min_value]})
    if max_value is not None:
        conditions.append({"$lte": [value, max_value]})

    return {"$expr": {"$and": conditions}}


def build_sort(sort_by: str, order: str) -> Dict[str, int]:
    """Sort document with ``_id`` as the tie-break."""
    field = SORTABLE_FIELDS[sort_by]
    direction = SORT_ORDERS[order]
    sort = {field: direction}
    if field != "_id":
        sort["_id"] = 1
    return sort


def build_list_pipeline(
    match: Dict[str, Any],
    sort_by: str,
    order: str,
    page: int,
    limit: int,
    users_collection: str = "users",
) -> List[Dict[str, Any]]:
    """
    Build the aggregation pipeline for one page of enriched posts.

    Args:
        match: Filter from ``build_description_filter``
        sort_by: Key of ``SORTABLE_FIELDS``
        order: ``asc`` or ``desc``
        page: 1-based page number
        limit: Page size

    Returns:
        Aggregation pipeline stages
    """
    return [
        {"$match": match},
        {"$sort": build_sort(sort_by, order)},
        {"$skip": (page - 1) * limit},
        {"$limit": limit},
        {
            "$lookup": {
                "from": users_collection,
                "localField": "userId",
                "foreignField": "_id",
                "as": "user_details",
            }
        },
        {
            "$unwind": {
                "path": "$user_details",
                "preserveNullAndEmptyArrays": True,
            }
        },
        {
            "$project": {
                "title": 1,
                "description": 1,
                "photo": 1,
                "userId": 1,
                "user_details": {field: 1 for field in USER_DETAIL_FIELDS},
            }
        },
    ]


def total_pages(total: int, limit: int) -> int:
    """Number of pages of ``limit`` rows needed for ``total`` rows."""
    return math.ceil(total / limit)
