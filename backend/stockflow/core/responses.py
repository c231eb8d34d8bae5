"""Standardized API response helpers.

Every endpoint returns the same envelope:
    {"success": true, "message": <str|null>, "data": ...}

Errors (rendered by the exception handlers in ``stockflow.main``):
    {"success": false, "message": <str>}

List endpoints put a paginated block inside ``data``:
    {"items": [...], "total": <int>, "skip": <int>, "limit": <int>, "has_more": <bool>}
"""

from typing import Any, Optional


def success_response(data: Any = None, message: Optional[str] = None) -> dict:
    """Wrap a payload in the success envelope."""
    return {"success": True, "message": message, "data": data}


def error_response(message: str) -> dict:
    """Build the error envelope."""
    return {"success": False, "message": message}


def paginated_response(
    items: list,
    total: int,
    skip: int = 0,
    limit: int = 50,
) -> dict:
    """Wrap a page of items.

    Args:
        items: The page of serialized items.
        total: Total count across all pages.
        skip: Number of items skipped.
        limit: Page size requested.
    """
    return {
        "items": items,
        "total": total,
        "skip": skip,
        "limit": limit,
        "has_more": (skip + len(items)) < total,
    }
