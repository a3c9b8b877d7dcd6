"""
API Dependencies
Common dependencies for API endpoints
"""

from fastapi import Query

from wholesale.core.database import get_db  # noqa: F401


def get_pagination_params(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500)
) -> dict:
    """
    Common pagination parameters.
    """
    return {"skip": skip, "limit": limit}
