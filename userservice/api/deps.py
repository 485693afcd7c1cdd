from dataclasses import dataclass

from fastapi import Query

from userservice.core.config import settings


@dataclass
class Pagination:
    offset: int
    limit: int


def get_pagination(
    offset: int = Query(0, description="Number of items to skip"),
    limit: int = Query(
        settings.PAGINATION_DEFAULT_LIMIT,
        description=f"Page size, at most {settings.PAGINATION_MAX_LIMIT}"
    ),
) -> Pagination:
    """Bounds are checked by the services so out-of-range values answer 400"""
    return Pagination(offset=offset, limit=limit)
