"""
Offset pagination for list endpoints.

Pages are 1-indexed; page_size is clamped to 1..MAX_PAGE_SIZE.
"""
from typing import Any, Dict, List
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

MAX_PAGE_SIZE = 100


def page_metadata(total: int, page: int, page_size: int) -> Dict[str, Any]:
    total_pages = max(1, -(-total // page_size))
    return {
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_previous": page > 1,
    }


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    page_size: int = 10,
    scalars: bool = True
) -> Dict[str, Any]:
    """
    Run `query` for one page and count the full result.

    With scalars=False each item is the whole row, which is what
    multi-entity selects (model plus labelled columns) need.
    """
    page = max(1, page)
    page_size = max(1, min(MAX_PAGE_SIZE, page_size))

    total = (await db.execute(
        select(func.count()).select_from(query.order_by(None).subquery())
    )).scalar() or 0

    result = await db.execute(query.offset((page - 1) * page_size).limit(page_size))
    items: List[Any] = list(result.scalars().all() if scalars else result.all())

    return {"items": items, **page_metadata(total, page, page_size)}
