"""Listing helpers shared by the store modules."""

from typing import Optional, Sequence

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession


def like_pattern(name_filter: str) -> str:
    """
    Translate a name filter into a LIKE pattern.

    The filter matches anywhere in the name (substring match) and ``*``
    stands for any run of characters, so ``pe*za`` matches "Pepperoni Pizza".
    ``%`` and ``_`` in the filter are matched literally.
    """
    escaped = (
        name_filter.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
        .replace("*", "%")
    )
    return f"%{escaped}%"


async def fetch_page(
    db: AsyncSession,
    query: Select,
    page: int,
    limit: int,
) -> tuple[Sequence, bool]:
    """
    Run ``query`` for one page of results.

    Fetches one row past the page to tell whether more rows exist.

    Returns:
        (rows, more)
    """
    result = await db.execute(query.offset(page * limit).limit(limit + 1))
    rows = result.scalars().unique().all()
    return rows[:limit], len(rows) > limit


def apply_name_filter(query: Select, column, name_filter: Optional[str]) -> Select:
    if not name_filter:
        return query
    return query.where(column.ilike(like_pattern(name_filter), escape="\\"))
