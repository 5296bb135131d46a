"""
Page-addressable views over index-accessible on-chain collections.
"""

import asyncio
from typing import Awaitable, Callable, List, TypeVar

from ..errors import InvalidParameter

T = TypeVar("T")


def page_range(total: int, page: int, page_size: int) -> range:
    """
    Half-open index range [page*page_size, min(total, page*page_size+page_size)).

    Pages past the end yield an empty range.

    Raises:
        InvalidParameter: For negative pages or non-positive page sizes
    """
    if page < 0:
        raise InvalidParameter(f"Page must not be negative, got: {page}")
    if page_size <= 0:
        raise InvalidParameter(f"Page size must be positive, got: {page_size}")
    start = page * page_size
    return range(start, min(total, start + page_size))


def page_indices(total: int, page: int, page_size: int, newest_first: bool = False) -> List[int]:
    """Collection indices for a page, optionally newest (highest index) first."""
    indices = page_range(total, page, page_size)
    if newest_first:
        return [total - 1 - i for i in indices]
    return list(indices)


async def fetch_page(
    total: int,
    page: int,
    page_size: int,
    fetch_item: Callable[[int], Awaitable[T]],
    newest_first: bool = False,
) -> List[T]:
    """
    Resolve every item of a page concurrently.

    Results are returned in page order regardless of completion order.
    """
    indices = page_indices(total, page, page_size, newest_first)
    if not indices:
        return []
    return list(await asyncio.gather(*(fetch_item(i) for i in indices)))
