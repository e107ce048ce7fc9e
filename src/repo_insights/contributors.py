"""Contributor merger: walk contributor pages in order and de-duplicate."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from .config import DEFAULT_MAX_CONTRIBUTOR_PAGES, DEFAULT_PAGE_SIZE
from .errors import ContributorMergeError, TransientError
from .identity import contributor_key
from .models import ContributorRecord

logger = logging.getLogger(__name__)

PageFetcher = Callable[[int, int], Awaitable[list[ContributorRecord]]]


@dataclass
class MergeResult:
    records: list[ContributorRecord] = field(default_factory=list)
    pages_fetched: int = 0
    # True when the page ceiling stopped the walk on a full page.
    truncated: bool = False


async def merge_contributors(
    fetch_page: PageFetcher,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_pages: int = DEFAULT_MAX_CONTRIBUTOR_PAGES,
) -> MergeResult:
    """Fetch pages 1..max_pages sequentially and merge them.

    ``fetch_page(page_size, page_index)`` is awaited with 1-based indexes;
    page N+1 is only requested once page N has been seen, since a short or
    empty page ends the walk. Records are kept in arrival order and the first
    record for an identity key wins.
    """
    if max_pages < 1:
        raise ValueError("max_pages must be at least 1")

    result = MergeResult()
    seen: set[str] = set()

    for page_index in range(1, max_pages + 1):
        try:
            page = await fetch_page(page_size, page_index)
        except Exception as exc:
            status = exc.status if isinstance(exc, TransientError) else 0
            raise ContributorMergeError(
                f"contributor page {page_index} failed: {exc}",
                partial=list(result.records),
                page_index=page_index,
                status=status,
            ) from exc
        result.pages_fetched = page_index
        logger.debug("contributors page %d: %d records", page_index, len(page))

        for record in page:
            key = contributor_key(record)
            if key is None:
                logger.debug("contributor without identity key kept as-is: %r", record)
                result.records.append(record)
                continue
            if key in seen:
                continue
            seen.add(key)
            result.records.append(record)

        if len(page) < page_size:
            break
    else:
        result.truncated = True
        logger.warning(
            "contributor list truncated at %d pages (%d records)",
            max_pages,
            len(result.records),
        )

    return result
