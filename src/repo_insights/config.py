"""Tunables for a fetch cycle."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_COMMIT_LIMIT = 100
DEFAULT_PAGE_SIZE = 100
# 10 pages of 100 = 1000 contributors; anything beyond is truncated.
DEFAULT_MAX_CONTRIBUTOR_PAGES = 10


@dataclass(frozen=True)
class InsightsConfig:
    commit_limit: int = DEFAULT_COMMIT_LIMIT
    contributor_page_size: int = DEFAULT_PAGE_SIZE
    max_contributor_pages: int = DEFAULT_MAX_CONTRIBUTOR_PAGES

    def __post_init__(self) -> None:
        if self.commit_limit < 1:
            raise ValueError("commit_limit must be at least 1")
        if self.contributor_page_size < 1:
            raise ValueError("contributor_page_size must be at least 1")
        if self.max_contributor_pages < 1:
            raise ValueError("max_contributor_pages must be at least 1")
