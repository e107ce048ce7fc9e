"""Error taxonomy shared by the data source and the orchestrator."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ContributorRecord


class InsightsError(Exception):
    """Base class for every error surfaced by repo-insights."""


class NotFoundError(InsightsError):
    """The requested repository does not exist (or is not visible)."""


class TransientError(InsightsError):
    """Network, transport or unexpected-status failure.

    ``status`` is the HTTP status code, or 0 when no response was received.
    """

    def __init__(self, message: str, status: int = 0) -> None:
        super().__init__(message)
        self.status = status


class ContributorMergeError(TransientError):
    """A contributor page failed; ``partial`` holds what was merged before it."""

    def __init__(
        self,
        message: str,
        partial: list[ContributorRecord],
        page_index: int,
        status: int = 0,
    ) -> None:
        super().__init__(message, status=status)
        self.partial = partial
        self.page_index = page_index
