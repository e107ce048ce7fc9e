"""The read-only data source the orchestrator pulls from."""

from __future__ import annotations

from typing import Protocol

from .models import Commit, ContributorRecord, RepositoryRef


class DataSource(Protocol):
    async def get_repository_by_id(self, repo_id: int) -> RepositoryRef:
        """Raises NotFoundError when the id does not resolve."""
        ...

    async def list_commits(self, owner: str, name: str, limit: int) -> list[Commit]:
        ...

    async def get_contributors_page(
        self, owner: str, name: str, page_size: int, page_index: int
    ) -> list[ContributorRecord]:
        ...

    async def get_languages(self, owner: str, name: str) -> dict[str, int]:
        ...
