"""Fetch orchestration: one fetch cycle per repository id, stale results dropped."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from functools import partial

from .aggregator import aggregate_impact, bucketize_timeline, normalize_languages
from .config import InsightsConfig
from .contributors import MergeResult, merge_contributors
from .errors import InsightsError, NotFoundError, TransientError
from .github.client import GitHubClient
from .models import Commit, FetchState, RepoInsights, RepositoryRef
from .renderer import render_csv, render_json, render_report
from .source import DataSource

logger = logging.getLogger(__name__)

Subscriber = Callable[[FetchState, "RepoInsights | None"], None]


class _StaleCycle(Exception):
    """Raised internally when a newer cycle has superseded the running one."""


class InsightsSession:
    """Drives fetch cycles for a single repository view.

    ``load`` starts a cycle whenever the repository id changes. Each cycle
    takes a generation number; once a newer cycle starts, anything the older
    one receives is discarded instead of being published.
    """

    def __init__(self, source: DataSource, config: InsightsConfig | None = None) -> None:
        self._source = source
        self._config = config or InsightsConfig()
        self._generation = 0
        self._subscribers: list[Subscriber] = []
        self.repo_id: int | None = None
        self.state = FetchState.IDLE
        self.insights: RepoInsights | None = None
        self.error: InsightsError | None = None

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call ``callback(state, insights)`` on every published transition."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(
        self,
        state: FetchState,
        insights: RepoInsights | None = None,
        error: InsightsError | None = None,
    ) -> None:
        self.state = state
        self.insights = insights
        self.error = error
        for callback in list(self._subscribers):
            callback(state, insights)

    def _ensure_current(self, generation: int) -> None:
        if generation != self._generation:
            raise _StaleCycle

    async def load(self, repo_id: int) -> FetchState:
        """Run a fetch cycle for ``repo_id`` unless one already exists for it.

        Returns the session state once this call is done; for a superseded
        cycle that is the newer cycle's state.
        """
        if repo_id == self.repo_id and self.state is not FetchState.IDLE:
            return self.state

        self._generation += 1
        generation = self._generation
        self.repo_id = repo_id
        logger.info("loading repository %s (cycle %d)", repo_id, generation)
        self._publish(FetchState.LOADING)

        try:
            insights = await self._fetch(repo_id, generation)
        except _StaleCycle:
            logger.debug("discarding results of superseded cycle %d", generation)
            return self.state
        except NotFoundError as exc:
            if generation != self._generation:
                return self.state
            logger.info("repository %s not found", repo_id)
            self._publish(FetchState.NOT_FOUND, error=exc)
        except InsightsError as exc:
            if generation != self._generation:
                return self.state
            logger.warning("loading repository %s failed: %s", repo_id, exc)
            self._publish(FetchState.FAILED, error=exc)
        except Exception as exc:
            if generation != self._generation:
                return self.state
            logger.exception("unexpected error loading repository %s", repo_id)
            error = TransientError(str(exc) or type(exc).__name__)
            error.__cause__ = exc
            self._publish(FetchState.FAILED, error=error)
        else:
            logger.info(
                "repository %s ready: %d commits, %d contributors",
                repo_id,
                insights.window_size,
                len(insights.contributors),
            )
            self._publish(FetchState.READY, insights=insights)
        return self.state

    async def _fetch(self, repo_id: int, generation: int) -> RepoInsights:
        repository = await self._source.get_repository_by_id(repo_id)
        self._ensure_current(generation)

        owner, name = repository.owner_and_name
        results = await asyncio.gather(
            self._source.list_commits(owner, name, self._config.commit_limit),
            merge_contributors(
                partial(self._source.get_contributors_page, owner, name),
                page_size=self._config.contributor_page_size,
                max_pages=self._config.max_contributor_pages,
            ),
            self._source.get_languages(owner, name),
            return_exceptions=True,
        )
        self._ensure_current(generation)

        for result in results:
            if isinstance(result, BaseException):
                raise result
        commits, merged, lang_bytes = results
        return _build_insights(repository, commits, merged, lang_bytes)


def _build_insights(
    repository: RepositoryRef,
    commits: list[Commit],
    merged: MergeResult,
    lang_bytes: dict[str, int],
) -> RepoInsights:
    return RepoInsights(
        repository=repository,
        window_size=len(commits),
        contributors=merged.records,
        impact=aggregate_impact(commits),
        timeline=bucketize_timeline(commits),
        languages=normalize_languages(lang_bytes),
        contributors_truncated=merged.truncated,
    )


async def run(
    repo_id: int,
    token: str | None = None,
    top_n: int = 10,
    output_format: str = "table",
    output_file: str | None = None,
    api_url: str | None = None,
    verify_ssl: bool = True,
    config: InsightsConfig | None = None,
) -> InsightsSession:
    """Main pipeline: fetch one repository, aggregate, render."""
    async with GitHubClient(token=token, base_url=api_url, verify_ssl=verify_ssl) as client:
        session = InsightsSession(client, config)
        await session.load(repo_id)

    if session.state is FetchState.READY and session.insights is not None:
        if output_format == "json":
            render_json(session.insights, output_file=output_file)
        elif output_format == "csv":
            render_csv(session.insights, output_file=output_file)
        else:
            render_report(session.insights, top_n=top_n, output_file=output_file)
    return session
