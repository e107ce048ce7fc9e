"""Tests for the contributor merger."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from repo_insights.contributors import merge_contributors
from repo_insights.errors import ContributorMergeError, TransientError
from repo_insights.models import Anonymous, ContributorRecord, Registered


def _page(start: int, size: int) -> list[ContributorRecord]:
    return [
        ContributorRecord(identity=Registered(id=i, login=f"user{i}"), total_contributions=1)
        for i in range(start, start + size)
    ]


def _fetcher(sizes: list[int]) -> AsyncMock:
    pages = []
    start = 0
    for size in sizes:
        pages.append(_page(start, size))
        start += size
    return AsyncMock(side_effect=pages)


@pytest.mark.asyncio
async def test_merge_stops_on_short_page():
    fetch = _fetcher([100, 100, 37])
    result = await merge_contributors(fetch)
    assert fetch.await_count == 3
    assert len(result.records) == 237
    assert result.pages_fetched == 3
    assert result.truncated is False


@pytest.mark.asyncio
async def test_merge_requests_pages_in_order():
    fetch = _fetcher([100, 100, 37])
    await merge_contributors(fetch)
    assert [c.args for c in fetch.await_args_list] == [(100, 1), (100, 2), (100, 3)]


@pytest.mark.asyncio
async def test_merge_stops_at_page_ceiling():
    fetch = _fetcher([100] * 11)
    result = await merge_contributors(fetch)
    assert fetch.await_count == 10
    assert len(result.records) == 1000
    assert result.truncated is True


@pytest.mark.asyncio
async def test_merge_configurable_ceiling():
    fetch = _fetcher([100] * 5)
    result = await merge_contributors(fetch, max_pages=2)
    assert fetch.await_count == 2
    assert len(result.records) == 200
    assert result.truncated is True


@pytest.mark.asyncio
async def test_merge_short_last_page_at_ceiling_is_not_truncated():
    fetch = _fetcher([100, 50])
    result = await merge_contributors(fetch, max_pages=2)
    assert result.truncated is False


@pytest.mark.asyncio
async def test_merge_stops_on_empty_page():
    fetch = _fetcher([100, 0, 100])
    result = await merge_contributors(fetch)
    assert fetch.await_count == 2
    assert len(result.records) == 100


@pytest.mark.asyncio
async def test_merge_empty_repository():
    fetch = _fetcher([0])
    result = await merge_contributors(fetch)
    assert result.records == []
    assert result.pages_fetched == 1


@pytest.mark.asyncio
async def test_merge_deduplicates_keeping_first_occurrence():
    first = ContributorRecord(identity=Registered(id=1, login="alice"), total_contributions=9)
    renamed = ContributorRecord(identity=Registered(id=1, login="alice2"), total_contributions=9)
    anon = ContributorRecord(identity=Anonymous(email="a@x.com", name="A"), total_contributions=2)
    anon_again = ContributorRecord(
        identity=Anonymous(email="a@x.com", name="Other"), total_contributions=2
    )
    bob = ContributorRecord(identity=Registered(id=2, login="bob"), total_contributions=4)
    fetch = AsyncMock(side_effect=[[first, anon, bob], [renamed, anon_again]])
    result = await merge_contributors(fetch, page_size=3)
    assert result.records == [first, anon, bob]
    assert fetch.await_count == 2


@pytest.mark.asyncio
async def test_merge_keeps_keyless_records():
    nameless = ContributorRecord(identity=Anonymous(email="", name="?"), total_contributions=1)
    fetch = AsyncMock(return_value=[nameless, nameless])
    result = await merge_contributors(fetch, page_size=5)
    assert result.records == [nameless, nameless]


@pytest.mark.asyncio
async def test_merge_failure_carries_partial_result():
    fetch = AsyncMock(side_effect=[_page(0, 100), TransientError("boom", status=502)])
    with pytest.raises(ContributorMergeError) as excinfo:
        await merge_contributors(fetch)
    err = excinfo.value
    assert len(err.partial) == 100
    assert err.page_index == 2
    assert err.status == 502
    assert isinstance(err.__cause__, TransientError)


@pytest.mark.asyncio
async def test_merge_unexpected_error_carries_partial_result():
    fetch = AsyncMock(side_effect=[_page(0, 100), RuntimeError("decoder blew up")])
    with pytest.raises(ContributorMergeError) as excinfo:
        await merge_contributors(fetch)
    err = excinfo.value
    assert len(err.partial) == 100
    assert err.page_index == 2
    assert err.status == 0
    assert isinstance(err.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_merge_rejects_zero_page_ceiling():
    fetch = AsyncMock(return_value=[])
    with pytest.raises(ValueError):
        await merge_contributors(fetch, max_pages=0)
    fetch.assert_not_awaited()
