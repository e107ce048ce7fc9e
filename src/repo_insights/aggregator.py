"""Derived view models: impact ranking, commit timeline, language shares.

Everything here is synchronous and pure; the orchestrator calls these once
per fetch cycle with the data it gathered.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone

from .identity import commit_identity, resolve
from .models import (
    Anonymous,
    Commit,
    ImpactEntry,
    LanguageShare,
    Registered,
    TimelineBucket,
)

KB = 1024
MB = 1024 * 1024


def _display_fields(commit: Commit) -> tuple[str, str | None, str | None, bool]:
    """(display_name, avatar_url, html_url, is_anonymous) as of this commit."""
    identity = commit_identity(commit)
    if isinstance(identity, Registered):
        name = identity.login or str(identity.id)
        return name, identity.avatar_url or None, identity.html_url or None, False
    if isinstance(identity, Anonymous):
        return identity.name or identity.email, None, None, True
    raise TypeError(f"unsupported identity type: {type(identity).__name__}")


def aggregate_impact(commits: Sequence[Commit]) -> list[ImpactEntry]:
    """Rank identities by commit count within the window.

    Ties keep first-seen order. The denominator is the whole window, so
    unattributable commits lower every percentage without getting an entry.
    """
    total = len(commits)
    if total == 0:
        return []

    counts: dict[str, int] = defaultdict(int)
    snapshots: dict[str, tuple[str, str | None, str | None, bool]] = {}
    for commit in commits:
        key = resolve(commit)
        if key is None:
            continue
        if key not in snapshots:
            snapshots[key] = _display_fields(commit)
        counts[key] += 1

    entries = []
    for key, (name, avatar_url, html_url, is_anonymous) in snapshots.items():
        count = counts[key]
        entries.append(
            ImpactEntry(
                identity_key=key,
                display_name=name,
                avatar_url=avatar_url,
                html_url=html_url,
                commit_count=count,
                percentage=count / total * 100,
                is_anonymous=is_anonymous,
            )
        )
    # list.sort is stable, so equal counts stay in first-seen order
    entries.sort(key=lambda e: e.commit_count, reverse=True)
    return entries


def _utc_date_key(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%d")


def bucketize_timeline(commits: Sequence[Commit]) -> list[TimelineBucket]:
    """Count commits per UTC calendar day of their committer timestamp."""
    per_day: dict[str, int] = defaultdict(int)
    for commit in commits:
        per_day[_utc_date_key(commit.committed_at)] += 1
    return [
        TimelineBucket(date_key=day, count=count)
        for day, count in sorted(per_day.items())
    ]


def format_size(num_bytes: int) -> str:
    """Human-readable size: MB from 1 MiB upwards, KB below, 2 decimals."""
    if num_bytes >= MB:
        return f"{num_bytes / MB:.2f} MB"
    return f"{num_bytes / KB:.2f} KB"


def normalize_languages(byte_counts: Mapping[str, int]) -> list[LanguageShare]:
    """Percentage share per language, largest byte count first."""
    total_bytes = sum(byte_counts.values())
    if total_bytes == 0:
        return []
    return [
        LanguageShare(
            name=lang,
            bytes=b,
            percentage=round(b / total_bytes * 100, 1),
            size_label=format_size(b),
        )
        for lang, b in sorted(byte_counts.items(), key=lambda x: x[1], reverse=True)
    ]
