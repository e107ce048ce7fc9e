"""Map GitHub REST payloads onto repo-insights models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..models import Anonymous, Commit, ContributorRecord, Registered, RepositoryRef


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp (``Z`` suffix allowed) into aware UTC."""
    if not value:
        return None
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def parse_repository(data: dict[str, Any]) -> RepositoryRef:
    return RepositoryRef(
        id=int(data["id"]),
        full_name=data["full_name"],
        description=data.get("description"),
        html_url=data.get("html_url"),
        language=data.get("language"),
        stargazers_count=data.get("stargazers_count") or 0,
        forks_count=data.get("forks_count") or 0,
        open_issues_count=data.get("open_issues_count") or 0,
        default_branch=data.get("default_branch"),
        created_at=data.get("created_at"),
        pushed_at=data.get("pushed_at"),
    )


def _parse_account(data: dict[str, Any] | None) -> Registered | None:
    # GitHub sends an empty object instead of null for some deleted accounts.
    if not data:
        return None
    account_id = data.get("id")
    login = data.get("login") or ""
    if account_id is None and not login:
        return None
    return Registered(
        id=int(account_id) if account_id is not None else None,
        login=login,
        avatar_url=data.get("avatar_url") or "",
        html_url=data.get("html_url") or "",
    )


def parse_commit(data: dict[str, Any]) -> Commit:
    meta = data.get("commit") or {}
    author_meta = meta.get("author") or {}
    committer_meta = meta.get("committer") or {}

    committed_at = parse_timestamp(committer_meta.get("date"))
    authored_at = parse_timestamp(author_meta.get("date"))
    if committed_at is None:
        # no committer date: use the author date
        committed_at = authored_at
    if committed_at is None:
        raise ValueError(f"commit {data.get('sha', '?')} has no timestamp")

    return Commit(
        sha=data.get("sha", ""),
        author=_parse_account(data.get("author")),
        author_name=author_meta.get("name") or "",
        author_email=author_meta.get("email") or "",
        committed_at=committed_at,
        authored_at=authored_at,
        message=meta.get("message") or "",
    )


def parse_contributor(data: dict[str, Any]) -> ContributorRecord:
    """One row of ``/contributors?anon=1``.

    Anonymous rows carry ``type: "Anonymous"`` with ``email`` and ``name``
    instead of account fields.
    """
    contributions = int(data.get("contributions") or 0)
    if data.get("type") == "Anonymous" or (data.get("id") is None and not data.get("login")):
        identity = Anonymous(email=data.get("email") or "", name=data.get("name") or "")
    else:
        identity = Registered(
            id=int(data["id"]) if data.get("id") is not None else None,
            login=data.get("login") or "",
            avatar_url=data.get("avatar_url") or "",
            html_url=data.get("html_url") or "",
        )
    return ContributorRecord(identity=identity, total_contributions=contributions)
