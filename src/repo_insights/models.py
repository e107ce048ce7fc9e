"""Data models for repo-insights."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Union


@dataclass(frozen=True)
class RepositoryRef:
    id: int
    full_name: str
    description: str | None = None
    html_url: str | None = None
    language: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    default_branch: str | None = None
    created_at: str | None = None
    pushed_at: str | None = None

    @property
    def owner_and_name(self) -> tuple[str, str]:
        """Split ``full_name`` on the first ``/``."""
        owner, _, name = self.full_name.partition("/")
        return owner, name


@dataclass(frozen=True)
class Registered:
    """An author the data source matched to an account."""

    id: int | None
    login: str
    avatar_url: str = ""
    html_url: str = ""


@dataclass(frozen=True)
class Anonymous:
    """An author known only by the name/email recorded in commit metadata."""

    email: str
    name: str


Identity = Union[Registered, Anonymous]


@dataclass(frozen=True)
class Commit:
    sha: str
    author: Registered | None
    author_name: str
    author_email: str
    committed_at: datetime
    authored_at: datetime | None = None
    message: str = ""


@dataclass(frozen=True)
class ContributorRecord:
    identity: Identity
    total_contributions: int


@dataclass
class ImpactEntry:
    identity_key: str
    display_name: str
    avatar_url: str | None
    html_url: str | None
    commit_count: int
    percentage: float
    is_anonymous: bool


@dataclass
class TimelineBucket:
    date_key: str
    count: int


@dataclass
class LanguageShare:
    name: str
    bytes: int
    percentage: float
    size_label: str


@dataclass
class RepoInsights:
    """Every derived view model produced by one fetch cycle."""

    repository: RepositoryRef
    window_size: int
    contributors: list[ContributorRecord] = field(default_factory=list)
    impact: list[ImpactEntry] = field(default_factory=list)
    timeline: list[TimelineBucket] = field(default_factory=list)
    languages: list[LanguageShare] = field(default_factory=list)
    contributors_truncated: bool = False


class FetchState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    NOT_FOUND = "not_found"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (FetchState.READY, FetchState.NOT_FOUND, FetchState.FAILED)
