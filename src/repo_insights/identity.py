"""Canonical identity keys for commit authors and contributor records.

Registered accounts are keyed by numeric id (``user:<id>``), falling back to
the login only when the id is missing.
Anonymous authors are keyed by the email recorded in commit metadata
(``anon:<email>``). Emails are compared as-is, without case folding.
"""

from __future__ import annotations

from .models import Anonymous, Commit, ContributorRecord, Identity, Registered

USER_PREFIX = "user:"
ANON_PREFIX = "anon:"


def identity_key(identity: Identity) -> str | None:
    """Return the de-duplication key for an identity, or None if it has none."""
    if isinstance(identity, Registered):
        if identity.id is not None:
            return f"{USER_PREFIX}{identity.id}"
        if identity.login:
            return f"{USER_PREFIX}{identity.login}"
        return None
    if isinstance(identity, Anonymous):
        if identity.email and identity.email.strip():
            return f"{ANON_PREFIX}{identity.email}"
        return None
    raise TypeError(f"unsupported identity type: {type(identity).__name__}")


def commit_identity(commit: Commit) -> Identity:
    """The identity a commit is attributed to: its account, else its metadata."""
    if commit.author is not None:
        return commit.author
    return Anonymous(email=commit.author_email, name=commit.author_name)


def resolve(commit: Commit) -> str | None:
    """Identity key of a commit's author; None means unattributable."""
    return identity_key(commit_identity(commit))


def contributor_key(record: ContributorRecord) -> str | None:
    return identity_key(record.identity)
