"""Tests for the renderer module."""

from __future__ import annotations

import csv
import io
import json
import os
import tempfile

from repo_insights.models import (
    Anonymous,
    ContributorRecord,
    ImpactEntry,
    LanguageShare,
    Registered,
    RepoInsights,
    RepositoryRef,
    TimelineBucket,
)
from repo_insights.renderer import render_csv, render_json, render_report


def _make_insights(**kwargs) -> RepoInsights:
    defaults = dict(
        repository=RepositoryRef(
            id=1,
            full_name="octo/hello",
            description="A test repo",
            language="Python",
            stargazers_count=1200,
            forks_count=30,
        ),
        window_size=4,
        contributors=[
            ContributorRecord(identity=Registered(id=1, login="alice"), total_contributions=120),
            ContributorRecord(
                identity=Anonymous(email="ghost@x.com", name="Ghost"), total_contributions=2
            ),
        ],
        impact=[
            ImpactEntry("user:1", "alice", None, None, 3, 75.0, False),
            ImpactEntry("anon:ghost@x.com", "Ghost", None, None, 1, 25.0, True),
        ],
        timeline=[TimelineBucket("2024-01-01", 1), TimelineBucket("2024-01-02", 3)],
        languages=[
            LanguageShare("Python", 2 * 1024 * 1024, 80.0, "2.00 MB"),
            LanguageShare("Shell", 512, 20.0, "0.50 KB"),
        ],
    )
    defaults.update(kwargs)
    return RepoInsights(**defaults)


def test_render_report_no_error(capsys):
    render_report(_make_insights(), top_n=5)
    out = capsys.readouterr().out
    assert "octo/hello" in out
    assert "alice" in out
    assert "Ghost" in out
    assert "2024-01-02" in out
    assert "2.00 MB" in out
    assert "75.0%" in out


def test_render_report_marks_anonymous(capsys):
    render_report(_make_insights(), top_n=5)
    assert "(anonymous)" in capsys.readouterr().out


def test_render_report_truncation_warning(capsys):
    render_report(_make_insights(contributors_truncated=True))
    assert "truncated" in capsys.readouterr().out


def test_render_report_empty_sections(capsys):
    render_report(
        _make_insights(window_size=0, contributors=[], impact=[], timeline=[], languages=[])
    )
    out = capsys.readouterr().out
    assert "No commits found" in out
    assert "No contributors found" in out
    assert "No language data available" in out


def test_render_report_escapes_markup(capsys):
    impact = [ImpactEntry("anon:x@x.com", "[bold]x", None, None, 1, 100.0, True)]
    render_report(_make_insights(impact=impact))
    assert "[bold]x" in capsys.readouterr().out


def test_render_report_to_file():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "report.txt")
        render_report(_make_insights(), output_file=path)
        with open(path, encoding="utf-8") as f:
            assert "Language Distribution" in f.read()


def test_render_json(capsys):
    render_json(_make_insights())
    data = json.loads(capsys.readouterr().out)
    assert data["repository"]["full_name"] == "octo/hello"
    assert data["window_size"] == 4
    assert data["impact"][0]["identity_key"] == "user:1"
    assert data["contributors"][1]["identity_key"] == "anon:ghost@x.com"
    assert data["contributors"][1]["is_anonymous"] is True
    assert data["timeline"][1] == {"date_key": "2024-01-02", "count": 3}


def test_render_csv(capsys):
    render_csv(_make_insights())
    rows = list(csv.reader(io.StringIO(capsys.readouterr().out)))
    assert rows[0] == ["identity_key", "name", "commits", "percentage", "anonymous"]
    assert rows[1] == ["user:1", "alice", "3", "75.0", "False"]
    assert len(rows) == 3


def test_render_csv_to_file():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "impact.csv")
        render_csv(_make_insights(), output_file=path)
        with open(path, encoding="utf-8") as f:
            assert f.readline().startswith("identity_key")
