"""Rich-based terminal report renderer with JSON/CSV support."""

from __future__ import annotations

import csv
import io
import json
from dataclasses import asdict

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .identity import identity_key
from .models import Anonymous, ContributorRecord, RepoInsights


def _format_number(n: int) -> str:
    return f"{n:,}"


def _make_bar(percentage: float, width: int = 20) -> str:
    filled = round(percentage / 100 * width)
    return "█" * filled + "░" * (width - filled)


def _make_inline_bar(count: int, max_count: int, width: int = 15) -> str:
    if max_count == 0:
        return ""
    filled = round(count / max_count * width)
    return "█" * filled


def _contributor_label(record: ContributorRecord) -> str:
    identity = record.identity
    if isinstance(identity, Anonymous):
        return identity.name or identity.email or "Unknown"
    return identity.login or "Unknown"


def _write_to_file(content: str, output_file: str) -> None:
    """Write content to a file and print confirmation."""
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(content)
    Console().print(f"Saved to {output_file}")


def render_report(
    insights: RepoInsights,
    top_n: int = 10,
    output_file: str | None = None,
) -> None:
    """Render RepoInsights to the terminal using rich."""
    if output_file:
        string_io = io.StringIO()
        console = Console(file=string_io, force_terminal=False, width=120)
    else:
        console = Console()

    repo = insights.repository

    # Header panel
    details = []
    if repo.language:
        details.append(repo.language)
    details.append(f"Stars {_format_number(repo.stargazers_count)}")
    details.append(f"Forks {_format_number(repo.forks_count)}")
    header = f"{repo.full_name}\n{' | '.join(details)}"
    if repo.description:
        header += f"\n{repo.description}"
    console.print(Panel(Text(header, justify="center"), style="bold cyan"))
    console.print()

    # Commit timeline
    console.print(f"[bold]Commit Timeline[/bold] [dim](last {insights.window_size} commits)[/dim]")
    if insights.timeline:
        timeline_table = Table(show_header=True, header_style="bold")
        timeline_table.add_column("Date", no_wrap=True)
        timeline_table.add_column("Commits", justify="right")
        timeline_table.add_column("Bar")
        max_count = max(b.count for b in insights.timeline)
        for bucket in insights.timeline:
            timeline_table.add_row(
                bucket.date_key,
                _format_number(bucket.count),
                _make_inline_bar(bucket.count, max_count),
            )
        console.print(timeline_table)
    else:
        console.print("  [dim]No commits found[/dim]")
    console.print()

    # Contributors
    console.print(
        f"[bold]Contributors ({_format_number(len(insights.contributors))})[/bold]"
    )
    if insights.contributors_truncated:
        console.print(
            "[bold yellow]Warning:[/bold yellow] contributor list truncated; "
            "only the first pages were fetched"
        )
    if insights.contributors:
        contrib_table = Table(show_header=True, header_style="bold")
        contrib_table.add_column("#", justify="right")
        contrib_table.add_column("Contributor")
        contrib_table.add_column("Contributions", justify="right")
        for i, record in enumerate(insights.contributors[:top_n], 1):
            contrib_table.add_row(
                str(i),
                escape(_contributor_label(record)),
                _format_number(record.total_contributions),
            )
        console.print(contrib_table)
    else:
        console.print("  [dim]No contributors found[/dim]")
    console.print()

    # Recent impact
    console.print(
        f"[bold]Recent Impact (top {top_n})[/bold] "
        f"[dim]based on last {insights.window_size} commits[/dim]"
    )
    if insights.impact:
        impact_table = Table(show_header=True, header_style="bold")
        impact_table.add_column("#", justify="right")
        impact_table.add_column("Author")
        impact_table.add_column("Commits", justify="right")
        impact_table.add_column("Share", justify="right")
        impact_table.add_column("Bar")
        for i, entry in enumerate(insights.impact[:top_n], 1):
            name = escape(entry.display_name)
            if entry.is_anonymous:
                name += " [dim](anonymous)[/dim]"
            impact_table.add_row(
                str(i),
                name,
                _format_number(entry.commit_count),
                f"{entry.percentage:.1f}%",
                _make_bar(entry.percentage),
            )
        console.print(impact_table)
    else:
        console.print("  [dim]No commit data available[/dim]")
    console.print()

    # Language distribution
    console.print("[bold]Language Distribution[/bold]")
    if insights.languages:
        lang_table = Table(show_header=True, header_style="bold")
        lang_table.add_column("Language")
        lang_table.add_column("Bar")
        lang_table.add_column("Percentage", justify="right")
        lang_table.add_column("Size", justify="right")
        for lang in insights.languages:
            lang_table.add_row(
                lang.name,
                _make_bar(lang.percentage),
                f"{lang.percentage}%",
                lang.size_label,
            )
        console.print(lang_table)
    else:
        console.print("  [dim]No language data available[/dim]")
    console.print()

    if output_file:
        _write_to_file(string_io.getvalue(), output_file)


def render_json(insights: RepoInsights, output_file: str | None = None) -> None:
    """Render RepoInsights as JSON."""
    data = asdict(insights)
    for raw, record in zip(data["contributors"], insights.contributors):
        raw["identity_key"] = identity_key(record.identity)
        raw["is_anonymous"] = isinstance(record.identity, Anonymous)
    content = json.dumps(data, indent=2, ensure_ascii=False)
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content)


def render_csv(insights: RepoInsights, output_file: str | None = None) -> None:
    """Render the impact ranking as CSV."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["identity_key", "name", "commits", "percentage", "anonymous"])
    for e in insights.impact:
        writer.writerow(
            [e.identity_key, e.display_name, e.commit_count, f"{e.percentage:.1f}", e.is_anonymous]
        )
    content = output.getvalue()
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content, end="")
