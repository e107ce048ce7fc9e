"""CLI entrypoint for repo-insights."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from . import __version__
from .config import (
    DEFAULT_COMMIT_LIMIT,
    DEFAULT_MAX_CONTRIBUTOR_PAGES,
    InsightsConfig,
)
from .models import FetchState


def _configure_logging(verbosity: int) -> None:
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@click.command()
@click.argument("repo_id", type=click.IntRange(min=1))
@click.option(
    "--token",
    envvar="GITHUB_TOKEN",
    default=None,
    show_envvar=True,
    help="GitHub personal access token (optional, raises rate limits)",
)
@click.option(
    "--top-n", default=10, show_default=True, help="Number of rows to show per ranking"
)
@click.option(
    "--commit-limit",
    type=click.IntRange(1, 100),
    default=DEFAULT_COMMIT_LIMIT,
    show_default=True,
    help="Size of the recent-commit window",
)
@click.option(
    "--max-contributor-pages",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_CONTRIBUTOR_PAGES,
    show_default=True,
    help="Stop listing contributors after this many pages of 100",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "csv"], case_sensitive=False),
    default="table",
    show_default=True,
    help="Output format (csv exports the impact ranking only)",
)
@click.option(
    "--output",
    "output_file",
    default=None,
    type=click.Path(),
    help="Save output to file instead of stdout",
)
@click.option(
    "--api-url",
    envvar="GITHUB_API_URL",
    default=None,
    help="GitHub Enterprise API base URL",
)
@click.option(
    "--no-ssl-verify",
    is_flag=True,
    default=False,
    help="Disable SSL verification (self-signed certs)",
)
@click.option("-v", "--verbose", count=True, help="Log progress (-vv for debug)")
@click.version_option(version=__version__)
def main(
    repo_id: int,
    token: str | None,
    top_n: int,
    commit_limit: int,
    max_contributor_pages: int,
    output_format: str,
    output_file: str | None,
    api_url: str | None,
    no_ssl_verify: bool,
    verbose: int,
) -> None:
    """Show commit, contributor and language analytics for one repository.

    \b
    REPO_ID is the numeric GitHub repository id.

    \b
    Examples:
      repo-insights 1296269
      repo-insights 1296269 --format json --output insights.json
      repo-insights 1296269 --max-contributor-pages 3 -v
    """
    _configure_logging(verbose)
    config = InsightsConfig(
        commit_limit=commit_limit,
        max_contributor_pages=max_contributor_pages,
    )

    from .orchestrator import run

    session = asyncio.run(
        run(
            repo_id=repo_id,
            token=token,
            top_n=top_n,
            output_format=output_format.lower(),
            output_file=output_file,
            api_url=api_url,
            verify_ssl=not no_ssl_verify,
            config=config,
        )
    )

    if session.state is FetchState.NOT_FOUND:
        click.echo(f"Error: repository {repo_id} not found.", err=True)
        sys.exit(1)
    if session.state is FetchState.FAILED:
        status = getattr(session.error, "status", 0)
        if status in (401, 403):
            click.echo(
                "Error: Access denied or rate limited. Check your --token or $GITHUB_TOKEN.",
                err=True,
            )
        else:
            click.echo(f"Error: {session.error}", err=True)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
