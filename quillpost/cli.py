"""Command-line interface for Quillpost.

This module defines the CLI commands using Click framework.

Commands:
- build: Build the site into the output directory.
- serve: Build, then serve the site and rebuild on changes.
"""

from __future__ import annotations

from pathlib import Path

import click

from . import __version__
from .errors import QuillpostError


@click.group()
@click.version_option(version=__version__, prog_name="quillpost")
def cli():
    """Quillpost static blog generator."""


@cli.command()
@click.option(
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
    help="Directory to write the site to (overrides dist_dir in site.yml)",
)
def build(output: Path | None):
    """Build the site into the output directory."""
    project_root = Path.cwd()
    from .build import build_site

    try:
        result = build_site(project_root, output_dir_override=output)
    except QuillpostError as exc:
        _report_failure(exc, project_root)
        raise SystemExit(1) from None
    click.echo(f"Built {len(result.posts)} posts into {result.output_dir}")


@cli.command()
@click.option("--host", required=False, help="Interface to bind (overrides site.yml)")
@click.option(
    "--port",
    type=click.IntRange(1, 65535),
    required=False,
    help="Port to run the dev server (overrides site.yml)",
)
@click.option("--no-watch", is_flag=True, help="Serve without rebuilding on changes")
@click.option(
    "--poll-ms",
    type=click.IntRange(1, 60_000),
    required=False,
    help="Milliseconds between change checks (overrides site.yml)",
)
def serve(host: str | None, port: int | None, no_watch: bool, poll_ms: int | None):
    """Build, then serve the site and rebuild on changes."""
    project_root = Path.cwd()
    from .server import serve_site

    try:
        serve_site(
            project_root,
            host=host,
            port=port,
            watch=not no_watch,
            poll_ms=poll_ms,
        )
    except QuillpostError as exc:
        _report_failure(exc, project_root)
        raise SystemExit(1) from None
    except OSError as exc:
        raise click.ClickException(f"Cannot start dev server: {exc}") from exc


def _report_failure(exc: QuillpostError, project_root: Path) -> None:
    """Print which file failed and why to stderr."""
    click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
    if exc.path is not None:
        click.echo(
            click.style(f"  File: {_display_path(exc.path, project_root)}", fg="yellow"),
            err=True,
        )
    click.echo(click.style(f"  Error: {exc.kind}: {exc.message}", fg="white"), err=True)


def _display_path(path: Path, project_root: Path) -> str:
    try:
        return str(path.relative_to(project_root))
    except ValueError:
        return str(path)


def main():
    """Entry point for the CLI application."""
    cli()
