"""CLI interface for lj2hugo."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from lj2hugo.config import load_config, merge_cli_overrides
from lj2hugo.pipeline import convert_posts

app = typer.Typer(
    name="lj2hugo",
    help="Convert LiveJournal XML exports into Hugo markdown posts.",
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from lj2hugo import __version__

        console.print(f"lj2hugo {__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=verbose)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """lj2hugo - LiveJournal to Hugo."""
    pass


@app.command()
def post(
    paths: Annotated[
        list[Path],
        typer.Argument(help="LiveJournal XML export files (L-<id>)."),
    ],
    comments: Annotated[
        Optional[bool],
        typer.Option("--comments/--no-comments", "-c", help="Include comments in output."),
    ] = None,
    spam: Annotated[
        Optional[bool],
        typer.Option("--spam/--no-spam", "-s", help="Include spam comments in output."),
    ] = None,
    banned: Annotated[
        Optional[bool],
        typer.Option(
            "--banned/--no-banned", "-b", help="Include banned-user comments in output."
        ),
    ] = None,
    deleted: Annotated[
        Optional[bool],
        typer.Option("--deleted/--no-deleted", "-d", help="Include deleted comments in output."),
    ] = None,
    mood_ids: Annotated[
        Optional[bool],
        typer.Option(
            "--mood-ids/--no-mood-ids",
            help="Resolve stock mood ids when an entry has no mood text.",
        ),
    ] = None,
    keep_going: Annotated[
        Optional[bool],
        typer.Option(
            "--keep-going/--fail-fast",
            help="Carry on with the remaining files after a failure.",
        ),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", help="Path to a .lj2hugo.toml config file."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """Create Hugo posts from LiveJournal entries.

    Accepts a list of XML exports as written by ljdump and writes a
    markdown file next to each one, suitable for the Hugo static site
    generator. Comments are read from the matching C-<id> file.
    """
    _setup_logging(verbose)

    config = merge_cli_overrides(
        load_config(config_path),
        show_comments=comments,
        show_spam=spam,
        show_banned=banned,
        show_deleted=deleted,
        resolve_mood_ids=mood_ids,
        keep_going=keep_going,
    )

    results = convert_posts(paths, config)

    failed = [r for r in results if not r.ok]
    for result in failed:
        console.print(f"[red]Error:[/red] {escape(str(result.source))}", soft_wrap=True)
        console.print(f"  {escape(result.error)}", soft_wrap=True)

    converted = len(results) - len(failed)
    skipped = len(paths) - len(results)
    console.print(f"[green]Converted {converted} post(s)[/green]")
    if skipped:
        console.print(f"[yellow]Skipped {skipped} file(s) after the first failure[/yellow]")

    if failed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
