"""
Command-line interface for the tech talk portal.

Run without a subcommand to open the interactive menu.
"""
import logging
import sys

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape
from rich import box

from techtalk import __version__
from techtalk.catalog import CatalogManager, SortOrder
from techtalk.config import DB_PATH, LOG_LEVEL, LOG_FORMAT
from techtalk.errors import CatalogError, StoreConnectionError, StoreError
from techtalk.menu import run_menu
from techtalk.migrate import get_current_version
from techtalk.record_store import RecordStore

logger = logging.getLogger(__name__)

# Rich console for pretty output
console = Console(highlight=False)


def resolve_log_level(name: str) -> int:
    """Map a level name to its number; unknown names fall back to WARNING."""
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.WARNING


def open_store(db_path: str) -> RecordStore:
    """Open the record store, or report the failure and exit."""
    try:
        return RecordStore(db_path).open()
    except StoreConnectionError as e:
        console.print(f"[red]✗[/red] Database connection failed: {escape(str(e))}")
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option("--db", "db_path", default=DB_PATH, show_default=True,
              envvar="TECHTALK_DB", help="Path to the tech talk database")
@click.option("--verbose", "-v", is_flag=True, help="Log store activity")
@click.pass_context
def cli(ctx, db_path: str, verbose: bool):
    """
    Tech Talk Portal

    Catalog, search and sort internal tech talks.
    """
    logging.basicConfig(
        level=logging.INFO if verbose else resolve_log_level(LOG_LEVEL),
        format=LOG_FORMAT
    )
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db_path

    if ctx.invoked_subcommand is not None:
        return

    store = open_store(db_path)
    try:
        console.print("[green]✓[/green] Connected to database successfully!")
        catalog = CatalogManager(store)
        try:
            count = catalog.load()
        except StoreError as e:
            console.print(f"[red]✗[/red] Failed to load tech talks: {escape(str(e))}")
            logger.error(f"Error loading tech talks: {e}", exc_info=True)
            ctx.exit(1)
        console.print(f"Loaded {count} tech talks into memory.")
        run_menu(catalog)
    finally:
        store.close()


@cli.command(name="list")
@click.option("--sort", "sort_order", type=click.Choice([o.value for o in SortOrder]),
              help="Sort by date")
@click.pass_context
def list_talks(ctx, sort_order):
    """List all tech talks."""
    store = open_store(ctx.obj["db_path"])
    try:
        catalog = CatalogManager(store)
        catalog.load()
        talks = catalog.sort_by_date(sort_order) if sort_order else catalog.view_all()

        if not talks:
            console.print("[yellow]No tech talks available![/yellow]")
            return

        table = Table(
            title=f"Tech Talks ({len(talks)})",
            box=box.ROUNDED,
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Title", style="white")
        table.add_column("Posted By", style="green")
        table.add_column("Date", style="dim", width=12)
        table.add_column("Tags", style="magenta")

        for talk in talks:
            table.add_row(
                escape(talk.title),
                escape(talk.posted_by),
                talk.date,
                escape(", ".join(talk.tags))
            )

        console.print(table)

    except (CatalogError, StoreError) as e:
        console.print(f"[red]✗[/red] Error listing tech talks: {escape(str(e))}")
        logger.error(f"Error in list command: {e}", exc_info=True)
        ctx.exit(1)
    finally:
        store.close()


@cli.command()
@click.pass_context
def stats(ctx):
    """Show catalog statistics."""
    store = open_store(ctx.obj["db_path"])
    try:
        catalog = CatalogManager(store)
        catalog.load()
        summary = catalog.stats()

        stats_text = f"""
[cyan]Total Tech Talks:[/cyan] {summary['total_talks']}
[cyan]Unique Tags:[/cyan] {summary['unique_tags']}
[cyan]Authors:[/cyan] {summary['unique_authors']}
[cyan]Earliest:[/cyan] {summary['earliest'] or '-'}
[cyan]Latest:[/cyan] {summary['latest'] or '-'}
[cyan]Database:[/cyan] {escape(store.db_path)}
        """

        panel = Panel(
            stats_text.strip(),
            title="Tech Talk Portal Statistics",
            border_style="cyan",
            box=box.DOUBLE
        )
        console.print(panel)

    except StoreError as e:
        console.print(f"[red]✗[/red] Error getting stats: {escape(str(e))}")
        logger.error(f"Error in stats command: {e}", exc_info=True)
        ctx.exit(1)
    finally:
        store.close()


@cli.command()
@click.pass_context
def migrate(ctx):
    """Apply pending schema migrations."""
    store = open_store(ctx.obj["db_path"])
    try:
        version = get_current_version(store.conn)
        console.print(f"[green]✓[/green] Schema version: {version}")
    finally:
        store.close()


if __name__ == "__main__":
    cli()
