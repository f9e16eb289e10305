"""
Interactive menu for the tech talk portal.

Line oriented: one numeric selection per turn, each command runs to
completion (store round-trip included) before the next prompt.
"""
import logging
from typing import Callable, Dict, Iterable

import click
from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
from rich import box

from techtalk.catalog import CatalogManager, SortOrder
from techtalk.errors import CatalogError, StoreError
from techtalk.record_store import TalkRecord

logger = logging.getLogger(__name__)

# Rich console for pretty output
console = Console(highlight=False)

MENU_TITLE = "===== INTERNAL TECH TALK PORTAL ====="

MENU_OPTIONS = [
    "Add Tech Talk",
    "View All Tech Talks",
    "Search by Title",
    "Search by Tag",
    "Search by Posted By",
    "Update Tech Talk",
    "Delete Tech Talk",
    "Sort Tech Talks by Date",
    "Exit",
]

EXIT_CHOICE = 9

SORT_SELECTORS = {
    "1": SortOrder.NEWEST,
    "2": SortOrder.OLDEST,
}


def ask(text: str) -> str:
    """Read one line of input; blank is allowed. Raises click.Abort at end of input."""
    return click.prompt(text, default="", show_default=False, prompt_suffix=": ").strip()


def print_talk(talk: TalkRecord) -> None:
    content = f"""
[cyan]Title:[/cyan] {escape(talk.title)}
[cyan]Description:[/cyan] {escape(talk.description)}
[cyan]Posted By:[/cyan] {escape(talk.posted_by)}
[cyan]Date:[/cyan] {escape(talk.date)}
[cyan]Tags:[/cyan] {escape(', '.join(talk.tags)) or 'None'}
    """
    console.print(Panel(content.strip(), border_style="cyan", box=box.ROUNDED))


def print_talks(talks: Iterable[TalkRecord]) -> None:
    for talk in talks:
        print_talk(talk)


def show_menu() -> None:
    console.print(f"\n[bold cyan]{MENU_TITLE}[/bold cyan]")
    for number, label in enumerate(MENU_OPTIONS, start=1):
        console.print(f"{number}. {label}")


# ============================================================================
# COMMAND HANDLERS
# ============================================================================

def add_talk(catalog: CatalogManager) -> None:
    title = ask("Enter title")
    catalog.check_new_title(title)

    description = ask("Enter description")
    posted_by = ask("Enter posted by")
    tags_text = ask("Enter tags (comma separated)")

    catalog.add(title, description, posted_by, tags_text)
    console.print("[green]✓[/green] Tech Talk added successfully!")


def view_all(catalog: CatalogManager) -> None:
    talks = catalog.view_all()
    if not talks:
        console.print("[yellow]No tech talks available![/yellow]")
        return

    console.print("\n[bold]All Tech Talks:[/bold]")
    print_talks(talks)


def search_by_title(catalog: CatalogManager) -> None:
    talk = catalog.search_by_title(ask("Enter title to search"))
    if talk is None:
        console.print("[yellow]Not found in portal.[/yellow]")
        return
    print_talk(talk)


def search_by_tag(catalog: CatalogManager) -> None:
    talks = catalog.search_by_tag(ask("Enter tag to search"))
    if not talks:
        console.print("[yellow]No talks found with this tag.[/yellow]")
        return
    print_talks(talks)


def search_by_posted_by(catalog: CatalogManager) -> None:
    talks = catalog.search_by_posted_by(ask("Enter author name"))
    if not talks:
        console.print("[yellow]No talks found by this author.[/yellow]")
        return
    print_talks(talks)


def update_talk(catalog: CatalogManager) -> None:
    title = ask("Enter title to update")
    if catalog.search_by_title(title) is None:
        console.print("[red]✗[/red] Tech Talk not found.")
        return

    description = ask("New description (leave blank to skip)")
    posted_by = ask("New posted by (leave blank to skip)")
    tags_text = ask("New tags (comma separated, leave blank to skip)")

    catalog.update(title, description, posted_by, tags_text)
    console.print("[green]✓[/green] Tech Talk updated successfully!")


def delete_talk(catalog: CatalogManager) -> None:
    outcome = catalog.delete_by_title(ask("Enter title to delete"))
    if outcome.removed_from_memory:
        console.print("[green]✓[/green] Tech Talk deleted.")
    else:
        console.print("[red]✗[/red] Tech Talk not found.")


def sort_by_date(catalog: CatalogManager) -> None:
    console.print("1. Newest to Oldest")
    console.print("2. Oldest to Newest")
    order = SORT_SELECTORS.get(ask("Choose option"))
    if order is None:
        console.print("[red]✗[/red] Invalid choice!")
        return

    talks = catalog.sort_by_date(order)
    console.print("\n[bold]Sorted Tech Talks:[/bold]")
    print_talks(talks)


HANDLERS: Dict[int, Callable[[CatalogManager], None]] = {
    1: add_talk,
    2: view_all,
    3: search_by_title,
    4: search_by_tag,
    5: search_by_posted_by,
    6: update_talk,
    7: delete_talk,
    8: sort_by_date,
}


def run_menu(catalog: CatalogManager) -> None:
    """Run the menu loop until Exit is chosen or input ends."""
    while True:
        show_menu()

        try:
            raw = ask("Enter your choice")
        except click.Abort:
            console.print("\nExiting portal...")
            return

        try:
            choice = int(raw)
        except ValueError:
            console.print("[red]✗[/red] Invalid input. Enter number 1-9.")
            continue

        if choice == EXIT_CHOICE:
            console.print("Exiting portal...")
            return

        handler = HANDLERS.get(choice)
        if handler is None:
            console.print("[red]✗[/red] Invalid choice!")
            continue

        try:
            handler(catalog)
        except click.Abort:
            console.print("\nExiting portal...")
            return
        except CatalogError as e:
            console.print(f"[red]✗[/red] {escape(str(e))}")
        except StoreError as e:
            console.print(f"[red]✗[/red] Database error: {escape(str(e))}")
            logger.error(f"Error in menu command {choice}: {e}", exc_info=True)
