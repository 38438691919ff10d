"""Console UI for terminal output using Rich."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm
from rich.table import Table

from papershelf.models.entry import ImportedEntry


class ConsoleUI:
    """Rich-based console UI for entry display and notifications."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize console."""
        self._console = console or Console()

    def error(self, message: str) -> None:
        """Print an error message in red."""
        self._console.print(f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True)

    def imported(self, entry: ImportedEntry) -> None:
        """Print every destination path of a freshly imported entry."""
        for path in entry.file_paths:
            self._console.print(path, markup=False, highlight=False, soft_wrap=True)

    def removed(self, entries: list[ImportedEntry]) -> None:
        """Print removal summary."""
        self._console.print(f"[green]Removed[/green]: {len(entries)} entries")

    def confirm_removal(self, entries: list[ImportedEntry]) -> bool:
        """Show the entries about to be removed and ask for confirmation."""
        if not entries:
            self._console.print("No entries matched.")
            return False
        self.display_entries(entries, title="Entries to remove")
        return Confirm.ask(f"Remove {len(entries)} entries?", console=self._console)

    def display_entries(self, entries: list[ImportedEntry], title: str = "Library") -> None:
        """Display entries in a formatted table.

        Args:
            entries: Entries to display
            title: Table title
        """
        table = Table(title=title)
        table.add_column("Key", overflow="fold")
        table.add_column("Type")
        table.add_column("Year", justify="right")
        table.add_column("Authors", overflow="fold")
        table.add_column("Title", overflow="fold")
        table.add_column("Tags", overflow="fold")

        for entry in entries:
            record = entry.record
            table.add_row(
                record.key,
                record.entry_type.value,
                str(record.year),
                "; ".join(record.authors),
                record.title,
                ", ".join(entry.tags) or "-",
            )

        self._console.print(table)

        if not entries:
            self._console.print("No entries found.")
