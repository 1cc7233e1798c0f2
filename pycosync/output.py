"""Console output formatting for the CLI and the sync engine."""

import json
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .utils import format_size


class OutputFormatter:
    """Writes human or JSON output through rich consoles.

    Regular messages go to stdout, errors and warnings to stderr. In quiet
    mode only errors are shown. In JSON mode human messages are suppressed
    and only :meth:`output_json` writes to stdout.
    """

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        github_actions: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        self.json_output = json_output
        self.quiet = quiet
        self.github_actions = github_actions
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.err_console = err_console or Console(
            stderr=True, highlight=False, soft_wrap=True
        )

    @property
    def _silent(self) -> bool:
        return self.quiet or self.json_output

    def print(self, message: str = "") -> None:
        if not self._silent:
            self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        if not self._silent:
            self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        if not self._silent:
            self.console.print(f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        if not self._silent:
            self.err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")
        if self.github_actions:
            self.console.print(f"::warning::{message}", markup=False)

    def error(self, message: str) -> None:
        self.err_console.print(f"[red]Error:[/red] {escape(message)}")
        if self.github_actions:
            self.console.print(f"::error::{message}", markup=False)

    def progress_message(self, message: str) -> None:
        """Line-based progress output, for non-interactive runs."""
        if not self._silent:
            self.console.print(message, markup=False)

    def output_json(self, data: Any) -> None:
        self.console.print_json(json.dumps(data, default=str))

    def output_table(
        self, title: str, columns: list[str], rows: list[list[str]]
    ) -> None:
        if self._silent:
            return
        table = Table(title=title)
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*row)
        self.console.print(table)

    @staticmethod
    def format_size(size_bytes: int) -> str:
        return format_size(size_bytes)
