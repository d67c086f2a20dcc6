"""
Terminal front end: port selection menu, scan progress and the result pager.

All paging decisions come from ui.view; this module only draws and reads
commands.
"""
from __future__ import annotations
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from ..export import export_results
from ..models import OPEN, PortResult, ScanSelection
from ..parsing import PRESETS, parse_port_list, validate_port_range
from .view import COLUMNS, ViewAction, ViewState, apply_action, visible_rows

# Rows taken by the header, legend and prompt around the table
RESERVED_LINES = 6

KEY_ACTIONS: Dict[str, ViewAction] = {
    'j': ViewAction.LINE_DOWN,
    'k': ViewAction.LINE_UP,
    'n': ViewAction.PAGE_DOWN,
    '': ViewAction.PAGE_DOWN,
    'p': ViewAction.PAGE_UP,
    't': ViewAction.TOGGLE_FILTER,
    's': ViewAction.EXPORT,
    'q': ViewAction.EXIT,
}


class ConsoleUI:
    """Draws menus and results with rich."""

    def __init__(self, translator: Callable[[str], str], console: Optional[Console] = None):
        self._ = translator
        self.console = console or Console()

    def ask_target(self) -> str:
        _ = self._
        self.console.print(f"[bold]{_('Welcome to portprobe!')}[/bold]")
        return Prompt.ask(_("Enter target IP or hostname"), console=self.console).strip()

    def choose_selection(self) -> ScanSelection:
        """Shows the preset menu and prompts for whatever the choice needs."""
        _ = self._
        options = [_(p.label) for p in PRESETS] + [_("Custom Range"), _("Specific Ports")]
        self.console.print(f"\n{_('Select port range to scan:')}")
        for number, label in enumerate(options, start=1):
            self.console.print(f"  [cyan]{number}[/cyan]) {label}")
        choice = Prompt.ask(_("Choice"), console=self.console, default="1").strip()

        if choice == str(len(PRESETS) + 1):
            start = IntPrompt.ask(_("Enter starting port"), console=self.console)
            end = IntPrompt.ask(_("Enter ending port"), console=self.console)
            start, end = validate_port_range(start, end)
            return ScanSelection(start=start, end=end)
        if choice == str(len(PRESETS) + 2):
            text = Prompt.ask(_("Enter specific ports (comma-separated)"), console=self.console)
            return ScanSelection(ports=parse_port_list(text))

        try:
            preset = PRESETS[int(choice) - 1]
        except (ValueError, IndexError):
            self.console.print(f"[yellow]{_('Invalid choice. Defaulting to Well-Known Ports.')}[/yellow]")
            preset = PRESETS[0]
        return ScanSelection(start=preset.start, end=preset.end)

    @contextmanager
    def progress(self, description: str) -> Iterator[Callable[[int, int], None]]:
        """Yields an on_progress callback that drives a progress bar."""
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        ) as bar:
            task = bar.add_task(description, total=None)

            def update(completed: int, total: int) -> None:
                bar.update(task, completed=completed, total=total)

            yield update

    def page_size(self, configured: int = 0) -> int:
        if configured > 0:
            return configured
        return max(1, self.console.size.height - RESERVED_LINES)

    def _status(self, text: str) -> str:
        color = "green" if text == OPEN else "red"
        return f"[{color}]{self._(text)}[/{color}]"

    def render_page(self, results: Sequence[PortResult], target: str, state: ViewState) -> Table:
        _ = self._
        table = Table(
            title=_("Results for {target}").format(target=target),
            caption=_("Press 's' to save the results to a CSV file"),
            box=box.SIMPLE_HEAD,
        )
        for _column in range(COLUMNS):
            table.add_column(_("Port"), justify="right")
            table.add_column("TCP")
            table.add_column("UDP")
        for row in visible_rows(results, state):
            cells = []
            for r in row:
                if r is None:
                    cells.extend(["", "", ""])
                else:
                    cells.extend([str(r.port), self._status(r.tcp_status), self._status(r.udp_status)])
            table.add_row(*cells)
        return table

    def print_results(self, results: Sequence[PortResult], target: str, show_all: bool = False) -> None:
        """Prints the whole collection in one table, without paging."""
        _ = self._
        table = Table(title=_("Results for {target}").format(target=target), box=box.SIMPLE_HEAD)
        table.add_column(_("Port"), justify="right")
        table.add_column("TCP")
        table.add_column("UDP")
        shown = [r for r in results if show_all or r.is_open]
        for r in shown:
            table.add_row(str(r.port), self._status(r.tcp_status), self._status(r.udp_status))
        self.console.print(table)
        if not shown:
            self.console.print(_("No open ports found."))

    def page_results(
        self,
        results: Sequence[PortResult],
        target: str,
        state: ViewState,
        export_directory: Optional[str] = None,
    ) -> ViewState:
        """Runs the interactive pager until the user quits; returns the final state."""
        _ = self._
        legend = _("j/k: line down/up, n/p: page down/up, t: toggle open-only/all, s: save CSV, q: quit")
        while True:
            self.console.clear()
            self.console.print(self.render_page(results, target, state))
            self.console.print(f"[dim]{legend}[/dim]")
            key = Prompt.ask(">", console=self.console, default="", show_default=False).strip().lower()
            action = KEY_ACTIONS.get(key[:1])
            if action is None:
                continue
            if action is ViewAction.EXIT:
                return state
            if action is ViewAction.EXPORT:
                try:
                    path = export_results(results, target, export_directory)
                    self.console.print(_("Results exported to {path}").format(path=path))
                except OSError as e:
                    self.error(_("Could not save results: {error}").format(error=e))
                Prompt.ask(_("Press Enter to continue"), console=self.console, default="", show_default=False)
                continue
            state = apply_action(results, state, action)

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]{self._('Error')}:[/bold red] {escape(message)}")

