"""
ui/presenter.py
Everything the user sees goes through one Presenter, handed to the
session and the command dispatcher instead of a global console.
"""

from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

NODEMATE_THEME = Theme(
    {
        "info": "cyan",
        "success": "bright_green",
        "warning": "bold yellow",
        "error": "bold red",
        "ai": "green",
        "hint": "dim italic",
    }
)


class Presenter:
    def __init__(self, console: Optional[Console] = None, color: bool = True):
        self.console = console or Console(theme=NODEMATE_THEME, no_color=not color)

    # --- Message levels ---

    def info(self, message: str) -> None:
        self.console.print(f"[info]ℹ {escape(message)}[/]", highlight=False)

    def success(self, message: str) -> None:
        self.console.print(f"[success]✅ {escape(message)}[/]", highlight=False)

    def warning(self, message: str) -> None:
        self.console.print(f"[warning]⚠️  {escape(message)}[/]", highlight=False)

    def error(self, message: str, hint: Optional[str] = None) -> None:
        self.console.print()
        self.console.print(f"[error]❌ {escape(message)}[/]", highlight=False)
        if hint:
            self.console.print(f"[hint]Hint: {escape(hint)}[/]", highlight=False)
        self.console.print()

    def ai(self, content: str) -> None:
        """Render a complete model reply."""
        self.console.print()
        self.console.print("[ai]🤖 NodeMate:[/]")
        self.console.print(Markdown(content))
        self.console.print()

    # --- Streaming ---

    def stream_start(self) -> None:
        self.console.print()
        self.console.print("[ai]🤖 NodeMate:[/]")

    def stream_fragment(self, fragment: str) -> None:
        self.console.print(fragment, end="", markup=False, highlight=False)

    def stream_end(self) -> None:
        self.console.print()
        self.console.print()

    # --- Raw output ---

    def print(self, *objects, **kwargs) -> None:
        self.console.print(*objects, **kwargs)

    def table(
        self,
        columns: Sequence[str],
        rows: Sequence[Sequence[str]],
        title: Optional[str] = None,
    ) -> None:
        t = Table(title=title, box=box.ROUNDED, show_header=True, header_style="bold")
        for column in columns:
            t.add_column(column)
        for row in rows:
            t.add_row(*[str(cell) for cell in row])
        self.console.print(t)

    @contextmanager
    def status(self, message: str) -> Iterator[None]:
        with self.console.status(message, spinner="dots"):
            yield

    def clear(self) -> None:
        self.console.clear()
