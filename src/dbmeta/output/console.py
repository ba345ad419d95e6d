"""Rich Console factory and theme for dbmeta output.

Consoles render into a StringIO buffer so formatting stays a pure
``ServiceResult -> str`` function. Rich drops color codes by itself when
stdout is not a terminal (tests, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DBM_THEME = Theme(
    {
        "dbm.ok": "bold green",
        "dbm.error": "bold red",
        "dbm.op": "bold cyan",
        "dbm.key": "dim",
        "dbm.path": "dim",
        "dbm.count": "bold",
        "dbm.skipped": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=DBM_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
