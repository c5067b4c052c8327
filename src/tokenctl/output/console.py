"""Rich Console factory and theme for tokenctl output.

Consoles render into a StringIO buffer so every renderer returns a plain
string.  Under CliRunner or a pipe Rich detects no terminal and drops
colour codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

TOKENCTL_THEME = Theme(
    {
        "tok.ok": "bold green",
        "tok.error": "bold red",
        "tok.warning": "bold yellow",
        "tok.op": "bold cyan",
        "tok.key": "dim",
        "tok.brand": "bold blue",
        "tok.platform": "magenta",
        "tok.format": "cyan",
        "tok.path": "dim",
        "tok.count": "bold",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=TOKENCTL_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
