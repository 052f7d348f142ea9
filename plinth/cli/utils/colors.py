"""
Plinth CLI - styled output helpers built on Click.

    error(), info(), dim()
    section()   - section divider with title
    kv()        - aligned key/value pair
    table()     - minimal aligned table

click.style handles NO_COLOR / non-tty output.
"""

import shutil
from typing import Optional, Sequence

import click


_L_H = "\u2500"     # ─
_CHECK = "\u2713"   # ✓
_CROSS = "\u2717"   # ✗


def _tw() -> int:
    """Terminal width clamped to 40..120."""
    return max(40, min(shutil.get_terminal_size((80, 24)).columns, 120))


def error(message: str) -> None:
    click.echo(click.style(message, fg="red"), err=True)


def info(message: str) -> None:
    click.echo(click.style(message, fg="cyan"))


def dim(message: str) -> None:
    click.echo(click.style(message, dim=True))


def section(title: str, *, width: Optional[int] = None) -> None:
    """
    Print a section header.

        ── Routes ─────────────────────────────────
    """
    w = width or _tw()
    dashes = max(4, w - len(title) - 4)
    click.echo(click.style(f"{_L_H}{_L_H} {title} {_L_H * dashes}", fg="cyan", bold=True))


def kv(key: str, value: str, *, key_width: int = 20, indent: int = 2) -> None:
    """
    Print an aligned key-value pair.

        Modules:          3
    """
    padding = " " * max(1, key_width - len(key) - 1)
    click.echo(f"{' ' * indent}{key}:{padding}{click.style(str(value), fg='cyan')}")


def table(headers: Sequence[str], rows: Sequence[Sequence[str]], *, indent: int = 2) -> None:
    """
    Print a minimal aligned table.

        Method   Path          Handler
        ──────── ───────────── ──────────────────────
        GET      /users/:id    UsersController.get_one
    """
    prefix = " " * indent
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[:len(headers)]):
            widths[i] = max(widths[i], len(str(cell)))
    widths = [w + 2 for w in widths]

    header = "".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    click.echo(f"{prefix}{click.style(header, fg='cyan', bold=True)}")
    click.echo(f"{prefix}{click.style(''.join(_L_H * w for w in widths), dim=True)}")
    for row in rows:
        line = "".join(str(cell).ljust(widths[i]) for i, cell in enumerate(row[:len(headers)]))
        click.echo(f"{prefix}{line}")
