# schemasplit/cli_theme.py
"""Terminal theme for the schemasplit CLI.

Teal & sand palette:
  - Numbered section headers ("01 · SECTION NAME")
  - Borderless key-value tables
  - Status badges with reverse styling
  - Works in both light and dark terminal modes
"""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

# ── Brand ─────────────────────────────────────────────────────────

BRAND = "schemasplit"
TAGLINE = "Split consolidated contract schemas into per-message files"

# ── Palette ───────────────────────────────────────────────────────

TEAL = "#2A9D8F"
SAND = "#C9B79C"
MUTED = "dim"


def print_version(version: str, console: Console) -> None:
    """Print a compact branded version line."""
    t = Text()
    t.append(BRAND, style=f"bold {TEAL}")
    t.append(f"  v{version}", style=MUTED)
    console.print(t)


# ── Section headers ──────────────────────────────────────────────


def section(
    title: str,
    console: Console,
    number: str | None = None,
    uppercase: bool = True,
) -> None:
    """Print a numbered section header."""
    console.print()
    t = Text()
    if number:
        t.append(f"  {number}", style=f"bold {TEAL}")
        t.append(" · ", style=MUTED)
    else:
        t.append("  ", style="")
    display = title.upper() if uppercase else title
    t.append(display, style="bold")
    console.print(t)
    rule = "─" * len(TAGLINE)
    console.print(f"  {rule}", style=SAND)


# ── Tables ───────────────────────────────────────────────────────


def make_table(title: str | None = None, **kwargs: object) -> Table:
    """Create a rounded table with a sand border."""
    return Table(
        title=title,
        box=box.ROUNDED,
        border_style=SAND,
        title_style=f"bold {TEAL}",
        header_style="bold",
        padding=(0, 1),
        **kwargs,
    )


def make_kv_table() -> Table:
    """Create a headerless two-column key–value table."""
    t = make_table(show_header=False)
    t.add_column("Key", style=f"bold {TEAL}", no_wrap=True)
    t.add_column("Value")
    return t


# ── Inline badges ────────────────────────────────────────────────


def badge(label: str, variant: str = "default") -> str:
    """Return Rich markup for a filled status badge."""
    colors = {
        "default": TEAL,
        "warn": "yellow",
    }
    c = colors.get(variant, TEAL)
    return f"[reverse {c}] {label} [/reverse {c}]"


# ── Status lines ─────────────────────────────────────────────────


def info(msg: str) -> str:
    """Info-level status line (teal arrow, dim text)."""
    return f"  [{TEAL}]›[/{TEAL}] [{MUTED}]{msg}[/{MUTED}]"


def ok(msg: str) -> str:
    """Success status line (green check)."""
    return f"  [bold green]✓[/bold green] {msg}"


def warn(msg: str) -> str:
    """Warning status line (yellow bang)."""
    return f"  [bold yellow]![/bold yellow] [yellow]{msg}[/yellow]"

