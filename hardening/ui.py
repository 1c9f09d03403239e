"""Nord-themed console output shared by the setup commands."""

import shutil
from typing import Iterable, List

import pyfiglet
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


# ----------------------------------------------------------------
# Nord-Themed Colors
# ----------------------------------------------------------------
class NordColors:
    """Nord color palette definitions for consistent UI styling."""

    SNOW_STORM_2: str = "#E5E9F0"
    FROST_1: str = "#8FBCBB"
    FROST_2: str = "#88C0D0"
    FROST_3: str = "#81A1C1"
    FROST_4: str = "#5E81AC"
    RED: str = "#BF616A"
    YELLOW: str = "#EBCB8B"
    GREEN: str = "#A3BE8C"

    @classmethod
    def get_frost_gradient(cls, steps: int = 4) -> List[str]:
        """Return up to four frost colors for banner styling."""
        frosts = [cls.FROST_1, cls.FROST_2, cls.FROST_3, cls.FROST_4]
        return frosts[:steps]


console: Console = Console()


# ----------------------------------------------------------------
# UI Helper Functions
# ----------------------------------------------------------------
def create_header(title: str) -> Panel:
    """
    Create an ASCII art banner with a frost gradient using Pyfiglet.

    Args:
        title: Text rendered in the banner.

    Returns:
        A Rich Panel containing the styled header.
    """
    term_width, _ = shutil.get_terminal_size((80, 24))
    font = "slant" if term_width >= 60 else "small"
    try:
        fig = pyfiglet.Figlet(font=font, width=min(term_width - 10, 120))
        ascii_art = fig.renderText(title)
    except pyfiglet.FigletError:
        ascii_art = f"  {title}  "

    lines = [line for line in ascii_art.splitlines() if line.strip()]
    colors = NordColors.get_frost_gradient(len(lines))
    banner = Text()
    for i, line in enumerate(lines):
        banner.append(Text(line, style=f"bold {colors[i % len(colors)]}"))
        if i < len(lines) - 1:
            banner.append("\n")

    return Panel(
        banner,
        border_style=NordColors.FROST_1,
        padding=(1, 2),
        box=box.ROUNDED,
    )


def print_message(text: str, style: str = NordColors.FROST_2, prefix: str = "•") -> None:
    """Print a formatted message with a prefix and style."""
    console.print(f"[{style}]{prefix} {escape(text)}[/{style}]")


def print_success(message: str) -> None:
    print_message(message, NordColors.GREEN, "✓")


def print_warning(message: str) -> None:
    print_message(message, NordColors.YELLOW, "⚠")


def print_error(message: str) -> None:
    print_message(message, NordColors.RED, "✗")


def print_section(title: str) -> None:
    """Print a section divider."""
    console.rule(f"[bold {NordColors.FROST_2}]{title}[/bold {NordColors.FROST_2}]")


def print_install_summary(
    installed: Iterable[str], skipped: Iterable[str], failed: Iterable[str]
) -> None:
    """Render a table summarising a package installation run."""
    table = Table(
        title="Package Installation",
        box=box.ROUNDED,
        title_style=f"bold {NordColors.FROST_2}",
        border_style=NordColors.FROST_3,
    )
    table.add_column("Package", style=f"bold {NordColors.SNOW_STORM_2}")
    table.add_column("Result")

    for pkg in installed:
        table.add_row(pkg, f"[{NordColors.GREEN}]installed[/{NordColors.GREEN}]")
    for pkg in skipped:
        table.add_row(pkg, f"[{NordColors.FROST_3}]already present[/{NordColors.FROST_3}]")
    for pkg in failed:
        table.add_row(pkg, f"[{NordColors.RED}]failed[/{NordColors.RED}]")

    console.print(table)
