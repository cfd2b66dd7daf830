"""Renderers for displaying package information in the CLI using Rich."""

from __future__ import annotations

from typing import Iterable

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pkglens.core.config import HostEnv
from pkglens.core.models import Backend, Origin, Package

console = Console()

ORIGIN_LABELS = {
    Origin.NATIVE: "[green]native[/green]",
    Origin.FLATPAK: "[cyan]flatpak[/cyan]",
}


def print_text(text: str) -> None:
    """Print tool output verbatim; it contains literal brackets and long lines."""
    console.print(text, markup=False, highlight=False, soft_wrap=True)


def package_table(pkgs: Iterable[Package]) -> Table:
    """Create a Rich Table of installed packages.

    Args:
        pkgs: Packages to display.

    Returns:
        A Rich Table with one row per package.
    """
    table = Table(box=box.MINIMAL_HEAVY_HEAD)
    table.add_column("Origin", style="bold")
    table.add_column("Name", style="bold")
    table.add_column("ID")
    table.add_column("Version")
    table.add_column("Summary", style="dim")

    for p in pkgs:
        table.add_row(ORIGIN_LABELS[p.origin], escape(p.name), escape(p.id), escape(p.version), escape(p.summary))

    return table


def environment_table(env: HostEnv, details: str) -> Table:
    """Summarise what was detected on this host."""
    t = Table(box=box.MINIMAL_HEAVY_HEAD, show_header=False)
    t.add_column("Field", style="bold")
    t.add_column("Value")
    native = "[red]none detected[/red]" if env.native is Backend.NONE else env.native.value
    t.add_row("Native backend", native)
    t.add_row("Flatpak", "[green]available[/green]" if env.flatpak else "[yellow]not installed[/yellow]")
    t.add_row("Host", escape(details))

    return t
