"""CLI entry point for pkglens."""

from __future__ import annotations

import asyncio
import sys
from enum import Enum
from typing import Optional

import typer

from pkglens.cli.renderers import console, environment_table, package_table, print_text
from pkglens.core.errors import (
    EXIT_SYSTEM_ERROR,
    EXIT_TRANSIENT_ERROR,
    EXIT_USER_ERROR,
    PkgError,
    SystemError,
    TransientError,
    UserError,
    format_error_message,
)
from pkglens.core.logging import configure_logging, get_logger
from pkglens.core.models import ALL_PACKAGES
from pkglens.core.sysinfo import system_details
from pkglens.tools.package_tools import PackageTools
from pkglens.tools.query import matches

log = get_logger(__name__)

app = typer.Typer(help="pkglens: one view over dnf, apt, pacman, zypper and Flatpak.")


class Source(str, Enum):
    ALL = "all"
    FLATPAK = "flatpak"
    NATIVE = "native"


def build_tools() -> PackageTools:
    return PackageTools.create()


def handle_error(error: Exception) -> int:
    """Handle errors and return appropriate exit codes.

    Args:
        error: The exception to handle.

    Returns:
        An integer exit code.
    """
    if isinstance(error, PkgError):
        log.error(
            "cli_error",
            error_type=type(error).__name__,
            message=error.message,
            context=error.context,
        )
        console.print(f"\n{format_error_message(error)}\n", style="bold red", markup=False)

        if isinstance(error, TransientError):
            return EXIT_TRANSIENT_ERROR
        elif isinstance(error, UserError):
            return EXIT_USER_ERROR
        elif isinstance(error, SystemError):
            return EXIT_SYSTEM_ERROR
        else:
            return EXIT_USER_ERROR
    else:
        log.error(
            "unexpected_error",
            error=str(error),
            exc_info=True
        )
        console.print(
            f"\n⚠️ Unexpected error occurred: {error}\n",
            style="bold red",
            markup=False,
        )
        return EXIT_SYSTEM_ERROR


def confirm(action: str, target: str, via: str, yes: bool) -> None:
    if not yes:
        typer.confirm(f"{action} {target} via {via}?", abort=True)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log to stderr at DEBUG level"),
) -> None:
    """Query, search and manage installed software."""
    if verbose:
        configure_logging(level="DEBUG", enable_console=True, force=True)


@app.command("list")
def list_packages(
    filter: str = typer.Argument("", help="Keyword matched against name, id and summary"),
    table: bool = typer.Option(False, "--table", "-t", help="Render as a table without the display cap"),
) -> None:
    """List user-installed packages (native and Flatpak)."""
    try:
        tools = build_tools()
        if table:
            pkgs = asyncio.run(tools.catalog.list_installed())
            if filter:
                pkgs = [p for p in pkgs if matches(p, filter)]
            console.print(package_table(pkgs))
        else:
            print_text(asyncio.run(tools.query.list_installed_packages(filter)))
    except Exception as e:
        sys.exit(handle_error(e))


@app.command()
def info(name: str = typer.Argument(..., help="Package name or Flatpak application id")) -> None:
    """Show details for installed packages matching NAME."""
    try:
        tools = build_tools()
        print_text(asyncio.run(tools.query.get_package_info(name)))
    except Exception as e:
        sys.exit(handle_error(e))


@app.command()
def search(
    query: str,
    source: Source = typer.Option(Source.ALL, "--source", "-s", help="all | flatpak | native"),
) -> None:
    """Search Flathub and the native repositories for QUERY."""
    try:
        tools = build_tools()

        async def run_search() -> list[str]:
            out = []
            if source in (Source.ALL, Source.FLATPAK):
                out.append(await tools.search.search_flathub(query))
            if source in (Source.ALL, Source.NATIVE):
                out.append(await tools.search.search_native_repo(query))
            return out

        print_text("\n\n".join(asyncio.run(run_search())))
    except Exception as e:
        sys.exit(handle_error(e))


@app.command()
def updates(
    source: Source = typer.Option(Source.ALL, "--source", "-s", help="all | flatpak | native"),
) -> None:
    """Check for pending updates (read-only)."""
    try:
        tools = build_tools()

        async def run_check() -> list[str]:
            out = []
            if source in (Source.ALL, Source.FLATPAK):
                out.append(await tools.updates.check_flatpak_updates())
            if source in (Source.ALL, Source.NATIVE):
                out.append(await tools.updates.check_native_updates())
            return out

        print_text("\n\n".join(asyncio.run(run_check())))
    except Exception as e:
        sys.exit(handle_error(e))


@app.command()
def install(
    name: str,
    flatpak: bool = typer.Option(False, "--flatpak", "-f", help="Install from Flathub"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Install NAME with the native package manager or from Flathub."""
    try:
        tools = build_tools()
        if flatpak:
            confirm("Install", name, "flatpak", yes)
            print_text(asyncio.run(tools.install.install_flatpak(name)))
        else:
            confirm("Install", name, tools.env.native.value, yes)
            print_text(asyncio.run(tools.install.install_native_package(name)))
    except typer.Abort:
        raise
    except Exception as e:
        sys.exit(handle_error(e))


@app.command()
def remove(
    name: str,
    flatpak: bool = typer.Option(False, "--flatpak", "-f", help="Remove a Flatpak application"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove NAME."""
    try:
        tools = build_tools()
        if flatpak:
            confirm("Remove", name, "flatpak", yes)
            print_text(asyncio.run(tools.install.remove_flatpak(name)))
        else:
            confirm("Remove", name, tools.env.native.value, yes)
            print_text(asyncio.run(tools.install.remove_native_package(name)))
    except typer.Abort:
        raise
    except Exception as e:
        sys.exit(handle_error(e))


@app.command()
def update(
    name: str = typer.Argument(ALL_PACKAGES, help="Package to update, or ALL"),
    flatpak: bool = typer.Option(False, "--flatpak", "-f", help="Update Flatpak applications"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Update one package, or everything with ALL (the default)."""
    try:
        tools = build_tools()
        if flatpak:
            confirm("Update", name, "flatpak", yes)
            print_text(asyncio.run(tools.updates.update_flatpak(name)))
        else:
            confirm("Update", name, tools.env.native.value, yes)
            print_text(asyncio.run(tools.updates.update_native_package(name)))
    except typer.Abort:
        raise
    except Exception as e:
        sys.exit(handle_error(e))


@app.command()
def doctor() -> None:
    """Show the detected package managers and host details."""
    try:
        tools = build_tools()
        console.print(environment_table(tools.env, system_details()))
    except Exception as e:
        sys.exit(handle_error(e))


if __name__ == "__main__":
    app()
