"""Flatpak provider, an origin independent of the native package manager."""

from __future__ import annotations

from typing import List

from pkglens.core.models import ALL_PACKAGES, Mutation, Origin, Package
from pkglens.providers.base import PackageProvider, split_lines, split_tab_row

DEFAULT_REMOTE = "flathub"


def format_app(name: str, app_id: str, version: str = "", description: str = "") -> str:
    summary = f" — {description}" if description else ""
    return f"[flatpak]  {f'{name} ({app_id})':<45} {version:<15}{summary}"


def parse_installed(output: str) -> List[Package]:
    """Parse ``flatpak list --columns=name,application,version`` rows."""
    pkgs: List[Package] = []
    for line in split_lines(output):
        if not line.strip() or "\t" not in line:
            continue
        fields = split_tab_row(line, 3)
        name = fields[0]
        app_id = fields[1] if len(fields) > 1 and fields[1] else name
        version = fields[2] if len(fields) > 2 else ""
        pkgs.append(Package(name=name, id=app_id, version=version, origin=Origin.FLATPAK))
    return pkgs


def parse_search(output: str) -> List[str]:
    """Parse ``flatpak search --columns=name,application,description,version`` rows."""
    rows: List[str] = []
    for line in split_lines(output):
        if not line.strip() or "\t" not in line:
            continue
        fields = split_tab_row(line, 4)
        if len(fields) < 2:
            continue
        name, app_id = fields[0], fields[1]
        description = fields[2] if len(fields) > 2 else ""
        version = fields[3] if len(fields) > 3 else ""
        rows.append(format_app(name, app_id, version, description))
    return rows


def parse_updates(output: str) -> List[str]:
    """Parse ``flatpak remote-ls --updates --columns=name,application,version`` rows."""
    rows: List[str] = []
    for line in split_lines(output):
        if "\t" not in line:
            continue
        fields = split_tab_row(line, 3)
        if len(fields) < 2:
            continue
        rows.append(format_app(fields[0], fields[1], fields[2] if len(fields) > 2 else "").rstrip())
    return rows


class FlatpakProvider(PackageProvider):
    name = "flatpak"
    origin = Origin.FLATPAK

    async def _fetch_installed(self) -> List[Package]:
        # --app excludes runtimes
        out = await self._run("flatpak", "list", "--app", "--columns=name,application,version")
        return parse_installed(out)

    def search_command(self, query: str):
        return ("flatpak", "search", query, "--columns=name,application,description,version")

    def parse_search(self, output: str) -> List[str]:
        return parse_search(output)

    def info_command(self, name: str):
        return ("flatpak", "info", name)

    def updates_command(self):
        return ("flatpak", "remote-ls", "--updates", "--columns=name,application,version")

    def parse_updates(self, output: str) -> List[str]:
        return parse_updates(output)

    def mutation_command(self, action: Mutation, target: str):
        if action is Mutation.INSTALL:
            return ("flatpak", "install", "-y", DEFAULT_REMOTE, target)
        if action is Mutation.REMOVE:
            return ("flatpak", "uninstall", "-y", target)
        if target == ALL_PACKAGES:
            return ("flatpak", "update", "-y")
        return ("flatpak", "update", "-y", target)
