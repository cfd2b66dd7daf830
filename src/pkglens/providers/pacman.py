"""Pacman provider (Arch Linux and derivatives)."""

from __future__ import annotations

import re
from typing import List

from pkglens.core.models import ALL_PACKAGES, Mutation, Origin, Package
from pkglens.providers.base import PackageProvider, privileged, split_lines

# "[installed]" or "[installed: 3.0.19-1]" after the version
STATUS_MARKER = re.compile(r"\s+\[installed[^\]]*\]$")


def parse_installed(output: str) -> List[Package]:
    """Parse ``pacman -Qe`` rows of ``name version``."""
    pkgs: List[Package] = []
    for line in split_lines(output):
        if not line.strip():
            continue
        fields = line.strip().split(None, 1)
        name = fields[0]
        version = fields[1] if len(fields) > 1 else ""
        pkgs.append(Package(name=name, id=name, version=version, origin=Origin.NATIVE))
    return pkgs


def parse_search(output: str) -> List[str]:
    """Merge ``pacman -Ss`` two-line results into one row each.

    A result is a header such as ``extra/vlc 3.0.20-1 [installed]`` followed
    by an indented description line. The line after a header is always
    consumed as its description. The status marker is dropped from the
    merged row.
    """
    lines = split_lines(output)
    rows: List[str] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if not line.startswith(" ") and "/" in line:
            header = STATUS_MARKER.sub("", line.strip())
            desc = lines[i + 1].strip() if i + 1 < len(lines) else ""
            rows.append(header + (f" — {desc}" if desc else ""))
            i += 2
            continue
        i += 1
    return rows


def parse_updates(output: str) -> List[str]:
    """``pacman -Qu`` prints ``name old -> new`` per pending update."""
    return [line.strip() for line in split_lines(output) if "->" in line]


class PacmanProvider(PackageProvider):
    name = "pacman"
    # pacman exits 1 when a search or update query matches nothing
    search_ok_codes = (0, 1)
    updates_ok_codes = (0, 1)

    async def _fetch_installed(self) -> List[Package]:
        # -Qe: explicitly installed, excludes pulled-in dependencies
        return parse_installed(await self._run("pacman", "-Qe"))

    def search_command(self, query: str):
        return ("pacman", "-Ss", query)

    def parse_search(self, output: str) -> List[str]:
        return parse_search(output)

    def info_command(self, name: str):
        return ("pacman", "-Qi", name)

    def updates_command(self):
        return ("pacman", "-Qu")

    def parse_updates(self, output: str) -> List[str]:
        return parse_updates(output)

    def mutation_command(self, action: Mutation, target: str):
        if action is Mutation.INSTALL:
            return privileged("pacman", "-S", "--noconfirm", target)
        if action is Mutation.REMOVE:
            return privileged("pacman", "-R", "--noconfirm", target)
        if target == ALL_PACKAGES:
            return privileged("pacman", "-Syu", "--noconfirm")
        return privileged("pacman", "-S", "--noconfirm", target)
