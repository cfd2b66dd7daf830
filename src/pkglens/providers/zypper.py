"""Zypper provider (openSUSE and SUSE Linux Enterprise)."""

from __future__ import annotations

from typing import List

from pkglens.core.models import ALL_PACKAGES, Mutation, Origin, Package
from pkglens.providers.base import PackageProvider, privileged, split_lines

# zypper exits 104 when a search finds nothing
ZYPPER_EXIT_INF_CAP_NOT_FOUND = 104


def _columns(line: str) -> List[str]:
    return [f.strip() for f in line.split("|")]


def _is_installed(status: str) -> bool:
    # "i" or "i+" (installed on request)
    return status.startswith("i")


def parse_installed(output: str) -> List[Package]:
    """Parse ``zypper packages`` table rows ``S | Repository | Name | Version | Arch``.

    Only rows whose status column marks the package as installed are kept;
    rows with fewer than four columns are dropped.
    """
    pkgs: List[Package] = []
    for line in split_lines(output):
        if "|" not in line:
            continue
        fields = _columns(line)
        if len(fields) < 4 or not _is_installed(fields[0]):
            continue
        name, version = fields[2], fields[3]
        pkgs.append(Package(name=name, id=name, version=version, origin=Origin.NATIVE))
    return pkgs


def parse_search(output: str) -> List[str]:
    """Parse ``zypper search`` rows ``S | Name | Summary | Type``."""
    rows: List[str] = []
    for line in split_lines(output):
        if "|" not in line or "---" in line:
            continue
        fields = _columns(line)
        if len(fields) > 1 and fields[1] == "Name":
            continue
        if len(fields) < 3:
            rows.append(line.strip())
            continue
        installed = "[installed] " if _is_installed(fields[0]) else ""
        rows.append(f"{installed}{fields[1]} — {fields[2]}")
    return rows


def parse_updates(output: str) -> List[str]:
    """Parse ``zypper list-updates`` rows
    ``v | Repository | Name | Current Version | Available Version | Arch``.
    """
    rows: List[str] = []
    for line in split_lines(output):
        if "|" not in line:
            continue
        fields = _columns(line)
        if len(fields) < 5 or fields[0] != "v":
            continue
        rows.append(f"{fields[2]} {fields[3]} -> {fields[4]}")
    return rows


class ZypperProvider(PackageProvider):
    name = "zypper"
    search_ok_codes = (0, ZYPPER_EXIT_INF_CAP_NOT_FOUND)
    info_noise = (
        "Loading repository data",
        "Reading installed packages",
        "Information for package",
        "---",
    )

    async def _fetch_installed(self) -> List[Package]:
        # --userinstalled shows only packages the user explicitly installed
        out = await self._run("zypper", "--no-refresh", "packages", "--userinstalled")
        return parse_installed(out)

    def search_command(self, query: str):
        return ("zypper", "--no-refresh", "search", query)

    def parse_search(self, output: str) -> List[str]:
        return parse_search(output)

    def info_command(self, name: str):
        return ("zypper", "--no-refresh", "info", name)

    def updates_command(self):
        return ("zypper", "--no-refresh", "list-updates")

    def parse_updates(self, output: str) -> List[str]:
        return parse_updates(output)

    def mutation_command(self, action: Mutation, target: str):
        if action is Mutation.INSTALL:
            return privileged("zypper", "--non-interactive", "install", target)
        if action is Mutation.REMOVE:
            return privileged("zypper", "--non-interactive", "remove", target)
        if target == ALL_PACKAGES:
            return privileged("zypper", "--non-interactive", "update")
        return privileged("zypper", "--non-interactive", "update", target)
