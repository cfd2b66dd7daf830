"""APT provider (Debian, Ubuntu and derivatives)."""

from __future__ import annotations

from typing import Iterable, List, Set

from pkglens.core.logging import get_logger
from pkglens.core.models import ALL_PACKAGES, Mutation, Origin, Package
from pkglens.providers.base import PackageProvider, privileged, split_lines, split_tab_row

log = get_logger(__name__)

DPKG_FORMAT = "-f=${Package}\t${Version}\t${binary:Summary}\n"

APT_CLI_WARNING = "WARNING: apt does not have a stable CLI interface"


def parse_manual(output: str) -> Set[str]:
    """Parse ``apt-mark showmanual``: one package name per line."""
    return {line.strip() for line in split_lines(output) if line.strip()}


def parse_installed(details: str, manual: Iterable[str]) -> List[Package]:
    """Join the dpkg-query table with the manually installed set.

    Rows whose name is not in ``manual`` are dependencies and are dropped.
    """
    manual = set(manual)
    pkgs: List[Package] = []
    for line in split_lines(details):
        if not line.strip() or "\t" not in line:
            continue
        fields = split_tab_row(line, 3)
        name = fields[0]
        if name not in manual:
            continue
        version = fields[1] if len(fields) > 1 else ""
        summary = fields[2] if len(fields) > 2 else ""
        pkgs.append(Package(name=name, id=name, version=version, summary=summary, origin=Origin.NATIVE))
    return pkgs


def parse_search(output: str) -> List[str]:
    """``apt-cache search`` already prints one ``name - summary`` row per package."""
    return [line.strip() for line in split_lines(output) if line.strip()]


def parse_updates(output: str) -> List[str]:
    """Parse ``apt list --upgradable`` rows such as
    ``firefox/jammy-updates 120.0 amd64 [upgradable from: 119.0]``.
    """
    rows: List[str] = []
    for line in split_lines(output):
        if "/" not in line or "[upgradable from:" not in line:
            continue
        parts = line.split()
        if len(parts) < 2:
            continue
        name = parts[0].split("/", 1)[0]
        current = line.rsplit("from:", 1)[1].strip(" ]")
        rows.append(f"{name} {parts[1]} (from {current})")
    return rows


class AptProvider(PackageProvider):
    name = "apt"
    info_noise = (APT_CLI_WARNING, "N: ")

    async def _fetch_installed(self) -> List[Package]:
        manual = parse_manual(await self._run("apt-mark", "showmanual"))
        details = await self._run("dpkg-query", "-W", DPKG_FORMAT)
        pkgs = parse_installed(details, manual)
        log.debug("apt_manual_filter", manual=len(manual), kept=len(pkgs))
        return pkgs

    def search_command(self, query: str):
        return ("apt-cache", "search", query)

    def parse_search(self, output: str) -> List[str]:
        return parse_search(output)

    def info_command(self, name: str):
        return ("apt", "show", name)

    def updates_command(self):
        return ("apt", "list", "--upgradable")

    def parse_updates(self, output: str) -> List[str]:
        return parse_updates(output)

    def mutation_command(self, action: Mutation, target: str):
        if action is Mutation.INSTALL:
            return privileged("apt-get", "install", "-y", target)
        if action is Mutation.REMOVE:
            return privileged("apt-get", "remove", "-y", target)
        if target == ALL_PACKAGES:
            return privileged("apt-get", "upgrade", "-y")
        return privileged("apt-get", "install", "--only-upgrade", "-y", target)
