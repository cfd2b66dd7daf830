"""DNF provider (Fedora, RHEL and derivatives)."""

from __future__ import annotations

from typing import List

from pkglens.core.models import ALL_PACKAGES, Mutation, Origin, Package
from pkglens.providers.base import PackageProvider, privileged, split_lines, split_tab_row

QUERY_FORMAT = "%{NAME}\t%{VERSION}-%{RELEASE}\t%{SUMMARY}\n"

# dnf check-update exits 100 when updates are pending
CHECK_UPDATE_PENDING = 100


def parse_installed(output: str) -> List[Package]:
    """Parse ``dnf repoquery --queryformat`` rows of name, version and summary."""
    pkgs: List[Package] = []
    for line in split_lines(output):
        if not line.strip() or "\t" not in line:
            continue
        fields = split_tab_row(line, 3)
        name = fields[0]
        version = fields[1] if len(fields) > 1 else ""
        summary = fields[2] if len(fields) > 2 else ""
        pkgs.append(Package(name=name, id=name, version=version, summary=summary, origin=Origin.NATIVE))
    return pkgs


def parse_search(output: str) -> List[str]:
    """Keep ``name.arch : summary`` rows, dropping section headers and banners."""
    return [
        line.strip() for line in split_lines(output)
        if " : " in line
        and not line.startswith(("=", "Last", "Error"))
    ]


def parse_updates(output: str) -> List[str]:
    """Parse ``dnf check-update`` rows of package, version and repository."""
    rows: List[str] = []
    for line in split_lines(output):
        if line.startswith("Obsoleting"):
            break
        parts = line.split()
        if len(parts) != 3 or line.startswith(("Last", " ")):
            continue
        name, version, repo = parts
        rows.append(f"{name} {version} ({repo})")
    return rows


class DnfProvider(PackageProvider):
    name = "dnf"
    search_ok_codes = (0, 1)
    updates_ok_codes = (0, CHECK_UPDATE_PENDING)
    info_noise = (
        "Last metadata expiration check",
        "Updating Subscription Management",
        "Installed Packages",
        "Available Packages",
    )

    async def _fetch_installed(self) -> List[Package]:
        # --userinstalled excludes packages pulled in purely as dependencies
        out = await self._run(
            "dnf", "repoquery", "--userinstalled", "--queryformat", QUERY_FORMAT
        )
        return parse_installed(out)

    def search_command(self, query: str):
        return ("dnf", "search", query)

    def parse_search(self, output: str) -> List[str]:
        return parse_search(output)

    def info_command(self, name: str):
        return ("dnf", "info", name)

    def updates_command(self):
        return ("dnf", "check-update")

    def parse_updates(self, output: str) -> List[str]:
        return parse_updates(output)

    def mutation_command(self, action: Mutation, target: str):
        if action is Mutation.INSTALL:
            return privileged("dnf", "install", "-y", target)
        if action is Mutation.REMOVE:
            return privileged("dnf", "remove", "-y", target)
        if target == ALL_PACKAGES:
            return privileged("dnf", "upgrade", "-y")
        return privileged("dnf", "upgrade", "-y", target)
