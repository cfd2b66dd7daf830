"""Tools for querying packages that are already installed."""

from __future__ import annotations

from typing import List, Optional

from pkglens.core.catalog import Catalog
from pkglens.core.config import Settings
from pkglens.core.errors import ExecutionError, PkgError
from pkglens.core.logging import get_logger
from pkglens.core.models import Package
from pkglens.tools.common import describe_failure

log = get_logger(__name__)

LABEL_WIDTH = 45


def matches(pkg: Package, keyword: str) -> bool:
    """Case-insensitive substring match on name, id or summary."""
    keyword = keyword.lower()
    return (
        keyword in pkg.name.lower()
        or keyword in pkg.id.lower()
        or keyword in pkg.summary.lower()
    )


def format_package(pkg: Package) -> str:
    """One display line: origin tag, padded label, version and summary."""
    tag = "[flatpak]" if pkg.is_flatpak else "[native] "
    label = f"{pkg.name} ({pkg.id})" if pkg.is_flatpak else pkg.id
    summary = f" — {pkg.summary}" if pkg.summary.strip() else ""
    return f"{tag}  {label:<{LABEL_WIDTH}} {pkg.version}{summary}"


def resolve(pkgs: List[Package], query: str) -> List[Package]:
    """Every installed package matching by exact id or name, or by id or name substring.

    All matches are returned, not only the best one.
    """
    q = query.strip().lower()
    return [
        p for p in pkgs
        if p.id == query
        or p.name == query
        or q in p.id.lower()
        or q in p.name.lower()
    ]


class QueryTools:
    """Listing and inspecting user-installed packages (native and Flatpak)."""

    def __init__(self, catalog: Catalog, settings: Optional[Settings] = None) -> None:
        self.catalog = catalog
        self.settings = settings or catalog.settings

    async def list_installed_packages(self, filter: str = "") -> str:
        """List user-installed packages, optionally narrowed by a keyword.

        Args:
            filter: Keyword matched against name, id and summary. Empty lists everything.

        Returns:
            A formatted listing capped at ``list_max_results`` lines.
        """
        log.debug("list_installed_packages", filter=filter)
        try:
            pkgs = await self.catalog.list_installed()
        except PkgError as e:
            log.error("list_installed_failed", error=str(e))
            return f"Error querying installed packages: {e.message}"

        keyword = (filter or "").strip()
        matched = [p for p in pkgs if matches(p, keyword)] if keyword else list(pkgs)
        log.debug("list_installed_filtered", total=len(pkgs), matched=len(matched))

        if not matched:
            if keyword:
                return f'No installed packages found matching "{keyword}".'
            return "No user-installed packages found."

        cap = self.settings.list_max_results
        displayed = matched[:cap]

        header = f"Found {len(matched)} installed package(s)"
        if keyword:
            header += f' matching "{keyword}"'
        lines = [header + ":", ""]
        lines.extend(format_package(p) for p in displayed)

        if len(matched) > cap:
            lines.append("")
            lines.append(
                f"(Showing {cap} of {len(matched)}. Use a more specific filter to narrow results.)"
            )

        return "\n".join(lines)

    async def get_package_info(self, package_name: str) -> str:
        """Show backend details for every installed package matching a name or id.

        Args:
            package_name: Native package name or Flatpak application id, or part of one.
        """
        query = (package_name or "").strip()
        if not query:
            return "No package name given."

        try:
            pkgs = await self.catalog.list_installed()
        except PkgError as e:
            return f"Error querying installed packages: {e.message}"

        found = resolve(list(pkgs), query)
        log.debug("package_info_resolved", package=query, matches=len(found))
        if not found:
            return f'No installed package found matching "{query}".'

        sections = []
        for pkg in found:
            provider = self.catalog.flatpak if pkg.is_flatpak else self.catalog.native
            try:
                sections.append(await provider.info(pkg.id))
            except ExecutionError as e:
                sections.append(describe_failure(f"{provider.tag} {pkg.id}\nError fetching info", e))

        return "\n\n".join(sections)
