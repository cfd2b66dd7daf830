"""Tools for checking and applying updates."""

from __future__ import annotations

from typing import List

from pkglens.core.catalog import Catalog
from pkglens.core.errors import DetectionFailure, ExecutionError
from pkglens.core.models import ALL_PACKAGES, Mutation
from pkglens.providers.base import PackageProvider
from pkglens.tools.common import FLATPAK_UNAVAILABLE, describe_failure, run_mutation


def render_updates(title: str, rows: List[str]) -> str:
    return f"{title} ({len(rows)}):\n\n" + "\n".join(rows)


class UpdateTools:
    """Read-only update checks plus per-package or full upgrades."""

    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog

    async def _check(self, provider: PackageProvider, title: str, up_to_date: str) -> str:
        try:
            rows = await provider.check_updates()
        except DetectionFailure as e:
            return e.message
        except ExecutionError as e:
            return describe_failure(f"Error checking {provider.name} updates", e)

        if not rows:
            return up_to_date
        return render_updates(title, rows)

    async def check_flatpak_updates(self) -> str:
        """List Flatpak applications with pending updates."""
        if self.catalog.flatpak is None:
            return FLATPAK_UNAVAILABLE
        return await self._check(
            self.catalog.flatpak, "Pending Flatpak updates", "All Flatpak applications are up to date."
        )

    async def check_native_updates(self) -> str:
        """List native packages with pending updates."""
        return await self._check(
            self.catalog.native, "Pending native updates", "All native packages are up to date."
        )

    async def update_flatpak(self, app_id: str = ALL_PACKAGES) -> str:
        """Update one Flatpak application, or every one with ``ALL``."""
        if self.catalog.flatpak is None:
            return FLATPAK_UNAVAILABLE
        return await run_mutation(self.catalog, self.catalog.flatpak, Mutation.UPDATE, app_id)

    async def update_native_package(self, package_name: str = ALL_PACKAGES) -> str:
        """Update one native package, or upgrade the whole system with ``ALL``."""
        return await run_mutation(self.catalog, self.catalog.native, Mutation.UPDATE, package_name)
