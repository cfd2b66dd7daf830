"""Tools for installing and removing packages.

Callers must get the user's confirmation before invoking any of these.
"""

from __future__ import annotations

from pkglens.core.catalog import Catalog
from pkglens.core.models import Mutation
from pkglens.tools.common import FLATPAK_UNAVAILABLE, run_mutation


class InstallTools:
    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog

    async def install_flatpak(self, app_id: str) -> str:
        """Install a Flatpak application from Flathub, e.g. ``org.videolan.VLC``."""
        if self.catalog.flatpak is None:
            return FLATPAK_UNAVAILABLE
        return await run_mutation(self.catalog, self.catalog.flatpak, Mutation.INSTALL, app_id)

    async def install_native_package(self, package_name: str) -> str:
        """Install a package with the native package manager (needs root)."""
        return await run_mutation(self.catalog, self.catalog.native, Mutation.INSTALL, package_name)

    async def remove_flatpak(self, app_id: str) -> str:
        if self.catalog.flatpak is None:
            return FLATPAK_UNAVAILABLE
        return await run_mutation(self.catalog, self.catalog.flatpak, Mutation.REMOVE, app_id)

    async def remove_native_package(self, package_name: str) -> str:
        return await run_mutation(self.catalog, self.catalog.native, Mutation.REMOVE, package_name)
