"""Map a detected backend to its provider."""

from __future__ import annotations

from typing import List

from pkglens.core.config import Settings
from pkglens.core.errors import DetectionFailure
from pkglens.core.logging import get_logger
from pkglens.core.models import Backend, Mutation, Package, SearchResult
from pkglens.providers.apt import AptProvider
from pkglens.providers.base import PackageProvider, Runner
from pkglens.providers.dnf import DnfProvider
from pkglens.providers.flatpak import FlatpakProvider
from pkglens.providers.pacman import PacmanProvider
from pkglens.providers.zypper import ZypperProvider

log = get_logger(__name__)


class NullProvider(PackageProvider):
    """Stands in when no supported native package manager exists.

    Listing degrades to an empty result; everything else raises
    DetectionFailure for the tools to turn into a message.
    """

    name = "none"

    async def _fetch_installed(self) -> List[Package]:
        log.warning("native_backend_missing")
        return []

    async def search(self, query: str) -> SearchResult:
        raise DetectionFailure(context={"operation": "search"})

    async def info(self, name: str) -> str:
        raise DetectionFailure(context={"operation": "info"})

    async def check_updates(self) -> List[str]:
        raise DetectionFailure(context={"operation": "check-updates"})

    async def mutate(self, action: Mutation, target: str) -> str:
        raise DetectionFailure(context={"operation": action.value})


PROVIDERS: dict[Backend, type[PackageProvider]] = {
    Backend.DNF: DnfProvider,
    Backend.APT: AptProvider,
    Backend.PACMAN: PacmanProvider,
    Backend.ZYPPER: ZypperProvider,
    Backend.NONE: NullProvider,
}


def provider_for(
    backend: Backend, runner: Runner | None = None, settings: Settings | None = None
) -> PackageProvider:
    """Build the native provider for a detected backend."""
    return PROVIDERS[backend](runner=runner, settings=settings)


def flatpak_provider(runner: Runner | None = None, settings: Settings | None = None) -> FlatpakProvider:
    return FlatpakProvider(runner=runner, settings=settings)
