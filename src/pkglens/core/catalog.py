"""Installed-package catalog combining the native backend and Flatpak."""

from __future__ import annotations

import asyncio
import time
from typing import Callable, List, Optional, Tuple

from pkglens.core.cache import TTLCache
from pkglens.core.config import HostEnv, Settings
from pkglens.core.logging import get_logger
from pkglens.core.models import Backend, Package
from pkglens.providers.base import PackageProvider, Runner
from pkglens.providers.registry import flatpak_provider, provider_for

log = get_logger(__name__)


class Catalog:
    """User-installed packages from every available origin, cached for a short time.

    Call ``invalidate()`` after any install, update or remove.
    """

    def __init__(
        self,
        env: HostEnv,
        native: PackageProvider,
        flatpak: Optional[PackageProvider] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.env = env
        self.native = native
        self.flatpak = flatpak if env.flatpak else None
        self.settings = settings or Settings()
        self._cache: TTLCache[Tuple[Package, ...]] = TTLCache(
            "installed", ttl=self.settings.cache_ttl, clock=clock
        )

    @classmethod
    def from_env(
        cls,
        env: HostEnv,
        runner: Runner | None = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> Catalog:
        """Wire up providers for a detected host environment."""
        settings = settings or Settings()
        return cls(
            env,
            native=provider_for(env.native, runner=runner, settings=settings),
            flatpak=flatpak_provider(runner=runner, settings=settings) if env.flatpak else None,
            settings=settings,
            clock=clock,
        )

    @property
    def native_backend(self) -> Backend:
        return self.env.native

    @property
    def flatpak_available(self) -> bool:
        return self.env.flatpak

    @property
    def refresh_count(self) -> int:
        return self._cache.loads

    async def list_installed(self) -> Tuple[Package, ...]:
        """Return native packages followed by Flatpak apps.

        A failing origin contributes nothing instead of failing the call.
        """
        return await self._cache.get_or_load(self._fetch)

    def invalidate(self) -> None:
        self._cache.invalidate()

    async def _fetch(self) -> Tuple[Package, ...]:
        start = time.perf_counter()
        log.info(
            "fetch_packages_start",
            backend=self.env.native.value,
            flatpak=self.flatpak is not None
        )

        jobs = [self.native.list_installed()]
        if self.flatpak is not None:
            jobs.append(self.flatpak.list_installed())

        results = await asyncio.gather(*jobs, return_exceptions=True)

        pkgs: List[Package] = []
        for source, result in zip(("native", "flatpak"), results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                log.warning(f"{source}_fetch_failed", error=str(result))
                continue
            pkgs.extend(result)

        log.info(
            "fetch_packages_complete",
            count=len(pkgs),
            duration_ms=int((time.perf_counter() - start) * 1000)
        )
        return tuple(pkgs)
