"""Single entry point bundling every tool group around one catalog."""

from __future__ import annotations

from typing import Optional

from pkglens.core.catalog import Catalog
from pkglens.core.config import HostEnv, Settings, get_env
from pkglens.providers.base import Runner
from pkglens.tools.install import InstallTools
from pkglens.tools.query import QueryTools
from pkglens.tools.search import SearchTools
from pkglens.tools.updates import UpdateTools


class PackageTools:
    """The operation surface handed to an external caller such as an agent."""

    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog
        self.query = QueryTools(catalog)
        self.search = SearchTools(catalog)
        self.updates = UpdateTools(catalog)
        self.install = InstallTools(catalog)

    @classmethod
    def create(
        cls,
        env: Optional[HostEnv] = None,
        runner: Runner | None = None,
        settings: Optional[Settings] = None,
    ) -> PackageTools:
        """Detect the host (once per process) and wire providers, catalog and tools."""
        return cls(
            Catalog.from_env(
                env or get_env(),
                runner=runner,
                settings=settings or Settings.from_env(),
            )
        )

    @property
    def env(self) -> HostEnv:
        return self.catalog.env
