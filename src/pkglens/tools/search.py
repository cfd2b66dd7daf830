"""Tools for searching packages that are not installed yet."""

from __future__ import annotations

from pkglens.core.catalog import Catalog
from pkglens.core.errors import DetectionFailure, ExecutionError
from pkglens.core.logging import get_logger
from pkglens.core.models import SearchResult
from pkglens.tools.common import FLATPAK_UNAVAILABLE, describe_failure

log = get_logger(__name__)


def render_results(title: str, result: SearchResult) -> str:
    """Header with shown and total counts followed by one row per result."""
    header = f'{title} results for "{result.query}" ({len(result.rows)} shown of {result.total}):'
    return header + "\n\n" + "\n".join(result.rows)


class SearchTools:
    """Repository search on Flathub and the native package manager.

    Flathub is meant to be searched first; the native repo covers system
    packages and anything not published as a Flatpak.
    """

    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog

    async def search_flathub(self, query: str) -> str:
        """Search Flathub for applications.

        Args:
            query: Keyword, application name or description term.
        """
        if self.catalog.flatpak is None:
            return FLATPAK_UNAVAILABLE

        try:
            result = await self.catalog.flatpak.search(query)
        except ExecutionError as e:
            return describe_failure("Error searching Flathub", e)

        if not result.rows:
            return f'No Flatpak applications found on Flathub matching "{query}".'
        return render_results("Flathub", result)

    async def search_native_repo(self, query: str) -> str:
        """Search the native package manager's repositories.

        Args:
            query: Keyword or package name.
        """
        native = self.catalog.native
        log.debug("search_native_repo", query=query, backend=native.name)

        try:
            result = await native.search(query)
        except DetectionFailure as e:
            return e.message
        except ExecutionError as e:
            return describe_failure("Error searching native repo", e)

        if not result.rows:
            return f'No native packages found matching "{query}".'
        return render_results("[native]", result)
