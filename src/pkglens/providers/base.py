"""Shared provider behaviour for native package managers and Flatpak."""

from __future__ import annotations

import os
import time
from typing import Awaitable, Callable, Iterable, List, Sequence

from pkglens.core import shell
from pkglens.core.config import Settings
from pkglens.core.errors import UnsupportedOperation
from pkglens.core.logging import get_logger
from pkglens.core.models import ALL_PACKAGES, Mutation, Origin, Package, SearchResult

log = get_logger(__name__)

Runner = Callable[..., Awaitable[str]]


def split_lines(output: str) -> List[str]:
    return output.replace("\r\n", "\n").split("\n")


def split_tab_row(line: str, maxfields: int) -> List[str]:
    """Split a tab separated row into at most ``maxfields`` trimmed fields."""
    return [f.strip() for f in line.split("\t", maxfields - 1)]


def strip_noise(output: str, noise_prefixes: Sequence[str]) -> str:
    """Drop banner lines and surrounding blank lines from free text output."""
    lines = [
        line.rstrip() for line in split_lines(output)
        if not line.strip().startswith(tuple(noise_prefixes))
    ]
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines)


def privileged(*cmd: str) -> tuple[str, ...]:
    """Prefix a command with sudo unless we already run as root."""
    if os.geteuid() == 0:
        return cmd
    return ("sudo", *cmd)


class PackageProvider:
    """Base class for one package backend.

    Subclasses supply the command lines and parsers; this class runs the
    commands, applies exit-code policy and the search cap, and logs.
    """

    name: str = "base"
    origin: Origin = Origin.NATIVE

    # Exit codes meaning "ran fine, possibly with nothing to report".
    search_ok_codes: Iterable[int] = (0,)
    updates_ok_codes: Iterable[int] = (0,)

    info_noise: Sequence[str] = ()

    def __init__(self, runner: Runner | None = None, settings: Settings | None = None) -> None:
        self._runner = runner or shell.run
        self.settings = settings or Settings()

    @property
    def tag(self) -> str:
        return f"[{self.origin.value}]"

    async def _run(self, *cmd: str, ok_codes: Iterable[int] = (0,)) -> str:
        return await self._runner(*cmd, timeout=self.settings.command_timeout, ok_codes=ok_codes)

    # -- list-installed -------------------------------------------------

    async def list_installed(self) -> List[Package]:
        """List packages the user installed explicitly.

        Returns:
            Packages normalised for this backend's origin.
        """
        start = time.perf_counter()
        log.debug("list_installed_start", backend=self.name)

        pkgs = await self._fetch_installed()

        log.info(
            "list_installed_complete",
            backend=self.name,
            count=len(pkgs),
            duration_ms=int((time.perf_counter() - start) * 1000)
        )
        return pkgs

    async def _fetch_installed(self) -> List[Package]:
        raise NotImplementedError

    # -- search ---------------------------------------------------------

    def search_command(self, query: str) -> Sequence[str]:
        raise UnsupportedOperation(operation="search", backend=self.name)

    def parse_search(self, output: str) -> List[str]:
        raise NotImplementedError

    async def search(self, query: str) -> SearchResult:
        """Search the backend's repositories.

        Args:
            query: Keyword or package name.

        Returns:
            Up to ``search_max_results`` display rows plus the total match count.
        """
        out = await self._run(*self.search_command(query), ok_codes=self.search_ok_codes)
        rows = self.parse_search(out)
        cap = self.settings.search_max_results

        log.info("search_complete", backend=self.name, query=query, count=len(rows))
        return SearchResult(query=query, rows=rows[:cap], total=len(rows))

    # -- info -----------------------------------------------------------

    def info_command(self, name: str) -> Sequence[str]:
        raise UnsupportedOperation(operation="info", backend=self.name)

    async def info(self, name: str) -> str:
        """Return the backend's own detail text for one package, tagged with its origin."""
        out = await self._run(*self.info_command(name))
        body = strip_noise(out, self.info_noise)
        log.debug("info_complete", backend=self.name, package=name)
        return f"{self.tag} {name}\n{body}" if body else f"{self.tag} {name}"

    # -- updates ----------------------------------------------------------

    def updates_command(self) -> Sequence[str]:
        raise UnsupportedOperation(operation="check-updates", backend=self.name)

    def parse_updates(self, output: str) -> List[str]:
        raise NotImplementedError

    async def check_updates(self) -> List[str]:
        """List pending updates, one display row per package."""
        out = await self._run(*self.updates_command(), ok_codes=self.updates_ok_codes)
        rows = self.parse_updates(out)
        log.info("check_updates_complete", backend=self.name, count=len(rows))
        return rows

    # -- mutate -----------------------------------------------------------

    def mutation_command(self, action: Mutation, target: str) -> Sequence[str]:
        raise UnsupportedOperation(operation=action.value, backend=self.name)

    async def mutate(self, action: Mutation, target: str) -> str:
        """Install, remove or update a package. ``ALL`` is accepted for updates only.

        Returns:
            The command's combined output.

        Raises:
            UnsupportedOperation: For install/remove of ``ALL`` or a backend
                without the operation.
            ExecutionError: If the command fails.
        """
        if target == ALL_PACKAGES and action is not Mutation.UPDATE:
            raise UnsupportedOperation(
                f"Cannot {action.value} all packages at once",
                operation=action.value,
                backend=self.name,
            )

        cmd = self.mutation_command(action, target)
        start = time.perf_counter()
        log.info("mutation_start", backend=self.name, action=action.value, package=target)

        out = await self._run(*cmd)

        log.info(
            "mutation_complete",
            backend=self.name,
            action=action.value,
            package=target,
            duration_ms=int((time.perf_counter() - start) * 1000)
        )
        return out.strip()
