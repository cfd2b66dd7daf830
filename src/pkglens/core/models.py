"""Data models shared by providers, the catalog and the tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Origin(Enum):
    """Where an installed package came from."""

    NATIVE = "native"
    FLATPAK = "flatpak"


class Backend(Enum):
    """Native package manager selected at startup."""

    DNF = "dnf"
    APT = "apt"
    PACMAN = "pacman"
    ZYPPER = "zypper"
    NONE = "none"


class Mutation(Enum):
    """State-changing package operations."""

    INSTALL = "install"
    REMOVE = "remove"
    UPDATE = "update"


ALL_PACKAGES = "ALL"


@dataclass(frozen=True)
class Package:
    """A user-installed package, native or Flatpak.

    ``id`` is the native package name or the Flatpak application id.
    The same software may be present once per origin.
    """

    name: str
    id: str
    version: str = ""
    summary: str = ""
    origin: Origin = Origin.NATIVE

    @property
    def is_flatpak(self) -> bool:
        return self.origin is Origin.FLATPAK


@dataclass
class SearchResult:
    """Display rows from a repository search.

    ``rows`` is already capped; ``total`` counts every match the backend reported.
    """

    query: str
    rows: list[str] = field(default_factory=list)
    total: int = 0

    @property
    def truncated(self) -> bool:
        return self.total > len(self.rows)
