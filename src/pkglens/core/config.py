"""Host environment detection and runtime settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Sequence

from pkglens.core.logging import get_logger
from pkglens.core.models import Backend

log = get_logger(__name__)

DEFAULT_PREFIXES: tuple[str, ...] = ("/usr/bin/", "/bin/", "/usr/local/bin/", "/usr/sbin/")

# First match wins.
NATIVE_PRIORITY: tuple[tuple[str, Backend], ...] = (
    ("dnf", Backend.DNF),
    ("apt", Backend.APT),
    ("pacman", Backend.PACMAN),
    ("zypper", Backend.ZYPPER),
)

CACHE_TTL_SECONDS = 60.0
LIST_MAX_RESULTS = 50
SEARCH_MAX_RESULTS = 20


@dataclass(frozen=True)
class HostEnv:
    """Package managers available on this host, decided once at startup."""
    native: Backend
    flatpak: bool


@dataclass(frozen=True)
class Settings:
    """Tunable limits, overridable through PKGLENS_* environment variables."""
    cache_ttl: float = CACHE_TTL_SECONDS
    list_max_results: int = LIST_MAX_RESULTS
    search_max_results: int = SEARCH_MAX_RESULTS
    command_timeout: float | None = None

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from the environment, ignoring unparsable values."""
        env = os.environ if environ is None else environ
        return cls(
            cache_ttl=_read_number(env, "PKGLENS_CACHE_TTL", float, CACHE_TTL_SECONDS),
            list_max_results=_read_number(env, "PKGLENS_LIST_MAX_RESULTS", int, LIST_MAX_RESULTS),
            search_max_results=_read_number(env, "PKGLENS_SEARCH_MAX_RESULTS", int, SEARCH_MAX_RESULTS),
            command_timeout=_read_number(env, "PKGLENS_COMMAND_TIMEOUT", float, None),
        )


def _read_number(env, key, kind, default):
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = kind(raw)
    except ValueError:
        log.warning("setting_invalid", key=key, value=raw)
        return default
    if value <= 0:
        log.warning("setting_invalid", key=key, value=raw)
        return default
    return value


def is_command_available(name: str, prefixes: Sequence[str] = DEFAULT_PREFIXES) -> bool:
    """Check whether an executable exists under one of the well-known prefixes.

    Args:
        name: Executable name, e.g. "dnf".
        prefixes: Directory prefixes ending with a slash.

    Returns:
        True if ``<prefix><name>`` exists for any prefix.
    """
    return any(Path(prefix + name).exists() for prefix in prefixes)


def detect_native(prefixes: Sequence[str] = DEFAULT_PREFIXES) -> Backend:
    """Pick the native backend by fixed priority: dnf, apt, pacman, zypper."""
    for command, backend in NATIVE_PRIORITY:
        if is_command_available(command, prefixes):
            return backend
    return Backend.NONE


def detect_flatpak(prefixes: Sequence[str] = DEFAULT_PREFIXES) -> bool:
    """Check whether the flatpak executable is installed."""
    return is_command_available("flatpak", prefixes)


def discover_env(prefixes: Sequence[str] = DEFAULT_PREFIXES) -> HostEnv:
    """Probe the filesystem and build the host environment.

    No command is executed; only executable paths are checked.
    """
    env = HostEnv(native=detect_native(prefixes), flatpak=detect_flatpak(prefixes))
    if env.native is Backend.NONE:
        log.warning("native_backend_missing", prefixes=list(prefixes))
    log.info("host_env_detected", backend=env.native.value, flatpak=env.flatpak)
    return env


@lru_cache(maxsize=1)
def get_env() -> HostEnv:
    """Detect the host environment once per process.

    A changed environment requires a restart.
    """
    return discover_env()
