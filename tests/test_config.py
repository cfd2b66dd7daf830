"""
Tests for backend detection and settings.
"""

from pathlib import Path

import pytest

from pkglens.core.config import (
    CACHE_TTL_SECONDS,
    HostEnv,
    Settings,
    detect_flatpak,
    detect_native,
    discover_env,
    is_command_available,
)
from pkglens.core.models import Backend


def _prefixes(tmp_path: Path, *dirs: str) -> tuple[str, ...]:
    out = []
    for d in dirs:
        (tmp_path / d).mkdir(parents=True, exist_ok=True)
        out.append(f"{tmp_path / d}/")
    return tuple(out)


def _install(tmp_path: Path, d: str, *names: str) -> None:
    for name in names:
        exe = tmp_path / d / name
        exe.write_text("#!/bin/sh\n")
        exe.chmod(0o755)


class TestDetectNative:
    def test_dnf_wins_over_apt(self, tmp_path):
        prefixes = _prefixes(tmp_path, "usr/bin", "bin")
        _install(tmp_path, "usr/bin", "apt")
        _install(tmp_path, "bin", "dnf")
        assert detect_native(prefixes) is Backend.DNF

    @pytest.mark.parametrize(
        "present, expected",
        [
            (("apt", "pacman", "zypper"), Backend.APT),
            (("pacman", "zypper"), Backend.PACMAN),
            (("zypper",), Backend.ZYPPER),
        ],
    )
    def test_priority_order(self, tmp_path, present, expected):
        prefixes = _prefixes(tmp_path, "usr/bin")
        _install(tmp_path, "usr/bin", *present)
        assert detect_native(prefixes) is expected

    def test_nothing_found(self, tmp_path):
        prefixes = _prefixes(tmp_path, "usr/bin", "usr/sbin")
        _install(tmp_path, "usr/bin", "ls", "flatpak")
        assert detect_native(prefixes) is Backend.NONE

    def test_any_prefix_counts(self, tmp_path):
        prefixes = _prefixes(tmp_path, "usr/bin", "usr/local/bin")
        _install(tmp_path, "usr/local/bin", "pacman")
        assert is_command_available("pacman", prefixes)
        assert not is_command_available("dnf", prefixes)


class TestDetectFlatpak:
    def test_present(self, tmp_path):
        prefixes = _prefixes(tmp_path, "usr/bin")
        _install(tmp_path, "usr/bin", "flatpak")
        assert detect_flatpak(prefixes) is True

    def test_absent(self, tmp_path):
        assert detect_flatpak(_prefixes(tmp_path, "usr/bin")) is False


class TestDiscoverEnv:
    def test_independent_flags(self, tmp_path):
        prefixes = _prefixes(tmp_path, "usr/bin")
        _install(tmp_path, "usr/bin", "zypper", "flatpak")
        assert discover_env(prefixes) == HostEnv(native=Backend.ZYPPER, flatpak=True)

    def test_env_is_immutable(self):
        env = HostEnv(native=Backend.APT, flatpak=False)
        with pytest.raises(AttributeError):
            env.native = Backend.DNF


class TestSettings:
    def test_defaults(self):
        s = Settings.from_env({})
        assert s.cache_ttl == CACHE_TTL_SECONDS
        assert s.list_max_results == 50
        assert s.search_max_results == 20
        assert s.command_timeout is None

    def test_overrides(self):
        s = Settings.from_env({
            "PKGLENS_CACHE_TTL": "5",
            "PKGLENS_LIST_MAX_RESULTS": "10",
            "PKGLENS_COMMAND_TIMEOUT": "30",
        })
        assert s.cache_ttl == 5.0
        assert s.list_max_results == 10
        assert s.command_timeout == 30.0

    def test_invalid_values_fall_back(self):
        s = Settings.from_env({
            "PKGLENS_LIST_MAX_RESULTS": "lots",
            "PKGLENS_SEARCH_MAX_RESULTS": "-1",
        })
        assert s.list_max_results == 50
        assert s.search_max_results == 20
