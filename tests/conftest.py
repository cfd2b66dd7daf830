"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from pkglens.core.logging import configure_logging

# Keep test runs out of ~/.pkglens; must run before any module asks for a logger
configure_logging(level="DEBUG", log_file=Path(tempfile.mkdtemp()) / "pkglens-test.log")

from pkglens.core.config import HostEnv, Settings  # noqa: E402
from pkglens.core.errors import ExecutionError  # noqa: E402
from pkglens.core.models import Backend  # noqa: E402


class FakeRunner:
    """Stands in for ``pkglens.core.shell.run``.

    Responses are keyed by a command prefix; the longest matching prefix
    wins. A response may be a string (the output) or an exception to raise.
    """

    def __init__(self, responses: dict[tuple[str, ...], object] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, ...]] = []

    def on(self, *prefix: str, output: object = "") -> FakeRunner:
        self.responses[tuple(prefix)] = output
        return self

    async def __call__(self, *cmd: str, timeout=None, ok_codes=(0,)) -> str:
        self.calls.append(cmd)
        best = None
        for prefix in self.responses:
            if cmd[: len(prefix)] == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is None:
            raise ExecutionError(command=" ".join(cmd), returncode=127, error="command not found")
        response = self.responses[best]
        if isinstance(response, BaseException):
            raise response
        return response

    def count(self, *prefix: str) -> int:
        return sum(1 for c in self.calls if c[: len(prefix)] == prefix)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def dnf_flatpak_env() -> HostEnv:
    return HostEnv(native=Backend.DNF, flatpak=True)


@pytest.fixture
def non_root(monkeypatch):
    """Make privileged commands carry a sudo prefix regardless of who runs the tests."""
    monkeypatch.setattr("pkglens.providers.base.os.geteuid", lambda: 1000)
