"""
Tests for the tool surface: filtering, formatting, dispatch and error wrapping.
"""

import asyncio

import pytest

from pkglens.core.catalog import Catalog
from pkglens.core.config import HostEnv, Settings
from pkglens.core.errors import ExecutionError, UnsupportedOperation
from pkglens.core.models import Backend, Origin, Package
from pkglens.tools.package_tools import PackageTools
from pkglens.tools.query import format_package, matches, resolve

DNF_OUT = (
    "vlc\t3.0.20-1\tThe VLC media player\n"
    "git\t2.43.0-1\tFast Version Control System\n"
    "gimp\t2.10.36-1\tGNU Image Manipulation Program\n"
)
FLATPAK_OUT = "VLC media player\torg.videolan.VLC\t3.0.20\nGIMP\torg.gimp.GIMP\t2.10.36\n"


def _tools(runner, clock, env=HostEnv(native=Backend.DNF, flatpak=True), **settings):
    catalog = Catalog.from_env(env, runner=runner, settings=Settings(**settings), clock=clock)
    return PackageTools(catalog)


@pytest.fixture
def loaded(runner):
    runner.on("dnf", "repoquery", output=DNF_OUT).on("flatpak", "list", output=FLATPAK_OUT)
    return runner


class TestFormatting:
    def test_native_line(self):
        line = format_package(Package("vlc", "vlc", "3.0.20-1", "player"))
        assert line == f"[native]   {'vlc':<45} 3.0.20-1 — player"

    def test_flatpak_line_without_summary(self):
        line = format_package(Package("VLC", "org.videolan.VLC", "3.0.20", "", Origin.FLATPAK))
        assert line == f"[flatpak]  {'VLC (org.videolan.VLC)':<45} 3.0.20"

    def test_filter_is_case_insensitive_on_name_id_summary(self):
        pkg = Package("VLC media player", "org.videolan.VLC", "3.0", "", Origin.FLATPAK)
        assert matches(pkg, "vlc")
        assert matches(pkg, "VIDEOLAN")
        assert matches(Package("x", "x", "", "Media Player"), "media player")
        assert not matches(pkg, "gimp")


class TestListInstalledPackages:
    def test_lists_everything_without_filter(self, loaded, clock):
        out = asyncio.run(_tools(loaded, clock).query.list_installed_packages(""))
        assert out.startswith("Found 5 installed package(s):\n\n")
        assert "[flatpak]  VLC media player (org.videolan.VLC)" in out
        assert "Showing" not in out

    def test_filter_matches_both_origins(self, loaded, clock):
        out = asyncio.run(_tools(loaded, clock).query.list_installed_packages("VLC"))
        assert out.startswith('Found 2 installed package(s) matching "VLC":')
        assert "[native]   vlc" in out
        assert "org.videolan.VLC" in out
        assert "gimp" not in out.lower()

    def test_no_matches_message(self, loaded, clock):
        out = asyncio.run(_tools(loaded, clock).query.list_installed_packages("emacs"))
        assert out == 'No installed packages found matching "emacs".'

    def test_nothing_installed_message(self, runner, clock):
        runner.on("dnf", "repoquery", output="").on("flatpak", "list", output="")
        out = asyncio.run(_tools(runner, clock).query.list_installed_packages(""))
        assert out == "No user-installed packages found."

    def test_truncates_to_display_cap(self, runner, clock):
        rows = "".join(f"pkg{i:02d}\t1.0-{i}\tpackage number {i}\n" for i in range(80))
        runner.on("dnf", "repoquery", output=rows)
        env = HostEnv(native=Backend.DNF, flatpak=False)
        out = asyncio.run(_tools(runner, clock, env=env).query.list_installed_packages("pkg"))

        assert out.startswith('Found 80 installed package(s) matching "pkg":')
        assert "(Showing 50 of 80. Use a more specific filter to narrow results.)" in out
        package_lines = [line for line in out.splitlines() if line.startswith("[native]")]
        assert len(package_lines) == 50
        assert "pkg49" in out and "pkg50" not in out

    def test_uses_catalog_cache(self, loaded, clock):
        tools = _tools(loaded, clock)

        async def scenario():
            await tools.query.list_installed_packages("")
            await tools.query.list_installed_packages("git")

        asyncio.run(scenario())
        assert loaded.count("dnf", "repoquery") == 1


class TestGetPackageInfo:
    def test_concatenates_every_match(self, loaded, clock):
        loaded.on("dnf", "info", output="Name : vlc\nVersion : 3.0.20\n")
        loaded.on("flatpak", "info", output="VLC media player\nID: org.videolan.VLC\n")
        out = asyncio.run(_tools(loaded, clock).query.get_package_info("vlc"))

        assert "[native] vlc\nName : vlc" in out
        assert "[flatpak] org.videolan.VLC\nVLC media player" in out
        assert ("dnf", "info", "vlc") in loaded.calls
        assert ("flatpak", "info", "org.videolan.VLC") in loaded.calls

    def test_exact_id(self, loaded, clock):
        loaded.on("flatpak", "info", output="GIMP details\n")
        loaded.on("dnf", "info", output="gimp details\n")
        out = asyncio.run(_tools(loaded, clock).query.get_package_info("org.gimp.GIMP"))
        assert out == "[flatpak] org.gimp.GIMP\nGIMP details"

    def test_no_match(self, loaded, clock):
        out = asyncio.run(_tools(loaded, clock).query.get_package_info("emacs"))
        assert out == 'No installed package found matching "emacs".'

    def test_info_failure_is_reported_inline(self, loaded, clock):
        loaded.on("dnf", "info", output=ExecutionError(command="dnf info git", returncode=1, error="No matching"))
        out = asyncio.run(_tools(loaded, clock).query.get_package_info("git"))
        assert out.startswith("[native] git\nError fetching info: Command failed with exit code 1")
        assert "No matching" in out

    def test_resolve_is_permissive(self):
        pkgs = [
            Package("vlc", "vlc"),
            Package("vlc-plugins", "vlc-plugins"),
            Package("VLC", "org.videolan.VLC", origin=Origin.FLATPAK),
        ]
        assert [p.id for p in resolve(pkgs, "vlc")] == ["vlc", "vlc-plugins", "org.videolan.VLC"]


class TestSearch:
    def test_flathub(self, runner, clock):
        runner.on("flatpak", "search", output="VLC\torg.videolan.VLC\tVLC media player\t3.0.20\n")
        out = asyncio.run(_tools(runner, clock).search.search_flathub("vlc"))
        assert out.startswith('Flathub results for "vlc" (1 shown of 1):\n\n[flatpak]  VLC (org.videolan.VLC)')

    def test_flathub_unavailable(self, runner, clock):
        env = HostEnv(native=Backend.APT, flatpak=False)
        out = asyncio.run(_tools(runner, clock, env=env).search.search_flathub("vlc"))
        assert out == "Flatpak is not available on this system."
        assert runner.calls == []

    def test_native_reports_true_total(self, runner, clock):
        runner.on("dnf", "search", output="".join(f"pkg{i}.x86_64 : thing {i}\n" for i in range(30)))
        out = asyncio.run(_tools(runner, clock).search.search_native_repo("thing"))
        assert out.startswith('[native] results for "thing" (20 shown of 30):')
        assert len(out.splitlines()) == 22

    def test_native_pacman_merge(self, runner, clock):
        runner.on("pacman", "-Ss", output="extra/vlc 3.0.20-1 [installed]\n    VLC media player\n")
        env = HostEnv(native=Backend.PACMAN, flatpak=False)
        out = asyncio.run(_tools(runner, clock, env=env).search.search_native_repo("vlc"))
        assert out.endswith("extra/vlc 3.0.20-1 — VLC media player")

    def test_native_no_results(self, runner, clock):
        runner.on("dnf", "search", output="No matches found.\n")
        out = asyncio.run(_tools(runner, clock).search.search_native_repo("zzz"))
        assert out == 'No native packages found matching "zzz".'

    def test_no_backend(self, runner, clock):
        env = HostEnv(native=Backend.NONE, flatpak=False)
        out = asyncio.run(_tools(runner, clock, env=env).search.search_native_repo("vlc"))
        assert out == "No supported native package manager detected on this system."

    def test_execution_error_becomes_message(self, runner, clock):
        runner.on("dnf", "search", output=ExecutionError(command="dnf search vlc", returncode=2))
        out = asyncio.run(_tools(runner, clock).search.search_native_repo("vlc"))
        assert out.startswith("Error searching native repo: Command failed with exit code 2")


class TestUpdates:
    def test_check_native(self, runner, clock):
        runner.on("dnf", "check-update", output="firefox.x86_64  121.0-1.fc39  updates\n")
        out = asyncio.run(_tools(runner, clock).updates.check_native_updates())
        assert out == "Pending native updates (1):\n\nfirefox.x86_64 121.0-1.fc39 (updates)"

    def test_check_flatpak_up_to_date(self, runner, clock):
        runner.on("flatpak", "remote-ls", output="")
        out = asyncio.run(_tools(runner, clock).updates.check_flatpak_updates())
        assert out == "All Flatpak applications are up to date."

    def test_update_all_native_invalidates_cache(self, loaded, clock, non_root):
        loaded.on("sudo", "dnf", "upgrade", output="Complete!\n")
        tools = _tools(loaded, clock)

        async def scenario():
            await tools.query.list_installed_packages("")
            result = await tools.updates.update_native_package("ALL")
            await tools.query.list_installed_packages("")
            return result

        result = asyncio.run(scenario())
        assert result == "Updated ALL via dnf.\n\nComplete!"
        assert ("sudo", "dnf", "upgrade", "-y") in loaded.calls
        assert loaded.count("dnf", "repoquery") == 2


class TestInstall:
    def test_install_flatpak(self, runner, clock):
        runner.on("flatpak", "install", output="Installing org.videolan.VLC\n")
        out = asyncio.run(_tools(runner, clock).install.install_flatpak("org.videolan.VLC"))
        assert out.startswith("Installed org.videolan.VLC via flatpak.")
        assert runner.calls == [("flatpak", "install", "-y", "flathub", "org.videolan.VLC")]

    def test_failed_remove_still_invalidates(self, loaded, clock, non_root):
        loaded.on("sudo", "dnf", "remove", output=ExecutionError(
            command="sudo dnf remove -y vlc", returncode=1, error="sudo: a password is required"
        ))
        tools = _tools(loaded, clock)

        async def scenario():
            await tools.catalog.list_installed()
            result = await tools.install.remove_native_package("vlc")
            await tools.catalog.list_installed()
            return result

        result = asyncio.run(scenario())
        assert result.startswith("Error removing vlc: Command failed with exit code 1")
        assert "password is required" in result
        assert loaded.count("dnf", "repoquery") == 2

    def test_unsupported_operation_propagates(self, runner, clock):
        tools = _tools(runner, clock)
        with pytest.raises(UnsupportedOperation):
            asyncio.run(tools.install.remove_flatpak("ALL"))

    def test_no_backend_install(self, runner, clock):
        env = HostEnv(native=Backend.NONE, flatpak=False)
        out = asyncio.run(_tools(runner, clock, env=env).install.install_native_package("vlc"))
        assert out == "No supported native package manager detected on this system."
        assert runner.calls == []
