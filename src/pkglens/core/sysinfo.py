"""One-line host summary read from /etc and /proc."""

from __future__ import annotations

from pathlib import Path

from pkglens.core.logging import get_logger

log = get_logger(__name__)

OS_RELEASE = Path("/etc/os-release")
CPUINFO = Path("/proc/cpuinfo")
MEMINFO = Path("/proc/meminfo")


def _read_lines(path: Path) -> list[str] | None:
    try:
        return path.read_text(errors="replace").splitlines()
    except OSError as e:
        log.warning("sysinfo_read_failed", path=str(path), error=str(e))
        return None


def read_distro(path: Path = OS_RELEASE) -> str:
    """PRETTY_NAME from os-release, falling back to NAME."""
    lines = _read_lines(path)
    if lines is None:
        return "Unknown Linux"

    fields: dict[str, str] = {}
    for line in lines:
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        fields.setdefault(key.strip(), value.strip().replace('"', ""))
    return fields.get("PRETTY_NAME") or fields.get("NAME") or "Unknown Linux"


def read_cpu(path: Path = CPUINFO) -> str:
    for line in _read_lines(path) or []:
        if line.startswith("model name"):
            return line.split(":", 1)[1].strip()
    return "Unknown CPU"


def read_ram_gb(path: Path = MEMINFO) -> str:
    """Total memory in whole gigabytes; /proc/meminfo reports kB."""
    for line in _read_lines(path) or []:
        if line.startswith("MemTotal:"):
            digits = "".join(ch for ch in line if ch.isdigit())
            if digits:
                return str(round(int(digits) / 1_048_576))
    return "Unknown"


def system_details(
    os_release: Path = OS_RELEASE, cpuinfo: Path = CPUINFO, meminfo: Path = MEMINFO
) -> str:
    details = (
        f"Distro: {read_distro(os_release)} | CPU: {read_cpu(cpuinfo)} "
        f"| RAM: {read_ram_gb(meminfo)} GB"
    )
    log.debug("system_details", details=details)
    return details
