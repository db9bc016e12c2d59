"""Host inspection and resource preflight.

Everything the provisioning steps need to know about the machine is
gathered into a :class:`HostContext` that is passed explicitly, instead of
reading the current directory or environment from inside each step.
"""

from __future__ import annotations

import getpass
import os
import shutil
from pathlib import Path

from pydantic import BaseModel, Field

from ..config import Config
from ..utils import command_exists

_BYTES_PER_GB = 1024 ** 3


class EnvironmentCheckError(Exception):
    """Raised when the host cannot support the toolchain."""


class InsufficientResources(EnvironmentCheckError):
    """Memory or free disk space is below the configured minimum."""

    def __init__(self, resource: str, measured_gb: int, required_gb: int) -> None:
        self.resource = resource
        self.measured_gb = measured_gb
        self.required_gb = required_gb
        super().__init__(
            f"Need at least {required_gb}GB {resource} (you have {measured_gb}GB)"
        )


class MissingRuntime(EnvironmentCheckError):
    """A runtime the installer depends on is absent."""

    def __init__(self, runtime: str, message: str) -> None:
        self.runtime = runtime
        super().__init__(message)


class Capabilities(BaseModel):
    """Measured host resources."""

    memory_gb: int = Field(..., ge=0)
    disk_free_gb: int = Field(..., ge=0)
    wsl_distro: str | None = None
    package_manager: str | None = None


class HostContext(BaseModel):
    """Paths and readings for the machine being provisioned."""

    home: Path
    user: str
    workspace_dir: Path
    openlane_dir: Path
    pdk_root: Path
    state_dir: Path
    is_root: bool = False
    capabilities: Capabilities | None = None

    @classmethod
    def from_config(cls, config: Config) -> "HostContext":
        return cls(
            home=Path.home(),
            user=_current_user(),
            workspace_dir=config.workspace_dir,
            openlane_dir=config.openlane_dir,
            pdk_root=config.pdk_root,
            state_dir=config.state_path,
            is_root=hasattr(os, "geteuid") and os.geteuid() == 0,
        )


# ---------------------------------------------------------------------------
# Resource readings
# ---------------------------------------------------------------------------


def read_total_memory_gb(meminfo: Path = Path("/proc/meminfo")) -> int:
    """Total RAM in whole GB, truncated."""
    try:
        with meminfo.open() as fh:
            for line in fh:
                if line.startswith("MemTotal:"):
                    return int(line.split()[1]) // (1024 * 1024)
    except (FileNotFoundError, ValueError, IndexError):
        pass
    try:
        return (os.sysconf("SC_PAGE_SIZE") * os.sysconf("SC_PHYS_PAGES")) // _BYTES_PER_GB
    except (ValueError, OSError, AttributeError):
        return 0


def read_disk_free_gb(path: Path) -> int:
    """Free space in whole GB on the filesystem that will hold *path*.

    *path* need not exist yet; its nearest existing ancestor is measured.
    """
    probe = Path(path).expanduser().absolute()
    while not probe.exists() and probe != probe.parent:
        probe = probe.parent
    try:
        return shutil.disk_usage(probe).free // _BYTES_PER_GB
    except OSError:
        return 0


def detect_package_manager() -> str | None:
    return "apt-get" if command_exists("apt-get") else None


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return os.environ.get("USER", "")


# ---------------------------------------------------------------------------
# Preflight
# ---------------------------------------------------------------------------


def preflight(config: Config) -> Capabilities:
    """Measure the host and fail closed if it is below the thresholds.

    Raises:
        MissingRuntime: WSL is required but absent, or there is no apt-get.
        InsufficientResources: Memory or disk is below the configured minimum.
    """
    wsl_distro = os.environ.get("WSL_DISTRO_NAME") or None
    if config.require_wsl and not wsl_distro:
        raise MissingRuntime("wsl", "This installer requires WSL2 (WSL_DISTRO_NAME is not set)")

    package_manager = detect_package_manager()
    if package_manager is None:
        raise MissingRuntime("apt-get", "apt-get not found; a Debian/Ubuntu host is required")

    capabilities = Capabilities(
        memory_gb=read_total_memory_gb(),
        disk_free_gb=read_disk_free_gb(config.workspace_dir),
        wsl_distro=wsl_distro,
        package_manager=package_manager,
    )

    thresholds = config.resources
    if capabilities.memory_gb < thresholds.min_memory_gb:
        raise InsufficientResources("RAM", capabilities.memory_gb, thresholds.min_memory_gb)
    if capabilities.disk_free_gb < thresholds.min_disk_gb:
        raise InsufficientResources(
            "disk space", capabilities.disk_free_gb, thresholds.min_disk_gb
        )
    return capabilities
