"""asic-bootstrap configuration.

Centralised, typed configuration for both the provisioning and scaffolding
engines. All settings use Pydantic v2 models so they can be validated at
construction time and overridden from environment variables without
boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field


DEFAULT_OPENLANE_REPO = "https://github.com/The-OpenROAD-Project/OpenLane.git"
DEFAULT_DOCKER_INSTALL_URL = "https://get.docker.com"


class ResourceThresholds(BaseModel):
    """Minimum host resources required before anything is installed.

    OpenLane container images and PDK builds are large; below these values
    the toolchain cannot be expected to install or run.
    """

    min_memory_gb: int = Field(default=8, ge=1, description="Minimum total RAM in GB")
    min_disk_gb: int = Field(default=50, ge=1, description="Minimum free disk space in GB")


class ScaffoldSettings(BaseModel):
    """Defaults and policies applied when scaffolding a new project."""

    output_dir: Path = Field(default=Path("."), description="Parent directory for new projects")
    default_frequency_mhz: float = Field(default=100.0, gt=0)
    on_invalid_frequency: Literal["fallback", "reject"] = Field(
        default="fallback",
        description="Substitute the default frequency or reject the request",
    )
    include_example: bool = Field(default=True)


class Config(BaseModel):
    """Global asic-bootstrap configuration.

    Instances are typically created once by a CLI entry point (directly or
    via :meth:`from_env`) and then passed explicitly into every operation.
    """

    workspace_dir: Path = Field(default_factory=lambda: Path.home() / "asic_workspace")
    openlane_repo_url: str = Field(default=DEFAULT_OPENLANE_REPO)
    docker_install_url: str = Field(default=DEFAULT_DOCKER_INSTALL_URL)
    require_wsl: bool = Field(default=False, description="Refuse to run outside WSL2")
    command_timeout: int = Field(
        default=3600, ge=60, description="Per-command timeout for installs in seconds"
    )
    state_dir_name: str = Field(default=".asic-bootstrap")
    resources: ResourceThresholds = Field(default_factory=ResourceThresholds)
    scaffold: ScaffoldSettings = Field(default_factory=ScaffoldSettings)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def openlane_dir(self) -> Path:
        """Checkout location of the OpenLane repository."""
        return self.workspace_dir / "OpenLane"

    @property
    def pdk_root(self) -> Path:
        """Directory the PDK builds are installed into."""
        return self.workspace_dir / "pdks"

    @property
    def state_path(self) -> Path:
        """Directory holding run logs and step marker files."""
        return self.workspace_dir / self.state_dir_name

    @property
    def provision_log_path(self) -> Path:
        """Path to the persisted provisioning run log."""
        return self.state_path / "provision-log.json"

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            ASIC_WORKSPACE_DIR, ASIC_REQUIRE_WSL, ASIC_COMMAND_TIMEOUT,
            ASIC_MIN_MEMORY_GB, ASIC_MIN_DISK_GB,
            ASIC_OUTPUT_DIR, ASIC_DEFAULT_FREQUENCY_MHZ,
            ASIC_ON_INVALID_FREQUENCY.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("ASIC_WORKSPACE_DIR"):
            kwargs["workspace_dir"] = Path(os.environ["ASIC_WORKSPACE_DIR"]).expanduser()
        if os.environ.get("ASIC_REQUIRE_WSL"):
            kwargs["require_wsl"] = os.environ["ASIC_REQUIRE_WSL"].strip().lower() in (
                "1", "true", "yes", "on",
            )
        if os.environ.get("ASIC_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["ASIC_COMMAND_TIMEOUT"])

        resource_kwargs: dict[str, Any] = {}
        if os.environ.get("ASIC_MIN_MEMORY_GB"):
            resource_kwargs["min_memory_gb"] = int(os.environ["ASIC_MIN_MEMORY_GB"])
        if os.environ.get("ASIC_MIN_DISK_GB"):
            resource_kwargs["min_disk_gb"] = int(os.environ["ASIC_MIN_DISK_GB"])

        scaffold_kwargs: dict[str, Any] = {}
        if os.environ.get("ASIC_OUTPUT_DIR"):
            scaffold_kwargs["output_dir"] = Path(os.environ["ASIC_OUTPUT_DIR"])
        if os.environ.get("ASIC_DEFAULT_FREQUENCY_MHZ"):
            scaffold_kwargs["default_frequency_mhz"] = float(
                os.environ["ASIC_DEFAULT_FREQUENCY_MHZ"]
            )
        if os.environ.get("ASIC_ON_INVALID_FREQUENCY"):
            scaffold_kwargs["on_invalid_frequency"] = os.environ["ASIC_ON_INVALID_FREQUENCY"]

        return cls(
            **kwargs,
            resources=ResourceThresholds(**resource_kwargs),
            scaffold=ScaffoldSettings(**scaffold_kwargs),
        )

    def ensure_directories(self) -> None:
        """Create the workspace and state directories."""
        for directory in (self.workspace_dir, self.state_path):
            directory.mkdir(parents=True, exist_ok=True)
