"""Shared pytest fixtures for the asic-bootstrap test suite.

Provides reusable fixtures for:
- Configurations rooted in temporary directories
- An in-memory fake host for provisioning steps
- Mock ``subprocess.run`` results
- Validated scaffold requests
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from asic_bootstrap.config import Config, ResourceThresholds, ScaffoldSettings
from asic_bootstrap.provisioner.steps import InstallStep, StepFailure
from asic_bootstrap.scaffolder.request import ScaffoldRequest


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def workspace_dir(tmp_path: Path) -> Path:
    """Workspace directory for provisioning (not created)."""
    return tmp_path / "asic_workspace"


@pytest.fixture
def config(workspace_dir: Path, tmp_path: Path) -> Config:
    """A Config whose workspace and scaffold output live under tmp_path."""
    return Config(
        workspace_dir=workspace_dir,
        resources=ResourceThresholds(min_memory_gb=8, min_disk_gb=50),
        scaffold=ScaffoldSettings(output_dir=tmp_path / "projects"),
    )


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Existing parent directory for generated projects."""
    path = tmp_path / "projects"
    path.mkdir()
    return path


# ---------------------------------------------------------------------------
# Fake host for provisioning steps
# ---------------------------------------------------------------------------

class FakeHost:
    """In-memory stand-in for the machine being provisioned.

    ``installed`` holds the names of things present on the host.  Steps
    built with :meth:`step` check and verify membership and their action
    adds the name, unless the name is listed in ``failing`` (the action
    raises) or ``broken`` (the action runs but verification fails).
    """

    def __init__(self) -> None:
        self.installed: set[str] = set()
        self.failing: set[str] = set()
        self.broken: set[str] = set()
        self.actions: list[str] = []

    def step(self, step_id: str, **kwargs: Any) -> InstallStep:
        def action() -> None:
            self.actions.append(step_id)
            if step_id in self.failing:
                raise StepFailure(step_id, "simulated install failure")
            if step_id not in self.broken:
                self.installed.add(step_id)

        def present() -> bool:
            return step_id in self.installed

        kwargs.setdefault("description", f"Install {step_id}")
        return InstallStep(id=step_id, check=present, action=action, verify=present, **kwargs)


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost()


# ---------------------------------------------------------------------------
# Mock subprocess
# ---------------------------------------------------------------------------

@pytest.fixture
def completed_process() -> Callable[..., MagicMock]:
    """Factory for ``subprocess.run`` return values.

    Usage:
        def test_command(completed_process):
            with patch("subprocess.run", return_value=completed_process(stdout="ok")):
                ...
    """
    def factory(stdout: str = "", stderr: str = "", returncode: int = 0) -> MagicMock:
        result = MagicMock(spec=subprocess.CompletedProcess)
        result.stdout = stdout
        result.stderr = stderr
        result.returncode = returncode
        return result

    return factory


# ---------------------------------------------------------------------------
# Scaffold requests
# ---------------------------------------------------------------------------

@pytest.fixture
def blinker_request(output_dir: Path) -> ScaffoldRequest:
    """The 'blinker' project at 50 MHz with the example design."""
    return ScaffoldRequest(
        project_name="blinker",
        top_module="blinker",
        clock_frequency_mhz=50,
        include_example=True,
        output_dir=output_dir,
    )


@pytest.fixture
def bare_request(output_dir: Path) -> ScaffoldRequest:
    """A 100 MHz project without the example design."""
    return ScaffoldRequest(
        project_name="my-chip",
        top_module="my_chip",
        clock_frequency_mhz=100,
        include_example=False,
        output_dir=output_dir,
    )
