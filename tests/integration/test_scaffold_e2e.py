"""Integration tests for project scaffolding.

These tests run the real request validation, template rendering and
materialization against a temporary directory and inspect the generated
project.  The simulation test additionally needs Icarus Verilog on PATH
and is skipped otherwise.
"""

from __future__ import annotations

import json
import re
import shutil
from pathlib import Path

import pytest

from asic_bootstrap.config import Config, ScaffoldSettings
from asic_bootstrap.scaffolder import ProjectGenerator, validate_request
from asic_bootstrap.scaffolder.example import EXAMPLE_STIMULUS, CounterReference, run_stimulus
from asic_bootstrap.utils import run_command

pytestmark = pytest.mark.integration

CHECK_RE = re.compile(r'check_result\("([^"]+)", (\w+), 8\'d(\d+),')


@pytest.fixture
def blinker_project(config: Config, output_dir: Path) -> Path:
    request = validate_request(
        "blinker", clock_frequency="50", output_dir=output_dir, settings=config.scaffold
    )
    ProjectGenerator(request, config=config).generate()
    return request.project_root


class TestBlinkerProject:

    def test_directory_tree(self, blinker_project: Path):
        for directory in (
            "sources/rtl", "sources/tb", "sources/include", "sources/constraints",
            "sim/waves", "sim/logs", "designs/blinker", "config",
            "runs/sky130", "runs/gf180", "layout", "reports", "verification",
            "docs", "scripts", "vendor", "ip",
        ):
            assert (blinker_project / directory).is_dir(), directory

    def test_clock_period_everywhere(self, blinker_project: Path):
        sdc = (blinker_project / "sources/constraints/blinker.sdc").read_text(encoding="utf-8")
        assert "create_clock -name clk -period 20.00 [get_ports clk]" in sdc

        testbench = (blinker_project / "sources/tb/blinker_tb.v").read_text(encoding="utf-8")
        assert "parameter real CLK_PERIOD = 20.00;" in testbench

        makefile = (blinker_project / "Makefile").read_text(encoding="utf-8")
        assert "20.00" in makefile

    def test_target_configs_share_sources(self, blinker_project: Path):
        sky = json.loads((blinker_project / "config/sky130.json").read_text(encoding="utf-8"))
        gf = json.loads((blinker_project / "config/gf180.json").read_text(encoding="utf-8"))

        assert sky["VERILOG_FILES"] == gf["VERILOG_FILES"]
        for path in sky["VERILOG_FILES"]:
            assert (blinker_project / path).is_file()
        assert sky["CLOCK_PERIOD"] == gf["CLOCK_PERIOD"] == 20.0
        assert (sky["PDK"], gf["PDK"]) == ("sky130A", "gf180mcuA")

    def test_file_list_points_at_real_files(self, blinker_project: Path):
        lines = (blinker_project / "sources/rtl_list.f").read_text(encoding="utf-8").splitlines()
        listed = [line for line in lines if line.endswith(".v")]
        assert listed == [
            "sources/rtl/counter.v", "sources/rtl/blinker.v", "sources/tb/blinker_tb.v",
        ]
        assert all((blinker_project / path).is_file() for path in listed)

    def test_testbench_checks_match_reference_model(self, blinker_project: Path):
        testbench = (blinker_project / "sources/tb/blinker_tb.v").read_text(encoding="utf-8")
        checks = CHECK_RE.findall(testbench)
        expectations = [phase.expect for phase in EXAMPLE_STIMULUS if phase.expect]

        assert [(label, signal, int(value)) for label, signal, value in checks] == [
            (e.label, e.signal, e.value) for e in expectations
        ]
        assert run_stimulus(model=CounterReference()).failed == 0

    def test_gitignore_keeps_waves_placeholder(self, blinker_project: Path):
        gitignore = (blinker_project / ".gitignore").read_text(encoding="utf-8")
        assert "!sim/waves/.gitkeep" in gitignore
        assert (blinker_project / "sim/waves/.gitkeep").is_file()


class TestProjectWithoutExample:

    def test_empty_sources(self, config: Config, output_dir: Path):
        settings = ScaffoldSettings(output_dir=output_dir, include_example=False)
        request = validate_request(
            "my-chip", include_example=False, output_dir=output_dir, settings=settings
        )
        ProjectGenerator(request, config=config).generate()
        root = request.project_root

        assert list((root / "sources/rtl").iterdir()) == []
        assert list((root / "sources/tb").iterdir()) == []
        sky = json.loads((root / "config/sky130.json").read_text(encoding="utf-8"))
        assert sky["DESIGN_NAME"] == "my_chip"
        assert sky["VERILOG_FILES"] == []


@pytest.mark.skipif(shutil.which("iverilog") is None, reason="Icarus Verilog not installed")
class TestSimulation:

    def test_example_testbench_passes(self, blinker_project: Path):
        returncode, _, stderr = run_command(
            ["iverilog", "-g2012", "-f", "sources/rtl_list.f", "-s", "blinker_tb",
             "-o", "sim/blinker.vvp"],
            cwd=blinker_project,
            timeout=120,
        )
        assert returncode == 0, stderr

        returncode, stdout, _ = run_command(
            ["vvp", "sim/blinker.vvp"], cwd=blinker_project, timeout=120
        )
        assert returncode == 0
        assert "ALL TESTS PASSED" in stdout
        assert "TESTBENCH FAILED" not in stdout
