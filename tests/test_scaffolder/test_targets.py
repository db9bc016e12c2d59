"""Unit tests for per-target OpenLane configuration (asic_bootstrap.scaffolder.targets)."""

from __future__ import annotations

import json

import pytest

from asic_bootstrap.scaffolder.request import ScaffoldRequest
from asic_bootstrap.scaffolder.targets import (
    CONFIG_KEY_ORDER,
    TARGET_IDS,
    build_target_config,
    build_target_configs,
    dump_target_config,
)

pytestmark = pytest.mark.unit

RTL = ["sources/rtl/counter.v", "sources/rtl/blinker.v"]


class TestBuildTargetConfig:

    def test_key_order(self, blinker_request: ScaffoldRequest):
        config = build_target_config("sky130", blinker_request, RTL)
        assert tuple(config) == CONFIG_KEY_ORDER

    def test_design_values(self, blinker_request: ScaffoldRequest):
        config = build_target_config("sky130", blinker_request, RTL)
        assert config["DESIGN_NAME"] == "blinker"
        assert config["CLOCK_PORT"] == "clk"
        assert config["CLOCK_PERIOD"] == 20.0
        assert config["VERILOG_FILES"] == RTL

    @pytest.mark.parametrize(
        "target, pdk, library, die_area, util, density",
        [
            ("sky130", "sky130A", "sky130_fd_sc_hd", "0 0 200 200", 40, 0.4),
            ("gf180", "gf180mcuA", "gf180mcu_fd_sc_mcu7t5v0", "0 0 300 300", 35, 0.35),
        ],
    )
    def test_per_target_overrides(
        self, blinker_request, target, pdk, library, die_area, util, density
    ):
        config = build_target_config(target, blinker_request, RTL)
        assert config["PDK"] == pdk
        assert config["STD_CELL_LIBRARY"] == library
        assert config["DIE_AREA"] == die_area
        assert config["FP_CORE_UTIL"] == util
        assert config["PL_TARGET_DENSITY"] == density

    def test_unknown_target(self, blinker_request: ScaffoldRequest):
        with pytest.raises(ValueError, match="ihp130"):
            build_target_config("ihp130", blinker_request, RTL)


class TestBuildTargetConfigs:

    def test_one_config_per_target(self, blinker_request: ScaffoldRequest):
        configs = build_target_configs(blinker_request, RTL)
        assert tuple(configs) == TARGET_IDS

    def test_targets_share_design_inputs(self, blinker_request: ScaffoldRequest):
        sky, gf = build_target_configs(blinker_request, RTL).values()
        for key in ("DESIGN_NAME", "VERILOG_FILES", "CLOCK_PORT", "CLOCK_PERIOD"):
            assert sky[key] == gf[key]

    def test_shared_defaults_are_identical(self, blinker_request: ScaffoldRequest):
        sky, gf = build_target_configs(blinker_request, RTL).values()
        differing = {key for key in CONFIG_KEY_ORDER if sky[key] != gf[key]}
        assert differing == {
            "PDK", "STD_CELL_LIBRARY", "DIE_AREA", "FP_CORE_UTIL", "PL_TARGET_DENSITY",
        }

    def test_empty_file_list(self, bare_request: ScaffoldRequest):
        configs = build_target_configs(bare_request)
        assert all(config["VERILOG_FILES"] == [] for config in configs.values())
        assert configs["sky130"]["CLOCK_PERIOD"] == 10.0


class TestDumpTargetConfig:

    def test_preserves_order_and_ends_with_newline(self, blinker_request: ScaffoldRequest):
        text = dump_target_config(build_target_config("gf180", blinker_request, RTL))
        assert text.endswith("}\n")
        assert list(json.loads(text)) == list(CONFIG_KEY_ORDER)
        assert '    "DESIGN_NAME": "blinker"' in text
