"""Per-target OpenLane configuration.

Every target shares :data:`BASE_TARGET_CONFIG`; :data:`TARGET_OVERRIDES`
carries only what differs per PDK.  Keys are emitted in
:data:`CONFIG_KEY_ORDER` so the generated JSON reads the same for every
target.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from ..pdks import get_pdk
from .request import ScaffoldRequest

TARGET_IDS: tuple[str, ...] = ("sky130", "gf180")

CONFIG_KEY_ORDER: tuple[str, ...] = (
    "DESIGN_NAME",
    "VERILOG_FILES",
    "CLOCK_PORT",
    "CLOCK_PERIOD",
    "PDK",
    "STD_CELL_LIBRARY",
    "FP_SIZING",
    "DIE_AREA",
    "FP_CORE_UTIL",
    "FP_ASPECT_RATIO",
    "FP_PDN_AUTO_ADJUST",
    "PL_TARGET_DENSITY",
    "PL_RESIZER_DESIGN_OPTIMIZATIONS",
    "PL_RESIZER_TIMING_OPTIMIZATIONS",
    "GLB_RESIZER_TIMING_OPTIMIZATIONS",
    "GLB_RESIZER_MAX_WIRE_LENGTH",
    "GLB_RESIZER_MAX_SLEW_MARGIN",
    "GLB_RESIZER_MAX_CAP_MARGIN",
    "SYNTH_STRATEGY",
    "SYNTH_BUFFERING",
    "SYNTH_SIZING",
    "RUN_HEURISTIC_DIODE_INSERTION",
    "HEURISTIC_ANTENNA_THRESHOLD",
    "RUN_CVC",
    "RUN_SIMPLE_CTS",
    "QUIT_ON_TIMING_VIOLATIONS",
    "QUIT_ON_MAGIC_DRC",
    "QUIT_ON_LVS_ERROR",
    "QUIT_ON_SLEW_VIOLATIONS",
)

BASE_TARGET_CONFIG: dict[str, Any] = {
    "CLOCK_PORT": "clk",
    "FP_SIZING": "absolute",
    "FP_ASPECT_RATIO": 1,
    "FP_PDN_AUTO_ADJUST": 0,
    "PL_RESIZER_DESIGN_OPTIMIZATIONS": 1,
    "PL_RESIZER_TIMING_OPTIMIZATIONS": 1,
    "GLB_RESIZER_TIMING_OPTIMIZATIONS": 1,
    "GLB_RESIZER_MAX_WIRE_LENGTH": 0,
    "GLB_RESIZER_MAX_SLEW_MARGIN": 10,
    "GLB_RESIZER_MAX_CAP_MARGIN": 10,
    "SYNTH_STRATEGY": "AREA 0",
    "SYNTH_BUFFERING": 1,
    "SYNTH_SIZING": 1,
    "RUN_HEURISTIC_DIODE_INSERTION": 1,
    "HEURISTIC_ANTENNA_THRESHOLD": 90,
    "RUN_CVC": 1,
    "RUN_SIMPLE_CTS": 0,
    "QUIT_ON_TIMING_VIOLATIONS": 0,
    "QUIT_ON_MAGIC_DRC": 1,
    "QUIT_ON_LVS_ERROR": 1,
    "QUIT_ON_SLEW_VIOLATIONS": 0,
}

# PDK and STD_CELL_LIBRARY come from the PDK catalogue.
TARGET_OVERRIDES: dict[str, dict[str, Any]] = {
    "sky130": {
        "DIE_AREA": "0 0 200 200",
        "FP_CORE_UTIL": 40,
        "PL_TARGET_DENSITY": 0.4,
    },
    "gf180": {
        "DIE_AREA": "0 0 300 300",
        "FP_CORE_UTIL": 35,
        "PL_TARGET_DENSITY": 0.35,
    },
}


def build_target_config(
    target: str,
    request: ScaffoldRequest,
    verilog_files: Sequence[str] = (),
) -> dict[str, Any]:
    """Merge the shared defaults, the *target* overrides and the design values.

    Raises:
        ValueError: *target* has no override entry.
    """
    if target not in TARGET_OVERRIDES:
        raise ValueError(
            f"No OpenLane configuration for target {target!r} "
            f"(known: {', '.join(TARGET_OVERRIDES)})"
        )
    pdk = get_pdk(target)
    values: dict[str, Any] = {
        **BASE_TARGET_CONFIG,
        **TARGET_OVERRIDES[target],
        "DESIGN_NAME": request.top_module,
        "VERILOG_FILES": list(verilog_files),
        "CLOCK_PERIOD": request.clock_period_ns,
        "PDK": pdk.variant,
        "STD_CELL_LIBRARY": pdk.std_cell_library,
    }
    return {key: values[key] for key in CONFIG_KEY_ORDER}


def build_target_configs(
    request: ScaffoldRequest,
    verilog_files: Sequence[str] = (),
    targets: Sequence[str] = TARGET_IDS,
) -> dict[str, dict[str, Any]]:
    """One configuration per target, all listing the same *verilog_files*."""
    return {target: build_target_config(target, request, verilog_files) for target in targets}


def dump_target_config(config: dict[str, Any]) -> str:
    return json.dumps(config, indent=4) + "\n"
