"""Catalogue of the supported open-source PDKs.

Shared by the provisioner (install steps, post-install report) and the
scaffolder (per-target OpenLane configuration, SDC driving cell).
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class PdkInfo(BaseModel):
    """Static facts about one process design kit."""

    target: str = Field(..., description="Short target id used in file and make target names")
    variant: str = Field(..., description="PDK variant name passed to OpenLane")
    display_name: str
    std_cell_library: str
    driving_cell: str = Field(..., description="Buffer cell assumed to drive design inputs")
    default: bool = False
    notes: list[str] = Field(default_factory=list)


PDK_CATALOGUE: dict[str, PdkInfo] = {
    "sky130": PdkInfo(
        target="sky130",
        variant="sky130A",
        display_name="SkyWater 130nm",
        std_cell_library="sky130_fd_sc_hd",
        driving_cell="sky130_fd_sc_hd__buf_1",
        default=True,
        notes=[
            "Voltage: 1.8V internal, 5.0V I/O",
            "Manufacturing: Tiny Tapeout, Google MPW shuttles",
            "Status: production-ready, 600+ successful tapeouts",
            "Best for: digital designs, learning, prototypes",
        ],
    ),
    "gf180": PdkInfo(
        target="gf180",
        variant="gf180mcuA",
        display_name="GlobalFoundries 180nm MCU",
        std_cell_library="gf180mcu_fd_sc_mcu7t5v0",
        driving_cell="gf180mcu_fd_sc_mcu7t5v0__buf_1",
        notes=[
            "Voltage: up to 10V capability",
            "Manufacturing: Google-sponsored shuttles",
            "Status: production-ready for high-voltage designs",
            "Best for: automotive, industrial, high-voltage applications",
        ],
    ),
}


def get_pdk(target: str) -> PdkInfo:
    """Return the catalogue entry for *target* (``"sky130"``, ``"gf180"``)."""
    try:
        return PDK_CATALOGUE[target]
    except KeyError:
        raise ValueError(
            f"Unknown PDK target: {target!r} (expected one of {', '.join(PDK_CATALOGUE)})"
        ) from None


def default_pdk() -> PdkInfo:
    """The PDK new projects use for their primary constraints."""
    return next(p for p in PDK_CATALOGUE.values() if p.default)
