"""Unit tests for the PDK catalogue (asic_bootstrap.pdks)."""

from __future__ import annotations

import pytest

from asic_bootstrap.pdks import PDK_CATALOGUE, default_pdk, get_pdk

pytestmark = pytest.mark.unit


class TestPdkCatalogue:

    def test_targets(self):
        assert list(PDK_CATALOGUE) == ["sky130", "gf180"]

    def test_exactly_one_default(self):
        assert [p.target for p in PDK_CATALOGUE.values() if p.default] == ["sky130"]
        assert default_pdk().variant == "sky130A"

    def test_driving_cell_belongs_to_library(self):
        for pdk in PDK_CATALOGUE.values():
            assert pdk.driving_cell.startswith(pdk.std_cell_library + "__")

    def test_get_pdk(self):
        assert get_pdk("gf180").variant == "gf180mcuA"

    def test_unknown_target(self):
        with pytest.raises(ValueError, match="Unknown PDK target"):
            get_pdk("tsmc28")
