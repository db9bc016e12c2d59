"""Example design: an 8-bit counter behind a top-level wrapper.

The stimulus applied by the generated testbench is declared here as data
(:data:`EXAMPLE_STIMULUS`).  The testbench template is rendered from it, and
:func:`run_stimulus` replays the same sequence against
:class:`CounterReference`, a cycle-accurate Python model of the RTL, so the
expected results can be checked without a simulator.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

COUNTER_WIDTH = 8
_COUNTER_MASK = (1 << COUNTER_WIDTH) - 1

Signal = Literal["count", "overflow", "heartbeat"]


@dataclass(frozen=True)
class Expectation:
    """A value one output must hold when a phase ends."""

    label: str
    signal: Signal
    value: int
    description: str


@dataclass(frozen=True)
class StimulusPhase:
    """Hold the inputs at fixed levels for ``cycles`` rising clock edges."""

    name: str
    rst_n: int
    enable: int
    clear: int
    cycles: int
    expect: Expectation | None = None


EXAMPLE_STIMULUS: tuple[StimulusPhase, ...] = (
    StimulusPhase("Reset", rst_n=0, enable=0, clear=0, cycles=5),
    StimulusPhase(
        "Reset release", rst_n=1, enable=0, clear=0, cycles=1,
        expect=Expectation("Reset", "count", 0, "Count should be 0 after reset"),
    ),
    StimulusPhase(
        "Basic counting", rst_n=1, enable=1, clear=0, cycles=10,
        expect=Expectation("Count to 10", "count", 10, "Should count to 10"),
    ),
    StimulusPhase(
        "Synchronous clear", rst_n=1, enable=1, clear=1, cycles=1,
        expect=Expectation("Synchronous Clear", "count", 0, "Count should be 0 after clear"),
    ),
    StimulusPhase(
        "Overflow", rst_n=1, enable=1, clear=0, cycles=260,
        expect=Expectation("Overflow", "overflow", 1, "Overflow should be asserted"),
    ),
    StimulusPhase(
        "Heartbeat", rst_n=1, enable=1, clear=0, cycles=130,
        expect=Expectation(
            "Heartbeat", "heartbeat", 1, "Heartbeat should be high when count[7]=1"
        ),
    ),
    StimulusPhase(
        "Disable", rst_n=1, enable=0, clear=0, cycles=5,
        expect=Expectation("Disable", "count", 134, "Count should hold while disabled"),
    ),
)


def total_cycles(stimulus: Sequence[StimulusPhase] = EXAMPLE_STIMULUS) -> int:
    return sum(phase.cycles for phase in stimulus)


class CounterReference:
    """Cycle-accurate model of the generated ``counter`` plus wrapper.

    ``overflow`` is sticky: it is set on the edge where an enabled counter
    wraps from its maximum value and stays set until reset or clear.
    """

    def __init__(self) -> None:
        self.count = 0
        self.overflow = 0

    @property
    def heartbeat(self) -> int:
        return (self.count >> (COUNTER_WIDTH - 1)) & 1

    def clock(self, rst_n: int, enable: int, clear: int) -> None:
        """Apply one rising edge with the given input levels."""
        if not rst_n or clear:
            self.count = 0
            self.overflow = 0
        elif enable:
            if self.count == _COUNTER_MASK:
                self.overflow = 1
            self.count = (self.count + 1) & _COUNTER_MASK

    def sample(self, signal: Signal) -> int:
        return getattr(self, signal)


@dataclass
class TestbenchTally:
    """Pass/fail counts, as the generated testbench reports them."""

    __test__ = False

    passed: int = 0
    failed: int = 0
    failures: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.passed + self.failed

    @property
    def success(self) -> bool:
        return self.failed == 0

    def record(self, expect: Expectation, actual: int) -> None:
        if actual == expect.value:
            self.passed += 1
            return
        self.failed += 1
        self.failures.append(
            f"{expect.label} - Expected: {expect.value}, Got: {actual} ({expect.description})"
        )


def run_stimulus(
    stimulus: Sequence[StimulusPhase] = EXAMPLE_STIMULUS,
    model: CounterReference | None = None,
) -> TestbenchTally:
    """Replay *stimulus* on *model* and check every expectation."""
    model = model or CounterReference()
    tally = TestbenchTally()
    for phase in stimulus:
        for _ in range(phase.cycles):
            model.clock(phase.rst_n, phase.enable, phase.clear)
        if phase.expect is not None:
            tally.record(phase.expect, model.sample(phase.expect.signal))
    return tally
