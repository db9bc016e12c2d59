"""Install step declarations and the provisioning run log.

An :class:`InstallStep` separates the idempotency gate (``check``) from the
post-condition (``verify``) so that a tool which is present but broken is
distinguishable from one that was never installed.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, computed_field


class StepFailure(Exception):
    """Raised when an install action or its post-verification fails."""

    def __init__(self, step_id: str, message: str, hint: str = "") -> None:
        self.step_id = step_id
        self.hint = hint
        super().__init__(f"Step '{step_id}' failed: {message}")


@dataclass(frozen=True)
class InstallStep:
    """One unit of provisioning work.

    ``check`` and ``verify`` must be free of side effects.  ``action`` may
    raise any exception to signal failure.  A step with ``required=False``
    is optional: its failure is reported as a warning.  When ``prompt`` is
    set, interactive runs ask for consent before the action runs; only
    optional steps may carry one.
    """

    id: str
    description: str
    check: Callable[[], bool]
    action: Callable[[], None]
    verify: Callable[[], bool]
    depends_on: tuple[str, ...] = ()
    required: bool = True
    prompt: str | None = None
    hint: str = ""

    @property
    def optional(self) -> bool:
        return not self.required


class StepOutcome(str, Enum):
    """What happened to a step during one run."""

    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTED = "aborted"
    DECLINED = "declined"

    @property
    def satisfied(self) -> bool:
        """True when dependents of this step may proceed."""
        return self in (StepOutcome.SKIPPED, StepOutcome.SUCCEEDED)


class StepRecord(BaseModel):
    """Outcome of a single step within a run."""

    step_id: str
    outcome: StepOutcome
    required: bool = True
    detail: str = ""
    action_ran: bool = False
    duration_seconds: float = Field(default=0.0, ge=0.0)


class ProvisioningRun(BaseModel):
    """Ordered log of ``(step id, outcome)`` pairs for one invocation."""

    started_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    finished_at: str | None = None
    interactive: bool = False
    records: list[StepRecord] = Field(default_factory=list)

    def record(
        self,
        step: InstallStep,
        outcome: StepOutcome,
        detail: str = "",
        action_ran: bool = False,
        duration_seconds: float = 0.0,
    ) -> StepRecord:
        entry = StepRecord(
            step_id=step.id,
            outcome=outcome,
            required=step.required,
            detail=detail,
            action_ran=action_ran,
            duration_seconds=duration_seconds,
        )
        self.records.append(entry)
        return entry

    def finish(self) -> None:
        self.finished_at = datetime.now(timezone.utc).isoformat()

    @computed_field  # type: ignore[misc]
    @property
    def success(self) -> bool:
        """True when no required step failed or was aborted."""
        return self.fatal_step is None

    @property
    def fatal_step(self) -> StepRecord | None:
        """The first required step that failed or was aborted, if any."""
        for entry in self.records:
            if entry.required and entry.outcome in (StepOutcome.FAILED, StepOutcome.ABORTED):
                return entry
        return None

    @property
    def outcomes(self) -> dict[str, StepOutcome]:
        return {entry.step_id: entry.outcome for entry in self.records}

    @property
    def actions_run(self) -> list[str]:
        """Ids of the steps whose action was actually invoked."""
        return [entry.step_id for entry in self.records if entry.action_ran]

    def outcome_pairs(self) -> list[tuple[str, StepOutcome]]:
        return [(entry.step_id, entry.outcome) for entry in self.records]

    def raise_for_failure(self) -> None:
        """Raise :class:`StepFailure` for the fatal step, if there is one."""
        fatal = self.fatal_step
        if fatal is not None:
            raise StepFailure(fatal.step_id, fatal.detail or fatal.outcome.value)

    def save(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "ProvisioningRun":
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))
