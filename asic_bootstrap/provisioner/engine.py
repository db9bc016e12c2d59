"""Provisioning engine.

Runs an ordered list of :class:`InstallStep` objects.  Each step is gated
by its ``check`` predicate so re-running the engine is always safe: steps
that are already satisfied are skipped and the run resumes at the first
step that still needs work.
"""

from __future__ import annotations

import time
import traceback
from collections.abc import Sequence

from rich.table import Table

from ..prompts import NonInteractivePrompter, Prompter
from ..utils import (
    console,
    format_duration,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from .steps import InstallStep, ProvisioningRun, StepFailure, StepOutcome


class StepGraphError(ValueError):
    """Raised when a step list is malformed (duplicate ids, bad dependencies)."""


_OUTCOME_STYLES: dict[StepOutcome, str] = {
    StepOutcome.SKIPPED: "dim",
    StepOutcome.SUCCEEDED: "green",
    StepOutcome.FAILED: "red",
    StepOutcome.ABORTED: "red",
    StepOutcome.DECLINED: "yellow",
}


def validate_steps(steps: Sequence[InstallStep]) -> None:
    """Reject duplicate ids, bad dependencies and prompts on required steps."""
    seen: set[str] = set()
    for step in steps:
        if step.id in seen:
            raise StepGraphError(f"Duplicate step id: {step.id!r}")
        if step.required and step.prompt:
            raise StepGraphError(
                f"Step {step.id!r} is required and cannot be declined; drop its prompt"
            )
        for dep in step.depends_on:
            if dep == step.id:
                raise StepGraphError(f"Step {step.id!r} depends on itself")
            if dep not in seen:
                raise StepGraphError(
                    f"Step {step.id!r} depends on {dep!r}, which is not declared before it"
                )
        seen.add(step.id)


class ProvisioningEngine:
    """Executes install steps in order with idempotency, consent and abort rules.

    Attributes:
        steps: The validated, ordered step list.
        prompter: Used for consent on steps that carry a ``prompt``.
    """

    def __init__(self, steps: Sequence[InstallStep], prompter: Prompter | None = None) -> None:
        validate_steps(steps)
        self.steps: tuple[InstallStep, ...] = tuple(steps)
        self.prompter = prompter or NonInteractivePrompter()
        self.last_run: ProvisioningRun | None = None

    # ------------------------------------------------------------------
    # RunSteps
    # ------------------------------------------------------------------

    def run_steps(self, interactive: bool = True) -> ProvisioningRun:
        """Run every step once and return the run log.

        A required step that fails (or cannot run because a dependency did
        not succeed) aborts the run: every later step is recorded as
        ``aborted`` without being evaluated.  Optional failures only warn.
        """
        run = ProvisioningRun(interactive=interactive)
        self.last_run = run
        fatal: str | None = None

        for index, step in enumerate(self.steps):
            if fatal is not None:
                run.record(step, StepOutcome.ABORTED, f"run aborted after '{fatal}' failed")
                continue

            outcomes = run.outcomes
            unmet = [dep for dep in step.depends_on if not outcomes[dep].satisfied]
            if unmet:
                run.record(
                    step,
                    StepOutcome.ABORTED,
                    f"dependency not satisfied: {', '.join(unmet)}",
                )
                print_warning(f"  Skipping {step.id}: depends on {', '.join(unmet)}")
                if step.required:
                    fatal = step.id
                continue

            if step.check():
                run.record(step, StepOutcome.SKIPPED, "already satisfied")
                console.print(f"  [dim]-[/dim] {step.description} [dim](already satisfied)[/dim]")
                continue

            if interactive and step.prompt:
                if not self.prompter.confirm(step.prompt, default=False):
                    run.record(step, StepOutcome.DECLINED, "declined by operator")
                    print_info(f"Skipping {step.description}")
                    continue

            try:
                self._execute(run, step)
            except KeyboardInterrupt:
                for remaining in self.steps[index + 1:]:
                    run.record(remaining, StepOutcome.ABORTED, "run interrupted")
                run.finish()
                raise

            if run.records[-1].outcome is StepOutcome.FAILED and step.required:
                fatal = step.id

        run.finish()
        return run

    def _execute(self, run: ProvisioningRun, step: InstallStep) -> None:
        """Run one step's action and post-verification, recording the outcome."""
        print_info(f"{step.description}...")
        start = time.monotonic()
        try:
            step.action()
            verified = step.verify()
        except KeyboardInterrupt:
            run.record(
                step,
                StepOutcome.FAILED,
                "interrupted",
                action_ran=True,
                duration_seconds=time.monotonic() - start,
            )
            raise
        except StepFailure as exc:
            self._record_failure(run, step, str(exc), exc.hint or step.hint, start)
            return
        except Exception as exc:
            console.print(f"[dim]{traceback.format_exc()}[/dim]")
            self._record_failure(run, step, f"{type(exc).__name__}: {exc}", step.hint, start)
            return

        elapsed = time.monotonic() - start
        if verified:
            run.record(
                step,
                StepOutcome.SUCCEEDED,
                action_ran=True,
                duration_seconds=elapsed,
            )
            print_success(f"  {step.description} done in {format_duration(elapsed)}")
        else:
            self._record_failure(run, step, "post-install verification failed", step.hint, start)

    @staticmethod
    def _record_failure(
        run: ProvisioningRun,
        step: InstallStep,
        detail: str,
        hint: str,
        start: float,
    ) -> None:
        run.record(
            step,
            StepOutcome.FAILED,
            detail,
            action_ran=True,
            duration_seconds=time.monotonic() - start,
        )
        report = print_error if step.required else print_warning
        report(f"  {step.description} failed: {detail}")
        if hint:
            report(f"  {hint}")

    # ------------------------------------------------------------------
    # VerifyAll
    # ------------------------------------------------------------------

    def verify_all(self) -> dict[str, bool]:
        """Re-run every step's ``verify`` regardless of ``check``."""
        results: dict[str, bool] = {}
        for step in self.steps:
            try:
                results[step.id] = bool(step.verify())
            except Exception:
                results[step.id] = False
        return results


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def print_run_table(run: ProvisioningRun) -> None:
    """Render the run log as a Rich table."""
    table = Table(title="Provisioning run", show_header=True, header_style="bold cyan")
    table.add_column("Step", no_wrap=True)
    table.add_column("Outcome")
    table.add_column("Required")
    table.add_column("Duration", justify="right")
    table.add_column("Detail")

    for entry in run.records:
        style = _OUTCOME_STYLES[entry.outcome]
        table.add_row(
            entry.step_id,
            f"[{style}]{entry.outcome.value}[/{style}]",
            "yes" if entry.required else "no",
            format_duration(entry.duration_seconds) if entry.action_ran else "",
            entry.detail,
        )
    console.print(table)
    console.print()


def print_verification_table(steps: Sequence[InstallStep], results: dict[str, bool]) -> None:
    """Render the result of :meth:`ProvisioningEngine.verify_all`."""
    table = Table(title="Installation verification", show_header=True, header_style="bold cyan")
    table.add_column("Step", no_wrap=True)
    table.add_column("Description")
    table.add_column("Status")

    for step in steps:
        ok = results.get(step.id, False)
        if ok:
            status = "[green]ok[/green]"
        elif step.required:
            status = "[red]missing[/red]"
        else:
            status = "[yellow]not installed[/yellow]"
        table.add_row(step.id, step.description, status)
    console.print(table)
    console.print()
