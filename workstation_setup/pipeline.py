from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence

from .ledger import CompletionLedger

logger = logging.getLogger(__name__)


class StepFailedError(RuntimeError):
    def __init__(self, step_name: str, error: BaseException) -> None:
        self.step_name = step_name
        self.error = error
        super().__init__(f"{step_name}: {error}")


@dataclass(frozen=True)
class ActionOutcome:
    """Optional value an action returns to the runner."""

    reboot_required: bool = False


Action = Callable[[], Optional[ActionOutcome]]


@dataclass(frozen=True)
class Step:
    name: str
    action: Action
    marker: str

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Step name must be non-empty")
        if not self.marker or not self.marker.strip():
            raise ValueError(f"Step {self.name!r} has an empty marker")


class Reporter(Protocol):
    def skipped(self, name: str) -> None:
        ...

    def started(self, name: str) -> None:
        ...

    def succeeded(self, name: str) -> None:
        ...

    def failed(self, name: str, message: str) -> None:
        ...

    def notice(self, text: str) -> None:
        ...


class StepStatus(str, enum.Enum):
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    name: str
    marker: str
    status: StepStatus
    reboot_required: bool = False
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status is not StepStatus.FAILED


@dataclass(frozen=True)
class RunReport:
    results: List[StepResult] = field(default_factory=list)

    @property
    def ran_steps(self) -> List[str]:
        return [r.marker for r in self.results if r.status is StepStatus.SUCCEEDED]

    @property
    def skipped_steps(self) -> List[str]:
        return [r.marker for r in self.results if r.status is StepStatus.SKIPPED]

    @property
    def failed_step(self) -> Optional[StepResult]:
        for r in self.results:
            if r.status is StepStatus.FAILED:
                return r
        return None

    @property
    def ok(self) -> bool:
        return self.failed_step is None

    @property
    def reboot_requested(self) -> bool:
        return any(r.reboot_required for r in self.results if r.status is StepStatus.SUCCEEDED)

    def raise_for_failure(self) -> None:
        failed = self.failed_step
        if failed is not None and failed.error is not None:
            raise StepFailedError(failed.name, failed.error) from failed.error


def run_step(
    step: Step,
    ledger: CompletionLedger,
    reporter: Reporter,
    *,
    force: bool = False,
) -> StepResult:
    """Run a single step at most once across invocations.

    The marker is written only after the action returns. A failing action
    leaves the ledger untouched so the step is retried on the next run.
    """

    if (not force) and ledger.has(step.marker):
        reporter.skipped(step.name)
        return StepResult(name=step.name, marker=step.marker, status=StepStatus.SKIPPED)

    reporter.started(step.name)
    try:
        outcome = step.action()
    except Exception as e:
        logger.exception("Step %s failed", step.name)
        reporter.failed(step.name, str(e) or type(e).__name__)
        return StepResult(name=step.name, marker=step.marker, status=StepStatus.FAILED, error=e)

    ledger.mark(step.marker)
    reporter.succeeded(step.name)
    return StepResult(
        name=step.name,
        marker=step.marker,
        status=StepStatus.SUCCEEDED,
        reboot_required=bool(outcome and outcome.reboot_required),
    )


def _matches(step: Step, ref: Optional[str]) -> bool:
    return ref is not None and ref in (step.marker, step.name)


def run_pipeline(
    *,
    steps: Sequence[Step],
    ledger: CompletionLedger,
    reporter: Reporter,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
    halt_on_failure: bool = True,
) -> RunReport:
    """Run steps in order with resume/idempotency semantics."""

    if start_at is not None and not any(_matches(s, start_at) for s in steps):
        raise ValueError(f"Unknown step for start_at: {start_at}")
    if stop_after is not None and not any(_matches(s, stop_after) for s in steps):
        raise ValueError(f"Unknown step for stop_after: {stop_after}")

    results: List[StepResult] = []
    started = start_at is None

    for step in steps:
        if not started:
            if _matches(step, start_at):
                started = True
            else:
                continue

        result = run_step(step, ledger, reporter, force=force)
        results.append(result)

        if not result.ok and halt_on_failure:
            logger.error("Halting run at %s", step.name)
            break

        if _matches(step, stop_after):
            logger.info("Stopping after %s", stop_after)
            break

    return RunReport(results=results)
