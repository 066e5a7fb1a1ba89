from __future__ import annotations

import pytest

from workstation_setup.ledger import MemoryLedger
from workstation_setup.pipeline import (
    ActionOutcome,
    Step,
    StepFailedError,
    StepStatus,
    run_pipeline,
    run_step,
)


class Counter:
    def __init__(self, outcome=None, error=None):
        self.calls = 0
        self.outcome = outcome
        self.error = error

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.outcome


def test_success_writes_marker_and_reports_ok(reporter):
    ledger = MemoryLedger()
    action = Counter()

    result = run_step(Step("A", action, "a"), ledger, reporter)

    assert result.status is StepStatus.SUCCEEDED
    assert ledger.has("a")
    assert action.calls == 1
    assert reporter.lines == ["---- A ----", "A : OK"]


def test_existing_marker_skips_without_invoking_action(reporter):
    ledger = MemoryLedger({"a"})
    action = Counter()

    result = run_step(Step("A", action, "a"), ledger, reporter)

    assert result.status is StepStatus.SKIPPED
    assert action.calls == 0
    assert reporter.lines == ["A : already completed"]


def test_running_twice_invokes_action_once(reporter):
    ledger = MemoryLedger()
    action = Counter()
    step = Step("A", action, "a")

    run_step(step, ledger, reporter)
    run_step(step, ledger, reporter)

    assert action.calls == 1


def test_failure_leaves_ledger_unchanged(reporter):
    ledger = MemoryLedger({"other"})
    before = ledger.keys()

    result = run_step(Step("B", Counter(error=OSError("disk full")), "b"), ledger, reporter)

    assert result.status is StepStatus.FAILED
    assert str(result.error) == "disk full"
    assert ledger.keys() == before
    assert reporter.lines[-1] == "B : FAILED - disk full"


def test_marker_not_visible_while_action_runs(reporter):
    ledger = MemoryLedger()
    seen = []

    def action():
        seen.append(ledger.has("a"))

    run_step(Step("A", action, "a"), ledger, reporter)

    assert seen == [False]
    assert ledger.has("a")


def test_force_reruns_completed_step(reporter):
    ledger = MemoryLedger({"a"})
    action = Counter()

    result = run_step(Step("A", action, "a"), ledger, reporter, force=True)

    assert result.status is StepStatus.SUCCEEDED
    assert action.calls == 1


def test_step_requires_name_and_marker():
    with pytest.raises(ValueError):
        Step("", lambda: None, "a")
    with pytest.raises(ValueError):
        Step("A", lambda: None, " ")


def test_failure_halts_remaining_steps(reporter):
    ledger = MemoryLedger()
    a, b, c = Counter(), Counter(error=RuntimeError("disk full")), Counter()
    steps = [Step("A", a, "a"), Step("B", b, "b"), Step("C", c, "c")]

    report = run_pipeline(steps=steps, ledger=ledger, reporter=reporter)

    assert not report.ok
    assert report.failed_step.name == "B"
    assert c.calls == 0
    assert ledger.keys() == ["a"]
    assert "B : FAILED - disk full" in reporter.lines
    assert not any(line.startswith("---- C") for line in reporter.lines)


def test_rerun_after_failure_resumes_at_failed_step(reporter):
    ledger = MemoryLedger()
    flaky = Counter(error=RuntimeError("network down"))
    first, third = Counter(), Counter()
    steps = [Step("A", first, "a"), Step("B", flaky, "b"), Step("C", third, "c")]

    run_pipeline(steps=steps, ledger=ledger, reporter=reporter)
    flaky.error = None
    report = run_pipeline(steps=steps, ledger=ledger, reporter=reporter)

    assert report.ok
    assert report.skipped_steps == ["a"]
    assert report.ran_steps == ["b", "c"]
    assert (first.calls, flaky.calls, third.calls) == (1, 2, 1)


def test_continue_on_failure_when_halt_disabled(reporter):
    ledger = MemoryLedger()
    c = Counter()
    steps = [Step("B", Counter(error=RuntimeError("x")), "b"), Step("C", c, "c")]

    report = run_pipeline(steps=steps, ledger=ledger, reporter=reporter, halt_on_failure=False)

    assert c.calls == 1
    assert not report.ok
    assert ledger.keys() == ["c"]


def test_reboot_requested_aggregates_step_outcomes(reporter):
    steps = [
        Step("A", Counter(), "a"),
        Step("B", Counter(outcome=ActionOutcome(reboot_required=True)), "b"),
        Step("C", Counter(outcome=ActionOutcome()), "c"),
    ]

    report = run_pipeline(steps=steps, ledger=MemoryLedger(), reporter=reporter)

    assert report.ok
    assert report.reboot_requested


def test_no_reboot_when_no_step_asks(reporter):
    steps = [Step("A", Counter(), "a"), Step("B", Counter(outcome=ActionOutcome()), "b")]

    report = run_pipeline(steps=steps, ledger=MemoryLedger(), reporter=reporter)

    assert not report.reboot_requested


def test_start_at_and_stop_after_window(reporter):
    counters = [Counter() for _ in range(4)]
    steps = [Step(f"S{i}", c, f"s{i}") for i, c in enumerate(counters)]

    report = run_pipeline(
        steps=steps,
        ledger=MemoryLedger(),
        reporter=reporter,
        start_at="s1",
        stop_after="S2",
    )

    assert report.ran_steps == ["s1", "s2"]
    assert [c.calls for c in counters] == [0, 1, 1, 0]


def test_unknown_start_at_is_rejected(reporter):
    with pytest.raises(ValueError):
        run_pipeline(steps=[Step("A", Counter(), "a")], ledger=MemoryLedger(), reporter=reporter, start_at="zzz")


def test_raise_for_failure_chains_original_error(reporter):
    err = FileNotFoundError("setup.exe")
    report = run_pipeline(steps=[Step("A", Counter(error=err), "a")], ledger=MemoryLedger(), reporter=reporter)

    with pytest.raises(StepFailedError) as excinfo:
        report.raise_for_failure()

    assert excinfo.value.step_name == "A"
    assert excinfo.value.__cause__ is err
