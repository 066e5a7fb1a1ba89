from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .catalog import CatalogError, build_steps
from .config import ProvisionConfig, load_config
from .console import StatusReporter
from .ledger import CompletionLedger, MemoryLedger, open_ledger
from .lib.power import schedule_restart
from .logging_utils import configure_logging
from .pipeline import Reporter, RunReport, Step, run_pipeline

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STEP_FAILED = 1
EXIT_CONFIG_ERROR = 2


def bootstrap_dirs(config: ProvisionConfig) -> None:
    for d in config.bootstrap_dirs():
        Path(d).mkdir(parents=True, exist_ok=True)


def ledger_for(config: ProvisionConfig) -> CompletionLedger:
    ledger = open_ledger(
        config.ledger_backend,
        markers_dir=config.markers_dir,
        state_path=config.ledger_path,
    )
    if config.dry_run:
        # Dry runs see existing markers but never persist new ones.
        return MemoryLedger(set(ledger.keys()))
    return ledger


def run(
    config: ProvisionConfig,
    *,
    steps: Optional[Sequence[Step]] = None,
    ledger: Optional[CompletionLedger] = None,
    reporter: Optional[Reporter] = None,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
    restart: Callable[..., object] = schedule_restart,
) -> RunReport:
    """Run the catalog once and act on the outcome.

    Halts at the first failing step. A restart is scheduled only when every
    attempted step succeeded, at least one of them asked for it, and every
    step of the catalog is now marked completed. A restart that cannot be
    scheduled is reported but does not change the run's outcome.
    """

    steps = list(steps) if steps is not None else build_steps(config)
    ledger = ledger if ledger is not None else ledger_for(config)
    reporter = reporter or StatusReporter()

    logger.info("Running %d steps (dry_run=%s force=%s)", len(steps), config.dry_run, force)
    report = run_pipeline(
        steps=steps,
        ledger=ledger,
        reporter=reporter,
        start_at=start_at,
        stop_after=stop_after,
        force=force,
        halt_on_failure=True,
    )
    logger.info("Summary: ran=%s skipped=%s", report.ran_steps, report.skipped_steps)

    if not report.ok:
        failed = report.failed_step
        logger.error("Run halted at %s; fix the cause and re-run to resume", failed.name if failed else "?")
        return report

    if not report.reboot_requested:
        return report
    if not config.reboot_enabled:
        logger.warning("Restart required but disabled by configuration")
        return report

    pending = [s.name for s in steps if not ledger.has(s.marker)]
    if pending:
        logger.warning("Restart required; deferred until remaining steps complete: %s", ", ".join(pending))
        reporter.notice(f"Restart required; not scheduled while {len(pending)} step(s) are pending")
        return report

    try:
        restart(config.reboot_delay_seconds, dry_run=config.dry_run)
    except Exception as e:
        logger.exception("Could not schedule restart")
        reporter.failed("Scheduled restart", f"restart manually ({e})")

    return report


def list_steps(steps: Sequence[Step], ledger: CompletionLedger, console: Console) -> None:
    table = Table(title="Workstation setup steps")
    table.add_column("#", justify="right")
    table.add_column("Step")
    table.add_column("Marker", style="dim")
    table.add_column("Status")
    for i, step in enumerate(steps, start=1):
        done = ledger.has(step.marker)
        table.add_row(
            str(i),
            step.name,
            step.marker,
            "[green]completed[/green]" if done else "[yellow]pending[/yellow]",
        )
    console.print(table)


def reset_markers(
    keys: List[str],
    steps: Sequence[Step],
    ledger: CompletionLedger,
    reporter: StatusReporter,
    *,
    dry_run: bool = False,
) -> None:
    by_name = {s.name: s.marker for s in steps}
    known = {s.marker for s in steps} | set(by_name)
    for key in keys:
        if key not in known:
            raise CatalogError(f"Unknown step or marker: {key}")
        marker = by_name.get(key, key)
        if dry_run:
            state = "would be cleared" if ledger.has(marker) else "no marker to clear"
            reporter.notice(f"{marker} : {state}")
            continue
        if ledger.clear(marker):
            reporter.notice(f"{marker} : marker cleared")
        else:
            reporter.notice(f"{marker} : no marker to clear")


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="workstation-setup")
    p.add_argument("--config", default=None, help="Provisioning config (YAML); defaults to the bundled catalog")
    p.add_argument("--markers", default=None, help="Marker directory (overrides paths.markers)")
    p.add_argument("--log-dir", default=None, help="Transcript directory (overrides paths.logs)")
    p.add_argument("--start-at", default=None, help="Start at step marker or name")
    p.add_argument("--stop-after", default=None, help="Stop after step marker or name")
    p.add_argument("--force", action="store_true", help="Re-run steps even if marked completed")
    p.add_argument("--dry-run", action="store_true", help="Log actions without executing them")
    p.add_argument("--no-reboot", action="store_true", help="Never schedule a restart")
    p.add_argument("--list", action="store_true", help="Show steps and their completion status")
    p.add_argument("--reset", action="append", default=[], metavar="MARKER", help="Clear a step marker (repeatable)")

    args = p.parse_args(argv)

    console = Console(highlight=False)
    reporter = StatusReporter(console)

    try:
        config = load_config(args.config).with_overrides(
            markers_dir=args.markers,
            logs_dir=args.log_dir,
            dry_run=True if args.dry_run else None,
            reboot_enabled=False if args.no_reboot else None,
        )
        transcript = configure_logging(config.logs_dir)
        steps = build_steps(config)
        ledger = ledger_for(config)

        if args.reset:
            reset_markers(args.reset, steps, ledger, reporter, dry_run=config.dry_run)
            return EXIT_OK
        if args.list:
            list_steps(steps, ledger, console)
            return EXIT_OK

        if not config.dry_run:
            bootstrap_dirs(config)
        reporter.notice(f"Transcript: {transcript}")
        report = run(
            config,
            steps=steps,
            ledger=ledger,
            reporter=reporter,
            start_at=args.start_at,
            stop_after=args.stop_after,
            force=args.force,
        )
    except (FileNotFoundError, ValueError) as e:
        logger.error("Configuration error: %s", e)
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        return EXIT_CONFIG_ERROR

    return EXIT_OK if report.ok else EXIT_STEP_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
