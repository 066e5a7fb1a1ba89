from __future__ import annotations

import logging
from typing import Optional

from .command import CmdResult, run_cmd
from .env import is_windows

logger = logging.getLogger(__name__)


def restart_argv(delay_seconds: int, *, windows: Optional[bool] = None) -> list[str]:
    if windows is None:
        windows = is_windows()
    delay = max(0, int(delay_seconds))
    if windows:
        return ["shutdown", "/r", "/t", str(delay), "/c", "Restart required to finish workstation setup"]
    if delay == 0:
        return ["shutdown", "-r", "now"]
    # POSIX shutdown only schedules in whole minutes.
    return ["shutdown", "-r", f"+{(delay + 59) // 60}"]


def schedule_restart(delay_seconds: int, *, dry_run: bool = False) -> CmdResult:
    """Ask the OS for a delayed restart."""

    logger.warning("Scheduling restart in %ss", delay_seconds)
    return run_cmd(restart_argv(delay_seconds), dry_run=dry_run)
