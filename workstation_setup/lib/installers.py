from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from ..pipeline import ActionOutcome
from .command import run_cmd

logger = logging.getLogger(__name__)

# Windows Installer: "success, restart required to complete".
EXIT_REBOOT_REQUIRED = 3010

SUCCESS_CODES = (0, EXIT_REBOOT_REQUIRED)


def installer_argv(path: str | Path, args: Sequence[str] = ()) -> list[str]:
    p = Path(path)
    if p.suffix.lower() == ".msi":
        return ["msiexec", "/i", str(p), *args]
    return [str(p), *args]


def run_installer(path: str | Path, args: Sequence[str] = (), *, dry_run: bool = False) -> ActionOutcome:
    """Run a silent installer and translate its exit code.

    0 and 3010 are success; 3010 additionally asks for a restart. Anything
    else raises CommandError.
    """

    if not dry_run and not Path(path).exists():
        raise FileNotFoundError(str(path))

    r = run_cmd(installer_argv(path, args), ok_returncodes=SUCCESS_CODES, dry_run=dry_run)
    if r.returncode == EXIT_REBOOT_REQUIRED:
        logger.info("Installer %s requested a restart", Path(path).name)
        return ActionOutcome(reboot_required=True)
    return ActionOutcome()
