from __future__ import annotations

import logging
from typing import Any

from ..lib.installers import run_installer
from ..lib.transfer import copy_file, remove_path
from ..pipeline import ActionOutcome
from .context import ActionContext, as_args

logger = logging.getLogger(__name__)


class InstallStep:
    """Run an installer that lives on a share or in the staging directory.

    With ``stage`` the installer is first copied into the staging directory,
    run from there and the local copy deleted afterwards (also on failure).
    """

    kind = "install"
    required = ("source",)

    def __init__(
        self,
        *,
        ctx: ActionContext,
        source: str,
        args: Any = None,
        stage: bool = True,
        cleanup: bool = True,
    ) -> None:
        self.ctx = ctx
        self.source = source
        self.args = as_args(args)
        self.stage = bool(stage)
        self.cleanup = bool(cleanup)

    def __call__(self) -> ActionOutcome:
        dry_run = self.ctx.dry_run
        if not self.stage:
            return run_installer(self.source, self.args, dry_run=dry_run)

        local = copy_file(self.source, self.ctx.staging_dir, dry_run=dry_run)
        try:
            return run_installer(local, self.args, dry_run=dry_run)
        finally:
            if self.cleanup:
                remove_path(local, dry_run=dry_run)
