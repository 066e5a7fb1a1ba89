from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from .context import ActionContext

logger = logging.getLogger(__name__)


class MakeDirsStep:
    kind = "make_dirs"
    required = ("paths",)

    def __init__(self, *, ctx: ActionContext, paths: Sequence[str]) -> None:
        if isinstance(paths, str):
            paths = [paths]
        self.ctx = ctx
        self.paths = [str(p) for p in paths]

    def __call__(self) -> None:
        for p in self.paths:
            if self.ctx.dry_run:
                logger.info("Would create %s", p)
                continue
            Path(p).mkdir(parents=True, exist_ok=True)
            logger.info("Directory ready: %s", p)
