from __future__ import annotations

import logging

from ..lib.transfer import copy_tree
from .context import ActionContext

logger = logging.getLogger(__name__)


class CopyShareStep:
    """Bulk copy a directory from a network share onto local disk."""

    kind = "copy_share"
    required = ("source", "dest")

    def __init__(self, *, ctx: ActionContext, source: str, dest: str) -> None:
        self.ctx = ctx
        self.source = source
        self.dest = dest

    def __call__(self) -> None:
        count = copy_tree(self.source, self.dest, dry_run=self.ctx.dry_run)
        logger.info("Share copy complete (%d files)", count)
