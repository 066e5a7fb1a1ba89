from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

from ..lib.installers import run_installer
from ..lib.transfer import download, remove_path
from ..pipeline import ActionOutcome
from .context import ActionContext, as_args

logger = logging.getLogger(__name__)


def filename_from_url(url: str) -> str:
    name = posixpath.basename(urlparse(url).path)
    if not name:
        raise ValueError(f"Cannot derive a file name from {url}; set 'filename'")
    return name


class DownloadInstallStep:
    """Download an installer over HTTPS, run it silently, delete it."""

    kind = "download_install"
    required = ("url",)

    def __init__(
        self,
        *,
        ctx: ActionContext,
        url: str,
        filename: Optional[str] = None,
        args: Any = None,
        cleanup: bool = True,
    ) -> None:
        self.ctx = ctx
        self.url = url
        self.filename = filename or filename_from_url(url)
        self.args = as_args(args)
        self.cleanup = bool(cleanup)

    def __call__(self) -> ActionOutcome:
        dry_run = self.ctx.dry_run
        dest = Path(self.ctx.downloads_dir) / self.filename
        download(self.url, dest, timeout=self.ctx.download_timeout, dry_run=dry_run)
        try:
            return run_installer(dest, self.args, dry_run=dry_run)
        finally:
            if self.cleanup:
                remove_path(dest, dry_run=dry_run)
