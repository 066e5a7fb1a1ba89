from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from ..lib.command import run_cmd
from ..lib.env import is_windows
from ..lib.transfer import copy_file
from .context import ActionContext

logger = logging.getLogger(__name__)

FONTS_REG_KEY = r"HKLM\SOFTWARE\Microsoft\Windows NT\CurrentVersion\Fonts"

FONT_KINDS = {
    ".ttf": "TrueType",
    ".ttc": "TrueType",
    ".otf": "OpenType",
}


def font_registry_argv(font_file: str) -> list[str]:
    p = Path(font_file)
    kind = FONT_KINDS.get(p.suffix.lower(), "TrueType")
    return ["reg", "add", FONTS_REG_KEY, "/v", f"{p.stem} ({kind})", "/t", "REG_SZ", "/d", p.name, "/f"]


class InstallFontsStep:
    """Copy font files into the system fonts directory and register them."""

    kind = "install_fonts"
    required = ("source",)

    def __init__(
        self,
        *,
        ctx: ActionContext,
        source: str,
        patterns: Sequence[str] = ("*.ttf", "*.ttc", "*.otf"),
        register: Optional[bool] = None,
    ) -> None:
        self.ctx = ctx
        self.source = source
        self.patterns = [patterns] if isinstance(patterns, str) else list(patterns)
        self.register = is_windows() if register is None else bool(register)

    def _font_files(self) -> List[Path]:
        src = Path(self.source)
        if not src.is_dir():
            raise FileNotFoundError(self.source)
        found: dict[str, Path] = {}
        for pattern in self.patterns:
            for p in src.glob(pattern):
                if p.is_file():
                    found[p.name.lower()] = p
        return [found[k] for k in sorted(found)]

    def __call__(self) -> None:
        dry_run = self.ctx.dry_run
        fonts = self._font_files()
        if not fonts:
            raise RuntimeError(f"No font files matching {','.join(self.patterns)} in {self.source}")

        for font in fonts:
            copy_file(str(font), self.ctx.fonts_dir, dry_run=dry_run)
            if self.register:
                run_cmd(font_registry_argv(str(font)), dry_run=dry_run)

        logger.info("Installed %d fonts into %s", len(fonts), self.ctx.fonts_dir)
