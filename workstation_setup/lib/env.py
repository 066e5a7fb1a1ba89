from __future__ import annotations

import os
import platform
from pathlib import Path

HOME_ENV = "WORKSTATION_SETUP_HOME"


def is_windows() -> bool:
    return platform.system().lower() == "windows"


def default_root() -> str:
    override = os.environ.get(HOME_ENV)
    if override:
        return override
    if is_windows():
        base = os.environ.get("ProgramData") or r"C:\ProgramData"
        return str(Path(base) / "WorkstationSetup")
    return "/var/lib/workstation-setup"


def default_fonts_dir() -> str:
    if is_windows():
        windir = os.environ.get("WINDIR") or r"C:\Windows"
        return str(Path(windir) / "Fonts")
    return str(Path.home() / ".local/share/fonts")
