"""Test bootstrap.

The repo is meant to be installed via `pip install -e .[test]`; the repo root
is also put on sys.path so `pytest -q` works from a plain checkout.
"""

from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import List

import pytest

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class RecordingReporter:
    def __init__(self) -> None:
        self.lines: List[str] = []

    def skipped(self, name: str) -> None:
        self.lines.append(f"{name} : already completed")

    def started(self, name: str) -> None:
        self.lines.append(f"---- {name} ----")

    def succeeded(self, name: str) -> None:
        self.lines.append(f"{name} : OK")

    def failed(self, name: str, message: str) -> None:
        self.lines.append(f"{name} : FAILED - {message}")

    def notice(self, text: str) -> None:
        self.lines.append(text)


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def fake_cmd(monkeypatch):
    """Replace process launches with a scripted return code per executable name."""

    from workstation_setup.lib import command

    calls: List[List[str]] = []
    codes = {}

    def fake_run(argv, **kwargs):
        argv = [str(a) for a in argv]
        calls.append(argv)

        rc = codes.get(Path(argv[0]).name, codes.get("*", 0))
        return SimpleNamespace(returncode=rc, stdout="", stderr="" if rc in (0, 3010) else "boom")

    monkeypatch.setattr(command.subprocess, "run", fake_run)
    return calls, codes
