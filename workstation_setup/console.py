from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)


class StatusReporter:
    """Colored per-step status lines for the operator.

    Every line is also written to the transcript through logging.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(highlight=False)

    def _emit(self, text: str, style: str, level: int = logging.INFO) -> None:
        self.console.print(f"[{style}]{escape(text)}[/{style}]")
        logger.log(level, text)

    def skipped(self, name: str) -> None:
        self._emit(f"{name} : already completed", "yellow")

    def started(self, name: str) -> None:
        self._emit(f"---- {name} ----", "bold cyan")

    def succeeded(self, name: str) -> None:
        self._emit(f"{name} : OK", "green")

    def failed(self, name: str, message: str) -> None:
        self._emit(f"{name} : FAILED - {message}", "bold red", logging.ERROR)

    def notice(self, text: str) -> None:
        self._emit(text, "magenta")
