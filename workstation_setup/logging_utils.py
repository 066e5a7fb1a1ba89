from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

TRANSCRIPT_PREFIX = "workstation-setup"


def transcript_name(now: Optional[time.struct_time] = None) -> str:
    stamp = time.strftime("%Y%m%d-%H%M%S", now or time.localtime())
    return f"{TRANSCRIPT_PREFIX}-{stamp}.log"


def configure_logging(
    log_dir: str,
    level: int = logging.INFO,
    also_console: bool = False,
) -> str:
    """Configure logging with a timestamped transcript file per run.

    Notes:
    - The transcript is opened in append mode and never truncated.
    - If log_dir is not writable, fall back to the working directory.
    - Console output is normally the StatusReporter's job, so the plain
      console handler is opt-in.

    Returns the actual transcript path.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_workstation_setup_configured", False):
        return getattr(logger, "_workstation_setup_log_path")

    name = transcript_name()
    requested = str(Path(log_dir) / name)
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    try:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(requested, mode="a", encoding="utf-8")
        chosen_path = requested
    except OSError:
        fallback = str(Path.cwd() / name)
        file_handler = logging.FileHandler(fallback, mode="a", encoding="utf-8")
        chosen_path = fallback
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_workstation_setup_configured", True)
    setattr(logger, "_workstation_setup_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", requested, chosen_path
    )
    return chosen_path
