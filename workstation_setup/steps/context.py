from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, Tuple


@dataclass(frozen=True)
class ActionContext:
    """What every action needs from the run configuration."""

    staging_dir: str
    downloads_dir: str
    fonts_dir: str
    download_timeout: Tuple[float, float] = (30.0, 300.0)
    dry_run: bool = False


def as_args(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Sequence):
        return [str(v) for v in value]
    raise ValueError(f"installer args must be a list or string, got {type(value).__name__}")
