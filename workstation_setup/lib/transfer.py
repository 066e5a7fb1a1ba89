from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional, Tuple

import requests

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def copy_tree(src: str, dst: str, *, dry_run: bool = False) -> int:
    """Copy a directory tree (e.g. from a network share), returning the file count."""

    s = Path(src)
    d = Path(dst)
    if not s.exists():
        raise FileNotFoundError(src)

    if dry_run:
        logger.info("Would copy tree %s -> %s", str(s), str(d))
        return 0

    d.mkdir(parents=True, exist_ok=True)
    copied = 0
    for item in s.rglob("*"):
        rel = item.relative_to(s)
        out = d / rel
        if item.is_dir():
            out.mkdir(parents=True, exist_ok=True)
        else:
            out.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(item, out)
            copied += 1
    logger.info("Copied %d files %s -> %s", copied, str(s), str(d))
    return copied


def copy_file(src: str, dst_dir: str, *, dry_run: bool = False) -> Path:
    s = Path(src)
    out = Path(dst_dir) / s.name
    if not s.is_file():
        raise FileNotFoundError(src)

    if dry_run:
        logger.info("Would copy %s -> %s", str(s), str(out))
        return out

    out.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(s, out)
    logger.info("Copied %s -> %s", str(s), str(out))
    return out


def download(
    url: str,
    dest: str | Path,
    *,
    timeout: Optional[Tuple[float, float]] = (30.0, 300.0),
    dry_run: bool = False,
) -> Path:
    """Download url to dest.

    The body is streamed to ``<dest>.part`` and renamed only once complete, so
    an interrupted download never leaves a file that looks finished.
    """

    out = Path(dest)
    if dry_run:
        logger.info("Would download %s -> %s", url, str(out))
        return out

    out.parent.mkdir(parents=True, exist_ok=True)
    part = out.with_name(out.name + ".part")

    logger.info("GET %s", url)
    with requests.get(url, stream=True, timeout=timeout) as response:
        response.raise_for_status()
        size = 0
        with part.open("wb") as f:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    f.write(chunk)
                    size += len(chunk)

    part.replace(out)
    logger.info("Downloaded %d bytes -> %s", size, str(out))
    return out


def remove_path(path: str | Path, *, dry_run: bool = False) -> None:
    p = Path(path)
    if dry_run:
        logger.info("Would remove %s", str(p))
        return
    if p.is_dir():
        shutil.rmtree(p)
    elif p.exists():
        p.unlink()
    else:
        return
    logger.info("Removed %s", str(p))
