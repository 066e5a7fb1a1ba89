from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Protocol, Set

import yaml

logger = logging.getLogger(__name__)


class InvalidMarkerKey(ValueError):
    pass


def check_marker_key(key: str) -> str:
    """Return ``key`` if it can name a marker file, else raise InvalidMarkerKey."""
    if not key or key in {".", ".."} or Path(key).name != key or any(c in key for c in "/\\:"):
        raise InvalidMarkerKey(f"Marker key must be a plain file name: {key!r}")
    return key


class CompletionLedger(Protocol):
    """Persisted set of completed step markers."""

    def has(self, key: str) -> bool:
        ...

    def mark(self, key: str) -> None:
        ...

    def clear(self, key: str) -> bool:
        ...

    def keys(self) -> List[str]:
        ...


class MemoryLedger:
    def __init__(self, keys: Set[str] | None = None) -> None:
        self._keys: Set[str] = set(keys or ())

    def has(self, key: str) -> bool:
        return key in self._keys

    def mark(self, key: str) -> None:
        self._keys.add(key)

    def clear(self, key: str) -> bool:
        if key in self._keys:
            self._keys.remove(key)
            return True
        return False

    def keys(self) -> List[str]:
        return sorted(self._keys)


class MarkerDirLedger:
    """One empty file per completed step; presence means done."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        check_marker_key(key)
        candidate = (self.directory / key).resolve()
        try:
            candidate.relative_to(self.directory.resolve())
        except ValueError as e:
            raise InvalidMarkerKey(f"Marker key escapes marker directory: {key!r}") from e
        return candidate

    def has(self, key: str) -> bool:
        return self._path(key).is_file()

    def mark(self, key: str) -> None:
        p = self._path(key)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.touch(exist_ok=True)
        logger.info("Marker written: %s", p)

    def clear(self, key: str) -> bool:
        p = self._path(key)
        if not p.exists():
            return False
        p.unlink()
        logger.info("Marker cleared: %s", p)
        return True

    def keys(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.name for p in self.directory.iterdir() if p.is_file())


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


class StateFileLedger:
    """Markers kept as a list inside a single JSON or YAML state document."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}

        text = self.path.read_text(encoding="utf-8")
        if _detect_format(self.path) in {"yaml", "yml"}:
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text) if text.strip() else {}

        if not isinstance(data, dict):
            raise ValueError(f"State file must be an object/dict, got {type(data)}")
        return data

    def _save(self, state: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if _detect_format(self.path) in {"yaml", "yml"}:
            text = yaml.safe_dump(state, sort_keys=False)
        else:
            text = json.dumps(state, indent=2, sort_keys=True) + "\n"
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(self.path)

    def _completed(self, state: Dict[str, Any]) -> List[str]:
        completed = state.setdefault("completed_steps", [])
        if not isinstance(completed, list):
            raise ValueError(f"{self.path}: completed_steps must be a list")
        return completed

    def has(self, key: str) -> bool:
        return key in self._completed(self._load())

    def mark(self, key: str) -> None:
        state = self._load()
        completed = self._completed(state)
        if key not in completed:
            completed.append(key)
        self._save(state)
        logger.info("Marker recorded in %s: %s", self.path, key)

    def clear(self, key: str) -> bool:
        state = self._load()
        completed = self._completed(state)
        if key not in completed:
            return False
        completed.remove(key)
        self._save(state)
        logger.info("Marker removed from %s: %s", self.path, key)
        return True

    def keys(self) -> List[str]:
        return sorted(str(k) for k in self._completed(self._load()))


LEDGER_BACKENDS = ("markers", "state_file", "memory")


def open_ledger(backend: str, *, markers_dir: str, state_path: str | None = None) -> CompletionLedger:
    if backend == "markers":
        return MarkerDirLedger(markers_dir)
    if backend == "state_file":
        if not state_path:
            raise ValueError("ledger.path is required for the state_file backend")
        return StateFileLedger(state_path)
    if backend == "memory":
        return MemoryLedger()
    raise ValueError(f"Unknown ledger backend {backend!r} (expected one of {', '.join(LEDGER_BACKENDS)})")
