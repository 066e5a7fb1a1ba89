from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .lib.env import default_fonts_dir, default_root

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "manifests" / "default.yaml"


@dataclass(frozen=True)
class ProvisionConfig:
    raw: Dict[str, Any]

    def _paths(self) -> Dict[str, Any]:
        return self.raw.get("paths") or {}

    @property
    def root(self) -> str:
        return str(self._paths().get("root") or default_root())

    @property
    def markers_dir(self) -> str:
        return str(self._paths().get("markers") or Path(self.root) / "markers")

    @property
    def logs_dir(self) -> str:
        return str(self._paths().get("logs") or Path(self.root) / "logs")

    @property
    def staging_dir(self) -> str:
        return str(self._paths().get("staging") or Path(self.root) / "staging")

    @property
    def downloads_dir(self) -> str:
        return str(self._paths().get("downloads") or Path(self.root) / "downloads")

    @property
    def share(self) -> str:
        return str(self._paths().get("share") or "")

    @property
    def fonts_dir(self) -> str:
        return str(self._paths().get("fonts") or default_fonts_dir())

    @property
    def ledger_backend(self) -> str:
        return str(((self.raw.get("ledger") or {}).get("backend")) or "markers")

    @property
    def ledger_path(self) -> str:
        return str(((self.raw.get("ledger") or {}).get("path")) or Path(self.root) / "state.json")

    @property
    def reboot_enabled(self) -> bool:
        return bool((self.raw.get("reboot") or {}).get("enabled", True))

    @property
    def reboot_delay_seconds(self) -> int:
        return int((self.raw.get("reboot") or {}).get("delay_seconds", 60))

    @property
    def download_timeout(self) -> Tuple[float, float]:
        dl = self.raw.get("download") or {}
        return float(dl.get("connect_timeout", 30)), float(dl.get("read_timeout", 300))

    @property
    def dry_run(self) -> bool:
        return bool(self.raw.get("dry_run", False))

    @property
    def steps(self) -> List[Dict[str, Any]]:
        steps = self.raw.get("steps") or []
        if not isinstance(steps, list):
            raise ValueError("steps must be a list")
        return list(steps)

    @property
    def placeholders(self) -> Dict[str, str]:
        return {
            "root": self.root,
            "share": self.share,
            "staging": self.staging_dir,
            "downloads": self.downloads_dir,
            "fonts": self.fonts_dir,
        }

    def bootstrap_dirs(self) -> List[str]:
        """Local directories the run needs before the first step."""
        dirs = [self.logs_dir, self.staging_dir, self.downloads_dir]
        if self.ledger_backend == "markers":
            dirs.insert(0, self.markers_dir)
        return dirs

    def with_overrides(
        self,
        *,
        markers_dir: Optional[str] = None,
        logs_dir: Optional[str] = None,
        dry_run: Optional[bool] = None,
        reboot_enabled: Optional[bool] = None,
    ) -> "ProvisionConfig":
        raw = dict(self.raw)
        paths = dict(self._paths())
        if markers_dir:
            paths["markers"] = markers_dir
        if logs_dir:
            paths["logs"] = logs_dir
        raw["paths"] = paths
        if dry_run is not None:
            raw["dry_run"] = dry_run
        if reboot_enabled is not None:
            raw["reboot"] = dict(raw.get("reboot") or {}, enabled=reboot_enabled)
        return replace(self, raw=raw)


def load_config(path: Optional[str] = None) -> ProvisionConfig:
    p = Path(path) if path else DEFAULT_CONFIG_PATH
    if not p.exists():
        raise FileNotFoundError(str(p))

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("provisioning config must be YAML")

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{p.name} must contain a mapping/object")

    return ProvisionConfig(raw=raw)
