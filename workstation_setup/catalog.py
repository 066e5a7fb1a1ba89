"""Turn the ``steps:`` list of a provisioning config into runnable steps.

Each entry names a ``kind`` (one of ``STEP_KINDS``), a display ``name``, an
optional ``marker`` and the parameters of that kind. String parameters may
use ``{share}``, ``{staging}``, ``{downloads}``, ``{fonts}`` and ``{root}``
placeholders, which expand from the configured paths.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping

from .config import ProvisionConfig
from .ledger import InvalidMarkerKey, check_marker_key
from .pipeline import Step
from .steps import STEP_KINDS, ActionContext

logger = logging.getLogger(__name__)

RESERVED_KEYS = {"kind", "name", "marker"}


class CatalogError(ValueError):
    pass


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug


def expand(value: Any, placeholders: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        try:
            return value.format_map(placeholders)
        except KeyError as e:
            raise CatalogError(f"Unknown placeholder {e} in {value!r}") from e
        except (AttributeError, IndexError, ValueError) as e:
            raise CatalogError(f"Bad placeholder in {value!r}: {e}") from e
    if isinstance(value, list):
        return [expand(v, placeholders) for v in value]
    if isinstance(value, dict):
        return {k: expand(v, placeholders) for k, v in value.items()}
    return value


def action_context(config: ProvisionConfig) -> ActionContext:
    return ActionContext(
        staging_dir=config.staging_dir,
        downloads_dir=config.downloads_dir,
        fonts_dir=config.fonts_dir,
        download_timeout=config.download_timeout,
        dry_run=config.dry_run,
    )


def build_step(entry: Mapping[str, Any], *, ctx: ActionContext, placeholders: Mapping[str, str]) -> Step:
    if not isinstance(entry, Mapping):
        raise CatalogError(f"Step entry must be a mapping, got {type(entry).__name__}")

    kind = entry.get("kind")
    cls = STEP_KINDS.get(str(kind))
    if cls is None:
        raise CatalogError(f"Unknown step kind {kind!r} (known: {', '.join(sorted(STEP_KINDS))})")

    name = str(entry.get("name") or "").strip()
    if not name:
        raise CatalogError(f"Step of kind {kind} has no name")

    marker = str(entry.get("marker") or slugify(name)).strip()
    if not marker:
        raise CatalogError(f"Step {name!r} has an empty marker")
    try:
        check_marker_key(marker)
    except InvalidMarkerKey as e:
        raise CatalogError(f"Step {name!r}: {e}") from e

    params: Dict[str, Any] = {k: v for k, v in entry.items() if k not in RESERVED_KEYS}
    missing = [k for k in cls.required if params.get(k) in (None, "", [])]
    if missing:
        raise CatalogError(f"Step {name!r} ({kind}) missing: {', '.join(missing)}")

    params = expand(params, placeholders)
    try:
        action = cls(ctx=ctx, **params)
    except (TypeError, ValueError) as e:
        raise CatalogError(f"Step {name!r} ({kind}): {e}") from e

    return Step(name=name, action=action, marker=marker)


def build_steps(config: ProvisionConfig) -> List[Step]:
    ctx = action_context(config)
    placeholders = config.placeholders

    steps: List[Step] = []
    seen: Dict[str, str] = {}
    for entry in config.steps:
        step = build_step(entry, ctx=ctx, placeholders=placeholders)
        if step.marker in seen:
            raise CatalogError(
                f"Duplicate marker {step.marker!r} for steps {seen[step.marker]!r} and {step.name!r}"
            )
        seen[step.marker] = step.name
        steps.append(step)

    logger.debug("Catalog built: %s", ", ".join(s.marker for s in steps))
    return steps
