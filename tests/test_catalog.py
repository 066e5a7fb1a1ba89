from __future__ import annotations

from pathlib import Path

import pytest

from workstation_setup.catalog import CatalogError, build_steps, expand, slugify
from workstation_setup.config import ProvisionConfig, load_config
from workstation_setup.steps import DownloadInstallStep, InstallStep, MakeDirsStep


def make_config(tmp_path, steps):
    return ProvisionConfig(
        raw={
            "paths": {"root": str(tmp_path), "share": str(tmp_path / "share")},
            "steps": steps,
        }
    )


def test_builds_steps_in_order_with_expanded_paths(tmp_path):
    cfg = make_config(
        tmp_path,
        [
            {"kind": "make_dirs", "name": "Folders", "paths": ["{staging}"]},
            {"kind": "install", "name": "Office suite", "marker": "office", "source": "{share}/office.msi", "args": "/qn /norestart"},
            {"kind": "download_install", "name": "Media player", "url": "https://example.org/dl/vlc.exe"},
        ],
    )

    steps = build_steps(cfg)

    assert [s.name for s in steps] == ["Folders", "Office suite", "Media player"]
    assert [s.marker for s in steps] == ["folders", "office", "media-player"]
    assert isinstance(steps[0].action, MakeDirsStep)
    assert steps[0].action.paths == [str(Path(tmp_path) / "staging")]
    assert isinstance(steps[1].action, InstallStep)
    assert steps[1].action.source == f"{tmp_path / 'share'}/office.msi"
    assert steps[1].action.args == ["/qn", "/norestart"]
    assert isinstance(steps[2].action, DownloadInstallStep)
    assert steps[2].action.filename == "vlc.exe"


def test_duplicate_marker_rejected(tmp_path):
    cfg = make_config(
        tmp_path,
        [
            {"kind": "make_dirs", "name": "One", "marker": "same", "paths": ["x"]},
            {"kind": "make_dirs", "name": "Two", "marker": "same", "paths": ["y"]},
        ],
    )
    with pytest.raises(CatalogError, match="Duplicate marker"):
        build_steps(cfg)


@pytest.mark.parametrize(
    "entry, message",
    [
        ({"kind": "teleport", "name": "X"}, "Unknown step kind"),
        ({"kind": "install", "source": "a.msi"}, "no name"),
        ({"kind": "install", "name": "X"}, "missing: source"),
        ({"kind": "install", "name": "X", "source": "a.msi", "colour": "red"}, "colour"),
        ({"kind": "install", "name": "X", "source": "{nowhere}/a.msi"}, "Unknown placeholder"),
        ({"kind": "install", "name": "X", "source": "{share.drive}/a.msi"}, "Bad placeholder"),
        ({"kind": "install", "name": "X", "source": "{}/a.msi"}, "Bad placeholder"),
        ({"kind": "install", "name": "X", "marker": "office/x64", "source": "a.msi"}, "plain file name"),
        ({"kind": "install", "name": "X", "marker": "..", "source": "a.msi"}, "plain file name"),
        ({"kind": "install", "name": "X", "marker": "C:office", "source": "a.msi"}, "plain file name"),
        ({"kind": "download_install", "name": "X", "url": "https://example.org/"}, "file name"),
    ],
)
def test_invalid_entries(tmp_path, entry, message):
    with pytest.raises(CatalogError, match=message):
        build_steps(make_config(tmp_path, [entry]))


def test_slugify():
    assert slugify("PDF reader") == "pdf-reader"
    assert slugify("  Office Suite (x64) ") == "office-suite-x64"


def test_expand_nested():
    assert expand({"a": ["{x}/1", 2]}, {"x": "X"}) == {"a": ["X/1", 2]}


def test_bundled_catalog_builds():
    steps = build_steps(load_config())

    markers = [s.marker for s in steps]
    assert len(markers) == len(set(markers))
    assert markers[0] == "prepare-folders"
    assert {"office-suite", "fonts", "notebook", "pdf-reader", "media-player"} <= set(markers)
