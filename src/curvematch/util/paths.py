# curvematch/util/paths.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

MINIFIED_PREFIX = "min_"


def ensure_dir(path: Path) -> None:
    """Ensure a directory exists."""
    path.mkdir(parents=True, exist_ok=True)


def minified_path(in_path: Path, out_dir: Optional[Path] = None) -> Path:
    """Output path for a minified GPX: min_<name>, beside the input unless out_dir is given."""
    parent = out_dir if out_dir is not None else in_path.parent
    return parent / f"{MINIFIED_PREFIX}{in_path.name}"


def list_gpx_files(root: Path) -> list[Path]:
    """All *.gpx files under root, sorted; already-minified files are left out."""
    if not root.is_dir():
        return []
    return sorted(
        p for p in root.rglob("*.gpx")
        if p.is_file() and not p.name.startswith(MINIFIED_PREFIX)
    )
