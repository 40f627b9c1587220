"""
CurveMatch configuration loader

This module centralizes *all* configuration handling for CurveMatch.

Design goals:
- Keep scripts Unix-friendly: CLI flags override everything.
- Provide sensible defaults if no config exists.
- Allow per-machine config without committing personal paths:
    ~/.config/curvematch/config.toml
- Allow repo-local config:
    <repo_root>/config/config.toml
- Allow environment variable overrides for automation.

Precedence (highest to lowest) for any given value:
1) CLI argument (handled by each script)
2) Environment variables (CURVEMATCH_*)
3) User config: ~/.config/curvematch/config.toml
4) Repo config: <repo_root>/config/config.toml
5) Hard defaults

This module uses Python's built-in tomllib on Python 3.11+, or `tomli` if installed.

Where to add things:
- a new scalar setting: add it to _defaults(), _COERCE, _ENV_MAP and the matching
  typed dataclass below, then read it in load_config().
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from curvematch.errors import ConfigError

DEFAULT_CREATOR = "CurveMatch Minifier"
DEFAULT_MAX_AREA_KM2 = 500.0


# ---------------------------------------------------------------------------
# TOML loading helpers
# ---------------------------------------------------------------------------
def _load_toml(path: Path) -> dict[str, Any]:
    """
    Parse a TOML file at `path`.

    Behavior:
    - If the file does not exist, return an empty dict (non-fatal).
    - If the file exists but is invalid TOML, raise a ConfigError
      with a clear, user-facing message.

    Missing config files are normal. Malformed config files indicate user
    intent and fail loudly.
    """
    if not path.is_file():
        return {}

    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib

    try:
        return tomllib.loads(path.read_text(encoding="utf-8")) or {}
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to parse TOML config: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Generic coercion helpers
# ---------------------------------------------------------------------------
def _deep_get(d: dict[str, Any], dotted_key: str) -> Any:
    """
    Fetch nested dictionary values using dot-separated keys.

    Example:
        _deep_get(cfg, "minify.creator")

    Returns None if any part of the path is missing.
    """
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _as_path(v: Any) -> Optional[Path]:
    """
    Coerce a config value into a pathlib.Path if possible.

    Returns None if value cannot be interpreted as a path.
    """
    if v is None:
        return None
    if isinstance(v, Path):
        return v.expanduser()
    if isinstance(v, str) and v.strip():
        return Path(v).expanduser()
    return None


def _as_bool(v: Any) -> Optional[bool]:
    """
    Coerce loosely-typed config values into booleans.

    Accepts common truthy / falsy spellings so that TOML values and
    environment variables behave the same. Returns None if unrecognized.
    """
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("true", "yes", "y", "1", "on"):
            return True
        if s in ("false", "no", "n", "0", "off"):
            return False
    return None


def _as_float(v: Any) -> Optional[float]:
    """Coerce to a positive float; None if not a number or not > 0."""
    if isinstance(v, bool) or v is None:
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if f > 0 else None


def _as_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


# key -> coercion function
_COERCE = {
    "paths.work_root": _as_path,
    "paths.out_root": _as_path,
    "minify.creator": _as_str,
    "minify.pretty": _as_bool,
    "region.max_area_km2": _as_float,
}

_ENV_MAP = {
    "CURVEMATCH_WORK_ROOT": "paths.work_root",
    "CURVEMATCH_OUT_ROOT": "paths.out_root",
    "CURVEMATCH_CREATOR": "minify.creator",
    "CURVEMATCH_PRETTY": "minify.pretty",
    "CURVEMATCH_MAX_AREA_KM2": "region.max_area_km2",
}


# ---------------------------------------------------------------------------
# Repo discovery + defaults
# ---------------------------------------------------------------------------
def find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward from `start` looking for the repo root.

    Heuristic:
    - The presence of a `config/` directory marks the repo root
    """
    start = start.resolve()
    for p in [start] + list(start.parents):
        if (p / "config").is_dir():
            return p
    return None


def default_runtime_root() -> Path:
    """
    Default runtime root if nothing is configured.

    work_root and out_root derive from this path unless overridden.
    """
    return Path.home() / "GPS"


def _defaults() -> dict[str, Any]:
    runtime_root = default_runtime_root()
    return {
        "paths.work_root": runtime_root / "_work",
        "paths.out_root": runtime_root / "_min",
        "minify.creator": DEFAULT_CREATOR,
        "minify.pretty": False,
        "region.max_area_km2": DEFAULT_MAX_AREA_KM2,
    }


# ---------------------------------------------------------------------------
# Typed config dataclasses
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class CurveMatchPaths:
    """
    Resolved filesystem paths used by the CLI tools.

    - work_root: where GPX files are picked from when none are given
    - out_root:  where minified GPX files are written by default
    """

    work_root: Path
    out_root: Path


@dataclass(frozen=True)
class MinifyConfig:
    """Output options for minified GPX documents."""

    creator: str = DEFAULT_CREATOR
    pretty: bool = False


@dataclass(frozen=True)
class RegionConfig:
    """Limits for user-drawn search regions."""

    max_area_km2: float = DEFAULT_MAX_AREA_KM2


@dataclass(frozen=True)
class CurveMatchConfig:
    """
    Fully merged CurveMatch configuration.

    Attributes:
    - paths: resolved filesystem layout
    - minify: minified-document output options
    - region: search-region limits
    - source: provenance map showing where each value came from
    """

    paths: CurveMatchPaths
    minify: MinifyConfig
    region: RegionConfig
    source: dict[str, str]


# ---------------------------------------------------------------------------
# Main config loader
# ---------------------------------------------------------------------------
def load_config(
    repo_root: Optional[Path] = None,
    repo_config_path: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
) -> CurveMatchConfig:
    """
    Load, merge, and normalize all CurveMatch configuration.

    This function is the single authoritative entry point
    for configuration access.
    """

    # Locate repo and config files
    if repo_root is None:
        repo_root = find_repo_root(Path(__file__).resolve())
    if repo_config_path is None and repo_root is not None:
        repo_config_path = repo_root / "config" / "config.toml"
    if user_config_path is None:
        user_config_path = Path.home() / ".config" / "curvematch" / "config.toml"

    # Load raw TOML dicts
    repo_cfg = _load_toml(repo_config_path) if repo_config_path else {}
    user_cfg = _load_toml(user_config_path) if user_config_path else {}

    values = _defaults()
    # Track provenance for debugging
    src = {k: "default" for k in values}

    # Repo config, then user config (user wins)
    for cfg, label, path in ((repo_cfg, "repo", repo_config_path),
                             (user_cfg, "user", user_config_path)):
        for key, coerce in _COERCE.items():
            v = coerce(_deep_get(cfg, key))
            if v is None:
                continue
            values[key] = v
            src[key] = f"{label}:{path}"

    # Environment variable overrides (highest non-CLI precedence)
    for env, key in _ENV_MAP.items():
        raw = os.environ.get(env)
        if not raw:
            continue
        v = _COERCE[key](raw)
        if v is None:
            continue
        values[key] = v
        src[key] = f"env:{env}"

    return CurveMatchConfig(
        paths=CurveMatchPaths(
            work_root=values["paths.work_root"].expanduser(),
            out_root=values["paths.out_root"].expanduser(),
        ),
        minify=MinifyConfig(
            creator=values["minify.creator"],
            pretty=values["minify.pretty"],
        ),
        region=RegionConfig(max_area_km2=values["region.max_area_km2"]),
        source=src,
    )
