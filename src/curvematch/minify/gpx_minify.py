#!/usr/bin/env python3
"""
gpx_minify.py: shrink GPX files before upload to the matching service

Keeps only track names, coordinates and elevation, and reports point count,
distance, elevation gain, bounds and the size reduction.

Usage:
  curvematch-minify ride.gpx walk.gpx --out-dir ~/GPS/_min
  curvematch-minify --tsv            # pick files under the work root with fzf
"""

from __future__ import annotations

import argparse
import json
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from curvematch.analyze.track import GpxAnalysis, minify_gpx_content
from curvematch.config import load_config
from curvematch.errors import ConfigError, CurveMatchError, MalformedInputError
from curvematch.formats.gpx import GpxSource
from curvematch.util.format import format_distance, format_elevation, format_file_size
from curvematch.util.fzf import fzf_select_paths
from curvematch.util.logging import log, warn
from curvematch.util.paths import ensure_dir, list_gpx_files, minified_path

# Rough size of one timestamp / extension / sensor element in a device export.
_EXTRA_ELEMENT_BYTES = 50
_EXTRA_ELEMENT_RE = re.compile(r"<(?:[\w.-]+:)?(?:time|extensions|hr|cad|cadence|speed)>")


@dataclass(frozen=True)
class MinifyReport:
    """Minified document plus analysis and size accounting (UTF-8 bytes)."""
    content: str
    analysis: GpxAnalysis
    original_size: int
    minified_size: int

    @property
    def reduction_percent(self) -> float:
        if not self.original_size:
            return 0.0
        return (self.original_size - self.minified_size) / self.original_size * 100

    def to_dict(self) -> dict:
        return {
            "originalSize": self.original_size,
            "minifiedSize": self.minified_size,
            "reductionPercent": self.reduction_percent,
            **self.analysis.to_dict(),
        }


def _byte_size(data: GpxSource) -> int:
    return len(data) if isinstance(data, bytes) else len(data.encode("utf-8"))


def minify_and_analyze(
        data: GpxSource, *,
        creator: Optional[str] = None,
        pretty: bool = False,
) -> MinifyReport:
    """
    Minify an in-memory GPX document and account for the size change.

    Raises:
      MalformedInputError if the document is not well-formed GPX.
    """
    result = minify_gpx_content(data, creator=creator, pretty=pretty)
    return MinifyReport(
        content=result.content,
        analysis=result.analysis,
        original_size=_byte_size(data),
        minified_size=_byte_size(result.content),
    )


def minify_gpx_file(
        in_path: Path,
        out_path: Optional[Path] = None, *,
        creator: Optional[str] = None,
        pretty: bool = False,
) -> MinifyReport:
    """
    Minify a GPX file on disk.

    The output defaults to min_<name> next to the input. Nothing is written
    if the input is malformed.

    Raises:
      MalformedInputError, OSError
    """
    if out_path is None:
        out_path = minified_path(in_path)

    report = minify_and_analyze(in_path.read_bytes(), creator=creator, pretty=pretty)

    ensure_dir(out_path.parent)
    out_path.write_text(report.content, encoding="utf-8")

    log(
        f"Minified {in_path.name}: {format_file_size(report.original_size)} -> "
        f"{format_file_size(report.minified_size)} "
        f"({report.reduction_percent:.1f}% reduction), "
        f"{report.analysis.point_count} points preserved"
    )
    if report.analysis.skipped_points:
        warn(f"{in_path.name}: skipped {report.analysis.skipped_points} point(s) with invalid coordinates")
    return report


def estimate_reduction(content: str) -> float:
    """
    Estimate the fraction of `content` that minification would remove.

    Counts timestamp, extension, heart-rate, cadence and speed elements and
    assumes each costs about 50 bytes. Returns a value in [0, 1].
    """
    if not content:
        return 0.0
    extra = len(_EXTRA_ELEMENT_RE.findall(content))
    return min(extra * _EXTRA_ELEMENT_BYTES / len(content), 1.0)


# ---------------------------
# Reporting
# ---------------------------
TSV_HEADER = "file\tpoints\tskipped\tdistance_m\televation_gain_m\toriginal_bytes\tminified_bytes\treduction_pct"


def print_report(path: Path, report: MinifyReport, *, tsv: bool) -> None:
    a = report.analysis
    if tsv:
        print(
            f"{path}\t"
            f"{a.point_count}\t"
            f"{a.skipped_points}\t"
            f"{a.distance}\t"
            f"{a.elevation_gain}\t"
            f"{report.original_size}\t"
            f"{report.minified_size}\t"
            f"{report.reduction_percent:.1f}"
        )
    else:
        b = a.bounds
        print(f"\n{path}")
        print(f"  points         : {a.point_count}")
        print(f"  skipped        : {a.skipped_points}")
        print(f"  distance       : {format_distance(a.distance)}")
        print(f"  elevation gain : {format_elevation(a.elevation_gain)}")
        print(f"  bounds         : lat {b.min_lat}..{b.max_lat}, lon {b.min_lon}..{b.max_lon}")
        print(f"  size           : {format_file_size(report.original_size)} -> "
              f"{format_file_size(report.minified_size)} ({report.reduction_percent:.1f}%)")


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="CurveMatch: minify and analyze GPX file(s).")
    ap.add_argument("gpx", nargs="*",
                    help="One or more GPX files. If omitted, select from the work root with fzf.")
    ap.add_argument("--out-dir", default=None,
                    help="Write min_<name> files here (default: beside each input, "
                         "or the configured out_root for fzf selections).")
    ap.add_argument("--work-root", default=None,
                    help="Where to look for GPX files when none are given (default: from config).")
    fmt = ap.add_mutually_exclusive_group()
    fmt.add_argument("--tsv", action="store_true",
                     help="Print tab-separated output (good for piping).")
    fmt.add_argument("--json", action="store_true",
                     help="Print one JSON object per line.")
    ap.add_argument("--pretty", action="store_true", default=None,
                    help="Indent the minified GPX (default: from config, else compact).")

    args = ap.parse_args(argv)

    try:
        cfg = load_config()
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    pretty = cfg.minify.pretty if args.pretty is None else args.pretty
    out_dir = Path(args.out_dir).expanduser() if args.out_dir else None

    if args.gpx:
        selected = [Path(p).expanduser() for p in args.gpx]
    else:
        work_root = Path(args.work_root).expanduser() if args.work_root else cfg.paths.work_root
        gpx_files = list_gpx_files(work_root)
        if not gpx_files:
            print(f"No GPX files found under {work_root}", file=sys.stderr)
            return 1
        try:
            selected = fzf_select_paths(gpx_files, header="Select GPX file(s) to minify:", multi=True)
        except CurveMatchError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 2
        if out_dir is None:
            out_dir = cfg.paths.out_root

    if args.tsv:
        print(TSV_HEADER)

    failures = 0
    for path in selected:
        if not path.is_file():
            warn(f"Skipping (not a file): {path}")
            failures += 1
            continue
        try:
            report = minify_gpx_file(
                path,
                minified_path(path, out_dir),
                creator=cfg.minify.creator,
                pretty=pretty,
            )
        except MalformedInputError as e:
            warn(f"{path}: {e}")
            failures += 1
            continue
        except OSError as e:
            warn(f"{path}: {e}")
            failures += 1
            continue

        if args.json:
            print(json.dumps({"file": str(path), **report.to_dict()}))
        else:
            print_report(path, report, tsv=args.tsv)

    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
