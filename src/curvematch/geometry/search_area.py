#!/usr/bin/env python3
"""
search_area.py: describe a rectangular search region

Takes two opposite corners (any order), checks the area against the
configured maximum and prints the region as JSON for the matching service.

Usage:
  curvematch-region 46.00 7.00 46.20 7.30
  curvematch-region 46.00 7.00 46.20 7.30 --max-area 200 --feature
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Optional

from curvematch.config import load_config
from curvematch.errors import ConfigError, RegionTooLargeError
from curvematch.geometry.region import (
    Bounds,
    bounds_to_feature,
    bounds_to_polygon,
    check_area,
    point_to_wkt,
)


def describe_region(bounds: Bounds, max_area_km2: float, *, feature: bool = False) -> dict:
    """
    Interchange dict for a search region.

    Raises:
      RegionTooLargeError if the region exceeds max_area_km2.
    """
    area = check_area(bounds, max_area_km2)
    center = ((bounds.south + bounds.north) / 2, (bounds.west + bounds.east) / 2)
    return {
        "bounds": bounds.to_dict(),
        "areaKm2": round(area, 1),
        "center": point_to_wkt(center),
        "geometry": bounds_to_feature(bounds) if feature else bounds_to_polygon(bounds),
    }


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="CurveMatch: bounds, area and GeoJSON for a search rectangle.")
    ap.add_argument("lat1", type=float)
    ap.add_argument("lon1", type=float)
    ap.add_argument("lat2", type=float)
    ap.add_argument("lon2", type=float)
    ap.add_argument("--max-area", type=float, default=None,
                    help="Maximum area in km² (default: from config, else 500).")
    ap.add_argument("--feature", action="store_true",
                    help="Wrap the polygon in a GeoJSON Feature.")

    args = ap.parse_args(argv)

    try:
        cfg = load_config()
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    max_area = args.max_area if args.max_area is not None else cfg.region.max_area_km2
    bounds = Bounds.from_corners((args.lat1, args.lon1), (args.lat2, args.lon2))

    try:
        doc = describe_region(bounds, max_area, feature=args.feature)
    except RegionTooLargeError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(json.dumps(doc, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
