# curvematch/analyze/track.py
"""
Track analysis and minification for CurveMatch

One pass over a GPX document:
  - validates the document structure
  - rebuilds a minimal GPX 1.1 tree (track names, lat/lon, elevation only)
  - accumulates point count, Haversine distance, positive elevation gain and
    the bounding box

Distances use a sphere of radius 6,371,000 m (about 0.3% off the WGS84
ellipsoid), the same Earth model as curvematch.geometry.region.

Everything here is pure: no file access except analyze_track(), no logging,
no module-level state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional
from xml.etree import ElementTree as ET

from haversine import Unit, haversine

from curvematch.config import DEFAULT_CREATOR
from curvematch.formats.gpx import (
    GpxSource,
    child_text,
    iter_children,
    new_gpx_root,
    parse_gpx,
    serialize_gpx,
)
from curvematch.util.format import number_text

EARTH_RADIUS_M = 6_371_000.0


@dataclass(frozen=True)
class TrackPoint:
    lat: float
    lon: float
    ele: Optional[float] = None


@dataclass(frozen=True)
class TrackBounds:
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def to_dict(self) -> dict:
        return {
            "minLat": self.min_lat,
            "maxLat": self.max_lat,
            "minLon": self.min_lon,
            "maxLon": self.max_lon,
        }


# Reported when a document has no usable points. Indistinguishable from a
# point at (0, 0); check GpxAnalysis.has_points.
EMPTY_BOUNDS = TrackBounds(0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class GpxAnalysis:
    """
    Aggregate metrics for one GPX document.

    distance and elevation_gain are whole meters. skipped_points counts
    <trkpt> elements left out because of missing or invalid coordinates.
    """
    point_count: int
    distance: int
    elevation_gain: int
    bounds: TrackBounds
    skipped_points: int = 0
    track_count: int = 0
    segment_count: int = 0

    @property
    def has_points(self) -> bool:
        return self.point_count > 0

    def to_dict(self) -> dict:
        return {
            "pointCount": self.point_count,
            "distance": self.distance,
            "elevationGain": self.elevation_gain,
            "bounds": self.bounds.to_dict(),
            "skippedPoints": self.skipped_points,
        }


@dataclass(frozen=True)
class MinifyResult:
    content: str
    analysis: GpxAnalysis


def haversine_m(p0: TrackPoint, p1: TrackPoint) -> float:
    """Great-circle distance in meters on a 6,371 km sphere."""
    # Unit.RADIANS gives the central angle, independent of the library's own radius.
    # check=False: out-of-range coordinates are measured as written.
    angle = haversine((p0.lat, p0.lon), (p1.lat, p1.lon), unit=Unit.RADIANS, check=False)
    return angle * EARTH_RADIUS_M


def step_metrics(p0: TrackPoint, p1: TrackPoint) -> tuple[float, float]:
    """
    Distance (m) and elevation delta (m) from p0 to p1.

    The delta is 0 unless both points carry an elevation.
    """
    if p0.ele is not None and p1.ele is not None:
        return haversine_m(p0, p1), p1.ele - p0.ele
    return haversine_m(p0, p1), 0.0


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _parse_float(text: Optional[str]) -> Optional[float]:
    if text is None:
        return None
    try:
        v = float(text.strip())
    except ValueError:
        return None
    return v if math.isfinite(v) else None


def parse_trackpoint(trkpt: ET.Element) -> Optional[TrackPoint]:
    """
    Build a TrackPoint from a <trkpt> element.

    Returns None when lat or lon is missing or not a finite number. Values
    outside ±90 / ±180 are kept as written. An unparsable <ele> is treated
    as absent.
    """
    lat = _parse_float(trkpt.get("lat"))
    lon = _parse_float(trkpt.get("lon"))
    if lat is None or lon is None:
        return None
    return TrackPoint(lat=lat, lon=lon, ele=_parse_float(child_text(trkpt, "ele")))


@dataclass
class _Totals:
    """Running sums for one document; lives for a single minify call."""
    point_count: int = 0
    skipped: int = 0
    distance: float = 0.0
    gain: float = 0.0
    min_lat: float = math.inf
    max_lat: float = -math.inf
    min_lon: float = math.inf
    max_lon: float = -math.inf
    last: Optional[TrackPoint] = field(default=None)

    def add(self, pt: TrackPoint) -> None:
        self.min_lat = min(self.min_lat, pt.lat)
        self.max_lat = max(self.max_lat, pt.lat)
        self.min_lon = min(self.min_lon, pt.lon)
        self.max_lon = max(self.max_lon, pt.lon)

        # The previous point carries over segment and track boundaries.
        if self.last is not None:
            dist, delta = step_metrics(self.last, pt)
            self.distance += dist
            if delta > 0:
                self.gain += delta

        self.last = pt
        self.point_count += 1

    def bounds(self) -> TrackBounds:
        if self.point_count == 0:
            return EMPTY_BOUNDS
        return TrackBounds(self.min_lat, self.max_lat, self.min_lon, self.max_lon)


def _walk(root: ET.Element, out_root: ET.Element, totals: _Totals) -> tuple[int, int]:
    """Copy tracks/segments/points of `root` into `out_root`, updating totals."""
    n_tracks = 0
    n_segments = 0

    for trk_idx, trk in enumerate(iter_children(root, "trk"), start=1):
        out_trk = ET.Element("trk")
        name = ET.SubElement(out_trk, "name")
        name.text = child_text(trk, "name") or f"Track {trk_idx}"

        for seg in iter_children(trk, "trkseg"):
            out_seg = ET.Element("trkseg")

            for trkpt in iter_children(seg, "trkpt"):
                pt = parse_trackpoint(trkpt)
                if pt is None:
                    totals.skipped += 1
                    continue
                totals.add(pt)

                out_pt = ET.SubElement(out_seg, "trkpt", {
                    # keep the source text so coordinates round-trip exactly
                    "lat": trkpt.get("lat").strip(),
                    "lon": trkpt.get("lon").strip(),
                })
                if pt.ele is not None:
                    ET.SubElement(out_pt, "ele").text = number_text(pt.ele)

            if len(out_seg):
                out_trk.append(out_seg)
                n_segments += 1

        if len(out_trk) > 1:  # more than just <name>
            out_root.append(out_trk)
            n_tracks += 1

    return n_tracks, n_segments


def minify_gpx_content(
        content: GpxSource, *,
        creator: Optional[str] = None,
        pretty: bool = False,
) -> MinifyResult:
    """
    Parse a GPX document, reduce it, and analyze it in one pass.

    The reduced document keeps, per track, a <name> (the original or
    "Track N") and the segments' points with lat/lon and <ele>. Timestamps,
    extensions, metadata, waypoints and routes are dropped, as are empty
    segments and tracks.

    Points with missing or invalid coordinates are skipped and counted in
    GpxAnalysis.skipped_points; they never abort processing.

    Raises:
      MalformedInputError if the document is not well-formed GPX.
    """
    root = parse_gpx(content)

    out_root = new_gpx_root(creator or DEFAULT_CREATOR)
    totals = _Totals()
    n_tracks, n_segments = _walk(root, out_root, totals)

    analysis = GpxAnalysis(
        point_count=totals.point_count,
        distance=_round_half_up(totals.distance),
        elevation_gain=_round_half_up(totals.gain),
        bounds=totals.bounds(),
        skipped_points=totals.skipped,
        track_count=n_tracks,
        segment_count=n_segments,
    )
    return MinifyResult(content=serialize_gpx(out_root, pretty=pretty), analysis=analysis)


def extract_trackpoints(root: ET.Element) -> list[TrackPoint]:
    """All valid trackpoints of a parsed GPX document, in document order."""
    pts: list[TrackPoint] = []
    for trk in iter_children(root, "trk"):
        for seg in iter_children(trk, "trkseg"):
            for trkpt in iter_children(seg, "trkpt"):
                pt = parse_trackpoint(trkpt)
                if pt is not None:
                    pts.append(pt)
    return pts


def analyze_points(points: Iterable[TrackPoint]) -> GpxAnalysis:
    """Aggregate already-extracted points the same way minify_gpx_content does."""
    totals = _Totals()
    for pt in points:
        totals.add(pt)
    return GpxAnalysis(
        point_count=totals.point_count,
        distance=_round_half_up(totals.distance),
        elevation_gain=_round_half_up(totals.gain),
        bounds=totals.bounds(),
    )


def analyze_track(gpx_path: Path) -> GpxAnalysis:
    """Analyze a GPX file on disk without writing anything."""
    return minify_gpx_content(Path(gpx_path).read_bytes()).analysis
