import os
from pathlib import Path

import pytest


@pytest.fixture
def sample_gpx_path() -> Path:
    return Path(__file__).parent / "data" / "sample.gpx"


@pytest.fixture
def sample_gpx_bytes(sample_gpx_path) -> bytes:
    return sample_gpx_path.read_bytes()


@pytest.fixture(autouse=True)
def _clean_curvematch_env(monkeypatch):
    # keep a developer's CURVEMATCH_* overrides out of the tests
    for name in list(os.environ):
        if name.startswith("CURVEMATCH_"):
            monkeypatch.delenv(name)


def gpx_doc(*tracks: str, ns: str = 'xmlns="http://www.topografix.com/GPX/1/1"') -> str:
    """Wrap <trk> snippets in a minimal GPX document."""
    body = "".join(tracks)
    return f'<?xml version="1.0" encoding="UTF-8"?><gpx version="1.1" creator="test" {ns}>{body}</gpx>'


def trkseg(*points: tuple) -> str:
    """<trkseg> from (lat, lon) or (lat, lon, ele) tuples."""
    out = []
    for p in points:
        ele = f"<ele>{p[2]}</ele>" if len(p) > 2 else ""
        out.append(f'<trkpt lat="{p[0]}" lon="{p[1]}">{ele}<time>2025-01-01T00:00:00Z</time></trkpt>')
    return f"<trkseg>{''.join(out)}</trkseg>"
