import json
from types import SimpleNamespace

import pytest

import curvematch.geometry.search_area as sa
from curvematch.errors import RegionTooLargeError
from curvematch.geometry.region import Bounds, rectangle_area


@pytest.fixture
def cfg_500(monkeypatch):
    monkeypatch.setattr(
        sa, "load_config",
        lambda: SimpleNamespace(region=SimpleNamespace(max_area_km2=500.0)),
    )


def test_describe_region():
    b = Bounds.from_corners((46.2, 7.3), (46.0, 7.0))

    doc = sa.describe_region(b, 1000.0)

    assert doc["bounds"] == {"west": 7.0, "south": 46.0, "east": 7.3, "north": 46.2}
    assert doc["areaKm2"] == round(rectangle_area((46.0, 7.0), (46.2, 7.3)), 1)
    assert doc["center"].startswith("POINT(7.15")
    assert len(doc["geometry"]["coordinates"][0]) == 5


def test_describe_region_too_large():
    with pytest.raises(RegionTooLargeError):
        sa.describe_region(Bounds.from_corners((46.0, 7.0), (47.0, 8.0)), 500.0)


def test_main_prints_json(cfg_500, capsys):
    rc = sa.main(["-34.1", "18.4", "-33.9", "18.6", "--feature"])

    assert rc == 0
    doc = json.loads(capsys.readouterr().out)
    assert doc["bounds"]["south"] == -34.1
    assert doc["geometry"]["type"] == "Feature"


def test_main_rejects_large_area(cfg_500, capsys):
    rc = sa.main(["46.0", "7.0", "47.0", "8.0"])

    assert rc == 1
    assert "Area too large" in capsys.readouterr().err


def test_main_max_area_flag_overrides_config(cfg_500):
    assert sa.main(["46.0", "7.0", "47.0", "8.0", "--max-area", "20000"]) == 0
