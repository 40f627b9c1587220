import json
from pathlib import Path
from types import SimpleNamespace

import pytest

import curvematch.minify.gpx_minify as gm
from curvematch.errors import MalformedInputError


def _fake_config(tmp_path: Path, **minify):
    return SimpleNamespace(
        paths=SimpleNamespace(work_root=tmp_path / "work", out_root=tmp_path / "min"),
        minify=SimpleNamespace(creator=minify.get("creator", "test creator"),
                               pretty=minify.get("pretty", False)),
        region=SimpleNamespace(max_area_km2=500.0),
        source={},
    )


def test_minify_and_analyze_sizes(sample_gpx_bytes):
    report = gm.minify_and_analyze(sample_gpx_bytes)

    assert report.original_size == len(sample_gpx_bytes)
    assert report.minified_size == len(report.content.encode("utf-8"))
    assert 0 < report.reduction_percent < 100
    assert report.reduction_percent == pytest.approx(
        (report.original_size - report.minified_size) / report.original_size * 100
    )

    d = report.to_dict()
    assert d["pointCount"] == 6
    assert d["originalSize"] == report.original_size
    assert d["bounds"]["maxLat"] == 46.005


def test_minify_and_analyze_counts_utf8_bytes():
    doc = '<gpx><trk><name>Höhenweg</name><trkseg><trkpt lat="46" lon="7"/></trkseg></trk></gpx>'

    report = gm.minify_and_analyze(doc)

    assert report.original_size == len(doc.encode("utf-8"))
    assert "Höhenweg" in report.content


def test_minify_gpx_file_writes_min_prefixed(tmp_path: Path, sample_gpx_bytes):
    src = tmp_path / "ride.gpx"
    src.write_bytes(sample_gpx_bytes)

    report = gm.minify_gpx_file(src)

    out = tmp_path / "min_ride.gpx"
    assert out.read_text(encoding="utf-8") == report.content
    assert report.analysis.point_count == 6


def test_minify_gpx_file_malformed_writes_nothing(tmp_path: Path):
    src = tmp_path / "broken.gpx"
    src.write_text("<gpx><trk>", encoding="utf-8")

    with pytest.raises(MalformedInputError):
        gm.minify_gpx_file(src, tmp_path / "out" / "broken.gpx")

    assert not (tmp_path / "out").exists()


def test_estimate_reduction(sample_gpx_bytes):
    content = sample_gpx_bytes.decode("utf-8")

    est = gm.estimate_reduction(content)

    assert 0 < est <= 1
    assert gm.estimate_reduction("") == 0.0
    assert gm.estimate_reduction('<gpx><trk><trkseg><trkpt lat="1" lon="1"/></trkseg></trk></gpx>') == 0.0


def test_main_json_and_exit_code(tmp_path: Path, sample_gpx_bytes, monkeypatch, capsys):
    good = tmp_path / "good.gpx"
    good.write_bytes(sample_gpx_bytes)
    bad = tmp_path / "bad.gpx"
    bad.write_text("not xml at all", encoding="utf-8")
    out_dir = tmp_path / "out"

    monkeypatch.setattr(gm, "load_config", lambda: _fake_config(tmp_path))

    rc = gm.main([str(bad), str(good), "--out-dir", str(out_dir), "--json"])

    assert rc == 1
    captured = capsys.readouterr()
    lines = [json.loads(line) for line in captured.out.splitlines() if line.strip()]
    assert len(lines) == 1
    assert lines[0]["file"] == str(good)
    assert lines[0]["pointCount"] == 6
    assert lines[0]["distance"] == 556
    assert "bad.gpx" in captured.err

    written = (out_dir / "min_good.gpx").read_text(encoding="utf-8")
    assert 'creator="test creator"' in written
    assert not (out_dir / "min_bad.gpx").exists()


def test_main_tsv(tmp_path: Path, sample_gpx_bytes, monkeypatch, capsys):
    good = tmp_path / "good.gpx"
    good.write_bytes(sample_gpx_bytes)
    monkeypatch.setattr(gm, "load_config", lambda: _fake_config(tmp_path))

    rc = gm.main([str(good), "--tsv"])

    assert rc == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == gm.TSV_HEADER
    fields = lines[1].split("\t")
    assert fields[:5] == [str(good), "6", "2", "556", "75"]
    assert (tmp_path / "min_good.gpx").exists()


def test_main_pretty_flag(tmp_path: Path, sample_gpx_bytes, monkeypatch):
    good = tmp_path / "good.gpx"
    good.write_bytes(sample_gpx_bytes)
    monkeypatch.setattr(gm, "load_config", lambda: _fake_config(tmp_path))

    assert gm.main([str(good), "--pretty"]) == 0

    assert "\n  <trk>" in (tmp_path / "min_good.gpx").read_text(encoding="utf-8")


def test_main_selects_with_fzf(tmp_path: Path, sample_gpx_bytes, monkeypatch, capsys):
    work = tmp_path / "work"
    work.mkdir()
    ride = work / "ride.gpx"
    ride.write_bytes(sample_gpx_bytes)
    (work / "min_old.gpx").write_bytes(sample_gpx_bytes)

    offered = []

    def fake_select(paths, *, header, multi):
        offered.extend(paths)
        return [ride]

    monkeypatch.setattr(gm, "load_config", lambda: _fake_config(tmp_path))
    monkeypatch.setattr(gm, "fzf_select_paths", fake_select)

    rc = gm.main([])

    assert rc == 0
    assert offered == [ride]
    assert (tmp_path / "min" / "min_ride.gpx").exists()
    assert "points         : 6" in capsys.readouterr().out


def test_main_no_files_in_work_root(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(gm, "load_config", lambda: _fake_config(tmp_path))

    assert gm.main(["--work-root", str(tmp_path / "empty")]) == 1


def test_main_missing_file(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(gm, "load_config", lambda: _fake_config(tmp_path))

    assert gm.main([str(tmp_path / "nope.gpx")]) == 1


def test_main_unknown_encoding_does_not_stop_batch(tmp_path: Path, sample_gpx_bytes, monkeypatch, capsys):
    bad = tmp_path / "bad.gpx"
    bad.write_bytes(b'<?xml version="1.0" encoding="bogus"?><gpx version="1.1"><trk/></gpx>')
    good = tmp_path / "good.gpx"
    good.write_bytes(sample_gpx_bytes)
    out_dir = tmp_path / "out"
    monkeypatch.setattr(gm, "load_config", lambda: _fake_config(tmp_path))

    rc = gm.main([str(bad), str(good), "--out-dir", str(out_dir), "--json"])

    assert rc == 1
    assert not (out_dir / "min_bad.gpx").exists()
    assert (out_dir / "min_good.gpx").is_file()
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["file"] == str(good)
