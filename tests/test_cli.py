import json
import sys

import pytest

import cli


def _run(monkeypatch, tmp_path, birth):
    src = tmp_path / "birth.json"
    out = tmp_path / "chart.json"
    src.write_text(json.dumps(birth), encoding="utf-8")
    monkeypatch.setattr(sys, "argv", ["cli.py", str(src), str(out)])
    cli.main()
    return json.loads(out.read_text(encoding="utf-8"))


def test_cli_writes_chart(monkeypatch, tmp_path):
    data = _run(monkeypatch, tmp_path, {
        "date": "1977-05-17", "time": "11:29", "latitude": 49.2827, "longitude": -123.113952,
    })
    assert data["chart_id"].startswith("cht_")
    assert len(data["bodies"]) == 15
    assert data["house_system"] == "Placidus"


def test_cli_exits_on_bad_offset(monkeypatch, tmp_path):
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, tmp_path, {
            "date": "1977-05-17", "time": "11:29", "latitude": 49.2827, "longitude": -123.113952,
            "utc_offset": "five",
        })
    assert exc.value.code == 2
