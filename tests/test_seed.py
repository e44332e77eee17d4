import json
import runpy
import sys
from pathlib import Path

import pytest

SEED_SCRIPT = Path(__file__).resolve().parents[1] / "bhaktimap" / "01_seed_traditions.py"


@pytest.fixture(scope="module")
def seed():
    return runpy.run_path(str(SEED_SCRIPT), run_name="seed_traditions")


ROWS = [
    {
        "saint": "Mirabai",
        "tradition": "Vaishnava",
        "period": "16th century",
        "traditionType": "Saguna",
        "gender": "Female",
        "language": "Rajasthani, Braj Bhasha",
        "philosophy": "Devotion to Krishna",
        "startYear": 1498,
        "places": {"birth": {"name": "Kudki", "coords": [26.2, 74.1]}},
    },
    {"saint": "Incomplete"},
]


def test_load_json_and_jsonl(tmp_path, seed):
    p = tmp_path / "rows.json"
    p.write_text(json.dumps(ROWS), encoding="utf-8")
    assert seed["load_records"](p) == ROWS

    p = tmp_path / "rows.jsonl"
    p.write_text("\n".join(json.dumps(r) for r in ROWS) + "\n\n", encoding="utf-8")
    assert seed["load_records"](p) == ROWS


def test_load_json_requires_array(tmp_path, seed):
    p = tmp_path / "rows.json"
    p.write_text(json.dumps({"saint": "Mirabai"}), encoding="utf-8")
    with pytest.raises(ValueError):
        seed["load_records"](p)


def test_load_csv_decodes_json_columns(tmp_path, seed):
    p = tmp_path / "rows.csv"
    p.write_text(
        "saint,sufi,school,texts,places\n"
        'Bulleh Shah,true,,"[""Kafis""]","{""birth"": {""name"": ""Uch""}}"\n'
        "Kabir,no,,,\n",
        encoding="utf-8",
    )
    rows = seed["load_records"](p)
    assert rows[0]["sufi"] is True
    assert rows[0]["school"] is None
    assert rows[0]["texts"] == ["Kafis"]
    assert rows[0]["places"] == {"birth": {"name": "Uch"}}
    assert rows[1]["sufi"] is False
    assert rows[1]["places"] is None


def test_unsupported_format(tmp_path, seed):
    with pytest.raises(ValueError):
        seed["load_records"](tmp_path / "rows.xlsx")


def test_main_inserts_valid_rows_and_reports_rejects(tmp_path, seed, monkeypatch, capsys):
    data_file = tmp_path / "data" / "traditions.json"
    monkeypatch.setenv("DATA_FILE", str(data_file))
    src = tmp_path / "rows.json"
    src.write_text(json.dumps(ROWS), encoding="utf-8")

    monkeypatch.setattr(sys, "argv", [
        "01_seed_traditions.py", "--input", str(src), "--root", str(tmp_path),
        "--backend", "json", "--no-geocode",
    ])
    seed["main"]()

    stored = json.loads(data_file.read_text(encoding="utf-8"))
    assert [r["saint"] for r in stored] == ["Mirabai"]
    assert stored[0]["startYear"] == "1498"
    assert stored[0]["places"]["birth"]["coords"] == [26.2, 74.1]

    report = json.loads((tmp_path / "logs" / "seed_report.json").read_text(encoding="utf-8"))
    assert report["rows"] == 2
    assert report["inserted"] == 1
    assert report["rejected"][0]["row"] == 1
    assert report["rejected"][0]["saint"] == "Incomplete"
    assert "Inserted: 1" in capsys.readouterr().out
