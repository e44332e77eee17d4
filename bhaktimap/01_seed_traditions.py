from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
from tqdm import tqdm

from bhaktimap.utils import Paths, ensure_dir, write_json, is_nullish
from bhaktimap._api.contributions import build_tradition_document, geocode_places, validate_contribution
from bhaktimap._api.db import get_store
from bhaktimap._api.geocode import NominatimGeocoder


# Columns that hold JSON when the export is a CSV.
JSON_COLUMNS = ["places", "texts"]
TRUTHY = {"true", "1", "yes", "y"}


def load_records(path: Path) -> List[Dict[str, Any]]:
    """
    Read a records export: .json (array), .jsonl or .csv.
    CSV: blank cells become None and JSON-encoded cells are decoded.
    """
    suffix = path.suffix.lower()
    if suffix == ".jsonl":
        lines = path.read_text(encoding="utf-8").splitlines()
        return [json.loads(ln) for ln in lines if ln.strip()]
    elif suffix == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON array of records in {path}")
        return data
    elif suffix == ".csv":
        # Read everything as string to avoid dtype chaos.
        df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")
        for c in JSON_COLUMNS:
            if c in df.columns:
                df[c] = df[c].apply(lambda x: json.loads(x) if isinstance(x, str) and x.strip() else None)
        if "sufi" in df.columns:
            df["sufi"] = df["sufi"].apply(lambda x: str(x).strip().lower() in TRUTHY)
    else:
        raise ValueError(f"Unsupported input format: {path.suffix} (use .json, .jsonl or .csv)")

    records: List[Dict[str, Any]] = []
    for row in df.to_dict(orient="records"):
        records.append({k: (None if not isinstance(v, (list, dict)) and is_nullish(v) else v) for k, v in row.items()})
    return records


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--input", required=True, help="Records export (.json, .jsonl or .csv)")
    ap.add_argument("--root", default=".", help="Project root (default .)")
    ap.add_argument("--backend", default=None, help="Store backend override: mongo | json")
    ap.add_argument("--no-geocode", action="store_true", help="Keep places without coords as they are")
    ap.add_argument("--dry-run", action="store_true", help="Validate and geocode, but do not insert")
    args = ap.parse_args()

    paths = Paths(root=Path(args.root).resolve())
    ensure_dir(paths.logs)

    in_path = Path(args.input).resolve()
    if not in_path.exists():
        raise FileNotFoundError(f"Input not found: {in_path}")

    records = load_records(in_path)
    geocoder = None if args.no_geocode else NominatimGeocoder()
    store = None if args.dry_run else get_store(args.backend)
    if store is not None:
        store.ensure_indexes()

    report: Dict[str, Any] = {"input": str(in_path), "rows": len(records), "inserted": 0, "rejected": []}

    for i, rec in enumerate(tqdm(records, desc="seed")):
        errors = validate_contribution(rec)
        if errors:
            saint = rec.get("saint") if isinstance(rec, dict) else None
            report["rejected"].append({"row": i, "saint": saint, "errors": errors})
            continue
        places = geocode_places(rec.get("places"), geocoder)
        doc = build_tradition_document(rec, places)
        if store is not None:
            store.insert(doc)
        report["inserted"] += 1

    out_report = paths.logs / "seed_report.json"
    write_json(out_report, report)

    print(f"Wrote: {out_report}")
    print(f"Rows: {report['rows']} | Inserted: {report['inserted']} | Rejected: {len(report['rejected'])}"
          + (" (dry run)" if args.dry_run else ""))


if __name__ == "__main__":
    main()
