from __future__ import annotations

import argparse
from pathlib import Path

from bhaktimap.compound import parse_compound
from bhaktimap.utils import write_json, is_nullish
from bhaktimap.vocab import LANGUAGE, TRADITION
from bhaktimap._api.db import get_store
from bhaktimap._api.traditions_api import OPTION_FIELDS, build_filter_options


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--out", default="data/filter_options.json")
    ap.add_argument("--backend", default=None, help="Store backend override: mongo | json")
    ap.add_argument("--show-splits", action="store_true", help="Also record how each raw value was split")
    args = ap.parse_args()

    store = get_store(args.backend)
    options = build_filter_options(store).model_dump()

    payload = {"options": options}
    if args.show_splits:
        raw = store.distinct_values(OPTION_FIELDS)
        payload["splits"] = {
            field: {v: parse_compound(kind, v) for v in raw.get(field, []) if not is_nullish(v)}
            for field, kind in (("tradition", TRADITION), ("language", LANGUAGE))
        }

    out_path = Path(args.out).resolve()
    write_json(out_path, payload)
    print(f"Wrote: {out_path}")
    for k, values in options.items():
        print(k, "count:", len(values))


if __name__ == "__main__":
    main()
