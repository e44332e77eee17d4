from __future__ import annotations

import argparse
import json
import requests

from bhaktimap._api.filters import FILTER_KEYS


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--host", default="http://localhost:3000")
    ap.add_argument("--place-type", default=None, help="birth | enlightenment | samadhi | temple | influence")
    ap.add_argument("--k", type=int, default=20, help="Markers to print")
    for key in FILTER_KEYS:
        ap.add_argument(f"--{key}", default=None)
    args = ap.parse_args()

    params = {k: getattr(args, k) for k in FILTER_KEYS if getattr(args, k)}
    if args.place_type:
        params["placeType"] = args.place_type

    r = requests.get(args.host.rstrip("/") + "/api/traditions", params=params, timeout=60)
    r.raise_for_status()
    markers = r.json()

    print("params:", params)
    print("markers:", len(markers))
    print("-" * 80)
    for m in markers[: max(0, args.k)]:
        print(f'{m["saint"]} | {m["type"]}: {m["name"]}')
        print("   tradition:", m.get("tradition", ""))
        print("   language:", m.get("language", ""))
        print("   coords:", m.get("coords"))
        print()

    print(json.dumps(markers[:3], ensure_ascii=False, default=str)[:2000])


if __name__ == "__main__":
    main()
