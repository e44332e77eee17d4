from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol

from bhaktimap.utils import is_nullish
from .geocode import GeocodeResult
from .markers import PLACE_CATEGORIES, place_coords

logger = logging.getLogger(__name__)

REQUIRED_TEXT_FIELDS = ("saint", "tradition", "period", "traditionType", "gender", "language", "philosophy")
OPTIONAL_TEXT_FIELDS = ("school", "presidingDeity")
YEAR_FIELDS = ("startYear", "endYear")


class Geocoder(Protocol):
    def resolve(self, place_name: str) -> Optional[GeocodeResult]: ...


# --------- Validation ---------

def _place_errors(category: str, place: Any, label: str) -> List[str]:
    if not isinstance(place, Mapping):
        return [f'Place "{label}" must be an object with a "name"']
    errors: List[str] = []
    name = place.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append(f'Place "{label}" requires a non-empty "name"')
    coords = place.get("coords")
    if coords is not None and place_coords(place) is None:
        errors.append(f'Place "{label}" has invalid "coords" (expected [latitude, longitude])')
    region = place.get("region")
    if region is not None and not isinstance(region, str):
        errors.append(f'Place "{label}" has a non-string "region"')
    return errors


def validate_contribution(body: Any) -> List[str]:
    """Field-level problems with a contribution body; empty when it is acceptable."""
    if not isinstance(body, Mapping):
        return ["Request body must be a JSON object"]

    errors: List[str] = []

    for f in REQUIRED_TEXT_FIELDS:
        v = body.get(f)
        if not isinstance(v, str) or not v.strip():
            errors.append(f'Field "{f}" is required and must be a non-empty string')

    for f in OPTIONAL_TEXT_FIELDS:
        v = body.get(f)
        if v is not None and not isinstance(v, str):
            errors.append(f'Field "{f}" must be a string')

    for f in YEAR_FIELDS:
        v = body.get(f)
        if is_nullish(v):
            continue
        if isinstance(v, bool):
            errors.append(f'Field "{f}" must be an integer year')
            continue
        try:
            int(str(v).strip())
        except ValueError:
            errors.append(f'Field "{f}" must be an integer year')

    texts = body.get("texts")
    if texts is not None and not isinstance(texts, str):
        if not isinstance(texts, list) or not all(isinstance(t, str) for t in texts):
            errors.append('Field "texts" must be a string or a list of strings')

    places = body.get("places")
    if not isinstance(places, Mapping):
        errors.append('Field "places" is required and must be an object')
        return errors

    for category, value in places.items():
        if category not in PLACE_CATEGORIES:
            errors.append(
                f'Unknown place category "{category}" (expected one of: {", ".join(PLACE_CATEGORIES)})'
            )
            continue
        if value is None:
            continue
        if isinstance(value, list):
            for i, place in enumerate(value):
                errors.extend(_place_errors(category, place, f"{category}[{i}]"))
        else:
            errors.extend(_place_errors(category, value, category))

    return errors


# --------- Geocoding ---------

def _resolve_place(place: Mapping[str, Any], geocoder: Optional[Geocoder]) -> Optional[Dict[str, Any]]:
    name = place.get("name")
    if not isinstance(name, str) or not name.strip():
        return None
    name = name.strip()

    coords = place_coords(place)
    region = place.get("region") or None

    if coords is None and geocoder is not None:
        found = geocoder.resolve(name)
        if found is not None:
            coords = [found.latitude, found.longitude]
            region = region or found.region or None

    return {"name": name, "coords": coords, "region": region}


def geocode_places(places: Optional[Mapping[str, Any]], geocoder: Optional[Geocoder]) -> Dict[str, Any]:
    """
    Resolve coordinates for every place that lacks them, one lookup at a
    time. A failed lookup leaves that place without coords and moves on.
    """
    places = places or {}
    out: Dict[str, Any] = {}

    for category in PLACE_CATEGORIES:
        value = places.get(category)
        if not value:
            out[category] = None
            continue

        if isinstance(value, list):
            resolved = [p for p in (_resolve_place(v, geocoder) for v in value if isinstance(v, Mapping)) if p]
            out[category] = resolved or None
        elif isinstance(value, Mapping):
            out[category] = _resolve_place(value, geocoder)
        else:
            out[category] = None

    pending = [
        c for c, v in out.items()
        for p in (v if isinstance(v, list) else [v])
        if p and p["coords"] is None
    ]
    if pending:
        logger.warning("Places left without coordinates in: %s", ", ".join(sorted(set(pending))))
    return out


# --------- Document ---------

def _opt_text(v: Any) -> Optional[str]:
    if is_nullish(v):
        return None
    return str(v).strip()


def _texts(v: Any) -> List[str]:
    if isinstance(v, list):
        return [str(t).strip() for t in v if not is_nullish(t)]
    if is_nullish(v):
        return []
    return [str(v).strip()]


def build_tradition_document(
    body: Mapping[str, Any],
    places: Dict[str, Any],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    doc: Dict[str, Any] = {f: str(body[f]).strip() for f in REQUIRED_TEXT_FIELDS}
    for f in OPTIONAL_TEXT_FIELDS + YEAR_FIELDS:
        doc[f] = _opt_text(body.get(f))
    doc.update({
        "places": places,
        "sufi": bool(body.get("sufi")),
        "texts": _texts(body.get("texts")),
        "contributedAt": now,
        "updatedAt": now,
    })
    return doc
