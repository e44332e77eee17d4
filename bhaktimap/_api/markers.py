from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


PLACE_CATEGORIES = ("birth", "enlightenment", "samadhi", "temple", "influence")

LEGACY_MARKER_FIELDS = ("id", "name", "coords", "type", "saint", "tradition", "popup", "updatedAt")


# --------- Place slots ---------

@dataclass(frozen=True)
class SinglePlace:
    place: Mapping[str, Any]


@dataclass(frozen=True)
class ManyPlaces:
    places: Tuple[Mapping[str, Any], ...]


@dataclass(frozen=True)
class EmptySlot:
    pass


PlaceSlot = Union[SinglePlace, ManyPlaces, EmptySlot]


def place_slot(value: Any) -> PlaceSlot:
    """Classify one entry of a record's places map."""
    if isinstance(value, list):
        places = tuple(p for p in value if isinstance(p, Mapping))
        return ManyPlaces(places) if places else EmptySlot()
    if isinstance(value, Mapping):
        return SinglePlace(value)
    return EmptySlot()


def slot_places(slot: PlaceSlot) -> Tuple[Mapping[str, Any], ...]:
    if isinstance(slot, SinglePlace):
        return (slot.place,)
    if isinstance(slot, ManyPlaces):
        return slot.places
    if isinstance(slot, EmptySlot):
        return ()
    raise TypeError(f"Not a place slot: {slot!r}")


def place_coords(place: Mapping[str, Any]) -> Optional[List[float]]:
    coords = place.get("coords")
    if not isinstance(coords, (list, tuple)) or len(coords) != 2:
        return None
    try:
        return [float(coords[0]), float(coords[1])]
    except (TypeError, ValueError):
        return None


# --------- Projection ---------

def marker_id(record_id: Any, category: str, index: int) -> str:
    return f"{record_id}_{category}_{index}"


def project(record: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """
    One marker per geocoded place of a record. Places without a coordinate
    pair are left off the map.
    """
    places = record.get("places")
    if not isinstance(places, Mapping):
        return []

    record_id = record.get("_id")
    saint = record.get("saint")
    markers: List[Dict[str, Any]] = []

    for category, value in places.items():
        for index, place in enumerate(slot_places(place_slot(value))):
            coords = place_coords(place)
            if coords is None:
                continue
            name = place.get("name")
            markers.append({
                "id": marker_id(record_id, category, index),
                "name": name,
                "coords": coords,
                "region": place.get("region"),
                "type": category,
                "saint": saint,
                "tradition": record.get("tradition"),
                "traditionType": record.get("traditionType"),
                "gender": record.get("gender"),
                "period": record.get("period"),
                "startYear": record.get("startYear"),
                "language": record.get("language"),
                "philosophy": record.get("philosophy"),
                "texts": record.get("texts") or [],
                "presidingDeity": record.get("presidingDeity") or None,
                "popup": f"{name} — {category} of {saint}",
                "updatedAt": record.get("updatedAt"),
                "fullData": record,
            })
    return markers


def legacy_marker(marker: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: marker.get(k) for k in LEGACY_MARKER_FIELDS}
