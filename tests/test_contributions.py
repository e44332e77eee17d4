from datetime import datetime, timezone

from bhaktimap._api.contributions import (
    build_tradition_document,
    geocode_places,
    validate_contribution,
)
from bhaktimap._api.geocode import GeocodeResult


class FakeGeocoder:
    def __init__(self, known=None):
        self.known = known or {}
        self.calls = []

    def resolve(self, place_name):
        self.calls.append(place_name)
        return self.known.get(place_name)


DEHU = GeocodeResult(18.7167, 73.7667, "Dehu, Haveli, Pune, Maharashtra, India", "Haveli")


def valid_body(**kw):
    body = {
        "saint": " Tukaram ",
        "tradition": "Varkari",
        "period": "17th century",
        "traditionType": "Saguna",
        "gender": "Male",
        "language": "Marathi",
        "philosophy": "Devotion to Vitthal",
        "places": {"birth": {"name": "Dehu"}},
    }
    body.update(kw)
    return body


# --------- validation ---------

def test_valid_body_has_no_errors():
    assert validate_contribution(valid_body()) == []


def test_missing_required_fields():
    errors = validate_contribution({"saint": "  ", "places": {}})
    assert 'Field "saint" is required and must be a non-empty string' in errors
    assert 'Field "philosophy" is required and must be a non-empty string' in errors
    assert len(errors) == 7


def test_places_must_be_object():
    errors = validate_contribution(valid_body(places=["Dehu"]))
    assert errors == ['Field "places" is required and must be an object']
    errors = validate_contribution(valid_body(places=None))
    assert errors == ['Field "places" is required and must be an object']


def test_non_object_body():
    assert validate_contribution(["not", "a", "dict"]) == ["Request body must be a JSON object"]


def test_place_shape_errors():
    errors = validate_contribution(valid_body(places={
        "birth": "Dehu",
        "temple": [{"name": "Pandharpur", "coords": [1, 2, 3]}, {"coords": [1, 2]}],
        "ashram": {"name": "Somewhere"},
    }))
    assert 'Place "birth" must be an object with a "name"' in errors
    assert 'Place "temple[0]" has invalid "coords" (expected [latitude, longitude])' in errors
    assert 'Place "temple[1]" requires a non-empty "name"' in errors
    assert any(e.startswith('Unknown place category "ashram"') for e in errors)
    assert len(errors) == 4


def test_null_place_entries_are_fine():
    assert validate_contribution(valid_body(places={"birth": None, "temple": []})) == []


def test_year_and_texts_validation():
    errors = validate_contribution(valid_body(startYear="c. 1608", endYear="1650", texts=[1, 2]))
    assert errors == [
        'Field "startYear" must be an integer year',
        'Field "texts" must be a string or a list of strings',
    ]
    assert validate_contribution(valid_body(startYear=1608, texts="Abhanga Gatha")) == []


# --------- geocoding ---------

def test_geocode_places_fills_missing_coords():
    geocoder = FakeGeocoder({"Dehu": DEHU})
    out = geocode_places({"birth": {"name": "Dehu"}}, geocoder)
    assert out["birth"] == {"name": "Dehu", "coords": [18.7167, 73.7667], "region": "Haveli"}
    for category in ("enlightenment", "samadhi", "temple", "influence"):
        assert out[category] is None


def test_geocode_places_keeps_given_coords_and_region():
    geocoder = FakeGeocoder({"Dehu": DEHU})
    out = geocode_places({"birth": {"name": "Dehu", "coords": [1, 2], "region": "Pune"}}, geocoder)
    assert out["birth"] == {"name": "Dehu", "coords": [1.0, 2.0], "region": "Pune"}
    assert geocoder.calls == []


def test_geocode_failure_does_not_stop_siblings():
    geocoder = FakeGeocoder({"Dehu": DEHU})
    out = geocode_places({"temple": [{"name": "Nowhere"}, {"name": "Dehu"}]}, geocoder)
    assert out["temple"] == [
        {"name": "Nowhere", "coords": None, "region": None},
        {"name": "Dehu", "coords": [18.7167, 73.7667], "region": "Haveli"},
    ]
    assert geocoder.calls == ["Nowhere", "Dehu"]


def test_geocode_places_drops_nameless_and_empty_lists():
    out = geocode_places({"temple": [{"name": " "}, {}], "birth": {"name": ""}}, FakeGeocoder())
    assert out["temple"] is None
    assert out["birth"] is None


def test_geocode_places_without_geocoder():
    out = geocode_places({"birth": {"name": "Dehu"}}, None)
    assert out["birth"] == {"name": "Dehu", "coords": None, "region": None}


# --------- document ---------

def test_build_tradition_document():
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    places = {"birth": {"name": "Dehu", "coords": [1.0, 2.0], "region": None}}
    doc = build_tradition_document(
        valid_body(school="  ", presidingDeity=" Vitthal ", sufi="yes", texts="Abhanga Gatha", startYear=" 1608 "),
        places,
        now=now,
    )
    assert doc["saint"] == "Tukaram"
    assert doc["school"] is None
    assert doc["presidingDeity"] == "Vitthal"
    assert doc["sufi"] is True
    assert doc["texts"] == ["Abhanga Gatha"]
    assert doc["startYear"] == "1608"
    assert doc["endYear"] is None
    assert doc["places"] is places
    assert doc["contributedAt"] == now
    assert doc["updatedAt"] == now


def test_build_document_defaults():
    doc = build_tradition_document(valid_body(), {})
    assert doc["sufi"] is False
    assert doc["texts"] == []
    assert doc["contributedAt"] == doc["updatedAt"]
    assert doc["contributedAt"].tzinfo is not None
