"""Shared fixtures: a small Berlin/Brandenburg/Flensburg dataset built in memory."""

from __future__ import annotations

import pytest

from mitgliederkarte.ingestion.loader import parse_feature_collection, parse_records
from mitgliederkarte.pipeline import build_dataset

SQUARE = {
    "type": "Polygon",
    "coordinates": [[[13.0, 52.3], [13.1, 52.3], [13.1, 52.4], [13.0, 52.4], [13.0, 52.3]]],
}


def make_feature(rs, gen, bez, population, density=100.0, zip_code=None):
    destatis = {"population": population, "population_density": density}
    if zip_code is not None:
        destatis["zip"] = zip_code
    return {
        "type": "Feature",
        "geometry": SQUARE,
        "properties": {"RS": rs, "GEN": gen, "BEZ": bez, "destatis": destatis},
    }


@pytest.fixture
def gemeinden_geojson() -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            make_feature("11000000", "Berlin", "Stadt", 3_645_000, 4090.5, "10115"),
            make_feature("120540000000", "Potsdam", "Kreisfreie Stadt", 180_000, 954.2, 14467),
            make_feature("120690000001", "Werder (Havel)", "Stadt", 27_000, 230.0, "14542"),
            make_feature("120690000002", "Teltow", "Stadt", 27_500, 1267.0, "14513"),
            make_feature("120690000003", "Kleinmachnow", "Gemeinde", 20_000, 1680.0, "14532"),
            make_feature("120690000004", "Stahnsdorf", "Gemeinde", 15_000, 300.0, "14532"),
            make_feature("010010000000", "Flensburg", "Stadt", 90_000, 1595.0, "24937"),
        ],
    }


@pytest.fixture
def landkreise_geojson() -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            make_feature("11000", "Berlin", "Kreisfreie Stadt", 3_645_000, 4090.5),
            make_feature("12054", "Potsdam", "Kreisfreie Stadt", 180_000, 954.2),
            make_feature("12069", "Potsdam-Mittelmark", "Landkreis", 220_000, 85.0),
            make_feature("01001", "Flensburg", "Kreisfreie Stadt", 90_000, 1595.0),
        ],
    }


@pytest.fixture
def members_mapping() -> dict:
    """Simulates the membership export, keyed by postal code."""
    return {
        "10115": {"note": "Stadt Berlin", "Voltis": 42},
        "14467": {"note": "Stadt Potsdam", "Voltis": 10},
        "14532": {"note": "Gemeinde Kleinmachnow", "Voltis": 3},
        "99999": {"note": "Stadt_Teltow", "Voltis": 5},
        "00000": {"note": "Stadt Nirgendwo", "Voltis": 7},
        "24937": {"note": "Stadt Flensburg", "Voltis": 0},
    }


@pytest.fixture
def gemeinden(gemeinden_geojson):
    return parse_feature_collection("Gemeinden", gemeinden_geojson)


@pytest.fixture
def landkreise(landkreise_geojson):
    return parse_feature_collection("Landkreise", landkreise_geojson)


@pytest.fixture
def records(members_mapping):
    return parse_records(members_mapping)


@pytest.fixture
def dataset(gemeinden, landkreise, records):
    return build_dataset({"Gemeinden": gemeinden, "Landkreise": landkreise}, records)
