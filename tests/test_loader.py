"""Tests for reading and validating the boundary and membership files."""

from __future__ import annotations

import json

import httpx
import pytest

from mitgliederkarte.ingestion.datasets import LevelConfig
from mitgliederkarte.ingestion.loader import (
    load_feature_collection,
    load_json,
    load_records,
    parse_feature,
    parse_feature_collection,
    parse_records,
)
from mitgliederkarte.models import DatasetLoadError, MalformedFeatureError
from mitgliederkarte.pipeline import load_dataset

from conftest import make_feature


class TestParseFeature:
    def test_fields(self):
        feature = parse_feature(make_feature("11000000", "Berlin", "Stadt", 3_645_000, 4090.5, "10115"))
        assert feature.code == "11000000"
        assert feature.name == "Berlin"
        assert feature.kind_label == "Stadt"
        assert feature.population == 3_645_000
        assert feature.population_density == 4090.5
        assert feature.postal_code == "10115"
        assert feature.geometry["type"] == "Polygon"

    def test_code_keeps_leading_zero(self):
        feature = parse_feature(make_feature("01001", "Flensburg", "Kreisfreie Stadt", 90_000))
        assert feature.code == "01001"
        assert feature.postal_code is None

    def test_missing_rs(self):
        raw = make_feature("x", "Berlin", "Stadt", 1)
        del raw["properties"]["RS"]
        with pytest.raises(MalformedFeatureError):
            parse_feature(raw)

    def test_missing_population(self):
        raw = make_feature("11000000", "Berlin", "Stadt", 1)
        del raw["properties"]["destatis"]["population"]
        with pytest.raises(MalformedFeatureError):
            parse_feature(raw)

    def test_non_numeric_population(self):
        with pytest.raises(MalformedFeatureError):
            parse_feature(make_feature("11000000", "Berlin", "Stadt", "viele"))

    def test_duplicate_codes(self):
        geojson = {
            "type": "FeatureCollection",
            "features": [
                make_feature("11000", "Berlin", "Stadt", 1),
                make_feature("11000", "Berlin", "Stadt", 1),
            ],
        }
        with pytest.raises(MalformedFeatureError):
            parse_feature_collection("Landkreise", geojson)

    def test_not_a_feature_collection(self):
        with pytest.raises(DatasetLoadError):
            parse_feature_collection("Gemeinden", {"type": "Feature"})


class TestParseRecords:
    def test_source_order_and_types(self, members_mapping):
        records = parse_records(members_mapping)
        assert [r.postal_code for r in records] == list(members_mapping)
        assert records[0].note == "Stadt Berlin"
        assert records[0].members == 42
        assert records[4].postal_code == "00000"

    def test_fractional_member_count(self):
        records = parse_records({"10115": {"note": "Stadt Berlin", "Voltis": 2.9}})
        assert records[0].members == pytest.approx(2.9)

    def test_note_is_not_trimmed(self):
        records = parse_records({"10115": {"note": "Stadt Berlin ", "Voltis": 1}})
        assert records[0].note == "Stadt Berlin "

    def test_empty_mapping(self):
        assert parse_records({}) == ()


class TestLoadFiles:
    def test_missing_file(self, tmp_path):
        with pytest.raises(DatasetLoadError):
            load_json(tmp_path / "fehlt.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "kaputt.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DatasetLoadError):
            load_json(path)

    def test_http_source(self, monkeypatch, members_mapping):
        def fake_get(url, **kwargs):
            return httpx.Response(200, json=members_mapping, request=httpx.Request("GET", url))

        monkeypatch.setattr(httpx, "get", fake_get)
        records = load_records("https://example.org/mitglieder.json")
        assert len(records) == len(members_mapping)

    def test_http_error(self, monkeypatch):
        def fake_get(url, **kwargs):
            return httpx.Response(404, request=httpx.Request("GET", url))

        monkeypatch.setattr(httpx, "get", fake_get)
        with pytest.raises(DatasetLoadError):
            load_json("https://example.org/fehlt.json")

    def test_load_dataset_from_files(self, tmp_path, gemeinden_geojson, landkreise_geojson, members_mapping):
        paths = {}
        for name, payload in [
            ("gemeinden.geojson", gemeinden_geojson),
            ("landkreise.geojson", landkreise_geojson),
            ("mitglieder.json", members_mapping),
        ]:
            paths[name] = tmp_path / name
            paths[name].write_text(json.dumps(payload), encoding="utf-8")

        levels = {
            "Gemeinden": LevelConfig("Gemeinden", str(paths["gemeinden.geojson"]), "", municipal=True),
            "Landkreise": LevelConfig("Landkreise", str(paths["landkreise.geojson"]), ""),
        }
        dataset = load_dataset(levels, str(paths["mitglieder.json"]))

        assert len(load_feature_collection("Landkreise", paths["landkreise.geojson"])) == 4
        assert set(dataset.levels) == {"Gemeinden", "Landkreise"}
        assert dataset.total_members == 67
        assert len(dataset.unresolved) == 1
        assert dataset.bounds["Landkreise"].min_members == 8
