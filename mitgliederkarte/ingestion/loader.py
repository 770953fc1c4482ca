"""Loading of the GeoJSON boundaries and the membership export.

Sources are local paths or http(s) URLs. Parsing turns the raw JSON into
the frozen value objects of ``mitgliederkarte.models``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx
import pandas as pd

from mitgliederkarte.models import (
    DatasetLoadError,
    ExternalRecord,
    FeatureCollection,
    MalformedFeatureError,
    RegionFeature,
)
from mitgliederkarte.processing.cleaner import clean_members_frame

logger = logging.getLogger(__name__)

# Timeouts (connect, read) in seconds
TIMEOUT = httpx.Timeout(15.0, read=120.0)


def load_json(source: str | Path) -> Any:
    """Read a JSON document from a file path or an http(s) URL."""
    source = str(source)
    if source.startswith(("http://", "https://")):
        logger.info("Downloading %s", source)
        try:
            resp = httpx.get(source, follow_redirects=True, timeout=TIMEOUT)
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise DatasetLoadError(f"Could not fetch {source}: {exc}") from exc

    path = Path(source)
    if not path.exists():
        raise DatasetLoadError(f"Dataset not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        raise DatasetLoadError(f"Could not read {path}: {exc}") from exc


# ---------------------------------------------------------------------------
# Features
# ---------------------------------------------------------------------------


def _number(value: Any, field: str, code: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise MalformedFeatureError(f"Feature {code}: {field} is not a number ({value!r})") from None


def parse_feature(raw: dict[str, Any]) -> RegionFeature:
    """Build a RegionFeature from a GeoJSON feature dict.

    Raises MalformedFeatureError when ``RS``, ``GEN`` or
    ``destatis.population`` is missing.
    """
    props = raw.get("properties") or {}
    code = props.get("RS")
    if code is None or str(code).strip() == "":
        raise MalformedFeatureError(f"Feature without RS: {props.get('GEN')!r}")
    code = str(code).strip()

    name = props.get("GEN")
    if name is None:
        raise MalformedFeatureError(f"Feature {code} has no GEN")

    destatis = props.get("destatis") or {}
    if destatis.get("population") is None:
        raise MalformedFeatureError(f"Feature {code} has no destatis.population")

    density = destatis.get("population_density")
    zip_code = destatis.get("zip")

    return RegionFeature(
        code=code,
        name=str(name),
        kind_label=str(props.get("BEZ") or ""),
        population=_number(destatis["population"], "population", code),
        population_density=_number(density, "population_density", code) if density is not None else 0.0,
        postal_code=str(zip_code).strip() if zip_code not in (None, "") else None,
        geometry=raw.get("geometry"),
        properties=props,
    )


def parse_feature_collection(level: str, geojson: dict[str, Any]) -> FeatureCollection:
    """Parse a GeoJSON FeatureCollection into one level of the map."""
    if not isinstance(geojson, dict) or "features" not in geojson:
        raise DatasetLoadError(f"{level}: not a GeoJSON FeatureCollection")

    features = tuple(parse_feature(f) for f in geojson["features"])

    seen: set[str] = set()
    for feature in features:
        if feature.code in seen:
            raise MalformedFeatureError(f"{level}: duplicate RS {feature.code}")
        seen.add(feature.code)

    logger.info("Loaded %s: %d features", level, len(features))
    return FeatureCollection(level=level, features=features)


# ---------------------------------------------------------------------------
# Membership records
# ---------------------------------------------------------------------------


def members_frame(mapping: dict[str, dict[str, Any]]) -> pd.DataFrame:
    """Turn the ``{postal_code: {note, Voltis}}`` mapping into a clean table."""
    if not mapping:
        return pd.DataFrame(columns=["postal_code", "note", "members"])
    raw = pd.DataFrame.from_dict(mapping, orient="index")
    return clean_members_frame(raw)


def parse_records(mapping: dict[str, dict[str, Any]]) -> tuple[ExternalRecord, ...]:
    """Membership records in source order."""
    df = members_frame(mapping)
    records = tuple(
        ExternalRecord(
            postal_code=str(row.postal_code),
            note=str(row.note),
            members=float(row.members),
        )
        for row in df.itertuples(index=False)
    )
    logger.info("Loaded %d membership records (%g members)", len(records), sum(r.members for r in records))
    return records


def load_feature_collection(level: str, source: str | Path) -> FeatureCollection:
    return parse_feature_collection(level, load_json(source))


def load_records(source: str | Path) -> tuple[ExternalRecord, ...]:
    mapping = load_json(source)
    if not isinstance(mapping, dict):
        raise DatasetLoadError(f"{source}: expected a mapping of postal codes")
    return parse_records(mapping)
