"""Data transformation: region tables and styled GeoJSON for the map layer."""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from mitgliederkarte.models import LoadedDataset
from mitgliederkarte.processing.aggregator import aggregate_detail
from mitgliederkarte.processing.cleaner import canon_postal_code
from mitgliederkarte.processing.popup import build_summary
from mitgliederkarte.processing.styling import collection_bounds, style_for

logger = logging.getLogger(__name__)

REGION_COLUMNS = [
    "code",
    "kind",
    "name",
    "population",
    "population_density",
    "members",
    "status",
    "record_count",
    "color",
    "fill_opacity",
]


def _bounds(dataset: LoadedDataset, level: str):
    bounds = dataset.bounds.get(level)
    if bounds is None:
        bounds = collection_bounds(dataset.collection(level), dataset.resolved)
    return bounds


# ---------------------------------------------------------------------------
# Region table
# ---------------------------------------------------------------------------


def region_table(dataset: LoadedDataset, level: str) -> pd.DataFrame:
    """One row per feature of ``level`` with its aggregate and style.

    Rows keep the collection order.
    """
    collection = dataset.collection(level)
    bounds = _bounds(dataset, level)

    rows = []
    for feature in collection:
        detail = aggregate_detail(feature.code, dataset.resolved)
        style = style_for(feature, collection, dataset.resolved, bounds=bounds)
        rows.append({
            "code": feature.code,
            "kind": feature.kind_label,
            "name": feature.name,
            "population": feature.population,
            "population_density": feature.population_density,
            "members": detail.value,
            "status": detail.status,
            "record_count": detail.record_count,
            "color": style.color,
            "fill_opacity": round(style.fill_opacity, 4),
        })

    df = pd.DataFrame(rows, columns=REGION_COLUMNS)
    logger.info("Region table for %s: %d rows", level, len(df))
    return df


def top_regions(table: pd.DataFrame, limit: int = 10) -> pd.DataFrame:
    """Regions of a ``region_table`` with the most members, members > 0 only."""
    df = table[table["members"] > 0]
    return df.sort_values("members", ascending=False, kind="stable").head(limit)


def unrepresented_municipalities(dataset: LoadedDataset, limit: int = 10) -> pd.DataFrame:
    """Most populous municipalities whose postal code has no member record.

    A municipality counts as represented when a record with its postal code
    has a member count above zero.
    """
    with_members = {canon_postal_code(r.postal_code) for r in dataset.records if r.members > 0}
    with_members.discard("")

    rows = [
        {
            "code": f.code,
            "name": f.name,
            "postal_code": f.postal_code,
            "population": f.population,
        }
        for f in dataset.municipalities
        if canon_postal_code(f.postal_code) not in with_members
    ]
    df = pd.DataFrame(rows, columns=["code", "name", "postal_code", "population"])
    return df.sort_values("population", ascending=False, kind="stable").head(limit)


# ---------------------------------------------------------------------------
# Styled GeoJSON
# ---------------------------------------------------------------------------


def styled_geojson(dataset: LoadedDataset, level: str) -> dict[str, Any]:
    """GeoJSON FeatureCollection with ``style`` and ``popup`` per feature.

    This is what a Leaflet front end consumes: ``style`` is passed to the
    layer as is, ``popup`` is bound to the feature.
    """
    collection = dataset.collection(level)
    bounds = _bounds(dataset, level)

    features = []
    for feature in collection:
        detail = aggregate_detail(feature.code, dataset.resolved)
        style = style_for(feature, collection, dataset.resolved, bounds=bounds)
        properties = dict(feature.properties)
        properties.update({
            "members": detail.value,
            "members_status": detail.status,
            "style": style.to_leaflet(),
            "popup": build_summary(feature, dataset.resolved),
        })
        features.append({
            "type": "Feature",
            "geometry": feature.geometry,
            "properties": properties,
        })

    return {"type": "FeatureCollection", "features": features}
