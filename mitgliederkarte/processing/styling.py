"""Choropleth styling: opacity normalization and per-feature styles."""

from __future__ import annotations

from typing import Sequence

from mitgliederkarte.models import (
    CollectionBounds,
    FeatureCollection,
    RegionFeature,
    ResolvedRecord,
    StyleResult,
)
from mitgliederkarte.processing.aggregator import aggregate, aggregate_detail

HIGHLIGHT_COLOR = "rgba(80, 35, 121, 0.9)"
NEUTRAL_COLOR = "rgba(0, 0, 0, 0.9)"
STROKE_WEIGHT = 1

# Opacity ranges (min, max) of the two branches
MEMBER_OPACITY = (0.5, 1.0)
POPULATION_OPACITY = (0.1, 1.0)


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return min(upper, max(lower, value))


def normalize(
    domain_min: float,
    domain_max: float,
    target_min: float,
    target_max: float,
    value: float,
) -> float:
    """Map ``value`` from the domain range linearly onto the target range.

    Values outside the domain are clamped. A zero-width domain maps every
    value to ``target_min``.
    """
    if domain_max == domain_min:
        t = 0.0
    else:
        t = clamp((value - domain_min) / (domain_max - domain_min))
    result = target_min * (1 - t) + target_max * t
    return clamp(result, min(target_min, target_max), max(target_min, target_max))


def collection_bounds(
    collection: FeatureCollection | Sequence[RegionFeature],
    resolved_records: Sequence[ResolvedRecord],
) -> CollectionBounds:
    """Min/max of member aggregates (positive ones only) and of population."""
    features = list(collection)
    positive = [v for v in (aggregate(f.code, resolved_records) for f in features) if v > 0]
    populations = [f.population for f in features]
    return CollectionBounds(
        min_members=min(positive) if positive else 0,
        max_members=max(positive) if positive else 0,
        min_population=min(populations) if populations else 0,
        max_population=max(populations) if populations else 0,
    )


def style_for(
    feature: RegionFeature,
    active_collection: FeatureCollection | Sequence[RegionFeature],
    resolved_records: Sequence[ResolvedRecord],
    bounds: CollectionBounds | None = None,
) -> StyleResult:
    """Style of one feature within the active collection.

    Regions with members are highlighted, their opacity scaled by member
    count. All others are drawn neutral with an opacity scaled by population.
    """
    if bounds is None:
        bounds = collection_bounds(active_collection, resolved_records)

    detail = aggregate_detail(feature.code, resolved_records)
    if detail.has_members:
        return StyleResult(
            color=HIGHLIGHT_COLOR,
            weight=STROKE_WEIGHT,
            fill_opacity=normalize(bounds.min_members, bounds.max_members, *MEMBER_OPACITY, detail.value),
        )
    return StyleResult(
        color=NEUTRAL_COLOR,
        weight=STROKE_WEIGHT,
        fill_opacity=normalize(
            bounds.min_population, bounds.max_population, *POPULATION_OPACITY, feature.population
        ),
    )
