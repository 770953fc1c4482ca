"""Core value objects shared by the loader, the processing steps and the API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class MalformedFeatureError(ValueError):
    """A GeoJSON feature lacks a required property or repeats a region code."""


class DatasetLoadError(RuntimeError):
    """A dataset source could not be read or parsed."""


@dataclass(frozen=True)
class RegionFeature:
    """One polygon of a feature collection (Gemeinde or Landkreis)."""

    code: str
    name: str
    kind_label: str
    population: float
    population_density: float
    postal_code: str | None = None
    geometry: dict[str, Any] | None = field(default=None, compare=False, repr=False)
    properties: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class FeatureCollection:
    level: str
    features: tuple[RegionFeature, ...]

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self):
        return iter(self.features)

    def get(self, code: str) -> RegionFeature | None:
        for feature in self.features:
            if feature.code == code:
                return feature
        return None


@dataclass(frozen=True)
class ExternalRecord:
    """Member count for one postal code, as delivered by the membership export."""

    postal_code: str
    note: str
    members: float


@dataclass(frozen=True)
class ResolvedRecord:
    postal_code: str
    note: str
    members: float
    code: str | None = None

    @classmethod
    def from_record(cls, record: ExternalRecord, code: str | None) -> ResolvedRecord:
        return cls(
            postal_code=record.postal_code,
            note=record.note,
            members=record.members,
            code=code,
        )

    @property
    def resolved(self) -> bool:
        return self.code is not None


@dataclass(frozen=True)
class StyleResult:
    color: str
    weight: float
    fill_opacity: float

    def to_leaflet(self) -> dict[str, Any]:
        """Return the style dict expected by Leaflet / folium ``style_function``."""
        return {"color": self.color, "weight": self.weight, "fillOpacity": self.fill_opacity}


@dataclass(frozen=True)
class CollectionBounds:
    """Min/max scans over one feature collection, used to normalize opacities."""

    min_members: float
    max_members: float
    min_population: float
    max_population: float


@dataclass(frozen=True)
class LoadedDataset:
    """Everything loaded at startup, never mutated afterwards.

    ``levels`` maps a level name (``"Gemeinden"``, ``"Landkreise"``) to its
    feature collection. ``records`` keeps the membership records in source
    order, ``resolved`` the same records with their region code attached.
    ``bounds`` holds the per-level min/max scans computed by the pipeline.
    """

    levels: dict[str, FeatureCollection]
    records: tuple[ExternalRecord, ...]
    resolved: tuple[ResolvedRecord, ...]
    municipality_level: str = "Gemeinden"
    bounds: dict[str, CollectionBounds] = field(default_factory=dict, compare=False, repr=False)

    @property
    def unresolved(self) -> tuple[ResolvedRecord, ...]:
        return tuple(r for r in self.resolved if not r.resolved)

    @property
    def municipalities(self) -> FeatureCollection:
        return self.levels[self.municipality_level]

    @property
    def total_members(self) -> float:
        return sum(r.members for r in self.records)

    def collection(self, level: str) -> FeatureCollection:
        try:
            return self.levels[level]
        except KeyError:
            raise KeyError(f"Unknown level: {level}") from None
