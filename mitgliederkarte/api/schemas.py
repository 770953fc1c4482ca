"""Pydantic schemas for API responses."""

from __future__ import annotations

from pydantic import BaseModel

# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------


class LevelOut(BaseModel):
    name: str
    description: str
    feature_count: int
    default: bool = False


# ---------------------------------------------------------------------------
# Regions
# ---------------------------------------------------------------------------


class StyleOut(BaseModel):
    color: str
    weight: float
    fill_opacity: float


class RegionOut(BaseModel):
    code: str
    kind: str
    name: str
    population: float
    population_density: float
    members: float
    status: str
    record_count: int
    color: str
    fill_opacity: float


class RegionListOut(BaseModel):
    total: int
    data: list[RegionOut]


class RegionDetailOut(BaseModel):
    code: str
    kind: str
    name: str
    population: float
    population_density: float
    members: float
    status: str
    record_count: int
    style: StyleOut
    summary: list[str]
    popup: str


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class RecordOut(BaseModel):
    postal_code: str
    note: str
    members: float
    code: str | None = None


class UnrepresentedOut(BaseModel):
    code: str
    name: str
    postal_code: str | None = None
    population: float


# ---------------------------------------------------------------------------
# KPIs
# ---------------------------------------------------------------------------


class KPIsOut(BaseModel):
    total_members: float
    total_records: int
    resolved_records: int
    unresolved_records: int
    unresolved_members: float
    feature_counts: dict[str, int]


# ---------------------------------------------------------------------------
# Health / metrics
# ---------------------------------------------------------------------------


class HealthOut(BaseModel):
    status: str
    dataset: str


class MetricsOut(BaseModel):
    uptime_seconds: float
    total_requests: int
    dataset_loaded: bool
