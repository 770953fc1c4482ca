"""FastAPI REST endpoints for the membership map."""

from __future__ import annotations

import io
import time
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from mitgliederkarte.api.auth import verify_api_key
from mitgliederkarte.api.cache import cached, clear_cache
from mitgliederkarte.api.schemas import (
    HealthOut,
    KPIsOut,
    LevelOut,
    MetricsOut,
    RecordOut,
    RegionDetailOut,
    RegionListOut,
    RegionOut,
    StyleOut,
    UnrepresentedOut,
)
from mitgliederkarte.ingestion.datasets import DEFAULT_LEVEL, LEVELS
from mitgliederkarte.models import DatasetLoadError, LoadedDataset, MalformedFeatureError
from mitgliederkarte.processing.aggregator import aggregate_detail
from mitgliederkarte.processing.popup import build_summary, summary_lines
from mitgliederkarte.processing.styling import style_for
from mitgliederkarte.processing.transformer import (
    region_table,
    styled_geojson,
    unrepresented_municipalities,
)
from mitgliederkarte.storage.memory import get_dataset, is_loaded

router = APIRouter(prefix="/api/v1", tags=["Mitgliederkarte API"])

# Track startup time for metrics
_start_time = time.time()
_request_count = 0


def _inc_requests():
    global _request_count
    _request_count += 1


def require_dataset() -> LoadedDataset:
    """Dependency that turns loading failures into a 503."""
    try:
        return get_dataset()
    except (DatasetLoadError, MalformedFeatureError) as exc:
        raise HTTPException(status_code=503, detail=f"Dataset unavailable: {exc}") from exc


def _check_level(dataset: LoadedDataset, level: str) -> None:
    if level not in dataset.levels:
        raise HTTPException(status_code=404, detail=f"Unknown level: {level}")


@cached(ttl=600)
def _render_level(level: str) -> dict[str, Any]:
    return styled_geojson(get_dataset(), level)


# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------


@router.get("/levels", summary="List map levels", response_model=list[LevelOut])
def list_levels(
    dataset: LoadedDataset = Depends(require_dataset),
    _key: str = Depends(verify_api_key),
) -> list[LevelOut]:
    _inc_requests()
    return [
        LevelOut(
            name=name,
            description=LEVELS[name].description if name in LEVELS else "",
            feature_count=len(collection),
            default=name == DEFAULT_LEVEL,
        )
        for name, collection in dataset.levels.items()
    ]


@router.get("/levels/{level}/geojson", summary="Styled GeoJSON layer")
def level_geojson(
    level: str,
    dataset: LoadedDataset = Depends(require_dataset),
    _key: str = Depends(verify_api_key),
) -> dict[str, Any]:
    _inc_requests()
    _check_level(dataset, level)
    return _render_level(level)


# ---------------------------------------------------------------------------
# Regions
# ---------------------------------------------------------------------------


@router.get("/levels/{level}/regions", summary="Query regions", response_model=RegionListOut)
def list_regions(
    level: str,
    search: str | None = Query(None, description="Search by region name"),
    with_members: bool = Query(False, description="Only regions with members"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    dataset: LoadedDataset = Depends(require_dataset),
    _key: str = Depends(verify_api_key),
) -> RegionListOut:
    _inc_requests()
    _check_level(dataset, level)
    df = region_table(dataset, level)
    if search:
        df = df[df["name"].str.contains(search, case=False, regex=False)]
    if with_members:
        df = df[df["members"] > 0]
    page = df.iloc[offset:offset + limit]
    return RegionListOut(
        total=len(df),
        data=[RegionOut(**row) for row in page.to_dict(orient="records")],
    )


@router.get(
    "/levels/{level}/regions/{code}",
    summary="Single region with popup summary",
    response_model=RegionDetailOut,
)
def get_region(
    level: str,
    code: str,
    dataset: LoadedDataset = Depends(require_dataset),
    _key: str = Depends(verify_api_key),
) -> RegionDetailOut:
    _inc_requests()
    _check_level(dataset, level)
    collection = dataset.collection(level)
    feature = collection.get(code)
    if feature is None:
        raise HTTPException(status_code=404, detail=f"Unknown region {code} in {level}")

    detail = aggregate_detail(feature.code, dataset.resolved)
    style = style_for(feature, collection, dataset.resolved, bounds=dataset.bounds.get(level))
    return RegionDetailOut(
        code=feature.code,
        kind=feature.kind_label,
        name=feature.name,
        population=feature.population,
        population_density=feature.population_density,
        members=detail.value,
        status=detail.status,
        record_count=detail.record_count,
        style=StyleOut(color=style.color, weight=style.weight, fill_opacity=style.fill_opacity),
        summary=summary_lines(feature, dataset.resolved),
        popup=build_summary(feature, dataset.resolved),
    )


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@router.get("/unresolved", summary="Records without region", response_model=list[RecordOut])
def list_unresolved(
    dataset: LoadedDataset = Depends(require_dataset),
    _key: str = Depends(verify_api_key),
) -> list[RecordOut]:
    _inc_requests()
    return [
        RecordOut(postal_code=r.postal_code, note=r.note, members=r.members, code=r.code)
        for r in dataset.unresolved
    ]


@router.get(
    "/unrepresented",
    summary="Most populous municipalities without members",
    response_model=list[UnrepresentedOut],
)
def list_unrepresented(
    limit: int = Query(10, ge=1, le=100),
    dataset: LoadedDataset = Depends(require_dataset),
    _key: str = Depends(verify_api_key),
) -> list[UnrepresentedOut]:
    _inc_requests()
    df = unrepresented_municipalities(dataset, limit=limit)
    return [UnrepresentedOut(**row) for row in df.to_dict(orient="records")]


# ---------------------------------------------------------------------------
# Summary KPIs
# ---------------------------------------------------------------------------


@router.get("/kpis", summary="High-level KPIs", response_model=KPIsOut)
def get_kpis(
    dataset: LoadedDataset = Depends(require_dataset),
    _key: str = Depends(verify_api_key),
) -> KPIsOut:
    _inc_requests()
    unresolved = dataset.unresolved
    return KPIsOut(
        total_members=dataset.total_members,
        total_records=len(dataset.records),
        resolved_records=len(dataset.resolved) - len(unresolved),
        unresolved_records=len(unresolved),
        unresolved_members=sum(r.members for r in unresolved),
        feature_counts={name: len(c) for name, c in dataset.levels.items()},
    )


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


@router.get("/export/{level}", summary="Export a region table as CSV")
def export_level_csv(
    level: str,
    dataset: LoadedDataset = Depends(require_dataset),
    _key: str = Depends(verify_api_key),
):
    _inc_requests()
    _check_level(dataset, level)
    df = region_table(dataset, level)
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    buf.seek(0)
    filename = f"{level.lower()}.csv"
    return StreamingResponse(
        iter([buf.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


@router.get("/metrics", summary="Application metrics", response_model=MetricsOut)
def get_metrics(_key: str = Depends(verify_api_key)) -> MetricsOut:
    return MetricsOut(
        uptime_seconds=round(time.time() - _start_time, 2),
        total_requests=_request_count,
        dataset_loaded=is_loaded(),
    )


# ---------------------------------------------------------------------------
# Cache management
# ---------------------------------------------------------------------------


@router.post("/cache/clear", summary="Clear rendered layer cache")
def flush_cache(_key: str = Depends(verify_api_key)) -> dict[str, Any]:
    evicted = clear_cache()
    return {"evicted": evicted}


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health", summary="Health check", response_model=HealthOut)
def health() -> HealthOut:
    try:
        dataset = get_dataset()
    except (DatasetLoadError, MalformedFeatureError) as exc:
        raise HTTPException(status_code=503, detail=f"Dataset error: {exc}") from exc
    return HealthOut(status="ok", dataset=f"{len(dataset.records)} records")
