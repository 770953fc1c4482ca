"""Full data pipeline: ingest → clean → resolve → LoadedDataset.

Run with:  python -m mitgliederkarte.pipeline
"""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from mitgliederkarte.ingestion.datasets import LEVELS, MEMBERS_SOURCE, LevelConfig
from mitgliederkarte.ingestion.loader import load_feature_collection, load_records
from mitgliederkarte.models import ExternalRecord, FeatureCollection, LoadedDataset
from mitgliederkarte.processing.resolver import ResolutionStrategy, resolve_records
from mitgliederkarte.processing.styling import collection_bounds

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_dataset(
    collections: Mapping[str, FeatureCollection],
    records: Sequence[ExternalRecord],
    municipality_level: str = "Gemeinden",
    strategies: Sequence[ResolutionStrategy] | None = None,
) -> LoadedDataset:
    """Resolve ``records`` against the municipality level and freeze the result."""
    if municipality_level not in collections:
        raise KeyError(f"Municipality level {municipality_level!r} not loaded")

    resolved = resolve_records(records, collections[municipality_level], strategies=strategies)
    bounds = {
        level: collection_bounds(collection, resolved)
        for level, collection in collections.items()
    }
    return LoadedDataset(
        levels=dict(collections),
        records=tuple(records),
        resolved=resolved,
        municipality_level=municipality_level,
        bounds=bounds,
    )


def load_dataset(
    levels: Mapping[str, LevelConfig] | None = None,
    members_source: str | None = None,
) -> LoadedDataset:
    """Load every configured level and the membership export from disk or URL."""
    levels = LEVELS if levels is None else levels
    members_source = MEMBERS_SOURCE if members_source is None else members_source

    logger.info("=== STEP 1: Loading boundaries ===")
    collections = {name: load_feature_collection(name, cfg.source) for name, cfg in levels.items()}
    municipal = [name for name, cfg in levels.items() if cfg.municipal]
    if not municipal:
        raise KeyError("No municipal level configured")

    logger.info("=== STEP 2: Loading membership records ===")
    records = load_records(members_source)

    logger.info("=== STEP 3: Resolving postal codes ===")
    return build_dataset(collections, records, municipality_level=municipal[0])


def run_pipeline() -> dict[str, float]:
    """Load everything and report how well the records resolved."""
    dataset = load_dataset()
    counts: dict[str, float] = {
        name: len(collection) for name, collection in dataset.levels.items()
    }
    counts["records"] = len(dataset.records)
    counts["unresolved"] = len(dataset.unresolved)
    counts["members"] = dataset.total_members

    for record in dataset.unresolved:
        logger.info("Unresolved: %s %s (%g)", record.postal_code, record.note, record.members)
    logger.info("=== Pipeline complete ===")
    logger.info("Counts: %s", counts)
    return counts


if __name__ == "__main__":
    run_pipeline()
