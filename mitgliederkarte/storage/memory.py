"""Process-wide holder of the loaded dataset.

The dataset is loaded lazily on first use so that imports don't fail when
the data files are missing (e.g. during testing or CI).
"""

from __future__ import annotations

import logging

from mitgliederkarte.api.cache import clear_cache
from mitgliederkarte.models import LoadedDataset
from mitgliederkarte.pipeline import load_dataset

logger = logging.getLogger(__name__)

_dataset: LoadedDataset | None = None


def get_dataset() -> LoadedDataset:
    """FastAPI dependency returning the loaded dataset."""
    global _dataset
    if _dataset is None:
        logger.info("Loading dataset ...")
        _dataset = load_dataset()
    return _dataset


def set_dataset(dataset: LoadedDataset | None) -> None:
    """Replace the loaded dataset (None forces a reload on next access).

    Layers rendered from the previous dataset are dropped with it.
    """
    global _dataset
    _dataset = dataset
    clear_cache()


def is_loaded() -> bool:
    return _dataset is not None
