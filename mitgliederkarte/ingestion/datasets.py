"""Registry of the map levels and the membership dataset."""

from __future__ import annotations

import os
from dataclasses import dataclass

DATA_DIR = os.getenv("MITGLIEDERKARTE_DATA_DIR", "data")


def _source(env_var: str, filename: str) -> str:
    return os.getenv(env_var) or os.path.join(DATA_DIR, filename)


@dataclass
class LevelConfig:
    name: str
    source: str
    description: str
    municipal: bool = False


LEVELS: dict[str, LevelConfig] = {
    "Gemeinden": LevelConfig(
        name="Gemeinden",
        source=_source("MITGLIEDERKARTE_GEMEINDEN", "gemeinden_simplify200.geojson"),
        description="Gemeindegrenzen mit Einwohnerzahl, Dichte und Postleitzahl (Destatis).",
        municipal=True,
    ),
    "Landkreise": LevelConfig(
        name="Landkreise",
        source=_source("MITGLIEDERKARTE_LANDKREISE", "landkreise_simplify20.geojson"),
        description="Kreisgrenzen mit Einwohnerzahl und Dichte (Destatis).",
    ),
}

DEFAULT_LEVEL = "Gemeinden"

MEMBERS_SOURCE = _source("MITGLIEDERKARTE_MEMBERS", "mitgliederzahlen_gemeinde.json")

# Label shown next to the aggregated member count in popups and tables.
METRIC_LABEL = "Volt-Mitglieder"
