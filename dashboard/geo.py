"""Folium map layer for the membership choropleth."""

from __future__ import annotations

from typing import Any

import folium

# Potsdam, where the map opens
MAP_CENTER = (52.3906, 13.0645)
MAP_ZOOM = 9

TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
)


def build_map(layer: dict[str, Any], level: str) -> folium.Map:
    """Folium map showing ``layer``, a GeoJSON built by ``styled_geojson``."""
    fmap = folium.Map(
        location=list(MAP_CENTER),
        zoom_start=MAP_ZOOM,
        tiles=TILE_URL,
        attr=TILE_ATTRIBUTION,
        scrollWheelZoom=True,
    )
    folium.GeoJson(
        layer,
        name=level,
        style_function=lambda feat: feat["properties"]["style"],
        popup=folium.GeoJsonPopup(fields=["popup"], labels=False),
    ).add_to(fmap)
    return fmap
