"""Popup text for a map feature."""

from __future__ import annotations

import html
from typing import Sequence

from mitgliederkarte.ingestion.datasets import METRIC_LABEL
from mitgliederkarte.models import RegionFeature, ResolvedRecord
from mitgliederkarte.processing.aggregator import aggregate_detail


def format_number(value: float, max_decimals: int = 3) -> str:
    """German number format: ``1234567.891`` -> ``"1.234.567,891"``."""
    value = round(float(value), max_decimals)
    if value == int(value):
        return f"{int(value):,}".replace(",", ".")
    s = f"{value:,.{max_decimals}f}".rstrip("0").rstrip(".")
    return s.replace(",", "X").replace(".", ",").replace("X", ".")


def summary_lines(
    feature: RegionFeature,
    resolved_records: Sequence[ResolvedRecord],
    metric_label: str = METRIC_LABEL,
) -> list[str]:
    """Heading and value lines of the popup, as plain text."""
    lines = [
        f"{feature.kind_label} {feature.name}".strip(),
        f"Einwohnerzahl: {format_number(feature.population)}",
        f"Bevölkerungsdichte: {format_number(feature.population_density)}",
    ]
    detail = aggregate_detail(feature.code, resolved_records)
    if detail.has_members:
        lines.append(f"{metric_label}: {format_number(detail.value)}")
    return lines


def build_summary(
    feature: RegionFeature,
    resolved_records: Sequence[ResolvedRecord],
    metric_label: str = METRIC_LABEL,
) -> str:
    """HTML block shown in the feature popup."""
    heading, *rows = summary_lines(feature, resolved_records, metric_label)
    parts = [f"<h3>{html.escape(heading)}</h3>"]
    parts.extend(f"<p>{html.escape(row)}</p>" for row in rows)
    return "".join(parts)
