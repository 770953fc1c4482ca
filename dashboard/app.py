"""Mitgliederkarte — Streamlit interactive dashboard."""

from __future__ import annotations

import io

import pandas as pd
import plotly.express as px
import streamlit as st
from streamlit.components.v1 import html as html_component

from dashboard.geo import build_map
from mitgliederkarte.ingestion.datasets import DEFAULT_LEVEL, LEVELS, METRIC_LABEL
from mitgliederkarte.models import DatasetLoadError, LoadedDataset, MalformedFeatureError
from mitgliederkarte.pipeline import load_dataset
from mitgliederkarte.processing.popup import format_number
from mitgliederkarte.processing.transformer import (
    region_table,
    styled_geojson,
    top_regions,
    unrepresented_municipalities,
)

st.set_page_config(
    page_title="Mitgliederkarte",
    page_icon="🗺️",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_dataset() -> LoadedDataset:
    return load_dataset()


@st.cache_data(ttl=600)
def load_region_table(level: str) -> pd.DataFrame:
    """Per-region aggregates and styles of one level (cached 10 min)."""
    return region_table(get_dataset(), level)


@st.cache_data(ttl=600)
def load_layer(level: str) -> dict:
    """Styled GeoJSON of one level (cached 10 min)."""
    return styled_geojson(get_dataset(), level)


@st.cache_data(ttl=600)
def load_unrepresented(limit: int = 10) -> pd.DataFrame:
    return unrepresented_municipalities(get_dataset(), limit=limit)


def download_button_csv(df: pd.DataFrame, filename: str, label: str = "CSV herunterladen"):
    """Render a CSV download button."""
    buf = io.BytesIO()
    df.to_csv(buf, index=False)
    st.download_button(label, buf.getvalue(), file_name=filename, mime="text/csv")


def download_button_excel(df: pd.DataFrame, filename: str, label: str = "Excel herunterladen"):
    """Render an Excel download button."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        df.to_excel(writer, index=False, sheet_name="data")
    st.download_button(label, buf.getvalue(), file_name=filename, mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")


try:
    dataset = get_dataset()
except (DatasetLoadError, MalformedFeatureError) as exc:
    st.error(f"Daten konnten nicht geladen werden: {exc}")
    st.stop()


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------

st.sidebar.title("Informationen")

level_names = [name for name in LEVELS if name in dataset.levels]
level = st.sidebar.selectbox(
    "Ebene",
    level_names,
    index=level_names.index(DEFAULT_LEVEL) if DEFAULT_LEVEL in level_names else 0,
)

st.sidebar.markdown("---")
st.sidebar.subheader(f"Bevölkerungsreichste Städte (ohne {METRIC_LABEL})")
unrepresented = load_unrepresented(limit=10)
st.sidebar.markdown(
    "\n".join(f"{i}. {name}" for i, name in enumerate(unrepresented["name"], start=1))
)

st.sidebar.markdown("---")
st.sidebar.metric("Gesamtmitgliederzahl", format_number(dataset.total_members))
if dataset.unresolved:
    st.sidebar.caption(
        f"{len(dataset.unresolved)} Einträge ohne zugeordnete Gemeinde "
        f"({format_number(sum(r.members for r in dataset.unresolved))} Mitglieder)."
    )


# ---------------------------------------------------------------------------
# Map
# ---------------------------------------------------------------------------

st.title(f"🗺️ {METRIC_LABEL} nach {level}")

fmap = build_map(load_layer(level), level)
html_component(fmap.get_root().render(), height=650)


# ---------------------------------------------------------------------------
# Tables and charts
# ---------------------------------------------------------------------------

table = load_region_table(level)
top = top_regions(table, limit=15)
if not top.empty:
    fig = px.bar(
        top,
        x="members",
        y="name",
        orientation="h",
        title=f"{level} mit den meisten Mitgliedern",
        labels={"members": METRIC_LABEL, "name": ""},
        color="members",
        color_continuous_scale="Purples",
    )
    fig.update_layout(template="plotly_white", yaxis=dict(autorange="reversed"))
    st.plotly_chart(fig, use_container_width=True)

st.subheader("Daten")
st.dataframe(table, use_container_width=True, hide_index=True)
col1, col2 = st.columns(2)
with col1:
    download_button_csv(table, f"{level.lower()}.csv")
with col2:
    download_button_excel(table, f"{level.lower()}.xlsx")

if dataset.unresolved:
    with st.expander("Nicht zugeordnete Einträge"):
        st.dataframe(
            pd.DataFrame([
                {"postal_code": r.postal_code, "note": r.note, "members": r.members}
                for r in dataset.unresolved
            ]),
            use_container_width=True,
            hide_index=True,
        )
