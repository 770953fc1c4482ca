"""Data cleaning and normalization utilities."""

from __future__ import annotations

import logging
import re

import pandas as pd

logger = logging.getLogger(__name__)

# Column names of the membership export, after normalize_columns().
MEMBERS_COLUMN_MAP = {
    "voltis": "members",
    "mitglieder": "members",
    "note": "note",
}


def canon_postal_code(value) -> str:
    """Canonical form of a postal code: digits only, leading zeros stripped.

    ``"01067"``, ``1067`` and ``" 1067 "`` all compare equal. Anything that
    is not a number (``"1O115"``) gives ``""``, which never matches.
    """
    if value is None:
        return ""
    s = str(value).strip()
    if s.endswith(".0"):
        s = s[:-2]
    if not re.fullmatch(r"\d+", s):
        return ""
    return s.lstrip("0")


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Lowercase, strip, and snake_case column names."""
    df = df.copy()
    df.columns = [re.sub(r"[^a-z0-9]+", "_", col.strip().lower()).strip("_") for col in df.columns]
    return df


def strip_strings(df: pd.DataFrame) -> pd.DataFrame:
    """Strip leading/trailing whitespace from string columns."""
    df = df.copy()
    str_cols = df.select_dtypes(include=["object", "string"]).columns
    for col in str_cols:
        df[col] = df[col].astype(str).str.strip()
    return df


def coerce_numeric(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Force columns to numeric, coercing errors to NaN."""
    df = df.copy()
    for col in columns:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def fill_missing_numeric(df: pd.DataFrame, value: float = 0.0) -> pd.DataFrame:
    """Fill NaN in numeric columns with a default value."""
    numeric_cols = df.select_dtypes(include="number").columns
    df = df.copy()
    df[numeric_cols] = df[numeric_cols].fillna(value)
    return df


def clean_members_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Normalize the raw membership table.

    Expects one row per postal code (the index) and returns a DataFrame with
    columns ``postal_code``, ``note`` and ``members`` in source order.
    """
    df = normalize_columns(df)
    rename = {k: v for k, v in MEMBERS_COLUMN_MAP.items() if k in df.columns}
    df = df.rename(columns=rename)

    if "members" not in df.columns:
        raise KeyError(f"Missing member count column. Available: {list(df.columns)}")
    if "note" not in df.columns:
        df["note"] = ""

    df = df[["note", "members"]].copy()
    df["note"] = df["note"].fillna("")
    # The note is kept as delivered, the name fallback compares it verbatim.
    df[["members"]] = strip_strings(df[["members"]])
    df = coerce_numeric(df, ["members"])
    missing = int(df["members"].isna().sum())
    if missing:
        logger.warning("%d membership rows without a numeric count, using 0", missing)
    df = fill_missing_numeric(df)
    df["members"] = df["members"].astype(float)

    df.index = [str(k).strip() for k in df.index]
    df = df.rename_axis("postal_code").reset_index()
    logger.info("Cleaned membership table: %d rows", len(df))
    return df
