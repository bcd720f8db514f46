from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from src.config import PEOPLE_CITIES

_FIRST_NAMES = ["Ada", "Alan", "Grace", "Katherine", "Edsger", "Barbara", "Donald", "Frances", "John", "Radia"]


def assert_required_columns(df: pd.DataFrame, required: Iterable[str]) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def make_people_frame(n: int, seed: int, cities: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Deterministic synthetic table used by the dataframe demos."""

    if n < 0:
        raise ValueError(f"n must be non-negative; got {n}")
    cities = list(cities if cities is not None else PEOPLE_CITIES)
    if not cities:
        raise ValueError("cities must contain at least one city")
    rng = np.random.default_rng(seed)

    age = rng.integers(18, 80, size=n)
    height = np.round(rng.normal(170.0, 9.0, size=n), 1)
    score = np.round(rng.beta(2.0, 5.0, size=n) * 100.0, 2)
    return pd.DataFrame(
        {
            "id": np.arange(1, n + 1),
            "name": rng.choice(_FIRST_NAMES, size=n),
            "age": age,
            "height_cm": height,
            "city": rng.choice(cities, size=n),
            "score": score,
        }
    )


def filter_rows(df: pd.DataFrame, column: str, min_value) -> pd.DataFrame:
    assert_required_columns(df, [column])
    return df.loc[df[column] >= min_value].reset_index(drop=True)


def summarize_by_group(df: pd.DataFrame, by: str, value: str) -> pd.DataFrame:
    """Per-group n/mean/std/min/max of ``value``, sorted by group label."""

    assert_required_columns(df, [by, value])
    out = (
        df.groupby(by, sort=True)[value]
        .agg(n="count", mean="mean", std="std", min="min", max="max")
        .reset_index()
    )
    return out


def join_city_info(df: pd.DataFrame, cities: pd.DataFrame) -> pd.DataFrame:
    assert_required_columns(df, ["city"])
    assert_required_columns(cities, ["city"])
    return df.merge(cities, on="city", how="left", validate="many_to_one")


def summarize_missingness(df: pd.DataFrame) -> pd.DataFrame:
    """Return per-column missingness summary in stable column order."""

    n = len(df)
    rows = []
    for col in df.columns.astype(str).tolist():
        n_missing = int(df[col].isna().sum())
        missing_rate = round(n_missing / n, 6) if n else np.nan
        rows.append({"column": col, "n": n, "n_missing": n_missing, "missing_rate": missing_rate})
    return pd.DataFrame(rows)
