"""
Client-side reshaping of API rows into chart series.

The API already promises well-formed rows, but the dashboard checks them
again before plotting: ``validate_rows`` is that single validation pass,
and the two shaping functions below only ever see rows that survived it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np
import pandas as pd

from .errors import NoData, NoValidData


@dataclass
class PivotedSeries:
    """One value per year for every label, all on the same year axis."""
    years: List[int] = field(default_factory=list)
    series_by_label: Dict[str, List[Any]] = field(default_factory=dict)


def _as_number(value):
    value = float(value)
    return int(value) if value.is_integer() else value


def _finite(series: pd.Series) -> pd.Series:
    numbers = pd.to_numeric(series, errors="coerce").astype(float)
    return numbers.where(np.isfinite(numbers))


def validate_rows(rows: Sequence[Mapping[str, Any]], require_year: bool = False) -> pd.DataFrame:
    """
    Keep the rows that can be plotted.

    A row survives when its label is present and its value (and, for
    multi-year data, its year) is a finite number. Raises ``NoData`` for an
    empty input and ``NoValidData`` when nothing survives.
    """
    if rows is None or (isinstance(rows, (list, tuple)) and len(rows) == 0):
        raise NoData("No data available")
    if not isinstance(rows, (list, tuple)):
        raise NoValidData("The data is not in the expected format")

    records = [row for row in rows if isinstance(row, Mapping)]
    df = pd.DataFrame({
        "label": pd.Series([row.get("label") for row in records], dtype=object),
        "value": pd.Series([row.get("value") for row in records], dtype=object),
        "year": pd.Series([row.get("year") for row in records], dtype=object),
    })

    df["value"] = _finite(df["value"])
    keep = df["label"].notna() & df["value"].notna()
    if require_year:
        df["year"] = _finite(df["year"])
        keep &= df["year"].notna()

    df = df[keep].copy()
    if df.empty:
        raise NoValidData("The data is not in the expected format")

    df["label"] = df["label"].astype(str)
    if require_year:
        df["year"] = df["year"].astype(int)
    return df.reset_index(drop=True)


def normalize_single(rows: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    df = validate_rows(rows)
    return [
        {"label": label, "value": _as_number(value)}
        for label, value in zip(df["label"], df["value"])
    ]


def pivot_multi_year(rows: Sequence[Mapping[str, Any]]) -> PivotedSeries:
    """
    Turn long (label, year, value) rows into one series per label.

    Years are sorted ascending; labels keep the order in which they first
    appear; (label, year) pairs missing from the input count as 0. When a
    pair appears twice the later row wins.
    """
    df = validate_rows(rows, require_year=True)

    labels = list(dict.fromkeys(df["label"]))
    years = sorted(df["year"].unique().tolist())
    wide = (
        df.pivot_table(index="label", columns="year", values="value", aggfunc="last")
        .reindex(index=labels, columns=years)
        .fillna(0)
    )

    return PivotedSeries(
        years=[int(y) for y in years],
        series_by_label={
            label: [_as_number(v) for v in wide.loc[label].tolist()]
            for label in labels
        },
    )
