# Copyright (c) Syntropy Systems
"""Normalize feature-importance payloads into ranked rows."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from forecastview.models.result import FeatureRow, FeatureTable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from forecastview.models.base import JSONValue
    from forecastview.models.result import FeatureMetric

logger = logging.getLogger(__name__)

# Wrapper keys in the order the backend introduced them
PAYLOAD_WRAPPERS = ("items", "main_top20")

NEGLIGIBLE_GAIN = 1e-12


@dataclass(frozen=True)
class FeatureLabel:
    """Display name and short description for a model feature."""

    name: str
    description: str


FEATURE_LABELS: dict[str, FeatureLabel] = {
    "Foreign_big_sell": FeatureLabel(
        "Foreign net sell",
        "Daily net selling by foreign investors; strength of offshore selling pressure.",
    ),
    "TSM_return": FeatureLabel(
        "ADR daily return",
        "Change of the ADR close versus the previous session.",
    ),
    "TSM_gap_return": FeatureLabel(
        "ADR gap return",
        "Open versus previous close; flags overnight gaps.",
    ),
    "ret_1d": FeatureLabel(
        "1-day return",
        "Return over one trading day, the shortest momentum signal.",
    ),
    "SOX_return": FeatureLabel(
        "SOX return",
        "Daily return of the semiconductor index; sector-wide sentiment.",
    ),
    "range20_ratio": FeatureLabel(
        "20-day range position",
        "Where the price sits inside its 20-day high/low range; near 1 is high.",
    ),
    "ret_5d": FeatureLabel(
        "5-day return",
        "Cumulative return over the last five sessions.",
    ),
    "pos_3M": FeatureLabel(
        "3-month position",
        "Rough position of the price inside its three-month range.",
    ),
    "return_lag1": FeatureLabel(
        "Lagged return",
        "Return of the previous period, a momentum carry-over signal.",
    ),
    "gap_5d": FeatureLabel(
        "5-day gap size",
        "Size of price gaps over the last five sessions.",
    ),
}

_GENERIC_DESCRIPTION = "Contributes to the forecast; a larger share means more influence."


def feature_label(feature: str) -> FeatureLabel:
    """Return the display label for a feature, falling back to its raw name."""
    return FEATURE_LABELS.get(feature) or FeatureLabel(feature, _GENERIC_DESCRIPTION)


def _to_float(value: JSONValue) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float("nan")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return float("nan")
    return float("nan")


def find_feature_items(payload: JSONValue) -> list[JSONValue]:
    """Locate the list of feature records inside a features payload.

    Tries a bare list, then an ``items`` wrapper, then a ``main_top20``
    wrapper; the first non-empty list wins.
    """
    candidates: list[JSONValue] = [payload]
    if isinstance(payload, dict):
        candidates.extend(payload.get(key) for key in PAYLOAD_WRAPPERS)

    for candidate in candidates:
        if isinstance(candidate, list) and candidate:
            return candidate
    return []


@dataclass
class _RawRow:
    feature: str
    gain: float
    perm_rmse: float


def _parse_rows(items: list[JSONValue]) -> list[_RawRow]:
    rows: list[_RawRow] = []
    seen: set[str] = set()
    for item in items:
        if not isinstance(item, dict):
            continue
        name = item.get("feature") or item.get("name")
        if not isinstance(name, str) or not name or name in seen:
            continue

        gain = _to_float(item.get("gain"))
        perm_rmse = _to_float(item.get("perm_rmse"))
        if not math.isfinite(gain) and not math.isfinite(perm_rmse):
            logger.debug("Dropping feature %s: no finite importance", name)
            continue

        seen.add(name)
        rows.append(
            _RawRow(
                feature=name,
                gain=gain if math.isfinite(gain) else 0.0,
                perm_rmse=perm_rmse if math.isfinite(perm_rmse) else 0.0,
            )
        )
    return rows


def select_metric(gain_total: float, perm_total: float) -> FeatureMetric:
    """Pick the ranking metric; permutation RMSE only when gain is empty."""
    if abs(gain_total) <= NEGLIGIBLE_GAIN and perm_total > 0:
        return "perm_rmse"
    return "gain"


def normalize(summary: Mapping[str, JSONValue]) -> FeatureTable:
    """Build the ranked feature table for a canonical summary.

    Shares are computed against the sum over every row, so truncating the
    table with ``FeatureTable.top`` never changes the shares of the kept rows.
    """
    items = find_feature_items(summary.get("features"))
    raw_rows = _parse_rows(items)
    if not raw_rows:
        return FeatureTable()

    metric = select_metric(
        sum(row.gain for row in raw_rows),
        sum(row.perm_rmse for row in raw_rows),
    )

    def metric_value(row: _RawRow) -> float:
        return row.gain if metric == "gain" else row.perm_rmse

    total = sum(metric_value(row) for row in raw_rows)
    ordered = sorted(raw_rows, key=metric_value, reverse=True)

    rows = [
        FeatureRow(
            feature=row.feature,
            gain=row.gain,
            perm_rmse=row.perm_rmse,
            share=metric_value(row) / total * 100 if total > 0 else 0.0,
        )
        for row in ordered
    ]
    logger.debug("Normalized %d features ranked by %s", len(rows), metric)
    return FeatureTable(rows=rows, metric=metric)
