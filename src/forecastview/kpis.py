# Copyright (c) Syntropy Systems
"""Derive the headline KPIs from a canonical summary."""
from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Context, Decimal, localcontext
from typing import Optional

from typing_extensions import TypeAlias

from forecastview.models.base import JSONValue
from forecastview.models.result import MISSING, Kpi

Accessor: TypeAlias = Callable[[Mapping[str, JSONValue]], Optional[float]]
Formatter: TypeAlias = Callable[[Optional[float]], str]


def as_finite(value: JSONValue) -> float | None:
    """Return value as a float when it is a finite number, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def field(*path: str) -> Accessor:
    """Build an accessor that walks nested objects along path."""

    def access(summary: Mapping[str, JSONValue]) -> float | None:
        current: JSONValue = dict(summary)
        for key in path:
            if not isinstance(current, dict):
                return None
            current = current.get(key)
        return as_finite(current)

    access.__name__ = ".".join(path)
    return access


def first_finite(summary: Mapping[str, JSONValue], chain: Sequence[Accessor]) -> float | None:
    """Evaluate accessors in order and return the first finite value."""
    for accessor in chain:
        value = accessor(summary)
        if value is not None:
            return value
    return None


def _round_half_up(value: float, places: int) -> str:
    # Exact binary value, halves away from zero; enough precision for any finite float
    with localcontext(Context(prec=400)):
        return str(Decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def format_error(value: float | None) -> str:
    return MISSING if value is None else _round_half_up(value, 2)


def format_count(value: float | None) -> str:
    if value is None:
        return "0"
    return str(int(value)) if value.is_integer() else str(value)


def format_rate(value: float | None) -> str:
    return MISSING if value is None else f"{_round_half_up(value * 100, 0)}%"


@dataclass(frozen=True)
class KpiSpec:
    """How one KPI is looked up and formatted."""

    label: str
    chain: tuple[Accessor, ...]
    formatter: Formatter

    def derive(self, summary: Mapping[str, JSONValue]) -> Kpi:
        return Kpi(label=self.label, value=self.formatter(first_finite(summary, self.chain)))


KPI_SPECS: tuple[KpiSpec, ...] = (
    KpiSpec(
        "RMSE (1M)",
        (
            field("single_anchor", "rmse_1M"),
            field("single_anchor", "rmse1M"),
            field("single_anchor_eval", "rmse_1m"),
            field("metrics", "rmse_1m"),
        ),
        format_error,
    ),
    KpiSpec(
        "RMSE (3M)",
        (
            field("single_anchor", "rmse_3M"),
            field("single_anchor", "rmse3M"),
            field("single_anchor_eval", "rmse_3m"),
            field("metrics", "rmse_3m"),
        ),
        format_error,
    ),
    KpiSpec(
        "Trades (1M)",
        (field("fsm_1m", "n_trades"), field("fsm_1M", "n_trades"), field("trades_1m")),
        format_count,
    ),
    KpiSpec(
        "Trades (3M)",
        (field("fsm_3m", "n_trades"), field("fsm_3M", "n_trades"), field("trades_3m")),
        format_count,
    ),
    KpiSpec(
        "Win rate (1M)",
        (field("fsm_1m", "win_rate"), field("fsm_1M", "win_rate"), field("winrate_1m")),
        format_rate,
    ),
    KpiSpec(
        "Win rate (3M)",
        (field("fsm_3m", "win_rate"), field("fsm_3M", "win_rate"), field("winrate_3m")),
        format_rate,
    ),
)


def derive_kpis(summary: Mapping[str, JSONValue]) -> list[Kpi]:
    """Return the six headline KPIs in display order."""
    return [spec.derive(summary) for spec in KPI_SPECS]
