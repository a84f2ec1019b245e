# Copyright (c) Syntropy Systems
"""Pydantic models for the values derived from a reconciled run."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import Field

from .base import FrozenModel, JSONObject

FeatureMetric = Literal["gain", "perm_rmse"]

MISSING = "—"


class FeatureRow(FrozenModel):
    """One feature with both importance metrics and its share of the total."""

    feature: str
    gain: float = 0.0
    perm_rmse: float = 0.0
    share: float = 0.0

    def value(self, metric: FeatureMetric) -> float:
        """Return the value of the given metric for this row."""
        return self.gain if metric == "gain" else self.perm_rmse


class FeatureTable(FrozenModel):
    """Feature rows sorted by the selected metric."""

    rows: list[FeatureRow] = Field(default_factory=list)
    metric: FeatureMetric = "gain"

    def top(self, limit: int = 10) -> list[FeatureRow]:
        """Return the leading rows; shares stay relative to the full set."""
        return self.rows[:limit]

    @property
    def is_empty(self) -> bool:
        return not self.rows


class FigureSlot(str, Enum):
    """Semantic role of a figure."""

    FORECAST = "forecast"
    BACKTEST = "backtest"


class ClassifiedFigures(FrozenModel):
    """Resolved URL per figure slot. A missing slot is None."""

    forecast: str | None = None
    backtest: str | None = None

    def get(self, slot: FigureSlot) -> str | None:
        """Return the URL for a slot."""
        return self.forecast if slot is FigureSlot.FORECAST else self.backtest

    @property
    def is_empty(self) -> bool:
        return self.forecast is None and self.backtest is None

    @property
    def default_slot(self) -> FigureSlot | None:
        """Slot to show first: forecast when present, else backtest."""
        if self.forecast is not None:
            return FigureSlot.FORECAST
        if self.backtest is not None:
            return FigureSlot.BACKTEST
        return None


class Kpi(FrozenModel):
    """Headline KPI with a formatted value."""

    label: str
    value: str = MISSING


class TradeStats(FrozenModel):
    """Trade simulation statistics for one horizon."""

    n_trades: float = 0.0
    win_rate: float = 0.0
    avg_trade_ret_pct: float = 0.0
    total_ret_pct: float = 0.0


class MonthlyExtrema(FrozenModel):
    """Predicted monthly high and low."""

    month: str = ""
    hi_date: str = ""
    hi_price: float = float("nan")
    lo_date: str = ""
    lo_price: float = float("nan")


class DailyForecast(FrozenModel):
    """Predicted close for one future trading day."""

    date: str = ""
    pred_close: float = float("nan")


class SummaryDigest(FrozenModel):
    """Secondary summary blocks derived from the canonical summary."""

    anchor_date: str | None = None
    fsm_1m: TradeStats = Field(default_factory=TradeStats)
    fsm_3m: TradeStats = Field(default_factory=TradeStats)
    months: list[MonthlyExtrema] = Field(default_factory=list)
    daily_forecast: list[DailyForecast] = Field(default_factory=list)
    figure_count: int = 0


class LogTrade(FrozenModel):
    """Example trade parsed from the backend log tail."""

    entry_date: str
    exit_date: str
    side: str
    hold_days: int
    ret_pct: float
    entry_px: float
    exit_px: float


class LogDigest(FrozenModel):
    """Facts parsed from the backend log tail."""

    data_last: str | None = None
    anchor_date: str | None = None
    sample_dates: list[str] = Field(default_factory=list)
    fsm_3m_trade: LogTrade | None = None


class ReconciledRun(FrozenModel):
    """Everything the presentation layer shows for one run."""

    generation: int
    nonce: str
    ok: bool = True
    artifacts: list[str] = Field(default_factory=list)
    summary: JSONObject = Field(default_factory=dict)
    figures: ClassifiedFigures = Field(default_factory=ClassifiedFigures)
    features: FeatureTable = Field(default_factory=FeatureTable)
    kpis: list[Kpi] = Field(default_factory=list)
    digest: SummaryDigest = Field(default_factory=SummaryDigest)
    log_digest: LogDigest = Field(default_factory=LogDigest)
    log_lines: list[str] = Field(default_factory=list)
