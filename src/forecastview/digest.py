# Copyright (c) Syntropy Systems
"""Secondary summary blocks: trade statistics, extrema, daily rows, log facts."""
from __future__ import annotations

import re
from typing import TYPE_CHECKING

from forecastview.models.result import (
    DailyForecast,
    LogDigest,
    LogTrade,
    MonthlyExtrema,
    SummaryDigest,
    TradeStats,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from forecastview.models.base import JSONObject, JSONValue

MAX_SAMPLE_DATES = 8

_SAMPLE_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})\s+\d{4}\.\d+", re.MULTILINE)
_DATA_LAST_RE = re.compile(r"DATA_LAST\s*=\s*([0-9\-]+)")
_ANCHOR_DATE_RE = re.compile(r"ANCHOR_DATE\s*=\s*([0-9\-]+)")
_FSM_3M_HEADER_RE = re.compile(r"\[FSM 3M[^\]]*\]")
_TRADE_ROW_RE = re.compile(
    r"^\s*(\d{4}-\d{2}-\d{2})\s+(\d{4}-\d{2}-\d{2})\s+([A-Z]+)\s+(\d+)"
    r"\s+[-\d.]+\s+([-\d.]+)\s+([-\d.]+)\s+([-\d.]+)",
    re.MULTILINE,
)


def _object(value: JSONValue) -> JSONObject:
    return value if isinstance(value, dict) else {}


def _number(value: JSONValue, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return default
    return default


def _text(value: JSONValue) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _first_present(summary: Mapping[str, JSONValue], *keys: str) -> JSONObject:
    for key in keys:
        if isinstance(summary.get(key), dict):
            return _object(summary.get(key))
    return {}


def _trade_stats(block: JSONObject) -> TradeStats:
    return TradeStats(
        n_trades=_number(block.get("n_trades"), 0.0),
        win_rate=_number(block.get("win_rate"), 0.0),
        avg_trade_ret_pct=_number(block.get("avg_trade_ret_pct"), 0.0),
        total_ret_pct=_number(block.get("total_ret_pct"), 0.0),
    )


def _rows(value: JSONValue) -> list[JSONObject]:
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, dict)]


def build_summary_digest(summary: Mapping[str, JSONValue]) -> SummaryDigest:
    """Collect the secondary summary blocks from a canonical summary."""
    anchor = _object(summary.get("single_anchor"))
    anchor_date = anchor.get("anchor_eval") or anchor.get("anchor_date")

    months = [
        MonthlyExtrema(
            month=_text(row.get("Month") or row.get("month")),
            hi_date=_text(row.get("hi_date")),
            hi_price=_number(row.get("hi_price"), float("nan")),
            lo_date=_text(row.get("lo_date")),
            lo_price=_number(row.get("lo_price"), float("nan")),
        )
        for row in _rows(summary.get("monthly_extrema"))
    ]
    daily = [
        DailyForecast(
            date=_text(row.get("date")),
            pred_close=_number(row.get("pred_close"), float("nan")),
        )
        for row in _rows(summary.get("future_3m_daily"))
    ]
    figures = summary.get("figures")

    return SummaryDigest(
        anchor_date=_text(anchor_date) or None,
        fsm_1m=_trade_stats(_first_present(summary, "fsm_1m", "fsm_1M")),
        fsm_3m=_trade_stats(_first_present(summary, "fsm_3m", "fsm_3M")),
        months=months,
        daily_forecast=daily,
        figure_count=len(figures) if isinstance(figures, list) else 0,
    )


def _parse_trade(log: str) -> LogTrade | None:
    header = _FSM_3M_HEADER_RE.search(log)
    if header is None:
        return None
    row = _TRADE_ROW_RE.search(log, header.end())
    if row is None:
        return None
    try:
        return LogTrade(
            entry_date=row.group(1),
            exit_date=row.group(2),
            side=row.group(3),
            hold_days=int(row.group(4)),
            ret_pct=float(row.group(5)),
            entry_px=float(row.group(6)),
            exit_px=float(row.group(7)),
        )
    except ValueError:
        return None


def build_log_digest(lines: Iterable[str]) -> LogDigest:
    """Parse the backend log tail for run dates and an example trade."""
    log = "\n".join(lines)

    data_last = _DATA_LAST_RE.search(log)
    anchor = _ANCHOR_DATE_RE.search(log)
    sample_dates = [m.group(1) for m in _SAMPLE_DATE_RE.finditer(log)]

    return LogDigest(
        data_last=data_last.group(1) if data_last else None,
        anchor_date=anchor.group(1) if anchor else None,
        sample_dates=sample_dates[:MAX_SAMPLE_DATES],
        fsm_3m_trade=_parse_trade(log),
    )
