# Copyright (c) Syntropy Systems
"""Rich rendering of a reconciled run."""
from __future__ import annotations

import json
import math
from typing import TYPE_CHECKING

from rich.table import Table

from forecastview.features import feature_label
from forecastview.kpis import format_count
from forecastview.models.result import MISSING, FigureSlot

if TYPE_CHECKING:
    from rich.console import Console

    from forecastview.models.result import (
        ClassifiedFigures,
        FeatureTable,
        Kpi,
        LogDigest,
        ReconciledRun,
        SummaryDigest,
        TradeStats,
    )

METRIC_NAMES = {"gain": "XGBoost gain", "perm_rmse": "permutation RMSE"}
METRIC_COLUMNS = {"gain": "Gain", "perm_rmse": "Perm RMSE"}


def format_price(value: float) -> str:
    """Format a price with two decimals, or a dash when missing."""
    return f"{value:,.2f}" if math.isfinite(value) else "-"


def format_pct(value: float) -> str:
    """Format a ratio as a percentage with two decimals."""
    return f"{value * 100:.2f}%" if math.isfinite(value) else MISSING


def format_importance(value: float) -> str:
    if not math.isfinite(value):
        return "-"
    return f"{value:.0f}" if value >= 1000 else f"{value:.4f}"


def render_figures(console: Console, figures: ClassifiedFigures) -> None:
    """Print the forecast and backtest figure URLs."""
    console.print("\n[bold]Figures[/bold]")
    if figures.is_empty:
        console.print("[dim]No figures yet. Run a forecast first.[/dim]")
        return

    default_slot = figures.default_slot
    for slot in (FigureSlot.FORECAST, FigureSlot.BACKTEST):
        url = figures.get(slot)
        marker = "*" if slot is default_slot else " "
        # URLs must stay on one line to remain clickable
        console.print(
            f" {marker}[dim]{slot.value}:[/dim] {url or f'[dim]no {slot.value} figure[/dim]'}",
            soft_wrap=True,
        )


def render_kpis(console: Console, kpis: list[Kpi]) -> None:
    """Print the headline KPIs."""
    table = Table(title="Summary", show_header=True, header_style="bold")
    table.add_column("KPI")
    table.add_column("Value", justify="right")
    for kpi in kpis:
        table.add_row(kpi.label, kpi.value)
    console.print(table)


def _trade_line(name: str, stats: TradeStats) -> str:
    return (
        f"  [dim]{name}:[/dim] {format_count(stats.n_trades)} trades, "
        f"win rate {format_pct(stats.win_rate)}, "
        f"avg trade {format_pct(stats.avg_trade_ret_pct)}, "
        f"total {format_pct(stats.total_ret_pct)}"
    )


def render_digest(console: Console, digest: SummaryDigest, log_digest: LogDigest) -> None:
    """Print the anchor date, trade statistics and log facts."""
    console.print(f"  [dim]anchor date:[/dim] {digest.anchor_date or MISSING}")
    console.print(_trade_line("FSM 1M", digest.fsm_1m))
    console.print(_trade_line("FSM 3M", digest.fsm_3m))
    console.print(f"  [dim]figures:[/dim] {digest.figure_count}")

    if log_digest.data_last or log_digest.anchor_date:
        console.print(
            f"  [dim]log:[/dim] DATA_LAST={log_digest.data_last or MISSING}"
            f" ANCHOR_DATE={log_digest.anchor_date or MISSING}"
        )
    if log_digest.sample_dates:
        console.print(f"  [dim]sample dates:[/dim] {', '.join(log_digest.sample_dates)}")
    trade = log_digest.fsm_3m_trade
    if trade is not None:
        console.print(
            f"  [dim]FSM 3M trade:[/dim] {trade.entry_date} -> {trade.exit_date}"
            f" ({trade.side}, {trade.hold_days} days),"
            f" in {format_price(trade.entry_px)}, out {format_price(trade.exit_px)},"
            f" return {format_pct(trade.ret_pct)}"
        )


def render_extrema(console: Console, digest: SummaryDigest) -> None:
    """Print the predicted monthly highs and lows."""
    if not digest.months:
        return
    table = Table(title="Monthly extrema", show_header=True, header_style="bold")
    table.add_column("Month")
    table.add_column("High date")
    table.add_column("High", justify="right")
    table.add_column("Low date")
    table.add_column("Low", justify="right")
    for month in digest.months:
        table.add_row(
            month.month,
            month.hi_date,
            format_price(month.hi_price),
            month.lo_date,
            format_price(month.lo_price),
        )
    console.print(table)


def render_daily(console: Console, digest: SummaryDigest) -> None:
    """Print the daily close forecast for the next three months."""
    console.print("\n[bold]Daily forecast (3M)[/bold]")
    if not digest.daily_forecast:
        console.print("[dim]No daily forecast yet.[/dim]")
        return
    table = Table(show_header=True, header_style="bold")
    table.add_column("Date")
    table.add_column("Predicted close", justify="right")
    for row in digest.daily_forecast:
        table.add_row(row.date, format_price(row.pred_close))
    console.print(table)


def render_features(console: Console, features: FeatureTable, limit: int = 10) -> None:
    """Print the top features with their share of total importance."""
    console.print("\n[bold]Feature importance[/bold]")
    if features.is_empty:
        console.print("[dim]No feature importance yet. Run a forecast first.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", style="dim")
    table.add_column("Feature", no_wrap=True)
    table.add_column("Name")
    table.add_column("Share", justify="right")
    table.add_column(METRIC_COLUMNS[features.metric], justify="right")
    table.add_column("Description")
    for rank, row in enumerate(features.top(limit), start=1):
        label = feature_label(row.feature)
        table.add_row(
            str(rank),
            row.feature,
            label.name,
            f"{row.share:.2f}%",
            format_importance(row.value(features.metric)),
            f"[dim]{label.description}[/dim]",
        )
    console.print(table)
    console.print(
        f"[dim]Top {min(limit, len(features.rows))} of {len(features.rows)} features;"
        f" shares are relative to all features by {METRIC_NAMES[features.metric]}.[/dim]"
    )


def render_log(console: Console, lines: list[str]) -> None:
    """Print the backend log tail."""
    console.print("\n[bold]Log[/bold]")
    if not lines:
        console.print("[dim]No log output[/dim]")
        return
    for line in lines:
        console.print(line, markup=False, highlight=False)


def render_run(
    console: Console,
    result: ReconciledRun,
    *,
    feature_limit: int = 10,
    show_log: bool = False,
    show_raw: bool = False,
) -> None:
    """Print every section of a reconciled run."""
    render_figures(console, result.figures)

    console.print()
    if not result.summary:
        console.print("[dim]No summary yet.[/dim]")
    else:
        render_kpis(console, result.kpis)
        render_digest(console, result.digest, result.log_digest)
        render_extrema(console, result.digest)

    render_daily(console, result.digest)
    render_features(console, result.features, feature_limit)

    if show_log:
        render_log(console, result.log_lines)
    if show_raw:
        console.print("\n[bold]Raw summary[/bold]")
        console.print_json(json.dumps(result.summary, default=str))
