# Copyright (c) Syntropy Systems
"""Tests for the summary and log digests."""

import math

from forecastview.digest import build_log_digest, build_summary_digest

FSM_LOG = [
    "DATA_LAST = 2025-06-30",
    "ANCHOR_DATE = 2025-05-30",
    "2025-06-27  1045.00",
    "2025-06-30  1050.50",
    "[FSM 3M trade details]",
    "entry_date  exit_date  side  hold  x  ret  entry  exit",
    "2025-04-01  2025-04-10  LONG  7  0.5  0.031  980.0  1010.4",
    "2025-05-01  2025-05-09  SHORT  6  0.2  -0.01  1000.0  1010.0",
]


class TestSummaryDigest:
    """Tests for build_summary_digest()."""

    def test_full_summary(self, sample_summary) -> None:
        """Test every block is picked up from a complete summary."""
        digest = build_summary_digest({**sample_summary, "figures": ["a.png", "b.png"]})

        assert digest.anchor_date == "2025-06-30"
        assert digest.fsm_1m.n_trades == 3
        assert digest.fsm_1m.total_ret_pct == 0.036
        assert digest.fsm_3m.avg_trade_ret_pct == 0.0
        assert digest.months[0].month == "2025-07"
        assert digest.months[0].lo_price == 1010.0
        assert [row.date for row in digest.daily_forecast] == ["2025-07-01", "2025-07-02"]
        assert digest.figure_count == 2

    def test_uppercase_fsm_alias_and_anchor_date(self) -> None:
        """Test the older fsm_1M key and anchor_date field."""
        digest = build_summary_digest(
            {"fsm_1M": {"n_trades": 2}, "single_anchor": {"anchor_date": "2024-12-31"}}
        )

        assert digest.fsm_1m.n_trades == 2
        assert digest.anchor_date == "2024-12-31"

    def test_empty_summary(self) -> None:
        """Test defaults for an empty summary."""
        digest = build_summary_digest({})

        assert digest.anchor_date is None
        assert digest.months == []
        assert digest.daily_forecast == []
        assert digest.figure_count == 0

    def test_bad_prices_become_nan(self) -> None:
        """Test that unparseable prices do not break the digest."""
        digest = build_summary_digest(
            {"monthly_extrema": [{"month": "2025-08", "hi_price": "n/a"}, "junk"]}
        )

        assert len(digest.months) == 1
        assert digest.months[0].month == "2025-08"
        assert math.isnan(digest.months[0].hi_price)


class TestLogDigest:
    """Tests for build_log_digest()."""

    def test_parses_dates_and_trade(self) -> None:
        """Test the log facts and first FSM 3M trade."""
        digest = build_log_digest(FSM_LOG)

        assert digest.data_last == "2025-06-30"
        assert digest.anchor_date == "2025-05-30"
        assert digest.sample_dates == ["2025-06-27", "2025-06-30"]

        trade = digest.fsm_3m_trade
        assert trade is not None
        assert trade.entry_date == "2025-04-01"
        assert trade.side == "LONG"
        assert trade.hold_days == 7
        assert trade.ret_pct == 0.031
        assert trade.exit_px == 1010.4

    def test_sample_dates_capped(self) -> None:
        """Test at most eight sample dates are kept."""
        lines = [f"2025-01-{day:02d}  1000.0" for day in range(1, 20)]
        assert len(build_log_digest(lines).sample_dates) == 8

    def test_empty_log(self) -> None:
        """Test an empty log yields an empty digest."""
        digest = build_log_digest([])

        assert digest.data_last is None
        assert digest.sample_dates == []
        assert digest.fsm_3m_trade is None
