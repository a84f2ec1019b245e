# Copyright (c) Syntropy Systems
"""Pytest fixtures for forecastview tests."""

import json
import os
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import httpx
import pytest

from forecastview.config import API_URL_ENV

# Store original cwd at module load time
_original_cwd = Path.cwd()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def isolated_cwd(
    temp_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[Path, None, None]:
    """Run inside an empty directory with no config and no URL override."""
    monkeypatch.delenv(API_URL_ENV, raising=False)
    monkeypatch.setenv("HOME", str(temp_dir / "home"))
    os.chdir(temp_dir)

    yield temp_dir

    # Always return to original cwd
    os.chdir(_original_cwd)


@pytest.fixture
def sample_summary() -> dict[str, Any]:
    """Summary shaped like the one the backend writes to summary.json."""
    return {
        "single_anchor": {
            "anchor_eval": "2025-06-30",
            "rmse_1M": 12.3,
            "rmse_3M": 20.456,
        },
        "fsm_1m": {
            "n_trades": 3,
            "win_rate": 0.6667,
            "avg_trade_ret_pct": 0.012,
            "total_ret_pct": 0.036,
        },
        "fsm_3m": {"n_trades": 7, "win_rate": 0.5714},
        "monthly_extrema": [
            {
                "Month": "2025-07",
                "hi_date": "2025-07-15",
                "hi_price": 1105.5,
                "lo_date": "2025-07-02",
                "lo_price": 1010,
            },
        ],
        "future_3m_daily": [
            {"date": "2025-07-01", "pred_close": 1020.123},
            {"date": "2025-07-02", "pred_close": 1018.5},
        ],
        "features": {
            "main_top20": [
                {"feature": "SOX_return", "gain": 30.0, "perm_rmse": 1.5},
                {"feature": "ret_5d", "gain": 50.0, "perm_rmse": 0.5},
                {"feature": "Foreign_big_sell", "gain": 20.0, "perm_rmse": 2.0},
            ],
        },
    }


@pytest.fixture
def sample_run_payload(sample_summary: dict[str, Any]) -> dict[str, Any]:
    """Body of a successful POST /run response."""
    return {
        "ok": True,
        "artifacts": [
            "fig_02_forecast.png",
            "summary.json",
            "fig_01_backtest.png",
            "feature_importance.png",
        ],
        "summary": sample_summary,
        "stdout_tail": ["DATA_LAST = 2025-06-30", "ANCHOR_DATE = 2025-06-30"],
        "stderr_tail": [],
    }


BackendFactory = Callable[..., httpx.MockTransport]


@pytest.fixture
def make_backend() -> BackendFactory:
    """Build a mock transport serving /run and /artifacts/summary.json.

    The returned transport records every request in its ``requests`` list.
    """

    def factory(
        run_payload: Any = None,
        summary_payload: Any = None,
        run_status: int = 200,
        summary_status: int = 200,
        summary_error: bool = False,
    ) -> httpx.MockTransport:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.path == "/run":
                if run_status != 200:
                    return httpx.Response(run_status, json={"detail": "run exploded"})
                return httpx.Response(200, json=run_payload)
            if request.url.path == "/artifacts/summary.json":
                if summary_error:
                    raise httpx.ConnectError("connection refused", request=request)
                if summary_status != 200:
                    return httpx.Response(summary_status, text="not found")
                if isinstance(summary_payload, str):
                    return httpx.Response(200, text=summary_payload)
                return httpx.Response(200, content=json.dumps(summary_payload).encode())
            if request.url.path == "/":
                return httpx.Response(200, json={"status": "ok"})
            return httpx.Response(404, json={"detail": "Not Found"})

        transport = httpx.MockTransport(handler)
        transport.requests = requests  # type: ignore[attr-defined]
        return transport

    return factory
