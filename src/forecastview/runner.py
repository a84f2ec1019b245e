# Copyright (c) Syntropy Systems
"""Run invocation: trigger the backend, poll the summary, derive the view."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from forecastview.artifacts import classify
from forecastview.client import ForecastViewClientError, make_nonce
from forecastview.digest import build_log_digest, build_summary_digest
from forecastview.features import normalize
from forecastview.kpis import derive_kpis
from forecastview.models.result import ReconciledRun
from forecastview.reconcile import reconcile

if TYPE_CHECKING:
    from collections.abc import Sequence

    from forecastview.client import RunClient
    from forecastview.models.base import JSONObject
    from forecastview.store import RunStore

logger = logging.getLogger(__name__)


def fetch_summary_best_effort(client: RunClient, nonce: str) -> JSONObject | None:
    """Fetch summary.json, returning None instead of raising on failure."""
    try:
        return client.fetch_summary(nonce)
    except ForecastViewClientError as e:
        logger.warning("Could not read summary.json, using run response summary: %s", e)
        return None


def build_result(  # noqa: PLR0913
    summary: JSONObject,
    artifacts: Sequence[str],
    *,
    generation: int,
    nonce: str,
    base_url: str,
    ok: bool = True,
    log_lines: Sequence[str] = (),
) -> ReconciledRun:
    """Derive every view of a canonical summary.

    Each derived view only reads the summary, so a malformed field degrades
    its own view and leaves the others intact.
    """
    return ReconciledRun(
        generation=generation,
        nonce=nonce,
        ok=ok,
        artifacts=list(artifacts),
        summary=summary,
        figures=classify(summary, artifacts, base_url=base_url, nonce=nonce),
        features=normalize(summary),
        kpis=derive_kpis(summary),
        digest=build_summary_digest(summary),
        log_digest=build_log_digest(log_lines),
        log_lines=list(log_lines),
    )


def execute_run(
    client: RunClient,
    store: RunStore,
    *,
    fast_mode: bool = True,
    base_url: str | None = None,
) -> ReconciledRun:
    """Start a run and publish its reconciled result.

    The run request is a hard dependency: its errors propagate and nothing
    is published. The summary.json poll is best effort.

    Args:
        client: Backend client
        store: Store receiving the result
        fast_mode: Forwarded to the backend
        base_url: Origin used for artifact URLs (defaults to the client's)

    Returns:
        The reconciled run, also published to the store if still current

    Raises:
        ForecastViewClientError: If the run request fails

    """
    generation = store.begin()
    nonce = make_nonce()
    logger.info("Starting run %d (fast_mode=%s)", generation, fast_mode)

    response = client.start_run(fast_mode=fast_mode)
    if not response.ok:
        logger.warning("Backend reported run %d as failed", generation)

    polled = fetch_summary_best_effort(client, nonce)
    summary = reconcile(response.summary, polled)

    result = build_result(
        summary,
        response.artifacts,
        generation=generation,
        nonce=nonce,
        base_url=base_url or client.api_url,
        ok=response.ok,
        log_lines=[*response.stderr_tail, *response.stdout_tail],
    )
    _ = store.publish(result)
    return result


def load_persisted(
    client: RunClient,
    store: RunStore,
    *,
    base_url: str | None = None,
) -> ReconciledRun:
    """Derive the view from the last persisted summary.json without a new run.

    The summary's own ``figures`` list stands in for the artifact listing.

    Raises:
        ForecastViewClientError: If summary.json cannot be read

    """
    generation = store.begin()
    nonce = make_nonce()
    summary = reconcile(None, client.fetch_summary(nonce))

    figures = summary.get("figures")
    artifacts = (
        [name for name in figures if isinstance(name, str)]
        if isinstance(figures, list)
        else []
    )

    result = build_result(
        summary,
        artifacts,
        generation=generation,
        nonce=nonce,
        base_url=base_url or client.api_url,
    )
    _ = store.publish(result)
    return result
