# Copyright (c) Syntropy Systems
"""Merge the run response summary with the polled summary.json."""
from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from forecastview.models.base import JSONObject, JSONValue

logger = logging.getLogger(__name__)

FEATURES_KEY = "features"


def merge_features(baseline: JSONValue, polled: JSONValue) -> JSONValue:
    """Merge two feature-importance payloads with shape-aware precedence.

    A list on either side is never field-merged: a polled list wins, then a
    baseline list. Two objects are merged key by key with the polled keys on
    top. Anything else keeps the baseline.
    """
    if isinstance(polled, list):
        return polled
    if isinstance(baseline, list):
        return baseline
    if isinstance(polled, dict):
        base = baseline if isinstance(baseline, dict) else {}
        return {**base, **polled}
    return baseline


def reconcile(
    response_summary: Mapping[str, JSONValue] | None,
    polled_summary: Mapping[str, JSONValue] | None,
) -> JSONObject:
    """Build the canonical summary for a run.

    Args:
        response_summary: Summary embedded in the run response, if any
        polled_summary: Summary read from summary.json, or None when the
            fetch failed

    Returns:
        A new dict; neither input is aliased or modified

    """
    merged: JSONObject = copy.deepcopy(dict(response_summary or {}))
    if polled_summary is None:
        logger.debug("No polled summary, using run response summary as is")
        return merged

    polled: JSONObject = copy.deepcopy(dict(polled_summary))
    baseline_features = merged.get(FEATURES_KEY)

    for key, value in polled.items():
        if key == FEATURES_KEY:
            continue
        merged[key] = value

    if FEATURES_KEY in polled:
        merged[FEATURES_KEY] = merge_features(
            baseline_features, polled[FEATURES_KEY]
        )

    logger.debug(
        "Reconciled summary: %d response keys, %d polled keys, %d merged keys",
        len(response_summary or {}),
        len(polled),
        len(merged),
    )
    return merged
