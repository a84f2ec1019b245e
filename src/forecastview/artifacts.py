# Copyright (c) Syntropy Systems
"""Classify run image artifacts into the forecast and backtest slots.

Classification happens in two steps. ``categorize`` looks at one filename in
isolation and reports what kind of artifact it is, its numeric index and a
keyword hint. ``assign_slots`` then applies the slot policy to the whole set
of categorized names. Both are pure.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from forecastview.models.result import ClassifiedFigures, FigureSlot

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from forecastview.models.base import JSONValue

logger = logging.getLogger(__name__)

SLOT_MAP_KEYS = ("figure_slots", "figures_by_slot")

FIGURE_MARKER = "fig"
FEATURE_IMPORTANCE_MARKERS = ("importance", "feat_imp", "shap")

FORECAST_KEYWORDS = ("forecast", "predict", "future", "next", "freeze_exog", "proj")
BACKTEST_KEYWORDS = ("backtest", "vs", "actual", "rmse", "trigger", "hist", "train")

_INDEX_RE = re.compile(r"_(\d{2})_")
_ABSOLUTE_RE = re.compile(r"^https?://", re.IGNORECASE)


class ArtifactKind(str, Enum):
    """Artifact family inferred from a filename."""

    FIGURE = "figure"
    FEATURE_IMPORTANCE = "feature_importance"
    OTHER = "other"


@dataclass(frozen=True)
class ArtifactCategory:
    """Result of categorizing a single artifact name."""

    name: str
    kind: ArtifactKind
    index: int | None = None
    hint: FigureSlot | None = None
    confidence: float = 0.0


def basename(name: str) -> str:
    """Return the final path segment of a name, URL or Windows path."""
    return re.split(r"[/\\]", name.split("?", 1)[0])[-1]


def is_png(name: str) -> bool:
    return basename(name).lower().endswith(".png")


def _keyword_hint(lowered: str) -> FigureSlot | None:
    forecast = any(keyword in lowered for keyword in FORECAST_KEYWORDS)
    backtest = any(keyword in lowered for keyword in BACKTEST_KEYWORDS)
    if forecast and not backtest:
        return FigureSlot.FORECAST
    if backtest and not forecast:
        return FigureSlot.BACKTEST
    return None


def categorize(name: str) -> ArtifactCategory:
    """Categorize one artifact name.

    Confidence reflects how much the name says about its slot: 0.5 for a bare
    figure marker, plus 0.25 each for a numeric index and a keyword hint.
    """
    lowered = basename(name).lower()

    if any(marker in lowered for marker in FEATURE_IMPORTANCE_MARKERS):
        return ArtifactCategory(name, ArtifactKind.FEATURE_IMPORTANCE, confidence=1.0)
    if FIGURE_MARKER not in lowered:
        return ArtifactCategory(name, ArtifactKind.OTHER)

    match = _INDEX_RE.search(lowered)
    index = int(match.group(1)) if match else None
    hint = _keyword_hint(lowered)

    confidence = 0.5
    if index is not None:
        confidence += 0.25
    if hint is not None:
        confidence += 0.25
    return ArtifactCategory(name, ArtifactKind.FIGURE, index, hint, confidence)


def _sort_key(category: ArtifactCategory) -> tuple[bool, int, str, str]:
    # Indexed figures first, in index order
    index = category.index if category.index is not None else 0
    return (category.index is None, index, basename(category.name), category.name)


def _best_hinted(
    candidates: Sequence[ArtifactCategory],
    slot: FigureSlot,
    exclude: ArtifactCategory | None,
) -> ArtifactCategory | None:
    hinted = [c for c in candidates if c.hint is slot and c is not exclude]
    if not hinted:
        return None
    # Equal confidence: backtest takes the earliest, forecast the latest
    if slot is FigureSlot.FORECAST:
        hinted.reverse()
    return max(hinted, key=lambda c: c.confidence)


def _assign_by_hint(
    candidates: Sequence[ArtifactCategory],
) -> tuple[ArtifactCategory, ArtifactCategory]:
    forecast = _best_hinted(candidates, FigureSlot.FORECAST, None)
    backtest = _best_hinted(candidates, FigureSlot.BACKTEST, forecast)
    if backtest is None:
        backtest = next(c for c in candidates if c is not forecast)
    if forecast is None:
        forecast = next(c for c in reversed(candidates) if c is not backtest)
    return backtest, forecast


def assign_slots(names: Iterable[str]) -> dict[FigureSlot, str]:
    """Assign raw artifact names to figure slots.

    Only PNG names take part. When at least two distinct indices exist among
    the figure-marked names, the lowest indexed is the backtest and the
    highest the forecast, and unindexed figures are ignored. Otherwise keyword
    hints decide. A single figure
    fills both slots. With no figure names at all, the sorted PNG list is
    used positionally (0 is the backtest, 1 the forecast).
    """
    pngs = [name for name in names if is_png(name)]
    candidates = sorted(
        (c for c in map(categorize, pngs) if c.kind is ArtifactKind.FIGURE),
        key=_sort_key,
    )

    if len(candidates) >= 2:
        # Unindexed figures never outrank two distinct indices
        indexed = [c for c in candidates if c.index is not None]
        if len({c.index for c in indexed}) >= 2:
            backtest, forecast = indexed[0], indexed[-1]
        else:
            backtest, forecast = _assign_by_hint(candidates)
        return {FigureSlot.BACKTEST: backtest.name, FigureSlot.FORECAST: forecast.name}

    if len(candidates) == 1:
        only = candidates[0].name
        return {FigureSlot.BACKTEST: only, FigureSlot.FORECAST: only}

    ordered = sorted(pngs, key=lambda name: (basename(name), name))
    slots: dict[FigureSlot, str] = {}
    if ordered:
        logger.debug("No figure-marked artifacts, assigning %d PNGs by position", len(ordered))
        slots[FigureSlot.BACKTEST] = ordered[0]
    if len(ordered) > 1:
        slots[FigureSlot.FORECAST] = ordered[1]
    return slots


def resolve_url(name: str, base_url: str, nonce: str) -> str:
    """Turn an artifact name or path into a cache-busted URL.

    Absolute URLs keep their path. Anything else is reduced to its final path
    segment and served from ``<base_url>/artifacts/``.
    """
    if _ABSOLUTE_RE.match(name):
        separator = "&" if "?" in name else "?"
        return f"{name}{separator}t={nonce}"
    return f"{base_url.rstrip('/')}/artifacts/{basename(name)}?t={nonce}"


def _explicit_slots(summary: Mapping[str, JSONValue]) -> dict[FigureSlot, str] | None:
    for key in SLOT_MAP_KEYS:
        slot_map = summary.get(key)
        if slot_map is None:
            continue
        if not isinstance(slot_map, dict):
            logger.warning("Ignoring %s: expected an object, got %s", key, type(slot_map).__name__)
            continue

        slots: dict[FigureSlot, str] = {}
        for slot in FigureSlot:
            entries = slot_map.get(slot.value)
            if isinstance(entries, str):
                entries = [entries]
            if not isinstance(entries, list):
                continue
            names = [entry for entry in entries if isinstance(entry, str) and entry]
            if names:
                # Latest write wins
                slots[slot] = names[-1]
        return slots
    return None


def classify(
    summary: Mapping[str, JSONValue],
    fallback_filenames: Iterable[str],
    *,
    base_url: str,
    nonce: str,
) -> ClassifiedFigures:
    """Resolve the forecast and backtest figure URLs for a run.

    Uses the summary's explicit slot map when the backend provides one and
    falls back to classifying the raw artifact filenames otherwise.
    """
    slots = _explicit_slots(summary)
    if slots is None:
        slots = assign_slots(fallback_filenames)

    urls = {slot.value: resolve_url(name, base_url, nonce) for slot, name in slots.items()}
    return ClassifiedFigures.model_validate(urls)
