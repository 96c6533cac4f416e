"""
Scoring Context

Reduces per-image metrics into the collection-level statistics shared by
every layout scorer in a single scoring request.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence

import numpy as np

from .image_metrics import ImageMetrics, LANDSCAPE, ORIENTATIONS, PORTRAIT, SQUARE

logger = logging.getLogger(__name__)


@dataclass(frozen = True)
class ScoringContext:
    """Aggregate statistics for a collection of images."""

    image_count: int = 0
    portrait_count: int = 0
    landscape_count: int = 0
    square_count: int = 0
    avg_aesthetic_score: float = 0.0
    avg_visual_weight: float = 0.0
    orientation_dominance: float = 0.0
    balance_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def build_context(metrics: Sequence[ImageMetrics]) -> ScoringContext:
    """
    Build the scoring context for a collection of images.

    Args:
        metrics: Per-image metrics, in any order

    Returns:
        ScoringContext; all aggregates are zero for an empty collection
    """

    image_count = len(metrics)
    if image_count == 0:
        return ScoringContext()

    counts = dict.fromkeys(ORIENTATIONS, 0)
    for image in metrics:
        counts[image.orientation] += 1

    visual_weights = np.array([image.visual_weight for image in metrics], dtype = np.float64)
    aesthetic_scores = np.array([image.aesthetic_score for image in metrics], dtype = np.float64)

    orientation_dominance = max(counts.values()) / image_count

    # Population variance; evenly weighted collections balance best
    weight_variance = float(np.var(visual_weights))
    balance_score = 1.0 - weight_variance * 2

    return ScoringContext(
        image_count = image_count,
        portrait_count = counts[PORTRAIT],
        landscape_count = counts[LANDSCAPE],
        square_count = counts[SQUARE],
        avg_aesthetic_score = float(np.mean(aesthetic_scores)),
        avg_visual_weight = float(np.mean(visual_weights)),
        orientation_dominance = _clamp_unit(orientation_dominance),
        balance_score = _clamp_unit(balance_score)
    )
