#!/usr/bin/env python3
"""
Layout Recommendation Engine

This module provides the LayoutRecommendationEngine class that coordinates
metrics extraction, context building and the registered layout scorers to
produce ranked, explainable layout recommendations for an album.

"""

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional, Sequence

from .image_metrics import ImageMetrics, ImageMetricsExtractor
from .layout_scorers import LayoutScore, unknown_layout_score
from .scorer_registry import LayoutScorerRegistry, get_default_registry
from .scoring_context import ScoringContext, build_context

logger = logging.getLogger(__name__)


class LayoutRecommendationEngine:
    """
    Main layout recommendation orchestrator.

    Scoring is a pure function of the image metrics: the scoring context is
    built once per request and shared by every scorer consulted.

    """

    def __init__(self, registry: Optional[LayoutScorerRegistry] = None,
                 extractor: Optional[ImageMetricsExtractor] = None,
                 context_builder: Callable[[Sequence[ImageMetrics]], ScoringContext] = build_context):
        """
        Initialize the recommendation engine.

        Args:
            registry: Layout scorers to consult, defaults to the built-in layouts
            extractor: Metrics extractor used by recommend()
            context_builder: Function reducing metrics to a ScoringContext
        """

        self.registry = registry if registry is not None else get_default_registry()
        self.extractor = extractor or ImageMetricsExtractor()
        self.context_builder = context_builder

        logger.info(f"LayoutRecommendationEngine initialized with {len(self.registry)} layouts")

    def score_one(self, metrics: Sequence[ImageMetrics], layout_name: str) -> LayoutScore:
        """
        Score a single layout.

        Args:
            metrics: Per-image metrics
            layout_name: Registered layout name

        Returns:
            LayoutScore; a zero-score, low-confidence result for unknown layouts
        """

        scorer = self.registry.get_scorer(layout_name)

        if scorer is None:
            logger.warning(f"No scorer registered for layout '{layout_name}'")
            return unknown_layout_score(layout_name)

        context = self.context_builder(metrics)

        return scorer.score(metrics, context)

    def score_all(self, metrics: Sequence[ImageMetrics]) -> List[LayoutScore]:
        """
        Score every registered layout.

        Args:
            metrics: Per-image metrics

        Returns:
            LayoutScores sorted by score descending; equal scores keep
            registration order
        """

        context = self.context_builder(metrics)

        results = [scorer.score(metrics, context) for _, scorer in self.registry.scorers()]

        # sorted() is stable, so ties stay in registration order
        return sorted(results, key = lambda result: result.score, reverse = True)

    def recommend(self, image_refs: Iterable[Any]) -> List[LayoutScore]:
        """
        Extract metrics for a set of images and rank all layouts.

        Args:
            image_refs: Local paths, URLs, bytes or file objects

        Returns:
            Ranked LayoutScores, empty when no images are given
        """

        start_time = datetime.now()

        image_refs = list(image_refs)
        if not image_refs:
            logger.info("No images given, nothing to recommend")
            return []

        metrics = self.extractor.extract_all(image_refs)
        recommendations = self.score_all(metrics)

        processing_time = (datetime.now() - start_time).total_seconds()
        logger.info(f"Ranked {len(recommendations)} layouts for {len(metrics)} images "
                    f"in {processing_time:.3f}s - top: {recommendations[0].layout_name}")

        return recommendations

    def best_layout(self, image_refs: Iterable[Any]) -> Optional[LayoutScore]:
        """Return the top recommendation, or None when no images are given."""

        recommendations = self.recommend(image_refs)

        return recommendations[0] if recommendations else None
