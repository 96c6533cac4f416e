#!/usr/bin/env python3
"""
Layout Scorers

This module contains one scoring strategy per layout family (grid, landscape,
portrait, single row, column stack, mixed, mosaic and slideshow). Every
strategy blends three component scores (orientation match, image count
match and visual impact, each in [0, 100]) with family-specific weights and
adds a bonus when the family's ideal condition holds.

Final scores are not clamped: a bonus can lift a result above 100.

"""

import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence

from utils.validation import ValidationError, validate_scorer_tunables

from .image_metrics import ImageMetrics
from .scoring_context import ScoringContext

logger = logging.getLogger(__name__)

HIGH = 'high'
MEDIUM = 'medium'
LOW = 'low'


@dataclass(frozen = True)
class DetailedAnalysis:
    """Component scores blended into a layout score, kept for transparency."""

    orientation_match: float = 0.0
    image_count_match: float = 0.0
    visual_impact: float = 0.0
    aesthetic_score: float = 0.0
    balance_score: float = 0.0


@dataclass(frozen = True)
class LayoutScore:
    """Explainable score of one layout for one image collection."""

    layout_name: str
    score: float
    reason: str
    detailed_analysis: DetailedAnalysis
    confidence: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'layout_name': self.layout_name,
            'score': self.score,
            'reason': self.reason,
            'detailed_analysis': asdict(self.detailed_analysis),
            'confidence': self.confidence
        }


def unknown_layout_score(layout_name: str) -> LayoutScore:
    """Sentinel result for a layout name with no registered scorer."""

    return LayoutScore(
        layout_name = layout_name,
        score = 0.0,
        reason = f"Unknown layout: {layout_name}",
        detailed_analysis = DetailedAnalysis(),
        confidence = LOW
    )


class BaseLayoutScorer(ABC):
    """
    Abstract base class for all layout scorers.

    Provides the common scoring entry point and helpers for ratio, ramp and
    weighted-blend calculations. Scorers hold only their constructor
    tunables and are safe to share between threads.

    """

    family = 'base'

    # Blend weights for orientation, count and visual components
    weights = {'orientation': 0.4, 'count': 0.3, 'visual': 0.3}

    def __init__(self, layout_name: str):
        """Initialize the scorer for a named layout."""

        validate_scorer_tunables(layout_name, {})
        self.layout_name = layout_name

    @property
    def min_images(self) -> int:
        """Smallest collection the layout is meant for."""
        return 1

    @property
    def tunables(self) -> Dict[str, Any]:
        return {}

    def score(self, metrics: Sequence[ImageMetrics], context: ScoringContext) -> LayoutScore:
        """
        Score this layout for a collection of images.

        Args:
            metrics: Per-image metrics
            context: Aggregate context built from the same metrics

        Returns:
            LayoutScore for this layout
        """

        if context.image_count == 0:
            # Nothing to lay out: zero score and zeroed components
            result = LayoutScore(
                layout_name = self.layout_name,
                score = 0.0,
                reason = f"No images to analyze (need {self.min_images}+ for {self.layout_name})",
                detailed_analysis = DetailedAnalysis(),
                confidence = LOW
            )
        else:
            result = self.calculate_score(metrics, context)

        logger.debug(f"{self.layout_name}: score = {result.score:.2f}, confidence = {result.confidence}")

        return result

    @abstractmethod
    def calculate_score(self, metrics: Sequence[ImageMetrics], context: ScoringContext) -> LayoutScore:
        """
        Calculate the layout score.

        Args:
            metrics: Per-image metrics
            context: Aggregate context built from the same metrics

        Returns:
            LayoutScore for this layout
        """

        pass

    @staticmethod
    def _percentage(part: int, whole: int) -> float:
        """Share of part in whole on a 0-100 scale, 0 for an empty whole."""

        if whole <= 0:
            return 0.0

        return part / whole * 100

    @staticmethod
    def _ramp(count: int, target: int) -> float:
        """Linear ramp towards a target count, 100 once reached."""

        return min(100.0, count / target * 100)

    def _blend(self, orientation_match: float, image_count_match: float, visual_impact: float) -> float:
        """Weighted sum of the three component scores."""

        return (
            orientation_match * self.weights['orientation'] +
            image_count_match * self.weights['count'] +
            visual_impact * self.weights['visual']
        )

    def _create_result(self, score: float, reason: str,
                       orientation_match: float, image_count_match: float, visual_impact: float,
                       context: ScoringContext, confidence: str = MEDIUM) -> LayoutScore:
        """Assemble a LayoutScore from the computed components."""

        return LayoutScore(
            layout_name = self.layout_name,
            score = score,
            reason = reason,
            detailed_analysis = DetailedAnalysis(
                orientation_match = orientation_match,
                image_count_match = image_count_match,
                visual_impact = visual_impact,
                aesthetic_score = context.avg_aesthetic_score * 100,
                balance_score = context.balance_score * 100
            ),
            confidence = confidence
        )

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in self.tunables.items())
        return f"{type(self).__name__}({self.layout_name!r}{', ' + params if params else ''})"


class GridLayoutScorer(BaseLayoutScorer):
    """
    Scores fixed-size grids such as a 2x2 grid.

    Grids tolerate any orientation mix; variety-preferring grids reward
    collections where no single orientation dominates.
    """

    family = 'grid'
    weights = {'orientation': 0.4, 'count': 0.4, 'visual': 0.2}

    # Dominance below this counts as a varied collection
    VARIETY_DOMINANCE = 0.8

    def __init__(self, layout_name: str, target_image_count: int, prefer_mixed_orientations: bool = False):
        validate_scorer_tunables(layout_name, {'target_image_count': target_image_count},
                                 counts = ['target_image_count'])
        super().__init__(layout_name)

        self.target_image_count = target_image_count
        self.prefer_mixed_orientations = bool(prefer_mixed_orientations)

    @property
    def min_images(self) -> int:
        return self.target_image_count

    @property
    def tunables(self) -> Dict[str, Any]:
        return {
            'target_image_count': self.target_image_count,
            'prefer_mixed_orientations': self.prefer_mixed_orientations
        }

    def calculate_score(self, metrics: Sequence[ImageMetrics], context: ScoringContext) -> LayoutScore:
        image_count = context.image_count
        is_varied = context.orientation_dominance < self.VARIETY_DOMINANCE

        image_count_match = self._ramp(image_count, self.target_image_count)

        if self.prefer_mixed_orientations:
            orientation_match = 90.0 if is_varied else 60.0
        else:
            orientation_match = 80.0

        visual_impact = context.balance_score * 100

        score = self._blend(orientation_match, image_count_match, visual_impact)
        confidence = MEDIUM

        if image_count == self.target_image_count:
            if self.prefer_mixed_orientations and is_varied:
                score += 15
                confidence = HIGH

            elif not self.prefer_mixed_orientations:
                score += 10
                confidence = HIGH

        if image_count < self.target_image_count:
            reason = f"Need more images for {self.layout_name} (have {image_count}, ideal: {self.target_image_count})"
        else:
            reason = f"Good for {image_count} images with balanced composition"

        return self._create_result(score, reason, orientation_match, image_count_match,
                                   visual_impact, context, confidence)


class LandscapeLayoutScorer(BaseLayoutScorer):
    """
    Scores landscape-oriented grids such as 3x2 Landscape.

    Above the target count the count match decreases, since extra images
    dilute a fixed landscape grid.
    """

    family = 'landscape'
    weights = {'orientation': 0.5, 'count': 0.3, 'visual': 0.2}

    def __init__(self, layout_name: str, target_image_count: int, landscape_threshold: float = 0.7):
        validate_scorer_tunables(layout_name,
                                 {'target_image_count': target_image_count,
                                  'landscape_threshold': landscape_threshold},
                                 counts = ['target_image_count'],
                                 fractions = ['landscape_threshold'])
        super().__init__(layout_name)

        self.target_image_count = target_image_count
        self.landscape_threshold = landscape_threshold

    @property
    def min_images(self) -> int:
        return self.target_image_count

    @property
    def tunables(self) -> Dict[str, Any]:
        return {
            'target_image_count': self.target_image_count,
            'landscape_threshold': self.landscape_threshold
        }

    def calculate_score(self, metrics: Sequence[ImageMetrics], context: ScoringContext) -> LayoutScore:
        image_count = context.image_count
        landscape_count = context.landscape_count

        if image_count >= self.target_image_count:
            image_count_match = min(100.0, self.target_image_count / image_count * 100)
        else:
            image_count_match = self._ramp(image_count, self.target_image_count)

        orientation_match = self._percentage(landscape_count, image_count)
        visual_impact = context.avg_aesthetic_score * 100

        score = self._blend(orientation_match, image_count_match, visual_impact)
        confidence = MEDIUM

        if (landscape_count >= image_count * self.landscape_threshold and
                image_count >= self.target_image_count):
            score += 20
            confidence = HIGH

        reason = f"{landscape_count}/{image_count} landscape images (optimal for wide photos)"

        return self._create_result(score, reason, orientation_match, image_count_match,
                                   visual_impact, context, confidence)


class PortraitLayoutScorer(BaseLayoutScorer):
    """
    Scores portrait galleries such as 3 Portraits and 6 Portraits.

    An all-portrait collection of at least the target size earns the match
    bonus; small collections are penalized.
    """

    family = 'portrait'
    weights = {'orientation': 0.5, 'count': 0.3, 'visual': 0.2}

    def __init__(self, layout_name: str, target_image_count: int, match_bonus: float = 20):
        validate_scorer_tunables(layout_name,
                                 {'target_image_count': target_image_count, 'match_bonus': match_bonus},
                                 counts = ['target_image_count'],
                                 non_negative = ['match_bonus'])
        super().__init__(layout_name)

        self.target_image_count = target_image_count
        self.match_bonus = match_bonus

    @property
    def min_images(self) -> int:
        return self.target_image_count

    @property
    def tunables(self) -> Dict[str, Any]:
        return {
            'target_image_count': self.target_image_count,
            'match_bonus': self.match_bonus
        }

    def calculate_score(self, metrics: Sequence[ImageMetrics], context: ScoringContext) -> LayoutScore:
        image_count = context.image_count
        portrait_count = context.portrait_count

        if image_count >= self.target_image_count:
            image_count_match = min(100.0, self.target_image_count / image_count * 100)
        else:
            image_count_match = self._ramp(image_count, self.target_image_count)

        orientation_match = self._percentage(portrait_count, image_count)
        visual_impact = context.avg_visual_weight * 100

        score = self._blend(orientation_match, image_count_match, visual_impact)
        confidence = MEDIUM

        if portrait_count == image_count and image_count >= self.target_image_count:
            score += self.match_bonus
            confidence = HIGH

        elif orientation_match < 50:
            confidence = LOW

        elif image_count < max(3, self.target_image_count - 2):
            score *= 0.5
            confidence = LOW

        return self._create_result(score, self._generate_reason(image_count, portrait_count),
                                   orientation_match, image_count_match, visual_impact,
                                   context, confidence)

    def _generate_reason(self, image_count: int, portrait_count: int) -> str:
        if image_count == self.target_image_count:
            return f"Perfect for {portrait_count} portrait images"

        if image_count > self.target_image_count:
            return f"Excellent for {portrait_count} portrait images in gallery style"

        return (f"{portrait_count}/{image_count} images are portrait "
                f"(optimal: {self.target_image_count} portraits)")


class SingleRowLayoutScorer(BaseLayoutScorer):
    """Scores a single horizontal row; works with any orientation."""

    family = 'single_row'
    weights = {'orientation': 0.3, 'count': 0.4, 'visual': 0.3}

    def __init__(self, layout_name: str, max_optimal_count: int = 8,
                 ideal_min_count: int = 3, ideal_max_count: int = 6):
        validate_scorer_tunables(layout_name,
                                 {'max_optimal_count': max_optimal_count,
                                  'ideal_min_count': ideal_min_count,
                                  'ideal_max_count': ideal_max_count},
                                 counts = ['max_optimal_count', 'ideal_min_count', 'ideal_max_count'])
        super().__init__(layout_name)

        if not ideal_min_count <= ideal_max_count <= max_optimal_count:
            raise ValidationError(f"Invalid tunables for '{layout_name}': expected "
                                  f"ideal_min_count <= ideal_max_count <= max_optimal_count")

        self.max_optimal_count = max_optimal_count
        self.ideal_min_count = ideal_min_count
        self.ideal_max_count = ideal_max_count

    @property
    def min_images(self) -> int:
        return self.ideal_min_count

    @property
    def tunables(self) -> Dict[str, Any]:
        return {
            'max_optimal_count': self.max_optimal_count,
            'ideal_min_count': self.ideal_min_count,
            'ideal_max_count': self.ideal_max_count
        }

    def calculate_score(self, metrics: Sequence[ImageMetrics], context: ScoringContext) -> LayoutScore:
        image_count = context.image_count

        if image_count <= self.max_optimal_count:
            image_count_match = 100.0
        else:
            image_count_match = max(50.0, 100.0 - (image_count - self.max_optimal_count) * 5)

        orientation_match = 80.0
        visual_impact = context.avg_aesthetic_score * 100

        score = self._blend(orientation_match, image_count_match, visual_impact)
        confidence = MEDIUM

        if self.ideal_min_count <= image_count <= self.ideal_max_count:
            score += 15
            confidence = HIGH

        if image_count <= self.max_optimal_count:
            reason = f"Great horizontal flow for {image_count} images"
        else:
            reason = (f"Too many images for single row (have {image_count}, "
                      f"ideal: {self.ideal_min_count}-{self.max_optimal_count})")

        return self._create_result(score, reason, orientation_match, image_count_match,
                                   visual_impact, context, confidence)


class ColumnStackLayoutScorer(BaseLayoutScorer):
    """
    Scores a vertical column of images.

    Usable with any orientation mix; portraits improve the fit, and long
    columns lose points per image beyond the optimal length.
    """

    family = 'column_stack'
    weights = {'orientation': 0.4, 'count': 0.3, 'visual': 0.3}

    def __init__(self, layout_name: str, max_optimal_count: int = 10, portrait_threshold: float = 0.6):
        validate_scorer_tunables(layout_name,
                                 {'max_optimal_count': max_optimal_count,
                                  'portrait_threshold': portrait_threshold},
                                 counts = ['max_optimal_count'],
                                 fractions = ['portrait_threshold'])
        super().__init__(layout_name)

        self.max_optimal_count = max_optimal_count
        self.portrait_threshold = portrait_threshold

    @property
    def tunables(self) -> Dict[str, Any]:
        return {
            'max_optimal_count': self.max_optimal_count,
            'portrait_threshold': self.portrait_threshold
        }

    def calculate_score(self, metrics: Sequence[ImageMetrics], context: ScoringContext) -> LayoutScore:
        image_count = context.image_count
        portrait_count = context.portrait_count

        if image_count <= self.max_optimal_count:
            image_count_match = 90.0
        else:
            image_count_match = max(60.0, 90.0 - (image_count - self.max_optimal_count) * 3)

        # Never below 20: portraits only improve the fit
        orientation_match = self._percentage(portrait_count, image_count) * 0.8 + 20
        visual_impact = context.balance_score * 100

        score = self._blend(orientation_match, image_count_match, visual_impact)
        confidence = MEDIUM

        is_portrait_heavy = image_count > 0 and portrait_count >= image_count * self.portrait_threshold
        if is_portrait_heavy:
            score += 20
            confidence = HIGH

        reason = f"Vertical layout {'perfect' if is_portrait_heavy else 'good'} for mobile viewing"

        return self._create_result(score, reason, orientation_match, image_count_match,
                                   visual_impact, context, confidence)


class MixedLayoutScorer(BaseLayoutScorer):
    """
    Scores layouts built for deliberately varied collections.

    Diversity counts which orientations are present at all, not their
    proportions.
    """

    family = 'mixed'
    weights = {'orientation': 0.4, 'count': 0.3, 'visual': 0.3}

    def __init__(self, layout_name: str, min_image_count: int = 4, diversity_threshold: float = 66):
        validate_scorer_tunables(layout_name,
                                 {'min_image_count': min_image_count,
                                  'diversity_threshold': diversity_threshold},
                                 counts = ['min_image_count'],
                                 percentages = ['diversity_threshold'])
        super().__init__(layout_name)

        self.min_image_count = min_image_count
        self.diversity_threshold = diversity_threshold

    @property
    def min_images(self) -> int:
        return self.min_image_count

    @property
    def tunables(self) -> Dict[str, Any]:
        return {
            'min_image_count': self.min_image_count,
            'diversity_threshold': self.diversity_threshold
        }

    @staticmethod
    def diversity_score(context: ScoringContext) -> float:
        """Share of the three orientations present in the collection, 0-100."""

        present = (min(context.portrait_count, 1) +
                   min(context.landscape_count, 1) +
                   min(context.square_count, 1))

        return present / 3 * 100

    def calculate_score(self, metrics: Sequence[ImageMetrics], context: ScoringContext) -> LayoutScore:
        image_count = context.image_count
        diversity_score = self.diversity_score(context)

        if image_count >= self.min_image_count:
            image_count_match = 90.0
        else:
            image_count_match = self._ramp(image_count, self.min_image_count)

        orientation_match = diversity_score
        visual_impact = context.balance_score * 100

        score = self._blend(orientation_match, image_count_match, visual_impact)
        confidence = MEDIUM

        if diversity_score > self.diversity_threshold and image_count >= 6:
            score += 15
            confidence = HIGH

        reason = (f"Great variety (P:{context.portrait_count}, "
                  f"L:{context.landscape_count}, S:{context.square_count})")

        return self._create_result(score, reason, orientation_match, image_count_match,
                                   visual_impact, context, confidence)


class MosaicLayoutScorer(BaseLayoutScorer):
    """
    Scores mosaics for large, visually dense collections.

    Count dominates the blend; orientation variety (low dominance) is
    rewarded.
    """

    family = 'mosaic'
    weights = {'orientation': 0.3, 'count': 0.5, 'visual': 0.2}

    # Collections smaller than this are never a confident mosaic
    SMALL_COLLECTION = 6

    def __init__(self, layout_name: str, min_optimal_count: int = 8,
                 ideal_count: int = 12, variety_threshold: float = 0.7):
        validate_scorer_tunables(layout_name,
                                 {'min_optimal_count': min_optimal_count,
                                  'ideal_count': ideal_count,
                                  'variety_threshold': variety_threshold},
                                 counts = ['min_optimal_count', 'ideal_count'],
                                 fractions = ['variety_threshold'])
        super().__init__(layout_name)

        self.min_optimal_count = min_optimal_count
        self.ideal_count = ideal_count
        self.variety_threshold = variety_threshold

    @property
    def min_images(self) -> int:
        return self.min_optimal_count

    @property
    def tunables(self) -> Dict[str, Any]:
        return {
            'min_optimal_count': self.min_optimal_count,
            'ideal_count': self.ideal_count,
            'variety_threshold': self.variety_threshold
        }

    def calculate_score(self, metrics: Sequence[ImageMetrics], context: ScoringContext) -> LayoutScore:
        image_count = context.image_count

        if image_count >= self.min_optimal_count:
            image_count_match = min(100.0, 70.0 + (image_count - self.min_optimal_count) * 2)
        else:
            image_count_match = self._ramp(image_count, self.min_optimal_count)

        orientation_match = (1 - context.orientation_dominance) * 100
        visual_impact = context.balance_score * 100

        score = self._blend(orientation_match, image_count_match, visual_impact)
        confidence = MEDIUM

        if image_count >= self.ideal_count and context.orientation_dominance < self.variety_threshold:
            score += 20
            confidence = HIGH

        elif image_count < self.SMALL_COLLECTION:
            confidence = LOW

        if image_count >= self.min_optimal_count:
            reason = f"Dynamic layout showcases {image_count} diverse images"
        else:
            reason = f"Better with more images (have {image_count}, ideal: {self.min_optimal_count}+)"

        return self._create_result(score, reason, orientation_match, image_count_match,
                                   visual_impact, context, confidence)


class SlideshowLayoutScorer(BaseLayoutScorer):
    """
    Fallback scorer: a slideshow suits any collection.

    Returns a flat base score so recommendations never collapse to all
    zeros, with small bonuses for very large and very small collections.
    """

    family = 'slideshow'

    def __init__(self, layout_name: str, base_score: float = 70,
                 large_collection_threshold: int = 10, small_collection_threshold: int = 3):
        validate_scorer_tunables(layout_name,
                                 {'base_score': base_score,
                                  'large_collection_threshold': large_collection_threshold,
                                  'small_collection_threshold': small_collection_threshold},
                                 percentages = ['base_score'],
                                 counts = ['large_collection_threshold', 'small_collection_threshold'])
        super().__init__(layout_name)

        self.base_score = base_score
        self.large_collection_threshold = large_collection_threshold
        self.small_collection_threshold = small_collection_threshold

    @property
    def tunables(self) -> Dict[str, Any]:
        return {
            'base_score': self.base_score,
            'large_collection_threshold': self.large_collection_threshold,
            'small_collection_threshold': self.small_collection_threshold
        }

    def calculate_score(self, metrics: Sequence[ImageMetrics], context: ScoringContext) -> LayoutScore:
        image_count = context.image_count

        score = float(self.base_score)
        image_count_match = 100.0
        orientation_match = 90.0
        visual_impact = context.avg_aesthetic_score * 100
        confidence = MEDIUM

        if image_count > self.large_collection_threshold:
            score += 15
            confidence = HIGH

        elif image_count < self.small_collection_threshold:
            score += 10

        if image_count > self.large_collection_threshold:
            reason = f"Perfect for large collection ({image_count} images)"
        else:
            reason = f"Classic presentation for {image_count} images"

        return self._create_result(score, reason, orientation_match, image_count_match,
                                   visual_impact, context, confidence)
