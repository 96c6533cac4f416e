"""
Smart Layout Recommendation Module

This module scores album layouts (grids, portrait and landscape galleries,
columns, mosaics and slideshows) against a collection of images and returns
ranked, explainable recommendations.
"""

from .image_metrics import (
    ImageMetrics,
    ImageMetricsExtractor,
    probe_image_dimensions,
    PORTRAIT,
    LANDSCAPE,
    SQUARE
)
from .scoring_context import ScoringContext, build_context
from .layout_scorers import (
    BaseLayoutScorer,
    GridLayoutScorer,
    LandscapeLayoutScorer,
    PortraitLayoutScorer,
    SingleRowLayoutScorer,
    ColumnStackLayoutScorer,
    MixedLayoutScorer,
    MosaicLayoutScorer,
    SlideshowLayoutScorer,
    DetailedAnalysis,
    LayoutScore,
    unknown_layout_score
)
from .scorer_registry import LayoutScorerRegistry, SCORER_FAMILIES, get_default_registry
from .recommendation_engine import LayoutRecommendationEngine

__all__ = [
    'ImageMetrics',
    'ImageMetricsExtractor',
    'probe_image_dimensions',
    'PORTRAIT',
    'LANDSCAPE',
    'SQUARE',
    'ScoringContext',
    'build_context',
    'BaseLayoutScorer',
    'GridLayoutScorer',
    'LandscapeLayoutScorer',
    'PortraitLayoutScorer',
    'SingleRowLayoutScorer',
    'ColumnStackLayoutScorer',
    'MixedLayoutScorer',
    'MosaicLayoutScorer',
    'SlideshowLayoutScorer',
    'DetailedAnalysis',
    'LayoutScore',
    'unknown_layout_score',
    'LayoutScorerRegistry',
    'SCORER_FAMILIES',
    'get_default_registry',
    'LayoutRecommendationEngine'
]

__version__ = "1.0.0"
