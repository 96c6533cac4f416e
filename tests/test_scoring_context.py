"""
Unit tests for the scoring context builder.
"""

import math

import pytest

from layout_scoring.scoring_context import ScoringContext, build_context
from conftest import make_collection, make_image


class TestBuildContext:
    """Tests for collection-level aggregation."""

    def test_empty_collection(self):
        """An empty collection yields a zeroed context without NaN."""
        context = build_context([])

        assert context == ScoringContext()
        assert context.image_count == 0
        assert context.orientation_dominance == 0.0
        assert not any(math.isnan(v) for v in context.to_dict().values())

    @pytest.mark.parametrize("portrait, landscape, square", [
        (1, 0, 0), (3, 2, 1), (0, 5, 0), (4, 4, 4), (0, 0, 7),
    ])
    def test_orientation_counts_sum(self, portrait, landscape, square):
        context = build_context(make_collection(portrait, landscape, square))

        assert context.portrait_count == portrait
        assert context.landscape_count == landscape
        assert context.square_count == square
        assert context.portrait_count + context.landscape_count + context.square_count == context.image_count

    def test_orientation_dominance(self):
        context = build_context(make_collection(portrait=2, landscape=1, square=1))
        assert context.orientation_dominance == pytest.approx(0.5)

        context = build_context(make_collection(landscape=5))
        assert context.orientation_dominance == pytest.approx(1.0)

    def test_averages(self):
        images = [
            make_image('portrait', visual_weight=0.25, aesthetic_score=0.2),
            make_image('landscape', visual_weight=1.0, aesthetic_score=0.8),
        ]
        context = build_context(images)

        assert context.avg_visual_weight == pytest.approx(0.625)
        assert context.avg_aesthetic_score == pytest.approx(0.5)

    def test_balance_score_from_weight_variance(self):
        """Balance is 1 - 2 * population variance of visual weight."""
        images = [
            make_image('portrait', visual_weight=0.25),
            make_image('landscape', visual_weight=1.0),
        ]

        assert build_context(images).balance_score == pytest.approx(1 - 0.140625 * 2)

    def test_even_weights_balance_fully(self):
        assert build_context(make_collection(portrait=3, square=2)).balance_score == pytest.approx(1.0)

    def test_bounds(self):
        images = [make_image('portrait', visual_weight=w) for w in (0.0, 1.0, 0.0, 1.0)]
        context = build_context(images)

        assert 0.0 <= context.balance_score <= 1.0
        assert 0.0 <= context.orientation_dominance <= 1.0

    def test_order_insensitive(self):
        images = make_collection(portrait=2, landscape=3, square=1)
        assert build_context(images) == build_context(list(reversed(images)))
