"""
Integration tests for the layout registry and recommendation engine.
"""

import json
import sys
from pathlib import Path

import pytest
from PIL import Image

from layout_scoring.image_metrics import ImageMetricsExtractor
from layout_scoring.layout_scorers import SlideshowLayoutScorer, HIGH, LOW
from layout_scoring.recommendation_engine import LayoutRecommendationEngine
from layout_scoring.scorer_registry import LayoutScorerRegistry, SCORER_FAMILIES
from layout_scoring.scoring_context import build_context
from utils.validation import ValidationError
from conftest import make_collection

import recommend_layouts


DEFAULT_LAYOUTS = [
    "3 Portraits",
    "6 Portraits",
    "3x2 Landscape",
    "2x2 Grid",
    "Single Row",
    "Mixed Grid",
    "Column Stack",
    "Slideshow",
    "Mosaic",
]


class CountingContextBuilder:
    """Wraps build_context and counts invocations."""

    def __init__(self):
        self.calls = 0

    def __call__(self, metrics):
        self.calls += 1
        return build_context(metrics)


@pytest.fixture
def engine():
    return LayoutRecommendationEngine(extractor=ImageMetricsExtractor(probe=lambda ref: (400, 600)))


class TestLayoutScorerRegistry:
    """Tests for the immutable scorer lookup."""

    def test_default_layouts_in_order(self):
        assert LayoutScorerRegistry().list_layout_names() == DEFAULT_LAYOUTS

    def test_lookup(self):
        registry = LayoutScorerRegistry()

        assert registry.get_scorer("Mosaic").family == 'mosaic'
        assert registry.get_scorer("2x2 Grid").prefer_mixed_orientations is True
        assert registry.get_scorer("6 Portraits").match_bonus == 25
        assert registry.get_scorer("Nonexistent") is None
        assert "Slideshow" in registry
        assert len(registry) == len(DEFAULT_LAYOUTS)

    def test_mapping_is_read_only(self):
        registry = LayoutScorerRegistry()

        with pytest.raises(TypeError):
            registry._scorers["Extra"] = SlideshowLayoutScorer("Extra")

    @pytest.mark.parametrize("config", [
        {'layouts': []},
        {'layouts': [{'layout_name': 'A', 'family': 'hexagon', 'params': {}}]},
        {'layouts': [{'layout_name': 'A', 'family': 'slideshow'},
                     {'layout_name': 'A', 'family': 'mosaic'}]},
        {'layouts': [{'layout_name': 'A', 'family': 'grid', 'params': {'target_image_count': -4}}]},
        {'layouts': [{'layout_name': 'A', 'family': 'grid', 'params': {'columns': 4}}]},
    ])
    def test_malformed_config_fails_fast(self, config):
        with pytest.raises(ValidationError):
            LayoutScorerRegistry(config)

    def test_from_config_file(self, tmp_path):
        config_path = tmp_path / "layouts.json"
        config_path.write_text(json.dumps({
            'layouts': [
                {'layout_name': '3x3 Grid', 'family': 'grid', 'params': {'target_image_count': 9}},
                {'layout_name': 'Slideshow', 'family': 'slideshow'},
            ]
        }))

        registry = LayoutScorerRegistry.from_config_file(config_path)

        assert registry.list_layout_names() == ['3x3 Grid', 'Slideshow']
        assert registry.get_scorer('3x3 Grid').target_image_count == 9

    def test_shipped_config_matches_defaults(self):
        config_path = Path(__file__).parent.parent / "configs" / "layouts.json"
        registry = LayoutScorerRegistry.from_config_file(config_path)
        default = LayoutScorerRegistry()

        assert registry.list_layout_names() == default.list_layout_names()
        for name in DEFAULT_LAYOUTS:
            assert registry.get_scorer(name).tunables == default.get_scorer(name).tunables

    def test_every_family_is_constructible(self):
        required = {'grid': {'target_image_count': 4}, 'landscape': {'target_image_count': 6},
                    'portrait': {'target_image_count': 3}}
        for family, scorer_cls in SCORER_FAMILIES.items():
            scorer = scorer_cls(f"{family} layout", **required.get(family, {}))
            assert scorer.family == family


class TestLayoutRecommendationEngine:
    """Tests for single and ranked scoring."""

    def test_score_one_three_portraits(self, engine, portrait_trio):
        result = engine.score_one(portrait_trio, "3 Portraits")

        assert result.detailed_analysis.orientation_match == pytest.approx(100.0)
        assert result.detailed_analysis.image_count_match == pytest.approx(100.0)
        assert result.score > 80
        assert result.confidence == HIGH

    def test_score_one_unknown_layout(self, engine, portrait_trio):
        result = engine.score_one(portrait_trio, "Nonexistent")

        assert result.layout_name == "Nonexistent"
        assert result.score == 0
        assert result.confidence == LOW

    def test_score_one_mixed_grid(self, engine, balanced_six):
        result = engine.score_one(balanced_six, "Mixed Grid")

        assert result.detailed_analysis.orientation_match == pytest.approx(100.0)
        assert result.confidence == HIGH

    def test_score_all_sorted_descending(self, engine, balanced_six):
        results = engine.score_all(balanced_six)
        scores = [r.score for r in results]

        assert len(results) == len(DEFAULT_LAYOUTS)
        assert scores == sorted(scores, reverse=True)
        assert {r.layout_name for r in results} == set(DEFAULT_LAYOUTS)

    def test_context_built_once(self, portrait_trio):
        builder = CountingContextBuilder()
        engine = LayoutRecommendationEngine(context_builder=builder)

        engine.score_all(portrait_trio)
        assert builder.calls == 1

        engine.score_one(portrait_trio, "Mosaic")
        assert builder.calls == 2

    def test_deterministic(self, engine, balanced_six):
        assert engine.score_all(balanced_six) == engine.score_all(balanced_six)
        assert engine.score_one(balanced_six, "Mosaic") == engine.score_one(balanced_six, "Mosaic")

    def test_ties_keep_registration_order(self):
        registry = LayoutScorerRegistry({
            'layouts': [
                {'layout_name': 'Slides B', 'family': 'slideshow'},
                {'layout_name': 'Slides A', 'family': 'slideshow'},
                {'layout_name': 'Slides C', 'family': 'slideshow'},
            ]
        })
        engine = LayoutRecommendationEngine(registry=registry)

        results = engine.score_all(make_collection(square=5))

        assert [r.layout_name for r in results] == ['Slides B', 'Slides A', 'Slides C']

    @pytest.mark.parametrize("portrait, landscape, square", [
        (0, 0, 0), (1, 0, 0), (3, 0, 0), (0, 6, 0), (2, 2, 2), (5, 4, 3), (0, 0, 25), (10, 1, 1),
    ])
    def test_component_scores_in_range(self, engine, portrait, landscape, square):
        for result in engine.score_all(make_collection(portrait, landscape, square)):
            analysis = result.detailed_analysis
            for value in (analysis.orientation_match, analysis.image_count_match, analysis.visual_impact):
                assert 0.0 <= value <= 100.0
            assert result.confidence in ('high', 'medium', 'low')

    def test_empty_metrics_do_not_raise(self, engine):
        results = engine.score_all([])

        assert len(results) == len(DEFAULT_LAYOUTS)
        assert all(r.confidence == LOW for r in results)
        assert all(r.score == 0.0 for r in results)
        assert [r.layout_name for r in results] == DEFAULT_LAYOUTS


class TestRecommend:
    """Tests for end-to-end recommendation from image references."""

    def test_recommend_with_failed_image(self):
        sizes = {'a.jpg': (400, 600), 'b.jpg': (600, 400), 'c.jpg': (500, 500)}

        def probe(ref):
            if ref == 'broken.jpg':
                raise OSError("decode failed")
            return sizes[ref]

        engine = LayoutRecommendationEngine(extractor=ImageMetricsExtractor(probe=probe))
        results = engine.recommend(['a.jpg', 'broken.jpg', 'b.jpg', 'c.jpg'])

        assert len(results) == len(DEFAULT_LAYOUTS)
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_recommend_empty(self, engine):
        assert engine.recommend([]) == []
        assert engine.best_layout([]) is None

    def test_best_layout(self, engine):
        """Three 2:3 portraits favour a portrait-friendly vertical column."""
        references = ['p1.jpg', 'p2.jpg', 'p3.jpg']
        best = engine.best_layout(references)

        assert best == engine.recommend(references)[0]
        assert best.layout_name == "Column Stack"
        assert best.score == pytest.approx(117.0)
        assert best.confidence == HIGH


class TestCommandLine:
    """Tests for the recommendation script helpers."""

    def test_resolve_image_references(self, tmp_path):
        (tmp_path / "b.jpg").write_bytes(b"x")
        (tmp_path / "a.png").write_bytes(b"x")
        (tmp_path / "notes.txt").write_text("skip")

        references = recommend_layouts.resolve_image_references(
            [str(tmp_path), "https://cdn.example.com/c.jpg"]
        )

        assert references == [str(tmp_path / "a.png"), str(tmp_path / "b.jpg"),
                              "https://cdn.example.com/c.jpg"]

    def test_main_prints_json(self, tmp_path, monkeypatch, capsys):
        for name in ("p1.png", "p2.png", "p3.png"):
            Image.new('RGB', (40, 60), (90, 90, 90)).save(tmp_path / name)

        monkeypatch.setattr(sys, 'argv', ['recommend_layouts.py', '--images', str(tmp_path), '--json'])
        recommend_layouts.main()

        output = json.loads(capsys.readouterr().out)
        recommendations = output['recommendations']

        assert [image['orientation'] for image in output['images']] == ['portrait'] * 3
        assert len(recommendations) == len(DEFAULT_LAYOUTS)
        assert recommendations[0]['layout_name'] == "Column Stack"
        assert recommendations[0]['score'] == pytest.approx(117.0)

    def test_main_single_layout(self, tmp_path, monkeypatch, capsys):
        Image.new('RGB', (60, 40)).save(tmp_path / "wide.png")

        monkeypatch.setattr(sys, 'argv', ['recommend_layouts.py', '--images', str(tmp_path / "wide.png"),
                                          '--layout', 'Slideshow', '--json'])
        recommend_layouts.main()

        output = json.loads(capsys.readouterr().out)

        assert [r['layout_name'] for r in output['recommendations']] == ['Slideshow']

    def test_main_rejects_bad_config(self, tmp_path, monkeypatch):
        config_path = tmp_path / "layouts.json"
        config_path.write_text(json.dumps({'layouts': []}))

        monkeypatch.setattr(sys, 'argv', ['recommend_layouts.py', '--images', 'a.jpg',
                                          '--config', str(config_path)])

        with pytest.raises(SystemExit):
            recommend_layouts.main()
