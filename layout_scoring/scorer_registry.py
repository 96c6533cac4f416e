"""
Layout Scorer Registry

Immutable mapping from layout name to a configured scorer instance, built
once from (layout_name, family, params) entries.
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Union

from utils.validation import ValidationError, validate_registry_config

from .layout_scorers import (
    BaseLayoutScorer,
    ColumnStackLayoutScorer,
    GridLayoutScorer,
    LandscapeLayoutScorer,
    MixedLayoutScorer,
    MosaicLayoutScorer,
    PortraitLayoutScorer,
    SingleRowLayoutScorer,
    SlideshowLayoutScorer
)

logger = logging.getLogger(__name__)

SCORER_FAMILIES = MappingProxyType({
    scorer_cls.family: scorer_cls
    for scorer_cls in (
        PortraitLayoutScorer,
        LandscapeLayoutScorer,
        GridLayoutScorer,
        SingleRowLayoutScorer,
        MixedLayoutScorer,
        ColumnStackLayoutScorer,
        SlideshowLayoutScorer,
        MosaicLayoutScorer
    )
})


class LayoutScorerRegistry:
    """
    Read-only lookup of layout scorers.

    Registration order is preserved and used as the tie-break order when
    recommendations are ranked.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Build the registry.

        Args:
            config: Dictionary with a 'layouts' list of
                {'layout_name', 'family', 'params'} entries; defaults to the
                built-in album layouts

        Raises:
            ValidationError: If the configuration or any tunable is malformed
        """

        config = config or self._get_default_config()

        is_valid, errors = validate_registry_config(config, SCORER_FAMILIES.keys())
        if not is_valid:
            raise ValidationError("Invalid layout registry config: " + "; ".join(errors))

        scorers = {}
        for entry in config['layouts']:
            scorer_cls = SCORER_FAMILIES[entry['family']]
            try:
                scorers[entry['layout_name']] = scorer_cls(entry['layout_name'], **entry.get('params', {}))
            except TypeError as e:
                raise ValidationError(f"Invalid params for '{entry['layout_name']}': {str(e)}") from e

        self._scorers = MappingProxyType(scorers)

        logger.info(f"LayoutScorerRegistry initialized with {len(self._scorers)} layouts")

    @staticmethod
    def _get_default_config() -> Dict[str, Any]:
        """Get the default album layout table."""

        return {
            'layouts': [
                {'layout_name': '3 Portraits', 'family': 'portrait',
                 'params': {'target_image_count': 3, 'match_bonus': 20}},
                {'layout_name': '6 Portraits', 'family': 'portrait',
                 'params': {'target_image_count': 6, 'match_bonus': 25}},
                {'layout_name': '3x2 Landscape', 'family': 'landscape',
                 'params': {'target_image_count': 6}},
                {'layout_name': '2x2 Grid', 'family': 'grid',
                 'params': {'target_image_count': 4, 'prefer_mixed_orientations': True}},
                {'layout_name': 'Single Row', 'family': 'single_row', 'params': {}},
                {'layout_name': 'Mixed Grid', 'family': 'mixed', 'params': {}},
                {'layout_name': 'Column Stack', 'family': 'column_stack', 'params': {}},
                {'layout_name': 'Slideshow', 'family': 'slideshow', 'params': {}},
                {'layout_name': 'Mosaic', 'family': 'mosaic', 'params': {}}
            ]
        }

    @classmethod
    def from_config_file(cls, config_path: Union[str, Path]) -> 'LayoutScorerRegistry':
        """
        Build a registry from a JSON configuration file.

        Args:
            config_path: Path to a JSON file in the registry config format

        Returns:
            LayoutScorerRegistry
        """

        with open(config_path, 'r', encoding = 'utf-8') as f:
            config = json.load(f)

        logger.info(f"Loaded layout configuration from: {config_path}")

        return cls(config)

    def get_scorer(self, layout_name: str) -> Optional[BaseLayoutScorer]:
        """Return the scorer for a layout, or None if it is not registered."""

        return self._scorers.get(layout_name)

    def list_layout_names(self) -> List[str]:
        """Registered layout names in registration order."""

        return list(self._scorers.keys())

    def scorers(self):
        """Registered (layout_name, scorer) pairs in registration order."""

        return self._scorers.items()

    def __contains__(self, layout_name: str) -> bool:
        return layout_name in self._scorers

    def __len__(self) -> int:
        return len(self._scorers)


_default_registry = None


def get_default_registry() -> LayoutScorerRegistry:
    """Return the shared registry of built-in album layouts."""

    global _default_registry

    if _default_registry is None:
        _default_registry = LayoutScorerRegistry()

    return _default_registry
