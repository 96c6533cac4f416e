"""
Shared fixtures and builders for the layout recommendation tests.
"""

import os
import sys

import pytest

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from layout_scoring.image_metrics import ImageMetrics


DIMENSIONS = {
    'portrait': (400, 600),
    'landscape': (600, 400),
    'square': (500, 500)
}


def make_image(orientation, visual_weight=0.5, aesthetic_score=0.5, reference=None):
    """Create ImageMetrics with fixed heuristics for a given orientation."""
    width, height = DIMENSIONS[orientation]
    return ImageMetrics(
        reference=reference or f"{orientation}.jpg",
        width=width,
        height=height,
        visual_weight=visual_weight,
        aesthetic_score=aesthetic_score
    )


def make_collection(portrait=0, landscape=0, square=0, visual_weight=0.5, aesthetic_score=0.5):
    """Create a collection with the given number of images per orientation."""
    images = []
    for orientation, count in (('portrait', portrait), ('landscape', landscape), ('square', square)):
        for i in range(count):
            images.append(make_image(orientation, visual_weight, aesthetic_score,
                                     reference=f"{orientation}_{i}.jpg"))
    return images


@pytest.fixture
def portrait_trio():
    return make_collection(portrait=3)


@pytest.fixture
def balanced_six():
    return make_collection(portrait=2, landscape=2, square=2)
