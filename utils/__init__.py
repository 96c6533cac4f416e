"""
Utilities Module for the Smart Layout Recommendation Engine

Provides validation helpers for image references, scorer tunables and
layout registry configuration.
"""

from .validation import (
    validate_image_reference,
    validate_scorer_tunables,
    validate_registry_config,
    collect_image_references,
    is_remote_reference,
    ValidationError,
    SUPPORTED_IMAGE_FORMATS
)

__all__ = [
    'validate_image_reference',
    'validate_scorer_tunables',
    'validate_registry_config',
    'collect_image_references',
    'is_remote_reference',
    'ValidationError',
    'SUPPORTED_IMAGE_FORMATS'
]
