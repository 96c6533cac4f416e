"""
Validation utilities for the Smart Layout Recommendation Engine.

Provides image reference checks, directory discovery and validation of
scorer tunables and registry configuration so that programmer errors are
caught when the registry is built rather than while scoring.
"""

import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import urlparse
import logging

logger = logging.getLogger(__name__)

# Supported image formats
SUPPORTED_IMAGE_FORMATS = {
    '.jpg', '.jpeg', '.png', '.gif', '.tiff', '.tif', '.bmp', '.webp'
}

REMOTE_SCHEMES = {'http', 'https'}


class ValidationError(Exception):
    """Raised when scorer tunables or a registry configuration are malformed."""
    pass


def is_remote_reference(reference: Any) -> bool:
    """
    Check whether an image reference points at a remote resource.

    Args:
        reference: Image reference (path, URL, bytes or file object)

    Returns:
        bool: True for http(s) URL strings
    """
    if not isinstance(reference, str):
        return False

    return urlparse(reference).scheme.lower() in REMOTE_SCHEMES


def validate_image_reference(reference: Any) -> Tuple[bool, List[str]]:
    """
    Validate an image reference before probing it.

    Args:
        reference: Local path, http(s) URL, raw bytes or binary file object

    Returns:
        tuple: (is_valid, list_of_errors)
    """
    errors = []

    if reference is None:
        return False, ["Image reference is None"]

    if isinstance(reference, (bytes, bytearray)):
        if not reference:
            errors.append("Image bytes are empty")
        return len(errors) == 0, errors

    if hasattr(reference, 'read'):
        return True, errors

    if is_remote_reference(reference):
        if not urlparse(reference).netloc:
            errors.append(f"URL has no host: {reference}")
        return len(errors) == 0, errors

    if not isinstance(reference, (str, Path)):
        return False, [f"Unsupported reference type: {type(reference).__name__}"]

    path = Path(reference)
    if not path.is_file():
        errors.append(f"File does not exist: {path}")
    elif not os.access(path, os.R_OK):
        errors.append(f"File is not readable: {path}")
    elif path.stat().st_size == 0:
        errors.append(f"File is empty: {path}")

    return len(errors) == 0, errors


def collect_image_references(folder: Union[str, Path], recursive: bool = False,
                             exts: Optional[Iterable[str]] = None) -> List[str]:
    """
    Collect image files from a directory in a stable (sorted) order.

    Args:
        folder: Directory to scan
        recursive: Whether to descend into subdirectories
        exts: Allowed extensions, defaults to SUPPORTED_IMAGE_FORMATS

    Returns:
        Sorted list of image paths as strings
    """
    folder = Path(folder)
    if not folder.is_dir():
        raise NotADirectoryError(folder)

    allowed = {e.lower() for e in (exts or SUPPORTED_IMAGE_FORMATS)}
    pattern = "**/*" if recursive else "*"

    references = []
    for p in sorted(folder.glob(pattern)):
        if not p.is_file():
            continue
        if p.suffix.lower() not in allowed:
            logger.debug(f"Skipping unsupported file: {p}")
            continue
        references.append(str(p))

    return references


def validate_scorer_tunables(layout_name: str, tunables: Mapping[str, Any],
                             fractions: Iterable[str] = (),
                             counts: Iterable[str] = (),
                             non_negative: Iterable[str] = (),
                             percentages: Iterable[str] = ()) -> None:
    """
    Fail fast on malformed scorer tunables.

    Args:
        layout_name: Layout the tunables belong to (used in messages)
        tunables: Mapping of tunable name to value
        fractions: Names that must be numbers in [0, 1]
        counts: Names that must be positive integers
        non_negative: Names that must be numbers >= 0
        percentages: Names that must be numbers in [0, 100]

    Raises:
        ValidationError: If any tunable is out of range
    """
    errors = []

    if not isinstance(layout_name, str) or not layout_name.strip():
        errors.append("layout_name must be a non-empty string")

    for name in fractions:
        value = tunables.get(name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not (0 <= value <= 1):
            errors.append(f"{name} must be a number between 0 and 1 (got {value!r})")

    for name in counts:
        value = tunables.get(name)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            errors.append(f"{name} must be a positive integer (got {value!r})")

    for name in non_negative:
        value = tunables.get(name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            errors.append(f"{name} must be a non-negative number (got {value!r})")

    for name in percentages:
        value = tunables.get(name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not (0 <= value <= 100):
            errors.append(f"{name} must be a number between 0 and 100 (got {value!r})")

    if errors:
        raise ValidationError(f"Invalid tunables for '{layout_name}': " + "; ".join(errors))


def validate_registry_config(config: Dict[str, Any],
                             valid_families: Iterable[str]) -> Tuple[bool, List[str]]:
    """
    Validate a layout registry configuration.

    Args:
        config: Configuration dictionary with a 'layouts' list
        valid_families: Names of the known scorer families

    Returns:
        tuple: (is_valid, list_of_errors)
    """
    errors = []
    valid_families = set(valid_families)

    layouts = config.get('layouts') if isinstance(config, dict) else None
    if not isinstance(layouts, list) or not layouts:
        return False, ["'layouts' must be a non-empty list"]

    seen = set()
    for index, entry in enumerate(layouts):
        if not isinstance(entry, dict):
            errors.append(f"layouts[{index}] must be a dictionary")
            continue

        name = entry.get('layout_name')
        if not isinstance(name, str) or not name.strip():
            errors.append(f"layouts[{index}].layout_name must be a non-empty string")
        elif name in seen:
            errors.append(f"Duplicate layout_name '{name}'")
        else:
            seen.add(name)

        family = entry.get('family')
        if family not in valid_families:
            errors.append(f"layouts[{index}].family '{family}' is not one of: {sorted(valid_families)}")

        params = entry.get('params', {})
        if not isinstance(params, dict):
            errors.append(f"layouts[{index}].params must be a dictionary")

    return len(errors) == 0, errors
