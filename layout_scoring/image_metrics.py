#!/usr/bin/env python3
"""
Image Metrics Extraction

This module determines the pixel dimensions of album images and derives the
per-image figures used by the layout scorers: orientation, visual weight and
aesthetic score. Decoding only reads the image header; remote images are
fetched over HTTP(S).

"""

import io
import re
import time
import logging
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from urllib.parse import unquote

import requests
from PIL import Image, UnidentifiedImageError

from utils.validation import is_remote_reference, validate_image_reference

logger = logging.getLogger(__name__)

PORTRAIT = 'portrait'
LANDSCAPE = 'landscape'
SQUARE = 'square'

ORIENTATIONS = (PORTRAIT, LANDSCAPE, SQUARE)

# Aspect ratios strictly outside this band are landscape / portrait
LANDSCAPE_THRESHOLD = 1.1
PORTRAIT_THRESHOLD = 0.9

# Area at which an image reaches full size weight (12 MP)
REFERENCE_AREA = 12_000_000

GOLDEN_RATIO = 1.618

# 1:1, 4:3, 3:2, golden, 2:1, cinemascope
PLEASING_RATIOS = (1.0, 4 / 3, 1.5, GOLDEN_RATIO, 2.0, 2.35)

NEUTRAL_METRIC = 0.5

# WIDTHxHEIGHT hint embedded in a file name, e.g. beach_1920x1080.jpg
DIMENSION_HINT_PATTERN = re.compile(r'(\d{3,5})x(\d{3,5})')

# Orientation keywords in a file name, mapped to a full-HD stand-in size
PORTRAIT_HINTS = ('portrait', '_p_', '-p-')
LANDSCAPE_HINTS = ('landscape', '_l_', '-l-')
PORTRAIT_HINT_SIZE = (1080, 1920)
LANDSCAPE_HINT_SIZE = (1920, 1080)

# Remote downloads stop after this many bytes; the header sits at the start
MAX_HEADER_BYTES = 1024 * 1024
DOWNLOAD_CHUNK_SIZE = 64 * 1024

# How often extract_all checks running probes against the time limit
POLL_INTERVAL = 0.05

DimensionProbe = Callable[[Any], Tuple[int, int]]


def classify_orientation(aspect_ratio: float) -> str:
    """Map an aspect ratio to portrait, landscape or square."""

    if aspect_ratio > LANDSCAPE_THRESHOLD:
        return LANDSCAPE

    if aspect_ratio < PORTRAIT_THRESHOLD:
        return PORTRAIT

    return SQUARE


def calculate_visual_weight(width: int, height: int) -> float:
    """
    Calculate visual weight from pixel area and aspect extremity.

    Args:
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        Visual weight in [0.25, 1]
    """

    size_weight = min(1.0, (width * height) / REFERENCE_AREA)

    # Extremity of the long side over the short side, 2:1 and beyond saturate
    elongation = max(width, height) / min(width, height)
    aspect_weight = 0.5 + 0.5 * min(1.0, elongation - 1.0)

    return (size_weight + aspect_weight) / 2


def calculate_aesthetic_score(width: int, height: int) -> float:
    """
    Score proximity of the image proportions to common pleasing ratios.

    Args:
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        Aesthetic score in [0, 1]
    """

    elongation = max(width, height) / min(width, height)

    aesthetic_score = 0.0
    for ratio in PLEASING_RATIOS:
        score = max(0.0, 1.0 - abs(elongation - ratio) * 2)
        aesthetic_score = max(aesthetic_score, score)

    return aesthetic_score


def describe_reference(reference: Any) -> str:
    """Return a printable identifier for an image reference."""

    if isinstance(reference, (str, Path)):
        return str(reference)

    if isinstance(reference, (bytes, bytearray)):
        return f"<bytes:{len(reference)}>"

    name = getattr(reference, 'name', None)
    if isinstance(name, str):
        return name

    return f"<{type(reference).__name__}>"


@dataclass(frozen = True)
class ImageMetrics:
    """
    Per-image figures consumed by the layout scorers.

    Aspect ratio and orientation are derived from the pixel dimensions and
    cannot be set independently.
    """

    reference: str
    width: int
    height: int
    visual_weight: float
    aesthetic_score: float
    is_fallback: bool = False

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def orientation(self) -> str:
        return classify_orientation(self.aspect_ratio)

    @classmethod
    def from_dimensions(cls, width: int, height: int, reference: str = '') -> 'ImageMetrics':
        """Build metrics for an image of the given pixel size."""

        return cls(
            reference = reference,
            width = width,
            height = height,
            visual_weight = calculate_visual_weight(width, height),
            aesthetic_score = calculate_aesthetic_score(width, height)
        )

    @classmethod
    def fallback(cls, reference: str = '') -> 'ImageMetrics':
        """Neutral 1x1 record used when an image cannot be decoded."""

        return cls(
            reference = reference,
            width = 1,
            height = 1,
            visual_weight = NEUTRAL_METRIC,
            aesthetic_score = NEUTRAL_METRIC,
            is_fallback = True
        )

    def to_dict(self) -> dict:
        return {
            'reference': self.reference,
            'width': self.width,
            'height': self.height,
            'aspect_ratio': self.aspect_ratio,
            'orientation': self.orientation,
            'visual_weight': self.visual_weight,
            'aesthetic_score': self.aesthetic_score,
            'is_fallback': self.is_fallback
        }


def dimensions_from_reference_hint(reference: str) -> Optional[Tuple[int, int]]:
    """
    Read a size hint from a URL or file name.

    An explicit WIDTHxHEIGHT hint wins; otherwise an orientation keyword such
    as 'portrait' or '_l_' maps to a full-HD size of that orientation.

    Args:
        reference: URL or path string

    Returns:
        (width, height) if a non-degenerate hint is present, otherwise None
    """

    decoded = unquote(reference)

    match = DIMENSION_HINT_PATTERN.search(decoded)
    if match:
        width, height = int(match.group(1)), int(match.group(2))
        if width > 0 and height > 0:
            return width, height

    lowered = decoded.lower()

    if any(hint in lowered for hint in PORTRAIT_HINTS):
        return PORTRAIT_HINT_SIZE

    if any(hint in lowered for hint in LANDSCAPE_HINTS):
        return LANDSCAPE_HINT_SIZE

    return None


def fetch_image_header(url: str, timeout: float = 10.0) -> io.BytesIO:
    """
    Download the leading bytes of a remote image.

    Args:
        url: http(s) URL of the image
        timeout: Network timeout in seconds

    Returns:
        Buffer holding at most MAX_HEADER_BYTES of the response body
    """

    buffer = io.BytesIO()

    with requests.get(url, timeout = timeout, stream = True) as response:
        response.raise_for_status()

        for chunk in response.iter_content(chunk_size = DOWNLOAD_CHUNK_SIZE):
            buffer.write(chunk)
            if buffer.tell() >= MAX_HEADER_BYTES:
                break

    buffer.seek(0)

    return buffer


def probe_image_dimensions(reference: Any, timeout: float = 10.0) -> Tuple[int, int]:
    """
    Decode the natural pixel size of an image from its header.

    Args:
        reference: Local path, http(s) URL, raw bytes or binary file object
        timeout: Network timeout in seconds for remote references

    Returns:
        (width, height) in pixels

    Raises:
        ValueError: If the reference is invalid or the image is unreadable
        requests.RequestException: If a remote image cannot be fetched
    """

    is_valid, errors = validate_image_reference(reference)
    if not is_valid:
        raise ValueError("; ".join(errors))

    if is_remote_reference(reference):
        hint = dimensions_from_reference_hint(reference)
        if hint is not None:
            logger.debug(f"Using dimension hint for {reference}: {hint[0]}x{hint[1]}")
            return hint

        source = fetch_image_header(reference, timeout = timeout)

    elif isinstance(reference, (bytes, bytearray)):
        source = io.BytesIO(reference)

    else:
        source = reference

    try:
        # Image.open is lazy; only the header is parsed for .size
        with Image.open(source) as img:
            width, height = img.size

    except UnidentifiedImageError as e:
        raise ValueError(f"Unreadable image: {describe_reference(reference)}") from e

    return int(width), int(height)


class ImageMetricsExtractor:
    """
    Extracts ImageMetrics for single images or whole collections.

    Decoding failures never propagate: the image is logged and replaced by a
    neutral fallback record so that scoring always has a complete input set.
    """

    def __init__(self, probe: Optional[DimensionProbe] = None,
                 max_workers: int = 8, timeout: float = 10.0):
        """
        Initialize the extractor.

        Args:
            probe: Callable returning (width, height) for a reference,
                defaults to header decoding with Pillow and requests
            max_workers: Number of concurrent probes in extract_all
            timeout: Per-image time limit in seconds
        """

        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self.timeout = timeout
        self.max_workers = max_workers
        self.probe = probe or partial(probe_image_dimensions, timeout = timeout)

        logger.info(f"ImageMetricsExtractor initialized (workers = {max_workers}, timeout = {timeout}s)")

    def extract(self, image_ref: Any) -> ImageMetrics:
        """
        Compute metrics for one image.

        Args:
            image_ref: Local path, http(s) URL, raw bytes or binary file object

        Returns:
            ImageMetrics, or the fallback record if the image cannot be probed
        """

        reference = describe_reference(image_ref)

        try:
            width, height = self.probe(image_ref)
            if width <= 0 or height <= 0:
                raise ValueError(f"Non-positive dimensions {width}x{height}")

            return ImageMetrics.from_dimensions(int(width), int(height), reference)

        except Exception as e:
            logger.warning(f"Using fallback metrics for {reference}: {str(e)}")
            return ImageMetrics.fallback(reference)

    def _extract_timed(self, image_ref: Any, index: int, started: Dict[int, float]) -> ImageMetrics:
        """Run extract() and record when the worker picked the image up."""

        started[index] = time.monotonic()

        return self.extract(image_ref)

    def extract_all(self, image_refs: Iterable[Any]) -> List[ImageMetrics]:
        """
        Compute metrics for a collection of images concurrently.

        The time limit applies to each image from the moment a worker starts
        on it, so images waiting in the queue are never timed out.

        Args:
            image_refs: Image references in display order

        Returns:
            List of ImageMetrics in the same order as image_refs
        """

        image_refs = list(image_refs)
        if not image_refs:
            return []

        results: List[Optional[ImageMetrics]] = [None] * len(image_refs)
        started: Dict[int, float] = {}

        executor = ThreadPoolExecutor(max_workers = min(self.max_workers, len(image_refs)))

        try:
            pending = {
                executor.submit(self._extract_timed, ref, index, started): index
                for index, ref in enumerate(image_refs)
            }

            while pending:
                done, _ = wait(pending, timeout = POLL_INTERVAL, return_when = FIRST_COMPLETED)

                for future in done:
                    results[pending.pop(future)] = future.result()

                now = time.monotonic()
                for future, index in list(pending.items()):
                    start = started.get(index)
                    if future.done() or start is None or now - start < self.timeout:
                        continue

                    reference = describe_reference(image_refs[index])
                    logger.warning(f"Using fallback metrics for {reference}: timed out after {self.timeout}s")
                    results[index] = ImageMetrics.fallback(reference)
                    del pending[future]

        finally:
            # Stalled probes are abandoned rather than awaited
            executor.shutdown(wait = False, cancel_futures = True)

        fallback_count = sum(1 for m in results if m.is_fallback)
        logger.debug(f"Extracted metrics for {len(results)} images ({fallback_count} fallbacks)")

        return results
