#!/usr/bin/env python3
"""
Smart Layout Recommendation Script

This script ranks album layouts for a set of images by:
1. Reading the pixel dimensions of each image (local files or URLs)
2. Building the collection-level scoring context
3. Scoring every registered layout, or a single one, and printing the results

Usage:
    python recommend_layouts.py --images photos/
    python recommend_layouts.py --images a.jpg b.jpg https://example.com/c.jpg
    python recommend_layouts.py --images photos/ --layout "2x2 Grid" --json
    python recommend_layouts.py --images photos/ --config layouts.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from layout_scoring import ImageMetricsExtractor, LayoutRecommendationEngine, LayoutScorerRegistry
from utils.validation import ValidationError, collect_image_references

# Set up logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def resolve_image_references(inputs: List[str], recursive: bool = False) -> List[str]:
    """Expand directories into their image files; keep files and URLs as given."""
    references = []

    for item in inputs:
        path = Path(item)
        if path.is_dir():
            found = collect_image_references(path, recursive=recursive)
            logger.info(f"Found {len(found)} images in {path}")
            references.extend(found)
        else:
            references.append(item)

    return references


def print_recommendations(results) -> None:
    """Print a ranked recommendation table."""
    print(f"\n{'='*60}")
    print("Layout Recommendations")
    print(f"{'='*60}")

    for rank, result in enumerate(results, start=1):
        analysis = result.detailed_analysis
        print(f"{rank:>2}. {result.layout_name:<16} {result.score:6.1f}  [{result.confidence}]")
        print(f"    {result.reason}")
        print(f"    orientation: {analysis.orientation_match:.1f}  "
              f"count: {analysis.image_count_match:.1f}  "
              f"visual: {analysis.visual_impact:.1f}")


def main():
    """Main entry point for the recommendation script."""
    parser = argparse.ArgumentParser(description='Smart Layout Recommendation')
    parser.add_argument('--images', type=str, nargs='+', required=True,
                        help='Image paths, URLs or directories of images')
    parser.add_argument('--layout', type=str, default=None,
                        help='Score a single layout instead of ranking all')
    parser.add_argument('--config', type=str, default=None,
                        help='JSON layout registry configuration (optional)')
    parser.add_argument('--recursive', action='store_true',
                        help='Search directories recursively')
    parser.add_argument('--workers', type=int, default=8,
                        help='Number of images probed concurrently')
    parser.add_argument('--timeout', type=float, default=10.0,
                        help='Per-image probe timeout in seconds')
    parser.add_argument('--json', action='store_true',
                        help='Print results as JSON')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        registry = LayoutScorerRegistry.from_config_file(args.config) if args.config else None
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Failed to load configuration from {args.config}: {e}")
        sys.exit(1)

    references = resolve_image_references(args.images, recursive=args.recursive)
    if not references:
        logger.error("No images found")
        sys.exit(1)

    engine = LayoutRecommendationEngine(
        registry=registry,
        extractor=ImageMetricsExtractor(max_workers=args.workers, timeout=args.timeout)
    )

    metrics = engine.extractor.extract_all(references)

    if args.layout:
        results = [engine.score_one(metrics, args.layout)]
    else:
        results = engine.score_all(metrics)

    if args.json:
        print(json.dumps({
            'images': [m.to_dict() for m in metrics],
            'recommendations': [r.to_dict() for r in results]
        }, indent=2))
    else:
        print_recommendations(results)

    logger.info("Recommendation completed!")


if __name__ == '__main__':
    main()
