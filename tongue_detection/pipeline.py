"""
Slit-Drum Tongue Detection Pipeline

Command-line entry point: load a drum photo, detect tongue candidates and
emit them as JSON.

Usage:
    python -m tongue_detection.pipeline --image drum.jpg --expected 8
    python -m tongue_detection.pipeline --image drum.jpg --output result.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .data.image_source import load_pixel_buffer
from .detection.detector import TongueDetector, DetectionResult, detect_with_fallback
from .utils.config import Config, load_config
from .utils.logging_utils import setup_logging, get_logger

logger = get_logger(__name__)


def run_detection(
    image_path: str,
    config: Config,
    expected_count: Optional[int] = None,
    use_fallback: bool = True,
) -> DetectionResult:
    """
    Detect tongues on a single image file.

    Args:
        image_path: Path to the drum photo
        config: Configuration object
        expected_count: tongue count hint; defaults to config.expected_count
        use_fallback: substitute the circular placeholder layout when
            nothing is detected

    Returns:
        DetectionResult
    """
    if expected_count is None:
        expected_count = config.expected_count

    image = load_pixel_buffer(image_path)
    logger.info(f"Analyzing {image_path} ({image.width}x{image.height}) for {expected_count} tongues")

    detector = TongueDetector(config.detection)
    if use_fallback:
        return detect_with_fallback(
            image.data, image.width, image.height, expected_count,
            backend=detector,
            fallback_config=config.fallback,
        )
    return detector.detect_with_details(image.data, image.width, image.height, expected_count)


def main(argv=None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Detect slit-drum tongue regions in a photo"
    )
    parser.add_argument(
        "--image",
        type=str,
        required=True,
        help="Drum photo (JPG/PNG)"
    )
    parser.add_argument(
        "--expected",
        type=int,
        default=None,
        help="Expected number of tongues (default from config)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Configuration file (YAML)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write JSON result here instead of stdout"
    )
    parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Return an empty list instead of the placeholder layout"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Verbose output"
    )

    args = parser.parse_args(argv)

    config = load_config(args.config) if args.config else Config()
    setup_logging(level=logging.DEBUG if args.verbose else config.log_level)

    try:
        result = run_detection(
            args.image, config,
            expected_count=args.expected,
            use_fallback=not args.no_fallback,
        )
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    if not result.candidates:
        logger.warning("No tongues detected. Try adjusting the expected count or upload a clearer image.")

    payload = json.dumps(result.to_dict(), indent=2)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(payload)
        logger.info(f"Result saved to: {output_path}")
    else:
        print(payload)

    return 0


if __name__ == "__main__":
    sys.exit(main())
