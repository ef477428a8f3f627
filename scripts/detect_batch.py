#!/usr/bin/env python
"""
Batch Tongue Detection Script

Runs tongue detection on every photo in a directory:
1. Load each image as RGBA
2. Detect tongue candidates (with fallback layout on failure)
3. Write one JSON result per image plus a summary

Usage:
    python scripts/detect_batch.py --input_dir photos/ --expected 8
"""

import argparse
from pathlib import Path
import json
from tqdm import tqdm
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from tongue_detection.data.image_source import list_images
from tongue_detection.pipeline import run_detection
from tongue_detection.utils.config import Config, load_config
from tongue_detection.utils.logging_utils import setup_logging, get_logger

logger = get_logger(__name__)


def process_image(
    image_path: Path,
    config: Config,
    expected_count: int,
    output_dir: Path
) -> dict:
    """Detect tongues on a single image and save the result."""
    result = {
        'image': image_path.name,
        'success': False,
        'error': None
    }

    try:
        detection = run_detection(str(image_path), config, expected_count)

        output_path = output_dir / f"{image_path.stem}_tongues.json"
        with open(output_path, 'w') as f:
            json.dump(detection.to_dict(), f, indent=2)

        result['num_candidates'] = len(detection.candidates)
        result['used_fallback'] = detection.used_fallback
        result['success'] = detection.success
        result['output_path'] = str(output_path)

    except (FileNotFoundError, ValueError) as e:
        result['error'] = str(e)
        logger.error(f"Error processing {image_path.name}: {e}")

    return result


def main():
    parser = argparse.ArgumentParser(description="Detect tongues on a directory of drum photos")
    parser.add_argument(
        "--input_dir",
        type=str,
        required=True,
        help="Directory of drum photos"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="configs/default.yaml",
        help="Configuration file"
    )
    parser.add_argument(
        "--output_dir",
        type=str,
        default="./outputs/detections",
        help="Output directory"
    )
    parser.add_argument(
        "--expected",
        type=int,
        default=None,
        help="Expected number of tongues per drum"
    )

    args = parser.parse_args()

    setup_logging()
    config = load_config(args.config)
    expected_count = args.expected or config.expected_count
    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    images = list_images(args.input_dir)
    logger.info(f"Found {len(images)} images in {args.input_dir}")

    all_results = []
    for image_path in tqdm(images, desc="Detecting tongues"):
        all_results.append(process_image(image_path, config, expected_count, output_dir))

    # Summary
    success_count = sum(1 for r in all_results if r['success'])
    fallback_count = sum(1 for r in all_results if r.get('used_fallback'))
    logger.info(f"Detection complete!")
    logger.info(f"Detected: {success_count}/{len(all_results)} (fallback: {fallback_count})")

    summary_path = output_dir / "detection_summary.json"
    with open(summary_path, 'w') as f:
        json.dump(all_results, f, indent=2)
    logger.info(f"Summary saved to: {summary_path}")


if __name__ == "__main__":
    main()
