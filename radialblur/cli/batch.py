"""CLI for rendering a directory of images with one scene."""

import argparse
import logging
from pathlib import Path

from radialblur.generators import BatchRenderer


def main():
    parser = argparse.ArgumentParser(description="Apply a radial blur scene to a directory of images")
    parser.add_argument("scene", type=Path, help="Path to YAML scene file")
    parser.add_argument("-i", "--input", type=Path, required=True, help="Input image directory")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Output image directory")
    parser.add_argument("-p", "--pattern", type=str, default="*.png", help="Glob pattern for input images")
    parser.add_argument("-w", "--workers", type=int, default=4, help="Number of parallel workers")
    parser.add_argument("--masks", type=str, default=None, metavar="SUBDIR", help="Also write masks to this output subdirectory")
    parser.add_argument("--no-skip", action="store_true", help="Don't skip existing outputs")
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bar")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")

    renderer = BatchRenderer(args.scene, args.input, args.output, pattern=args.pattern, mask_subdir=args.masks)

    results = renderer.render(
        num_workers=args.workers,
        skip_existing=not args.no_skip,
        progress=not args.no_progress,
    )

    print(f"\nRendering complete:")
    print(f"  Total images: {results['total']}")
    print(f"  Processed: {results['processed']}")
    print(f"  Skipped: {results['skipped']}")
    print(f"  Errors: {len(results['errors'])}")

    if results['errors']:
        print("\nErrors:")
        for err in results['errors'][:10]:
            print(f"  {err['name']}: {err['error']}")
        if len(results['errors']) > 10:
            print(f"  ... and {len(results['errors']) - 10} more")


if __name__ == "__main__":
    main()
