"""CLI for rendering the radial blur effect on a single image."""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

from radialblur import BlurConfig, RadialBlurEngine, SceneCodec, make_placeholder
from radialblur.codecs import Scene, PointSpec
from radialblur.core import mask_to_image
from radialblur.generators.batch_renderer import load_image, save_image


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(message)s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Apply radial blur points to an image")
    parser.add_argument("input", type=Path, nargs="?", help="Input image (placeholder image if omitted)")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Output image path")
    parser.add_argument("-s", "--scene", type=Path, help="YAML scene file with config and points")
    parser.add_argument("--mask", type=Path, help="Also write the influence mask to this path")

    parser.add_argument("--global-max", type=int, help="Global blur maximum (1-30)")
    parser.add_argument("--invert", action="store_true", help="Points mark sharp regions")
    parser.add_argument("--random", type=int, metavar="N", help="Place N random points")
    parser.add_argument("--seed", type=int, help="Random seed for point placement")
    parser.add_argument("--show-gradient", action="store_true", help="Render the gradient map preview")
    parser.add_argument("--gradient-only", action="store_true", help="Preview the gradient without the image")
    parser.add_argument("--opacity", type=float, help="Gradient preview opacity (0.1-1.0)")
    parser.add_argument("--print-scene", action="store_true", help="Print the resolved scene as YAML")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser


def _resolve_scene(args) -> Scene:
    scene = SceneCodec.load(args.scene) if args.scene else Scene()

    overrides = scene.config.to_dict()
    if args.global_max is not None:
        overrides["global_max"] = args.global_max
    if args.invert:
        overrides["invert"] = True
    if args.show_gradient or args.gradient_only:
        overrides["show_gradient_map"] = True
    if args.gradient_only:
        overrides["show_only_gradient"] = True
    if args.opacity is not None:
        overrides["gradient_opacity"] = args.opacity
    scene.config = BlurConfig.from_dict(overrides)

    if args.random is not None:
        scene.randomize = args.random
    if args.seed is not None:
        scene.seed = args.seed
    return scene


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    scene = _resolve_scene(args)
    image = load_image(args.input) if args.input else make_placeholder()
    H, W = image.shape[:2]

    points = scene.build_point_set(W, H)
    if not args.scene and args.random is None:
        # No points given: start like a freshly loaded image
        points.reset(W, H)

    if args.print_scene:
        resolved = Scene(
            config=scene.config,
            points=[PointSpec(p.x, p.y, p.intensity, p.softness) for p in points],
        )
        print(SceneCodec.dumps(resolved))

    engine = RadialBlurEngine(scene.config)
    output, meta = engine.render(image, points)

    save_image(args.output, np.ascontiguousarray(output))
    if args.mask:
        save_image(args.mask, mask_to_image(meta["mask"]))

    if meta["status"] != "success":
        print(f"Compositing failed, wrote original image: {meta['error']}", file=sys.stderr)
        return 1

    print(f"Rendered {W}x{H} ({meta['mode']}, {meta['num_points']} points) -> {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
