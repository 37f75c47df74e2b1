"""
Command-line interface for rendering scenes.
"""

import argparse
import logging
import os
import sys
import time
from typing import List, Optional

import numpy as np

from . import scenes
from .scene import Scene
from .scene_parser import load_scene
from .renderer import Renderer, RenderSettings, get_platform_info
from .image import output_format, save_image
from .errors import ConfigurationError, RenderError
from .logging_config import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 400
DEFAULT_ASPECT_RATIO = 3.0 / 2.0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='lumentrace',
        description='LumenTrace - a Python path tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  lumentrace --scene demo --output render.ppm
  lumentrace --scene random --width 600 --samples 200 --seed 7 --output final.png
  lumentrace --scene-file scenes/three_spheres.yaml --output out.ppm
        '''
    )

    parser.add_argument('--width', type=int, default=None,
                        help=f'Image width (default: {DEFAULT_WIDTH})')
    parser.add_argument('--height', type=int, default=None,
                        help='Image height (default: width / aspect ratio)')
    parser.add_argument('--aspect-ratio', type=float, default=DEFAULT_ASPECT_RATIO,
                        help='Width / height used when --height is omitted (default: 1.5)')
    parser.add_argument('--samples', type=int, default=None, help='Samples per pixel (default: 100)')
    parser.add_argument('--depth', type=int, default=None, help='Max ray bounces (default: 50)')
    parser.add_argument('--threads', type=int, default=None, help='Number of worker threads (0=auto)')
    parser.add_argument('--seed', type=int, default=None, help='Seed for reproducible renders')
    parser.add_argument('--scene', type=str, default='demo', choices=scenes.SCENE_NAMES,
                        help='Built-in scene to render (default: demo)')
    parser.add_argument('--scene-file', type=str, default=None,
                        help='YAML or JSON scene description (overrides --scene)')
    parser.add_argument('--output', type=str, default='output/render.ppm',
                        help='Output filename; .ppm writes plain PPM, other extensions use Pillow')
    parser.add_argument('--no-bvh', action='store_true', help='Search primitives linearly')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    parser.add_argument('--log-file', type=str, default=None, help='Also write logs to this file')
    parser.add_argument('--info', action='store_true', help='Show platform info and exit')
    return parser


def _apply_overrides(settings: RenderSettings, args: argparse.Namespace) -> RenderSettings:
    """Command-line flags win over values from a scene file."""
    if args.width is not None:
        settings.width = args.width
    if args.height is not None:
        settings.height = args.height
    if args.samples is not None:
        settings.samples_per_pixel = args.samples
    if args.depth is not None:
        settings.max_depth = args.depth
    if args.threads is not None:
        settings.num_threads = args.threads or (os.cpu_count() or 4)
    if args.seed is not None:
        settings.seed = args.seed
    settings.validate()
    return settings


def _builtin_settings(args: argparse.Namespace) -> RenderSettings:
    if args.aspect_ratio <= 0:
        raise ConfigurationError(f"Aspect ratio must be positive, got {args.aspect_ratio}")

    width = args.width if args.width is not None else DEFAULT_WIDTH
    height = args.height if args.height is not None else int(width / args.aspect_ratio)

    settings = RenderSettings(
        width=width,
        height=height,
        samples_per_pixel=args.samples if args.samples is not None else 100,
        max_depth=args.depth if args.depth is not None else 50,
        num_threads=args.threads or 0,
        seed=args.seed
    )
    settings.validate()
    return settings


def _progress_printer():
    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    return progress_callback


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Returns:
        Process exit status: 0 on success, 1 for configuration errors,
        2 when the render itself failed, 3 when the image could not be
        written
    """
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    if args.info:
        info = get_platform_info()
        print("LumenTrace Platform Info:")
        print(f"  System: {info['system']} ({info['machine']})")
        print(f"  Python: {info['python_version']}")
        print(f"  numpy: {info['numpy_version']}")
        print(f"  CPU Cores: {info['cpu_count']}")
        print(f"  Default worker threads: {info['default_threads']}")
        return 0

    try:
        # Settings are validated before the seed reaches any generator
        if args.scene_file:
            objects, camera, settings = load_scene(args.scene_file)
            settings = _apply_overrides(settings, args)
        else:
            settings = _builtin_settings(args)
            scene_rng = np.random.default_rng(settings.seed)
            if args.scene == 'random':
                objects = scenes.random_scene(scene_rng)
            else:
                objects = scenes.demo_scene()
            camera = scenes.default_camera(settings.width / settings.height)

        output_format(args.output)
        scene = Scene(objects, accelerate=not args.no_bvh, rng=np.random.default_rng(settings.seed))
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return 1

    renderer = Renderer(settings)
    renderer.set_progress_callback(_progress_printer())

    start_time = time.time()
    try:
        image = renderer.render(scene, camera)
    except RenderError as e:
        print()
        logger.error("Render failed: %s", e)
        return 2

    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")

    try:
        save_image(image, args.output)
    except OSError as e:
        logger.error("Cannot write %s: %s", args.output, e)
        return 3

    logger.info("Saved %dx%d image to %s", settings.width, settings.height, args.output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
