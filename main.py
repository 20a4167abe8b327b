#!/usr/bin/env python3
"""
PathForge - A Python Monte Carlo Path Tracer

Main entry point for rendering scenes.
"""

import argparse
import logging
import sys
import time
from pathlib import Path

import numpy as np

from pathforge.renderer import Renderer, RenderSettings, RenderError
from pathforge.scene_parser import SceneParseError, load_scene
from pathforge.scenes import random_scene, random_scene_camera, simple_scene, simple_scene_camera


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='PathForge - A Python Monte Carlo Path Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --scene demo --output render.png
  python main.py --width 320 --height 160 --samples 16 --seed 42 --output preview.png
  python main.py --scene-file scenes/glass.yaml --processes --output glass.png
        '''
    )

    parser.add_argument('--width', type=int, default=640, help='Image width (default: 640)')
    parser.add_argument('--height', type=int, default=320, help='Image height (default: 320)')
    parser.add_argument('--samples', type=int, default=128, help='Samples per pixel (default: 128)')
    parser.add_argument('--depth', type=int, default=16, help='Max ray depth (default: 16)')
    parser.add_argument('--threads', type=int, default=0, help='Number of workers (0=auto)')
    parser.add_argument('--processes', action='store_true',
                        help='Use worker processes instead of threads')
    parser.add_argument('--seed', type=int, default=None, help='Seed for a reproducible render')
    parser.add_argument('--output', type=str, default='output/render.png', help='Output filename')
    parser.add_argument('--scene', type=str, default='demo', choices=['demo', 'simple'],
                        help='Built-in scene to render (default: demo)')
    parser.add_argument('--scene-file', type=str, default=None,
                        help='YAML/JSON scene description (overrides --scene and size flags)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable log output')

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    # Print header
    print("=" * 60)
    print("PathForge Path Tracer")
    print("=" * 60)

    try:
        if args.scene_file:
            print(f"\nLoading scene: {args.scene_file}")
            world, camera, settings = load_scene(args.scene_file)
        else:
            settings = RenderSettings(
                width=args.width,
                height=args.height,
                samples_per_pixel=args.samples,
                max_depth=args.depth,
                num_threads=args.threads,
                use_processes=args.processes,
                seed=args.seed
            )
            aspect_ratio = settings.width / settings.height

            print(f"\nCreating scene: {args.scene}")
            if args.scene == 'simple':
                world = simple_scene()
                camera = simple_scene_camera(aspect_ratio)
            else:
                world = random_scene(np.random.default_rng(args.seed))
                camera = random_scene_camera(aspect_ratio)
    except (SceneParseError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    print(f"  Spheres in scene: {len(world)}")
    print(f"\nRender Settings:")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_pixel}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Workers: {settings.num_threads} {'processes' if settings.use_processes else 'threads'}")

    renderer = Renderer(settings)

    # Progress tracking
    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    renderer.set_progress_callback(progress_callback)

    print("\nRendering...")
    start_time = time.time()

    try:
        buffer = renderer.render(world, camera)
    except RenderError as exc:
        print(f"\nRender failed: {exc}", file=sys.stderr)
        return 1

    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")
    print(f"  Samples per second: {(settings.width * settings.height * settings.samples_per_pixel) / elapsed:.0f}")

    # Ensure output directory exists
    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    print(f"\nSaving to: {args.output}")
    renderer.save_image(buffer, args.output)

    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
