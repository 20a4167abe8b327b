"""
Renderer module - drives the camera and integrator over every pixel.

Implements:
- Multi-sample anti-aliasing with sub-pixel jitter
- Gamma-2 correction and 0xAARRGGBB pixel packing
- Parallel rendering over contiguous pixel ranges, each with its own
  random stream, merged into one buffer after the workers join
- PNG/JPEG export of the packed buffer
"""

from __future__ import annotations
import logging
import math
import os
import time
from concurrent.futures import ThreadPoolExecutor, ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Optional, Callable, Tuple
import numpy as np

from .vec3 import Color
from .camera import Camera
from .shapes import Scene
from .integrator import ray_color

logger = logging.getLogger(__name__)

ALPHA_MASK = 0xFF << 24


class RenderError(RuntimeError):
    """A render worker failed; no partial image is produced."""


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 640
    height: int = 320
    samples_per_pixel: int = 128
    max_depth: int = 16
    chunk_size: int = 1024  # pixels per unit of work
    num_threads: int = 0  # 0 = auto-detect
    use_processes: bool = False
    seed: Optional[int] = None

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.num_threads < 0:
            raise ValueError(f"num_threads must be non-negative, got {self.num_threads}")
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4


def to_argb(color: Color) -> int:
    """Pack a linear color into 0xAARRGGBB after gamma-2 correction.

    Channels are not clamped: a channel above 1.0 spills into its
    neighbour's bits.
    """
    ir = int(255.99 * math.sqrt(color.r))
    ig = int(255.99 * math.sqrt(color.g))
    ib = int(255.99 * math.sqrt(color.b))
    return (ALPHA_MASK | ir << 16 | ig << 8 | ib) & 0xFFFFFFFF


def buffer_to_rgb(buffer: np.ndarray, width: int, height: int) -> np.ndarray:
    """Unpack a 0xAARRGGBB buffer into an (height, width, 3) uint8 array."""
    packed = np.asarray(buffer, dtype=np.uint32).reshape(height, width)
    rgb = np.empty((height, width, 3), dtype=np.uint8)
    rgb[..., 0] = (packed >> 16) & 0xFF
    rgb[..., 1] = (packed >> 8) & 0xFF
    rgb[..., 2] = packed & 0xFF
    return rgb


def render_range(
    scene: Scene,
    camera: Camera,
    width: int,
    height: int,
    samples: int,
    max_depth: int,
    start: int,
    stop: int,
    seed: np.random.SeedSequence,
) -> np.ndarray:
    """Render buffer indices [start, stop) into a private array.

    Buffer row 0 is the top of the image while v = 0 is the bottom of the
    image plane, so rows are flipped when computing v.
    """
    rng = np.random.default_rng(seed)
    out = np.empty(stop - start, dtype=np.uint32)

    for index in range(start, stop):
        i = height - 1 - index // width
        j = index % width
        pixel_color = Color(0, 0, 0)

        for _ in range(samples):
            u = (j + rng.random()) / width
            v = (i + rng.random()) / height
            ray = camera.make_ray(u, v, rng)
            pixel_color = pixel_color + ray_color(ray, scene, rng, max_depth)

        out[index - start] = to_argb(pixel_color / samples)

    return out


class Renderer:
    """Path tracing renderer with multi-threading support."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, scene: Scene, camera: Camera) -> np.ndarray:
        """Render the scene and return the packed pixel buffer.

        Each pixel range gets a random stream spawned from one seed
        sequence, so a seeded render is identical for any worker count.

        Args:
            scene: The spheres to render
            camera: The camera to render from

        Returns:
            uint32 array of width * height 0xAARRGGBB values, row-major,
            top row first

        Raises:
            RenderError: If any worker fails
        """
        settings = self.settings
        width = settings.width
        height = settings.height

        ranges = self._generate_ranges(width * height)
        seeds = np.random.SeedSequence(settings.seed).spawn(len(ranges))
        jobs = [
            (scene, camera, width, height, settings.samples_per_pixel,
             settings.max_depth, start, stop, seed)
            for (start, stop), seed in zip(ranges, seeds)
        ]

        logger.info(
            "Rendering %dx%d, %d spp, depth %d: %d ranges on %d %s",
            width, height, settings.samples_per_pixel, settings.max_depth,
            len(ranges), settings.num_threads,
            "processes" if settings.use_processes else "threads",
        )
        start_time = time.perf_counter()

        if settings.num_threads > 1:
            results = self._render_parallel(jobs)
        else:
            results = []
            for job in jobs:
                pixel_range = (job[6], job[7])
                try:
                    chunk = render_range(*job)
                except Exception as exc:
                    raise RenderError(
                        f"Render of pixels {pixel_range[0]}..{pixel_range[1]} failed"
                    ) from exc
                results.append((pixel_range, chunk))
                self._report_progress(len(results), len(jobs))

        # Merge once every worker has finished
        buffer = np.zeros(width * height, dtype=np.uint32)
        for (start, stop), chunk in results:
            buffer[start:stop] = chunk

        logger.info("Render finished in %.2fs", time.perf_counter() - start_time)
        return buffer

    def _render_parallel(self, jobs: list) -> list[Tuple[Tuple[int, int], np.ndarray]]:
        """Run render jobs on a worker pool and collect their private buffers."""
        settings = self.settings
        executor_cls = ProcessPoolExecutor if settings.use_processes else ThreadPoolExecutor
        results = []

        with executor_cls(max_workers=settings.num_threads) as executor:
            futures = {executor.submit(render_range, *job): (job[6], job[7]) for job in jobs}
            for future in as_completed(futures):
                pixel_range = futures[future]
                try:
                    chunk = future.result()
                except Exception as exc:
                    for pending in futures:
                        pending.cancel()
                    raise RenderError(
                        f"Worker for pixels {pixel_range[0]}..{pixel_range[1]} failed"
                    ) from exc
                results.append((pixel_range, chunk))
                logger.debug("Finished pixels %d..%d", *pixel_range)
                self._report_progress(len(results), len(jobs))

        return results

    def _report_progress(self, completed: int, total: int) -> None:
        if self._progress_callback:
            self._progress_callback(completed / total)

    def _generate_ranges(self, total: int) -> list[Tuple[int, int]]:
        """Split pixel indices [0, total) into contiguous ranges.

        Args:
            total: Number of pixels

        Returns:
            List of (start, stop) tuples covering every index once
        """
        chunk = self.settings.chunk_size
        return [(start, min(start + chunk, total)) for start in range(0, total, chunk)]

    def to_rgb(self, buffer: np.ndarray) -> np.ndarray:
        """Convert a packed buffer to an (height, width, 3) uint8 image."""
        return buffer_to_rgb(buffer, self.settings.width, self.settings.height)

    def save_image(self, buffer: np.ndarray, filename: str) -> None:
        """Save a packed buffer to file.

        Args:
            buffer: Packed 0xAARRGGBB buffer returned by render()
            filename: Output filename (extension determines format)
        """
        from PIL import Image as PILImage

        pil_image = PILImage.fromarray(self.to_rgb(buffer), 'RGB')
        pil_image.save(filename)
        logger.info("Saved %s", filename)
