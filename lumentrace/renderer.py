"""
Renderer module - the parallel render scheduler.

Implements:
- One sampling job per pixel, pulled from a shared queue by a fixed pool
  of worker threads
- Fan-in of per-pixel results, in whatever order they finish, into a
  pre-sized image buffer
- Gamma-2 correction and clamping of each resolved pixel
- Per-job failure isolation (a failing pixel becomes magenta)
"""

from __future__ import annotations
import logging
import os
import platform
import queue
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import numpy as np

from .vec3 import Color
from .camera import Camera
from .shapes import Hittable
from .integrator import ray_color
from .errors import ConfigurationError, RenderError

logger = logging.getLogger(__name__)

# Largest channel value written; keeps 8-bit conversion below 256
CLAMP_CEILING = 0.9999999

# Magenta written in place of any pixel whose job raised
FAILED_PIXEL = Color(CLAMP_CEILING, 0.0, CLAMP_CEILING)

PixelJob = Tuple[int, int]
PixelResult = Tuple[int, int, Color]
RngFactory = Callable[[int, int], np.random.Generator]


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 400
    height: int = 300
    samples_per_pixel: int = 100
    max_depth: int = 50
    num_threads: int = 0  # 0 = auto-detect
    seed: Optional[int] = None

    def __post_init__(self):
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4

    def validate(self) -> None:
        """Reject settings that cannot produce an image.

        Raises:
            ConfigurationError: On the first invalid field found
        """
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.samples_per_pixel <= 0:
            raise ConfigurationError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ConfigurationError(f"max_depth must not be negative, got {self.max_depth}")
        if self.num_threads < 1:
            raise ConfigurationError(f"num_threads must be at least 1, got {self.num_threads}")
        if self.seed is not None and self.seed < 0:
            raise ConfigurationError(f"seed must not be negative, got {self.seed}")


def resolve_pixel(pixel_sum: Color, samples: int) -> Color:
    """Average accumulated samples, apply gamma 2 and clamp to [0, CLAMP_CEILING]."""
    averaged = np.maximum(pixel_sum.to_array() / samples, 0.0)
    return Color.from_array(np.clip(np.sqrt(averaged), 0.0, CLAMP_CEILING))


class Renderer:
    """Path tracing renderer driving a pool of worker threads.

    The scene and camera are shared read-only by every worker. The only
    values crossing threads are pixel coordinates (jobs) and coordinates
    plus a color (results).
    """

    # Seconds the collector waits for a result before checking worker health
    POLL_INTERVAL = 0.1

    def __init__(self, settings: RenderSettings = None, rng_factory: Optional[RngFactory] = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
            rng_factory: Builds the random source for pixel ``(x, y)``.
                Defaults to a generator seeded from ``settings.seed`` and the
                pixel coordinates, or fresh entropy when there is no seed.
        """
        self.settings = settings if settings else RenderSettings()
        self._rng_factory = rng_factory or self._default_rng
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        The callback runs on the thread that called ``render``.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def _default_rng(self, x: int, y: int) -> np.random.Generator:
        if self.settings.seed is None:
            return np.random.default_rng()
        return np.random.default_rng([self.settings.seed, y, x])

    def render(self, scene: Hittable, camera: Camera) -> np.ndarray:
        """Render the scene and return the image as a numpy array.

        Args:
            scene: The scene to render (any Hittable)
            camera: Anything with ``get_ray(s, t, rng=...)``

        Returns:
            Image of shape (height, width, 3), row 0 at the top, channels
            gamma-corrected and clamped to [0, 1)

        Raises:
            ConfigurationError: If the settings are invalid
            RenderError: If the workers stopped before every pixel was done
        """
        self.settings.validate()
        width = self.settings.width
        height = self.settings.height
        total = width * height

        image = np.zeros((height, width, 3), dtype=np.float64)

        jobs: queue.Queue = queue.Queue()
        for y in range(height):
            for x in range(width):
                jobs.put((x, y))

        results: queue.Queue = queue.Queue()
        stop = threading.Event()
        num_workers = min(self.settings.num_threads, total)

        logger.info(
            "Rendering %dx%d, %d spp, depth %d on %d worker(s)",
            width, height, self.settings.samples_per_pixel,
            self.settings.max_depth, num_workers
        )
        start_time = time.perf_counter()

        with ThreadPoolExecutor(max_workers=num_workers, thread_name_prefix='lumentrace-worker') as executor:
            futures = [
                executor.submit(self._worker, scene, camera, jobs, results, stop)
                for _ in range(num_workers)
            ]
            try:
                self._collect(image, results, futures, total)
            finally:
                # Workers finish their current pixel and stop pulling jobs
                stop.set()

        logger.info("Render finished in %.2fs", time.perf_counter() - start_time)
        return image

    def _worker(
        self,
        scene: Hittable,
        camera: Camera,
        jobs: queue.Queue,
        results: queue.Queue,
        stop: threading.Event
    ) -> None:
        """Pull pixel jobs until the queue is drained or a stop is requested."""
        while not stop.is_set():
            try:
                x, y = jobs.get_nowait()
            except queue.Empty:
                return

            try:
                color = self.render_pixel(scene, camera, x, y)
            except Exception:
                logger.warning("Pixel (%d, %d) failed, writing sentinel color", x, y, exc_info=True)
                color = FAILED_PIXEL

            results.put((x, y, color))

    def _collect(
        self,
        image: np.ndarray,
        results: queue.Queue,
        futures: List[Future],
        total: int
    ) -> None:
        """Place results into ``image`` until all ``total`` pixels arrived."""
        height = image.shape[0]
        received = 0

        while received < total:
            try:
                x, y, color = results.get(timeout=self.POLL_INTERVAL)
            except queue.Empty:
                if all(f.done() for f in futures) and results.empty():
                    cause = next((f.exception() for f in futures if f.exception()), None)
                    raise RenderError(
                        f"Workers exited with {total - received} of {total} pixels outstanding"
                    ) from cause
                continue

            # Computed rows count up from the bottom of the frame
            image[height - 1 - y, x] = color.to_array()
            received += 1

            if self._progress_callback:
                self._progress_callback(received / total)

    def render_pixel(self, scene: Hittable, camera: Camera, x: int, y: int) -> Color:
        """Resolve the final color of pixel (x, y), with y = 0 at the bottom.

        Draws ``samples_per_pixel`` jittered camera rays through the pixel
        and averages their estimated colors. Samples that come back NaN or
        infinite contribute black instead of poisoning the average.
        """
        settings = self.settings
        rng = self._rng_factory(x, y)
        u_scale = max(settings.width - 1, 1)
        v_scale = max(settings.height - 1, 1)

        pixel_color = Color(0, 0, 0)
        for _ in range(settings.samples_per_pixel):
            u = (x + rng.random()) / u_scale
            v = (y + rng.random()) / v_scale
            ray = camera.get_ray(u, v, rng=rng)
            sample = ray_color(ray, scene, settings.max_depth, rng)
            if sample.is_finite():
                pixel_color = pixel_color + sample

        return resolve_pixel(pixel_color, settings.samples_per_pixel)


def render(
    scene: Hittable,
    camera: Camera,
    image_width: int,
    image_height: int,
    samples_per_pixel: int,
    max_bounces: int,
    num_threads: int = 0,
    seed: Optional[int] = None
) -> np.ndarray:
    """Render ``scene`` through ``camera`` with a one-off Renderer.

    Returns:
        Image of shape (image_height, image_width, 3), row 0 at the top
    """
    settings = RenderSettings(
        width=image_width,
        height=image_height,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_bounces,
        num_threads=num_threads,
        seed=seed
    )
    return Renderer(settings).render(scene, camera)


def get_platform_info() -> dict:
    """Describe the host the renderer would run on.

    Returns:
        Dictionary with the platform, interpreter and numpy versions, the
        CPU count and the worker thread count ``RenderSettings`` picks
        when none is configured
    """
    return {
        'system': platform.system(),
        'machine': platform.machine(),
        'python_version': platform.python_version(),
        'numpy_version': np.__version__,
        'cpu_count': os.cpu_count(),
        'default_threads': RenderSettings().num_threads,
    }
