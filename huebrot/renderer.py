"""Rendering primitives for hue-rotation Mandelbrot images."""

from __future__ import annotations

import math
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .escape import escape_counts, escape_time
from .mathutil import CoordinateGrid
from .palette import BOUNDED_COLOR, ColorTable, generate_color_table

BACKENDS = ("tensorflow", "python")


class ConfigurationError(ValueError):
    """Raised for settings that cannot describe a raster or a plane window."""


@dataclass(frozen=True)
class RenderSettings:
    """Parameters that describe a single render of the Mandelbrot set.

    Plane bounds may be given in either order; a ``plane_min_y`` above
    ``plane_max_y`` simply flips the image vertically.
    """

    plane_min_x: float
    plane_max_x: float
    plane_min_y: float
    plane_max_y: float
    pixel_width: int
    pixel_height: int
    color_speed: float = 3.0
    max_iterations: int = 500

    @classmethod
    def centered(
        cls,
        x_center: float,
        y_center: float,
        x_width: float,
        y_width: float,
        pixel_width: int,
        pixel_height: int,
        **kwargs,
    ) -> RenderSettings:
        """Describe the window by its centre and extent instead of its corners."""

        x_center = np.float64(x_center)
        y_center = np.float64(y_center)
        x_half = np.float64(x_width) / 2.0
        y_half = np.float64(y_width) / 2.0
        return cls(
            plane_min_x=float(x_center - x_half),
            plane_max_x=float(x_center + x_half),
            plane_min_y=float(y_center - y_half),
            plane_max_y=float(y_center + y_half),
            pixel_width=pixel_width,
            pixel_height=pixel_height,
            **kwargs,
        )

    def validate(self) -> None:
        for name in ("pixel_width", "pixel_height", "max_iterations"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
            if value < 1:
                raise ConfigurationError(f"{name} must be positive, got {value}")

        for name in ("plane_min_x", "plane_max_x", "plane_min_y", "plane_max_y", "color_speed"):
            value = getattr(self, name)
            try:
                finite = math.isfinite(value)
            except TypeError:
                raise ConfigurationError(f"{name} must be a number, got {value!r}") from None
            if not finite:
                raise ConfigurationError(f"{name} must be finite, got {value!r}")

        for axis in ("x", "y"):
            low = getattr(self, f"plane_min_{axis}")
            high = getattr(self, f"plane_max_{axis}")
            if not math.isfinite(high - low):
                raise ConfigurationError(f"{axis} interval [{low}, {high}] is too wide to sample")

        if self.plane_min_x == self.plane_max_x:
            raise ConfigurationError(f"degenerate x interval [{self.plane_min_x}, {self.plane_max_x}]")
        if self.plane_min_y == self.plane_max_y:
            raise ConfigurationError(f"degenerate y interval [{self.plane_min_y}, {self.plane_max_y}]")


class PixelBuffer:
    """``height x width`` grid of RGBA pixels stored as a ``uint8`` array."""

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.pixels = np.zeros((self.height, self.width, 4), dtype=np.uint8)

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} buffer")

    def get(self, x: int, y: int) -> tuple[int, int, int, int]:
        self._check(x, y)
        return tuple(int(channel) for channel in self.pixels[y, x])

    def set(self, x: int, y: int, rgba) -> None:
        self._check(x, y)
        self.pixels[y, x] = rgba

    def row(self, y: int) -> np.ndarray:
        if not 0 <= y < self.height:
            raise IndexError(f"row {y} outside {self.width}x{self.height} buffer")
        return self.pixels[y]


def _fill_row_python(row: np.ndarray, y: int, grid: CoordinateGrid, table: ColorTable, max_iterations: int, device: Optional[str]) -> None:
    for x in range(grid.width):
        n = escape_time(grid.point(x, y), max_iterations)
        row[x] = BOUNDED_COLOR if n is None else table.colors[n]


def _fill_row_tensorflow(row: np.ndarray, y: int, grid: CoordinateGrid, table: ColorTable, max_iterations: int, device: Optional[str]) -> None:
    counts = escape_counts(grid.xs, float(grid.ys[y]), max_iterations, device=device)
    row[:] = table.lookup(counts)


_ROW_FILLERS = {
    "tensorflow": _fill_row_tensorflow,
    "python": _fill_row_python,
}


def render(
    settings: RenderSettings,
    *,
    workers: Optional[int] = None,
    backend: str = "tensorflow",
    device: Optional[str] = None,
) -> PixelBuffer:
    """Render ``settings`` into a new :class:`PixelBuffer`.

    One task per row goes to a thread pool of ``workers`` threads (all CPUs by
    default). Each task writes only its own row, so the result does not depend
    on the pool size or on scheduling order.
    """

    settings.validate()
    if backend not in _ROW_FILLERS:
        raise ConfigurationError(f"unknown backend {backend!r}; expected one of {', '.join(BACKENDS)}")
    if workers is not None and workers < 1:
        raise ConfigurationError(f"workers must be positive, got {workers}")

    with np.errstate(over="ignore", invalid="ignore"):
        grid = CoordinateGrid.from_settings(settings)
    if not (np.isfinite(grid.xs).all() and np.isfinite(grid.ys).all()):
        raise ConfigurationError("plane window overflows when mapped onto the raster")
    table = generate_color_table(settings.color_speed, settings.max_iterations)
    buffer = PixelBuffer(settings.pixel_width, settings.pixel_height)
    fill_row = _ROW_FILLERS[backend]

    max_workers = workers if workers is not None else (os.cpu_count() or 1)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(fill_row, buffer.row(y), y, grid, table, settings.max_iterations, device)
            for y in range(buffer.height)
        ]
        for future in futures:
            future.result()

    return buffer
