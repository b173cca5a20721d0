"""Interval mapping helpers and the per-render coordinate grid."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from .complexmath import ComplexNumber

if TYPE_CHECKING:
    from .renderer import RenderSettings


def normalize(value, in_min: float, in_max: float, out_min: float, out_max: float):
    """Linearly map ``value`` from ``[in_min, in_max]`` onto ``[out_min, out_max]``.

    ``value`` may be a scalar or a numpy array. The bounds may come in any
    order, which flips the axis. A zero-width input interval raises
    ``ValueError`` instead of producing infinities.
    """

    if in_max == in_min:
        raise ValueError(f"cannot normalize over a degenerate interval [{in_min}, {in_max}]")
    return out_min + ((value - in_min) * (out_max - out_min)) / (in_max - in_min)


def clamp(value, low, high):
    if value > high:
        return high
    if value < low:
        return low
    return value


def _axis(count: int, plane_min: float, plane_max: float) -> np.ndarray:
    indices = np.arange(count, dtype=np.float64)
    values = np.asarray(normalize(indices, 0.0, float(count), np.float64(plane_min), np.float64(plane_max)), dtype=np.float64)
    values.setflags(write=False)
    return values


@dataclass(frozen=True)
class CoordinateGrid:
    """Plane coordinates of every pixel column and row, computed once per render."""

    xs: np.ndarray
    ys: np.ndarray

    @classmethod
    def build(
        cls,
        plane_min_x: float,
        plane_max_x: float,
        plane_min_y: float,
        plane_max_y: float,
        pixel_width: int,
        pixel_height: int,
    ) -> CoordinateGrid:
        return cls(
            xs=_axis(pixel_width, plane_min_x, plane_max_x),
            ys=_axis(pixel_height, plane_min_y, plane_max_y),
        )

    @classmethod
    def from_settings(cls, settings: RenderSettings) -> CoordinateGrid:
        return cls.build(
            settings.plane_min_x,
            settings.plane_max_x,
            settings.plane_min_y,
            settings.plane_max_y,
            settings.pixel_width,
            settings.pixel_height,
        )

    @property
    def width(self) -> int:
        return int(self.xs.shape[0])

    @property
    def height(self) -> int:
        return int(self.ys.shape[0])

    def point(self, x: int, y: int) -> ComplexNumber:
        return ComplexNumber(float(self.xs[x]), float(self.ys[y]))
