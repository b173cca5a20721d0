"""Hue-rotation colour table mapping iteration counts to RGBA colours."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .mathutil import clamp

CHANNEL_SCALE = 255
HUE_OFFSET = 240
BOUNDED_COLOR = (0, 0, 0, CHANNEL_SCALE)


def hsv_to_rgb(hue: float, saturation: float, value: float) -> tuple[float, float, float]:
    """Convert a hue in ``[0, 360)`` and saturation/value in ``[0, 1]`` to RGB in ``[0, 1]``."""

    hp = hue / 60.0
    chroma = value * saturation
    x = chroma * (1.0 - abs(math.fmod(hp, 2.0) - 1.0))
    m = value - chroma

    r = g = b = 0.0
    if 0.0 <= hp < 1.0:
        r, g = chroma, x
    elif 1.0 <= hp < 2.0:
        r, g = x, chroma
    elif 2.0 <= hp < 3.0:
        g, b = chroma, x
    elif 3.0 <= hp < 4.0:
        g, b = x, chroma
    elif 4.0 <= hp < 5.0:
        r, b = x, chroma
    elif 5.0 <= hp < 6.0:
        r, b = chroma, x

    return m + r, m + g, m + b


def quantize(channel: float, scale: int = CHANNEL_SCALE) -> int:
    # Round half up; plain truncation biases every channel towards dark.
    return clamp(int(channel * scale + 0.5), 0, scale)


def hue_angle(index: int, color_speed: float) -> int:
    return math.floor(index * color_speed + HUE_OFFSET) % 360


@dataclass(frozen=True)
class ColorTable:
    """Read-only ``(size, 4)`` array of opaque RGBA colours indexed by escape iteration."""

    colors: np.ndarray

    def __len__(self) -> int:
        return int(self.colors.shape[0])

    def __getitem__(self, index: int) -> tuple[int, int, int, int]:
        return tuple(int(channel) for channel in self.colors[index])

    def lookup(self, iterations: np.ndarray) -> np.ndarray:
        """Colour a vector of escape indices; negative entries get ``BOUNDED_COLOR``."""

        iterations = np.asarray(iterations)
        bounded = iterations < 0
        out = self.colors[np.where(bounded, 0, iterations)] if len(self) else np.zeros(iterations.shape + (4,), dtype=np.uint8)
        out[bounded] = BOUNDED_COLOR
        return out


def generate_color_table(color_speed: float, size: int) -> ColorTable:
    """Build the colour table for ``size`` iterations rotating the hue by ``color_speed`` degrees per step."""

    colors = np.empty((size, 4), dtype=np.uint8)
    for i in range(size):
        r, g, b = hsv_to_rgb(hue_angle(i, color_speed), 1.0, 1.0)
        colors[i] = (quantize(r), quantize(g), quantize(b), CHANNEL_SCALE)
    colors.setflags(write=False)
    return ColorTable(colors=colors)
