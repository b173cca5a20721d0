"""Public API for hue-rotation Mandelbrot rendering."""

from .complexmath import ComplexNumber, MutableComplex
from .escape import BOUNDED, escape_counts, escape_time
from .mathutil import CoordinateGrid, clamp, normalize
from .palette import BOUNDED_COLOR, ColorTable, generate_color_table, hsv_to_rgb, quantize
from .renderer import (
    BACKENDS,
    ConfigurationError,
    PixelBuffer,
    RenderSettings,
    render,
)

__all__ = [
    "BACKENDS",
    "BOUNDED",
    "BOUNDED_COLOR",
    "ColorTable",
    "ComplexNumber",
    "ConfigurationError",
    "CoordinateGrid",
    "MutableComplex",
    "PixelBuffer",
    "RenderSettings",
    "clamp",
    "escape_counts",
    "escape_time",
    "generate_color_table",
    "hsv_to_rgb",
    "normalize",
    "quantize",
    "render",
]
