"""Escape-time evaluation for single points and for whole raster rows."""

from __future__ import annotations

from typing import Optional

import numpy as np
import tensorflow as tf

from .complexmath import MutableComplex

HORIZON = 4.0
BOUNDED = -1


def escape_time(c, max_iterations: int) -> Optional[int]:
    """Return the iteration at which ``z -> z*z + c`` leaves the radius-2 disc.

    The threshold is checked before each update, starting from ``z = 0``, so a
    point outside the disc reports ``1`` and ``None`` means the orbit stayed
    bounded for ``max_iterations`` steps.
    """

    z = MutableComplex()
    for i in range(max_iterations):
        if z.squared_magnitude() > HORIZON:
            return i
        z.multiply_by(z)
        z.add_to(c)
    return None


@tf.function
def _escape_step(
    i: tf.Tensor,
    zr: tf.Tensor,
    zi: tf.Tensor,
    cr: tf.Tensor,
    ci: tf.Tensor,
    ns: tf.Tensor,
    active: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Check the horizon, then advance every still-active point by one iteration."""

    magnitude = zr * zr + zi * zi
    escaped = tf.logical_and(active, magnitude > tf.constant(HORIZON, dtype=magnitude.dtype))
    ns = tf.where(escaped, i, ns)
    active = tf.logical_and(active, tf.logical_not(escaped))

    zr_new = (zr * zr - zi * zi) + cr
    zi_new = (zr * zi + zi * zr) + ci
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    return zr, zi, ns, active


@tf.function(
    input_signature=[
        tf.TensorSpec(shape=[None], dtype=tf.float64),
        tf.TensorSpec(shape=[None], dtype=tf.float64),
        tf.TensorSpec(shape=[], dtype=tf.int32),
    ]
)
def _escape_run(cr: tf.Tensor, ci: tf.Tensor, max_iterations: tf.Tensor) -> tf.Tensor:
    """Iterate a vector of points with a TensorFlow while loop."""

    i = tf.constant(0, dtype=tf.int32)
    zr = tf.zeros_like(cr)
    zi = tf.zeros_like(cr)
    ns = tf.fill(tf.shape(cr), tf.constant(BOUNDED, dtype=tf.int32))
    active = tf.ones_like(cr, tf.bool)

    def cond(i, zr, zi, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zr, zi, ns, active):
        zr, zi, ns, active = _escape_step(i, zr, zi, cr, ci, ns, active)
        return i + 1, zr, zi, ns, active

    _, _, _, ns, _ = tf.while_loop(cond, body, (i, zr, zi, ns, active))
    return ns


def escape_counts(xs: np.ndarray, y: float, max_iterations: int, *, device: Optional[str] = None) -> np.ndarray:
    """Escape indices for the row of points ``xs + y*i``; ``BOUNDED`` where the orbit never escapes."""

    xs = np.asarray(xs, dtype=np.float64)
    with tf.device(device if device is not None else "/CPU:0"):
        cr = tf.convert_to_tensor(xs, dtype=tf.float64)
        ci = tf.fill(tf.shape(cr), tf.constant(y, dtype=tf.float64))
        ns = _escape_run(cr, ci, tf.constant(max_iterations, dtype=tf.int32))
    return ns.numpy()
