import threading

import numpy as np
import pytest

from huebrot import renderer
from huebrot.palette import BOUNDED_COLOR, generate_color_table
from huebrot.renderer import ConfigurationError, PixelBuffer, RenderSettings, render


def small_settings(**overrides):
    params = dict(
        plane_min_x=-2.0,
        plane_max_x=1.0,
        plane_min_y=-1.5,
        plane_max_y=1.5,
        pixel_width=4,
        pixel_height=4,
        color_speed=3.0,
        max_iterations=50,
    )
    params.update(overrides)
    return RenderSettings(**params)


@pytest.mark.parametrize("backend", ["python", "tensorflow"])
def test_four_by_four_membership(backend):
    settings = small_settings()
    table = generate_color_table(settings.color_speed, settings.max_iterations)
    buffer = render(settings, backend=backend)

    assert (buffer.width, buffer.height) == (4, 4)
    # (-2, -1.5) and (-2, 0.75) leave the disc on the first update.
    assert buffer.get(0, 0) == table[1]
    assert buffer.get(0, 3) == table[1]
    assert buffer.get(3, 0) == table[2]
    assert buffer.get(3, 3) != BOUNDED_COLOR
    # (-0.5, 0) lies in the main cardioid.
    assert buffer.get(2, 2) == BOUNDED_COLOR


def test_backends_agree():
    settings = small_settings(pixel_width=24, pixel_height=16, plane_min_y=-1.2, plane_max_y=1.2, max_iterations=60)
    python = render(settings, backend="python", workers=3)
    tensorflow = render(settings, backend="tensorflow", workers=3)
    assert np.array_equal(python.pixels, tensorflow.pixels)


def test_independent_of_worker_count():
    settings = small_settings(pixel_width=20, pixel_height=12, max_iterations=40)
    single = render(settings, backend="python", workers=1)
    many = render(settings, backend="python", workers=8)
    again = render(settings, backend="python", workers=8)
    assert single.pixels.tobytes() == many.pixels.tobytes() == again.pixels.tobytes()


def test_swapped_y_bounds_mirror_the_real_axis():
    upright = render(small_settings(pixel_width=8, pixel_height=8), backend="python")
    flipped = render(small_settings(pixel_width=8, pixel_height=8, plane_min_y=1.5, plane_max_y=-1.5), backend="python")
    assert np.array_equal(upright.pixels, flipped.pixels)


def test_every_row_has_one_writer(monkeypatch):
    seen = []
    lock = threading.Lock()

    def record(row, y, grid, table, max_iterations, device):
        with lock:
            seen.append(y)
        row[:] = (y, 0, 0, 255)

    monkeypatch.setitem(renderer._ROW_FILLERS, "python", record)
    buffer = render(small_settings(pixel_width=5, pixel_height=30), backend="python", workers=4)

    assert sorted(seen) == list(range(30))
    for y in range(30):
        assert buffer.get(4, y) == (y, 0, 0, 255)


def test_worker_errors_propagate(monkeypatch):
    def explode(row, y, grid, table, max_iterations, device):
        raise RuntimeError("row %d failed" % y)

    monkeypatch.setitem(renderer._ROW_FILLERS, "python", explode)
    with pytest.raises(RuntimeError, match="failed"):
        render(small_settings(), backend="python")


@pytest.mark.parametrize(
    "overrides",
    [
        dict(pixel_width=0),
        dict(pixel_height=-3),
        dict(plane_min_x=0.5, plane_max_x=0.5),
        dict(plane_min_y=1.0, plane_max_y=1.0),
        dict(plane_max_x=float("inf")),
        dict(color_speed=float("nan")),
        dict(max_iterations=0),
        dict(pixel_width=2.5),
        dict(plane_min_x=-1e308, plane_max_x=1e308),
        dict(plane_min_y=-1e308, plane_max_y=1e308),
        dict(plane_min_x=-8e307, plane_max_x=8e307),
        dict(plane_min_y="low"),
    ],
)
def test_degenerate_settings_fail_before_dispatch(monkeypatch, overrides):
    def no_pool(*args, **kwargs):
        raise AssertionError("row tasks dispatched")

    monkeypatch.setattr(renderer, "ThreadPoolExecutor", no_pool)
    with pytest.raises(ConfigurationError):
        render(small_settings(**overrides))


def test_bad_backend_and_workers():
    with pytest.raises(ConfigurationError):
        render(small_settings(), backend="cuda")
    with pytest.raises(ConfigurationError):
        render(small_settings(), workers=0)


def test_configuration_error_is_value_error():
    assert issubclass(ConfigurationError, ValueError)


def test_centered_settings():
    settings = RenderSettings.centered(-0.75, 0.0, 2.5, 2.0, 10, 8, max_iterations=20)
    assert settings.plane_min_x == -2.0
    assert settings.plane_max_x == 0.5
    assert settings.plane_min_y == -1.0
    assert settings.plane_max_y == 1.0
    assert settings.max_iterations == 20
    assert settings.color_speed == 3.0


def test_pixel_buffer_access():
    buffer = PixelBuffer(3, 2)
    assert buffer.pixels.shape == (2, 3, 4)
    buffer.set(2, 1, (10, 20, 30, 255))
    assert buffer.get(2, 1) == (10, 20, 30, 255)
    assert tuple(buffer.row(1)[2]) == (10, 20, 30, 255)
    with pytest.raises(IndexError):
        buffer.get(3, 0)
    with pytest.raises(IndexError):
        buffer.set(0, -1, (0, 0, 0, 255))
    with pytest.raises(IndexError):
        buffer.row(2)
