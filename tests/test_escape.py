import numpy as np
import pytest

from huebrot.complexmath import ComplexNumber
from huebrot.escape import BOUNDED, escape_counts, escape_time


@pytest.mark.parametrize("max_iterations", [0, 1, 10, 1000])
def test_origin_never_escapes(max_iterations):
    assert escape_time(ComplexNumber(0.0, 0.0), max_iterations) is None


def test_first_escape_index_is_one():
    # The check runs before the first update, and z starts at the origin.
    assert escape_time(ComplexNumber(3.0, 0.0), 50) == 1
    assert escape_time(ComplexNumber(-2.0, -1.5), 50) == 1


def test_escape_indices():
    assert escape_time(ComplexNumber(2.0, 0.0), 50) == 2
    assert escape_time(ComplexNumber(0.25, -1.5), 50) == 2


@pytest.mark.parametrize(
    "c",
    [
        ComplexNumber(-2.0, 0.0),
        ComplexNumber(-1.0, 0.0),
        ComplexNumber(0.0, 1.0),
        ComplexNumber(-0.5, 0.0),
        ComplexNumber(0.25, 0.0),
    ],
)
def test_members_stay_bounded(c):
    assert escape_time(c, 500) is None


def test_slow_escape_depends_on_cap():
    c = ComplexNumber(0.26, 0.0)
    assert escape_time(c, 5) is None
    assert escape_time(c, 1000) is not None


def test_row_kernel_matches_point_evaluator():
    xs = np.linspace(-2.2, 0.8, 61)
    for y in (-1.2, -0.6, -0.1, 0.0, 0.35, 1.05):
        counts = escape_counts(xs, y, 80)
        assert counts.shape == xs.shape
        expected = []
        for x in xs:
            n = escape_time(ComplexNumber(float(x), y), 80)
            expected.append(BOUNDED if n is None else n)
        assert counts.tolist() == expected


def test_row_kernel_bounded_marker():
    counts = escape_counts(np.array([0.0, 3.0, -1.0]), 0.0, 25)
    assert counts.tolist() == [BOUNDED, 1, BOUNDED]
