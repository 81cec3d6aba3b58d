from __future__ import annotations

import math

import pytest
from pytest import approx

from flocksim.sim.utils.math2d import add, angle_between, clamp_magnitude, distance, magnitude, normalize, scale

VECTORS = [(0.0, 1.0), (1.0, 1.0), (1.0, 2.0), (3.0, 4.0), (-1.0, 1.0), (-1.0, -2.0), (-3.0, -4.0), (1234.0, -5678.0)]


def test_add_and_scale():
    assert add(0.0, 0.0, 0.0, 0.0) == (0.0, 0.0)
    assert add(-1.0, 2.0, 1.0, -2.0) == (0.0, 0.0)
    assert add(1.0, 123.0, 9.0, 877.0) == (10.0, 1000.0)
    assert scale((1.0, 2.0), 0.0) == (0.0, 0.0)
    assert scale((1.0, 2.0), -5.0) == (-5.0, -10.0)


def test_magnitude():
    assert magnitude(0.0, 0.0) == 0.0
    assert magnitude(3.0, 4.0) == approx(5.0)
    assert magnitude(-1.0, -2.0) == approx(math.sqrt(5.0))


def test_normalize_zero_vector_is_unchanged():
    assert normalize(0.0, 0.0) == (0.0, 0.0)


@pytest.mark.parametrize("vector", VECTORS)
def test_normalize_produces_unit_length(vector):
    x, y = normalize(*vector)
    assert magnitude(x, y) == approx(1.0)
    # Same direction as the input.
    assert x * vector[1] - y * vector[0] == approx(0.0, abs=1e-9)
    assert x * vector[0] + y * vector[1] > 0


def test_normalize_exact_values():
    assert normalize(3.0, 4.0) == approx((0.6, 0.8))
    assert normalize(-1.0, 1.0) == approx((-1.0 / math.sqrt(2.0), 1.0 / math.sqrt(2.0)))


def test_distance_is_symmetric_and_zero_on_same_point():
    assert distance(1234.0, 5678.0, 1234.0, 5678.0) == 0.0
    assert distance(1.0, 2.0, 3.0, 4.0) == approx(math.sqrt(8.0))
    assert distance(3.0, 4.0, 1.0, 2.0) == distance(1.0, 2.0, 3.0, 4.0)
    assert distance(-1.0, 1.0, 1.0, -1.0) == approx(math.sqrt(8.0))


@pytest.mark.parametrize(
    "vector, limit, expected",
    [
        ((0.0, 1.0), 2.0, 1.0),
        ((0.0, 2.0), 2.0, 2.0),
        ((0.0, 3.0), 2.0, 2.0),
        ((-3.0, 0.0), 2.0, 2.0),
        ((1.0, 1.0), 2.0, math.sqrt(2.0)),
        ((-1.0, -1.0), 1.0, 1.0),
        ((123.0, 456.0), 42.0, 42.0),
        ((-123.0, -456.0), 500.0, math.sqrt(123.0**2 + 456.0**2)),
    ],
)
def test_clamp_magnitude_lengths(vector, limit, expected):
    assert magnitude(*clamp_magnitude(vector[0], vector[1], limit)) == approx(expected)


def test_clamp_magnitude_keeps_short_vectors_untouched():
    assert clamp_magnitude(1.0, 2.0, 5.0) == (1.0, 2.0)
    assert clamp_magnitude(3.0, 4.0, 5.0) == (3.0, 4.0)


def test_clamp_magnitude_preserves_direction():
    x, y = clamp_magnitude(30.0, 40.0, 5.0)
    assert (x, y) == approx((3.0, 4.0))


def test_clamp_magnitude_degenerate_limits():
    assert clamp_magnitude(0.0, 0.0, 2.0) == (0.0, 0.0)
    assert clamp_magnitude(0.0, 0.0, 0.0) == (0.0, 0.0)
    assert clamp_magnitude(3.0, 4.0, 0.0) == (0.0, 0.0)
    assert clamp_magnitude(3.0, 4.0, -1.0) == (0.0, 0.0)


@pytest.mark.parametrize(
    "other, expected",
    [
        ((0.0, 1.0), 0.0),
        ((1.0, 1.0), math.pi / 4),
        ((1.0, 0.0), math.pi / 2),
        ((1.0, -1.0), 3 * math.pi / 4),
        ((0.0, -1.0), math.pi),
        ((-1.0, -1.0), -3 * math.pi / 4),
        ((-1.0, 0.0), -math.pi / 2),
        ((-1.0, 1.0), -math.pi / 4),
    ],
)
def test_angle_between_reference_values(other, expected):
    assert angle_between(0.0, 1.0, *other) == approx(expected)


def test_angle_between_zero_vectors():
    assert angle_between(0.0, 0.0, 0.0, 0.0) == 0.0


@pytest.mark.parametrize("a", VECTORS)
@pytest.mark.parametrize("b", VECTORS[:4])
def test_angle_between_is_antisymmetric_and_in_range(a, b):
    forward = angle_between(a[0], a[1], b[0], b[1])
    backward = angle_between(b[0], b[1], a[0], a[1])
    assert -math.pi < forward <= math.pi
    if abs(forward) < math.pi - 1e-9:
        assert forward == approx(-backward, abs=1e-12)
    assert angle_between(a[0], a[1], a[0], a[1]) == approx(0.0)
