"""Closed real intervals used to bound ray parameters and clamp colors.

An interval with min > max is empty. Bounds may be infinite, which is why the
renderer runs with fast math disabled: comparisons against +/-inf must follow
IEEE semantics.
"""

import math

import taichi as ti

INFINITY = math.inf


@ti.dataclass
class Interval:
    """A closed interval [min, max] over the reals.

    Attributes:
        min: Lower bound, possibly -inf.
        max: Upper bound, possibly +inf.
    """

    min: ti.f64
    max: ti.f64


@ti.func
def make_interval(lo: ti.f64, hi: ti.f64) -> Interval:
    """Create an interval from its bounds."""
    return Interval(min=lo, max=hi)


@ti.func
def empty_interval() -> Interval:
    """The empty interval (+inf, -inf), which contains nothing."""
    return Interval(min=INFINITY, max=-INFINITY)


@ti.func
def universe_interval() -> Interval:
    """The interval (-inf, +inf), which contains every real."""
    return Interval(min=-INFINITY, max=INFINITY)


@ti.func
def interval_size(interval: Interval) -> ti.f64:
    """Return max - min. Negative for an empty interval."""
    return interval.max - interval.min


@ti.func
def interval_contains(interval: Interval, x: ti.f64) -> ti.i32:
    """Check min <= x <= max (bounds inclusive)."""
    return interval.min <= x and x <= interval.max


@ti.func
def interval_surrounds(interval: Interval, x: ti.f64) -> ti.i32:
    """Check min < x < max (bounds exclusive).

    Ray hits use this test so that a hit exactly at the minimum distance is
    rejected.
    """
    return interval.min < x and x < interval.max


@ti.func
def interval_clamp(interval: Interval, x: ti.f64) -> ti.f64:
    """Clamp x into [min, max]."""
    result = x
    if x < interval.min:
        result = interval.min
    elif x > interval.max:
        result = interval.max
    return result


# Host-side bounds, as (min, max) pairs for Python-scope callers
EMPTY = (INFINITY, -INFINITY)
UNIVERSE = (-INFINITY, INFINITY)
