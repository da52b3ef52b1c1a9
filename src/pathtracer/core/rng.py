"""Counter-based random streams for reproducible Monte Carlo sampling.

Instead of a global random source, every pixel owns an independent 32-bit
generator state that is threaded explicitly through the sampling functions.
The state of a pixel is derived from the render seed and the pixel index only,
so the rendered image does not depend on how Taichi schedules pixels across
threads or how rows are batched.

The generator is a PCG-style permuted linear congruential generator
(RXS-M-XS output function over a 32-bit LCG). Every function that consumes
randomness takes the current state and returns the drawn value(s) first and
the advanced state last:

    >>> @ti.kernel
    ... def draw():
    ...     state = seed_stream(ti.u32(7), ti.u32(0))
    ...     x, state = random_double(state)

All constants fit in a signed 32-bit integer so they can be written as plain
literals and cast to ``ti.u32`` inside Taichi scope.
"""

import taichi as ti

# LCG step: state * multiplier + increment (mod 2^32).
# The multiplier is congruent to 1 mod 4 and the increment is odd, which
# gives the full 2^32 period.
_LCG_MULTIPLIER = 747796405
_LCG_INCREMENT = 1013904223

# Output permutation multiplier (PCG RXS-M-XS 32).
_PERMUTE_MULTIPLIER = 277803737

# 2^26 and 2^-53 for assembling a 53-bit mantissa from two draws
_TWO_POW_26 = 67108864.0
_TWO_POW_MINUS_53 = 1.0 / 9007199254740992.0


@ti.func
def _permute(state: ti.u32) -> ti.u32:
    """Apply the PCG RXS-M-XS output permutation to a state word."""
    shift = (state >> ti.u32(28)) + ti.u32(4)
    word = ((state >> shift) ^ state) * ti.u32(_PERMUTE_MULTIPLIER)
    return (word >> ti.u32(22)) ^ word


@ti.func
def _step(state: ti.u32) -> ti.u32:
    return state * ti.u32(_LCG_MULTIPLIER) + ti.u32(_LCG_INCREMENT)


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit value into a well-mixed 32-bit value.

    Used to turn structured inputs (seeds, pixel indices) into uncorrelated
    generator states.
    """
    return _permute(_step(value))


@ti.func
def seed_stream(seed: ti.u32, stream_id: ti.u32) -> ti.u32:
    """Derive the initial state of an independent stream.

    Args:
        seed: The render seed.
        stream_id: The stream identifier, typically the linear pixel index.

    Returns:
        The initial generator state for this stream.
    """
    return pcg_hash(seed ^ pcg_hash(stream_id))


@ti.func
def next_u32(state: ti.u32):
    """Advance the generator and return a uniformly distributed u32.

    Returns:
        A tuple of (value, new_state).
    """
    new_state = _step(state)
    return _permute(new_state), new_state


@ti.func
def random_double(state: ti.u32):
    """Draw a uniformly distributed double in [0, 1).

    Two generator outputs are combined into a 53-bit mantissa so the full
    double-precision resolution is available.

    Returns:
        A tuple of (value, new_state).
    """
    high, s = next_u32(state)
    low, s = next_u32(s)
    # 27 high bits and 26 low bits, both small enough for a signed cast
    high_bits = ti.cast(high >> ti.u32(5), ti.i32)
    low_bits = ti.cast(low >> ti.u32(6), ti.i32)
    value = (ti.cast(high_bits, ti.f64) * _TWO_POW_26 + ti.cast(low_bits, ti.f64)) * (
        _TWO_POW_MINUS_53
    )
    return value, s


@ti.func
def random_double_range(lo: ti.f64, hi: ti.f64, state: ti.u32):
    """Draw a uniformly distributed double in [lo, hi).

    Returns:
        A tuple of (value, new_state).
    """
    x, s = random_double(state)
    return lo + (hi - lo) * x, s
