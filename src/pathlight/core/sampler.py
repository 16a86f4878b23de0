"""Per-lane pseudo-random number generation.

Every pixel of a render owns one generator "lane": a 32-bit PCG-style state
stored in a Taichi field and advanced only by the thread that renders that
pixel. Sampling routines receive the lane index as an explicit generator
handle, so no generator state is shared between pixels and a render is
reproducible for a given seed regardless of how the parallel loop is
scheduled.

The state transition is a full-period LCG modulo 2^32 and the output is passed
through the PCG-RXS-M-XS permutation before being converted to a float in
[0, 1).

Example:
    >>> seed_lanes(16, seed=7)
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     return random_float(0)
"""

import taichi as ti

# Maximum number of generator lanes (one per pixel of the largest render target)
MAX_LANES = 2048 * 2048

# LCG multiplier and increment (a = 1 mod 4, c odd: full period mod 2^32)
_LCG_MULTIPLIER = 747796405
_LCG_INCREMENT = 1013904223

# Output permutation multiplier
_PERMUTE_MULTIPLIER = 277803737

# 2^-24, maps the top 24 bits of a word onto [0, 1)
_INV_2_24 = 1.0 / 16777216.0

_rng_state = ti.field(dtype=ti.u32, shape=MAX_LANES)


@ti.func
def _advance(state: ti.u32) -> ti.u32:
    return state * ti.cast(_LCG_MULTIPLIER, ti.u32) + ti.cast(_LCG_INCREMENT, ti.u32)


@ti.func
def _permute(state: ti.u32) -> ti.u32:
    word = ((state >> ((state >> 28) + ti.cast(4, ti.u32))) ^ state) * ti.cast(
        _PERMUTE_MULTIPLIER, ti.u32
    )
    return (word >> 22) ^ word


@ti.func
def hash_u32(value: ti.u32) -> ti.u32:
    """Hash a 32-bit value (one LCG step followed by the output permutation)."""
    return _permute(_advance(value))


@ti.func
def seed_lane(lane: ti.i32, seed: ti.i32):
    """Initialise the generator state of one lane from a render seed.

    Args:
        lane: The lane to seed.
        seed: The render seed. Lanes seeded with the same seed produce the
            same streams.
    """
    mixed = hash_u32(ti.cast(seed, ti.u32))
    _rng_state[lane] = hash_u32(ti.cast(lane, ti.u32) ^ mixed)


@ti.func
def random_u32(lane: ti.i32) -> ti.u32:
    """Advance a lane and return 32 random bits."""
    state = _advance(_rng_state[lane])
    _rng_state[lane] = state
    return _permute(state)


@ti.func
def random_float(lane: ti.i32) -> ti.f32:
    """Draw a uniform float in [0, 1) from a lane."""
    return ti.cast(random_u32(lane) >> 8, ti.f32) * _INV_2_24


@ti.kernel
def _seed_lanes_kernel(count: ti.i32, seed: ti.i32):
    for lane in range(count):
        seed_lane(lane, seed)


def normalize_seed(seed: int) -> int:
    """Fold an arbitrary Python integer into the non-negative i32 range."""
    return int(seed) & 0x7FFFFFFF


def seed_lanes(count: int, seed: int = 0) -> None:
    """Seed the first ``count`` lanes from Python scope.

    Args:
        count: Number of lanes to seed.
        seed: The seed value.

    Raises:
        ValueError: If count is outside [1, MAX_LANES].
    """
    if count < 1 or count > MAX_LANES:
        raise ValueError(f"Lane count {count} is outside [1, {MAX_LANES}]")
    _seed_lanes_kernel(count, normalize_seed(seed))
