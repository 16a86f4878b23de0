"""Colour value type and colour helpers.

Colours are three unclamped linear channels. Emission routinely exceeds 1; only
the final 8-bit conversion clamps. On the host, colours are immutable
:class:`Color` values used in scene descriptions and when inspecting pictures.
Inside kernels they are plain ``vec3`` values, with :func:`luminance` and
:func:`brightness` available as Taichi functions.

Example:
    >>> c = Color(0.5, 1.0, 2.0)
    >>> round(c.luminance(), 4)
    0.9659
    >>> c.as_rgb()
    (127, 255, 255)
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Rec. 709 relative luminance weights
LUMINANCE_R = 0.2126
LUMINANCE_G = 0.7152
LUMINANCE_B = 0.0722
LUMINANCE_WEIGHTS = (LUMINANCE_R, LUMINANCE_G, LUMINANCE_B)


@dataclass(frozen=True)
class Color:
    """An RGB colour with unclamped linear channels.

    Attributes:
        r: Red channel.
        g: Green channel.
        b: Blue channel.
    """

    r: float = 0.0
    g: float = 0.0
    b: float = 0.0

    @classmethod
    def black(cls) -> "Color":
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def white(cls) -> "Color":
        return cls(1.0, 1.0, 1.0)

    @classmethod
    def from_tuple(cls, values: tuple[float, float, float] | list[float]) -> "Color":
        """Build a colour from any three-element sequence."""
        if len(values) != 3:
            raise ValueError(f"A colour needs exactly 3 channels, got {len(values)}")
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def __iter__(self) -> Iterator[float]:
        return iter((self.r, self.g, self.b))

    def __add__(self, other: "Color") -> "Color":
        return Color(self.r + other.r, self.g + other.g, self.b + other.b)

    def __mul__(self, k: float) -> "Color":
        return self.scale(k)

    __rmul__ = __mul__

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)

    def scale(self, k: float) -> "Color":
        """Multiply every channel by a scalar."""
        return Color(self.r * k, self.g * k, self.b * k)

    def blend(self, other: "Color") -> "Color":
        """Channel-wise product with another colour."""
        return Color(self.r * other.r, self.g * other.g, self.b * other.b)

    def map(self, fn: Callable[[float], float]) -> "Color":
        """Apply a function to every channel."""
        return Color(fn(self.r), fn(self.g), fn(self.b))

    def luminance(self) -> float:
        """Perceptual luminance 0.2126 R + 0.7152 G + 0.0722 B."""
        wr, wg, wb = LUMINANCE_WEIGHTS
        return wr * self.r + wg * self.g + wb * self.b

    def brightness(self) -> float:
        """Unweighted channel mean."""
        return (self.r + self.g + self.b) / 3.0

    def is_black(self) -> bool:
        return self.r == 0.0 and self.g == 0.0 and self.b == 0.0

    def adjust_luminance(self, target: float) -> "Color":
        """Rescale the colour so its luminance becomes ``target``.

        Chromaticity is preserved. Colours with (near) zero luminance are
        returned unchanged.
        """
        current = self.luminance()
        if abs(current) < 1e-8:
            return self
        return self.scale(target / current)

    def gamma_correction(self, gamma: float) -> "Color":
        """Raise every channel to the power 1/gamma.

        Raises:
            ValueError: If gamma is not positive.
        """
        if gamma <= 0.0:
            raise ValueError(f"Gamma must be positive, got {gamma}")
        inv = 1.0 / gamma
        return self.map(lambda c: max(c, 0.0) ** inv)

    def as_rgb(self) -> tuple[int, int, int]:
        """Convert to 8-bit RGB: clamp to [0, 1], scale by 255, truncate."""

        def to_byte(c: float) -> int:
            return int(min(max(c, 0.0), 1.0) * 255.0)

        return (to_byte(self.r), to_byte(self.g), to_byte(self.b))


@ti.func
def luminance(c: vec3) -> ti.f32:
    """Perceptual luminance of a colour inside a kernel."""
    return LUMINANCE_R * c.x + LUMINANCE_G * c.y + LUMINANCE_B * c.z


@ti.func
def brightness(c: vec3) -> ti.f32:
    """Unweighted channel mean of a colour inside a kernel."""
    return (c.x + c.y + c.z) / 3.0
