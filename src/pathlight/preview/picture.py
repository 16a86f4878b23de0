"""The rendered picture and its post-processing.

A :class:`Picture` owns a float32 NumPy buffer of shape (height, width, 3)
holding linear radiance, row 0 at the top. The two post-process steps mutate
the buffer in place:

- tone_map: extended Reinhard operator on luminance, white point at the
  maximum luminance of the picture; chromaticity is preserved and pixels
  with (near) zero luminance are left unchanged
- gamma_correction: every channel raised to 1/gamma

Example:
    >>> import numpy as np
    >>> picture = Picture(np.full((2, 2, 3), 4.0, dtype=np.float32))
    >>> picture.tone_map()
    >>> round(float(picture.max_luminance()), 4)
    1.0
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import numpy as np
import numpy.typing as npt

from pathlight.core.color import LUMINANCE_WEIGHTS, Color

# Pixels darker than this keep their value during tone mapping
MIN_TONE_MAP_LUMINANCE = 1e-8


class Picture:
    """Linear radiance buffer, row-major from the top-left pixel.

    Attributes:
        pixels: Float32 array of shape (height, width, 3).
    """

    def __init__(self, pixels: npt.ArrayLike) -> None:
        """Wrap an (H, W, 3) array.

        Raises:
            ValueError: If the array does not have shape (H, W, 3).
        """
        array = np.array(pixels, dtype=np.float32)
        if array.ndim != 3 or array.shape[2] != 3:
            raise ValueError(f"Picture pixels must have shape (H, W, 3), got {array.shape}")
        self.pixels: npt.NDArray[np.float32] = array

    @classmethod
    def black(cls, width: int, height: int) -> Picture:
        return cls(np.zeros((height, width, 3), dtype=np.float32))

    @classmethod
    def from_colors(cls, width: int, height: int, colors: Iterable[Color]) -> Picture:
        """Build a picture from width * height colours in row-major order.

        Raises:
            ValueError: If the number of colours does not match the size.
        """
        values = [c.to_tuple() for c in colors]
        if len(values) != width * height:
            raise ValueError(
                f"Expected {width * height} colours for {width}x{height}, got {len(values)}"
            )
        return cls(np.array(values, dtype=np.float32).reshape(height, width, 3))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def __getitem__(self, xy: tuple[int, int]) -> Color:
        """Colour of pixel (x, y), with y counted from the top row."""
        x, y = xy
        r, g, b = self.pixels[y, x]
        return Color(float(r), float(g), float(b))

    def __iter__(self) -> Iterator[Color]:
        for r, g, b in self.pixels.reshape(-1, 3):
            yield Color(float(r), float(g), float(b))

    def copy(self) -> Picture:
        return Picture(self.pixels.copy())

    def luminance(self) -> npt.NDArray[np.float32]:
        """Per-pixel luminance, shape (H, W)."""
        return (self.pixels @ np.asarray(LUMINANCE_WEIGHTS, dtype=np.float32)).astype(np.float32)

    def max_luminance(self) -> float:
        if self.pixels.size == 0:
            return 0.0
        return float(self.luminance().max())

    def tone_map(self) -> None:
        """Apply the extended Reinhard operator in place.

        With L the pixel luminance and Lw the maximum luminance, the new
        luminance is L (1 + L / Lw^2) / (1 + L) and the colour is scaled by
        the ratio of new to old luminance.
        """
        lum = self.luminance().astype(np.float64)
        l_white = self.max_luminance()
        if l_white < MIN_TONE_MAP_LUMINANCE:
            return

        mapped = lum * (1.0 + lum / (l_white * l_white)) / (1.0 + lum)
        scale = np.ones_like(lum)
        bright = lum >= MIN_TONE_MAP_LUMINANCE
        scale[bright] = mapped[bright] / lum[bright]
        self.pixels = (self.pixels * scale[..., np.newaxis]).astype(np.float32)

    def gamma_correction(self, gamma: float) -> None:
        """Raise every channel to 1/gamma in place. Negative channels become 0.

        Raises:
            ValueError: If gamma is not positive.
        """
        if gamma <= 0.0:
            raise ValueError(f"Gamma must be positive, got {gamma}")
        self.pixels = np.power(np.maximum(self.pixels, 0.0), 1.0 / gamma).astype(np.float32)

    def as_rgb(self) -> npt.NDArray[np.uint8]:
        """8-bit RGB: clamp to [0, 1], scale by 255, truncate."""
        return (np.clip(self.pixels, 0.0, 1.0) * 255.0).astype(np.uint8)

    def __repr__(self) -> str:
        return f"Picture(width={self.width}, height={self.height})"
