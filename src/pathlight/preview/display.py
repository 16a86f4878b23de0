"""Matplotlib-based preview of post-processed pictures.

Matplotlib is imported lazily so that rendering never depends on a display
backend.

Example:
    >>> from pathlight.preview.display import show_picture
    >>> show_picture(picture, title="Cornell box")
"""

from __future__ import annotations

import numpy as np

from pathlight.preview.export import compute_rmse
from pathlight.preview.picture import Picture


def show_picture(
    picture: Picture,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display a picture in a Matplotlib figure.

    Args:
        picture: A tone mapped and gamma corrected picture.
        title: Figure title (default shows the picture size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(picture.as_rgb())
    ax.axis("off")
    ax.set_title(title if title is not None else f"{picture.width}x{picture.height}")

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    picture_a: Picture,
    picture_b: Picture,
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display two pictures side by side with their amplified difference.

    Args:
        picture_a: First picture.
        picture_b: Second picture, same size as the first.
        labels: Labels for the two pictures.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE between the two pictures.
    """
    import matplotlib.pyplot as plt

    rmse = compute_rmse(picture_a, picture_b)
    diff = np.abs(picture_a.pixels.astype(np.float64) - picture_b.pixels.astype(np.float64))
    diff_amplified = np.clip(diff * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(picture_a.as_rgb())
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(picture_b.as_rgb())
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
