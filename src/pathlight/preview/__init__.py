"""Preview module for pictures, post-processing and output.

Components:
    picture: The radiance buffer with tone mapping and gamma correction
    export: PPM/PNG writers and RMSE comparison
    display: Matplotlib-based static preview

Example:
    >>> from pathlight.preview import write_picture
    >>> picture.tone_map()
    >>> picture.gamma_correction(2.2)
    >>> write_picture(picture, "output.ppm")
"""

from pathlight.preview.display import show_comparison, show_picture
from pathlight.preview.export import (
    check_output_path,
    compute_rmse,
    format_ppm,
    save_png,
    write_picture,
    write_ppm,
)
from pathlight.preview.picture import Picture

__all__ = [
    "Picture",
    # Display functions
    "show_picture",
    "show_comparison",
    # Export functions
    "check_output_path",
    "format_ppm",
    "write_ppm",
    "save_png",
    "write_picture",
    "compute_rmse",
]
