"""Render settings and the render/write_image entry points.

The :class:`Renderer` ties the pieces together: it uploads a scene to the
Taichi tables, sets up the camera and render target, configures the
integrator from :class:`RenderSettings`, runs the render kernel and wraps
the result in a :class:`~pathlight.preview.picture.Picture`.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathlight.core.renderer import Renderer, RenderSettings
    >>> from pathlight.scene.examples import cornell_box, cornell_box_world
    >>>
    >>> settings = RenderSettings(width=160, height=120, spp=16, seed=7)
    >>> renderer = Renderer(settings)
    >>> renderer.write_image("cornell.ppm", cornell_box_world(160, 120), cornell_box())
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, replace

from pathlight.camera.pinhole import WorldSetting, setup_camera
from pathlight.core.integrator import (
    DEFAULT_BACKGROUND,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MIN_DEPTH,
    DEFAULT_MIS_POWER,
    DEFAULT_RR_PROBABILITY,
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    configure_integrator,
    get_picture_numpy,
    render_image,
    setup_render_target,
)
from pathlight.preview.export import check_output_path, write_picture
from pathlight.preview.picture import Picture
from pathlight.scene.manager import Scene

logger = logging.getLogger(__name__)

DEFAULT_GAMMA = 2.2


@dataclass(frozen=True)
class RenderSettings:
    """Everything that controls a render apart from the scene and camera.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        spp: Samples per pixel.
        gamma: Display gamma used by write_image.
        seed: Render seed; equal seeds give equal pictures.
        max_depth: Hard ceiling on path length.
        min_depth: Bounces that always survive Russian roulette.
        rr_probability: Roulette survival probability past min_depth.
        use_nee: Sample the lights at Diffuse and Phong vertices.
        use_mis: Combine light and BSDF sampling with the power heuristic.
        mis_power: Power heuristic exponent.
        background: Radiance of rays that leave the scene.
        tone_map: Apply the extended Reinhard operator before gamma.
    """

    width: int = 256
    height: int = 192
    spp: int = 16
    gamma: float = DEFAULT_GAMMA
    seed: int = 0
    max_depth: int = DEFAULT_MAX_DEPTH
    min_depth: int = DEFAULT_MIN_DEPTH
    rr_probability: float = DEFAULT_RR_PROBABILITY
    use_nee: bool = True
    use_mis: bool = True
    mis_power: float = DEFAULT_MIS_POWER
    background: tuple[float, float, float] = DEFAULT_BACKGROUND
    tone_map: bool = True

    def validate(self) -> None:
        """Check every setting.

        Raises:
            ValueError: If a setting is out of range.
        """
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image size {self.width}x{self.height} exceeds "
                f"{MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT}"
            )
        if self.spp < 1:
            raise ValueError(f"spp must be at least 1, got {self.spp}")
        if self.gamma <= 0.0:
            raise ValueError(f"gamma must be positive, got {self.gamma}")
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")
        if self.min_depth < 0:
            raise ValueError(f"min_depth must be non-negative, got {self.min_depth}")
        if not 0.0 < self.rr_probability <= 1.0:
            raise ValueError(f"rr_probability must be in (0, 1], got {self.rr_probability}")
        if self.mis_power < 0.0:
            raise ValueError(f"mis_power must be non-negative, got {self.mis_power}")
        if len(self.background) != 3 or min(self.background) < 0.0:
            raise ValueError(f"background must be three non-negative values, got {self.background}")

    def with_changes(self, **changes) -> RenderSettings:
        return replace(self, **changes)


class Renderer:
    """Renders scenes with a fixed set of settings.

    Attributes:
        settings: The settings every render uses.
    """

    def __init__(self, settings: RenderSettings | None = None) -> None:
        """Initialize the renderer.

        Raises:
            ValueError: If the settings are invalid.
        """
        self.settings = settings if settings is not None else RenderSettings()
        self.settings.validate()
        self.last_render_seconds = 0.0

    def render(self, world: WorldSetting, scene: Scene) -> Picture:
        """Render a scene seen from a world setting.

        Returns:
            A new picture holding linear radiance, not yet tone mapped.

        Raises:
            ValueError: If the settings or camera are invalid.
            RuntimeError: If the scene does not fit in the scene tables.
        """
        s = self.settings
        s.validate()

        scene.upload()
        setup_camera(world)
        setup_render_target(s.width, s.height)
        configure_integrator(
            max_depth=s.max_depth,
            min_depth=s.min_depth,
            rr_probability=s.rr_probability,
            use_nee=s.use_nee,
            use_mis=s.use_mis,
            mis_power=s.mis_power,
            background=s.background,
        )

        if s.use_nee and not scene.lights:
            logger.warning("Scene has no emitters; only the background lights it")

        logger.info(
            f"Rendering {s.width}x{s.height} at {s.spp} spp "
            f"({len(scene)} objects, {len(scene.lights)} lights)"
        )
        start = time.perf_counter()
        render_image(spp=s.spp, seed=s.seed)
        picture = Picture(get_picture_numpy())
        self.last_render_seconds = time.perf_counter() - start
        logger.info(f"Render finished in {self.last_render_seconds:.2f}s")

        return picture

    def post_process(self, picture: Picture) -> Picture:
        """Tone map (if enabled) and gamma correct a picture in place."""
        if self.settings.tone_map:
            picture.tone_map()
        picture.gamma_correction(self.settings.gamma)
        return picture

    def write_image(
        self, filepath: str | os.PathLike, world: WorldSetting, scene: Scene
    ) -> Picture:
        """Render, post-process and write a picture.

        The encoder follows the file suffix (``.ppm`` for ASCII PPM). The path is
        checked before rendering, so a bad path fails fast.

        Returns:
            The post-processed picture that was written.

        Raises:
            ValueError: If the settings are invalid or the suffix is unknown.
            OSError: If the file cannot be written.
        """
        path = check_output_path(filepath)
        picture = self.post_process(self.render(world, scene))
        write_picture(picture, path)
        return picture


def render(
    world: WorldSetting, scene: Scene, settings: RenderSettings | None = None
) -> Picture:
    """Render a scene with the given (or default) settings."""
    return Renderer(settings).render(world, scene)


def write_image(
    filepath: str | os.PathLike,
    world: WorldSetting,
    scene: Scene,
    settings: RenderSettings | None = None,
) -> Picture:
    """Render a scene and write it to ``filepath``."""
    return Renderer(settings).write_image(filepath, world, scene)
