#!/usr/bin/env python3
"""Render one of the bundled example scenes.

Renders the Cornell box or the MIS comparison scene with the pathlight path
tracer and writes the tone mapped, gamma corrected picture. The output format
follows the file suffix (.ppm for ASCII PPM, .png and friends via Pillow).

Usage:
    python examples/render_scene.py [options]

Options:
    --scene {cornell,mis}  Scene to render (default: cornell)
    --width WIDTH          Image width in pixels (default: 320)
    --height HEIGHT        Image height in pixels (default: 240)
    --spp SPP              Samples per pixel (default: 64)
    --seed SEED            Render seed (default: 0)
    --output OUTPUT        Output file path (default: <scene>.ppm)
    --gamma GAMMA          Display gamma (default: 2.2)
    --no-nee               Disable light sampling (BSDF sampling only)
    --no-mis               Disable multiple importance sampling
    --preview              Show the picture with Matplotlib after writing
    --arch {cpu,gpu}       Taichi backend (default: gpu, falls back to cpu)
    --verbose              Log debug messages

Example:
    python examples/render_scene.py --scene mis --width 256 --height 192 --spp 128
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_scene")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render an example scene with the pathlight path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=("cornell", "mis"),
        default="cornell",
        help="Scene to render (default: cornell)",
    )
    parser.add_argument("--width", type=int, default=320, help="Image width (default: 320)")
    parser.add_argument("--height", type=int, default=240, help="Image height (default: 240)")
    parser.add_argument("--spp", type=int, default=64, help="Samples per pixel (default: 64)")
    parser.add_argument("--seed", type=int, default=0, help="Render seed (default: 0)")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output file path (default: <scene>.ppm)",
    )
    parser.add_argument("--gamma", type=float, default=2.2, help="Display gamma (default: 2.2)")
    parser.add_argument(
        "--no-nee",
        action="store_true",
        help="Disable light sampling (BSDF sampling only)",
    )
    parser.add_argument(
        "--no-mis",
        action="store_true",
        help="Disable multiple importance sampling",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the picture with Matplotlib after writing",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="gpu",
        help="Taichi backend (default: gpu, falls back to cpu)",
    )
    parser.add_argument("--verbose", action="store_true", help="Log debug messages")
    return parser.parse_args(argv)


def init_taichi(arch: str) -> None:
    """Initialize Taichi, falling back to the CPU when no GPU is usable."""
    if arch == "gpu":
        try:
            ti.init(arch=ti.gpu)
            return
        except RuntimeError as e:
            logger.warning(f"GPU backend unavailable ({e}); using CPU")
    ti.init(arch=ti.cpu)


def render_scene(args: argparse.Namespace) -> Path:
    """Render the selected scene and write it to the output path.

    Returns:
        Path to the written image.
    """
    # Lazy imports so that Taichi is initialized first
    from pathlight.core.renderer import Renderer, RenderSettings
    from pathlight.scene.examples import (
        cornell_box,
        cornell_box_world,
        mis_example,
        mis_example_world,
    )

    settings = RenderSettings(
        width=args.width,
        height=args.height,
        spp=args.spp,
        gamma=args.gamma,
        seed=args.seed,
        use_nee=not args.no_nee,
        use_mis=not args.no_mis,
    )
    renderer = Renderer(settings)

    if args.scene == "cornell":
        scene = cornell_box()
        world = cornell_box_world(args.width, args.height)
    else:
        scene = mis_example()
        world = mis_example_world(args.width, args.height)

    output = Path(args.output if args.output is not None else f"{args.scene}.ppm")
    picture = renderer.write_image(output, world, scene)

    if args.preview:
        from pathlight.preview.display import show_picture

        show_picture(picture, title=f"{args.scene} ({args.spp} spp)")

    return output


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    init_taichi(args.arch)

    try:
        output = render_scene(args)
    except (ValueError, RuntimeError, OSError) as e:
        logger.error(f"Render failed: {e}")
        return 1

    logger.info(f"Saved to: {output.absolute()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
