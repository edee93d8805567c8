"""Command that renders the sample scene in every mode."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

import numpy as np

from .camera import Camera, Film
from .logger import init_logger
from .model import Model
from .ray import Material
from .renderers import BDRenderer, BTCRenderer, NormalRenderer, RTRenderer, TTCRenderer
from .rgb import RGB
from .scene import Scene
from .shapes import Plane, Shape, Sphere
from .thread_pool import ThreadPool


def build_scene(model: Shape) -> Scene:
    """The sample scene: ``model`` at the origin, three spheres and a floor."""
    sphere = Sphere((0.0, 0.0, 0.0), 1.0)
    plane = Plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
    white = np.ones(3)

    scene = Scene()
    scene.add_shape(model, Material(albedo=RGB(202, 159, 117).to_color()), (0.0, 0.0, 0.0))
    scene.add_shape(
        sphere,
        Material(white, False, RGB(255, 128, 128).to_color()),
        (0.0, 0.0, 2.5),
    )
    scene.add_shape(
        sphere,
        Material(white, False, RGB(128, 128, 255).to_color()),
        (0.0, 0.0, -2.5),
    )
    scene.add_shape(sphere, Material(white, True), (3.0, 0.5, -2.0))
    scene.add_shape(plane, Material(), (0.0, -0.5, 0.0))
    return scene


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pbtracer", description="Render the sample scene around an OBJ model."
    )
    parser.add_argument("model", type=Path, help="OBJ file placed at the origin")
    parser.add_argument("--output-dir", type=Path, default=Path("."))
    parser.add_argument("--width", type=int, default=192 * 4)
    parser.add_argument("--height", type=int, default=108 * 4)
    parser.add_argument("--spp", type=int, default=64, help="samples per pixel for the path tracer")
    parser.add_argument("--threads", type=int, default=0, help="worker threads, 0 for one per CPU")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Render debug views, normals and a path-traced image; return the exit status."""
    args = _parse_args(argv)
    logger = init_logger()
    logger.info("PBRT Init!")

    try:
        model = Model.from_obj(args.model)
    except (OSError, ValueError) as error:
        logger.error("Cannot load model %s: %s", args.model.absolute(), error)
        return 1

    film = Film(args.width, args.height)
    camera = Camera(film, (-3.0, 0.0, 0.0), (0.0, 0.0, 0.0), 45.0)
    scene = build_scene(model)
    args.output_dir.mkdir(parents=True, exist_ok=True)

    passes = [
        (BTCRenderer, "BTC.ppm", 1),
        (TTCRenderer, "TTC.ppm", 1),
        (BDRenderer, "BD.ppm", 1),
        (NormalRenderer, "Normal.ppm", 1),
        (RTRenderer, "RayTrace.ppm", args.spp),
    ]
    with ThreadPool(args.threads) as pool:
        for renderer_cls, name, spp in passes:
            renderer_cls(camera, scene, pool=pool).render(args.output_dir / name, spp)

    logger.info("PBRT Shutdown!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())