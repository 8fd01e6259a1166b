#!/usr/bin/env python3
"""
VoxForge - A Python Ray Caster

Main entry point for rendering scenes.
"""

import argparse
import logging
import math
import sys
import time
from dataclasses import replace
from pathlib import Path

from voxforge.vec3 import Vec3, Point3
from voxforge.quaternion import Quaternion
from voxforge.color import Color
from voxforge.camera import Camera
from voxforge.materials import Material
from voxforge.shapes import Ellipsoid
from voxforge.lights import Light
from voxforge.scene import Scene
from voxforge.renderer import Renderer, RenderSettings
from voxforge.scene_parser import load_scene, SceneParseError
from voxforge.volumes import VolumeLoadError
from voxforge.logging_config import setup_logging

logger = logging.getLogger("voxforge.main")


def create_demo_scene() -> Scene:
    """Create a demo scene of ellipsoids lit by two lights."""
    scene = Scene()

    shiny = Material(
        ambient=Color.gray(0.1),
        diffuse=Color.gray(0.7),
        specular=Color.gray(0.8),
        shininess=60
    )
    matte = Material(
        ambient=Color.gray(0.1),
        diffuse=Color.gray(0.9),
        specular=Color.gray(0.05),
        shininess=5
    )

    # Flattened floor
    scene.add(Ellipsoid(Point3(0, -52, 0), Vec3(1, 1, 1), 50, matte, Color(0.6, 0.6, 0.6)))

    # Center ellipsoid, tilted
    tilt = Quaternion.from_axis_angle(math.radians(30), Vec3(0, 0, 1))
    scene.add(Ellipsoid(Point3(0, 0, 10), Vec3(2, 1, 1), 1.5, shiny, Color(0.9, 0.2, 0.2), tilt))

    # Left and right spheres
    scene.add(Ellipsoid(Point3(-4, -0.5, 12), Vec3(1, 1, 1), 1.5, shiny, Color(0.2, 0.4, 0.9)))
    scene.add(Ellipsoid(Point3(4, -0.5, 8), Vec3(1, 1.5, 1), 1.0, matte, Color(0.2, 0.8, 0.3)))

    scene.add_light(Light(Point3(10, 15, -5)))
    scene.add_light(Light(
        Point3(-10, 5, 0),
        ambient=Color.gray(0.05),
        diffuse=Color.gray(0.3),
        specular=Color.gray(0.3)
    ))

    return scene


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='VoxForge - A Python Ray Caster',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --output render.png
  python main.py --scene scenes/head.yaml --output head.png
  python main.py --width 1920 --height 1080 --output hd_render.png
        '''
    )

    parser.add_argument('--scene', type=str, default='demo',
                        help="Scene file (YAML or JSON), or 'demo' (default: demo)")
    parser.add_argument('--width', type=int, default=None, help='Image width (default: 800)')
    parser.add_argument('--height', type=int, default=None, help='Image height (default: 600)')
    parser.add_argument('--output', type=str, default='output/render.png', help='Output filename')
    parser.add_argument('--log-file', type=str, default=None, help='Also write the log to this file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    try:
        if args.scene == 'demo':
            scene = create_demo_scene()
            camera = Camera(
                position=Point3(0, 2, -8),
                direction=Vec3(0, -0.1, 1),
                up=Vec3(0, 1, 0),
                view_plane_distance=1.0,
                view_plane_height=0.8,
                front_plane_distance=0.0,
                back_plane_distance=1000.0
            )
            settings = RenderSettings()
        else:
            scene, camera, settings = load_scene(args.scene)
    except (SceneParseError, VolumeLoadError, FileNotFoundError) as e:
        logger.error("Cannot load scene: %s", e)
        return 1

    overrides = {}
    if args.width is not None:
        overrides['width'] = args.width
    if args.height is not None:
        overrides['height'] = args.height
    try:
        settings = replace(settings, **overrides)
    except ValueError as e:
        parser.error(str(e))

    print(f"Resolution: {settings.width}x{settings.height}")
    print(f"Objects in scene: {len(scene)}, lights: {len(scene.lights)}")

    renderer = Renderer(settings)

    # Progress tracking
    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    renderer.set_progress_callback(progress_callback)

    start_time = time.time()
    image = renderer.render(scene, camera)
    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")
    print(f"  Rays per second: {(settings.width * settings.height) / max(elapsed, 1e-9):.0f}")

    output_path = Path(args.output)
    image.store(output_path)
    print(f"Saved to: {output_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
