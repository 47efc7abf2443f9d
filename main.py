#!/usr/bin/env python3
"""
PrismTrace - A Python Whitted-style Ray Tracer

Main entry point for rendering scenes.
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from prismtrace.vec3 import Vec3, Color, Point3
from prismtrace.shapes import Sphere, Plane, Triangle
from prismtrace.materials import Material
from prismtrace.lights import AmbientLight, DirectionalLight, PointLight, SpotLight
from prismtrace.scene import Scene
from prismtrace.image_writer import ImageWriter, ImageWriteError
from prismtrace.tracer import SimpleRayTracer
from prismtrace.sampling import SamplingConfig, SamplingPattern
from prismtrace.camera import Camera, CameraBuilder, MissingConfigurationError
from prismtrace.scene_parser import load_scene, SceneParseError


DEFAULT_OUTPUT = 'images/render.png'


def create_demo_scene() -> Scene:
    """Create a demo scene: spheres and triangles over a reflective floor."""
    scene = Scene(
        "demo",
        background=Color(0.1, 0.1, 0.16),
        ambient_light=AmbientLight(Color(1, 1, 1), 0.05)
    )

    scene.geometries.add(
        # Floor
        Plane(Point3(0, -50, 0), Vec3(0, 1, 0),
              Material(kd=0.6, ks=0.2, kr=0.2, shininess=20),
              emission=Color(0.15, 0.15, 0.15)),
        # Mirror sphere
        Sphere(Point3(0, -15, -100), 25,
               Material(kd=0.3, ks=0.5, kr=0.4, shininess=80),
               emission=Color(0.2, 0.3, 0.45)),
        # Glassy sphere
        Sphere(Point3(-45, -25, -80), 18,
               Material(kd=0.2, ks=0.6, kt=0.6, shininess=100),
               emission=Color(0.4, 0.15, 0.15)),
        # Matte sphere
        Sphere(Point3(45, -20, -95), 22,
               Material(kd=0.7, ks=0.3, shininess=40),
               emission=Color(0.25, 0.2, 0.45)),
        # Backdrop triangles
        Triangle(Point3(-80, -50, -180), Point3(80, -50, -180), Point3(0, 70, -180),
                 Material(kd=0.5, ks=0.2, kr=0.3, shininess=30),
                 emission=Color(0.1, 0.2, 0.15)),
    )

    scene.lights.extend([
        DirectionalLight(Color(0.45, 0.45, 0.4), Vec3(-0.5, -1, -0.7)),
        PointLight(Color(0.6, 0.6, 0.7), Point3(-30, 40, 10), kl=0.0002, kq=0.00001),
        SpotLight(Color(0.5, 0.55, 0.6), Point3(50, 60, 20), Vec3(-1, -1.2, -1),
                  kl=0.0003, kq=0.000015),
    ])

    return scene


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='PrismTrace - A Python Whitted-style Ray Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --output demo.png
  python main.py --width 600 --height 600 --aa-samples 9 --output smooth.png
  python main.py --scene scenes/mirror.yaml --threads 8
        '''
    )

    parser.add_argument('--scene', type=str, default=None,
                        help='Scene file (YAML or JSON); renders the built-in demo if omitted')
    parser.add_argument('--width', type=int, default=None, help='Image width (default: 400)')
    parser.add_argument('--height', type=int, default=None, help='Image height (default: 400)')
    parser.add_argument('--samples', type=int, default=None,
                        help='Super-sampling rays around each first hit (default: off)')
    parser.add_argument('--sample-size', type=float, default=2.0,
                        help='Side length of the super-sampling area (default: 2.0)')
    parser.add_argument('--pattern', type=str, default='jittered',
                        choices=[p.value for p in SamplingPattern],
                        help='Sampling pattern (default: jittered)')
    parser.add_argument('--aa-samples', type=int, default=None,
                        help='Anti-aliasing rays per pixel (default: 1)')
    parser.add_argument('--threads', type=int, default=None, help='Number of threads (0=auto)')
    parser.add_argument('--output', type=str, default=None,
                        help='Output filename (default: images/render.png, or the scene file\'s image)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    # Print header
    print("=" * 60)
    print("PrismTrace Ray Tracer")
    print("=" * 60)

    output_path = Path(args.output or DEFAULT_OUTPUT)
    pattern = SamplingPattern(args.pattern)

    try:
        if args.scene:
            print(f"\nLoading scene: {args.scene}")
            scene, builder = load_scene(args.scene)
            if args.output or args.width or args.height:
                parsed = builder.image_writer
                builder.set_image_writer(ImageWriter(
                    output_path.name if args.output else parsed.name,
                    args.width or parsed.width,
                    args.height or parsed.height,
                    output_path.parent if args.output else parsed.output_dir
                ))
        else:
            print("\nCreating scene: demo")
            scene = create_demo_scene()
            builder = (
                CameraBuilder()
                .set_location(Point3(0, 15, 60))
                .set_direction(Vec3(0, 0, -1), Vec3(0, 1, 0))
                .set_vp_distance(60)
                .set_vp_size(120, 120)
                .set_ray_tracer(SimpleRayTracer(scene))
                .set_image_writer(ImageWriter(
                    output_path.name, args.width or 400, args.height or 400, output_path.parent
                ))
            )

        if args.samples:
            builder.set_sampling_config(SamplingConfig(args.samples, args.sample_size, pattern))
        if args.aa_samples:
            builder.set_anti_aliasing(args.aa_samples, pattern)
        if args.threads is not None:
            builder.set_multithreading(args.threads)

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

        camera: Camera = builder.set_progress_callback(progress_callback).build()
    except (SceneParseError, MissingConfigurationError, ValueError) as e:
        print(f"\nConfiguration error: {e}", file=sys.stderr)
        return 2

    writer = camera.image_writer
    print(f"  Objects in scene: {len(scene.geometries)}")
    print(f"  Resolution: {writer.width}x{writer.height}")
    print(f"  Threads: {camera.num_threads}")

    # Render
    print("\nRendering...")
    start_time = time.time()

    camera.render_image()

    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")

    try:
        path = camera.write_to_image()
    except ImageWriteError as e:
        print(f"\nFailed to save image: {e}", file=sys.stderr)
        return 1

    print(f"\nSaved to: {path}")
    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
