import argparse
import os
import sys
import time
import numpy as np
from PIL import Image as PIM

from ExampleSceneDef import ExampleSceneDef, SCENES
from ray import MAX_DEPTH, MAX_DEPTH_LIMIT, clamp_depth

DEFAULT_OUTPUT = "out/render.png"


def render(camera, scene, lights, output_path=DEFAULT_OUTPUT, output_shape=None, depth=MAX_DEPTH, verbose=True):
    """Render a scene to an image file and report how long it took."""
    scene_def = ExampleSceneDef(camera=camera, scene=scene, lights=lights, output_shape=output_shape)
    start_time = time.time()
    im = scene_def.render(output_path, depth=depth, verbose=verbose)
    if verbose:
        print(f"Saved {im.width}x{im.height} image to {output_path}")
        print(f"Time taken: {time.time() - start_time:.2f} seconds.")
    return im


def main(argv=None):
    parser = argparse.ArgumentParser(description="Whitted-style sphere ray tracer")
    parser.add_argument("--scene", choices=sorted(SCENES), default="four_spheres", help="Scene to render")
    parser.add_argument("--width", type=int, default=1024, help="Image width in pixels")
    parser.add_argument("--height", type=int, default=768, help="Image height in pixels")
    parser.add_argument("--fov", type=float, default=90.0, help="Vertical field of view in degrees")
    parser.add_argument("--depth", type=int, default=MAX_DEPTH,
                        help=f"Recursion depth (clamped to 0..{MAX_DEPTH_LIMIT})")
    parser.add_argument("--output", default=DEFAULT_OUTPUT, help="Output file (.png or .ppm)")
    parser.add_argument("--quiet", action="store_true", help="Don't print progress")

    args = parser.parse_args(argv)
    if args.width <= 0 or args.height <= 0:
        parser.error("image size must be positive")
    if not 0 < args.fov < 180:
        parser.error(f"field of view must be between 0 and 180 degrees, got {args.fov}")
    ext = os.path.splitext(args.output)[1].lower()
    if ext not in PIM.registered_extensions():
        parser.error(f"cannot write images with extension '{ext}' (try .png or .ppm)")

    depth = clamp_depth(args.depth)
    if depth != args.depth:
        print(f"Warning: depth {args.depth} clamped to {depth}")

    scene_def = SCENES[args.scene](args.width, args.height, np.radians(args.fov))
    try:
        render(scene_def.camera, scene_def.scene, scene_def.lights, output_path=args.output,
               output_shape=[args.height, args.width], depth=depth, verbose=not args.quiet)
    except (OSError, ValueError) as e:
        print(f"Error: could not write {args.output}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
