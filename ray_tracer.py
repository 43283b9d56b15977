import argparse
import sys
import time

import numpy as np
from numba import njit
from PIL import Image

from camera import Camera
from palette import Palette, parse_hex_color, random_palette, shade, to_hex
from recipe import GenerationRecipe, Randomness
from render_settings import RenderSettings
from surfaces.point_cloud import COORD_MAX, COORD_MIN, Surface, first_matching_face


# Pixels with no hit keep this value in the intensity map
NO_HIT = -1


# =============================================================================
# Numba JIT-compiled ray march
# =============================================================================

@njit(cache=True)
def march_ray(vertices, x, y, lower, upper, incident, light, ambient, max_light):
    """
    March from z = COORD_MAX down to COORD_MIN at (x, y).

    Returns the intensity of the first face hit, or NO_HIT.
    """
    point = np.empty(3)
    point[0] = x
    point[1] = y
    for z in range(COORD_MAX, COORD_MIN - 1, -1):
        point[2] = z
        _, _, _, intensity = first_matching_face(vertices, point, lower, upper, True,
                                                 incident, light, ambient, max_light)
        if intensity >= 0:
            return intensity
    return NO_HIT


@njit(cache=True)
def _march_batch(vertices, xs, ys, lower, upper, incident, light, ambient, max_light):
    """March one ray per (xs[i], ys[i]) pair (JIT-compiled)."""
    N = xs.shape[0]
    result = np.empty(N, dtype=np.int16)
    for i in range(N):
        result[i] = march_ray(vertices, xs[i], ys[i], lower, upper,
                              incident, light, ambient, max_light)
    return result


def _march_rows(camera, surface, settings, y_start, y_end):
    xs, ys = camera.generate_coords_for_rows(y_start, y_end)
    values = _march_batch(
        surface.vertices, xs, ys, surface.lower, surface.upper,
        settings.incident_vector, settings.light_vector,
        settings.ambient, settings.max_light
    )
    return values.reshape((y_end - y_start, camera.width))


def render(surface, settings):
    """
    Render the intensity map row by row in this process.

    Returns an int16 (height, width) array, NO_HIT where the ray missed.
    """
    width, height = settings.width, settings.height
    camera = Camera(width, height)

    intensities = np.full((height, width), NO_HIT, dtype=np.int16)
    start_time = time.time()

    for y in range(height):
        row_start = time.time()
        intensities[y] = _march_rows(camera, surface, settings, y, y + 1)[0]

        # Progress indicator every 10 rows
        if (y + 1) % 10 == 0 or y == height - 1:
            elapsed = time.time() - start_time
            progress = (y + 1) / height
            eta = (elapsed / progress) * (1 - progress) if progress > 0 else 0
            row_time = time.time() - row_start
            print(f"Row {y+1}/{height} ({progress*100:.1f}%) - Row time: {row_time:.2f}s - ETA: {eta:.0f}s")
            sys.stdout.flush()

    total_time = time.time() - start_time
    print(f"Rendering complete in {total_time:.1f}s")

    return intensities


def _render_row_chunk(args):
    """
    Worker function to render a chunk of rows.
    Called by multiprocessing pool.

    Args:
        args: tuple of (y_start, y_end, points, settings)

    Returns:
        (y_start, y_end, values) - the rendered chunk
    """
    y_start, y_end, points, settings = args

    surface = Surface(points)
    camera = Camera(settings.width, settings.height)

    return (y_start, y_end, _march_rows(camera, surface, settings, y_start, y_end))


def render_parallel(surface, settings, num_workers=None):
    """
    Render the intensity map using multiprocessing (parallel row-based rendering).

    Each chunk fills a disjoint block of rows, so the result does not depend
    on the order in which workers finish.

    Args:
        num_workers: number of worker processes (default: CPU count)
    """
    import multiprocessing as mp

    if num_workers is None:
        num_workers = mp.cpu_count()

    width, height = settings.width, settings.height
    start_time = time.time()

    print(f"Parallel rendering {width}x{height} with {num_workers} workers...")

    # Divide rows into chunks
    rows_per_chunk = max(1, height // (num_workers * 4))  # 4 chunks per worker for load balancing
    chunks = []
    for y_start in range(0, height, rows_per_chunk):
        y_end = min(y_start + rows_per_chunk, height)
        chunks.append((y_start, y_end, surface.points, settings))

    print(f"Divided into {len(chunks)} chunks of ~{rows_per_chunk} rows each")

    # Process chunks in parallel, filling rows as each chunk arrives
    intensities = np.full((height, width), NO_HIT, dtype=np.int16)
    pool_start = time.time()
    with mp.Pool(num_workers) as pool:
        for done, (y_start, y_end, values) in enumerate(pool.imap_unordered(_render_row_chunk, chunks), 1):
            intensities[y_start:y_end] = values

            elapsed = time.time() - pool_start
            progress = done / len(chunks)
            eta = (elapsed / progress) * (1 - progress)
            print(f"Chunk {done}/{len(chunks)} ({progress*100:.1f}%) - Elapsed: {elapsed:.2f}s - ETA: {eta:.0f}s")
            sys.stdout.flush()

    print(f"All chunks completed in {time.time() - pool_start:.2f}s")

    total_time = time.time() - start_time
    print(f"Parallel rendering complete in {total_time:.1f}s")

    return intensities


def save_image(image_array, output_path):
    """Save the rendered image to a file."""
    image = Image.fromarray(image_array)
    image.save(output_path)
    print(f"Image saved to {output_path}")


def _hex_color(text):
    try:
        return parse_hex_color(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def main(argv=None):
    import multiprocessing as mp

    tiers = [tier.value for tier in Randomness]

    parser = argparse.ArgumentParser(description='Render a random faceted sphere')
    parser.add_argument('output_image', type=str, nargs='?', default='tmp.png',
                        help='Name of the output image file (default: tmp.png)')
    parser.add_argument('--width', type=int, default=None, help='Image width (default: 675)')
    parser.add_argument('--height', type=int, default=None, help='Image height (default: 675)')
    parser.add_argument('--size', type=int, default=675, help='Square image size')
    parser.add_argument('--vertices', type=int, default=None,
                        help='Number of surface vertices (default: random 5-10)')
    parser.add_argument('--scatter', choices=tiers, default=Randomness.MILD.value,
                        help='Per-vertex jitter level')
    parser.add_argument('--shape', choices=tiers, default=Randomness.STRONG.value,
                        help='Radius jitter level')
    parser.add_argument('--seed', type=int, default=None, help='Random seed')
    parser.add_argument('--grayscale', action='store_true',
                        help='Write a single-channel luminance image')
    parser.add_argument('--spot', type=_hex_color, default=None, help='Spot colour as #rrggbb')
    parser.add_argument('--ambient-color', type=_hex_color, default=None,
                        help='Ambient colour as #rrggbb')
    parser.add_argument('--ambient', type=int, default=0x2f, help='Ambient light level (0-255)')
    parser.add_argument('--background', type=int, default=0x0f, help='Background level (0-255)')
    parser.add_argument('--sequential', action='store_true',
                        help='Render in a single process')
    parser.add_argument('--workers', type=int, default=None,
                        help='Number of worker processes (default: CPU count)')
    args = parser.parse_args(argv)

    rng = np.random.default_rng(args.seed)

    try:
        settings = RenderSettings(
            width=args.width if args.width is not None else args.size,
            height=args.height if args.height is not None else args.size,
            background=args.background,
            ambient=args.ambient,
        )
        vertices = args.vertices if args.vertices is not None else int(rng.integers(5, 11))
        recipe = GenerationRecipe(
            vertices=vertices,
            scatter=Randomness(args.scatter),
            shape=Randomness(args.shape),
        )
    except ValueError as exc:
        parser.error(str(exc))

    # Surface draws precede palette draws
    surface = Surface.from_recipe(recipe, rng)

    palette = None
    if not args.grayscale:
        chosen = random_palette(rng)
        palette = Palette(spot=args.spot or chosen.spot, ambient=args.ambient_color or chosen.ambient)
        print(f'{{ spot: "{to_hex(palette.spot)}", ambient: "{to_hex(palette.ambient)}", vertices: {vertices} }}')
    else:
        print(f'{{ vertices: {vertices} }}')
    print()

    print(surface.points.tolist())
    print(f"Bounds: {surface.bounding_box}")

    print(f"Rendering {settings.width}x{settings.height} image...")

    if args.sequential:
        print("Using sequential renderer...")
        intensities = render(surface, settings)
    else:
        num_workers = args.workers if args.workers else mp.cpu_count()
        print(f"Using parallel renderer with {num_workers} workers...")
        intensities = render_parallel(surface, settings, num_workers)

    # Save the output image
    try:
        save_image(shade(intensities, settings, palette), args.output_image)
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Failed to save image to {args.output_image}: {exc}")


if __name__ == '__main__':
    main()
