import math
from itertools import combinations

import numpy as np
from numba import njit

from lighting import face_intensity
from recipe import JITTER_SCALE, GenerationRecipe
from render_settings import RenderSettings
from surfaces.bounding_box import BoundingBox, outside_bounds
from vector import COPLANAR_TOLERANCE, is_in_triangle


# Point coordinates live in a symmetric signed 8-bit range
COORD_MIN = -127
COORD_MAX = 127

# Base sphere radius before shape jitter
RADIUS = 96.0

# Jitter values are drawn from (-JITTER_BOUND, JITTER_BOUND) before scaling
JITTER_BOUND = COORD_MAX // 4

GOLDEN_RATIO = (1.0 + math.sqrt(5.0)) / 2.0

# Grow the bounding box by the coplanar tolerance so rejection never hides a
# match; the extra margin covers rounding in the plane projection.
BOUNDS_PADDING = COPLANAR_TOLERANCE + 1e-6


def saturating_add(a, b):
    """Add two points, clamping each coordinate to [COORD_MIN, COORD_MAX]."""
    total = np.asarray(a, dtype=np.int32) + np.asarray(b, dtype=np.int32)
    return np.clip(total, COORD_MIN, COORD_MAX).astype(np.int8)


def to_point(coords):
    """Truncate float coordinates toward zero and clamp them into range."""
    return np.clip(np.trunc(coords), COORD_MIN, COORD_MAX).astype(np.int8)


def lattice_point(i, n, radius=RADIUS):
    """
    Point i of n evenly distributed on a sphere.

    Lattice 3 from http://extremelearning.com.au/evenly-distributing-points-on-a-sphere/
        (x, y) = ((i + 6) / (n + 11), i / golden_ratio)
        (theta, phi) = (acos(2x - 1) - pi / 2, 2 pi y)
    with the first and last points pinned to the poles.
    """
    if i == 0:
        x, y = 0.0, 0.0
    elif i == n - 1:
        x, y = 1.0, 0.0
    else:
        x = (i + 6.0) / (n + 11.0)
        y = i / GOLDEN_RATIO

    theta = math.acos(2.0 * x - 1.0) - math.pi / 2.0
    phi = 2.0 * math.pi * y

    coords = radius * np.array([
        math.cos(theta) * math.cos(phi),
        math.cos(theta) * math.sin(phi),
        math.sin(theta),
    ])
    return to_point(coords)


def jitter_value(rng, level):
    """Random integer offset scaled by the tier's multiplier."""
    value = int(rng.integers(-JITTER_BOUND + 1, JITTER_BOUND)) * JITTER_SCALE[level]
    return min(max(value, COORD_MIN), COORD_MAX)


def random_offset(rng, level):
    return np.array([jitter_value(rng, level) for _ in range(3)], dtype=np.int8)


def generate_points(recipe, rng=None):
    """Jittered lattice points for a recipe, as an (N, 3) int8 array."""
    if rng is None:
        rng = np.random.default_rng()

    n = recipe.vertices
    points = np.empty((n, 3), dtype=np.int8)
    for i in range(n):
        radius = RADIUS + jitter_value(rng, recipe.shape)
        points[i] = saturating_add(lattice_point(i, n, radius), random_offset(rng, recipe.scatter))
    return points


# =============================================================================
# Face intersection kernel
# =============================================================================

@njit(cache=True)
def first_matching_face(vertices, point, lower, upper, use_bounds,
                        incident, light, ambient, max_light):
    """
    Scan every face (i < j < k, ascending) for one containing point.

    Returns (i, j, k, intensity) for the first match, or (-1, -1, -1, -1).
    This is O(n^3) per query; the bounding box check skips the scan for
    points that cannot lie on any face.
    """
    if use_bounds and outside_bounds(point, lower, upper):
        return -1, -1, -1, -1

    n = vertices.shape[0]
    for i in range(n):
        for j in range(i + 1, n):
            for k in range(j + 1, n):
                if is_in_triangle(point, vertices[i], vertices[j], vertices[k]):
                    intensity = face_intensity(vertices[i], vertices[j], vertices[k],
                                               incident, light, ambient, max_light)
                    return i, j, k, intensity

    return -1, -1, -1, -1


class Surface:
    """Immutable point cloud whose every vertex triple is a candidate face."""

    def __init__(self, points):
        self.points = np.array(points, dtype=np.int8).reshape(-1, 3)
        self.points.flags.writeable = False

        self.vertices = self.points.astype(np.float64)
        self.vertices.flags.writeable = False

        self.bounding_box = BoundingBox.from_points(self.points)
        self.lower, self.upper = self.bounding_box.padded(BOUNDS_PADDING)

    @classmethod
    def from_recipe(cls, recipe=None, rng=None):
        if recipe is None:
            recipe = GenerationRecipe()
        return cls(generate_points(recipe, rng))

    def __len__(self):
        return self.points.shape[0]

    def __repr__(self):
        return "Surface({})".format(self.points.tolist())

    def faces(self):
        """Index triples (i, j, k), i < j < k, in scan order."""
        return combinations(range(len(self)), 3)

    def first_matching_face(self, point, settings=None, use_bounds=True):
        """
        Find the first face containing point.

        Returns ((i, j, k), intensity) or None.
        """
        if settings is None:
            settings = RenderSettings()

        point = np.asarray(point, dtype=np.float64)
        i, j, k, intensity = first_matching_face(
            self.vertices, point, self.lower, self.upper, use_bounds,
            settings.incident_vector, settings.light_vector,
            settings.ambient, settings.max_light
        )
        if intensity < 0:
            return None
        return (i, j, k), intensity

    def query(self, point, settings=None, use_bounds=True):
        """Lighting intensity of the first face containing point, or None."""
        match = self.first_matching_face(point, settings, use_bounds)
        if match is None:
            return None
        return match[1]
