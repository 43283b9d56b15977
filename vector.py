import math

import numpy as np
from numba import njit


# Maximum distance a point may sit off a face's plane and still count as on it
COPLANAR_TOLERANCE = 1.0

# Slack for the barycentric inside test
FLOAT_EPSILON = np.finfo(np.float64).eps


# =============================================================================
# Vector algebra on float64 (3,) arrays. Addition, subtraction, scaling and
# negation are the numpy array operators; everything here is compiled so it
# can be called from the intersection kernels as well as from Python.
# =============================================================================

def vec3(x, y, z):
    """Build a Vector3 (float64 array of shape (3,))."""
    return np.array([x, y, z], dtype=np.float64)


@njit(cache=True)
def dot(a, b):
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


@njit(cache=True)
def cross(a, b):
    result = np.empty(3)
    result[0] = a[1] * b[2] - a[2] * b[1]
    result[1] = a[2] * b[0] - a[0] * b[2]
    result[2] = a[0] * b[1] - a[1] * b[0]
    return result


@njit(cache=True)
def magnitude(v):
    return math.sqrt(dot(v, v))


@njit(cache=True)
def divide(v, divisor):
    """Divide a vector by a scalar."""
    if divisor == 0.0:
        raise ZeroDivisionError("vector division by zero")
    return v / divisor


@njit(cache=True)
def normalize(v):
    """Scale a vector to unit length. The zero vector has no direction."""
    mag = magnitude(v)
    if mag == 0.0:
        raise ValueError("cannot normalize the zero vector")
    return v / mag


@njit(cache=True)
def project(v, onto):
    """Project v onto the direction of `onto`."""
    denom = dot(onto, onto)
    if denom == 0.0:
        raise ValueError("cannot project onto the zero vector")
    return dot(v, onto) / denom * onto


@njit(cache=True)
def plane_normal(a, b, c):
    """Unit normal of the plane through a, b and c."""
    return normalize(cross(b - a, c - a))


@njit(cache=True)
def reflect(v, normal):
    """Reflect v about the normal line: keep the normal part, flip the rest."""
    proj = project(v, normal)
    return proj - (v - proj)


@njit(cache=True)
def is_in_triangle(p, a, b, c):
    """
    Check whether p lies on triangle abc.

    p must be within COPLANAR_TOLERANCE of the plane through abc, and its
    projection onto that plane must fall inside the triangle
    (see http://blackpawn.com/texts/pointinpoly/). Collinear or duplicate
    points span no area and never contain anything.

    Runs in the innermost loop of every ray march, so it works on scalars
    and allocates nothing.
    """
    ux = b[0] - a[0]
    uy = b[1] - a[1]
    uz = b[2] - a[2]
    vx = c[0] - a[0]
    vy = c[1] - a[1]
    vz = c[2] - a[2]
    wx = p[0] - a[0]
    wy = p[1] - a[1]
    wz = p[2] - a[2]

    # Unnormalized plane normal u x v
    nx = uy * vz - uz * vy
    ny = uz * vx - ux * vz
    nz = ux * vy - uy * vx
    nn = nx * nx + ny * ny + nz * nz
    if nn == 0.0:
        return False

    # Component of w along the normal
    scale = (wx * nx + wy * ny + wz * nz) / nn
    ox = scale * nx
    oy = scale * ny
    oz = scale * nz
    if math.sqrt(ox * ox + oy * oy + oz * oz) > COPLANAR_TOLERANCE:
        return False

    # Flatten p onto the plane
    wx -= ox
    wy -= oy
    wz -= oz

    uu = ux * ux + uy * uy + uz * uz
    vv = vx * vx + vy * vy + vz * vz
    uv = ux * vx + uy * vy + uz * vz
    up = ux * wx + uy * wy + uz * wz
    vp = vx * wx + vy * wy + vz * wz

    denom = vv * uu - uv * uv
    if denom <= 0.0:
        return False

    v_coeff = (uu * vp - uv * up) / denom
    u_coeff = (vv * up - uv * vp) / denom

    return v_coeff >= -FLOAT_EPSILON and u_coeff >= -FLOAT_EPSILON and u_coeff + v_coeff <= 1.0
