import math

from numba import njit

from vector import dot, normalize, plane_normal, reflect


@njit(cache=True)
def saturating_byte_add(a, b):
    """Add two byte values, clamping at 255."""
    return min(a + b, 255)


@njit(cache=True)
def direct_light(a, b, c, incident, light, ambient, max_light):
    """
    Direct light reaching the viewer from face abc.

    The incident ray is reflected off the face normal and compared with the
    light direction; full alignment gives (max_light - ambient).
    """
    normal = plane_normal(a, b, c)
    reflected = normalize(reflect(incident, normal))
    alignment = dot(reflected, normalize(light))
    value = math.floor(alignment * (max_light - ambient))
    return int(min(max(value, 0.0), 255.0))


@njit(cache=True)
def face_intensity(a, b, c, incident, light, ambient, max_light):
    """Final intensity of a hit: direct light plus ambient, saturating."""
    return saturating_byte_add(direct_light(a, b, c, incident, light, ambient, max_light), ambient)
