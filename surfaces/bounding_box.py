import numpy as np
from numba import njit


@njit(cache=True)
def outside_bounds(point, lower, upper):
    """True if point falls outside [lower, upper] on any axis."""
    for axis in range(3):
        if point[axis] < lower[axis] or point[axis] > upper[axis]:
            return True
    return False


class BoundingBox:
    def __init__(self, min_bound, max_bound):
        self.min_bound = np.array(min_bound, dtype=np.int8)
        self.max_bound = np.array(max_bound, dtype=np.int8)

    @classmethod
    def from_points(cls, points):
        """Componentwise min/max over an (N, 3) array of points."""
        points = np.asarray(points)
        if points.shape[0] == 0:
            raise ValueError("cannot bound an empty point set")
        return cls(points.min(axis=0), points.max(axis=0))

    def padded(self, padding):
        """Float (lower, upper) corners grown by `padding` on every axis."""
        lower = self.min_bound.astype(np.float64) - padding
        upper = self.max_bound.astype(np.float64) + padding
        return lower, upper

    def contains(self, point, padding=0.0):
        lower, upper = self.padded(padding)
        return not outside_bounds(np.asarray(point, dtype=np.float64), lower, upper)

    def __repr__(self):
        return "BoundingBox({}, {})".format(self.min_bound.tolist(), self.max_bound.tolist())
