import numpy as np

from surfaces.point_cloud import COORD_MAX, COORD_MIN


class Camera:
    def __init__(self, width, height):
        self.width = width
        self.height = height

    def get_coord(self, value, horizontal):
        """Rescale a pixel index into the scene coordinate range."""
        n = self.width if horizontal else self.height
        return value / n * (COORD_MAX - COORD_MIN) + COORD_MIN

    def pixel_to_scene(self, x, y):
        """Map pixel (x, y) to scene (x, y); image rows grow downward, scene y grows upward."""
        return self.get_coord(x, True), -self.get_coord(y, False)

    def generate_coords_for_rows(self, y_start, y_end):
        """Scene (x, y) for every pixel in a range of rows, row-major (for parallel rendering)."""
        x = np.arange(self.width, dtype=np.float64)
        y = np.arange(y_start, y_end, dtype=np.float64)

        xx, yy = np.meshgrid(x, y)
        xx = xx.ravel()
        yy = yy.ravel()

        xs = self.get_coord(xx, True)
        ys = -self.get_coord(yy, False)

        return xs, ys
