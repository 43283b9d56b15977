from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class RenderSettings:
    """Output size, light levels and the fixed incident/light directions."""
    width: int = 675
    height: int = 675
    background: int = 0x0f
    ambient: int = 0x2f
    max_light: int = 0xf5
    incident: tuple = (0.0, 0.0, -1.0)
    light: tuple = (-1.0, -1.0, 1.0)

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError("image size must be positive, got {}x{}".format(self.width, self.height))
        for name in ("background", "ambient", "max_light"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError("{} must be a byte value, got {}".format(name, value))
        if self.ambient > self.max_light:
            raise ValueError("ambient light cannot exceed max_light")
        for name in ("incident", "light"):
            direction = tuple(float(c) for c in getattr(self, name))
            if len(direction) != 3 or not any(direction):
                raise ValueError("{} must be a non-zero 3D direction".format(name))
            object.__setattr__(self, name, direction)

    @property
    def incident_vector(self):
        return np.array(self.incident, dtype=np.float64)

    @property
    def light_vector(self):
        return np.array(self.light, dtype=np.float64)
