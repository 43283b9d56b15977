import colorsys
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Palette:
    """Spot colour for lit faces and ambient colour tinting every hit."""
    spot: tuple
    ambient: tuple

    def __post_init__(self):
        for name in ("spot", "ambient"):
            color = tuple(int(c) for c in getattr(self, name))
            if len(color) != 3 or not all(0 <= c <= 255 for c in color):
                raise ValueError("{} must be an RGB triple of bytes".format(name))
            object.__setattr__(self, name, color)


def to_hex(color):
    return "#{:02x}{:02x}{:02x}".format(*color)


def parse_hex_color(text):
    """Parse '#rrggbb' (or 'rrggbb') into an RGB tuple."""
    value = text.strip().lstrip("#")
    if len(value) != 6:
        raise ValueError("expected a colour like #rrggbb, got {!r}".format(text))
    try:
        return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        raise ValueError("expected a colour like #rrggbb, got {!r}".format(text)) from None


def random_color(rng):
    """A random hue with moderate-to-full saturation and brightness."""
    hue = rng.random()
    saturation = 0.55 + 0.45 * rng.random()
    brightness = 0.5 + 0.5 * rng.random()
    r, g, b = colorsys.hsv_to_rgb(hue, saturation, brightness)
    return int(round(r * 255)), int(round(g * 255)), int(round(b * 255))


def random_palette(rng=None):
    if rng is None:
        rng = np.random.default_rng()
    return Palette(spot=random_color(rng), ambient=random_color(rng))


def shade(intensities, settings, palette=None):
    """
    Turn an intensity map (-1 = no hit) into a uint8 image.

    Without a palette the image is single-channel: hits keep their intensity
    and misses take the background level. With a palette, a hit becomes
    spot * intensity / 255 plus ambient_color * ambient / 255 (saturating),
    and a miss is a gray background.
    """
    intensities = np.asarray(intensities)
    hit = intensities >= 0

    if palette is None:
        image = np.full(intensities.shape, settings.background, dtype=np.uint8)
        image[hit] = intensities[hit].astype(np.uint8)
        return image

    spot = np.array(palette.spot, dtype=np.int32)
    ambient = np.array(palette.ambient, dtype=np.int32)

    values = intensities[hit].astype(np.int32)[:, np.newaxis]
    lit = spot * values // 255 + ambient * settings.ambient // 255

    image = np.full(intensities.shape + (3,), settings.background, dtype=np.uint8)
    image[hit] = np.minimum(lit, 255).astype(np.uint8)
    return image
