from dataclasses import dataclass
from enum import Enum


class Randomness(Enum):
    """Severity tiers for vertex and radius jitter."""
    NONE = "none"
    MILD = "mild"
    STRONG = "strong"


# Multiplier applied to a random jitter value for each tier
JITTER_SCALE = {
    Randomness.NONE: 0,
    Randomness.MILD: 1,
    Randomness.STRONG: 2,
}


@dataclass(frozen=True)
class GenerationRecipe:
    """How to generate a surface: vertex count plus scatter and shape jitter."""
    vertices: int = 4
    scatter: Randomness = Randomness.NONE
    shape: Randomness = Randomness.NONE

    def __post_init__(self):
        if not 1 <= self.vertices <= 255:
            raise ValueError("vertex count must be between 1 and 255, got {}".format(self.vertices))
        for name in ("scatter", "shape"):
            if not isinstance(getattr(self, name), Randomness):
                raise ValueError("{} must be a Randomness tier".format(name))
