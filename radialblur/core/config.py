"""Radial blur configuration."""

from dataclasses import dataclass, asdict, fields
from typing import Tuple, Dict, Any
import math


GLOBAL_MAX_RANGE = (1, 30)
SOFTNESS_RANGE = (10.0, 200.0)
OPACITY_RANGE = (0.1, 1.0)


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp ``value`` to ``[lo, hi]``; NaN maps to ``lo``."""
    if value != value:
        return lo
    return max(lo, min(hi, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass
class BlurConfig:
    """Global parameters of the radial blur effect.

    ``global_max`` is both the radius of the uniformly blurred reference and
    the denominator used to normalize point intensities. Preview fields only
    affect :func:`render_gradient_preview`, never the compositor.
    """
    global_max: int = 10
    invert: bool = False

    # Preview
    gradient_opacity: float = 0.7
    show_gradient_map: bool = False
    show_only_gradient: bool = False

    # Editing
    hit_radius: float = 20.0
    initial_points: int = 3
    initial_intensity: float = 8.0
    default_softness: float = 100.0

    # Randomization
    random_intensity_floor: float = 3.0
    random_softness: Tuple[float, float] = (50.0, 150.0)

    device: str = "cpu"

    def __post_init__(self):
        self.global_max = int(clamp(round_half_up(float(self.global_max)), *GLOBAL_MAX_RANGE))
        self.gradient_opacity = clamp(float(self.gradient_opacity), *OPACITY_RANGE)
        self.default_softness = clamp(float(self.default_softness), *SOFTNESS_RANGE)
        self.initial_points = max(0, int(self.initial_points))
        self.hit_radius = max(0.0, float(self.hit_radius))
        self.random_softness = tuple(self.random_softness)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BlurConfig":
        valid_keys = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in valid_keys})
