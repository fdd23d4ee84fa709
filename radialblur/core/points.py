"""Blur point model: ordered, validated point collection."""

from dataclasses import dataclass, replace
from typing import Optional, List, Tuple, Iterator
import logging
import math
import numpy as np

from .config import BlurConfig, SOFTNESS_RANGE, GLOBAL_MAX_RANGE, clamp, round_half_up

logger = logging.getLogger(__name__)


def _finite_or(value: float, fallback: float) -> float:
    value = float(value)
    return value if math.isfinite(value) else fallback


@dataclass(frozen=True)
class BlurPoint:
    """A single blur point.

    All fields are mandatory. Non-finite coordinates and intensity collapse to
    zero, softness is clamped to the 10-200 percent range.
    """
    x: float
    y: float
    intensity: float
    softness: float

    def __post_init__(self):
        object.__setattr__(self, "x", _finite_or(self.x, 0.0))
        object.__setattr__(self, "y", _finite_or(self.y, 0.0))
        object.__setattr__(self, "intensity", max(0.0, _finite_or(self.intensity, 0.0)))
        object.__setattr__(self, "softness", clamp(_finite_or(self.softness, 100.0), *SOFTNESS_RANGE))

    def distance_to(self, x: float, y: float) -> float:
        return math.hypot(self.x - x, self.y - y)


class PointSet:
    """Ordered collection of blur points bound to an image size.

    Mutations clamp positions to ``[0, width] x [0, height]`` and intensities
    to ``[0, global_max]``. Out-of-range indices are ignored. Readers should
    take :attr:`points` (an immutable snapshot) rather than iterate while
    another caller edits the set.
    """

    def __init__(
        self,
        width: int,
        height: int,
        cfg: Optional[BlurConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.cfg = cfg or BlurConfig()
        self.width = max(0, int(width))
        self.height = max(0, int(height))
        self.rng = rng if rng is not None else np.random.default_rng()
        self._points: List[BlurPoint] = []

    # Container protocol

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[BlurPoint]:
        return iter(self.points)

    def __getitem__(self, index: int) -> BlurPoint:
        return self._points[index]

    @property
    def points(self) -> Tuple[BlurPoint, ...]:
        return tuple(self._points)

    @property
    def global_max(self) -> int:
        return self.cfg.global_max

    def _valid(self, index: Optional[int]) -> bool:
        return index is not None and 0 <= index < len(self._points)

    def _clamp_xy(self, x: float, y: float) -> Tuple[float, float]:
        x = clamp(_finite_or(x, 0.0), 0.0, float(self.width))
        y = clamp(_finite_or(y, 0.0), 0.0, float(self.height))
        return x, y

    def _clamp_intensity(self, value: float) -> float:
        return clamp(_finite_or(value, 0.0), 0.0, float(self.global_max))

    def default_intensity(self) -> int:
        return round_half_up(self.global_max * 0.8)

    # Mutations

    def add(
        self,
        x: Optional[float] = None,
        y: Optional[float] = None,
        intensity: Optional[float] = None,
        softness: Optional[float] = None,
    ) -> int:
        """Append a point and return its index.

        Missing position defaults to the image center, missing intensity to
        80% of ``global_max``, missing softness to the configured default.
        """
        if x is None:
            x = self.width / 2
        if y is None:
            y = self.height / 2
        if intensity is None:
            intensity = self.default_intensity()
        if softness is None:
            softness = self.cfg.default_softness

        x, y = self._clamp_xy(x, y)
        self._points.append(BlurPoint(x, y, self._clamp_intensity(intensity), softness))
        return len(self._points) - 1

    def remove(self, index: Optional[int] = None) -> Optional[BlurPoint]:
        """Remove point ``index`` (last point if None). Returns the removed point."""
        if not self._points:
            return None
        if index is None:
            return self._points.pop()
        if not self._valid(index):
            logger.debug("remove: index %s out of range (%d points)", index, len(self._points))
            return None
        return self._points.pop(index)

    def move(self, index: int, x: float, y: float) -> None:
        if not self._valid(index):
            logger.debug("move: index %s out of range", index)
            return
        x, y = self._clamp_xy(x, y)
        self._points[index] = replace(self._points[index], x=x, y=y)

    def update_intensity(self, index: int, value: float) -> None:
        if not self._valid(index):
            logger.debug("update_intensity: index %s out of range", index)
            return
        self._points[index] = replace(self._points[index], intensity=self._clamp_intensity(value))

    def update_softness(self, index: int, value: float) -> None:
        if not self._valid(index):
            logger.debug("update_softness: index %s out of range", index)
            return
        self._points[index] = replace(self._points[index], softness=value)

    def set_global_max(self, value: float) -> None:
        """Change the shared intensity ceiling. Stored intensities are not rescaled."""
        self.cfg.global_max = int(clamp(round_half_up(float(value)), *GLOBAL_MAX_RANGE))

    def clear(self) -> None:
        self._points = []

    def randomize(self, n: Optional[int] = None, rng: Optional[np.random.Generator] = None) -> None:
        """Replace the set with ``n`` random points.

        ``n`` defaults to the current count, or ``cfg.initial_points`` when the
        set is empty.
        """
        if rng is None:
            rng = self.rng
        if n is None:
            n = len(self._points) if self._points else self.cfg.initial_points

        floor = self.cfg.random_intensity_floor
        soft_lo, soft_hi = self.cfg.random_softness
        points = []
        for _ in range(max(0, int(n))):
            intensity = max(floor, math.floor(rng.uniform(0.0, 1.0) * self.global_max))
            softness = soft_lo + math.floor(rng.uniform(0.0, 1.0) * (soft_hi - soft_lo))
            points.append(BlurPoint(
                x=float(rng.uniform(0.0, self.width)),
                y=float(rng.uniform(0.0, self.height)),
                intensity=self._clamp_intensity(intensity),
                softness=softness,
            ))
        self._points = points

    def reset(self, width: int, height: int) -> None:
        """Bind to a newly loaded image and seed it with the initial points."""
        self.width = max(0, int(width))
        self.height = max(0, int(height))
        intensity = self._clamp_intensity(self.cfg.initial_intensity)
        self._points = [
            BlurPoint(
                x=float(self.rng.uniform(0.0, self.width)),
                y=float(self.rng.uniform(0.0, self.height)),
                intensity=intensity,
                softness=self.cfg.default_softness,
            )
            for _ in range(self.cfg.initial_points)
        ]
        logger.debug("reset to %dx%d with %d points", self.width, self.height, len(self._points))

    # Queries

    def find_nearest(self, x: float, y: float, hit_radius: Optional[float] = None) -> Optional[int]:
        """Index of the first point (list order) strictly within ``hit_radius``.

        This is a first-match search, not a closest-point search: with
        overlapping points the earlier one wins.
        """
        if hit_radius is None:
            hit_radius = self.cfg.hit_radius
        for i, point in enumerate(self._points):
            if point.distance_to(x, y) < hit_radius:
                return i
        return None
