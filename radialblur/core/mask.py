"""Influence mask generation from blur points."""

import math
import torch
from typing import Sequence

from .points import BlurPoint

MAX_GRADIENT_RADIUS = 10000.0
STRENGTH_EPS = 1e-6


def farthest_corner_distance(x: float, y: float, width: float, height: float) -> float:
    """Largest distance from ``(x, y)`` to any image corner."""
    return max(
        math.hypot(x, y),
        math.hypot(width - x, y),
        math.hypot(x, height - y),
        math.hypot(width - x, height - y),
    )


def gradient_radius(x: float, y: float, softness: float, width: float, height: float) -> float:
    """Falloff radius of a point: farthest-corner distance scaled by softness."""
    radius = farthest_corner_distance(x, y, width, height)
    if not math.isfinite(radius) or radius <= 0:
        radius = float(max(width, height))

    scale = softness / 100.0 if math.isfinite(softness) else 1.0
    radius = min(radius * scale, MAX_GRADIENT_RADIUS)
    return radius if math.isfinite(radius) else 0.0


def effective_strength(intensity: float, global_max: float) -> float:
    """Point dose relative to the global ceiling, in ``[0, 1]``."""
    strength = intensity / max(global_max, STRENGTH_EPS)
    if not math.isfinite(strength):
        return 0.0 if strength != strength or strength < 0 else 1.0
    return max(0.0, min(strength, 1.0))


def radial_falloff(
    xg: torch.Tensor,
    yg: torch.Tensor,
    cx: float,
    cy: float,
    radius: float,
    strength: float,
) -> torch.Tensor:
    """Linear falloff from ``strength`` at the center to 0 at ``radius``."""
    dist = torch.sqrt((xg - cx) ** 2 + (yg - cy) ** 2)
    t = (1.0 - dist / radius).clamp(0, 1)
    return strength * t


def _pixel_grid(height: int, width: int, device: torch.device):
    yg, xg = torch.meshgrid(
        torch.arange(height, device=device, dtype=torch.float32),
        torch.arange(width, device=device, dtype=torch.float32),
        indexing="ij",
    )
    return xg, yg


def generate_mask(
    points: Sequence[BlurPoint],
    width: int,
    height: int,
    global_max: float,
    invert: bool = False,
    device: str = "cpu",
) -> torch.Tensor:
    """Build the influence mask for a set of blur points.

    Args:
        points: blur points, read once in list order
        width, height: image size in pixels
        global_max: intensity ceiling
        invert: points erode a fully blurred base instead of brightening a
            sharp one
        device: torch device

    Returns:
        mask: [H, W] float32 in [0, 1], 1 meaning full blur
    """
    device = torch.device(device)
    width, height = max(int(width), 0), max(int(height), 0)
    base = 1.0 if invert else 0.0
    mask = torch.full((height, width), base, device=device, dtype=torch.float32)

    points = tuple(points)
    if not points or mask.numel() == 0:
        return mask

    xg, yg = _pixel_grid(height, width, device)

    for point in points:
        x = point.x if math.isfinite(point.x) else 0.0
        y = point.y if math.isfinite(point.y) else 0.0

        radius = gradient_radius(x, y, point.softness, width, height)
        if radius <= 0:
            continue
        strength = effective_strength(point.intensity, global_max)

        contribution = radial_falloff(xg, yg, x, y, radius, strength)
        contribution = torch.nan_to_num(contribution, nan=0.0, posinf=1.0, neginf=0.0)

        if invert:
            mask = (mask - contribution).clamp(0, 1)
        else:
            mask = torch.maximum(mask, contribution).clamp(0, 1)

    return mask
