"""RadialBlur Core: blur point model, mask generation and compositing."""

from .config import BlurConfig
from .points import BlurPoint, PointSet
from .mask import (
    generate_mask,
    farthest_corner_distance,
    gradient_radius,
    effective_strength,
    radial_falloff,
)
from .composite import composite, blend, CompositeError
from .blur import gaussian_blur, make_placeholder
from .engine import RadialBlurEngine, render_gradient_preview, mask_to_image

__all__ = [
    "BlurConfig",
    "BlurPoint",
    "PointSet",
    "generate_mask",
    "farthest_corner_distance",
    "gradient_radius",
    "effective_strength",
    "radial_falloff",
    "composite",
    "blend",
    "CompositeError",
    "gaussian_blur",
    "make_placeholder",
    "RadialBlurEngine",
    "render_gradient_preview",
    "mask_to_image",
]
