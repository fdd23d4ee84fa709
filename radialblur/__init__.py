"""RadialBlur: selective depth-of-field blur driven by radial blur points.

Main components:
- core: point model, mask generator, compositor (BlurConfig, PointSet, RadialBlurEngine)
- codecs: scene description decoding
- generators: batch rendering over image directories
"""

from .core import (
    BlurConfig,
    BlurPoint,
    PointSet,
    RadialBlurEngine,
    generate_mask,
    composite,
    gaussian_blur,
    make_placeholder,
    render_gradient_preview,
)
from .codecs import SceneCodec
from .generators import BatchRenderer

__version__ = "0.1.0"
__all__ = [
    # Core
    "BlurConfig",
    "BlurPoint",
    "PointSet",
    "RadialBlurEngine",
    "generate_mask",
    "composite",
    "gaussian_blur",
    "make_placeholder",
    "render_gradient_preview",
    # Codecs
    "SceneCodec",
    # Generators
    "BatchRenderer",
]
