"""RadialBlurEngine: mask generation and compositing pipeline."""

import logging
import numpy as np
import torch
from typing import Optional, Dict, Tuple, Callable, Iterable, Any, Union

from .config import BlurConfig
from .points import BlurPoint, PointSet
from .mask import generate_mask
from .composite import composite
from .blur import gaussian_blur

logger = logging.getLogger(__name__)

BlurFn = Callable[[np.ndarray, float], np.ndarray]


def mask_to_image(mask: Union[torch.Tensor, np.ndarray]) -> np.ndarray:
    """Convert a [0, 1] mask to a [H, W] uint8 grey image."""
    if isinstance(mask, torch.Tensor):
        mask = mask.detach().cpu().numpy()
    mask = np.nan_to_num(mask.astype(np.float32), nan=0.0)
    return (mask.clip(0, 1) * 255).round().astype(np.uint8)


def _to_rgba(image: np.ndarray) -> np.ndarray:
    if np.issubdtype(image.dtype, np.floating):
        # Float images are in [0, 1]
        image = (np.nan_to_num(image).clip(0, 1) * 255).round()
    if image.ndim == 2:
        image = image[..., None]
    C = image.shape[2]
    if C == 1:
        rgb, alpha = np.repeat(image, 3, axis=2), None
    elif C == 2:
        rgb, alpha = np.repeat(image[..., :1], 3, axis=2), image[..., 1:]
    elif C == 3:
        rgb, alpha = image, None
    else:
        rgb, alpha = image[..., :3], image[..., 3:4]
    if alpha is None:
        alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate([rgb.astype(np.uint8), alpha.astype(np.uint8)], axis=2)


def render_gradient_preview(
    image: Optional[np.ndarray],
    mask: Union[torch.Tensor, np.ndarray],
    opacity: float = 0.7,
    only_gradient: bool = False,
) -> np.ndarray:
    """Draw the influence mask as a grey layer over the image.

    Args:
        image: [H, W, C] uint8 image, ignored when ``only_gradient``
        mask: [H, W] influence mask
        opacity: layer opacity in [0, 1]
        only_gradient: draw the layer over transparency instead of the image

    Returns:
        preview: [H, W, 4] uint8 RGBA
    """
    grey = mask_to_image(mask).astype(np.float32)[..., None]
    opacity = float(np.clip(opacity, 0.0, 1.0))
    H, W = grey.shape[:2]

    if only_gradient or image is None:
        rgb = np.repeat(grey, 3, axis=2)
        alpha = np.full((H, W, 1), round(opacity * 255), dtype=np.float32)
        return np.concatenate([rgb, alpha], axis=2).round().astype(np.uint8)

    base = _to_rgba(image).astype(np.float32)
    base[..., :3] = base[..., :3] * (1 - opacity) + grey * opacity
    return base.round().clip(0, 255).astype(np.uint8)


class RadialBlurEngine:
    """Spatially-varying blur driven by blur points.

    Every :meth:`render` call is a full recomputation from its inputs; the
    engine holds no state besides its configuration.
    """

    def __init__(self, cfg: Optional[BlurConfig] = None, blur_fn: Optional[BlurFn] = None):
        self.cfg = cfg or BlurConfig()
        self.blur_fn = blur_fn or gaussian_blur

    def mask(self, points: Iterable[BlurPoint], width: int, height: int) -> torch.Tensor:
        return generate_mask(
            tuple(points), width, height,
            global_max=self.cfg.global_max,
            invert=self.cfg.invert,
            device=self.cfg.device,
        )

    def render(
        self,
        image: np.ndarray,
        points: Union[PointSet, Iterable[BlurPoint]],
        blurred: Optional[np.ndarray] = None,
    ) -> Tuple[Optional[np.ndarray], Dict[str, Any]]:
        """Render the effect for one image.

        Args:
            image: [H, W] or [H, W, C] image
            points: PointSet or sequence of BlurPoint
            blurred: optional precomputed blur of ``image`` at ``global_max``

        Returns:
            output: rendered image (RGBA preview in gradient-map mode)
            meta: dict with mask, mode, status and error details
        """
        snapshot = points.points if isinstance(points, PointSet) else tuple(points)
        H, W = image.shape[:2]
        mask = self.mask(snapshot, W, H)

        meta = {"mask": mask, "num_points": len(snapshot), "status": "success"}

        if self.cfg.show_gradient_map:
            meta["mode"] = "gradient"
            preview = render_gradient_preview(
                image, mask, self.cfg.gradient_opacity, self.cfg.show_only_gradient
            )
            return preview, meta

        if not snapshot or self.cfg.global_max <= 0:
            meta["mode"] = "passthrough"
            return image.copy(), meta

        if blurred is None:
            blurred = self.blur_fn(image, self.cfg.global_max)

        # Inversion is already encoded in the mask
        output, result = composite(image, blurred, mask, invert=False, device=self.cfg.device)
        meta["mode"] = "composite"
        meta.update(result)
        if result["status"] != "success":
            logger.warning("compositing failed, returning original: %s", result["error"])
        else:
            logger.debug("rendered %dx%d with %d points", W, H, len(snapshot))
        return output, meta
