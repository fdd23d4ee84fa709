"""Blend compositor: per-pixel mix of sharp and blurred images."""

import traceback
import numpy as np
import torch
from typing import Optional, Dict, Any, Tuple, Union


class CompositeError(ValueError):
    """Inputs cannot be blended (missing or mismatched buffers)."""


def _channels(img: np.ndarray) -> int:
    return 1 if img.ndim == 2 else img.shape[2]


def _mask_to_tensor(mask: Union[torch.Tensor, np.ndarray], device: torch.device) -> torch.Tensor:
    if isinstance(mask, np.ndarray):
        is_int = np.issubdtype(mask.dtype, np.integer)
        mask = torch.from_numpy(np.ascontiguousarray(mask).astype(np.float32))
        if is_int:
            mask = mask / 255.0
    elif mask.dtype == torch.bool:
        mask = mask.float()
    elif not torch.is_floating_point(mask):
        mask = mask.float() / 255.0
    mask = mask.to(device=device, dtype=torch.float32)
    if mask.dim() == 3 and mask.shape[-1] == 1:
        mask = mask[..., 0]
    return mask


def _check_inputs(original, blurred, mask) -> None:
    if original is None:
        raise CompositeError("original image is missing")
    if blurred is None:
        raise CompositeError("blurred image is missing")
    if mask is None:
        raise CompositeError("mask is missing")
    if original.ndim not in (2, 3) or not 1 <= _channels(original) <= 4:
        raise CompositeError(f"unsupported image shape {tuple(original.shape)}")
    if tuple(blurred.shape) != tuple(original.shape):
        raise CompositeError(
            f"blurred shape {tuple(blurred.shape)} does not match original {tuple(original.shape)}"
        )
    mask_hw = tuple(mask.shape[:2])
    if mask_hw != tuple(original.shape[:2]) or (mask.ndim == 3 and mask.shape[2] != 1) or mask.ndim > 3:
        raise CompositeError(
            f"mask shape {tuple(mask.shape)} does not match image size {tuple(original.shape[:2])}"
        )


def blend(
    original: np.ndarray,
    blurred: np.ndarray,
    mask: Union[torch.Tensor, np.ndarray],
    invert: bool = False,
    device: str = "cpu",
) -> np.ndarray:
    """Linear blend of ``original`` towards ``blurred`` by ``mask``.

    Raises:
        CompositeError: on missing or mismatched inputs
    """
    _check_inputs(original, blurred, mask)
    device = torch.device(device)

    factor = _mask_to_tensor(mask, device)
    if invert:
        factor = 1.0 - factor
    factor = torch.nan_to_num(factor, nan=0.0).clamp(0, 1)

    single = original.ndim == 2
    orig = torch.from_numpy(np.ascontiguousarray(original)).to(device=device, dtype=torch.float32)
    blur = torch.from_numpy(np.ascontiguousarray(blurred)).to(device=device, dtype=torch.float32)
    if single:
        orig, blur = orig.unsqueeze(-1), blur.unsqueeze(-1)

    C = orig.shape[-1]
    color = C - 1 if C in (2, 4) else C
    w = factor.unsqueeze(-1)

    out = orig.clone()
    out[..., :color] = orig[..., :color] * (1 - w) + blur[..., :color] * w

    if np.issubdtype(original.dtype, np.integer):
        info = np.iinfo(original.dtype)
        out[..., :color] = torch.round(out[..., :color]).clamp(info.min, info.max)
    out_np = out.cpu().numpy()
    if single:
        out_np = out_np[..., 0]
    # Alpha comes straight from the original buffer, never through float math
    result = out_np.astype(original.dtype)
    if C in (2, 4):
        result[..., -1] = original[..., -1]
    return result


def composite(
    original: Optional[np.ndarray],
    blurred: Optional[np.ndarray],
    mask: Optional[Union[torch.Tensor, np.ndarray]],
    invert: bool = False,
    device: str = "cpu",
) -> Tuple[Optional[np.ndarray], Dict[str, Any]]:
    """Composite the final image, falling back to the original on failure.

    Args:
        original: [H, W] or [H, W, C] sharp image
        blurred: same shape as ``original``, uniformly blurred
        mask: [H, W] blend factors; float in [0, 1] or integer in [0, 255]
        invert: use ``1 - mask`` as the blend factor
        device: torch device

    Returns:
        output: blended image, or a copy of ``original`` when blending failed
        meta: dict with ``status`` ("success" | "error") and error details
    """
    try:
        output = blend(original, blurred, mask, invert=invert, device=device)
        return output, {"status": "success"}
    except Exception as e:
        fallback = original.copy() if isinstance(original, np.ndarray) else None
        return fallback, {
            "status": "error",
            "error": str(e),
            "traceback": traceback.format_exc(),
        }
