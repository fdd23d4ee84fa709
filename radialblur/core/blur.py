"""Uniform blur primitive and image helpers."""

import cv2
import numpy as np


def gaussian_blur(image: np.ndarray, radius: float) -> np.ndarray:
    """Blur the whole image with a Gaussian of standard deviation ``radius``.

    Matches the CSS ``blur(Rpx)`` filter the effect was designed around.
    """
    if radius <= 0:
        return image.copy()
    squeeze = image.ndim == 3 and image.shape[2] == 1
    src = image[..., 0] if squeeze else image
    out = cv2.GaussianBlur(src, (0, 0), sigmaX=float(radius), sigmaY=float(radius),
                           borderType=cv2.BORDER_REPLICATE)
    return out[..., None] if squeeze else out


def make_placeholder(width: int = 800, height: int = 500) -> np.ndarray:
    """Sample image shown before anything is loaded: [H, W, 3] uint8 RGB."""
    t = (np.arange(width)[None, :] / max(width, 1) + np.arange(height)[:, None] / max(height, 1)) / 2.0
    start = np.array([0x3B, 0x82, 0xF6], dtype=np.float32)
    end = np.array([0x1D, 0x4E, 0xD8], dtype=np.float32)
    img = start + (end - start) * t[..., None].astype(np.float32)
    img = np.ascontiguousarray(img.round().astype(np.uint8))

    font = cv2.FONT_HERSHEY_SIMPLEX
    for text, scale, dy in (("Sample Image", 1.0, -20), ("Upload your own image to get started", 0.55, 20)):
        (tw, th), _ = cv2.getTextSize(text, font, scale, 1)
        org = ((width - tw) // 2, height // 2 + dy + th // 2)
        cv2.putText(img, text, org, font, scale, (255, 255, 255), 1, cv2.LINE_AA)
    return img
