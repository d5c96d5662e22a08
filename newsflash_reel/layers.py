"""Overlay layer effects: legibility gradient and text drop shadow."""
from __future__ import annotations

from typing import Dict, Tuple

import cv2
import numpy as np

# simple in-memory cache for gradient layers
_GRADIENT_CACHE: Dict[Tuple[int, int, float], np.ndarray] = {}

# (position along the ramp, alpha)
GRADIENT_STOPS = ((0.0, 0.0), (0.6, 0.8), (1.0, 0.95))


def gradient_alpha(height: int, start: float = 0.4) -> np.ndarray:
    """Return per-row alpha in ``[0, 1]`` for the bottom darkening gradient.

    Rows above ``start * height`` are transparent; below it alpha follows
    :data:`GRADIENT_STOPS` linearly, reaching 0.95 at the last row.
    """
    y = np.arange(height, dtype=np.float64)
    y0 = start * height
    t = np.clip((y - y0) / max(1e-6, height - y0), 0.0, 1.0)
    pos = [p for p, _ in GRADIENT_STOPS]
    val = [a for _, a in GRADIENT_STOPS]
    return np.interp(t, pos, val)


def gradient_layer(size: Tuple[int, int], start: float = 0.4) -> np.ndarray:
    """Return an RGBA black layer carrying the gradient alpha.

    The result is cached based on canvas size.
    """
    W, H = size
    key = (W, H, float(start))
    if key not in _GRADIENT_CACHE:
        layer = np.zeros((H, W, 4), dtype=np.uint8)
        alpha = np.round(gradient_alpha(H, start) * 255.0).astype(np.uint8)
        layer[:, :, 3] = alpha[:, None]
        _GRADIENT_CACHE[key] = layer
    return _GRADIENT_CACHE[key].copy()


def shadow_alpha(
    mask: np.ndarray,
    blur: float = 10.0,
    offset_xy: Tuple[int, int] = (2, 2),
    strength: float = 0.5,
) -> np.ndarray:
    """Return the alpha map of a drop shadow cast by *mask*.

    ``blur`` follows the canvas ``shadowBlur`` convention (twice the Gaussian
    sigma). The shadow keeps the size of *mask*; pixels shifted past the edge
    are dropped.
    """
    h, w = mask.shape[:2]
    src = mask.astype(np.float32)
    sigma = blur / 2.0
    if sigma > 0:
        src = cv2.GaussianBlur(src, (0, 0), sigma)
    ox, oy = int(round(offset_xy[0])), int(round(offset_xy[1]))
    M = np.float32([[1, 0, ox], [0, 1, oy]])
    shifted = cv2.warpAffine(
        src, M, (w, h), flags=cv2.INTER_NEAREST, borderMode=cv2.BORDER_CONSTANT, borderValue=0
    )
    return np.clip(shifted * strength + 0.5, 0, 255).astype(np.uint8)


def over(dst: np.ndarray, src: np.ndarray) -> np.ndarray:
    """Porter-Duff *src* over *dst* for straight-alpha RGBA arrays."""
    sa = src[:, :, 3:4].astype(np.float32) / 255.0
    da = dst[:, :, 3:4].astype(np.float32) / 255.0
    out_a = sa + da * (1.0 - sa)
    rgb = src[:, :, :3].astype(np.float32) * sa + dst[:, :, :3].astype(np.float32) * da * (1.0 - sa)
    safe = np.where(out_a > 0, out_a, 1.0)
    out = np.empty_like(dst)
    out[:, :, :3] = np.clip(rgb / safe + 0.5, 0, 255).astype(np.uint8)
    out[:, :, 3] = np.clip(out_a[:, :, 0] * 255.0 + 0.5, 0, 255).astype(np.uint8)
    return out
