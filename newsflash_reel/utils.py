"""Raster helpers shared by the compositor and motion effects."""
from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from .config import BASE_SIZE

Size = Tuple[int, int]


def design_scale(size: Size) -> float:
    """Scale of *size* relative to the 1080x1350 base design."""
    return min(size[0] / BASE_SIZE[0], size[1] / BASE_SIZE[1])


def cover_scale(src_size: Size, target_size: Size) -> float:
    """Return the "object-cover" scale factor for *src_size* into *target_size*."""
    sw, sh = src_size
    tw, th = target_size
    return max(tw / sw, th / sh)


def cover_transform(
    src_size: Size,
    target_size: Size,
    zoom: float = 1.0,
    pan: Tuple[float, float] = (0.0, 0.0),
) -> Tuple[float, float, float]:
    """Return ``(scale, x, y)`` placing *src_size* centred over *target_size*.

    ``scale`` is the cover scale multiplied by ``zoom``; ``x``/``y`` are the
    top-left corner of the scaled image, shifted by ``pan``. With ``zoom >= 1``
    and no pan the scaled image covers the target with overflow split evenly.
    """
    sw, sh = src_size
    tw, th = target_size
    scale = cover_scale(src_size, target_size) * zoom
    x = tw / 2 - sw / 2 * scale + pan[0]
    y = th / 2 - sh / 2 * scale + pan[1]
    return scale, x, y


def render_cover(
    img: np.ndarray,
    target_size: Size,
    zoom: float = 1.0,
    pan: Tuple[float, float] = (0.0, 0.0),
    shift: Tuple[float, float] = (0.0, 0.0),
) -> np.ndarray:
    """Draw *img* with cover fit onto a new black canvas of *target_size*.

    ``shift`` translates the whole placement (used by slide transitions),
    ``pan`` is added to the cover position before the shift.
    """
    tw, th = target_size
    h, w = img.shape[:2]
    scale, x, y = cover_transform((w, h), target_size, zoom, pan)
    src = img
    if scale < 1.0:
        # warpAffine has no area filter; shrink first to avoid aliasing
        nw = max(1, int(round(w * scale)))
        nh = max(1, int(round(h * scale)))
        src = cv2.resize(img, (nw, nh), interpolation=cv2.INTER_AREA)
        sx, sy = w * scale / nw, h * scale / nh
    else:
        sx = sy = scale
    M = np.float32([[sx, 0, x + shift[0]], [0, sy, y + shift[1]]])
    return cv2.warpAffine(
        src,
        M,
        (tw, th),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(0, 0, 0),
    )


def paste_clipped(canvas: np.ndarray, tile: np.ndarray, x: int, y: int) -> None:
    """Copy *tile* onto *canvas* at ``(x, y)``; only the overlap is written."""
    H, W = canvas.shape[:2]
    h, w = tile.shape[:2]

    dst_x0 = max(0, x)
    dst_y0 = max(0, y)
    dst_x1 = min(W, x + w)
    dst_y1 = min(H, y + h)

    src_x0 = max(0, -x)
    src_y0 = max(0, -y)
    src_x1 = src_x0 + (dst_x1 - dst_x0)
    src_y1 = src_y0 + (dst_y1 - dst_y0)

    if (dst_x1 <= dst_x0) or (dst_y1 <= dst_y0):
        return
    canvas[dst_y0:dst_y1, dst_x0:dst_x1] = tile[src_y0:src_y1, src_x0:src_x1]


def alpha_blend(base: np.ndarray, top: np.ndarray, alpha: float) -> np.ndarray:
    """Blend *top* over *base* with a global ``alpha`` in ``[0, 1]``."""
    alpha = max(0.0, min(1.0, float(alpha)))
    if alpha <= 0.0:
        return base
    if alpha >= 1.0:
        return top.copy()
    out = base.astype(np.float32) * (1.0 - alpha) + top.astype(np.float32) * alpha
    return np.clip(out + 0.5, 0, 255).astype(np.uint8)


def composite_rgba(frame: np.ndarray, layer: np.ndarray) -> np.ndarray:
    """Composite straight-alpha RGBA *layer* over RGB *frame*."""
    a = layer[:, :, 3:4].astype(np.float32) / 255.0
    out = frame.astype(np.float32) * (1.0 - a) + layer[:, :, :3].astype(np.float32) * a
    return np.clip(out + 0.5, 0, 255).astype(np.uint8)


def solid_frame(size: Size, color: Tuple[int, int, int]) -> np.ndarray:
    W, H = size
    canvas = np.zeros((H, W, 3), dtype=np.uint8)
    canvas[:] = color
    return canvas
