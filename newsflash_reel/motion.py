"""Motion effects: Ken Burns pan/zoom, plain slideshow placement and collage grid."""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import List, Sequence, Tuple

import numpy as np

from .utils import Size, design_scale, paste_clipped, render_cover

COLLAGE_GRIDS = {
    "2x2": (2, 2),
    "2x3": (2, 3),
    "3x3": (3, 3),
}
COLLAGE_GAP = 4
COLLAGE_OVERSCALE = 1.1
COLLAGE_PAN = 10.0


@dataclass
class KenBurnsParams:
    zoom: float
    pan_x: float
    pan_y: float


def ken_burns_zoom_range(seed: int) -> Tuple[float, float]:
    """Return ``(start_zoom, end_zoom)`` for *seed*.

    Three start levels and two end levels give six distinguishable variants,
    so consecutive images never share the same move. ``end >= start`` for every
    seed.
    """
    start = 1.0 + (seed % 3) * 0.1
    end = 1.2 + (seed % 2) * 0.1
    return start, end


def ken_burns_params(seed: int, p: float) -> KenBurnsParams:
    """Return deterministic pan/zoom for progress ``p`` in ``[0, 1]``.

    Zoom moves linearly from the start to the end level. Pan is expressed in
    base-design pixels and grows from zero at ``p=0`` to its maximum at ``p=1``.
    """
    p = max(0.0, min(1.0, p))
    start, end = ken_burns_zoom_range(seed)
    zoom = start + (end - start) * p
    pan_x = ((seed % 5) - 2) * 50 * p
    pan_y = ((seed % 4) - 2) * 30 * p
    return KenBurnsParams(zoom=zoom, pan_x=pan_x, pan_y=pan_y)


def render_ken_burns(
    img: np.ndarray,
    size: Size,
    p: float,
    seed: int,
    shift: Tuple[float, float] = (0.0, 0.0),
) -> np.ndarray:
    """Draw *img* with the cover base scale times the current zoom, panned."""
    kb = ken_burns_params(seed, p)
    s = design_scale(size)
    return render_cover(img, size, zoom=kb.zoom, pan=(kb.pan_x * s, kb.pan_y * s), shift=shift)


def render_slide(
    img: np.ndarray, size: Size, shift: Tuple[float, float] = (0.0, 0.0)
) -> np.ndarray:
    """Plain cover placement used by slideshow mode."""
    return render_cover(img, size, shift=shift)


def collage_grid(layout: str) -> Tuple[int, int]:
    """Return ``(rows, cols)`` for a collage layout name (``2x3`` is 2 rows x 3 cols)."""
    try:
        return COLLAGE_GRIDS[layout]
    except KeyError:
        raise ValueError(f"unknown collage layout: {layout}") from None


def collage_cells(size: Size, layout: str, gap: int = COLLAGE_GAP) -> List[Tuple[int, int, int, int]]:
    """Return ``(x, y, w, h)`` per grid cell in row-major order, gap removed."""
    W, H = size
    rows, cols = collage_grid(layout)
    cell_w = W / cols
    cell_h = H / rows
    cells = []
    for i in range(rows * cols):
        col = i % cols
        row = i // cols
        x0 = int(round(col * cell_w + gap / 2))
        y0 = int(round(row * cell_h + gap / 2))
        x1 = int(round((col + 1) * cell_w - gap / 2))
        y1 = int(round((row + 1) * cell_h - gap / 2))
        cells.append((x0, y0, max(1, x1 - x0), max(1, y1 - y0)))
    return cells


def collage_pan(phase: float, index: int, amount: float = COLLAGE_PAN) -> Tuple[float, float]:
    """Gentle per-cell oscillation; each cell is offset by its index."""
    return math.sin(phase + index) * amount, math.cos(phase + index) * amount


def render_collage(
    images: Sequence[np.ndarray],
    size: Size,
    layout: str,
    phase: float = 0.0,
) -> np.ndarray:
    """Draw *images* into the grid cells over a black canvas.

    Images beyond the grid capacity are not drawn.
    """
    W, H = size
    canvas = np.zeros((H, W, 3), dtype=np.uint8)
    s = design_scale(size)
    for i, (img, (x, y, w, h)) in enumerate(zip(images, collage_cells(size, layout))):
        px, py = collage_pan(phase, i, COLLAGE_PAN * s)
        tile = render_cover(img, (w, h), zoom=COLLAGE_OVERSCALE, pan=(px, py))
        paste_clipped(canvas, tile, x, y)
    return canvas
