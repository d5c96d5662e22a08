"""Transitions between consecutive images of a multi-image video."""
from __future__ import annotations

from typing import Callable, Optional, Tuple

import numpy as np

from .utils import alpha_blend

TRANSITION_SECONDS = 0.5

# draws one image translated by ``(dx, dy)`` pixels
ShiftedRenderer = Callable[[Tuple[float, float]], np.ndarray]


def transition_frames(fps: float, frames_per_image: int, kind: str = "fade") -> int:
    """Number of trailing frames of each image window used for the transition.

    ``0`` means a hard cut: for ``none``, or when the frame rate is too low
    for half a second to cover a single frame.
    """
    if kind == "none":
        return 0
    n = int(fps * TRANSITION_SECONDS)
    return max(0, min(n, frames_per_image))


def transition_progress(
    frame_within: int, frames_per_image: int, n_transition: int
) -> Optional[float]:
    """Linear progress in ``[0, 1)`` inside the trailing window, else ``None``."""
    if n_transition <= 0:
        return None
    start = frames_per_image - n_transition
    if frame_within < start:
        return None
    return (frame_within - start) / n_transition


def move_left(p: float, width: int) -> Tuple[float, float]:
    return (-p * width, 0.0)


def move_right(p: float, width: int) -> Tuple[float, float]:
    return ((1 - p) * width, 0.0)


def blend_fade(cur: np.ndarray, nxt: np.ndarray, p: float) -> np.ndarray:
    """Crossfade: ``nxt`` drawn over ``cur`` with global alpha ``p``."""
    return alpha_blend(cur, nxt, p)


def blend_slide(
    render_cur: ShiftedRenderer, render_nxt: ShiftedRenderer, p: float, width: int
) -> np.ndarray:
    """Horizontal push: current image leaves left, next enters from the right.

    Both renderers draw onto black canvases, so the two halves never overlap
    and the pixels outside either image stay black.
    """
    cur = render_cur(move_left(p, width))
    nxt = render_nxt(move_right(p, width))
    out = cur.copy()
    # the next image covers everything right of its left edge
    edge = int(round((1 - p) * width))
    edge = max(0, min(width, edge))
    out[:, edge:] = nxt[:, edge:]
    return out


def apply_transition(
    kind: str,
    render_cur: ShiftedRenderer,
    render_nxt: ShiftedRenderer,
    p: float,
    width: int,
) -> np.ndarray:
    """Draw the frame at progress ``p`` of a ``kind`` transition."""
    if kind == "slide":
        return blend_slide(render_cur, render_nxt, p, width)
    if kind in ("fade", "crossfade"):
        return blend_fade(render_cur((0.0, 0.0)), render_nxt((0.0, 0.0)), p)
    return render_cur((0.0, 0.0))
