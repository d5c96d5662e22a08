"""Percentage positions for draggable overlay elements."""
from __future__ import annotations

from typing import Optional, Tuple

from .compositor import METRICS
from .config import BASE_SIZE
from .models import LayoutSettings, Position
from .utils import Size, design_scale


def clamp_position(x: float, y: float) -> Position:
    return Position(x, y)


def drag_position(current: Position, delta_px: Tuple[float, float], bounds: Size) -> Position:
    """Move *current* by a pointer delta measured on a preview of *bounds* pixels.

    The result stays inside ``[0, 100]`` on both axes however far the pointer
    travels.
    """
    bw, bh = bounds
    if bw <= 0 or bh <= 0:
        return current
    return Position(current.x + delta_px[0] / bw * 100.0, current.y + delta_px[1] / bh * 100.0)


def pixel_position(position: Position, size: Size) -> Tuple[float, float]:
    return position.x / 100.0 * size[0], position.y / 100.0 * size[1]


def percent_position(xy: Tuple[float, float], size: Size) -> Position:
    return Position(xy[0] / size[0] * 100.0, xy[1] / size[1] * 100.0)


def default_layout(size: Size = BASE_SIZE) -> LayoutSettings:
    """Layout reproducing the fixed placement; the description keeps stacking."""
    W, H = size
    s = design_scale(size)
    pad = METRICS.padding * s
    return LayoutSettings(
        banner=percent_position((pad, pad), size),
        headline=percent_position((pad, H - METRICS.headline_offset_bottom * s), size),
        description=None,
    )


def move_element(
    layout: Optional[LayoutSettings], element: str, position: Position
) -> LayoutSettings:
    """Return *layout* with *element* placed at *position*."""
    base = layout or default_layout()
    data = base.to_dict()
    data[element] = {"x": position.x, "y": position.y}
    return LayoutSettings.from_dict(data)
