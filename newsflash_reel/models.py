"""Render request records: style, layout, multi-image settings and config.

All records are immutable snapshots. Callers build a fresh :class:`RenderConfig`
per render and use :func:`dataclasses.replace` (or :meth:`RenderConfig.replace`)
to derive an updated copy.
"""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple, Union

CASINGS = ("uppercase", "lowercase", "sentence", "none")
VIDEO_MODES = ("single", "slideshow", "collage", "kenburns")
TRANSITION_TYPES = ("fade", "slide", "crossfade", "none")
COLLAGE_LAYOUTS = ("2x2", "2x3", "3x3")
LOGO_POSITIONS = ("top-left", "top-right", "bottom-left", "bottom-right")
MEDIA_TYPES = ("image", "video")
LAYOUT_ELEMENTS = ("banner", "headline", "description")

MIN_IMAGE_DURATION = 1.0
MAX_IMAGE_DURATION = 10.0

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

# bytes are raw media, str is a filesystem path
MediaRef = Union[bytes, str]


def hex_to_rgb(value: str) -> Tuple[int, int, int]:
    """Convert ``"#rrggbb"`` or ``"#rgb"`` hex color to an RGB tuple."""
    m = _HEX_RE.match(value.strip())
    if not m:
        raise ValueError(f"invalid hex color: {value}")
    digits = m.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def _clamp_pct(v: float) -> float:
    return max(0.0, min(100.0, float(v)))


def _choice(name: str, value: str, allowed: Tuple[str, ...]) -> None:
    if value not in allowed:
        raise ValueError(f"{name} must be one of {', '.join(allowed)}; got {value!r}")


@dataclass(frozen=True)
class StyleSettings:
    headline_font_size: int = 90
    description_font_size: int = 40
    headline_color: str = "#FFFFFF"
    description_color: str = "#E5E5E5"
    banner_color: str = "#D90000"
    headline_font: str = "Oswald"
    description_font: str = "Inter"
    headline_casing: str = "uppercase"
    description_casing: str = "none"

    def __post_init__(self) -> None:
        if self.headline_font_size <= 0 or self.description_font_size <= 0:
            raise ValueError("font sizes must be positive")
        for name in ("headline_color", "description_color", "banner_color"):
            hex_to_rgb(getattr(self, name))
        _choice("headline_casing", self.headline_casing, CASINGS)
        _choice("description_casing", self.description_casing, CASINGS)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StyleSettings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Position:
    """Percentage offset inside the canvas, clamped to ``[0, 100]``."""

    x: float
    y: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", _clamp_pct(self.x))
        object.__setattr__(self, "y", _clamp_pct(self.y))


@dataclass(frozen=True)
class LayoutSettings:
    banner: Optional[Position] = None
    headline: Optional[Position] = None
    description: Optional[Position] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LayoutSettings":
        kwargs = {}
        for name in LAYOUT_ELEMENTS:
            pos = data.get(name)
            if pos is None:
                continue
            if isinstance(pos, Position):
                kwargs[name] = pos
            elif isinstance(pos, Mapping):
                kwargs[name] = Position(pos["x"], pos["y"])
            else:
                kwargs[name] = Position(*pos)
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        out: Dict[str, Dict[str, float]] = {}
        for name in LAYOUT_ELEMENTS:
            pos = getattr(self, name)
            if pos is not None:
                out[name] = {"x": pos.x, "y": pos.y}
        return out


@dataclass(frozen=True)
class MultiImageSettings:
    video_mode: str = "single"
    image_duration: float = 3.0
    transition_type: str = "fade"
    collage_layout: str = "2x2"

    def __post_init__(self) -> None:
        _choice("video_mode", self.video_mode, VIDEO_MODES)
        _choice("transition_type", self.transition_type, TRANSITION_TYPES)
        _choice("collage_layout", self.collage_layout, COLLAGE_LAYOUTS)
        if not (MIN_IMAGE_DURATION <= self.image_duration <= MAX_IMAGE_DURATION):
            raise ValueError(
                f"image_duration must be within [{MIN_IMAGE_DURATION:g}, "
                f"{MAX_IMAGE_DURATION:g}] seconds; got {self.image_duration}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MultiImageSettings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RenderConfig:
    headline: str = ""
    description: str = ""
    banner_text: str = "BREAKING NEWS"
    banner_visible: bool = True
    background: Optional[MediaRef] = field(default=None, repr=False)
    media_type: str = "image"
    video_timestamp: float = 0.0
    logo: Optional[MediaRef] = field(default=None, repr=False)
    logo_position: str = "top-right"
    logo_size: int = 120
    logo_xy: Optional[Position] = None
    style: StyleSettings = field(default_factory=StyleSettings)
    layout: Optional[LayoutSettings] = None

    def __post_init__(self) -> None:
        _choice("media_type", self.media_type, MEDIA_TYPES)
        _choice("logo_position", self.logo_position, LOGO_POSITIONS)
        if self.logo_size <= 0:
            raise ValueError("logo_size must be positive")
        if self.video_timestamp < 0:
            raise ValueError("video_timestamp must be >= 0")

    def replace(self, **changes: Any) -> "RenderConfig":
        return replace(self, **changes)
