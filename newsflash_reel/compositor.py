"""Single-frame compositor.

A frame is drawn in a fixed order, later steps over earlier ones:

1. background with cover fit (flat dark fill when it cannot be decoded)
2. bottom darkening gradient
3. banner
4. headline with drop shadow
5. divider in the banner colour
6. description
7. optional logo

Steps 2-7 do not depend on the background, so :class:`OverlayRenderer`
builds them once as a straight-alpha RGBA layer that is re-applied to every
frame of a video.
"""
from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw

from .config import BASE_SIZE, FALLBACK_BG
from .layers import gradient_layer, over, shadow_alpha
from .media import load_background, load_logo
from .models import Position, RenderConfig, hex_to_rgb
from .text import apply_casing, draw_wrapped_text, load_font
from .utils import Size, composite_rgba, design_scale, render_cover, solid_frame

BANNER_FONT = "Oswald"


@dataclass(frozen=True)
class OverlayMetrics:
    """Pixel constants of the base design; scaled per canvas."""

    padding: float = 60
    banner_font_size: float = 40
    banner_padding: float = 20
    banner_height: float = 70
    headline_offset_bottom: float = 550
    headline_leading: float = 10
    shadow_blur: float = 10
    shadow_offset: float = 2
    shadow_strength: float = 0.5
    divider_gap: float = 30
    divider_width: float = 150
    divider_height: float = 6
    description_gap: float = 40
    description_leading: float = 15
    logo_margin: float = 20


METRICS = OverlayMetrics()


def _pct_to_px(pos: Position, size: Size) -> Tuple[float, float]:
    return pos.x / 100.0 * size[0], pos.y / 100.0 * size[1]


def _text_mask(size: Size) -> Tuple[Image.Image, ImageDraw.ImageDraw]:
    mask = Image.new("L", size, 0)
    return mask, ImageDraw.Draw(mask)


def _color_layer(mask: Image.Image, rgb: Tuple[int, int, int]) -> Image.Image:
    layer = Image.new("RGBA", mask.size, rgb + (255,))
    layer.putalpha(mask)
    return layer


def logo_box(logo_size: Tuple[int, int], box: float) -> Tuple[int, int]:
    """Fit a logo of *logo_size* into a ``box`` x ``box`` square, keeping aspect."""
    lw, lh = logo_size
    aspect = lw / lh
    draw_w = box
    draw_h = box / aspect
    if draw_h > box:
        draw_h = box
        draw_w = box * aspect
    return max(1, int(round(draw_w))), max(1, int(round(draw_h)))


class OverlayRenderer:
    """Render the text/banner/logo overlay for one :class:`RenderConfig`."""

    def __init__(self, config: RenderConfig, metrics: OverlayMetrics = METRICS) -> None:
        self.config = config
        self.metrics = metrics
        self._logo = load_logo(config.logo)
        self._cache: Dict[Size, np.ndarray] = {}

    def render(self, size: Size) -> np.ndarray:
        """Return the ``(H, W, 4)`` overlay layer for a canvas of *size*."""
        if size not in self._cache:
            self._cache[size] = self._draw(size)
        return self._cache[size]

    def _draw(self, size: Size) -> np.ndarray:
        cfg, m = self.config, self.metrics
        style = cfg.style
        W, H = size
        s = design_scale(size)
        pad = m.padding * s
        layout = cfg.layout

        layer = Image.fromarray(gradient_layer(size))
        draw = ImageDraw.Draw(layer)

        # banner
        if cfg.banner_visible and cfg.banner_text.strip():
            font = load_font(BANNER_FONT, m.banner_font_size * s, bold=True)
            bx, by = pad, pad
            if layout is not None and layout.banner is not None:
                bx, by = _pct_to_px(layout.banner, size)
            bpad = m.banner_padding * s
            bw = font.getlength(cfg.banner_text) + 2 * bpad
            bh = m.banner_height * s
            x0, y0 = int(round(bx)), int(round(by))
            x1 = max(x0 + 1, int(round(bx + bw)))
            y1 = max(y0 + 1, int(round(by + bh)))
            draw.rectangle([x0, y0, x1 - 1, y1 - 1], fill=hex_to_rgb(style.banner_color) + (255,))
            left, top, _, bottom = font.getbbox(cfg.banner_text)
            ty = by + (bh - (bottom - top)) / 2 - top
            mask, mdraw = _text_mask(size)
            mdraw.text((round(bx + bpad), round(ty)), cfg.banner_text, font=font, fill=255)
            layer.alpha_composite(_color_layer(mask, (255, 255, 255)))

        # headline
        hx, hy = pad, H - m.headline_offset_bottom * s
        if layout is not None and layout.headline is not None:
            hx, hy = _pct_to_px(layout.headline, size)
        max_width = max(1.0, min(W - 2 * pad, W - hx - pad))
        h_font = load_font(style.headline_font, style.headline_font_size * s, bold=True)
        h_line = (style.headline_font_size + m.headline_leading) * s
        headline = apply_casing(cfg.headline, style.headline_casing)
        mask, mdraw = _text_mask(size)
        headline_bottom = draw_wrapped_text(mdraw, headline, (hx, hy), max_width, h_line, h_font, 255)
        shadow = shadow_alpha(
            np.array(mask),
            blur=m.shadow_blur * s,
            offset_xy=(round(m.shadow_offset * s), round(m.shadow_offset * s)),
            strength=m.shadow_strength,
        )
        shadow_layer = np.zeros((H, W, 4), dtype=np.uint8)
        shadow_layer[:, :, 3] = shadow
        layer = Image.fromarray(over(np.array(layer), shadow_layer))
        layer.alpha_composite(_color_layer(mask, hex_to_rgb(style.headline_color)))
        draw = ImageDraw.Draw(layer)

        # divider
        div_y = headline_bottom + m.divider_gap * s
        dx0, dy0 = int(round(hx)), int(round(div_y))
        dx1 = max(dx0 + 1, int(round(hx + m.divider_width * s)))
        dy1 = max(dy0 + 1, int(round(div_y + m.divider_height * s)))
        draw.rectangle([dx0, dy0, dx1 - 1, dy1 - 1], fill=hex_to_rgb(style.banner_color) + (255,))

        # description
        dx, dy = hx, div_y + m.description_gap * s
        if layout is not None and layout.description is not None:
            lx, ly = _pct_to_px(layout.description, size)
            dx, dy = lx, max(ly, dy)
        d_width = max(1.0, min(W - 2 * pad, W - dx - pad))
        d_font = load_font(style.description_font, style.description_font_size * s)
        d_line = (style.description_font_size + m.description_leading) * s
        description = apply_casing(cfg.description, style.description_casing)
        mask, mdraw = _text_mask(size)
        draw_wrapped_text(mdraw, description, (dx, dy), d_width, d_line, d_font, 255)
        layer.alpha_composite(_color_layer(mask, hex_to_rgb(style.description_color)))

        # logo
        if self._logo is not None:
            self._draw_logo(layer, size, s)

        return np.array(layer)

    def _draw_logo(self, layer: Image.Image, size: Size, s: float) -> None:
        cfg, m = self.config, self.metrics
        W, H = size
        box = cfg.logo_size * s
        dw, dh = logo_box(self._logo.size, box)
        logo = self._logo.resize((dw, dh), Image.LANCZOS)
        margin = m.logo_margin * s
        if cfg.logo_xy is not None:
            lx, ly = _pct_to_px(cfg.logo_xy, size)
        else:
            lx = W - dw - margin if cfg.logo_position.endswith("right") else margin
            ly = H - dh - margin if cfg.logo_position.startswith("bottom") else margin
        lx = int(round(min(max(0.0, lx), max(0, W - dw))))
        ly = int(round(min(max(0.0, ly), max(0, H - dh))))
        layer.alpha_composite(logo, dest=(lx, ly))


def apply_overlay(frame: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    """Draw the overlay layer on top of an RGB frame."""
    return composite_rgba(frame, overlay)


def draw_background(background: Optional[np.ndarray], size: Size) -> np.ndarray:
    """Cover-fit *background*; ``None`` yields the flat fallback fill."""
    if background is None:
        return solid_frame(size, FALLBACK_BG)
    return render_cover(background, size)


def compose_frame(
    background: Optional[np.ndarray],
    config: RenderConfig,
    size: Size = BASE_SIZE,
    overlay: Optional[OverlayRenderer] = None,
) -> np.ndarray:
    """Composite one full frame and return it as an RGB array."""
    overlay = overlay or OverlayRenderer(config)
    return apply_overlay(draw_background(background, size), overlay.render(size))


def encode_png(frame: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(frame).save(buf, format="PNG")
    return buf.getvalue()


def render_still(config: RenderConfig, size: Size = BASE_SIZE) -> bytes:
    """Render *config* to PNG bytes.

    Never fails on a bad background: undecodable media falls back to a flat
    dark fill so every syntactically valid request yields an image.
    """
    background = load_background(config.background, config.media_type, config.video_timestamp)
    return encode_png(compose_frame(background, config, size))
