import io
import logging

import numpy as np
from PIL import Image

from newsflash_reel import compositor
from newsflash_reel.config import FALLBACK_BG
from newsflash_reel.models import LayoutSettings, Position, RenderConfig


def png_bytes(size, color, mode="RGB"):
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format="PNG")
    return buf.getvalue()


def test_missing_background_uses_fallback_fill():
    frame = compositor.draw_background(None, (20, 10))
    assert frame.shape == (10, 20, 3)
    assert (frame == np.array(FALLBACK_BG, dtype=np.uint8)).all()


def test_undecodable_background_still_renders(caplog):
    caplog.set_level(logging.WARNING)
    cfg = RenderConfig(headline="Hi", background=b"not an image")
    data = compositor.render_still(cfg, (108, 135))
    with Image.open(io.BytesIO(data)) as im:
        assert im.size == (108, 135)
    assert "background decode failed" in caplog.text


def test_gradient_darkens_bottom_only():
    white = np.full((135, 108, 3), 255, dtype=np.uint8)
    cfg = RenderConfig(banner_visible=False)
    frame = compositor.compose_frame(white, cfg, (108, 135))
    assert tuple(frame[0, 54]) == (255, 255, 255)
    assert frame[-1].max() < 30


def test_banner_drawn_in_banner_color():
    cfg = RenderConfig(headline="Hi")
    frame = compositor.compose_frame(None, cfg, (216, 270))
    # padding 60 and banner height 70 at scale 0.2
    assert tuple(frame[13, 13]) == (217, 0, 0)


def test_hidden_banner_leaves_corner_untouched():
    cfg = RenderConfig(headline="Hi", banner_visible=False)
    frame = compositor.compose_frame(None, cfg, (216, 270))
    assert tuple(frame[13, 13]) == FALLBACK_BG


def test_logo_box_keeps_aspect():
    assert compositor.logo_box((200, 100), 120) == (120, 60)
    assert compositor.logo_box((100, 200), 120) == (60, 120)


def test_logo_drawn_in_corner():
    cfg = RenderConfig(
        headline="Hi",
        banner_visible=False,
        logo=png_bytes((50, 25), (0, 255, 0)),
        logo_position="top-left",
    )
    frame = compositor.compose_frame(None, cfg, (540, 675))
    r, g, b = frame[15, 15]
    assert g > 240 and r < 15 and b < 15
    assert tuple(frame[15, 530]) == FALLBACK_BG


def test_broken_logo_is_skipped(caplog):
    caplog.set_level(logging.WARNING)
    cfg = RenderConfig(headline="Hi", logo=b"junk")
    frame = compositor.compose_frame(None, cfg, (108, 135))
    assert frame.shape == (135, 108, 3)
    assert "logo skipped" in caplog.text


def test_headline_follows_layout():
    size = (540, 675)
    base = RenderConfig(headline="HELLO WORLD", banner_visible=False)
    moved = base.replace(layout=LayoutSettings(headline=Position(50, 10)))
    a_default = compositor.OverlayRenderer(base).render(size)[:, :, 3]
    a_moved = compositor.OverlayRenderer(moved).render(size)[:, :, 3]
    assert a_default[68:120, 270:].max() == 0
    assert a_moved[68:120, 270:].max() > 0


def test_overlay_cached_per_size():
    overlay = compositor.OverlayRenderer(RenderConfig(headline="Hi"))
    first = overlay.render((108, 135))
    assert overlay.render((108, 135)) is first
    assert overlay.render((135, 108)).shape == (108, 135, 4)


def test_encode_png_signature():
    data = compositor.encode_png(np.zeros((4, 4, 3), dtype=np.uint8))
    assert data[:8] == b"\x89PNG\r\n\x1a\n"


def test_render_still_is_deterministic():
    cfg = RenderConfig(
        headline="Same input",
        description="same bytes every time",
        background=png_bytes((80, 60), (10, 120, 200)),
        logo=png_bytes((20, 10), (0, 255, 0, 255), mode="RGBA"),
    )
    first = compositor.render_still(cfg, (216, 270))
    second = compositor.render_still(cfg, (216, 270))
    assert first == second
