import pytest

from newsflash_reel.models import (
    LayoutSettings,
    MultiImageSettings,
    Position,
    RenderConfig,
    StyleSettings,
    hex_to_rgb,
)


def test_position_is_clamped():
    p = Position(-5, 150)
    assert (p.x, p.y) == (0.0, 100.0)


def test_layout_from_dict_clamps_and_round_trips():
    layout = LayoutSettings.from_dict({"banner": {"x": 120, "y": -3}, "headline": (10, 20)})
    assert layout.banner == Position(100, 0)
    assert layout.description is None
    assert layout.to_dict() == {"banner": {"x": 100.0, "y": 0.0}, "headline": {"x": 10.0, "y": 20.0}}


def test_multi_image_settings_validation():
    assert MultiImageSettings().video_mode == "single"
    with pytest.raises(ValueError):
        MultiImageSettings(image_duration=0.5)
    with pytest.raises(ValueError):
        MultiImageSettings(image_duration=11)
    with pytest.raises(ValueError):
        MultiImageSettings(collage_layout="4x4")
    with pytest.raises(ValueError):
        MultiImageSettings(transition_type="wipe")


def test_style_defaults_and_colors():
    style = StyleSettings()
    assert style.headline_font_size == 90
    assert style.banner_color == "#D90000"
    assert hex_to_rgb("#fff") == (255, 255, 255)
    assert hex_to_rgb("#D90000") == (217, 0, 0)
    with pytest.raises(ValueError):
        StyleSettings(headline_color="red")
    with pytest.raises(ValueError):
        StyleSettings(headline_casing="title")


def test_style_from_dict_ignores_unknown_keys():
    style = StyleSettings.from_dict({"banner_color": "#112233", "theme": "dark"})
    assert style.banner_color == "#112233"
    assert StyleSettings.from_dict(style.to_dict()) == style


def test_render_config_replace_returns_copy():
    cfg = RenderConfig(headline="a")
    other = cfg.replace(headline="b")
    assert cfg.headline == "a"
    assert other.headline == "b"
    assert other.banner_text == "BREAKING NEWS"
    with pytest.raises(ValueError):
        RenderConfig(logo_position="center")
