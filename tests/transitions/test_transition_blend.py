import numpy as np
import pytest

from newsflash_reel import transitions
from newsflash_reel.motion import render_slide


def solid(w, h, color):
    arr = np.zeros((h, w, 3), dtype=np.uint8)
    arr[:] = color
    return arr


def test_transition_frames():
    assert transitions.transition_frames(30, 90, "fade") == 15
    assert transitions.transition_frames(30, 90, "none") == 0
    assert transitions.transition_frames(1, 3, "slide") == 0
    assert transitions.transition_frames(30, 10, "fade") == 10


def test_transition_progress_window():
    assert transitions.transition_progress(74, 90, 15) is None
    assert transitions.transition_progress(75, 90, 15) == 0.0
    assert transitions.transition_progress(89, 90, 15) == pytest.approx(14 / 15)
    assert transitions.transition_progress(89, 90, 0) is None


def test_fade_is_linear_alpha():
    black = solid(4, 4, (0, 0, 0))
    white = solid(4, 4, (255, 255, 255))
    assert transitions.blend_fade(black, white, 0.0).max() == 0
    assert (transitions.blend_fade(black, white, 0.5) == 128).all()
    assert transitions.blend_fade(black, white, 1.0).min() == 255


def test_slide_pushes_next_in_from_right():
    size = (100, 60)
    red = solid(50, 30, (255, 0, 0))
    blue = solid(50, 30, (0, 0, 255))
    out = transitions.blend_slide(
        lambda shift: render_slide(red, size, shift),
        lambda shift: render_slide(blue, size, shift),
        0.5,
        size[0],
    )
    assert tuple(out[30, 10]) == (255, 0, 0)
    assert tuple(out[30, 90]) == (0, 0, 255)


def test_slide_start_shows_current_only():
    size = (100, 60)
    red = solid(50, 30, (255, 0, 0))
    blue = solid(50, 30, (0, 0, 255))
    out = transitions.apply_transition(
        "slide",
        lambda shift: render_slide(red, size, shift),
        lambda shift: render_slide(blue, size, shift),
        0.0,
        size[0],
    )
    assert tuple(out[30, 95]) == (255, 0, 0)


def test_crossfade_same_as_fade_and_none_is_cut():
    a = solid(4, 4, (0, 0, 0))
    b = solid(4, 4, (200, 200, 200))
    fade = transitions.apply_transition("fade", lambda s: a, lambda s: b, 0.25, 4)
    cross = transitions.apply_transition("crossfade", lambda s: a, lambda s: b, 0.25, 4)
    assert np.array_equal(fade, cross)
    assert transitions.apply_transition("none", lambda s: a, lambda s: b, 0.5, 4) is a
