"""Breaking-news card renderer and video assembler."""

__all__ = ["render", "render_image", "render_overlay_video", "render_multi_image_video"]


def render(*args, **kwargs):
    from .builder import render as _render

    return _render(*args, **kwargs)


def render_image(*args, **kwargs):
    from .builder import render_image as _render_image

    return _render_image(*args, **kwargs)


def render_overlay_video(*args, **kwargs):
    from .builder import render_overlay_video as _render_overlay_video

    return _render_overlay_video(*args, **kwargs)


def render_multi_image_video(*args, **kwargs):
    from .builder import render_multi_image_video as _render_multi_image_video

    return _render_multi_image_video(*args, **kwargs)
