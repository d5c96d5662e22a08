"""High level render entry points: still card, overlay video and multi-image video."""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

import numpy as np

from .compositor import OverlayRenderer, render_still
from .config import BASE_SIZE, DEFAULT_FPS
from .encoder import EncodeJob, EncoderHandle, RenderResult
from .errors import InputError
from .media import VideoSource, decode_image
from .models import MediaRef, MultiImageSettings, RenderConfig
from .sequencer import (
    FrameSequencer,
    MultiImageFrameRenderer,
    ProgressReporter,
    VideoOverlayFrameRenderer,
)
from .utils import Size

ProgressCallback = Callable[[int], None]


def render_image(config: RenderConfig, size: Size = BASE_SIZE) -> RenderResult:
    """Render the card once as PNG.

    A video background contributes the frame at ``config.video_timestamp``.
    """
    if config.background is None:
        raise InputError("a background image or video is required")
    return RenderResult(render_still(config, size), "image/png")


def render_overlay_video(
    config: RenderConfig,
    fps: float = DEFAULT_FPS,
    size: Size = BASE_SIZE,
    on_progress: Optional[ProgressCallback] = None,
    encoder: Optional[EncoderHandle] = None,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> RenderResult:
    """Put the overlay on every frame of the background video, keeping its audio."""
    if config.background is None:
        raise InputError("a background video is required")
    if config.media_type != "video":
        raise InputError("overlay video needs media_type='video'")
    progress = ProgressReporter(on_progress)
    with VideoSource(config.background) as src:
        logging.info("overlay video: %.2fs source at %g fps -> %dx%d", src.duration, fps, *size)
        renderer = VideoOverlayFrameRenderer(src, size, fps)
        sequencer = FrameSequencer(
            renderer,
            OverlayRenderer(config),
            fps,
            progress=progress,
            frames_share=50.0,
            should_cancel=should_cancel,
        )
        with EncodeJob(encoder) as job:
            data = sequencer.run(job, audio_source=src.path)
    progress.finish()
    return RenderResult(data, "video/mp4")


def _decode_images(images: Sequence[MediaRef]) -> List[np.ndarray]:
    return [decode_image(ref) for ref in images]


def render_multi_image_video(
    images: Sequence[MediaRef],
    config: RenderConfig,
    settings: Optional[MultiImageSettings] = None,
    fps: float = DEFAULT_FPS,
    size: Size = BASE_SIZE,
    on_progress: Optional[ProgressCallback] = None,
    encoder: Optional[EncoderHandle] = None,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> RenderResult:
    """Assemble a slideshow, collage or Ken Burns video from still images.

    ``single`` mode shows only the first image, as a one-image slideshow.
    """
    if not images:
        raise InputError("at least one image is required")
    settings = settings or MultiImageSettings()
    decoded = _decode_images(images)
    progress = ProgressReporter(on_progress)
    renderer = MultiImageFrameRenderer(decoded, settings, size, fps)
    logging.info(
        "%s video: %d image(s), %d frames at %g fps",
        renderer.mode,
        len(renderer.images),
        renderer.total_frames,
        fps,
    )
    sequencer = FrameSequencer(
        renderer,
        OverlayRenderer(config),
        fps,
        progress=progress,
        frames_share=60.0,
        should_cancel=should_cancel,
    )
    with EncodeJob(encoder) as job:
        data = sequencer.run(job)
    progress.finish()
    return RenderResult(data, "video/mp4")


def render(
    config: RenderConfig,
    images: Optional[Sequence[MediaRef]] = None,
    settings: Optional[MultiImageSettings] = None,
    output_mode: str = "image",
    size: Size = BASE_SIZE,
    fps: float = DEFAULT_FPS,
    on_progress: Optional[ProgressCallback] = None,
    encoder: Optional[EncoderHandle] = None,
) -> RenderResult:
    """Pick the render path from the output mode and what media was given."""
    if output_mode == "image":
        return render_image(config, size)
    if output_mode != "video":
        raise InputError(f"unknown output mode: {output_mode}")
    settings = settings or MultiImageSettings()
    if images and settings.video_mode != "single":
        return render_multi_image_video(images, config, settings, fps, size, on_progress, encoder)
    if config.background is not None and config.media_type == "video":
        return render_overlay_video(config, fps, size, on_progress, encoder)
    if images:
        return render_multi_image_video(images, config, settings, fps, size, on_progress, encoder)
    raise InputError("video output needs a background video or at least one image")
