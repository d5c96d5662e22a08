"""Frame-by-frame assembly of a video render.

A frame renderer knows how to draw the background of frame ``i``; the
:class:`FrameSequencer` walks ``i`` from 0 to the end, puts the cached text
overlay on top and streams each frame straight into an :class:`EncodeJob`.
"""
from __future__ import annotations

import enum
import logging
import math
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from .compositor import OverlayRenderer, apply_overlay
from .encoder import EncodeJob
from .errors import InputError, RenderCancelled
from .media import MediaSource
from .models import MultiImageSettings
from .motion import render_collage, render_ken_burns, render_slide
from .transitions import apply_transition, transition_frames, transition_progress
from .utils import Size, render_cover


class JobState(enum.Enum):
    IDLE = "idle"
    COMPUTING_FRAME_COUNT = "computing-frame-count"
    RENDERING_FRAMES = "rendering-frames"
    ENCODING = "encoding"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


def frame_count(duration: float, fps: float) -> int:
    return int(round(duration * fps))


def frames_per_image(duration: float, fps: float) -> int:
    # at least one frame so positions never divide by zero
    return max(1, frame_count(duration, fps))


def total_frames(mode: str, n_images: int, duration: float, fps: float) -> int:
    """Collage loops the whole grid once; other modes show each image in turn."""
    if mode == "collage":
        return frame_count(duration, fps)
    return n_images * frame_count(duration, fps)


def frame_position(i: int, per_image: int, n_images: int) -> Tuple[int, int, float]:
    """Return ``(image_index, frame_within_image, progress_within_image)``."""
    idx = min(i // per_image, n_images - 1)
    within = i % per_image
    return idx, within, within / per_image


class MultiImageFrameRenderer:
    """Background frames for slideshow, Ken Burns and collage videos."""

    def __init__(
        self,
        images: Sequence[np.ndarray],
        settings: MultiImageSettings,
        size: Size,
        fps: float,
    ) -> None:
        if not images:
            raise InputError("at least one image is required")
        self.settings = settings
        self.mode = settings.video_mode
        self.images: List[np.ndarray] = list(images)
        if self.mode == "single":
            self.mode = "slideshow"
            self.images = self.images[:1]
        self.size = size
        self.fps = fps
        self.per_image = frames_per_image(settings.image_duration, fps)
        self.total_frames = total_frames(self.mode, len(self.images), settings.image_duration, fps)
        self.n_transition = transition_frames(fps, self.per_image, settings.transition_type)

    def _draw(self, index: int, p: float, shift: Tuple[float, float]) -> np.ndarray:
        img = self.images[index]
        if self.mode == "kenburns":
            return render_ken_burns(img, self.size, p, seed=index, shift=shift)
        return render_slide(img, self.size, shift=shift)

    def frame(self, i: int) -> np.ndarray:
        if self.mode == "collage":
            phase = i / max(1, self.total_frames) * 2 * math.pi
            return render_collage(self.images, self.size, self.settings.collage_layout, phase)

        idx, within, p = frame_position(i, self.per_image, len(self.images))
        if idx < len(self.images) - 1:
            t = transition_progress(within, self.per_image, self.n_transition)
            if t is not None:
                return apply_transition(
                    self.settings.transition_type,
                    lambda shift: self._draw(idx, p, shift),
                    lambda shift: self._draw(idx + 1, 0.0, shift),
                    t,
                    self.size[0],
                )
        return self._draw(idx, p, (0.0, 0.0))


class VideoOverlayFrameRenderer:
    """Background frames taken from a source video at the output frame rate."""

    def __init__(self, source: MediaSource, size: Size, fps: float) -> None:
        self.source = source
        self.size = size
        self.fps = fps
        self.total_frames = frame_count(source.duration or 0.0, fps)

    def frame(self, i: int) -> np.ndarray:
        return render_cover(self.source.frame_at(i / self.fps), self.size)


class ProgressReporter:
    """Integer percentage callback that never goes backwards.

    Values are capped at 99 until :meth:`finish`, so 100 is only ever seen
    after a successful render.
    """

    def __init__(self, callback: Optional[Callable[[int], None]] = None) -> None:
        self.callback = callback
        self.last = -1

    def report(self, percent: float) -> None:
        p = int(max(0.0, min(99.0, percent)))
        if p > self.last:
            self.last = p
            if self.callback:
                self.callback(p)

    def fraction(self, done: int, total: int, lo: float, hi: float) -> None:
        self.report(lo + (hi - lo) * done / max(1, total))

    def finish(self) -> None:
        if self.last < 100:
            self.last = 100
            if self.callback:
                self.callback(100)


class FrameSequencer:
    """Run one video render through its states.

    ``frames_share`` is the part of the progress range spent rendering
    frames; the rest is left for encoding.
    """

    def __init__(
        self,
        renderer,
        overlay: OverlayRenderer,
        fps: float,
        progress: Optional[ProgressReporter] = None,
        frames_share: float = 60.0,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.renderer = renderer
        self.overlay = overlay
        self.fps = fps
        self.progress = progress or ProgressReporter()
        self.frames_share = frames_share
        self.should_cancel = should_cancel
        self.state = JobState.IDLE

    def _set_state(self, state: JobState) -> None:
        logging.debug("render job: %s -> %s", self.state.value, state.value)
        self.state = state

    def _check_cancel(self) -> None:
        if self.should_cancel is not None and self.should_cancel():
            raise RenderCancelled("render cancelled")

    def run(self, job: EncodeJob, audio_source: Optional[str] = None) -> bytes:
        """Render every frame into *job*, encode and return the MP4 bytes."""
        try:
            self._set_state(JobState.COMPUTING_FRAME_COUNT)
            total = self.renderer.total_frames
            if total <= 0:
                raise InputError("nothing to render: zero frames")
            size = self.renderer.size
            layer = self.overlay.render(size)
            self.progress.report(0)

            self._set_state(JobState.RENDERING_FRAMES)
            for i in range(total):
                self._check_cancel()
                job.write_frame(i, apply_overlay(self.renderer.frame(i), layer))
                self.progress.fraction(i + 1, total, 0.0, self.frames_share)
            self._check_cancel()

            self._set_state(JobState.ENCODING)
            audio = job.extract_audio(audio_source) if audio_source else None
            job.encode(self.fps, audio)
            data = job.read_output()
        except RenderCancelled:
            self._set_state(JobState.CANCELLED)
            raise
        except Exception:
            self._set_state(JobState.FAILED)
            raise
        self._set_state(JobState.DONE)
        logging.info("rendered %d frames at %g fps", total, self.fps)
        return data
