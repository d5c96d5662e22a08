"""Error types raised by the rendering pipeline."""
from __future__ import annotations


class RenderError(Exception):
    """Base class for every failure surfaced by a render job."""


class InputError(RenderError, ValueError):
    """Render request is missing something required (media, images)."""


class MediaDecodeError(RenderError):
    """Image or video bytes could not be decoded."""


class EncoderError(RenderError):
    """The external encoder failed; the job produced no output."""

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


class EncoderUnavailableError(EncoderError):
    """No usable ffmpeg binary could be located or started."""


class FrameOrderError(EncoderError):
    """Frames were handed to the encoder out of order or with gaps."""


class RenderCancelled(RenderError):
    """The caller asked the job to stop before encoding."""
