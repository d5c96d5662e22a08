"""Decode media to RGB rasters.

The compositor and motion effects only see :class:`MediaSource` objects:
:class:`StillImageSource` for pictures and :class:`VideoSource` for
frame-at-timestamp access to a video.
"""
from __future__ import annotations

import io
import logging
import os
import tempfile
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

try:
    from moviepy.editor import VideoFileClip
except ModuleNotFoundError:  # moviepy >=2.0
    from moviepy import VideoFileClip

from .errors import MediaDecodeError
from .models import MediaRef


def _read_bytes(ref: MediaRef) -> bytes:
    if isinstance(ref, (bytes, bytearray)):
        return bytes(ref)
    try:
        with open(ref, "rb") as fh:
            return fh.read()
    except OSError as e:
        raise MediaDecodeError(f"cannot read media {ref!r}: {e}") from e


def decode_image(ref: MediaRef, mode: str = "RGB") -> np.ndarray:
    """Decode image bytes (or a path) to an ``(H, W, C)`` uint8 array.

    EXIF orientation is applied. Raises :class:`MediaDecodeError` for
    anything Pillow cannot read.
    """
    data = _read_bytes(ref)
    try:
        with Image.open(io.BytesIO(data)) as im:
            im.load()
            im = ImageOps.exif_transpose(im)
            if mode == "RGB" and (im.mode in ("RGBA", "LA", "PA") or "transparency" in im.info):
                # flatten transparency onto black like a canvas draw would
                bg = Image.new("RGBA", im.size, (0, 0, 0, 255))
                im = Image.alpha_composite(bg, im.convert("RGBA"))
            arr = np.array(im.convert(mode))
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise MediaDecodeError(f"cannot decode image: {e}") from e
    if arr.size == 0:
        raise MediaDecodeError("image has no pixels")
    return arr


class MediaSource:
    """Decoded media exposing frames by timestamp."""

    size: Tuple[int, int]
    duration: Optional[float] = None
    path: Optional[str] = None

    def frame_at(self, t: float = 0.0) -> np.ndarray:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class StillImageSource(MediaSource):
    def __init__(self, ref: MediaRef) -> None:
        self._frame = decode_image(ref)
        self.size = (self._frame.shape[1], self._frame.shape[0])
        if isinstance(ref, str):
            self.path = ref

    def frame_at(self, t: float = 0.0) -> np.ndarray:
        return self._frame


class VideoSource(MediaSource):
    """Video decoded through moviepy.

    Raw bytes are spooled to a temporary file since the decoder reads from
    disk; the file is removed on :meth:`close`.
    """

    def __init__(self, ref: MediaRef) -> None:
        self._tmp: Optional[str] = None
        if isinstance(ref, (bytes, bytearray)):
            fd, self._tmp = tempfile.mkstemp(prefix="newsflash_src_", suffix=".mp4")
            with os.fdopen(fd, "wb") as fh:
                fh.write(ref)
            self.path = self._tmp
        else:
            self.path = ref
        try:
            self._clip = VideoFileClip(self.path, audio=False)
        except (OSError, KeyError, IndexError) as e:
            self._cleanup_tmp()
            raise MediaDecodeError(f"cannot decode video: {e}") from e
        self.size = tuple(int(v) for v in self._clip.size)
        self.duration = float(self._clip.duration or 0.0)
        self.fps = float(self._clip.fps or 0.0)
        if self.duration <= 0:
            self.close()
            raise MediaDecodeError("video has zero duration")

    def frame_at(self, t: float = 0.0) -> np.ndarray:
        # last decodable instant sits one source frame before the end
        last = max(0.0, self.duration - (1.0 / self.fps if self.fps else 0.0))
        t = min(max(0.0, t), last)
        frame = self._clip.get_frame(t)
        return np.ascontiguousarray(frame[:, :, :3], dtype=np.uint8)

    def _cleanup_tmp(self) -> None:
        if self._tmp and os.path.exists(self._tmp):
            os.remove(self._tmp)
        self._tmp = None

    def close(self) -> None:
        clip = getattr(self, "_clip", None)
        if clip is not None:
            clip.close()
            self._clip = None
        self._cleanup_tmp()


def open_media(ref: MediaRef, media_type: str = "image") -> MediaSource:
    """Open *ref* with the decoder matching *media_type*."""
    if media_type == "video":
        return VideoSource(ref)
    return StillImageSource(ref)


def load_background(
    ref: Optional[MediaRef], media_type: str = "image", timestamp: float = 0.0
) -> Optional[np.ndarray]:
    """Return the background raster or ``None`` when it cannot be decoded."""
    if ref is None:
        return None
    try:
        with open_media(ref, media_type) as src:
            return src.frame_at(timestamp).copy()
    except MediaDecodeError as e:
        logging.warning("background decode failed, using flat fill: %s", e)
        return None


def load_logo(ref: Optional[MediaRef]) -> Optional[Image.Image]:
    """Decode the optional logo as RGBA; failures are skipped."""
    if ref is None:
        return None
    try:
        return Image.fromarray(decode_image(ref, mode="RGBA"))
    except MediaDecodeError as e:
        logging.warning("logo skipped: %s", e)
        return None
