"""Drive the ffmpeg executable to turn rendered frames into an MP4.

One :class:`EncoderHandle` per process locates and probes the binary once;
every render opens an :class:`EncodeJob` on it which owns a private work
directory, receives frames in order, optionally pulls the audio track out of
the source video, encodes, reads the result back and removes everything it
wrote.
"""
from __future__ import annotations

import base64
import enum
import logging
import os
import shutil
import subprocess
import tempfile
import threading
import uuid
from dataclasses import dataclass
from typing import Callable, List, Optional

import cv2
import numpy as np

from .bin_config import resolve_ffmpeg
from .config import WORK_DIR
from .errors import EncoderError, EncoderUnavailableError, FrameOrderError


class EncoderState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class EncoderHandle:
    """Lazily resolved ffmpeg binary shared by render jobs.

    The first :meth:`load` resolves and probes the binary; concurrent callers
    block on the same in-flight load instead of starting another one. A
    failed load stays failed until :meth:`reset`.
    """

    def __init__(
        self,
        binary: Optional[str] = None,
        resolver: Callable[[Optional[str]], Optional[str]] = resolve_ffmpeg,
    ) -> None:
        self._hint = binary
        self._resolver = resolver
        self._cond = threading.Condition()
        self.state = EncoderState.UNINITIALIZED
        self.binary: Optional[str] = None
        self.error: Optional[str] = None
        # one running job per handle; frame files of two jobs must not interleave
        self.job_lock = threading.Lock()

    def load(self) -> str:
        with self._cond:
            while self.state is EncoderState.LOADING:
                self._cond.wait()
            if self.state is EncoderState.READY:
                return self.binary
            if self.state is EncoderState.FAILED:
                raise EncoderUnavailableError(self.error or "encoder failed to load")
            self.state = EncoderState.LOADING
        try:
            path = self._resolver(self._hint)
            if path is None:
                raise EncoderUnavailableError(
                    "ffmpeg not found; install it, set FFMPEG_BINARY or pass --ffmpeg"
                )
            self._probe(path)
        except Exception as e:
            with self._cond:
                self.state = EncoderState.FAILED
                self.error = str(e)
                self._cond.notify_all()
            if isinstance(e, EncoderUnavailableError):
                raise
            raise EncoderUnavailableError(f"ffmpeg setup failed: {e}") from e
        with self._cond:
            self.binary = path
            self.state = EncoderState.READY
            self._cond.notify_all()
        logging.info("ffmpeg ready: %s", path)
        return path

    @staticmethod
    def _probe(path: str) -> None:
        try:
            proc = subprocess.run([path, "-version"], capture_output=True, text=True, errors="replace")
        except OSError as e:
            raise EncoderUnavailableError(f"cannot start ffmpeg at {path}: {e}") from e
        if proc.returncode != 0:
            raise EncoderUnavailableError(f"ffmpeg at {path} exited with {proc.returncode}")

    def reset(self) -> None:
        with self._cond:
            if self.state is not EncoderState.LOADING:
                self.state = EncoderState.UNINITIALIZED
                self.binary = None
                self.error = None

    def run(self, args: List[str]) -> subprocess.CompletedProcess:
        """Run ffmpeg with *args*; a non-zero exit is left to the caller."""
        cmd = [self.load(), "-hide_banner", "-loglevel", "error", *args]
        logging.debug("ffmpeg %s", " ".join(args))
        try:
            return subprocess.run(cmd, capture_output=True, text=True, errors="replace")
        except OSError as e:
            raise EncoderUnavailableError(f"cannot start ffmpeg: {e}") from e


_ENCODER: Optional[EncoderHandle] = None
_ENCODER_LOCK = threading.Lock()


def get_encoder() -> EncoderHandle:
    """Return the process-wide encoder handle, creating it on first use."""
    global _ENCODER
    with _ENCODER_LOCK:
        if _ENCODER is None:
            _ENCODER = EncoderHandle()
        return _ENCODER


def encode_args(pattern: str, fps: float, output: str, audio: Optional[str] = None) -> List[str]:
    """Fixed argument list for the final encode."""
    args = ["-framerate", f"{fps:g}", "-i", pattern]
    if audio:
        args += ["-i", audio]
    args += ["-c:v", "libx264", "-pix_fmt", "yuv420p"]
    if audio:
        args += ["-c:a", "aac", "-shortest"]
    args += ["-y", output]
    return args


class EncodeJob:
    """Work area and ffmpeg calls of a single video render.

    Use as a context manager; the work directory is removed on exit whether
    the job succeeded or not.
    """

    def __init__(self, encoder: Optional[EncoderHandle] = None, work_dir: Optional[str] = None) -> None:
        self.encoder = encoder or get_encoder()
        self.job_id = uuid.uuid4().hex[:12]
        self._root = work_dir or WORK_DIR
        self.dir: Optional[str] = None
        self.output_path: Optional[str] = None
        self.frames_written = 0
        self._locked = False

    def __enter__(self) -> "EncodeJob":
        self.encoder.load()
        if not self.encoder.job_lock.acquire(blocking=False):
            raise EncoderError("another render job is already running on this encoder")
        self._locked = True
        try:
            if self._root:
                os.makedirs(self._root, exist_ok=True)
            self.dir = tempfile.mkdtemp(prefix=f"newsflash_{self.job_id}_", dir=self._root)
        except OSError:
            self._release()
            raise
        logging.debug("encode job %s in %s", self.job_id, self.dir)
        return self

    def __exit__(self, *exc) -> None:
        self.cleanup()

    @property
    def frame_pattern(self) -> str:
        return os.path.join(self.dir, f"{self.job_id}_frame%06d.png")

    def frame_path(self, index: int) -> str:
        return os.path.join(self.dir, f"{self.job_id}_frame{index:06d}.png")

    def write_frame(self, index: int, frame: np.ndarray) -> str:
        """Write frame *index*; indices must arrive as 0, 1, 2, ..."""
        if self.dir is None:
            raise EncoderError("encode job is not open")
        if index != self.frames_written:
            raise FrameOrderError(
                f"frame {index} out of order, expected {self.frames_written}"
            )
        path = self.frame_path(index)
        bgr = cv2.cvtColor(frame, cv2.COLOR_RGB2BGR)
        if not cv2.imwrite(path, bgr, [cv2.IMWRITE_PNG_COMPRESSION, 1]):
            raise EncoderError(f"could not write frame {path}")
        self.frames_written += 1
        return path

    def extract_audio(self, source: str) -> Optional[str]:
        """Pull the audio track of *source* as AAC; ``None`` if there is none."""
        out = os.path.join(self.dir, f"{self.job_id}_audio.m4a")
        proc = self.encoder.run(["-i", source, "-vn", "-c:a", "aac", "-y", out])
        if proc.returncode != 0 or not os.path.exists(out) or os.path.getsize(out) == 0:
            logging.info("no audio track in source, encoding without audio")
            if os.path.exists(out):
                os.remove(out)
            return None
        return out

    def encode(self, fps: float, audio: Optional[str] = None) -> str:
        if self.frames_written == 0:
            raise EncoderError("no frames to encode")
        out = os.path.join(self.dir, f"{self.job_id}_output.mp4")
        proc = self.encoder.run(encode_args(self.frame_pattern, fps, out, audio))
        if proc.returncode != 0 or not os.path.exists(out):
            raise EncoderError(f"ffmpeg exited with code {proc.returncode}", stderr=proc.stderr)
        self.output_path = out
        return out

    def read_output(self) -> bytes:
        if self.output_path is None:
            raise EncoderError("nothing has been encoded yet")
        with open(self.output_path, "rb") as fh:
            return fh.read()

    def cleanup(self) -> None:
        if self.dir is not None:
            shutil.rmtree(self.dir, ignore_errors=True)
            self.dir = None
        self._release()

    def _release(self) -> None:
        if self._locked:
            self.encoder.job_lock.release()
            self._locked = False


@dataclass
class RenderResult:
    """Encoded output of a render: PNG still or MP4 video."""

    data: bytes
    mime_type: str

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64," + base64.b64encode(self.data).decode("ascii")

    def save(self, path: str) -> str:
        """Write atomically: the target either keeps its old content or gets all of it."""
        folder = os.path.dirname(os.path.abspath(path))
        os.makedirs(folder, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".newsflash_", dir=folder)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(self.data)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise
        return path
