"""Helpers to resolve external binary paths.

This module centralizes discovery of the ffmpeg executable without requiring
hard coded paths. Detection honors an explicit CLI argument, the
``FFMPEG_BINARY`` environment variable, the binary bundled with
``imageio-ffmpeg`` and finally a search on ``PATH``.
"""
from __future__ import annotations

import logging
import os
import shutil
from typing import Optional

import imageio_ffmpeg


def _validate_binary(path: str | None) -> Optional[str]:
    """Return *path* if it points to an existing executable."""
    if not path:
        return None
    if os.path.isfile(path) or shutil.which(path):
        return path
    return None


def _bundled_ffmpeg() -> Optional[str]:
    try:
        return imageio_ffmpeg.get_ffmpeg_exe()
    except RuntimeError as e:
        logging.debug("imageio-ffmpeg has no bundled binary: %s", e)
        return None


def resolve_ffmpeg(cli_path: str | None = None) -> Optional[str]:
    """Resolve path to the ``ffmpeg`` executable.

    Resolution order:
    1. explicit ``cli_path`` argument (e.g. ``--ffmpeg``)
    2. ``FFMPEG_BINARY`` environment variable
    3. binary shipped with ``imageio-ffmpeg``
    4. ``ffmpeg`` discovered on ``PATH``
    The returned path is validated and stored in ``os.environ``. Returns
    ``None`` if no candidate is found.
    """
    candidates = [
        cli_path,
        os.environ.get("FFMPEG_BINARY"),
        _bundled_ffmpeg(),
        shutil.which("ffmpeg"),
    ]
    for cand in candidates:
        path = _validate_binary(cand)
        if path:
            os.environ["FFMPEG_BINARY"] = path
            return path
    return None
