"""Render one card at every social platform size and bundle the PNGs."""
from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import numpy as np

from .compositor import OverlayRenderer, compose_frame, encode_png
from .media import load_background
from .models import RenderConfig


@dataclass(frozen=True)
class ExportPlatform:
    id: str
    name: str
    width: int
    height: int
    aspect_ratio: str
    category: str

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def filename(self) -> str:
        return f"newsflash_{self.id}_{self.width}x{self.height}.png"


EXPORT_PLATFORMS: List[ExportPlatform] = [
    # square
    ExportPlatform("instagram-feed", "Instagram Feed", 1080, 1080, "1:1", "square"),
    ExportPlatform("threads", "Threads", 1080, 1080, "1:1", "square"),
    # landscape
    ExportPlatform("facebook", "Facebook Post", 1200, 630, "1.91:1", "landscape"),
    ExportPlatform("twitter", "Twitter / X", 1200, 675, "16:9", "landscape"),
    ExportPlatform("youtube", "YouTube Thumbnail", 1280, 720, "16:9", "landscape"),
    ExportPlatform("linkedin", "LinkedIn", 1200, 627, "1.91:1", "landscape"),
    # portrait 9:16
    ExportPlatform("instagram-story", "Instagram Story", 1080, 1920, "9:16", "portrait"),
    ExportPlatform("instagram-reels", "Instagram Reels", 1080, 1920, "9:16", "portrait"),
    ExportPlatform("facebook-story", "Facebook Story", 1080, 1920, "9:16", "portrait"),
    ExportPlatform("tiktok", "TikTok", 1080, 1920, "9:16", "portrait"),
    ExportPlatform("youtube-shorts", "YouTube Shorts", 1080, 1920, "9:16", "portrait"),
    ExportPlatform("snapchat", "Snapchat", 1080, 1920, "9:16", "portrait"),
    ExportPlatform("whatsapp-status", "WhatsApp Status", 1080, 1920, "9:16", "portrait"),
    # 2:3
    ExportPlatform("pinterest", "Pinterest Pin", 1000, 1500, "2:3", "portrait"),
]


def find_platform(platform_id: str) -> ExportPlatform:
    for p in EXPORT_PLATFORMS:
        if p.id == platform_id:
            return p
    raise KeyError(f"unknown platform: {platform_id}")


def export_for_platform(
    config: RenderConfig,
    platform: ExportPlatform,
    background: Optional[np.ndarray] = None,
    overlay: Optional[OverlayRenderer] = None,
) -> bytes:
    """PNG bytes of *config* at *platform* size.

    ``background`` may carry an already decoded raster so batch exports decode
    the media once.
    """
    if background is None:
        background = load_background(config.background, config.media_type, config.video_timestamp)
    return encode_png(compose_frame(background, config, platform.size, overlay))


def export_all_platforms(
    config: RenderConfig,
    on_progress: Optional[Callable[[int, int, str], None]] = None,
    platforms: Optional[List[ExportPlatform]] = None,
) -> bytes:
    """ZIP archive holding one PNG per platform."""
    platforms = EXPORT_PLATFORMS if platforms is None else platforms
    background = load_background(config.background, config.media_type, config.video_timestamp)
    overlay = OverlayRenderer(config)
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for i, platform in enumerate(platforms):
            if on_progress:
                on_progress(i + 1, len(platforms), platform.name)
            zf.writestr(platform.filename, export_for_platform(config, platform, background, overlay))
    logging.info("exported %d platform sizes", len(platforms))
    return buf.getvalue()
