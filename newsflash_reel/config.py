"""Configuration defaults for newsflash_reel."""
from __future__ import annotations

import os

# Base design; every pixel constant in the compositor is expressed at this size
BASE_SIZE = (1080, 1350)
DEFAULT_FPS = 30

# Flat fill used when the background cannot be decoded
FALLBACK_BG = (26, 26, 26)

IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".bmp", ".webp", ".gif"}
VIDEO_EXTS = {".mp4", ".mov", ".webm", ".mkv", ".avi", ".m4v"}

# Optional overrides (can be set via environment)
FONT_DIR = os.environ.get("NEWSFLASH_FONT_DIR")
WORK_DIR = os.environ.get("NEWSFLASH_WORKDIR")

SYSTEM_FONT_DIRS = [
    "/usr/share/fonts",
    "/usr/local/share/fonts",
    os.path.expanduser("~/.fonts"),
    os.path.expanduser("~/.local/share/fonts"),
    "/Library/Fonts",
    "/System/Library/Fonts",
    r"C:\Windows\Fonts",
]

AVAILABLE_FONTS = [
    "Oswald",
    "Inter",
    "Roboto",
    "Montserrat",
    "Poppins",
    "Playfair Display",
    "Bebas Neue",
    "Anton",
    "Lato",
    "Open Sans",
]
