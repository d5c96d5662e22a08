"""Text layout: casing, greedy word wrap and font loading."""
from __future__ import annotations

import functools
import logging
import os
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from PIL import ImageDraw, ImageFont

from . import config

Measure = Callable[[str], float]

_SENTENCE_START = re.compile(r"(^\W*|[.!?]\s+)([^\W\d_])")


def apply_casing(text: str, casing: str) -> str:
    """Apply *casing* to the whole string (before any wrapping)."""
    if casing == "uppercase":
        return text.upper()
    if casing == "lowercase":
        return text.lower()
    if casing == "sentence":
        low = text.lower()
        return _SENTENCE_START.sub(lambda g: g.group(1) + g.group(2).upper(), low)
    return text


def wrap_text(text: str, measure: Measure, max_width: float) -> List[str]:
    """Greedily wrap *text* into lines no wider than *max_width*.

    Words are appended to the current line until the next word would push its
    measured width past ``max_width``. A word that is wider than ``max_width``
    on its own is placed alone on a line and never broken. An empty string
    yields a single empty line.
    """
    words = text.split()
    if not words:
        return [""]
    lines: List[str] = []
    current: List[str] = []
    for word in words:
        candidate = " ".join(current + [word])
        if current and measure(candidate) > max_width:
            lines.append(" ".join(current))
            current = [word]
        else:
            current.append(word)
    lines.append(" ".join(current))
    return lines


@dataclass
class TextBlock:
    lines: List[Tuple[str, float, float]]
    bottom: float


def layout_text(
    text: str,
    x: float,
    y: float,
    max_width: float,
    line_height: float,
    measure: Measure,
) -> TextBlock:
    """Place wrapped lines starting at ``(x, y)``.

    ``bottom`` is the Y coordinate immediately below the last line
    (``last_line_y + line_height``) so callers can stack further elements.
    """
    placed = []
    cur_y = y
    for line in wrap_text(text, measure, max_width):
        placed.append((line, x, cur_y))
        cur_y += line_height
    return TextBlock(lines=placed, bottom=cur_y)


def measure_with(font) -> Measure:
    """Return a width function for a Pillow *font*."""
    return lambda s: float(font.getlength(s))


def draw_wrapped_text(
    draw: ImageDraw.ImageDraw,
    text: str,
    xy: Tuple[float, float],
    max_width: float,
    line_height: float,
    font,
    fill,
) -> float:
    """Draw *text* wrapped inside ``max_width`` and return the Y below it."""
    block = layout_text(text, xy[0], xy[1], max_width, line_height, measure_with(font))
    for line, lx, ly in block.lines:
        if line:
            draw.text((round(lx), round(ly)), line, font=font, fill=fill)
    return block.bottom


def _font_candidates(name: str, bold: bool) -> List[str]:
    stems = [name, name.replace(" ", "")]
    names: List[str] = []
    for stem in dict.fromkeys(stems):
        if bold:
            names += [f"{stem}-Bold.ttf", f"{stem}Bold.ttf", f"{stem}-Bold.otf"]
        names += [f"{stem}-Regular.ttf", f"{stem}.ttf", f"{stem}.otf"]
        names += [f"{stem}[wght].ttf", f"{stem}-VariableFont_wght.ttf"]
    return names


@functools.lru_cache(maxsize=None)
def find_font_file(name: str, bold: bool) -> Optional[str]:
    wanted = {n.lower() for n in _font_candidates(name, bold)}
    roots = [config.FONT_DIR] if config.FONT_DIR else []
    roots += config.SYSTEM_FONT_DIRS
    for root in roots:
        if not root or not os.path.isdir(root):
            continue
        for dirpath, _, files in os.walk(root):
            for f in sorted(files):
                if f.lower() in wanted:
                    return os.path.join(dirpath, f)
    return None


@functools.lru_cache(maxsize=256)
def load_font(name: str, size: int, bold: bool = False):
    """Load the named font identifier at *size* pixels.

    Falls back to DejaVu Sans and finally to Pillow's built-in scalable font
    when the family is not installed.
    """
    size = max(1, int(round(size)))
    path = find_font_file(name, bold)
    if path:
        return ImageFont.truetype(path, size)
    fallback = "DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf"
    try:
        font = ImageFont.truetype(fallback, size)
    except OSError:
        font = ImageFont.load_default(size=size)
    logging.warning("font %r not found; using fallback", name)
    return font
