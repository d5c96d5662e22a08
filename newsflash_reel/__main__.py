"""Command line interface for newsflash_reel."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime

import yaml

from .config import AVAILABLE_FONTS, BASE_SIZE, DEFAULT_FPS, VIDEO_EXTS
from .errors import RenderError
from .export import EXPORT_PLATFORMS, export_all_platforms, find_platform
from .models import (
    CASINGS,
    COLLAGE_LAYOUTS,
    LOGO_POSITIONS,
    TRANSITION_TYPES,
    VIDEO_MODES,
    LayoutSettings,
    MultiImageSettings,
    Position,
    RenderConfig,
    StyleSettings,
)
from .validate import validate_args

# preset sections flattened onto parser defaults
_PRESET_SECTIONS = ("style", "multi_image")


def _size_type(x: str) -> tuple[int, int]:
    try:
        w, h = x.lower().split("x")
        size = (int(w), int(h))
    except ValueError as e:
        raise argparse.ArgumentTypeError("--size format WxH") from e
    if size[0] <= 0 or size[1] <= 0:
        raise argparse.ArgumentTypeError("--size must be positive")
    return size


def _pos_type(x: str) -> Position:
    try:
        px, py = x.split(",")
        return Position(float(px), float(py))
    except ValueError as e:
        raise argparse.ArgumentTypeError("position format X,Y (percent)") from e


def _out_path(output_arg: str | None, default_name: str) -> str:
    if output_arg:
        if output_arg.endswith(os.sep) or os.path.isdir(output_arg):
            out = os.path.join(output_arg, default_name)
        else:
            out = output_arg
    else:
        out = os.path.join(os.getcwd(), default_name)

    os.makedirs(os.path.dirname(os.path.abspath(out)), exist_ok=True)

    if not os.path.exists(out):
        return out
    root, ext = os.path.splitext(out)
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    cand = f"{root}_{ts}{ext}"
    if not os.path.exists(cand):
        return cand
    i = 2
    while True:
        cand = f"{root}_{i}{ext}"
        if not os.path.exists(cand):
            return cand
        i += 1


def _load_preset(path: str) -> dict:
    with open(path, "r", encoding="utf8") as fh:
        data = yaml.safe_load(fh) or {}
    flat = {k: v for k, v in data.items() if k not in _PRESET_SECTIONS}
    for section in _PRESET_SECTIONS:
        if isinstance(data.get(section), dict):
            flat.update(data[section])
    return flat


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render breaking-news cards and videos")
    parser.add_argument(
        "command",
        choices=["image", "video", "multi", "export-all"],
        help=(
            "image: PNG card; video: overlay onto a background video; "
            "multi: slideshow/collage/kenburns from images; export-all: ZIP of platform sizes"
        ),
    )
    parser.add_argument("images", nargs="*", help="Images for the multi command, in order")
    parser.add_argument("--preset", action="append", default=[], help="Path to YAML preset overriding defaults")
    parser.add_argument("--ffmpeg", help="Path to ffmpeg binary")
    parser.add_argument(
        "--output",
        help="Path to output file or directory. If existing, a timestamp/counter is appended.",
    )
    parser.add_argument("--validate", action="store_true", help="Validate arguments and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    content = parser.add_argument_group("content")
    content.add_argument("--headline", default="", help="Headline text")
    content.add_argument("--description", default="", help="Description text")
    content.add_argument("--banner-text", default="BREAKING NEWS")
    content.add_argument("--no-banner", dest="banner_visible", action="store_false", help="Hide the banner")
    content.add_argument("--background", help="Background image or video")
    content.add_argument(
        "--timestamp",
        dest="video_timestamp",
        type=float,
        default=0.0,
        help="Frame time (s) used when a video background is rendered as an image",
    )
    content.add_argument("--logo", help="Logo image (PNG with transparency works best)")
    content.add_argument("--logo-position", choices=LOGO_POSITIONS, default="top-right")
    content.add_argument("--logo-size", type=int, default=120, help="Logo box size (px at 1080x1350)")
    content.add_argument("--logo-pos", dest="logo_xy", type=_pos_type, help="Free logo position X,Y in percent")

    style = parser.add_argument_group("style")
    style.add_argument("--headline-size", dest="headline_font_size", type=int, default=90)
    style.add_argument("--description-size", dest="description_font_size", type=int, default=40)
    style.add_argument("--headline-color", default="#FFFFFF")
    style.add_argument("--description-color", default="#E5E5E5")
    style.add_argument("--banner-color", default="#D90000")
    style.add_argument("--headline-font", default="Oswald", help=f"One of {', '.join(AVAILABLE_FONTS)} or any installed font")
    style.add_argument("--description-font", default="Inter")
    style.add_argument("--headline-casing", choices=CASINGS, default="uppercase")
    style.add_argument("--description-casing", choices=CASINGS, default="none")

    layout = parser.add_argument_group("layout (percent X,Y)")
    layout.add_argument("--banner-pos", type=_pos_type)
    layout.add_argument("--headline-pos", type=_pos_type)
    layout.add_argument("--description-pos", type=_pos_type)

    multi = parser.add_argument_group("multi-image video")
    multi.add_argument("--video-mode", choices=VIDEO_MODES, default="slideshow")
    multi.add_argument("--image-duration", type=float, default=3.0, help="Seconds per image (1-10)")
    multi.add_argument("--transition", dest="transition_type", choices=TRANSITION_TYPES, default="fade")
    multi.add_argument("--collage-layout", choices=COLLAGE_LAYOUTS, default="2x2")

    out = parser.add_argument_group("output")
    out.add_argument("--fps", type=float, default=DEFAULT_FPS)
    out.add_argument("--size", type=_size_type, help="Output size WxH (default 1080x1350)")
    out.add_argument(
        "--platform",
        choices=[p.id for p in EXPORT_PLATFORMS],
        help="Use the size of a social platform",
    )

    prelim, _ = parser.parse_known_intermixed_args(argv)
    for path in prelim.preset:
        parser.set_defaults(**_load_preset(path))

    args = parser.parse_intermixed_args(argv)
    if args.size is None:
        args.size = find_platform(args.platform).size if args.platform else BASE_SIZE
    return args


def _build_config(args: argparse.Namespace) -> RenderConfig:
    media_type = "image"
    if args.background and os.path.splitext(args.background)[1].lower() in VIDEO_EXTS:
        media_type = "video"
    layout = None
    if args.banner_pos or args.headline_pos or args.description_pos:
        layout = LayoutSettings(args.banner_pos, args.headline_pos, args.description_pos)
    style = StyleSettings(
        headline_font_size=args.headline_font_size,
        description_font_size=args.description_font_size,
        headline_color=args.headline_color,
        description_color=args.description_color,
        banner_color=args.banner_color,
        headline_font=args.headline_font,
        description_font=args.description_font,
        headline_casing=args.headline_casing,
        description_casing=args.description_casing,
    )
    return RenderConfig(
        headline=args.headline,
        description=args.description,
        banner_text=args.banner_text,
        banner_visible=args.banner_visible,
        background=args.background,
        media_type=media_type,
        video_timestamp=args.video_timestamp,
        logo=args.logo,
        logo_position=args.logo_position,
        logo_size=args.logo_size,
        logo_xy=args.logo_xy,
        style=style,
        layout=layout,
    )


def _log_progress(pct: int) -> None:
    logging.info("progress %d%%", pct)


def _run(args: argparse.Namespace) -> str:
    from . import builder
    from .encoder import EncoderHandle, RenderResult, get_encoder

    config = _build_config(args)
    if args.command == "image":
        result = builder.render_image(config, args.size)
        return result.save(_out_path(args.output, "newsflash.png"))
    if args.command == "export-all":
        data = export_all_platforms(
            config, on_progress=lambda i, n, name: logging.info("[%d/%d] %s", i, n, name)
        )
        return RenderResult(data, "application/zip").save(
            _out_path(args.output, "newsflash_all_platforms.zip")
        )

    encoder = EncoderHandle(args.ffmpeg) if args.ffmpeg else get_encoder()
    if args.command == "video":
        result = builder.render_overlay_video(
            config, args.fps, args.size, on_progress=_log_progress, encoder=encoder
        )
    else:
        settings = MultiImageSettings(
            video_mode=args.video_mode,
            image_duration=args.image_duration,
            transition_type=args.transition_type,
            collage_layout=args.collage_layout,
        )
        result = builder.render_multi_image_video(
            args.images,
            config,
            settings,
            args.fps,
            args.size,
            on_progress=_log_progress,
            encoder=encoder,
        )
    return result.save(_out_path(args.output, "newsflash.mp4"))


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )
    if args.validate:
        errs = validate_args(args)
        if errs:
            for e in errs:
                print(f"validation error: {e}", file=sys.stderr)
            raise SystemExit(1)
        return
    try:
        out = _run(args)
    except (RenderError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        raise SystemExit(1) from e
    print(out)


if __name__ == "__main__":
    main()
