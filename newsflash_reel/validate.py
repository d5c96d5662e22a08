"""Argument validation helpers for the newsflash_reel CLI."""
from __future__ import annotations

import os
from argparse import Namespace
from typing import List

from .config import IMAGE_EXTS, VIDEO_EXTS
from .models import MAX_IMAGE_DURATION, MIN_IMAGE_DURATION, hex_to_rgb


def validate_args(args: Namespace) -> List[str]:
    """Validate parsed CLI arguments.

    Returns a list of human readable error messages. The caller should abort
    if the list is non-empty.
    """
    errors: List[str] = []
    if not args.headline.strip():
        errors.append("--headline must not be empty")
    for name in ("headline_color", "description_color", "banner_color"):
        try:
            hex_to_rgb(getattr(args, name))
        except ValueError:
            errors.append(f"--{name.replace('_', '-')} is not a #rrggbb colour")
    for flag, name in (
        ("--headline-size", "headline_font_size"),
        ("--description-size", "description_font_size"),
        ("--logo-size", "logo_size"),
    ):
        if getattr(args, name) <= 0:
            errors.append(f"{flag} must be positive")
    if args.fps <= 0:
        errors.append("--fps must be positive")
    if not (MIN_IMAGE_DURATION <= args.image_duration <= MAX_IMAGE_DURATION):
        errors.append(
            f"--image-duration {args.image_duration:g}s outside "
            f"[{MIN_IMAGE_DURATION:g}, {MAX_IMAGE_DURATION:g}]"
        )

    if args.command in ("image", "video") and not args.background:
        errors.append(f"{args.command} needs --background")
    if args.background:
        ext = os.path.splitext(args.background)[1].lower()
        if not os.path.isfile(args.background):
            errors.append(f"background not found: {args.background}")
        elif args.command == "video" and ext not in VIDEO_EXTS:
            errors.append("video needs a video --background (mp4, mov, webm ...)")
    if args.command == "multi":
        if not args.images:
            errors.append("multi needs at least one image")
        for path in args.images:
            if not os.path.isfile(path):
                errors.append(f"image not found: {path}")
            elif os.path.splitext(path)[1].lower() not in IMAGE_EXTS:
                errors.append(f"not an image: {path}")
    if args.logo and not os.path.isfile(args.logo):
        errors.append(f"logo not found: {args.logo}")
    return errors
