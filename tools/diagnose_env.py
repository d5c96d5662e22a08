import subprocess

from newsflash_reel.bin_config import resolve_ffmpeg
from newsflash_reel.config import AVAILABLE_FONTS
from newsflash_reel.text import find_font_file


def check_ffmpeg() -> None:
    path = resolve_ffmpeg()
    if not path:
        print("ffmpeg: NOT FOUND")
        return
    try:
        out = subprocess.check_output([path, "-version"], stderr=subprocess.STDOUT, text=True).splitlines()[0]
    except (OSError, subprocess.CalledProcessError) as e:
        out = f"error invoking: {e}"
    print(f"ffmpeg: {path} -> {out}")


def check_fonts() -> None:
    for name in AVAILABLE_FONTS:
        regular = find_font_file(name, False)
        bold = find_font_file(name, True)
        print(f"font {name}: {regular or 'NOT FOUND'} / bold: {bold or 'NOT FOUND'}")


def main() -> None:
    check_ffmpeg()
    check_fonts()


if __name__ == "__main__":
    main()
