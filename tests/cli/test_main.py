import os

import pytest
from PIL import Image

from newsflash_reel import __main__ as nf_main


def make_img(path, size=(40, 50), color=(10, 20, 30)):
    Image.new("RGB", size, color).save(path)


def test_validate_requires_background(capsys):
    with pytest.raises(SystemExit):
        nf_main.main(["image", "--validate", "--headline", "x"])
    err = capsys.readouterr().err
    assert "needs --background" in err


def test_validate_rejects_bad_color(capsys):
    with pytest.raises(SystemExit):
        nf_main.main(["export-all", "--validate", "--headline", "x", "--banner-color", "red"])
    err = capsys.readouterr().err
    assert "--banner-color" in err


def test_validate_multi_needs_images(capsys):
    with pytest.raises(SystemExit):
        nf_main.main(["multi", "--validate", "--headline", "x"])
    assert "at least one image" in capsys.readouterr().err


def test_validate_passes(tmp_path):
    bg = tmp_path / "bg.png"
    make_img(bg)
    assert nf_main.main(["image", "--validate", "--headline", "x", "--background", str(bg)]) is None


def test_preset_sets_defaults(tmp_path):
    preset = tmp_path / "brand.yaml"
    preset.write_text("fps: 24\nsize: 100x200\nstyle:\n  banner_color: '#00FF00'\n", encoding="utf8")
    args = nf_main.parse_args(["image", "--preset", str(preset)])
    assert args.fps == 24
    assert args.size == (100, 200)
    assert args.banner_color == "#00FF00"
    args = nf_main.parse_args(["image", "--preset", str(preset), "--fps", "12"])
    assert args.fps == 12


def test_platform_and_size():
    assert nf_main.parse_args(["image"]).size == (1080, 1350)
    assert nf_main.parse_args(["image", "--platform", "tiktok"]).size == (1080, 1920)
    assert nf_main.parse_args(["image", "--size", "100x80"]).size == (100, 80)
    with pytest.raises(SystemExit):
        nf_main.parse_args(["image", "--size", "big"])


def test_images_after_options():
    args = nf_main.parse_args(["multi", "--fps", "10", "a.png", "b.png"])
    assert args.images == ["a.png", "b.png"]


def test_image_command_writes_without_clobbering(tmp_path, capsys):
    bg = tmp_path / "bg.png"
    make_img(bg)
    out = tmp_path / "card.png"
    argv = ["image", "--background", str(bg), "--headline", "Hi", "--size", "54x68", "--output", str(out)]
    nf_main.main(argv)
    assert out.exists()
    nf_main.main(argv)
    printed = capsys.readouterr().out.strip().splitlines()
    assert printed[0] == str(out)
    assert printed[1] != str(out)
    assert os.path.exists(printed[1])
    with Image.open(printed[1]) as im:
        assert im.size == (54, 68)


def test_render_errors_exit_cleanly(capsys):
    with pytest.raises(SystemExit) as exc:
        nf_main.main(["multi", "--headline", "x"])
    assert exc.value.code == 1
    assert "at least one image" in capsys.readouterr().err


def test_build_config_detects_video(tmp_path):
    args = nf_main.parse_args(
        ["video", "--background", "clip.MP4", "--headline", "x", "--headline-pos", "10,20"]
    )
    cfg = nf_main._build_config(args)
    assert cfg.media_type == "video"
    assert cfg.layout.headline.x == 10.0
    assert cfg.layout.banner is None
