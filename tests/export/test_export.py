import io
import zipfile

import pytest
from PIL import Image

from newsflash_reel import export
from newsflash_reel.models import RenderConfig


def test_platform_table():
    ids = [p.id for p in export.EXPORT_PLATFORMS]
    assert len(ids) == 14
    assert len(set(ids)) == 14
    assert export.find_platform("tiktok").size == (1080, 1920)
    assert export.find_platform("facebook").size == (1200, 630)
    with pytest.raises(KeyError):
        export.find_platform("myspace")


def test_platform_filename():
    p = export.find_platform("pinterest")
    assert p.filename == "newsflash_pinterest_1000x1500.png"


def test_export_for_platform_size():
    small = export.ExportPlatform("tiny", "Tiny", 60, 40, "3:2", "landscape")
    data = export.export_for_platform(RenderConfig(headline="Hi"), small)
    with Image.open(io.BytesIO(data)) as im:
        assert im.size == (60, 40)


def test_export_all_builds_zip_without_background():
    platforms = [
        export.ExportPlatform("a", "A", 54, 54, "1:1", "square"),
        export.ExportPlatform("b", "B", 96, 54, "16:9", "landscape"),
        export.ExportPlatform("c", "C", 54, 96, "9:16", "portrait"),
    ]
    seen = []
    data = export.export_all_platforms(
        RenderConfig(headline="Hello"),
        on_progress=lambda i, n, name: seen.append((i, n, name)),
        platforms=platforms,
    )
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        names = zf.namelist()
        assert names == ["newsflash_a_54x54.png", "newsflash_b_96x54.png", "newsflash_c_54x96.png"]
        with Image.open(io.BytesIO(zf.read("newsflash_b_96x54.png"))) as im:
            assert im.size == (96, 54)
    assert seen == [(1, 3, "A"), (2, 3, "B"), (3, 3, "C")]
