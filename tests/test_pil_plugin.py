"""Tests for plugins/pil_plugin.py — the Pillow codec."""

import io

import pytest
from PIL import Image

from plugins.base_plugin import CodecError
from plugins.pil_plugin import PILPlugin


@pytest.fixture()
def codec():
    return PILPlugin()


class TestDecode:
    def test_decodes_png_as_rgba(self, codec, tmp_path):
        path = tmp_path / "t.png"
        Image.new("RGB", (20, 10), (1, 2, 3)).save(str(path), "PNG")
        img = codec.decode(str(path))
        assert img.mode == "RGBA"
        assert codec.size(img) == (20, 10)

    def test_rejects_non_png(self, codec, tmp_path):
        path = tmp_path / "t.png"
        Image.new("RGB", (20, 10)).save(str(path), "JPEG")
        with pytest.raises((CodecError, OSError)):
            codec.decode(str(path))

    def test_rejects_garbage(self, codec, tmp_path):
        path = tmp_path / "t.png"
        path.write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 10)
        with pytest.raises((CodecError, OSError)):
            codec.decode(str(path))


class TestEncode:
    def test_streams_png(self, codec):
        buf = io.BytesIO()
        codec.encode(Image.new("RGBA", (8, 8)), buf)
        data = buf.getvalue()
        assert data[:8] == b"\x89PNG\r\n\x1a\n"
        assert data[12:16] == b"IHDR"

    def test_compress_level_passed(self):
        buf_fast, buf_small = io.BytesIO(), io.BytesIO()
        img = Image.effect_noise((64, 64), 50).convert("RGBA")
        PILPlugin(compress_level=0).encode(img, buf_fast)
        PILPlugin(compress_level=9).encode(img, buf_small)
        assert len(buf_fast.getvalue()) > len(buf_small.getvalue())


class TestScale:
    def test_target_size(self, codec):
        out = codec.scale(Image.new("RGBA", (128, 128), (255, 0, 0, 255)), 0.5, 100, 100)
        assert out.size == (100, 100)
        # The 64x64 painted area is opaque, the rest transparent.
        assert out.getpixel((10, 10))[3] == 255
        assert out.getpixel((90, 90))[3] == 0

    def test_unit_factor_crops(self, codec):
        out = codec.scale(Image.new("RGBA", (256, 192), (0, 0, 255, 255)), 1.0, 200, 200)
        assert out.size == (200, 200)
        assert out.getpixel((0, 0)) == (0, 0, 255, 255)
        assert out.getpixel((199, 199))[3] == 0

    def test_empty_target_rejected(self, codec):
        with pytest.raises(CodecError):
            codec.scale(Image.new("RGBA", (8, 8)), 0.1, 0, 5)


def test_available():
    assert PILPlugin().is_available()