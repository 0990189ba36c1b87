import logging
from typing import BinaryIO, Tuple
from PIL import Image, features
from .base_plugin import BasePlugin, CodecError


class PILPlugin(BasePlugin):
    """Codec for PNG thumbnails using PIL/Pillow."""

    def is_available(self) -> bool:
        """PNG support needs Pillow built with zlib."""
        return bool(features.check("zlib"))

    def decode(self, path: str) -> Image.Image:
        """Fully decode a PNG file into an RGBA image."""
        try:
            with Image.open(path, formats=["PNG"]) as img:
                img.load()
                return img.convert("RGBA")
        except (SyntaxError, ValueError, Image.DecompressionBombError) as e:
            raise CodecError(f"Cannot decode {path}: {e}") from e

    def encode(self, surface: Image.Image, sink: BinaryIO) -> None:
        params = {}
        if self.compress_level is not None:
            params["compress_level"] = self.compress_level
        try:
            surface.save(sink, "PNG", **params)
        except (ValueError, KeyError) as e:
            raise CodecError(f"Cannot encode {surface.mode} image as PNG: {e}") from e
        logging.debug(f"Encoded {surface.size[0]}x{surface.size[1]} PNG thumbnail")

    def scale(self, surface: Image.Image, factor: float, width: int, height: int) -> Image.Image:
        if width <= 0 or height <= 0:
            raise CodecError(f"Invalid target size {width}x{height}")
        src = surface if surface.mode == "RGBA" else surface.convert("RGBA")
        if factor != 1:
            scaled_size = (max(1, round(src.width * factor)), max(1, round(src.height * factor)))
            src = src.resize(scaled_size, Image.Resampling.LANCZOS)
        # Crop beyond the painted area is filled with transparent black.
        return src.crop((0, 0, width, height))

    def size(self, surface: Image.Image) -> Tuple[int, int]:
        return surface.size
