"""Width/height + byte-buffer view over an RGBA raster.

Pillow does the container encode/decode. The decoder and sanitizer only see
the flat RGBA bytes, row-major, 4 bytes per pixel: index(x, y) points at R.
"""

from __future__ import annotations

import numpy as np
from PIL import Image

from sprite_markers.core.palette import RGBA
from sprite_markers.core.types import ImageFormatError


class PixelBuffer:
    """Mutable RGBA pixels of one image."""

    def __init__(self, width: int, height: int, data: bytes | bytearray):
        if width < 0 or height < 0:
            raise ImageFormatError(f'Negative dimensions {width}x{height}')
        if len(data) != width * height * 4:
            raise ImageFormatError(f'Expected {width * height * 4} bytes for {width}x{height} RGBA, got {len(data)}')
        self.width = width
        self.height = height
        self.data = data if isinstance(data, bytearray) else bytearray(data)

    @classmethod
    def blank(cls, width: int, height: int) -> PixelBuffer:
        """Fully transparent buffer."""
        return cls(width, height, bytearray(width * height * 4))

    @classmethod
    def from_image(cls, image: Image.Image) -> PixelBuffer:
        rgba = image if image.mode == 'RGBA' else image.convert('RGBA')
        return cls(rgba.width, rgba.height, rgba.tobytes())

    @classmethod
    def open(cls, path: str) -> PixelBuffer:
        with Image.open(path) as img:
            return cls.from_image(img)

    def to_image(self) -> Image.Image:
        return Image.frombytes('RGBA', (self.width, self.height), bytes(self.data))

    def save(self, path: str) -> None:
        self.to_image().save(path, format='PNG')

    def copy(self) -> PixelBuffer:
        return PixelBuffer(self.width, self.height, bytearray(self.data))

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def index(self, x: int, y: int) -> int:
        return (self.width * y + x) * 4

    def rgba(self, x: int, y: int) -> RGBA:
        i = self.index(x, y)
        d = self.data
        return (d[i], d[i + 1], d[i + 2], d[i + 3])

    def set_rgba(self, x: int, y: int, rgba: RGBA) -> None:
        i = self.index(x, y)
        self.data[i : i + 4] = bytes(rgba)

    def array(self) -> np.ndarray:
        """(H, W, 4) uint8 view sharing memory with `data`. Writes go through."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, 4)
