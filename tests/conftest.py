"""Shared fixtures: in-memory sprites built pixel by pixel."""

import pytest
from sprite_markers.core.buffer import PixelBuffer
from sprite_markers.core.palette import unpack


@pytest.fixture
def make_buffer():
    """Build a transparent buffer with the given {(x, y): 0xRRGGBBAA} pixels set."""

    def _make(width: int, height: int, pixels: dict[tuple[int, int], int] | None = None) -> PixelBuffer:
        buf = PixelBuffer.blank(width, height)
        for (x, y), color in (pixels or {}).items():
            buf.set_rgba(x, y, unpack(color))
        return buf

    return _make
