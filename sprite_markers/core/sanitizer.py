"""Strip reserved marker colours from a finished sprite.

Every opaque pixel that exactly matches a palette colour is nudged to the
first non-reserved colour in this search:

    channel R, G, B (outer) × delta +1, -1, +2, -2 (inner)

changing only that one channel, clamped to 0..255. If all 12 candidates are
reserved, all three channels get +2 at once. If even that is reserved the
pixel is left as is and reported in SanitizeResult.unresolved.

Alpha is never touched, and alpha-0 pixels are skipped entirely. The search
order is fixed so output is identical across runs and implementations.
"""

from __future__ import annotations

import numpy as np

from sprite_markers.core.buffer import PixelBuffer
from sprite_markers.core.palette import DEFAULT_PALETTE, RGBA, Palette, pack
from sprite_markers.core.types import SanitizeResult

CHANNELS = (0, 1, 2)  # R, G, B
DELTAS = (1, -1, 2, -2)
FALLBACK_DELTA = 2


def _clamp(v: int) -> int:
    return 0 if v < 0 else 255 if v > 255 else v


def _candidates(rgba: RGBA):
    """Single-channel nudges in search order."""
    for ch in CHANNELS:
        for delta in DELTAS:
            c = list(rgba)
            c[ch] = _clamp(c[ch] + delta)
            yield tuple(c)


def replacement_for(rgba: RGBA, palette: Palette = DEFAULT_PALETTE) -> RGBA | None:
    """Non-reserved replacement for a reserved pixel, or None if none is found."""
    for c in _candidates(rgba):
        if palette.type_of(pack(*c)) is None:
            return c
    r, g, b, a = rgba
    fallback = (_clamp(r + FALLBACK_DELTA), _clamp(g + FALLBACK_DELTA), _clamp(b + FALLBACK_DELTA), a)
    if palette.type_of(pack(*fallback)) is None:
        return fallback
    return None


def sanitize(buffer: PixelBuffer, palette: Palette = DEFAULT_PALETTE) -> SanitizeResult:
    """Replace every reserved-colour pixel in place."""
    result = SanitizeResult()
    pixels = buffer.array()
    if pixels.size == 0:
        return result

    reserved = palette.classify(pixels) >= 0
    cache: dict[RGBA, RGBA | None] = {}
    for y, x in np.argwhere(reserved):
        px = pixels[y, x]
        original = (int(px[0]), int(px[1]), int(px[2]), int(px[3]))
        if original not in cache:
            cache[original] = replacement_for(original, palette)
        replacement = cache[original]
        if replacement is None:
            result.unresolved.append((int(x), int(y)))
            continue
        pixels[y, x] = replacement
        result.replaced += 1
    return result


def reserved_pixels(buffer: PixelBuffer, palette: Palette = DEFAULT_PALETTE) -> list[tuple[int, int]]:
    """(x, y) of every pixel that still matches a palette colour."""
    pixels = buffer.array()
    if pixels.size == 0:
        return []
    return [(int(x), int(y)) for y, x in np.argwhere(palette.classify(pixels) >= 0)]
