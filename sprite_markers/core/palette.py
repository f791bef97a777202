"""Reserved marker colours and RGBA packing.

Colours are packed as 0xRRGGBBAA. A pixel is a marker only on an exact
match against a palette entry; fully transparent pixels (alpha 0) never
match, whatever their RGB.

Entries are kept in declared order. Decode and sanitize iterate them in
that order, so the order is part of the contract.
"""

from __future__ import annotations

import re

import numpy as np

from sprite_markers.core.types import MarkerType

RGBA = tuple[int, int, int, int]

_HEX_RE = re.compile(r'[0-9a-f]{6}(?:[0-9a-f]{2})?')


def pack(r: int, g: int, b: int, a: int) -> int:
    """Pack four 0-255 channels into 0xRRGGBBAA."""
    return ((r & 0xFF) << 24) | ((g & 0xFF) << 16) | ((b & 0xFF) << 8) | (a & 0xFF)


def unpack(color: int) -> RGBA:
    """Split 0xRRGGBBAA into (r, g, b, a)."""
    return ((color >> 24) & 0xFF, (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF)


def rgba_to_hex(color: int) -> str:
    """Format a packed colour as '#rrggbbaa'."""
    return f'#{color & 0xFFFFFFFF:08x}'


def hex_to_rgba(text: str) -> int:
    """Parse '#rrggbbaa', '#rrggbb' (opaque) or '0xRRGGBBAA' into a packed colour."""
    h = text.strip().lower()
    if h.startswith('0x'):
        h = h[2:]
    h = h.lstrip('#')
    if not _HEX_RE.fullmatch(h):
        raise ValueError(f'Not an RGBA hex colour: {text!r}')
    if len(h) == 6:
        h += 'ff'
    return int(h, 16)


class Palette:
    """Immutable, ordered (MarkerType, colour) table.

    Pass one explicitly to the decoder and sanitizer; DEFAULT_PALETTE is the
    shipped registry.
    """

    __slots__ = ('_entries', '_by_color', '_packed')

    def __init__(self, entries: list[tuple[MarkerType, int]] | tuple[tuple[MarkerType, int], ...]):
        entries = tuple((MarkerType(t), int(c) & 0xFFFFFFFF) for t, c in entries)
        by_color: dict[int, MarkerType] = {}
        for marker_type, color in entries:
            if color in by_color:
                raise ValueError(
                    f'Palette colour {rgba_to_hex(color)} used by both {by_color[color].value} and {marker_type.value}'
                )
            by_color[color] = marker_type
        self._entries = entries
        self._by_color = by_color
        self._packed = np.array([c for _, c in entries], dtype=np.uint32)

    @property
    def entries(self) -> tuple[tuple[MarkerType, int], ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __repr__(self) -> str:
        body = ', '.join(f'{t.value}={rgba_to_hex(c)}' for t, c in self._entries)
        return f'Palette({body})'

    def type_of(self, color: int) -> MarkerType | None:
        """Exact lookup. Transparent colours are never markers."""
        if color & 0xFF == 0:
            return None
        return self._by_color.get(color & 0xFFFFFFFF)

    def color_of(self, marker_type: MarkerType) -> int:
        """Colour of the first entry declared for marker_type."""
        for t, c in self._entries:
            if t is marker_type:
                return c
        raise KeyError(f'No colour registered for {marker_type.value}')

    def classify(self, pixels: np.ndarray) -> np.ndarray:
        """Vectorised type_of over an (H, W, 4) uint8 array.

        Returns an (H, W) int array of entry indices into `entries`, -1 where
        the pixel is not a marker colour.
        """
        px = pixels.astype(np.uint32)
        packed = (px[..., 0] << 24) | (px[..., 1] << 16) | (px[..., 2] << 8) | px[..., 3]
        result = np.full(packed.shape, -1, dtype=np.int32)
        opaque = px[..., 3] != 0
        for i, color in enumerate(self._packed):
            result[(packed == color) & opaque] = i
        return result

    def legend(self) -> list[tuple[str, str]]:
        """(type name, '#rrggbbaa') pairs in declared order, for legend tooling."""
        return [(t.value, rgba_to_hex(c)) for t, c in self._entries]


DEFAULT_PALETTE = Palette(
    (
        (MarkerType.THRUSTER, 0xFFA500FF),  # orange
        (MarkerType.LASER, 0x00FF00FF),  # green
        (MarkerType.ARMOR, 0x000000FF),  # black
        (MarkerType.ROCKET, 0xFFFFFFFF),  # white
        (MarkerType.ORIENTATION, 0xFF0000FF),  # red
    )
)
