"""Extract mount-point markers from a sprite's pixels.

Scans the buffer in raster order (y outer, x inner). Every pixel whose
colour is a registered marker type (other than orientation) becomes a
Marker. Its angle comes from the first orientation-coloured pixel in the
8-neighbourhood, searched in this fixed order:

    (-1,-1) ( 0,-1) (+1,-1)
    (-1, 0)         (+1, 0)
    (-1,+1) ( 0,+1) (+1,+1)

i.e. dy outer, dx inner. Neighbour alpha is ignored; only RGB must match.
angle = degrees(atan2(dy, dx)), so right is 0, up is -90, left is 180.
No orientation neighbour means angle 0.

Marker order is a contract: consumers index markers positionally.

decode_markers() wraps the scan with sidecar skip semantics: an image that
already has a sidecar returns the stored markers without reading a single
pixel, and an empty scan is never persisted so a later run can retry.
"""

from __future__ import annotations

import math

import numpy as np

from sprite_markers.core.buffer import PixelBuffer
from sprite_markers.core.palette import DEFAULT_PALETTE, Palette, unpack
from sprite_markers.core.sidecar import SidecarStore, decode_state
from sprite_markers.core.types import DecodeState, Marker, MarkerType

NEIGHBOUR_ORDER: tuple[tuple[int, int], ...] = tuple(
    (dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0)
)


def _orientation_rgb(palette: Palette) -> tuple[int, int, int] | None:
    try:
        r, g, b, _a = unpack(palette.color_of(MarkerType.ORIENTATION))
    except KeyError:
        return None
    return (r, g, b)


def _find_angle(pixels: np.ndarray, x: int, y: int, target: tuple[int, int, int]) -> float:
    h, w = pixels.shape[:2]
    for dx, dy in NEIGHBOUR_ORDER:
        nx, ny = x + dx, y + dy
        if not (0 <= nx < w and 0 <= ny < h):
            continue
        px = pixels[ny, nx]
        if (int(px[0]), int(px[1]), int(px[2])) == target:
            return math.degrees(math.atan2(dy, dx))
    return 0.0


def scan_markers(buffer: PixelBuffer, palette: Palette = DEFAULT_PALETTE) -> list[Marker]:
    """Decode every marker in the buffer, in raster scan order."""
    pixels = buffer.array()
    if pixels.size == 0:
        return []

    entries = palette.entries
    kinds = palette.classify(pixels)
    target = _orientation_rgb(palette)

    markers: list[Marker] = []
    # argwhere yields (y, x) pairs already in row-major order
    for y, x in np.argwhere(kinds >= 0):
        marker_type = entries[kinds[y, x]][0]
        if marker_type is MarkerType.ORIENTATION:
            continue
        x, y = int(x), int(y)
        angle = _find_angle(pixels, x, y, target) if target is not None else 0.0
        markers.append(Marker(type=marker_type, x=x, y=y, angle=angle))
    return markers


def decode_markers(
    buffer: PixelBuffer,
    store: SidecarStore,
    image_id: str,
    palette: Palette = DEFAULT_PALETTE,
) -> list[Marker]:
    """Return the image's markers, decoding and persisting them at most once."""
    if decode_state(store, image_id) is DecodeState.DECODED:
        return store.load(image_id)

    markers = scan_markers(buffer, palette)
    if markers:
        store.save(image_id, markers)
    return markers
