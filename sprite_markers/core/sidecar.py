"""Per-image persistence of decoded markers.

A sidecar's presence is the only record that an image has been decoded.
Stores expose exactly exists / load / save; decode_state() turns `exists`
into the NOT_DECODED → DECODED lifecycle the decoder consults.

JsonSidecarStore writes `<stem>.marker.json` beside the image:

    [
      {"type": "thruster", "x": 12, "y": 30, "angle": 90.0}
    ]
"""

from __future__ import annotations

import json
import os
import tempfile
from typing import Protocol

from sprite_markers.core.types import DecodeState, Marker, SidecarError


class SidecarStore(Protocol):
    def exists(self, image_id: str) -> bool: ...

    def load(self, image_id: str) -> list[Marker]: ...

    def save(self, image_id: str, markers: list[Marker]) -> None: ...


def decode_state(store: SidecarStore, image_id: str) -> DecodeState:
    return DecodeState.DECODED if store.exists(image_id) else DecodeState.NOT_DECODED


def sidecar_path(image_path: str, suffix: str = '.marker.json') -> str:
    """`ships/blood-boss.png` → `ships/blood-boss.marker.json`."""
    stem, _ext = os.path.splitext(image_path)
    return stem + suffix


def markers_to_json(markers: list[Marker]) -> str:
    return json.dumps([m.to_dict() for m in markers], indent=2)


def markers_from_json(text: str, source: str = '<string>') -> list[Marker]:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise SidecarError(f'{source}: invalid JSON: {e}') from e
    if not isinstance(raw, list):
        raise SidecarError(f'{source}: expected a JSON array of markers')
    markers = []
    for i, item in enumerate(raw):
        try:
            markers.append(Marker.from_dict(item))
        except (KeyError, TypeError, ValueError) as e:
            raise SidecarError(f'{source}: bad marker at index {i}: {e}') from e
    return markers


class JsonSidecarStore:
    """Sidecar JSON files next to their images. The image id is the image path."""

    def __init__(self, suffix: str = '.marker.json'):
        self.suffix = suffix

    def path_for(self, image_id: str) -> str:
        return sidecar_path(image_id, self.suffix)

    def exists(self, image_id: str) -> bool:
        return os.path.isfile(self.path_for(image_id))

    def load(self, image_id: str) -> list[Marker]:
        path = self.path_for(image_id)
        with open(path, 'rb') as f:
            raw = f.read()
        try:
            text = raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise SidecarError(f'{path}: not UTF-8: {e}') from e
        return markers_from_json(text, source=path)

    def save(self, image_id: str, markers: list[Marker]) -> None:
        path = self.path_for(image_id)
        # write-then-rename; the temp name is unique per call
        tmp = None
        try:
            with tempfile.NamedTemporaryFile(
                'w',
                encoding='utf-8',
                dir=os.path.dirname(path) or '.',
                prefix=os.path.basename(path) + '.',
                suffix='.tmp',
                delete=False,
            ) as f:
                tmp = f.name
                f.write(markers_to_json(markers))
            os.chmod(tmp, 0o644)
            os.replace(tmp, path)
        except BaseException:
            if tmp is not None and os.path.exists(tmp):
                os.unlink(tmp)
            raise


class MemorySidecarStore:
    """Dict-backed store for tests and callers that persist markers elsewhere."""

    def __init__(self) -> None:
        self.records: dict[str, list[Marker]] = {}

    def exists(self, image_id: str) -> bool:
        return image_id in self.records

    def load(self, image_id: str) -> list[Marker]:
        return list(self.records[image_id])

    def save(self, image_id: str, markers: list[Marker]) -> None:
        self.records[image_id] = list(markers)
