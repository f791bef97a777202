"""Shared types for sprite-markers: MarkerType, Marker, results, errors."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class MarkerCodecError(Exception):
    """Base class for sprite-markers errors."""


class ImageFormatError(MarkerCodecError):
    """Pixel data does not match its declared dimensions."""


class SidecarError(MarkerCodecError):
    """A sidecar record exists but cannot be read back as a marker list."""


class ResidualCollisionError(MarkerCodecError):
    """Sanitizing left pixels that still match a reserved colour."""

    def __init__(self, path: str, unresolved: list[tuple[int, int]]):
        self.path = path
        self.unresolved = unresolved
        super().__init__(f'{path}: {len(unresolved)} pixel(s) still match a reserved colour: {unresolved[:5]}')


class MarkerType(enum.Enum):
    """Closed set of reserved marker kinds."""

    THRUSTER = 'thruster'
    LASER = 'laser'
    ARMOR = 'armor'
    ROCKET = 'rocket'
    ORIENTATION = 'orientation'  # only modifies the angle of a neighbouring marker


class DecodeState(enum.Enum):
    """Per-image lifecycle. An image moves to DECODED once its sidecar is saved."""

    NOT_DECODED = 'not-decoded'
    DECODED = 'decoded'


@dataclass(frozen=True)
class Marker:
    """A mount point decoded from a sprite."""

    type: MarkerType
    x: int
    y: int
    angle: float = 0.0  # degrees, (-180, 180]

    def to_dict(self) -> dict:
        return {'type': self.type.value, 'x': self.x, 'y': self.y, 'angle': self.angle}

    @classmethod
    def from_dict(cls, data: dict) -> Marker:
        marker_type = MarkerType(data['type'])
        if marker_type is MarkerType.ORIENTATION:
            raise ValueError('orientation is not a standalone marker')
        return cls(
            type=marker_type,
            x=int(data['x']),
            y=int(data['y']),
            angle=float(data.get('angle', 0.0)),
        )


@dataclass
class SanitizeResult:
    """Outcome of one sanitize pass over a buffer."""

    replaced: int = 0
    unresolved: list[tuple[int, int]] = field(default_factory=list)  # (x, y) still reserved

    @property
    def clean(self) -> bool:
        return not self.unresolved


@dataclass
class ImageResult:
    """Everything the pipeline did to one source image."""

    path: str
    markers: list[Marker] = field(default_factory=list)
    skipped: bool = False  # sidecar already existed
    clean_path: str | None = None
    replaced: int = 0
    unresolved: list[tuple[int, int]] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.unresolved


@dataclass
class BatchReport:
    """Accumulates per-image results for text/JSON output."""

    images: list[ImageResult] = field(default_factory=list)

    def add(self, result: ImageResult) -> None:
        self.images.append(result)

    @property
    def pass_count(self) -> int:
        return sum(1 for r in self.images if r.ok)

    @property
    def fail_count(self) -> int:
        return len(self.images) - self.pass_count
