"""Pipeline settings from environment variables (.env aware).

    SPRITE_MARKERS_SIDECAR_SUFFIX   sidecar suffix          (default .marker.json)
    SPRITE_MARKERS_CLEAN_SUFFIX     clean image stem suffix (default _clean)
    SPRITE_MARKERS_OUTPUT_DIR       where clean images go   (default: beside source)
    SPRITE_MARKERS_WORKERS          batch worker threads    (default 4)
    SPRITE_MARKERS_STRICT           fail images with residual reserved pixels (default false)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from sprite_markers.core.env import load_env

ENV_PREFIX = 'SPRITE_MARKERS_'

_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off', ''}


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f'{ENV_PREFIX}{name} must be an integer, got {raw!r}') from None


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(ENV_PREFIX + name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f'{ENV_PREFIX}{name} must be a boolean, got {raw!r}')


@dataclass(frozen=True)
class Settings:
    sidecar_suffix: str = '.marker.json'
    clean_suffix: str = '_clean'
    output_dir: str | None = None
    workers: int = 4
    strict: bool = False

    @classmethod
    def from_mapping(cls, env: Mapping[str, str]) -> Settings:
        return cls(
            sidecar_suffix=env.get(ENV_PREFIX + 'SIDECAR_SUFFIX') or cls.sidecar_suffix,
            clean_suffix=env.get(ENV_PREFIX + 'CLEAN_SUFFIX') or cls.clean_suffix,
            output_dir=env.get(ENV_PREFIX + 'OUTPUT_DIR') or None,
            workers=max(1, _env_int(env, 'WORKERS', cls.workers)),
            strict=_env_bool(env, 'STRICT', cls.strict),
        )

    @classmethod
    def from_env(cls, env_file: str | None = None) -> Settings:
        """Load .env (OS variables win), then read SPRITE_MARKERS_* variables."""
        load_env(env_file=env_file)
        return cls.from_mapping(os.environ)
