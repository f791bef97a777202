"""Pick up SPRITE_MARKERS_* settings from a .env file.

Asset repos usually keep a .env at their root next to the ships/ folder.
load_env() finds it by walking up from the working directory and stops at
the first .git it meets, so a checkout never reads a parent project's file.
An explicit env_file skips the walk.

Values already in the process environment always win; the file only fills
gaps.
"""

import os
from pathlib import Path


def _find_dotenv(start: Path) -> Path | None:
    """Nearest .env at or above start, without crossing a .git boundary."""
    for directory in (start.resolve(), *start.resolve().parents):
        if (directory / '.env').is_file():
            return directory / '.env'
        # worktrees have a .git file, clones a .git directory
        if (directory / '.git').exists():
            return None
    return None


def _parse_dotenv(path: Path) -> dict[str, str]:
    """KEY=value pairs, with optional `export` and surrounding quotes."""
    result: dict[str, str] = {}
    for raw in path.read_text(encoding='utf-8').splitlines():
        line = raw.strip()
        if line.startswith('export '):
            line = line[len('export ') :].lstrip()
        if line.startswith('#') or '=' not in line:
            continue
        name, _, value = line.partition('=')
        name = name.strip()
        if name:
            result[name] = value.strip().strip('"').strip("'")
    return result


def load_env(env_file: str | None = None) -> Path | None:
    """Fill os.environ from a .env file; return the file used, or None."""
    path = Path(env_file) if env_file else _find_dotenv(Path.cwd())
    if path is None or not path.is_file():
        return None

    for name, value in _parse_dotenv(path).items():
        os.environ.setdefault(name, value)
    return path
