"""Per-image pipeline and batch orchestrator.

For each sprite:
  1. load the PNG into a PixelBuffer
  2. decode markers, or reuse the sidecar if one already exists
  3. optionally sanitize the pixels and write `<stem>_clean.png`

Images are independent, so run_batch() fans them out over a thread pool.
A failing image is recorded in its ImageResult and never stops the batch.

Example:
    from sprite_markers.core.settings import Settings
    from sprite_markers.pipeline import run_batch

    report = run_batch(['ships/blood-boss.png'], Settings.from_env())
"""

import os
import sys
from concurrent.futures import ThreadPoolExecutor

from sprite_markers.core.buffer import PixelBuffer
from sprite_markers.core.decoder import decode_markers
from sprite_markers.core.palette import DEFAULT_PALETTE, Palette
from sprite_markers.core.sanitizer import sanitize
from sprite_markers.core.settings import Settings
from sprite_markers.core.sidecar import JsonSidecarStore, SidecarStore, decode_state
from sprite_markers.core.types import (
    BatchReport,
    DecodeState,
    ImageResult,
    MarkerCodecError,
    ResidualCollisionError,
)


def _log(message: str) -> None:
    print(f'sprite-markers: {message}', file=sys.stderr)


def clean_path_for(path: str, settings: Settings) -> str:
    stem, _ext = os.path.splitext(os.path.basename(path))
    directory = settings.output_dir or os.path.dirname(path)
    return os.path.join(directory, f'{stem}{settings.clean_suffix}.png')


def is_clean_output(path: str, settings: Settings) -> bool:
    stem, _ext = os.path.splitext(os.path.basename(path))
    return stem.endswith(settings.clean_suffix)


def process_image(
    path: str,
    settings: Settings,
    store: SidecarStore | None = None,
    clean: bool = True,
    palette: Palette = DEFAULT_PALETTE,
) -> ImageResult:
    """Decode (or reuse) one image's markers and optionally write its clean copy.

    Decoding and cleaning are independent outcomes. The sidecar is saved as
    soon as decoding succeeds, so a later cleaning failure leaves it in place
    and a rerun skips straight to cleaning.

    I/O and format errors propagate. With settings.strict, residual reserved
    pixels raise ResidualCollisionError before the clean image is written.
    """
    if store is None:
        store = JsonSidecarStore(settings.sidecar_suffix)
    name = os.path.basename(path)
    buffer = PixelBuffer.open(path)

    skipped = decode_state(store, path) is DecodeState.DECODED
    markers = decode_markers(buffer, store, path, palette)
    result = ImageResult(path=path, markers=markers, skipped=skipped)
    if skipped:
        _log(f'skipping marker generation for {name} (sidecar exists)')
    elif markers:
        _log(f'created sidecar for {name} with {len(markers)} markers')
    else:
        _log(f'no markers found in {name}')

    if not clean:
        return result

    cleaned = sanitize(buffer, palette)
    if cleaned.unresolved:
        if settings.strict:
            raise ResidualCollisionError(path, cleaned.unresolved)
        _log(f'warning: {len(cleaned.unresolved)} pixel(s) in {name} still match a reserved colour')

    out = clean_path_for(path, settings)
    os.makedirs(os.path.dirname(out) or '.', exist_ok=True)
    buffer.save(out)
    result.clean_path = out
    result.replaced = cleaned.replaced
    result.unresolved = cleaned.unresolved
    _log(f'cleaned {cleaned.replaced} marker pixels in {name}, saved to {out}')
    return result


def _process_isolated(
    path: str,
    settings: Settings,
    store: SidecarStore | None,
    clean: bool,
    palette: Palette,
) -> ImageResult:
    try:
        return process_image(path, settings, store=store, clean=clean, palette=palette)
    except (OSError, ValueError, MarkerCodecError) as e:
        _log(f'error: {path}: {e}')
        return ImageResult(path=path, error=f'{type(e).__name__}: {e}')


def run_batch(
    paths: list[str],
    settings: Settings,
    store: SidecarStore | None = None,
    clean: bool = True,
    palette: Palette = DEFAULT_PALETTE,
) -> BatchReport:
    """Process every path concurrently. Results keep input order."""
    todo = [p for p in paths if not is_clean_output(p, settings)]
    report = BatchReport()
    if not todo:
        return report

    workers = max(1, min(settings.workers, len(todo)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = pool.map(lambda p: _process_isolated(p, settings, store, clean, palette), todo)
        for result in results:
            report.add(result)
    return report
