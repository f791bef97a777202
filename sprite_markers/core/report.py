"""Report builder — text and JSON output for a marker batch."""

import json
import os
from typing import Any

from sprite_markers.core.types import BatchReport, ImageResult


def _marker_summary(result: ImageResult) -> str:
    counts: dict[str, int] = {}
    for m in result.markers:
        counts[m.type.value] = counts.get(m.type.value, 0) + 1
    return ', '.join(f'{name}:{n}' for name, n in counts.items()) or 'none'


def format_text(report: BatchReport) -> str:
    """Format report as human-readable text."""
    lines = [f'sprite-markers: {len(report.images)} image(s)', '']

    for result in report.images:
        mark = '✓' if result.ok else '✗'
        lines.append(f'── {os.path.basename(result.path)} {mark}')
        if result.error:
            lines.append(f'  error: {result.error}')
            lines.append('')
            continue

        source = 'sidecar' if result.skipped else 'decoded'
        lines.append(f'  markers: {len(result.markers)} ({source}) {_marker_summary(result)}')
        if result.clean_path:
            lines.append(f'  clean: {result.clean_path}  replaced={result.replaced}')
        if result.unresolved:
            lines.append(f'  unresolved: {len(result.unresolved)} pixel(s) {result.unresolved[:5]}')
        lines.append('')

    total = len(report.images)
    if total > 0:
        lines.append(f'PASS {report.pass_count}/{total} images  FAIL {report.fail_count}/{total} images')
    return '\n'.join(lines)


def format_json(report: BatchReport) -> str:
    """Format report as JSON."""
    images: list[dict[str, Any]] = []
    for result in report.images:
        images.append(
            {
                'path': result.path,
                'ok': result.ok,
                'skipped': result.skipped,
                'markers': [m.to_dict() for m in result.markers],
                'clean_path': result.clean_path,
                'replaced': result.replaced,
                'unresolved': [list(p) for p in result.unresolved],
                'error': result.error,
            }
        )

    obj = {
        'images': images,
        'summary': {
            'total': len(report.images),
            'pass': report.pass_count,
            'fail': report.fail_count,
        },
    }
    return json.dumps(obj, indent=2)
