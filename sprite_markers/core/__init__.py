"""sprite_markers.core — Foundation layer.

Contains the marker palette, type definitions, pixel buffer adapter, decoder,
sanitizer, sidecar store, settings and report builder.
This module has NO dependencies on sprite_markers.pipeline.
Only stdlib, numpy, and PIL are allowed here.
"""
