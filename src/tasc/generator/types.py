"""Render the generated ``api_types`` module (schema metadata per path and method)."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from tasc.generator.writer import generated_timestamp, render_template


def render_types_module(
    metadata: Mapping[str, Mapping[str, Any]],
    generated_at: Optional[str] = None,
) -> str:
    """Render the ``api_types`` module source.

    Args:
        metadata: Output of :func:`~tasc.parser.extractor.extract_type_metadata`.
        generated_at: Timestamp for the header; defaults to now.
    """
    return render_template(
        "types.py.j2",
        paths=dict(metadata),
        generated_at=generated_at or generated_timestamp(),
    )
