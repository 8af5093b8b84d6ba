"""Resolve where generated files and the watch cache live on disk."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from tasc.models import OutputsConfig, ResolvedPaths, TascConfig

DEFAULT_OUTPUT_DIR = ".tasc"
CACHE_FILENAME = ".api-cache.json"

DEFAULT_FILENAMES: dict[str, str] = {
    "api_types": "api_types.py",
    "api_operations": "api_operations.py",
    "doc_file": "openapi.json",
    "export_path": "api_client.py",
}


def resolve_output_path(
    outputs: OutputsConfig,
    key: str,
    cwd: Optional[Path] = None,
) -> Path:
    """Resolve one generated file to an absolute path.

    ``outputs.dir`` wins when set (``base_path/dir/<default name>``); otherwise
    the file's own setting is used, falling back to
    ``base_path/.tasc/<default name>``.

    Args:
        outputs: The ``outputs`` block of the project config.
        key: One of :data:`DEFAULT_FILENAMES`.
        cwd: Directory relative paths are resolved from (default: cwd).

    Raises:
        KeyError: If *key* is not a known output.
    """
    default_name = DEFAULT_FILENAMES[key]
    base = (cwd or Path.cwd()) / outputs.base_path

    if outputs.dir:
        return (base / outputs.dir / default_name).resolve()

    specific = getattr(outputs, key)
    if specific:
        return (base / specific).resolve()
    return (base / DEFAULT_OUTPUT_DIR / default_name).resolve()


def get_resolved_paths(config: TascConfig, cwd: Optional[Path] = None) -> ResolvedPaths:
    """Resolve every file location for *config*."""
    outputs = config.outputs
    base = (cwd or Path.cwd()) / outputs.base_path
    cache_file = (base / (outputs.cache_file or CACHE_FILENAME)).resolve()
    return ResolvedPaths(
        cache_file=cache_file,
        **{key: resolve_output_path(outputs, key, cwd) for key in DEFAULT_FILENAMES},
    )
