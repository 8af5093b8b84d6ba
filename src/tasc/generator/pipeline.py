"""One-shot generation: API description in, three Python modules out.

:func:`run_generation` is what ``tasc generate`` runs and what the watcher
runs in-process after it detects a change. The steps are:

1. Obtain the description (fetch it, take supplied bytes, or read the saved
   copy).
2. Save it to ``doc_file`` (skipped when reading from that file).
3. Parse it and extract the operation table and type metadata.
4. Render and write ``api_types``, ``api_operations``, and ``api_client``.

Files whose content would only differ in the ``Last generated:`` line are
left untouched.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from tasc.generator.client import render_client_module
from tasc.generator.operations import render_operations_module
from tasc.generator.types import render_types_module
from tasc.generator.writer import generated_timestamp, write_generated, write_spec
from tasc.models import FetchedSpec, ResolvedPaths, TascConfig
from tasc.parser import extract_operations, extract_type_metadata, fetch_spec, parse_spec, read_spec_file
from tasc.paths import get_resolved_paths

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of one :func:`run_generation` call."""

    paths: ResolvedPaths
    spec_hash: str
    operation_count: int
    written: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Whether any file was written."""
        return bool(self.written)


def relative_import(target: Path, importer: Path) -> str:
    """POSIX path of *target* relative to the directory of *importer*."""
    return Path(os.path.relpath(target, importer.parent)).as_posix()


def run_generation(
    config: TascConfig,
    *,
    spec_bytes: Optional[bytes] = None,
    from_file: bool = False,
    cwd: Optional[Path] = None,
) -> GenerationResult:
    """Generate the client modules for *config*.

    Args:
        config: The project configuration.
        spec_bytes: Use these bytes instead of fetching.
        from_file: Read the description from the configured ``doc_file``
            instead of fetching (used by the watcher, which has already
            saved the fresh copy there).
        cwd: Directory output paths are resolved from (default: cwd).

    Returns:
        Which files were written and how many operations were generated.

    Raises:
        SpecFetchError: If fetching fails.
        SpecParseError: If the description cannot be parsed, a ``$ref``
            dangles, or operation ids collide.
        GenerationError: If an output file cannot be written.
    """
    paths = get_resolved_paths(config, cwd)

    if spec_bytes is not None:
        fetched = FetchedSpec.from_bytes(spec_bytes)
    elif from_file:
        fetched = read_spec_file(paths.doc_file)
    else:
        logger.info("Fetching API description from %s", config.api_doc_url)
        fetched = fetch_spec(config.api_doc_url, config.fetch_timeout_seconds)

    result = GenerationResult(paths=paths, spec_hash=fetched.hash, operation_count=0)

    if not from_file:
        _record(result, paths.doc_file, write_spec(paths.doc_file, fetched.content))

    spec = parse_spec(fetched.content)
    operations = extract_operations(spec)
    metadata = extract_type_metadata(spec)
    result.operation_count = len(operations)
    generated_at = generated_timestamp()

    types_source = render_types_module(metadata, generated_at=generated_at)
    _record(result, paths.api_types, write_generated(paths.api_types, types_source))

    operations_source = render_operations_module(
        operations,
        types_import=relative_import(paths.api_types, paths.api_operations),
        generated_at=generated_at,
    )
    _record(result, paths.api_operations, write_generated(paths.api_operations, operations_source))

    client_source = render_client_module(
        config,
        operations_import=relative_import(paths.api_operations, paths.export_path),
        generated_at=generated_at,
        operations=operations,
    )
    _record(result, paths.export_path, write_generated(paths.export_path, client_source))

    logger.info(
        "Generated %d operations (%d files written, %d unchanged)",
        result.operation_count,
        len(result.written),
        len(result.unchanged),
    )
    return result


def _record(result: GenerationResult, path: Path, written: bool) -> None:
    if written:
        logger.debug("Wrote %s", path)
        result.written.append(path)
    else:
        logger.debug("Unchanged %s", path)
        result.unchanged.append(path)
