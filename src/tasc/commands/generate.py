"""Generate command -- run the generation pipeline once.

Implements ``tasc generate``: fetch the API description from
``api_doc_url`` (or read it from ``--spec-file``), then write the types,
operations, and client modules. Unchanged files are left alone.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from tasc.output import configure_logging, error, info, success


def generate_command(
    spec_file: Optional[Path] = typer.Option(
        None,
        "--spec-file",
        "-s",
        help="Generate from a local API description instead of fetching.",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Fetch the API description and generate the client modules.

    Raises:
        typer.Exit: With the error's exit code on config, fetch, parse, or
            write failures.

    Example::

        tasc generate
        tasc generate --spec-file openapi.json
    """
    from tasc.config import load_config
    from tasc.exceptions import TascError
    from tasc.generator import run_generation

    configure_logging()
    try:
        config = load_config()
        spec_bytes = spec_file.read_bytes() if spec_file is not None else None
        result = run_generation(config, spec_bytes=spec_bytes)
    except TascError as exc:
        error(f"Generation failed: {exc}")
        raise typer.Exit(code=exc.exit_code)

    for path in result.written:
        info(f"  wrote     {path}")
    for path in result.unchanged:
        info(f"  unchanged {path}")
    success(f"Generated {result.operation_count} operations")
