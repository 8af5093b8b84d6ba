"""Operations command -- list the operations that would be generated.

Implements ``tasc operations``: extracts the operation table from the
configured API description (or a local file) and prints it as a table,
one row per ``operationId``, in the same order as the generated
``ApiOperations`` bindings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from tasc.output import error, info, print_table


def operations_command(
    spec_file: Optional[Path] = typer.Option(
        None,
        "--spec-file",
        "-s",
        help="Read a local API description instead of fetching.",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    saved: bool = typer.Option(
        False, "--saved", help="Read the last saved copy (outputs.doc_file)."
    ),
) -> None:
    """List operations with their method, path, and call shape.

    Example::

        tasc operations
        tasc operations --saved --json
    """
    from tasc.config import load_config
    from tasc.exceptions import TascError
    from tasc.parser import extract_operations, fetch_spec, parse_spec, read_spec_file
    from tasc.paths import get_resolved_paths

    try:
        if spec_file is not None:
            fetched = read_spec_file(spec_file)
        else:
            config = load_config()
            if saved:
                fetched = read_spec_file(get_resolved_paths(config).doc_file)
            else:
                fetched = fetch_spec(config.api_doc_url, config.fetch_timeout_seconds)
        operations = extract_operations(parse_spec(fetched.content))
    except TascError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code)

    rows = [
        [
            op.operation_id,
            op.method.value.upper(),
            op.path_template,
            ", ".join(op.path_param_names),
            "yes" if op.has_request_body else "",
            op.summary,
        ]
        for op in operations
    ]
    print_table(
        ["operationId", "method", "path", "path params", "body", "summary"],
        rows,
        title="Operations",
    )
    info(f"{len(operations)} operations")
