"""Init command -- create the project's ``tasc.json``.

Implements the ``tasc init`` top-level command, the entry point for
first-time setup. It writes a default :class:`~tasc.models.TascConfig` to
``./tasc.json`` and refuses to replace an existing config (``tasc.json``,
``tasc.yaml`` or ``tasc.yml``) unless ``--force`` is given.
"""

from __future__ import annotations

import typer

from tasc.output import error, info, success, suggest


def init_command(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing config file."
    ),
) -> None:
    """Create a default tasc.json in the current directory.

    Raises:
        typer.Exit: With code 1 if a config already exists and ``--force``
            was not given, or if the file cannot be written.

    Example::

        tasc init
        tasc init --force
    """
    from tasc.config import write_default_config
    from tasc.exceptions import ConfigError

    try:
        path = write_default_config(force=force)
    except ConfigError as exc:
        error(str(exc))
        suggest("Use --force to overwrite: tasc init --force")
        raise typer.Exit(code=exc.exit_code)
    except OSError as exc:
        error(f"Failed to create config file: {exc}")
        raise typer.Exit(code=1)

    success(f"Created {path.name}")
    info(f"Location: {path}")
    suggest("Edit api_doc_url to point at your API's OpenAPI document")
    suggest("Run 'tasc generate' once, or 'tasc watch' to regenerate on changes")
