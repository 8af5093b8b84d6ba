"""Config command -- show the effective project configuration.

Implements ``tasc config``: locates the project config file, validates it
(environment overrides included) and prints it as formatted output. With
``--paths`` it prints the resolved locations of every generated file
instead.
"""

from __future__ import annotations

import typer

from tasc.output import error, format_response, info, suggest


def config_command(
    paths: bool = typer.Option(
        False, "--paths", help="Show resolved output file locations instead."
    ),
) -> None:
    """Show the current configuration.

    Example::

        tasc config
        tasc config --json
        tasc config --paths
    """
    from tasc.config import find_config_file, load_config
    from tasc.exceptions import ConfigError
    from tasc.paths import get_resolved_paths

    config_path = find_config_file()
    if config_path is None:
        error("No config file found.")
        suggest("Run 'tasc init' to create one.")
        raise typer.Exit(code=1)

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code)

    info(f"Config file: {config_path}")
    if paths:
        format_response(get_resolved_paths(config).model_dump(mode="json"))
    else:
        format_response(config.model_dump(mode="json"))
