"""Project configuration discovery, loading, and atomic file writes.

This module handles all persistent configuration for tasc:

* **Project config** -- a ``tasc.json`` (or ``tasc.yaml`` / ``tasc.yml``)
  in the working directory, deserialised into a
  :class:`~tasc.models.TascConfig`. See :func:`find_config_file` and
  :func:`load_config`.
* **Environment overrides** -- ``TASC_API_DOC_URL`` and
  ``TASC_POLL_INTERVAL_MS`` win over values from the file.
* **Data directory** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.tasc/`` on macOS and Windows. Only crash logs live there; see
  :func:`get_data_dir`.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) to prevent data loss on crash or power failure. The
generator and the watch cache reuse it for their own files.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from tasc.exceptions import ConfigError
from tasc.models import TascConfig

_APP_NAME = "tasc"

CONFIG_FILENAMES: tuple[str, ...] = ("tasc.json", "tasc.yaml", "tasc.yml")
"""Project config file names, in discovery order."""

ENV_API_DOC_URL = "TASC_API_DOC_URL"
ENV_POLL_INTERVAL_MS = "TASC_POLL_INTERVAL_MS"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/tasc/`` (default ``~/.local/share/tasc/``).
    On macOS/Windows: ``~/.tasc/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: Union[str, bytes]) -> None:
    """Write *data* to *path* atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    Parent directories are created as needed. Text is written as UTF-8;
    ``bytes`` are written verbatim.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    binary = isinstance(data, bytes)
    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="wb" if binary else "w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding=None if binary else "utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Project config ---


def find_config_file(directory: Optional[Path] = None) -> Optional[Path]:
    """Return the first config file present in *directory* (default: cwd).

    Candidates are tried in :data:`CONFIG_FILENAMES` order.
    """
    base = directory or Path.cwd()
    for name in CONFIG_FILENAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def config_exists(directory: Optional[Path] = None) -> bool:
    """Check whether any project config file exists in *directory*."""
    return find_config_file(directory) is not None


def _read_config_data(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        return yaml.safe_load(text) or {}
    return json.loads(text)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    url = os.environ.get(ENV_API_DOC_URL)
    if url:
        data["api_doc_url"] = url
    interval = os.environ.get(ENV_POLL_INTERVAL_MS)
    if interval:
        try:
            data["poll_interval_ms"] = int(interval)
        except ValueError as exc:
            raise ConfigError(
                f"{ENV_POLL_INTERVAL_MS} must be an integer, got {interval!r}"
            ) from exc
    return data


def load_config(path: Optional[Path] = None) -> TascConfig:
    """Load and validate the project configuration.

    Args:
        path: Explicit config file. When omitted, :func:`find_config_file`
            searches the working directory.

    Returns:
        The validated :class:`~tasc.models.TascConfig`, with environment
        overrides applied.

    Raises:
        ConfigError: If no config file exists, the file cannot be parsed, or
            its content fails validation.
    """
    if path is None:
        path = find_config_file()
    if path is None or not path.is_file():
        raise ConfigError(
            "No tasc config found. Run 'tasc init' to create tasc.json."
        )

    try:
        data = _read_config_data(path)
    except (json.JSONDecodeError, yaml.YAMLError, OSError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config at {path}: expected a mapping at the top level")

    data = _apply_env_overrides(dict(data))
    try:
        return TascConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: TascConfig, path: Optional[Path] = None) -> Path:
    """Persist *config* atomically as JSON.

    Args:
        config: The configuration to save.
        path: Target file. Defaults to ``./tasc.json``.

    Returns:
        The path written.
    """
    target = path or Path.cwd() / CONFIG_FILENAMES[0]
    data = config.model_dump(mode="json", exclude_none=True)
    atomic_write(target, json.dumps(data, indent=2) + "\n")
    return target


def write_default_config(path: Optional[Path] = None, *, force: bool = False) -> Path:
    """Write a default ``tasc.json``.

    Args:
        path: Target file. Defaults to ``./tasc.json``.
        force: Overwrite an existing config instead of refusing.

    Returns:
        The path written.

    Raises:
        ConfigError: If a config already exists and *force* is false.
    """
    target = path or Path.cwd() / CONFIG_FILENAMES[0]
    existing = target if target.is_file() else find_config_file(target.parent)
    if existing is not None and not force:
        raise ConfigError(
            f"Config already exists at {existing}. Use --force to overwrite."
        )
    return save_config(TascConfig(), target)
