"""Fetch and parse API descriptions.

This module handles all I/O for obtaining a raw OpenAPI document and turning
it into a Python dictionary. Raw bytes are kept alongside their SHA-256
digest as a :class:`~tasc.models.FetchedSpec`, because the watcher compares
digests of exactly what the server returned, before any parsing.

The public functions are:

* :func:`fetch_spec` -- GET the document from the configured URL.
* :func:`read_spec_file` -- Read a previously saved document from disk.
* :func:`parse_spec` -- Decode JSON (falling back to YAML) into a dict.

Only the minimal shape is checked here: the document must be a mapping.
Everything else is the extractor's business.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

import httpx
import yaml

from tasc.exceptions import SpecFetchError, SpecParseError
from tasc.models import FetchedSpec


def fetch_spec(url: str, timeout: float = 30.0) -> FetchedSpec:
    """Fetch the API description at *url*.

    Redirects are followed. The whole exchange, connect included, is bounded
    by *timeout* seconds.

    Args:
        url: The HTTP(S) URL of the document.
        timeout: Upper bound in seconds.

    Returns:
        The raw response body with its digest.

    Raises:
        SpecFetchError: On timeouts, connection failures, malformed URLs, or
            non-2xx status.
    """
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecFetchError(
            f"HTTP {exc.response.status_code} fetching API description from {url}"
        ) from exc
    except httpx.TimeoutException as exc:
        raise SpecFetchError(
            f"Timed out after {timeout:g}s fetching API description from {url}"
        ) from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise SpecFetchError(f"Failed to fetch API description from {url}: {exc}") from exc

    return FetchedSpec.from_bytes(response.content)


def read_spec_file(path: Path) -> FetchedSpec:
    """Read a saved API description from *path*.

    Raises:
        SpecParseError: If the file does not exist or cannot be read.
    """
    if not path.is_file():
        raise SpecParseError(f"API description not found: {path}")
    try:
        content = path.read_bytes()
    except OSError as exc:
        raise SpecParseError(f"Failed to read API description {path}: {exc}") from exc
    return FetchedSpec.from_bytes(content)


def parse_spec(content: Union[bytes, str], hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON, falling back to YAML.

    Valid JSON is also valid YAML, so JSON is tried first as the stricter
    and faster parser. A ``"yaml"`` hint skips the JSON attempt; a
    ``"json"`` hint disables the YAML fallback.

    Args:
        content: Raw document bytes (decoded as UTF-8) or text.
        hint: Optional format hint, ``"json"`` or ``"yaml"``.

    Returns:
        The parsed document.

    Raises:
        SpecParseError: If the content is empty, undecodable, or not a mapping.
    """
    if isinstance(content, bytes):
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise SpecParseError(f"API description is not valid UTF-8: {exc}") from exc
    else:
        text = content

    if not text.strip():
        raise SpecParseError("API description is empty")

    json_error: Exception | None = None
    if hint != "yaml":
        try:
            return _require_mapping(json.loads(text))
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc

    try:
        return _require_mapping(yaml.safe_load(text))
    except yaml.YAMLError as exc:
        msg = "Failed to parse API description as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"API description must be a JSON/YAML object (got {kind})")
    return result
