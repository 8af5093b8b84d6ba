"""Template environment and idempotent writes for generated files.

Every generated module starts with a docstring that carries a
``Last generated:`` line. :func:`write_generated` ignores that line when
comparing old and new content, so regenerating from an unchanged API
description leaves the files (and their modification times) alone.
"""

from __future__ import annotations

import json
import math
import pprint
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from tasc.config import atomic_write
from tasc.exceptions import GenerationError

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``generator/templates/``)."""

_TIMESTAMP_RE = re.compile(r"^Last generated: .*$", re.MULTILINE)


def generated_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


class _FloatLiteral:
    """Stands in for ``nan``/``inf`` so they render as ``float('nan')``."""

    def __init__(self, value: float) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"float({str(self.value)!r})"


def _mark_non_finite(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return _FloatLiteral(value)
    if isinstance(value, dict):
        return {key: _mark_non_finite(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_mark_non_finite(item) for item in value]
    return value


def py_literal(value: Any, indent: int = 0) -> str:
    """Render a JSON-compatible value as a Python literal.

    Values are normalised through JSON first so that YAML-only types (dates)
    become strings. YAML's ``.nan`` and ``.inf`` render as ``float(...)``
    calls. Continuation lines are indented by *indent* spaces.
    """
    normalised = _mark_non_finite(json.loads(json.dumps(value, default=str)))
    text = pprint.pformat(normalised, indent=1, width=88 - indent, sort_dicts=False)
    return text.replace("\n", "\n" + " " * indent)


def doc_text(value: Any) -> str:
    """Flatten *value* into one line that is safe inside a ``\"\"\"`` docstring."""
    text = " ".join(str(value or "").split())
    return text.replace("\\", "\\\\").replace('"', '\\"')


def create_jinja_env() -> Environment:
    """Create the Jinja2 environment for the ``.py.j2`` templates.

    Autoescape is disabled for ``.py.j2`` files since they produce Python
    source, not HTML. ``pyrepr`` renders literals and ``doc`` makes text
    safe for docstrings.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("py.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["pyrepr"] = py_literal
    env.filters["doc"] = doc_text
    return env


def render_template(template_name: str, **context: Any) -> str:
    """Render one template from :data:`TEMPLATE_DIR` with *context*."""
    return create_jinja_env().get_template(template_name).render(**context)


def _without_timestamp(text: str) -> str:
    return _TIMESTAMP_RE.sub("", text)


def write_generated(path: Path, content: str) -> bool:
    """Write a generated module unless only its timestamp would change.

    Args:
        path: Destination file. Parent directories are created.
        content: The rendered module source.

    Returns:
        ``True`` if the file was written, ``False`` if it was left untouched.

    Raises:
        GenerationError: If the file cannot be read or written.
    """
    try:
        if path.is_file() and _without_timestamp(
            path.read_text(encoding="utf-8")
        ) == _without_timestamp(content):
            return False
        atomic_write(path, content)
    except OSError as exc:
        raise GenerationError(f"Failed to write {path}: {exc}") from exc
    return True


def write_spec(path: Path, content: bytes) -> bool:
    """Save the fetched API description verbatim, skipping identical content.

    Returns:
        ``True`` if the file was written.

    Raises:
        GenerationError: If the file cannot be written.
    """
    try:
        if path.is_file() and path.read_bytes() == content:
            return False
        atomic_write(path, content)
    except OSError as exc:
        raise GenerationError(f"Failed to write {path}: {exc}") from exc
    return True
