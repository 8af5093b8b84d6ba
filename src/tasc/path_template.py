"""Parse and fill ``{name}`` placeholders in OpenAPI path templates.

This module is shared by both halves of tasc: the generator uses it to
decide which bindings take a path-parameters argument, and the runtime
dispatcher uses it to build request URLs. Both sides decide call shape with
the same test, :func:`has_path_params`, so a generated binding and the
dispatcher can never disagree about argument order.

Example::

    >>> extract_path_params("/users/{user_id}/posts/{postId}")
    ['user_id', 'postId']
    >>> interpolate_path("/users/{user_id}", {"user_id": "a b"})
    '/users/a%20b'
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional
from urllib.parse import quote

from tasc.exceptions import MissingPathParamError

_PLACEHOLDER_RE = re.compile(r"\{([^}]+)\}")
_CAMEL_RE = re.compile(r"[-_]([a-z])")

# Characters encodeURIComponent leaves alone besides alphanumerics and "-_.~"
_SAFE_CHARS = "!*'()"


def has_path_params(template: str) -> bool:
    """Return ``True`` if *template* contains an opening brace.

    This is the call-shape test: a template with a brace takes a
    path-parameters argument first, a template without one does not.
    """
    return "{" in template


def extract_path_params(template: str) -> list[str]:
    """Return the distinct placeholder names of *template* in first-occurrence order.

    A name that appears more than once is reported once; it is still
    replaced at every occurrence by :func:`interpolate_path`.

    Args:
        template: A path template such as ``"/users/{id}/posts/{postId}"``.

    Returns:
        The ordered list of distinct names.
    """
    names: list[str] = []
    for match in _PLACEHOLDER_RE.finditer(template):
        name = match.group(1)
        if name not in names:
            names.append(name)
    return names


def interpolate_path(template: str, values: Optional[Mapping[str, Any]] = None) -> str:
    """Replace every placeholder in *template* with its percent-encoded value.

    The whole template is scanned before deciding the outcome. Placeholders
    whose value is absent or ``None`` are left in place and recorded, and
    when the scan finishes a single :class:`~tasc.exceptions.MissingPathParamError`
    names all of them.

    Args:
        template: The path template.
        values: Values keyed by placeholder name.

    Returns:
        The substituted path. A template without placeholders is returned
        unchanged.

    Raises:
        MissingPathParamError: If any placeholder has no value.
    """
    if not has_path_params(template):
        return template

    values = values or {}
    missing: list[str] = []

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        value = values.get(name)
        if value is None:
            if name not in missing:
                missing.append(name)
            return match.group(0)
        return encode_path_value(value)

    result = _PLACEHOLDER_RE.sub(_replace, template)
    if missing:
        raise MissingPathParamError(missing, template)
    return result


def encode_path_value(value: Any) -> str:
    """Percent-encode a single path-segment value.

    Booleans render as ``true``/``false`` to match how JSON-speaking APIs
    spell them; everything else goes through ``str()``.
    """
    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    return quote(text, safe=_SAFE_CHARS)


def to_camel_case(name: str) -> str:
    """Convert a placeholder name to camelCase.

    A ``-`` or ``_`` followed by a lowercase letter becomes that letter in
    upper case; anything else is kept as-is.

    Example::

        >>> to_camel_case("user_id")
        'userId'
        >>> to_camel_case("post-id")
        'postId'
    """
    return _CAMEL_RE.sub(lambda m: m.group(1).upper(), name)
