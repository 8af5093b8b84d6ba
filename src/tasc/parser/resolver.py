"""Inline internal ``$ref`` pointers so schemas can be read in place.

The type metadata written into the generated ``types`` module must be
self-contained: a consumer asking for the response schema of
``GET /users/{id}`` should get the schema, not ``{"$ref":
"#/components/schemas/User"}``. :func:`resolve_refs` walks a copy of the
document and replaces every internal reference with its target.

Self-referencing schemas (trees, linked lists) keep their ``$ref`` dict at
the point where the cycle closes. References to other documents
(``other.yaml#/...``) are left untouched, since tasc never fetches more than
the one configured URL.
"""

from __future__ import annotations

from typing import Any

from tasc.exceptions import SpecParseError


def resolve_refs(spec: dict[str, Any]) -> dict[str, Any]:
    """Return a new document with every internal ``$ref`` inlined.

    The input is not modified.

    Raises:
        SpecParseError: If an internal pointer names a location that does not
            exist in *spec*.

    Example::

        resolved = resolve_refs(spec)
        schema = resolved["paths"]["/pets"]["get"]["responses"]["200"]
    """
    return _walk(spec, spec, ())


def lookup_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Follow the JSON Pointer in ``#/...`` reference *ref* through *root*.

    ``~1`` and ``~0`` escapes are decoded per RFC 6901.

    Raises:
        SpecParseError: If any segment cannot be followed.
    """
    current: Any = root
    for raw in ref[2:].split("/"):
        segment = raw.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            raise SpecParseError(f"Cannot resolve $ref '{ref}': '{segment}' not found")
    return current


def _walk(node: Any, root: dict[str, Any], stack: tuple[str, ...]) -> Any:
    # stack holds the refs being expanded on the current branch only, so two
    # sibling uses of the same schema are both inlined.
    if isinstance(node, list):
        return [_walk(item, root, stack) for item in node]
    if not isinstance(node, dict):
        return node

    ref = node.get("$ref")
    if isinstance(ref, str) and ref.startswith("#/"):
        if ref in stack:
            return dict(node)
        return _walk(lookup_pointer(ref, root), root, stack + (ref,))

    return {key: _walk(value, root, stack) for key, value in node.items()}
