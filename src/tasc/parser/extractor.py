"""Build the operation table and type metadata from an API description.

This module walks the ``paths`` object of a parsed OpenAPI document and
produces the two inputs of the generator:

* :func:`extract_operations` -- the ordered list of
  :class:`~tasc.models.Operation` records, one per method + path pair that
  carries an ``operationId``. Order is stable: paths in document order, and
  within a path the methods in :class:`~tasc.models.HTTPMethod` order, so the
  generated modules do not churn when the description is re-fetched.
* :func:`extract_type_metadata` -- a plain-dict table of parameter, request
  body, and response schemas per path, method and status, with internal
  ``$ref`` pointers inlined.

Parameter merging follows the OpenAPI rules: path-level parameters provide
defaults, and operation-level parameters override them when they share the
same ``name`` and ``in`` values.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from tasc.exceptions import DuplicateOperationIdError, SpecParseError
from tasc.models import HTTPMethod, Operation
from tasc.parser.resolver import lookup_pointer, resolve_refs

logger = logging.getLogger(__name__)

_PARAM_LOCATIONS = ("path", "query", "header", "cookie")
_JSON_CONTENT_TYPE = "application/json"


def _iter_operations(spec: dict[str, Any]):
    """Yield ``(path, path_item, method, operation)`` in emission order."""
    paths = spec.get("paths")
    if paths is None:
        return
    if not isinstance(paths, dict):
        raise SpecParseError(
            f"'paths' must be a mapping of path templates (got {type(paths).__name__})"
        )

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        for method in HTTPMethod:
            operation = path_item.get(method.value)
            if isinstance(operation, dict):
                yield str(path), path_item, method, operation


def extract_operations(spec: dict[str, Any]) -> list[Operation]:
    """Extract one :class:`~tasc.models.Operation` per identified operation.

    Operations without an ``operationId`` are skipped and logged at debug
    level; they still appear in :func:`extract_type_metadata`. A missing
    ``paths`` key yields an empty list.

    Args:
        spec: The parsed (unresolved) API description.

    Returns:
        Operations in document order.

    Raises:
        SpecParseError: If ``paths`` is present but is not a mapping.
        DuplicateOperationIdError: If two operations share an ``operationId``.

    Example::

        ops = extract_operations(parse_spec(fetch_spec(url).content))
        for op in ops:
            print(op.operation_id, op.location)
    """
    operations: list[Operation] = []
    seen: dict[str, Operation] = {}

    for path, path_item, method, raw in _iter_operations(spec):
        operation_id = raw.get("operationId")
        if not operation_id:
            logger.debug("Skipping %s %s: no operationId", method.value.upper(), path)
            continue

        parameters = _merge_parameters(
            _deref_all(path_item.get("parameters"), spec),
            _deref_all(raw.get("parameters"), spec),
        )
        tags = raw.get("tags")

        operation = Operation(
            operation_id=str(operation_id),
            method=method,
            path_template=path,
            has_request_body=bool(raw.get("requestBody")),
            has_query_params=any(p.get("in") == "query" for p in parameters),
            summary=str(raw.get("summary") or ""),
            description=str(raw.get("description") or ""),
            tags=[str(t) for t in tags] if isinstance(tags, list) else [],
        )

        previous = seen.get(operation.operation_id)
        if previous is not None:
            raise DuplicateOperationIdError(
                operation.operation_id, [previous.location, operation.location]
            )
        seen[operation.operation_id] = operation
        operations.append(operation)

    logger.debug("Extracted %d operations", len(operations))
    return operations


def extract_type_metadata(spec: dict[str, Any]) -> dict[str, dict[str, dict[str, Any]]]:
    """Extract parameter, body, and response schemas for every operation.

    Unlike :func:`extract_operations`, operations without an ``operationId``
    are included: the table is keyed by path and method, not by id.

    Returns:
        ``{path: {method: {"summary", "parameters", "request_body",
        "responses"}}}`` where ``parameters`` maps each location
        (``path``, ``query``, ``header``, ``cookie``) to ``{name: schema}``
        and ``responses`` maps status codes to a schema or ``None``.

    Raises:
        SpecParseError: If ``paths`` is malformed or an internal ``$ref``
            is dangling.
    """
    resolved = resolve_refs(spec)
    table: dict[str, dict[str, dict[str, Any]]] = {}

    for path, path_item, method, raw in _iter_operations(resolved):
        merged = _merge_parameters(
            _as_param_list(path_item.get("parameters")),
            _as_param_list(raw.get("parameters")),
        )
        parameters: dict[str, dict[str, Any]] = {}
        for param in merged:
            location = param.get("in")
            if location in _PARAM_LOCATIONS:
                parameters.setdefault(location, {})[str(param.get("name", ""))] = param.get(
                    "schema", {}
                )

        body = raw.get("requestBody")
        responses = raw.get("responses")

        table.setdefault(path, {})[method.value] = {
            "summary": str(raw.get("summary") or ""),
            "parameters": parameters,
            "request_body": _content_schema(body) if isinstance(body, dict) else None,
            "responses": {
                str(status): _content_schema(response) if isinstance(response, dict) else None
                for status, response in (responses.items() if isinstance(responses, dict) else ())
            },
        }

    return table


# --- Helpers ---


def _as_param_list(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [p for p in value if isinstance(p, dict)]


def _deref_all(value: Any, spec: dict[str, Any]) -> list[dict[str, Any]]:
    """Like :func:`_as_param_list`, following ``#/`` references one level."""
    result: list[dict[str, Any]] = []
    for param in _as_param_list(value):
        ref = param.get("$ref")
        if isinstance(ref, str) and ref.startswith("#/"):
            target = lookup_pointer(ref, spec)
            if isinstance(target, dict):
                param = target
        result.append(param)
    return result


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level entries replace path-level ones with the same
    ``(name, in)`` key.
    """
    overridden = {(p.get("name", ""), p.get("in", "")) for p in op_params}
    merged = [
        p for p in path_params if (p.get("name", ""), p.get("in", "")) not in overridden
    ]
    merged.extend(op_params)
    return merged


def _content_schema(obj: dict[str, Any]) -> Optional[Any]:
    """Return the schema of *obj*'s ``content``, preferring JSON."""
    content = obj.get("content")
    if not isinstance(content, dict):
        return None
    preferred = content.get(_JSON_CONTENT_TYPE)
    if isinstance(preferred, dict) and "schema" in preferred:
        return preferred["schema"]
    for media in content.values():
        if isinstance(media, dict) and "schema" in media:
            return media["schema"]
    return None
