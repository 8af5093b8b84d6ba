"""Render the generated ``api_operations`` module.

The module holds the ordered ``OPERATIONS`` table and an ``ApiOperations``
class with one method per operation. Each method has a fixed signature
derived from the operation and delegates to the client's shared
``dispatch``, passing the :class:`~tasc.models.Operation` record itself::

    def getUserById(self, path_params: GetUserByIdPathParams,
                    options: Optional[RequestOptions] = None) -> Any:
        return self._client.dispatch(OPERATIONS['getUserById'], path_params, options)

Because the record carries the same template and body flag the dispatcher
inspects, a binding's argument order always agrees with the dispatcher's
call-shape resolution.
"""

from __future__ import annotations

import keyword
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from tasc.client.operations import BoundOperations
from tasc.generator.writer import generated_timestamp, render_template
from tasc.models import Operation
from tasc.path_template import has_path_params, to_camel_case

_NON_IDENTIFIER_RE = re.compile(r"\W")

# Names a generated method must not shadow on the ApiOperations class.
_RESERVED_NAMES = frozenset(
    name for name in dir(BoundOperations) if not name.startswith("__")
) | {"operations", "method_names", "client"}


@dataclass(frozen=True)
class Binding:
    """Everything the template needs to emit one operation method."""

    operation: Operation
    method_name: str
    params_type: Optional[str]
    params_fields: dict[str, str]

    @property
    def signature(self) -> str:
        parts = ["self"]
        if self.params_type:
            parts.append(f"path_params: {self.params_type}")
        if self.operation.has_request_body:
            parts.append("body: Any = None")
        parts.append("options: Optional[RequestOptions] = None")
        return ", ".join(parts)

    @property
    def call_args(self) -> str:
        parts = []
        if self.params_type:
            parts.append("path_params")
        if self.operation.has_request_body:
            parts.append("body")
        parts.append("options")
        return ", ".join(parts)


def sanitize_identifier(name: str) -> str:
    """Turn an ``operationId`` into a valid Python identifier.

    Non-word characters become ``_``, a leading digit gets a ``_`` prefix,
    and keywords get a ``_`` suffix.

    Example::

        >>> sanitize_identifier("get-user.by id")
        'get_user_by_id'
        >>> sanitize_identifier("import")
        'import_'
    """
    ident = _NON_IDENTIFIER_RE.sub("_", name) or "_"
    if ident[0].isdigit():
        ident = "_" + ident
    if keyword.iskeyword(ident):
        ident += "_"
    return ident


def _pascal_case(name: str) -> str:
    ident = sanitize_identifier(name).rstrip("_")
    return "".join(part[:1].upper() + part[1:] for part in ident.split("_") if part) or "Operation"


def plan_bindings(operations: Sequence[Operation]) -> list[Binding]:
    """Assign method and type names to *operations*, resolving collisions.

    Two ids that sanitise to the same name (``get-user`` and ``get_user``)
    get numeric suffixes in extraction order. Whether a binding takes
    ``path_params`` is decided by :func:`~tasc.path_template.has_path_params`,
    the same test the dispatcher applies, so a template like ``/files/{}``
    takes one even though it names no parameter.
    """
    bindings: list[Binding] = []
    used_methods: set[str] = set()
    used_types: set[str] = set()

    for operation in operations:
        method_name = _unique(sanitize_identifier(operation.operation_id), used_methods)

        params_type: Optional[str] = None
        fields: dict[str, str] = {}
        if has_path_params(operation.path_template):
            params_type = _unique(f"{_pascal_case(operation.operation_id)}PathParams", used_types)
            fields = {to_camel_case(name): "PathValue" for name in operation.path_param_names}

        bindings.append(
            Binding(
                operation=operation,
                method_name=method_name,
                params_type=params_type,
                params_fields=fields,
            )
        )
    return bindings


def _unique(name: str, used: set[str]) -> str:
    candidate = name
    if candidate in _RESERVED_NAMES:
        candidate += "_"
    counter = 2
    base = candidate
    while candidate in used:
        candidate = f"{base}{counter}"
        counter += 1
    used.add(candidate)
    return candidate


def render_operations_module(
    operations: Sequence[Operation],
    *,
    types_import: str = "api_types.py",
    generated_at: Optional[str] = None,
) -> str:
    """Render the ``api_operations`` module source.

    Args:
        operations: The operation table, in extraction order.
        types_import: Path of the generated types module relative to the
            operations module.
        generated_at: Timestamp for the header; defaults to now.

    Returns:
        Python source code.
    """
    return render_template(
        "operations.py.j2",
        bindings=plan_bindings(operations),
        types_import=types_import,
        generated_at=generated_at or generated_timestamp(),
    )
