"""Render the ready-to-use ``api_client`` module.

The module instantiates a client with the generated operations attached,
pointing at the origin of the configured ``api_doc_url`` unless the
``API_URL`` environment variable says otherwise.
"""

from __future__ import annotations

from typing import Optional, Sequence
from urllib.parse import urlsplit

from tasc.generator.operations import plan_bindings
from tasc.generator.writer import generated_timestamp, render_template
from tasc.models import DEFAULT_API_DOC_URL, Operation, TascConfig


def api_origin(url: str) -> str:
    """Return ``scheme://host[:port]`` of *url*.

    Falls back to the origin of the default documentation URL when *url*
    has no scheme or host.
    """
    parts = urlsplit(url or DEFAULT_API_DOC_URL)
    if not parts.scheme or not parts.netloc:
        parts = urlsplit(DEFAULT_API_DOC_URL)
    return f"{parts.scheme}://{parts.netloc}"


def _example_call(operations: Sequence[Operation]) -> str:
    if not operations:
        return "<operationId>(...)"
    binding = plan_bindings(operations[:1])[0]
    args = []
    if binding.params_fields:
        args.append("{" + ", ".join(f'"{key}": ...' for key in binding.params_fields) + "}")
    if binding.operation.has_request_body:
        args.append("{...}")
    return f"{binding.method_name}({', '.join(args)})"


def render_client_module(
    config: TascConfig,
    operations_import: str = "api_operations.py",
    generated_at: Optional[str] = None,
    operations: Sequence[Operation] = (),
) -> str:
    """Render the ``api_client`` module source.

    Args:
        config: Project configuration; only ``api_doc_url`` is used.
        operations_import: Path of the operations module relative to the
            client module.
        generated_at: Timestamp for the header; defaults to now.
        operations: Used to show a realistic call in the module docstring.
    """
    return render_template(
        "api_client.py.j2",
        base_url=api_origin(config.api_doc_url),
        operations_import=operations_import,
        example_operation=_example_call(operations),
        generated_at=generated_at or generated_timestamp(),
    )
