"""Client surface generator -- render the Python modules a project imports.

Given the operation table and type metadata produced by :mod:`tasc.parser`,
this sub-package writes three modules (by default under ``.tasc/``):

* ``api_types.py`` -- per path/method/status schema table and accessors.
* ``api_operations.py`` -- ``OPERATIONS`` plus the ``ApiOperations`` bindings.
* ``api_client.py`` -- a ready-to-use ``api`` instance.

Sub-modules:

* :mod:`~tasc.generator.operations`, :mod:`~tasc.generator.types`,
  :mod:`~tasc.generator.client` -- one renderer per generated module.
* :mod:`~tasc.generator.writer` -- Jinja2 environment and idempotent writes.
* :mod:`~tasc.generator.pipeline` -- :func:`run_generation`, the end-to-end
  fetch-parse-render-write step.
"""

from tasc.generator.client import render_client_module
from tasc.generator.operations import render_operations_module
from tasc.generator.pipeline import GenerationResult, run_generation
from tasc.generator.types import render_types_module
from tasc.generator.writer import write_generated

__all__ = [
    "GenerationResult",
    "render_client_module",
    "render_operations_module",
    "render_types_module",
    "run_generation",
    "write_generated",
]
