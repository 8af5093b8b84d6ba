"""API description parser -- fetch, parse, resolve ``$ref`` pointers, and extract operations.

This sub-package is the first half of the tasc pipeline: turning a raw
OpenAPI document (JSON or YAML, remote URL or saved file) into the
:class:`~tasc.models.Operation` table and the type metadata the generator
consumes.

Typical usage::

    from tasc.parser import extract_operations, fetch_spec, parse_spec

    fetched = fetch_spec("http://localhost:8080/doc/openapi.json")
    operations = extract_operations(parse_spec(fetched.content))

Sub-modules:

* :mod:`~tasc.parser.loader` -- I/O layer (URL, file) plus format detection.
* :mod:`~tasc.parser.resolver` -- Recursive ``$ref`` inlining with
  circular-reference detection.
* :mod:`~tasc.parser.extractor` -- Walks ``paths`` and produces operations
  and type metadata.
"""

from tasc.parser.extractor import extract_operations, extract_type_metadata
from tasc.parser.loader import fetch_spec, parse_spec, read_spec_file

__all__ = [
    "extract_operations",
    "extract_type_metadata",
    "fetch_spec",
    "parse_spec",
    "read_spec_file",
]
