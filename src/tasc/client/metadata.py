"""Accessors over the schema table written into the generated ``types`` module."""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Optional, Union

from tasc.models import HTTPMethod

_DEFAULT_STATUS = "200"


class TypeMetadata(Mapping[str, Mapping[str, Any]]):
    """Per path, method and status schema lookup.

    Wraps the ``PATHS`` table produced by
    :func:`~tasc.parser.extractor.extract_type_metadata`. Lookups of an
    unknown path or method raise :class:`KeyError`.

    Example::

        from generated.types import metadata

        metadata.request_body("/users", "post")
        metadata.response("/users/{id}", "get")         # the 200 schema
        metadata.response("/users", "post", 201)
        metadata.status_codes("/users/{id}", "delete")  # ["204", "404"]
    """

    def __init__(self, paths: Mapping[str, Mapping[str, Any]]) -> None:
        self._paths = paths

    def __getitem__(self, path: str) -> Mapping[str, Any]:
        return self._paths[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def operation(self, path: str, method: Union[HTTPMethod, str]) -> Mapping[str, Any]:
        """The raw metadata entry for *method* on *path*."""
        key = HTTPMethod(method.lower()).value
        methods = self._paths[path]
        if key not in methods:
            raise KeyError(f"{key.upper()} {path}")
        return methods[key]

    def request_body(self, path: str, method: Union[HTTPMethod, str]) -> Optional[Any]:
        """Schema of the request body, or ``None`` when the operation takes none."""
        return self.operation(path, method)["request_body"]

    def response(
        self,
        path: str,
        method: Union[HTTPMethod, str],
        status: Union[int, str, None] = None,
    ) -> Optional[Any]:
        """Schema of the response for *status*.

        Without *status*, the ``200`` response is used when declared,
        otherwise the first declared ``2xx``.

        Raises:
            KeyError: If *status* is given but not declared.
        """
        responses = self.operation(path, method)["responses"]
        if status is not None:
            return responses[str(status)]
        if _DEFAULT_STATUS in responses:
            return responses[_DEFAULT_STATUS]
        for code, schema in responses.items():
            if code.startswith("2"):
                return schema
        return None

    def status_codes(self, path: str, method: Union[HTTPMethod, str]) -> list[str]:
        """Declared response status codes, in document order."""
        return list(self.operation(path, method)["responses"])

    def query_params(self, path: str, method: Union[HTTPMethod, str]) -> dict[str, Any]:
        """Query parameter schemas keyed by parameter name."""
        return dict(self.operation(path, method)["parameters"].get("query", {}))

    def path_params(self, path: str, method: Union[HTTPMethod, str]) -> dict[str, Any]:
        """Path parameter schemas keyed by parameter name."""
        return dict(self.operation(path, method)["parameters"].get("path", {}))
