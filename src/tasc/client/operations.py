"""Read-only mapping of ``operationId`` to bound callables.

The generated ``operations`` module subclasses :class:`BoundOperations` as
``ApiOperations``, adding one method per operation and filling in the class
attributes :attr:`~BoundOperations.operations` and
:attr:`~BoundOperations.method_names`. An instance is bound to one client,
so ``api.op.getUserById({"id": 1})`` and ``api.op["getUserById"]({"id": 1})``
are the same call.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Iterator, Mapping, Optional, Union

from tasc.models import HTTPMethod, Operation


class BoundOperations(Mapping[str, Callable[..., Any]]):
    """Operation bindings for one client, iterated in extraction order.

    The base class has no operations; it is what ``client.op`` returns before
    a generated class is attached.
    """

    operations: ClassVar[Mapping[str, Operation]] = {}
    method_names: ClassVar[Mapping[str, str]] = {}

    def __init__(self, client: Any) -> None:
        self._client = client

    @property
    def client(self) -> Any:
        """The client every binding dispatches through."""
        return self._client

    def __getitem__(self, operation_id: str) -> Callable[..., Any]:
        if operation_id not in self.operations:
            raise KeyError(operation_id)
        return getattr(self, self.method_names.get(operation_id, operation_id))

    def __iter__(self) -> Iterator[str]:
        return iter(self.operations)

    def __len__(self) -> int:
        return len(self.operations)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {len(self)} operations>"

    def find(self, path: str, method: Union[HTTPMethod, str]) -> Optional[Operation]:
        """Return the operation registered for *method* on *path*, if any."""
        return find_operation(self.operations, path, method)


def find_operation(
    operations: Mapping[str, Operation],
    path: str,
    method: Union[HTTPMethod, str],
) -> Optional[Operation]:
    """Look up an operation by path template and method."""
    wanted = HTTPMethod(method.lower()) if isinstance(method, str) else method
    for operation in operations.values():
        if operation.path_template == path and operation.method == wanted:
            return operation
    return None
