"""Exception hierarchy for tasc.

All exceptions inherit from :class:`TascError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`tasc.exit_codes`.
The top-level error handler in :func:`tasc.app.main` catches
``TascError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    TascError (exit 1)
    +-- InvalidUsageError            (exit 2)
    |   +-- MissingPathParamError    (exit 2)
    +-- SpecFetchError               (exit 6)
    +-- SpecParseError               (exit 7)
    |   +-- DuplicateOperationIdError (exit 7)
    +-- RegeneratorError             (exit 8)
    +-- GenerationError              (exit 9)
    +-- ConfigError                  (exit 1)

Errors scoped to a single call (:class:`MissingPathParamError`) or a single
poll cycle (:class:`SpecFetchError`, :class:`RegeneratorError` inside
``tasc watch``) are contained by their callers. Only configuration errors and
one-shot generation failures reach :func:`tasc.app.main`.
"""

from __future__ import annotations

from typing import Sequence

from tasc.exit_codes import (
    EXIT_FETCH_ERROR,
    EXIT_GENERATION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_REGENERATOR_FAILURE,
    EXIT_SPEC_PARSE_ERROR,
)


class TascError(Exception):
    """Base exception for all tasc errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`tasc.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(TascError):
    """Raised for invalid CLI arguments, call shapes, or call options."""

    exit_code = EXIT_INVALID_USAGE


class MissingPathParamError(InvalidUsageError):
    """Raised when a call omits one or more placeholder values of a path template.

    The whole template is scanned before this is raised, so :attr:`missing`
    lists every absent name (each once, in template order), not just the
    first one.

    Attributes:
        missing: The placeholder names with no value.
        template: The path template that was being interpolated.
    """

    def __init__(self, missing: Sequence[str], template: str) -> None:
        self.missing = list(missing)
        self.template = template
        super().__init__(
            f"Missing required path param(s): {', '.join(self.missing)} "
            f"for template: {template}"
        )


class SpecFetchError(TascError):
    """Raised on network or HTTP failures while fetching the API description."""

    exit_code = EXIT_FETCH_ERROR


class SpecParseError(TascError):
    """Raised when the API description cannot be parsed or has an unusable shape."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class DuplicateOperationIdError(SpecParseError):
    """Raised when two operations in one description share an ``operationId``.

    Attributes:
        operation_id: The colliding identifier.
        locations: ``"METHOD /path"`` strings of the colliding operations.
    """

    def __init__(self, operation_id: str, locations: Sequence[str]) -> None:
        self.operation_id = operation_id
        self.locations = list(locations)
        super().__init__(
            f"Duplicate operationId '{operation_id}' used by: "
            + ", ".join(self.locations)
        )


class RegeneratorError(TascError):
    """Raised when a regeneration step cannot be started or exits abnormally."""

    exit_code = EXIT_REGENERATOR_FAILURE


class GenerationError(TascError):
    """Raised when generated files cannot be written to disk."""

    exit_code = EXIT_GENERATION_ERROR


class ConfigError(TascError):
    """Raised for configuration problems (missing or invalid ``tasc.json``)."""

    exit_code = EXIT_GENERIC_FAILURE
