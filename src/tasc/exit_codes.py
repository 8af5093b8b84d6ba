"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~tasc.exceptions.TascError` subclass.
CI scripts that run ``tasc generate`` can inspect the exit code to tell a
network problem from a broken spec without parsing stderr.

Example::

    $ tasc generate
    $ echo $?
    6   # EXIT_FETCH_ERROR -- the API description URL could not be reached
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (also used for configuration errors)."""

EXIT_INVALID_USAGE = 2
"""The command or call was invoked with invalid arguments."""

EXIT_FETCH_ERROR = 6
"""The API description could not be fetched (timeout, DNS, HTTP error status)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The API description could not be parsed or has an unusable shape."""

EXIT_REGENERATOR_FAILURE = 8
"""A regeneration step exited abnormally."""

EXIT_GENERATION_ERROR = 9
"""Generated files could not be written."""

EXIT_INTERRUPTED = 130
"""The process was interrupted with Ctrl-C."""
