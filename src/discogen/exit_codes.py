"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~discogen.exceptions.DiscogenError` subclass.

Example::

    $ discogen generate --api bogus:v1
    $ echo $?
    2   # EXIT_INVALID_USAGE -- no API matched
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or matched nothing."""

EXIT_FETCH_ERROR = 6
"""A discovery document could not be retrieved (timeout, DNS, HTTP error)."""

EXIT_DOCUMENT_ERROR = 7
"""A discovery document is malformed or uses an unsupported shape."""

EXIT_GENERATE_ERROR = 8
"""Generated source failed validation or could not be written."""

EXIT_PARTIAL_FAILURE = 9
"""A batch run finished but at least one API failed to generate."""

EXIT_CANCELLED = 130
"""Interrupted with Ctrl-C (128 + SIGINT)."""
