"""Numeric process exit codes for the ``apiconnector`` CLI.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~apiconnector.exceptions.ApiConnectorError` subclass.
Shell wrappers can inspect the exit code to tell a missing response apart
from a broken settings file without parsing stderr.

Example::

    $ apiconnector fetch forecast -P city=Berlin
    $ echo $?
    6   # EXIT_NO_DATA -- the API could not be reached and nothing was cached
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_CONFIG_ERROR = 3
"""The settings could not be loaded, or an unknown action was requested."""

EXIT_CACHE_ERROR = 4
"""A persistent cache could not be read or written."""

EXIT_REQUEST_FAILED = 5
"""A POST request was not accepted by the remote API."""

EXIT_NO_DATA = 6
"""A fetch produced no data (API unreachable and no fallback entry)."""
