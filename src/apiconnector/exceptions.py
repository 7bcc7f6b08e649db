"""Exception hierarchy for apiconnector.

All exceptions inherit from :class:`ApiConnectorError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`apiconnector.exit_codes`. The CLI entry point in
:func:`apiconnector.app.main` catches ``ApiConnectorError`` and exits with
the matching code.

Operational failures (API unreachable, non-2xx status, cache miss) are not
exceptions: connectors report them as ``None`` or ``False`` and log them.
Only configuration problems and failed durable cache writes are raised.

Subclass hierarchy::

    ApiConnectorError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ConfigError         (exit 3)
    |   +-- UnknownActionError
    +-- CacheError          (exit 4)
    +-- RequestFailedError  (exit 5)
    +-- NoDataError         (exit 6)
"""

from apiconnector.exit_codes import (
    EXIT_CACHE_ERROR,
    EXIT_CONFIG_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NO_DATA,
    EXIT_REQUEST_FAILED,
)


class ApiConnectorError(Exception):
    """Base exception for all apiconnector errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ApiConnectorError):
    """Raised for invalid CLI arguments such as a malformed ``-P`` pair."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(ApiConnectorError):
    """Raised when settings are missing, unreadable, or fail validation."""

    exit_code = EXIT_CONFIG_ERROR


class UnknownActionError(ConfigError):
    """Raised when an action name has no entry in the ``actions`` mapping.

    Args:
        action_name: The requested action.
        known: The action names that are configured.
    """

    def __init__(self, action_name: str, known: list[str] | None = None):
        self.action_name = action_name
        self.known = sorted(known or [])
        message = f"Unknown action '{action_name}'"
        if self.known:
            message += f" (configured: {', '.join(self.known)})"
        super().__init__(message)


class CacheError(ApiConnectorError):
    """Raised when a persistent cache store cannot be read or written."""

    exit_code = EXIT_CACHE_ERROR


class RequestFailedError(ApiConnectorError):
    """Raised by the CLI when a POST was not accepted by the API."""

    exit_code = EXIT_REQUEST_FAILED


class NoDataError(ApiConnectorError):
    """Raised by the CLI when a fetch returned no data."""

    exit_code = EXIT_NO_DATA
