"""Custom exception classes for tres.

This module defines the exception hierarchy for Trello API errors
and for local failures (configuration, query directives, output formats).
"""

from __future__ import annotations


class TrelloAPIError(Exception):
    """Base exception for Trello API errors"""

    def __init__(
        self, message: str, status_code: int | None = None, response_text: str | None = None
    ):
        self.status_code = status_code
        self.response_text = response_text
        super().__init__(message)


class TrelloAuthenticationError(TrelloAPIError):
    """Raised when API credentials are invalid or expired (401/403)"""

    pass


class TrelloNotFoundError(TrelloAPIError):
    """Raised when a board, card, or resource is not found (404)"""

    pass


class TrelloRateLimitError(TrelloAPIError):
    """Raised when rate limit is exceeded (429) after retries"""

    pass


class TrelloServerError(TrelloAPIError):
    """Raised when Trello's servers return an error (500/502/503/504)"""

    pass


class TresError(Exception):
    """Base exception for errors raised by tres itself (not by the Trello API)."""

    pass


class ConfigurationError(TresError):
    """Raised when required settings are missing.

    Resolution:
        Export TRELLO_KEY and TRELLO_TOKEN, or put them into a .env file
        in the current directory.
    """

    pass


class UnknownCommandError(TresError):
    """Raised when the CLI is asked to run a command it does not know."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Unknown command {command}")


class QueryDirectiveError(TresError):
    """Raised when an ``@directive`` line in a query cannot be applied.

    Attributes:
        directive: The directive name including the at-sign (e.g. ``@limit``)
        value: The raw value that failed to parse
    """

    def __init__(self, directive: str, value: str, message: str | None = None):
        self.directive = directive
        self.value = value
        super().__init__(message or f"Invalid value for {directive}: {value!r}")


class InvalidOutputFormatError(TresError):
    """Raised when no renderer exists for the requested output format."""

    def __init__(self, output_format: str):
        self.output_format = output_format
        super().__init__(f"invalid output format: {output_format}")


class UnsupportedFormatError(TresError):
    """Raised when a known output format is not available for a command."""

    def __init__(self, output_format: str, command: str):
        self.output_format = output_format
        self.command = command
        super().__init__(f"Format {output_format!r} not supported for the {command} command.")
