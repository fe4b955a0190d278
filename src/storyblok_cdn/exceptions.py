"""Exception hierarchy for storyblok-cdn.

All exceptions inherit from :class:`StoryblokError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`storyblok_cdn.exit_codes`. Library callers catch the subclasses they
care about; the command-line entry point in :func:`storyblok_cdn.app.main`
catches ``StoryblokError`` and exits with the matching code.

Subclass hierarchy::

    StoryblokError              (exit 1)
    +-- InvalidQueryError       (exit 2)
    +-- TransportError          (exit 6)
    +-- UnexpectedStatusError   (exit 5, 3 for 401/403, 4 for 404)
    +-- MalformedResponseError  (exit 7)
    +-- ConfigError             (exit 1)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from storyblok_cdn.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MALFORMED_RESPONSE,
    EXIT_NOT_FOUND,
    EXIT_UNEXPECTED_STATUS,
)

if TYPE_CHECKING:
    import httpx


class StoryblokError(Exception):
    """Base exception for all storyblok-cdn errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`storyblok_cdn.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidQueryError(StoryblokError):
    """Raised for contradictory, missing, or empty query options.

    Always raised before any network traffic is sent.
    """

    exit_code = EXIT_INVALID_USAGE


class TransportError(StoryblokError):
    """Raised when a request cannot complete (timeout, connection refused, undecodable body)."""

    exit_code = EXIT_CONNECTION_ERROR


class UnexpectedStatusError(StoryblokError):
    """Raised when the delivery API answers with anything other than HTTP 200.

    Redirects count as failures too. The offending status code is kept on
    :attr:`status_code` and the raw response on :attr:`response`.

    Args:
        message: Human-readable error description.
        status_code: The HTTP status code that was received.
        response: The raw :class:`httpx.Response`, when available.
    """

    exit_code = EXIT_UNEXPECTED_STATUS

    def __init__(
        self,
        message: str,
        status_code: int,
        response: Optional[httpx.Response] = None,
    ):
        if status_code in (401, 403):
            exit_code: int | None = EXIT_AUTH_FAILURE
        elif status_code == 404:
            exit_code = EXIT_NOT_FOUND
        else:
            exit_code = None
        super().__init__(message, exit_code=exit_code)
        self.status_code = status_code
        self.response = response


class MalformedResponseError(StoryblokError):
    """Raised when a response body is not JSON or lacks the expected envelope key."""

    exit_code = EXIT_MALFORMED_RESPONSE


class ConfigError(StoryblokError):
    """Raised for configuration problems (missing token, invalid JSON, bad token sources)."""

    exit_code = EXIT_GENERIC_FAILURE
