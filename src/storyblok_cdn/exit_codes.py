"""Numeric process exit codes used by the ``storyblok-cdn`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~storyblok_cdn.exceptions.StoryblokError` subclass.
Shell scripts can inspect the exit code to tell a bad query apart from an
unreachable API without parsing stderr.

Example::

    $ storyblok-cdn story home --by uuid
    $ echo $?
    4   # EXIT_NOT_FOUND -- the delivery API answered 404
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The query options were contradictory, empty, or out of range."""

EXIT_AUTH_FAILURE = 3
"""The delivery API rejected the access token (HTTP 401 / 403)."""

EXIT_NOT_FOUND = 4
"""The requested story or space was not found (HTTP 404)."""

EXIT_UNEXPECTED_STATUS = 5
"""The delivery API answered with any other non-200 status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_MALFORMED_RESPONSE = 7
"""The response body was not JSON or lacked the expected envelope key."""
