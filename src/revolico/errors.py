"""
Failure kinds raised across the client.

Store errors mirror how the Gist can fail us: the wire broke, the
token was refused, the content was garbage, or the gist is gone.
Callers catch them at the call site and decide what the user sees.
"""

from __future__ import annotations


class RevolicoError(Exception):
    """Base class for every error raised by the client."""


class StoreError(RevolicoError):
    """The remote document store could not complete a request."""


class TransportError(StoreError):
    """Network failure, timeout, or an unexpected HTTP status."""


class AuthError(StoreError):
    """Missing upstream credential, or the store rejected it."""


class DecodeError(StoreError):
    """Remote content is not a JSON object we can read."""


class NotFoundError(StoreError):
    """The remote document does not exist."""


class ConflictError(StoreError):
    """The remote document moved since the local copy was read."""


class InvalidCredentials(RevolicoError):
    """Admin username or password did not match."""


class SessionStateError(RevolicoError):
    """Operation not allowed in the current admin session state."""
