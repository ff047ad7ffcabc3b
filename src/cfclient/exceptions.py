"""Exception hierarchy for cfclient.

Every failure surfaced by the library is a :class:`CFClientError` (or one
of its subclasses) with the same externally meaningful fields: ``name``,
``message``, ``cause``, ``stack`` and ``kind``.  The only exception to this
rule are transport failures during an authenticated resource call, which
propagate as the underlying :class:`httpx.TransportError`.

Subclass hierarchy::

    CFClientError            (kind depends on construction)
    +-- ConfigError          (VALIDATION)
    +-- TransportError       (TRANSPORT)
    +-- StatusCodeError      (PROTOCOL_STATUS)
    +-- OAuthError           (OAUTH_EXCHANGE)
    +-- NotConnectedError    (NOT_CONNECTED)
"""

from __future__ import annotations

import enum
import traceback
from typing import Any, Optional

ERROR_TYPE = "CFClientException"


class ErrorKind(str, enum.Enum):
    """Category of a :class:`CFClientError`."""

    GENERIC = "generic"
    VALIDATION = "validation"
    TRANSPORT = "transport"
    PROTOCOL_STATUS = "protocol_status"
    OAUTH_EXCHANGE = "oauth_exchange"
    NOT_CONNECTED = "not_connected"


class CFClientError(Exception):
    """Base exception for all cfclient errors.

    Args:
        message: Human-readable error description.
        cause: The deeper cause.  Either another exception or a string
            with more detail.
    """

    kind: ErrorKind = ErrorKind.GENERIC
    type: str = ERROR_TYPE

    def __init__(self, message: str, cause: Any = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.name = type(self).__name__

    @classmethod
    def wrap(cls, exc: BaseException, message: Optional[str] = None) -> CFClientError:
        """Normalize a native exception into this error type.

        The ``name`` and ``message`` of the result are copied from *exc*
        (unless *message* overrides the latter), ``cause`` is *exc* itself
        and the result is chained to it so that :attr:`stack` includes the
        original traceback.
        """
        error = cls(message if message is not None else str(exc), exc)
        error.name = type(exc).__name__
        error.__cause__ = exc
        return error

    @property
    def stack(self) -> str:
        """Formatted traceback of this error, empty if it was never raised."""
        if self.__traceback__ is None and self.__cause__ is None:
            return ""
        return "".join(traceback.format_exception(type(self), self, self.__traceback__))

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message} ::: {self.cause}"


class ConfigError(CFClientError):
    """Raised when the client is given an invalid configuration or a credential
    source cannot be resolved."""

    kind = ErrorKind.VALIDATION


class TransportError(CFClientError):
    """Raised on network-level failures (DNS, connection refused, TLS) while
    talking to the API info endpoint."""

    kind = ErrorKind.TRANSPORT


class StatusCodeError(CFClientError):
    """Raised when the API answers with an unexpected HTTP status.

    The status code appears in both ``message`` and ``cause``.

    Args:
        status_code: The HTTP status returned by the server.
        message: Optional override for the default message.
    """

    kind = ErrorKind.PROTOCOL_STATUS

    def __init__(self, status_code: int, message: Optional[str] = None):
        detail = f"Failed with status code: {status_code}"
        super().__init__(message or detail, detail)
        self.status_code = status_code


class OAuthError(CFClientError):
    """Raised when the OAuth2 token endpoint rejects a grant or cannot be reached.

    Args:
        message: Human-readable error description.
        cause: The OAuth error payload or the underlying exception.
        status_code: HTTP status returned by the token endpoint, if any.
        error: The OAuth2 ``error`` code from the response body, if any.
        error_description: The OAuth2 ``error_description``, if any.
    """

    kind = ErrorKind.OAUTH_EXCHANGE

    def __init__(
        self,
        message: str,
        cause: Any = None,
        status_code: Optional[int] = None,
        error: Optional[str] = None,
        error_description: Optional[str] = None,
    ):
        super().__init__(message, cause)
        self.status_code = status_code
        self.error = error
        self.error_description = error_description


class NotConnectedError(CFClientError):
    """Raised when a request is made before a successful ``connect()``."""

    kind = ErrorKind.NOT_CONNECTED
