"""
Exception hierarchy for the network monitor.

Probe failures are never raised out of a prober; they are rendered into the
error text of a failed ProbeResult. Storage errors are raised to the caller,
which decides whether they are fatal.
"""

import asyncio
from typing import Optional


class NetmonError(Exception):
    """Base class for all errors raised by the network monitor."""


class ProbeFailure(NetmonError):
    """Base class for failures recorded on a ProbeResult."""


class TransportError(ProbeFailure):
    """
    No response was received: DNS failure, refused connection, timeout, etc.

    The string form is the human-readable description stored as error text.
    """

    def __init__(self, url: str, cause: BaseException) -> None:
        self.url: str = url
        self.cause: BaseException = cause
        detail = str(cause)
        if not detail:
            # Timeouts usually carry no message of their own
            is_timeout = isinstance(cause, (TimeoutError, asyncio.TimeoutError))
            detail = "request timed out" if is_timeout else "no details"
        super().__init__(f"{type(cause).__name__}: {detail}")


class NonSuccessStatus(ProbeFailure):
    """
    A response was received but its status was not 200 OK.

    Carries the reason phrase and either a bounded snippet of the body or the
    error that prevented reading it.
    """

    def __init__(
        self,
        status_code: int,
        reason: str,
        content: str = "",
        read_error: Optional[BaseException] = None,
    ) -> None:
        self.status_code: int = status_code
        self.reason: str = reason
        self.content: str = content
        self.read_error: Optional[BaseException] = read_error
        if read_error is not None:
            message = f"HTTP {reason}, failed reading response body: {read_error}"
        else:
            message = f'HTTP {reason}, Content: "{content}"'
        super().__init__(message)


class StorageUnavailable(NetmonError):
    """The result store cannot be opened or migrated."""


class PersistenceError(NetmonError):
    """A single result could not be written to the store."""


class QueryFailure(NetmonError):
    """Recent results could not be read from the store."""
