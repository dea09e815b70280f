"""Exception types raised by the addEvents client and its helpers."""

from __future__ import annotations


class AddEventsError(Exception):
    """Base class for all addEvents failures."""


class ConfigurationError(AddEventsError, ValueError):
    """Raised for an invalid endpoint URL or missing settings."""


class TransportError(AddEventsError):
    """Raised when the request could not be sent or the response not read."""


class SerializationError(AddEventsError):
    """Raised when a batch cannot be encoded as an addEvents payload."""


class ProtocolError(AddEventsError):
    """Raised when the server answered but did not accept the batch."""

    def __init__(
        self,
        http_status: int,
        status: str | None = None,
        message: str | None = None,
        detail: str = "",
    ):
        self.http_status = http_status
        self.status = status
        self.message = message
        text = (
            f"addEvents failed with http code {http_status}, "
            f"status {status!r}, message {message!r}"
        )
        if detail:
            text = f"{text} ({detail})"
        super().__init__(text)
