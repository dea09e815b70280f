"""Event, log entry and response models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

# (logfile, server_host, parser)
LogKey = Tuple[Optional[str], Optional[str], Optional[str]]


@dataclass(frozen=True)
class Event:
    """One log record plus its position in the source stream."""

    stream_id: str
    partition: int
    sequence_offset: int
    timestamp_nanos: int
    message: Optional[str] = None

    # Server level fields
    logfile: Optional[str] = None
    server_host: Optional[str] = None
    parser: Optional[str] = None

    @property
    def sequence_id(self) -> str:
        return f"{self.stream_id}-{self.partition}"

    @property
    def log_key(self) -> LogKey:
        """Server level fields only; empty strings count as absent."""
        return (self.logfile or None, self.server_host or None, self.parser or None)


@dataclass(frozen=True)
class LogEntry:
    """One row of the ``logs`` side table."""

    id: int
    attrs: dict = field(default_factory=dict)

    @classmethod
    def from_key(cls, log_id: int, key: LogKey) -> "LogEntry":
        logfile, server_host, parser = key
        attrs = {}
        if server_host:
            attrs["source"] = server_host
        if logfile:
            attrs["logfile"] = logfile
        if parser:
            attrs["parser"] = parser
        return cls(id=log_id, attrs=attrs)


@dataclass(frozen=True)
class AddEventsResponse:
    """Parsed addEvents response body."""

    SUCCESS = "success"

    status: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "AddEventsResponse":
        # Extra keys such as bytesCharged are ignored.
        return cls(status=data.get("status"), message=data.get("message"))

    @property
    def is_success(self) -> bool:
        return self.status == self.SUCCESS
