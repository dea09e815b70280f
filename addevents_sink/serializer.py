"""addEvents payload serialization — streams the request JSON in chunks.

Produces the following document (compact, keys in this order)::

    {
      "token":   "<api key>",
      "session": "<session id>",
      "events":  [{"ts": 100, "si": "topic-0", "sn": 0,
                   "attrs": {"message": "..."}, "log": "0"}, ...],
      "logs":    [{"id": "0", "attrs": {"source": "...", "logfile": "...",
                                        "parser": "..."}}, ...]
    }

``si``/``sn`` are the sequence identifier ({topic, partition}) and sequence
number (partition offset) the server uses to drop duplicates on resend.
"""

from __future__ import annotations

import functools
import json
import logging
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Sequence

from addevents_sink.errors import SerializationError
from addevents_sink.log_ids import LogIdTable, assign_log_ids
from addevents_sink.models import Event, LogEntry

logger = logging.getLogger(__name__)

_dumps = functools.partial(json.dumps, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class AddEventsRequest:
    token: str
    session: str
    events: Sequence[Event]


def event_to_dict(event: Event, log_ids: LogIdTable) -> dict:
    """Return the wire object for a single event."""
    return {
        "ts": event.timestamp_nanos,
        "si": event.sequence_id,
        "sn": event.sequence_offset,
        "attrs": {"message": event.message},
        "log": str(log_ids.id_for(event)),
    }


def log_entry_to_dict(entry: LogEntry) -> dict:
    """Return the wire object for a single ``logs`` array entry."""
    return {"id": str(entry.id), "attrs": dict(entry.attrs)}


def iter_payload(
    request: AddEventsRequest, log_ids: LogIdTable | None = None
) -> Iterator[bytes]:
    """Yield the request JSON as UTF-8 chunks, one per event and log entry.

    Raises:
        SerializationError: If any value cannot be encoded.
    """
    try:
        if log_ids is None:
            log_ids = assign_log_ids(request.events)

        head = (
            '{"token":' + _dumps(request.token)
            + ',"session":' + _dumps(request.session)
            + ',"events":['
        )
        yield head.encode("utf-8")

        sep = ""
        for event in request.events:
            yield (sep + _dumps(event_to_dict(event, log_ids))).encode("utf-8")
            sep = ","

        yield b'],"logs":['

        sep = ""
        for entry in log_ids.entries():
            yield (sep + _dumps(log_entry_to_dict(entry))).encode("utf-8")
            sep = ","

        yield b"]}"
    except SerializationError:
        raise
    except Exception as exc:
        raise SerializationError(f"addEvents serialization failed: {exc}") from exc


def write_payload(
    request: AddEventsRequest,
    sink: BinaryIO,
    log_ids: LogIdTable | None = None,
) -> int:
    """Write the request JSON to *sink* and close it.

    The sink is closed whether or not writing succeeds.

    Returns:
        Number of bytes written.
    """
    written = 0
    try:
        for chunk in iter_payload(request, log_ids):
            sink.write(chunk)
            written += len(chunk)
    finally:
        sink.close()
    logger.debug("Wrote %d events (%d bytes)", len(request.events), written)
    return written


def serialize_request(request: AddEventsRequest) -> bytes:
    """Return the complete request JSON as bytes."""
    return b"".join(iter_payload(request))
