"""Record mapper — converts schemaless stream records into Events."""

import time
from dataclasses import dataclass
from typing import Any, Optional

from addevents_sink.config import SinkConfig
from addevents_sink.models import Event

_MISSING = object()


@dataclass(frozen=True)
class SinkRecord:
    topic: str
    partition: int
    offset: int
    value: Any
    timestamp_ms: Optional[int] = None


def get_field(value: dict, name: str) -> Any:
    """Look up *name* as a literal key, then as a dotted path into nested dicts.

    Returns None when the field is not present.
    """
    if name in value:
        return value[name]

    current: Any = value
    for part in name.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part, _MISSING)
        if current is _MISSING:
            return None
    return current


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def create_event(record: SinkRecord, config: SinkConfig) -> Event:
    """Build an Event from *record* using the configured field names.

    Raises:
        ValueError: If the record value is not a dict.
    """
    if not isinstance(record.value, dict):
        raise ValueError(
            f"Record {record.topic}-{record.partition}@{record.offset} value must be "
            f"a dict, got {type(record.value).__name__}"
        )

    if record.timestamp_ms is not None:
        timestamp_nanos = record.timestamp_ms * 1_000_000
    else:
        timestamp_nanos = time.time_ns()

    return Event(
        stream_id=record.topic,
        partition=record.partition,
        sequence_offset=record.offset,
        timestamp_nanos=timestamp_nanos,
        message=_as_str(get_field(record.value, config.message_field)),
        logfile=_as_str(get_field(record.value, config.logfile_field)),
        server_host=_as_str(get_field(record.value, config.server_host_field)),
        parser=_as_str(get_field(record.value, config.parser_field)),
    )


def create_events(records: list[SinkRecord], config: SinkConfig) -> list[Event]:
    """Map *records* to Events, preserving order."""
    return [create_event(record, config) for record in records]
