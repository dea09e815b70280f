"""Log id assignment — deduplicates server level fields across a batch.

Events that share the same (logfile, server_host, parser) triple point at a
single entry of the ``logs`` array instead of repeating the values.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from addevents_sink.models import Event, LogEntry, LogKey


class LogIdTable:
    """Batch-local mapping of log key to sequential id.

    ``keys`` holds every distinct key in first-seen order, so a key's id is
    its index in that list.
    """

    def __init__(self) -> None:
        self.keys: list[LogKey] = []
        self._index: dict[LogKey, int] = {}

    def add(self, key: LogKey) -> int:
        """Return the id for *key*, allocating the next one if it is new."""
        log_id = self._index.get(key)
        if log_id is None:
            log_id = len(self.keys)
            self.keys.append(key)
            self._index[key] = log_id
        return log_id

    def id_for(self, event: Event) -> int:
        """Return the id already assigned to *event*'s log key."""
        return self._index[event.log_key]

    def entries(self) -> Iterator[LogEntry]:
        """Yield log entries in ascending id order."""
        for log_id, key in enumerate(self.keys):
            yield LogEntry.from_key(log_id, key)

    def __len__(self) -> int:
        return len(self.keys)


def assign_log_ids(events: Iterable[Event]) -> LogIdTable:
    """Build a fresh LogIdTable by scanning *events* front to back."""
    table = LogIdTable()
    for event in events:
        table.add(event.log_key)
    return table
