"""Metrics collector — thread-safe counters for addEvents calls."""

import threading
import time
import logging

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Collects and reports metrics about addEvents batches."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._batches_sent: int = 0
        self._total_events: int = 0
        self._total_bytes: int = 0
        self._send_times: list[float] = []
        self._failures: dict = {}
        self._start_time = time.monotonic()

    def record_batch(self, events: int, bytes_sent: int, send_time_ms: float) -> None:
        """Record a batch the server accepted.

        Args:
            events: Number of events in the batch.
            bytes_sent: Serialized payload size in bytes.
            send_time_ms: Round trip time of the addEvents call, in milliseconds.
        """
        with self._lock:
            self._batches_sent += 1
            self._total_events += events
            self._total_bytes += bytes_sent
            self._send_times.append(send_time_ms)

    def record_failure(self, kind: str) -> None:
        """Count a failed batch under *kind* (usually the exception class name)."""
        with self._lock:
            self._failures[kind] = self._failures.get(kind, 0) + 1

    def snapshot(self) -> dict:
        """Return a point-in-time snapshot of all collected metrics."""
        with self._lock:
            send_times = list(self._send_times)
            avg_send = sum(send_times) / len(send_times) if send_times else 0.0

            return {
                "batches_sent": self._batches_sent,
                "total_events": self._total_events,
                "total_bytes": self._total_bytes,
                "avg_batch_size": (
                    self._total_events / self._batches_sent if self._batches_sent else 0.0
                ),
                "avg_send_time_ms": avg_send,
                "p95_send_time_ms": self._percentile(send_times, 95),
                "failures": dict(self._failures),
                "uptime_seconds": time.monotonic() - self._start_time,
            }

    @staticmethod
    def _percentile(data: list, pct: float) -> float:
        """Linearly interpolated *pct* percentile of *data*; 0.0 when empty."""
        if not data:
            return 0.0

        ordered = sorted(data)
        position = (len(ordered) - 1) * pct / 100
        low = int(position)
        high = min(low + 1, len(ordered) - 1)
        return float(ordered[low] + (ordered[high] - ordered[low]) * (position - low))
