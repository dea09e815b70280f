"""Tests for the metrics collector."""

import threading

from addevents_sink.metrics import MetricsCollector


def test_empty_snapshot():
    snap = MetricsCollector().snapshot()
    assert snap["batches_sent"] == 0
    assert snap["total_events"] == 0
    assert snap["avg_batch_size"] == 0.0
    assert snap["p95_send_time_ms"] == 0.0
    assert snap["failures"] == {}
    assert snap["uptime_seconds"] >= 0


def test_record_batches():
    metrics = MetricsCollector()
    metrics.record_batch(events=10, bytes_sent=1000, send_time_ms=5.0)
    metrics.record_batch(events=30, bytes_sent=3000, send_time_ms=15.0)

    snap = metrics.snapshot()
    assert snap["batches_sent"] == 2
    assert snap["total_events"] == 40
    assert snap["total_bytes"] == 4000
    assert snap["avg_batch_size"] == 20.0
    assert snap["avg_send_time_ms"] == 10.0
    assert 5.0 <= snap["p95_send_time_ms"] <= 15.0


def test_record_failures_by_kind():
    metrics = MetricsCollector()
    metrics.record_failure("ProtocolError")
    metrics.record_failure("ProtocolError")
    metrics.record_failure("TransportError")
    assert metrics.snapshot()["failures"] == {"ProtocolError": 2, "TransportError": 1}


def test_percentile():
    data = [float(i) for i in range(1, 101)]
    assert MetricsCollector._percentile(data, 50) == 50.5
    assert MetricsCollector._percentile([3.0], 95) == 3.0
    assert MetricsCollector._percentile([], 95) == 0.0


def test_thread_safety():
    metrics = MetricsCollector()

    def worker():
        for _ in range(100):
            metrics.record_batch(events=1, bytes_sent=10, send_time_ms=1.0)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    snap = metrics.snapshot()
    assert snap["batches_sent"] == 400
    assert snap["total_bytes"] == 4000
