"""Sink task — owns one AddEventsClient and ships one batch per put()."""

import logging
import time

import httpx

from addevents_sink.client import AddEventsClient
from addevents_sink.config import SinkConfig
from addevents_sink.errors import AddEventsError
from addevents_sink.mapper import SinkRecord, create_events
from addevents_sink.metrics import MetricsCollector

logger = logging.getLogger(__name__)


class SinkTask:
    """Maps records to events and sends each put() as a single addEvents call.

    Failures are counted and re-raised; retry and offset handling belong to
    whoever drives the task.
    """

    def __init__(self, config: SinkConfig, transport: httpx.BaseTransport | None = None):
        self._config = config
        self._transport = transport
        self._client: AddEventsClient | None = None
        self._stopped = False
        self._metrics = MetricsCollector()

    def start(self):
        """Create the client. Raises ConfigurationError for a bad URL."""
        if self._client is not None or self._stopped:
            raise RuntimeError("SinkTask can only be started once")
        self._client = AddEventsClient(
            self._config.addevents_url,
            self._config.api_key,
            timeout=self._config.request_timeout,
            transport=self._transport,
        )
        logger.info(
            "Sink task started: url=%s, session=%s",
            self._client.url,
            self._client.session_id,
        )

    def put(self, records: list[SinkRecord]):
        """Send *records* as one addEvents batch. Empty batches are skipped."""
        if self._client is None or self._stopped:
            raise RuntimeError("SinkTask is not running")
        if not records:
            return

        try:
            events = create_events(records, self._config)
        except ValueError as exc:
            self._metrics.record_failure(type(exc).__name__)
            logger.error("Could not map batch of %d records: %s", len(records), exc)
            raise

        start = time.monotonic()
        try:
            self._client.log(events)
        except AddEventsError as exc:
            self._metrics.record_failure(type(exc).__name__)
            logger.error("addEvents batch of %d events failed: %s", len(events), exc)
            raise
        elapsed_ms = (time.monotonic() - start) * 1000

        self._metrics.record_batch(
            events=len(events),
            bytes_sent=self._client.last_payload_bytes,
            send_time_ms=elapsed_ms,
        )
        logger.info(
            "Sent batch of %d events (%d bytes) in %.1fms",
            len(events),
            self._client.last_payload_bytes,
            elapsed_ms,
        )

    def stop(self):
        """Close the client and log final metrics."""
        if self._stopped:
            return
        self._stopped = True
        if self._client is not None:
            self._client.close()
        logger.info("Sink task metrics: %s", self._metrics.snapshot())

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def session_id(self) -> str | None:
        return self._client.session_id if self._client else None
