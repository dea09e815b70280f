"""Command-line runner — ships a JSON-lines file to addEvents in batches."""

import json
import logging
import os
import signal
import sys
import threading
from typing import Iterator, TextIO

from addevents_sink.config import load_config
from addevents_sink.errors import AddEventsError
from addevents_sink.mapper import SinkRecord
from addevents_sink.sink_task import SinkTask

logger = logging.getLogger(__name__)


def read_records(stream: TextIO, topic: str) -> Iterator[SinkRecord]:
    """Yield one SinkRecord per JSON object line; the line number is the offset."""
    for offset, line in enumerate(stream):
        stripped = line.strip()
        if not stripped:
            continue
        try:
            value = json.loads(stripped)
        except json.JSONDecodeError:
            logger.warning("Skipping invalid JSON at line %d: %s", offset + 1, stripped[:100])
            continue
        if not isinstance(value, dict):
            logger.warning("Skipping non-object record at line %d", offset + 1)
            continue
        yield SinkRecord(topic=topic, partition=0, offset=offset, value=value)


def ship(task: SinkTask, records: Iterator[SinkRecord], batch_size: int,
         shutdown_event: threading.Event) -> int:
    """Send *records* in batches of *batch_size*. Returns the number of batches sent."""
    batches = 0
    batch: list[SinkRecord] = []
    for record in records:
        if shutdown_event.is_set():
            break
        batch.append(record)
        if len(batch) >= batch_size:
            task.put(batch)
            batches += 1
            batch = []
    if batch and not shutdown_event.is_set():
        task.put(batch)
        batches += 1
    return batches


def main(argv=None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(argv)
    except AddEventsError as exc:
        logger.error("%s", exc)
        return 2

    shutdown_event = threading.Event()

    def handle_signal(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    task = SinkTask(config)
    try:
        task.start()
    except AddEventsError as exc:
        logger.error("Could not start sink task: %s", exc)
        return 2

    try:
        if config.input_file:
            topic = os.path.splitext(os.path.basename(config.input_file))[0]
            with open(config.input_file, "r", encoding="utf-8") as f:
                batches = ship(task, read_records(f, topic), config.batch_size, shutdown_event)
        else:
            batches = ship(task, read_records(sys.stdin, "stdin"), config.batch_size, shutdown_event)
    except AddEventsError:
        return 1
    finally:
        task.stop()

    logger.info("Shipped %d batch(es)", batches)
    return 0


if __name__ == "__main__":
    sys.exit(main())
