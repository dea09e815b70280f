"""Ship batches of log events to an addEvents ingestion endpoint."""

__version__ = "0.1.0"
