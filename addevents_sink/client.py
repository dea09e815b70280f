"""addEvents HTTP client — builds, posts and classifies addEvents requests."""

from __future__ import annotations

import logging
import platform
import uuid
from typing import Iterator, Sequence

import httpx

from addevents_sink import __version__
from addevents_sink.errors import ConfigurationError, ProtocolError, TransportError
from addevents_sink.models import AddEventsResponse, Event
from addevents_sink.serializer import AddEventsRequest, iter_payload

logger = logging.getLogger(__name__)

ADD_EVENTS_PATH = "/addEvents"
JSON_CONTENT_TYPE = "application/json; charset=UTF-8"
USER_AGENT = f"addevents-sink/{__version__} Python/{platform.python_version()}"


def build_add_events_url(url: str) -> str:
    """Validate *url* and return the addEvents endpoint on that host.

    The URL needs a scheme and a host, and must be https unless the host is
    ``localhost``. Any existing path is replaced.

    Raises:
        ConfigurationError: If the URL is not usable.
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise ConfigurationError(f"Invalid addEvents URL: {url!r}") from exc

    if not parsed.scheme or not parsed.host:
        raise ConfigurationError(f"Invalid addEvents URL: {url!r}")
    if parsed.host != "localhost" and parsed.scheme != "https":
        raise ConfigurationError(
            f"Invalid addEvents URL: {url!r} (https is required for non-local hosts)"
        )

    return str(parsed.copy_with(path=ADD_EVENTS_PATH))


class AddEventsClient:
    """Sends event batches to the addEvents API over one HTTP connection pool.

    One instance is meant for one owning task: calls to :meth:`log` must not
    overlap. Separate instances share nothing and may run in parallel.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self._url = build_add_events_url(url)
        self._api_key = api_key
        self._session_id = str(uuid.uuid4())
        self._headers = {
            "Content-Type": JSON_CONTENT_TYPE,
            "Accept": JSON_CONTENT_TYPE,
            "Connection": "Keep-Alive",
            "User-Agent": USER_AGENT,
        }
        self._client = httpx.Client(
            headers=self._headers, timeout=timeout, transport=transport
        )
        self._closed = False
        self.last_payload_bytes = 0

    @property
    def url(self) -> str:
        return self._url

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def headers(self) -> dict:
        return dict(self._headers)

    def log(self, events: Sequence[Event]) -> AddEventsResponse:
        """POST *events* to addEvents and return the accepted response.

        Raises:
            TransportError: Connection, timeout or other I/O failure.
            ProtocolError: Non-200 status, non-success status field, or an
                unparseable response body.
            SerializationError: The batch could not be encoded.
        """
        if self._closed:
            raise RuntimeError("AddEventsClient is closed")

        logger.debug("Calling addEvents with %d events", len(events))
        request = AddEventsRequest(
            token=self._api_key, session=self._session_id, events=events
        )

        self.last_payload_bytes = 0
        try:
            response = self._client.post(
                self._url, content=self._counted(iter_payload(request))
            )
        except httpx.RequestError as exc:
            raise TransportError(f"addEvents request to {self._url} failed: {exc}") from exc

        result = self._parse_response(response)
        logger.debug(
            "addEvents http code %d, response %s", response.status_code, result
        )

        if response.status_code != httpx.codes.OK or not result.is_success:
            raise ProtocolError(response.status_code, result.status, result.message)
        return result

    def _counted(self, chunks: Iterator[bytes]) -> Iterator[bytes]:
        for chunk in chunks:
            self.last_payload_bytes += len(chunk)
            yield chunk

    @staticmethod
    def _parse_response(response: httpx.Response) -> AddEventsResponse:
        try:
            data = response.json()
        except ValueError as exc:
            raise ProtocolError(
                response.status_code, detail=f"unparseable response body: {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise ProtocolError(
                response.status_code,
                detail=f"expected a JSON object, got {type(data).__name__}",
            )
        return AddEventsResponse.from_dict(data)

    def close(self):
        """Release the underlying HTTP connection pool."""
        self._closed = True
        self._client.close()

    def __enter__(self) -> "AddEventsClient":
        return self

    def __exit__(self, *exc_info):
        self.close()
