"""
Response dispatch for the stats endpoint.

A StatsRequestHandler lives for exactly one request. The transport drives it
through on_request, on_body and on_eom, and it sends exactly one response
through the ``send`` callback it was created with. Transport failures go
through on_error and end the request without a response.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from statsview.exceptions import UnsupportedMethodError
from statsview.logging_config import get_logger, log_stats_request, log_transport_error
from statsview.stats.formatters import (
    ProcessIdentity,
    format_json,
    format_monitor,
    format_plain,
)
from statsview.stats.query import OutputFormat, QueryParams, RequestIntent, interpret_request
from statsview.stats.resolver import MetricSample, StatsSource, resolve_samples

logger = get_logger(__name__)

CONTENT_TYPE_PLAIN = "text/plain; charset=utf-8"
CONTENT_TYPE_JSON = "application/json"


class HandlerState(str, Enum):
    """Lifecycle of a StatsRequestHandler."""
    PARSING = "parsing"
    DISPATCHING = "dispatching"
    COMPLETE = "complete"


@dataclass(frozen=True)
class StatsResponse:
    """The single response sent for a stats request."""
    status: int
    reason: str
    body: str = ""
    content_type: str = CONTENT_TYPE_PLAIN


class StatsRequestHandler:
    """
    Per-request state machine for the stats endpoint.

    PARSING -> COMPLETE on a rejected method (405, nothing resolved)
    PARSING -> DISPATCHING -> COMPLETE on end of message (200)
    any state -> COMPLETE on a transport error (nothing sent)
    """

    def __init__(
        self,
        registry: StatsSource,
        identity: ProcessIdentity,
        send: Callable[[StatsResponse], None],
        monitor_formatter: Callable[[List[MetricSample], ProcessIdentity], str] = format_monitor,
    ):
        """
        Initialize the handler.

        Args:
            registry: Stats registry to resolve names against
            identity: Identity of this process for monitor output
            send: Callback that writes the response to the client
            monitor_formatter: Encoder used for the monitor format
        """
        self.registry = registry
        self.identity = identity
        self._send = send
        self._monitor_formatter = monitor_formatter
        self.state = HandlerState.PARSING
        self.intent: Optional[RequestIntent] = None
        self.error: Optional[UnsupportedMethodError] = None
        self._method = ""
        self._started = time.monotonic()

    def on_request(self, method: str, params: QueryParams) -> None:
        """Parse the request line and query parameters."""
        self._method = method
        self.intent = interpret_request(method, params)
        if not self.intent.is_supported:
            self.error = UnsupportedMethodError(method)

    def on_body(self, chunk: bytes) -> None:
        """Request bodies are ignored; only GET is served."""

    def on_eom(self) -> None:
        """Produce and send the response once the whole request has arrived."""
        if self.state is not HandlerState.PARSING:
            return
        if self.intent is None:
            raise RuntimeError("on_eom() called before on_request()")

        if self.error is not None:
            logger.debug(f"Rejecting stats request: {self.error}")
            self._complete(StatsResponse(status=405, reason="Method Not Allowed"))
            return

        self.state = HandlerState.DISPATCHING
        samples = resolve_samples(self.intent.metric_filter, self.registry)
        self._complete(self._format(samples))

    def on_error(self, error: BaseException) -> None:
        """Abandon the request after a transport failure. Nothing is retried."""
        log_transport_error(logger, error, method=self._method, state=self.state.value)
        self.state = HandlerState.COMPLETE

    def request_complete(self) -> None:
        """Release per-request state once the transport is done with the request."""
        self.state = HandlerState.COMPLETE
        self.intent = None
        self.error = None

    def _format(self, samples: List[MetricSample]) -> StatsResponse:
        output_format = self.intent.output_format
        if output_format is OutputFormat.JSON:
            return StatsResponse(200, "OK", format_json(samples), CONTENT_TYPE_JSON)
        if output_format is OutputFormat.MONITOR:
            body = self._monitor_formatter(samples, self.identity)
            # Identity validation failures come back as a bare message
            content_type = CONTENT_TYPE_JSON if body.startswith("[") else CONTENT_TYPE_PLAIN
            return StatsResponse(200, "OK", body, content_type)
        return StatsResponse(200, "OK", format_plain(samples), CONTENT_TYPE_PLAIN)

    def _complete(self, response: StatsResponse) -> None:
        self.state = HandlerState.COMPLETE
        self._send(response)

        intent = self.intent
        log_stats_request(
            logger,
            method=self._method,
            output_format=intent.output_format.value,
            requested=len(intent.metric_filter),
            status_code=response.status,
            duration_ms=round((time.monotonic() - self._started) * 1000, 3),
        )


def handle_stats_request(
    method: str,
    params: QueryParams,
    registry: StatsSource,
    identity: ProcessIdentity,
) -> StatsResponse:
    """
    Run one stats request through a fresh handler and return its response.

    Args:
        method: HTTP method
        params: Query parameters
        registry: Stats registry
        identity: Identity of this process

    Returns:
        The response the handler sent
    """
    responses: List[StatsResponse] = []
    handler = StatsRequestHandler(registry, identity, responses.append)
    handler.on_request(method, params)
    handler.on_eom()
    handler.request_complete()
    return responses[0]
