"""
Analytics sink for demo day events.

Events are never delivered inside the triggering transaction: :func:`track_event` registers a
``transaction.on_commit`` callback, so rolled-back work never reports anything. Delivery failures
are logged and never propagate to the caller.

The backend is chosen with ``settings.ANALYTICS_SINK`` (a dotted path), mirroring how Django picks
an e-mail backend:

* :class:`LoggingAnalyticsSink` -- writes every event to the structured log.
* :class:`LocMemAnalyticsSink` -- keeps events in :data:`outbox`, for tests.
* :class:`HttpAnalyticsSink` -- posts events to a capture endpoint on a worker thread.
"""

from __future__ import annotations

import functools
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

import httpx
import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.module_loading import import_string
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)


if TYPE_CHECKING:
    from collections.abc import Iterable


logger = structlog.get_logger(__name__)

#: Events captured by :class:`LocMemAnalyticsSink`.
outbox: list[AnalyticsEvent] = []


@dataclass(frozen=True)
class AnalyticsEvent:
    """A single analytics event."""

    name: str
    distinct_id: str
    properties: dict[str, Any] = field(default_factory=dict)


class AnalyticsSink(Protocol):
    """Anything that accepts analytics events."""

    def capture(self, event: AnalyticsEvent) -> None: ...


class LoggingAnalyticsSink:
    """Write events to the structured log."""

    def capture(self, event: AnalyticsEvent) -> None:
        """Log *event* at info level."""
        logger.info(
            "analytics_event",
            analytics_event=event.name,
            distinct_id=event.distinct_id,
            properties=event.properties,
        )


class LocMemAnalyticsSink:
    """Keep events in memory. Use ``demodays.analytics.outbox`` to inspect them."""

    def capture(self, event: AnalyticsEvent) -> None:
        """Append *event* to the module outbox."""
        outbox.append(event)


class HttpAnalyticsSink:
    """
    Post events to an HTTP capture endpoint.

    Each event is sent on a single background worker, retried with exponential backoff on
    transport errors and 5xx answers. The caller never waits for the network.
    """

    def __init__(self) -> None:
        """Read endpoint configuration from settings."""
        self.api_url = settings.ANALYTICS_API_URL
        self.api_key = settings.ANALYTICS_API_KEY
        self.timeout = settings.ANALYTICS_TIMEOUT
        self.max_retries = settings.ANALYTICS_MAX_RETRIES
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="analytics")

    def capture(self, event: AnalyticsEvent) -> None:
        """Queue *event* for delivery."""
        if not self.api_url:
            logger.warning("analytics_endpoint_missing", analytics_event=event.name)
            return
        self._executor.submit(self._deliver, event)

    def _deliver(self, event: AnalyticsEvent) -> None:
        try:
            self._post_with_retry(event)
        except Exception:
            logger.exception(
                "analytics_delivery_failed",
                analytics_event=event.name,
                distinct_id=event.distinct_id,
            )

    def _post_with_retry(self, event: AnalyticsEvent) -> None:
        @retry(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=30),
            retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
            reraise=True,
        )
        def _do_post() -> None:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.api_url, json=self.payload(event))
                response.raise_for_status()

        _do_post()

    def payload(self, event: AnalyticsEvent) -> dict[str, Any]:
        """Build the JSON body for *event*."""
        return {
            "api_key": self.api_key,
            "event": event.name,
            "distinct_id": event.distinct_id,
            "properties": event.properties,
            "timestamp": timezone.now().isoformat(),
        }


@functools.cache
def _load_sink(path: str) -> AnalyticsSink:
    return import_string(path)()


def get_sink() -> AnalyticsSink:
    """Return the configured sink instance."""
    return _load_sink(settings.ANALYTICS_SINK)


def emit(events: Iterable[AnalyticsEvent]) -> None:
    """Hand *events* to the sink right away. Failures are logged, never raised."""
    sink = get_sink()
    for event in events:
        try:
            sink.capture(event)
        except Exception:
            logger.exception("analytics_capture_failed", analytics_event=event.name)


def track_events(events: Iterable[AnalyticsEvent]) -> None:
    """Emit *events* once the current transaction commits (immediately outside one)."""
    batch = list(events)
    if not batch:
        return
    transaction.on_commit(functools.partial(emit, batch), robust=True)


def track_event(name: str, distinct_id: str, properties: dict[str, Any] | None = None) -> None:
    """Record a single event, delivered after the current transaction commits."""
    event = AnalyticsEvent(name=name, distinct_id=str(distinct_id), properties=properties or {})
    track_events([event])
