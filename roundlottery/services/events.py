from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

import requests

from ..config import EventSettings

logger = logging.getLogger("roundlottery.events")


class LoggingEventSink:
    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._logger = log or logger

    def publish(self, topic: str, payload: Mapping[str, Any]) -> None:
        self._logger.info("event %s %s", topic, json.dumps(dict(payload), sort_keys=True, default=str))


class WebhookEventSink:
    """POST every event to a webhook; delivery failures are logged, never raised."""

    def __init__(self, url: str, timeout_seconds: int = 5, session: Optional[requests.Session] = None) -> None:
        self._url = url
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self._log_sink = LoggingEventSink()

    def publish(self, topic: str, payload: Mapping[str, Any]) -> None:
        self._log_sink.publish(topic, payload)
        body = {"topic": topic, "payload": json.loads(json.dumps(dict(payload), default=str))}
        try:
            resp = self._session.post(self._url, json=body, timeout=self._timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Event %s not delivered to %s: %s", topic, self._url, exc)


def build_event_sink(settings: EventSettings):
    if settings.webhook_url:
        return WebhookEventSink(settings.webhook_url, settings.timeout_seconds)
    return LoggingEventSink()
