"""
Feed client: one credentialed GET per source, failures logged and swallowed.
"""
from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional

import requests

from relay.models import SourceHealth
from utils.security import redact_secrets

logger = logging.getLogger(__name__)

AUTH_FAILURE_STATUSES = (401, 403)


class FeedClient:
    def __init__(
        self,
        headers: Mapping[str, str],
        timeout: int = 30,
        secret_values: Optional[Iterable[str]] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(dict(headers))
        self._secrets = [value for value in (secret_values or []) if value]
        self._health: Dict[str, SourceHealth] = {}
        self._health_lock = threading.Lock()

    def fetch(self, url: str) -> Optional[Any]:
        """Return the decoded JSON document at ``url``, or None on any failure."""
        logger.info("Attempting to fetch data from: %s", self._redact(url))
        start = time.monotonic()
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.Timeout:
            logger.error("Timeout fetching data from %s after %ss.", self._redact(url), self.timeout)
            return self._fail(url, start, "timeout", None)
        except requests.RequestException as exc:
            logger.error("Generic network error fetching data from %s: %s", self._redact(url), self._redact(str(exc)))
            return self._fail(url, start, self._redact(str(exc)), None)

        status_code = resp.status_code
        if not 200 <= status_code < 300:
            logger.error(
                "HTTP error for %s: %s. Response: %s...",
                self._redact(url),
                status_code,
                self._redact(resp.text[:200]),
            )
            if status_code in AUTH_FAILURE_STATUSES:
                logger.error("Received %s Unauthorized/Forbidden error. Check API credentials.", status_code)
                return self._fail(url, start, f"auth failure (HTTP {status_code})", status_code)
            return self._fail(url, start, f"HTTP {status_code}", status_code)

        try:
            document = resp.json()
        except ValueError as exc:
            logger.error("Malformed JSON from %s: %s", self._redact(url), exc)
            return self._fail(url, start, "malformed JSON", status_code)

        logger.debug("Successfully decoded JSON from %s", self._redact(url))
        self._record(
            SourceHealth(
                name=url,
                healthy=True,
                last_success=datetime.now(timezone.utc),
                latency_ms=(time.monotonic() - start) * 1000,
                status_code=status_code,
            )
        )
        return document

    def health(self) -> Dict[str, SourceHealth]:
        with self._health_lock:
            return dict(self._health)

    def _fail(self, url: str, start: float, error: str, status_code: Optional[int]) -> None:
        previous = self.health().get(url)
        self._record(
            SourceHealth(
                name=url,
                healthy=False,
                last_error=error,
                last_success=previous.last_success if previous else None,
                latency_ms=(time.monotonic() - start) * 1000,
                status_code=status_code,
            )
        )
        return None

    def _record(self, status: SourceHealth) -> None:
        with self._health_lock:
            self._health[status.name] = status

    def _redact(self, text: str) -> str:
        return redact_secrets(text, self._secrets)
