"""Text-over-HTTP transport used by the transit client."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Protocol

import requests

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised when a request cannot be completed; ``message`` may be empty."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class TransportResult:
    """Outcome of one fetch: a body on success, an optional message on failure."""

    body: str | None = None
    error: bool = False
    message: str | None = None


TransportCallback = Callable[[TransportResult], None]


class Transport(Protocol):
    def fetch_text(self, url: str, callback: TransportCallback) -> None:
        """Fetch ``url`` and invoke ``callback`` exactly once."""


class RequestsTransport:
    """Blocking transport backed by requests; the callback fires before fetch_text returns."""

    def __init__(self, timeout_seconds: float = 10.0) -> None:
        self._timeout_seconds = timeout_seconds

    def fetch_text(self, url: str, callback: TransportCallback) -> None:
        try:
            body = self._get(url)
        except TransportError as exc:
            callback(TransportResult(error=True, message=exc.message or None))
            return
        callback(TransportResult(body=body))

    def _get(self, url: str) -> str:
        try:
            response = requests.get(url, timeout=self._timeout_seconds)
        except requests.RequestException as exc:
            logger.warning("Request failed: %s (%s)", url, exc)
            raise TransportError(str(exc)) from exc

        if response.status_code != 200:
            body_text = response.text.strip()
            detail = f"Status {response.status_code}"
            if body_text:
                detail = f"{detail}, Body: {body_text[:200]}"
            logger.warning("Request failed: %s (%s)", url, detail)
            raise TransportError(detail)

        return response.text


__all__ = ["RequestsTransport", "Transport", "TransportCallback", "TransportError", "TransportResult"]
