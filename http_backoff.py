"""HTTP GET with bounded retries and exponential backoff."""

from __future__ import annotations

import logging
import time
from typing import Any

import requests

DEFAULT_TIMEOUT_SECONDS = 20
MIN_BACKOFF_FACTOR_SECONDS = 0.1

LOGGER = logging.getLogger(__name__)


def fetch_with_backoff(
    url: str,
    options: dict[str, Any] | None = None,
    max_attempts: Any = 5,
    backoff_factor_seconds: Any = 1.0,
) -> requests.Response | None:
    """Request url, retrying transport errors, 429 and 5xx responses.

    delay_seconds = backoff_factor_seconds * 2 ** (attempt - 1), attempt starting at 1.

    Args:
        url: Fully built request URL.
        options: Keyword arguments for requests.request. ``method`` defaults to
            GET and ``timeout`` to DEFAULT_TIMEOUT_SECONDS.
        max_attempts: Total attempts including the first; coerced to >= 1.
        backoff_factor_seconds: Base delay; coerced to >= 0.1.

    Returns:
        The first 2xx response, the last non-retriable or final response, or
        None when every attempt raised a transport error.
    """
    attempts = max(1, _coerce(max_attempts, int, 1))
    factor = max(MIN_BACKOFF_FACTOR_SECONDS, _coerce(backoff_factor_seconds, float, 1.0))

    request_kwargs = dict(options or {})
    method = str(request_kwargs.pop("method", "GET")).upper()
    request_kwargs.setdefault("timeout", DEFAULT_TIMEOUT_SECONDS)

    for attempt in range(1, attempts + 1):
        try:
            response = requests.request(method, url, **request_kwargs)
        except requests.RequestException as exc:
            LOGGER.warning("Attempt %s/%s exception: %s", attempt, attempts, exc)
            if attempt < attempts:
                delay = _backoff_delay(factor, attempt)
                LOGGER.info("Retrying after %.3f s due to exception...", delay)
                time.sleep(delay)
                continue
            return None

        code = response.status_code
        LOGGER.info("Attempt %s/%s -> HTTP %s", attempt, attempts, code)
        if 200 <= code < 300:
            return response

        if attempt < attempts and _is_transient(code):
            delay = _backoff_delay(factor, attempt)
            LOGGER.info("Retrying after %.3f s due to HTTP %s...", delay, code)
            time.sleep(delay)
            continue

        # Non-retriable status or last attempt: caller inspects the status.
        return response

    return None


def _is_transient(status_code: int) -> bool:
    return status_code == 429 or 500 <= status_code < 600


def _backoff_delay(factor: float, attempt: int) -> float:
    return round(factor * 2 ** (attempt - 1), 3)


def _coerce(value: Any, kind: type, fallback: Any) -> Any:
    """Convert value with kind; zero, NaN or unparseable values become fallback."""
    try:
        converted = kind(value)
    except (TypeError, ValueError, OverflowError):
        return fallback
    if not converted or converted != converted:
        return fallback
    return converted
