"""Semantic Scholar bulk-search query construction and response parsing."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any
from urllib.parse import quote, urlencode

import requests

from http_backoff import fetch_with_backoff
from models import RunConfig

# Docs: https://api.semanticscholar.org/api-docs/graph
SEARCH_FIELDS = (
    "title,abstract,publicationDate,openAccessPdf,citationCount,"
    "referenceCount,externalIds,url,authors"
)
SEARCH_SORT = "publicationDate:desc"

LOGGER = logging.getLogger(__name__)


class SearchAbort(RuntimeError):
    """The search produced nothing usable; the run stops without writing."""


def publication_date_range(today: date, past_months: int) -> str:
    """Return 'YYYY-MM:YYYY-MM:' from past_months ago through the current month."""
    months = today.year * 12 + (today.month - 1) - past_months
    start_year, start_month = divmod(months, 12)
    return f"{start_year:04d}-{start_month + 1:02d}:{today.year:04d}-{today.month:02d}:"


def build_query_params(config: RunConfig, today: date) -> dict[str, Any]:
    return {
        "query": config.search_keyword,
        "fields": SEARCH_FIELDS,
        "sort": SEARCH_SORT,
        "publicationDateOrYear": publication_date_range(today, config.published_past_months),
        "limit": config.limit_per_run,
    }


def build_search_url(config: RunConfig, today: date) -> str:
    """Encode the query; open-access filtering is a bare flag with no value."""
    query_string = urlencode(build_query_params(config, today), quote_via=quote, safe="")
    if config.open_access_only:
        query_string += "&openAccessPdf"
    return f"{config.api_url}?{query_string}"


def request_options(config: RunConfig) -> dict[str, Any]:
    headers = {"Accept": "application/json"}
    if config.api_key:
        headers["x-api-key"] = config.api_key.strip()
    return {
        "method": "GET",
        "headers": headers,
        "timeout": config.request_timeout_seconds,
    }


def search_papers(config: RunConfig, today: date) -> list[Any]:
    """Fetch one page of bulk-search results and return its ``data`` array.

    Raises:
        SearchAbort: no response after retries, a non-2xx final status, a body
            that is not JSON, or a body without a ``data`` array.
    """
    url = build_search_url(config, today)
    LOGGER.info("Starting Semantic Scholar fetch with backoff...")
    LOGGER.debug("Search URL: %s", url)

    response = fetch_with_backoff(
        url,
        request_options(config),
        config.retry_count,
        config.backoff_factor_seconds,
    )
    if response is None:
        raise SearchAbort("No response returned after retries.")

    status = response.status_code
    LOGGER.info("Final HTTP status: %s", status)
    if status < 200 or status >= 300:
        raise SearchAbort(f"Non-2xx after retries (HTTP {status}). Body: {response.text}")

    return parse_search_payload(response)


def parse_search_payload(response: requests.Response) -> list[Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise SearchAbort(f"JSON parse error: {exc}") from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        raise SearchAbort("Unexpected response shape (no data array).")

    LOGGER.info("API response items count: %s", len(payload["data"]))
    return payload["data"]
