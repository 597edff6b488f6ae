"""Environment-driven configuration for a run."""

from __future__ import annotations

import os

from models import S2_BULK_SEARCH_URL, RunConfig

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def load_config() -> RunConfig:
    """Build a RunConfig from environment variables (call load_dotenv first).

    Raises:
        ValueError: if a numeric or boolean variable cannot be parsed.
    """
    return RunConfig(
        workbook_path=os.getenv("WORKBOOK_PATH", "literature_review.xlsx"),
        sheet_name=os.getenv("SHEET_NAME", "Sheet1"),
        search_keyword=os.getenv("SEARCH_KEYWORD", "LLM Safety"),
        open_access_only=_env_bool("OPEN_ACCESS_ONLY", True),
        limit_per_run=int(os.getenv("LIMIT_PER_RUN", "15")),
        published_past_months=int(os.getenv("PUBLISHED_PAST_MONTHS", "10")),
        retry_count=int(os.getenv("RETRY_COUNT", "5")),
        backoff_factor_seconds=float(os.getenv("BACKOFF_FACTOR_SECONDS", "1.0")),
        api_url=os.getenv("S2_API_URL", S2_BULK_SEARCH_URL),
        api_key=os.getenv("S2_API_KEY") or None,
        request_timeout_seconds=float(os.getenv("REQUEST_TIMEOUT_SECONDS", "20")),
    )


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default

    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")
