"""Shared typed models for the literature-review runner."""

from __future__ import annotations

from dataclasses import dataclass

S2_BULK_SEARCH_URL = "https://api.semanticscholar.org/graph/v1/paper/search/bulk"


@dataclass(frozen=True, slots=True)
class Paper:
    """Normalized search result, ready to be laid out as a sheet row."""

    paper_id: str
    title: str
    publication_date: str
    link: str
    abstract: str | None
    authors: str


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Settings for one run; see config.load_config for the environment mapping."""

    workbook_path: str = "literature_review.xlsx"
    sheet_name: str = "Sheet1"
    search_keyword: str = "LLM Safety"
    open_access_only: bool = True
    limit_per_run: int = 15
    published_past_months: int = 10
    retry_count: int = 5
    backoff_factor_seconds: float = 1.0
    api_url: str = S2_BULK_SEARCH_URL
    api_key: str | None = None
    request_timeout_seconds: float = 20


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Outcome of one run. abort_reason is None when the run completed."""

    rows_appended: int = 0
    skipped_duplicates: int = 0
    skipped_missing_title: int = 0
    failed_items: int = 0
    start_row: int | None = None
    abort_reason: str | None = None

    @property
    def rows_skipped(self) -> int:
        return self.skipped_duplicates + self.skipped_missing_title + self.failed_items

    @property
    def aborted(self) -> bool:
        return self.abort_reason is not None
