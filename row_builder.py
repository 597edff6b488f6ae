"""Turn search results into deduplicated, header-aligned sheet rows."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from models import Paper
from sheet_store import sanitize_cell_value

LOGGER = logging.getLogger(__name__)


class RowBuilder:
    """Builds output rows for one run and counts what it skipped.

    Args:
        column_map: Lowercase header -> 1-based column index.
        existing_titles: Titles already in the sheet; exact, case-sensitive match.
        row_limit: Maximum number of rows to produce.
    """

    def __init__(
        self,
        column_map: Mapping[str, int],
        existing_titles: set[str],
        row_limit: int,
    ) -> None:
        self.column_map = dict(column_map)
        self.existing_titles = existing_titles
        self.row_limit = row_limit
        self.skipped_duplicates = 0
        self.skipped_missing_title = 0
        self.failed_items = 0

    def build(self, items: Iterable[Any]) -> list[list[Any]]:
        rows: list[list[Any]] = []
        if self.row_limit < 1:
            return rows

        for item in items:
            try:
                paper = parse_paper(item)
                if paper is None:
                    self.skipped_missing_title += 1
                    LOGGER.info("Skipping: missing title for paperId=%s", _paper_id(item))
                    continue

                if paper.title in self.existing_titles:
                    self.skipped_duplicates += 1
                    LOGGER.info("Duplicate (by Title), skipping: %s", paper.title)
                    continue

                rows.append(make_row(self.column_map, paper))
            except Exception as exc:  # one malformed item must not sink the batch
                self.failed_items += 1
                LOGGER.warning("Error processing a paper item: %s", exc)
                continue

            if len(rows) >= self.row_limit:
                break

        return rows


def build_rows(
    items: Iterable[Any],
    column_map: Mapping[str, int],
    existing_titles: set[str],
    row_limit: int,
) -> list[list[Any]]:
    """Return rows for new items, in input order, capped at row_limit."""
    return RowBuilder(column_map, existing_titles, row_limit).build(items)


def parse_paper(item: Mapping[str, Any]) -> Paper | None:
    """Normalize one raw result; None when it has no usable title.

    Raises AttributeError for items that are not JSON objects.
    """
    # Same cleaning as SheetStore.set_values: compared title == stored title.
    title = sanitize_cell_value(str(item.get("title") or "")).strip()
    if not title:
        return None

    open_access = item.get("openAccessPdf")
    pdf_url = open_access.get("url") if isinstance(open_access, dict) else None
    link = str(pdf_url or item.get("url") or "").strip()

    return Paper(
        paper_id=str(item.get("paperId") or ""),
        title=title,
        publication_date=item.get("publicationDate") or "",
        link=link,
        abstract=item.get("abstract"),
        authors=_join_authors(item.get("authors")),
    )


def make_row(column_map: Mapping[str, int], paper: Paper) -> list[Any]:
    """Fixed-width row: one cell per column up to the highest mapped index."""
    width = max(column_map.values(), default=0)
    row: list[Any] = [""] * width

    cells = {
        "date": paper.publication_date,
        "title": paper.title,
        "authors": paper.authors,
        "link": paper.link,
        "abstract": paper.abstract,
    }
    for key, value in cells.items():
        column = column_map.get(key)
        if column:
            row[column - 1] = value
    return row


def _join_authors(authors: Any) -> str:
    if not isinstance(authors, list):
        return ""
    names = [
        author["name"]
        for author in authors
        if isinstance(author, dict) and isinstance(author.get("name"), str) and author["name"]
    ]
    return ", ".join(names)


def _paper_id(item: Any) -> str:
    return str(item.get("paperId") or "") if isinstance(item, dict) else ""
