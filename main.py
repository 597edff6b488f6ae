"""Entrypoint for the scheduled keyword literature-review run."""

from __future__ import annotations

import logging
from datetime import date

from dotenv import load_dotenv

from column_map import REQUIRED_HEADERS, ensure_required_headers
from config import load_config
from models import RunConfig, RunSummary
from row_builder import RowBuilder
from s2_feed import SearchAbort, search_papers
from sheet_store import SheetStore, open_sheet

NEW_ROW_BACKGROUND = "#E1F5FE"


def run(config: RunConfig, store: SheetStore, today: date | None = None) -> RunSummary:
    """Run one fetch -> dedupe -> append cycle against store.

    Headers are created before the search so the sheet is usable even when
    the search aborts. Rows are written in one block or not at all.
    """
    today = today or date.today()

    column_map = ensure_required_headers(store, REQUIRED_HEADERS)
    logging.info("Column map: %s", column_map)

    try:
        items = search_papers(config, today)
    except SearchAbort as exc:
        logging.warning("Aborting run: %s", exc)
        return RunSummary(abort_reason=str(exc))

    existing_titles = load_existing_titles(store, column_map)
    logging.info("Existing items loaded: %s", len(existing_titles))

    builder = RowBuilder(column_map, existing_titles, config.limit_per_run)
    new_rows = builder.build(items)
    logging.info(
        "Row build: kept=%s duplicates=%s missing_title=%s failed=%s",
        len(new_rows),
        builder.skipped_duplicates,
        builder.skipped_missing_title,
        builder.failed_items,
    )

    if not new_rows:
        logging.info("No new rows to append.")
        return RunSummary(
            skipped_duplicates=builder.skipped_duplicates,
            skipped_missing_title=builder.skipped_missing_title,
            failed_items=builder.failed_items,
            abort_reason="No new rows to append.",
        )

    start_row = store.last_row() + 1
    num_cols = max(column_map.values())
    store.set_values(start_row, 1, new_rows)
    store.set_background(start_row, 1, len(new_rows), num_cols, NEW_ROW_BACKGROUND)
    logging.info("Appended %s new rows starting at row %s.", len(new_rows), start_row)

    return RunSummary(
        rows_appended=len(new_rows),
        skipped_duplicates=builder.skipped_duplicates,
        skipped_missing_title=builder.skipped_missing_title,
        failed_items=builder.failed_items,
        start_row=start_row,
    )


def load_existing_titles(store: SheetStore, column_map: dict[str, int]) -> set[str]:
    """Titles from rows 2..last of the title column; empty when there is no data yet."""
    last_row = store.last_row()
    title_col = column_map.get("title")
    if last_row <= 1 or not title_col:
        return set()

    values = store.get_values(2, title_col, last_row - 1, 1)
    return {_cell_text(row[0]) for row in values if row[0] is not None and row[0] != ""}


def _cell_text(value: object) -> str:
    # Whole-number floats read back from xlsx render as "1", not "1.0".
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def main() -> None:
    """Load config from the environment, run once, and save the workbook."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    config = load_config()

    store = open_sheet(config.workbook_path, config.sheet_name)
    try:
        summary = run(config, store)
    except Exception:
        logging.exception("Run failed for sheet %s", store.name)
        raise
    finally:
        # Header columns created before an abort are kept.
        if store.dirty:
            store.save()

    logging.info(
        "Run complete. appended=%s skipped=%s aborted=%s reason=%s",
        summary.rows_appended,
        summary.rows_skipped,
        summary.aborted,
        summary.abort_reason,
    )


if __name__ == "__main__":
    main()
