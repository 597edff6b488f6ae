"""Header-row driven column lookup for the review sheet."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sheet_store import SheetStore

# Keys must be lowercase; they are matched against normalized headers.
REQUIRED_HEADERS: tuple[str, ...] = ("date", "title", "authors", "abstract", "link")

LOGGER = logging.getLogger(__name__)


def build_column_map(store: SheetStore) -> dict[str, int]:
    """Map each normalized row-1 header to its 1-based column index.

    Headers are stripped and lowercased; blank headers are ignored. When two
    headers normalize to the same key the rightmost one wins.
    """
    last_col = store.last_column()
    if last_col == 0:
        return {}

    headers = store.get_values(1, 1, 1, last_col)[0]
    column_map: dict[str, int] = {}
    for index, header in enumerate(headers, start=1):
        if header is None:
            continue
        key = str(header).strip().lower()
        if key:
            column_map[key] = index
    return column_map


def ensure_required_headers(
    store: SheetStore,
    required_keys: Iterable[str] = REQUIRED_HEADERS,
) -> dict[str, int]:
    """Append a bold header column for each missing key and return the fresh map."""
    column_map = build_column_map(store)
    missing = [key for key in required_keys if key not in column_map]
    if not missing:
        return column_map

    LOGGER.info("Missing required headers: %s. Adding them now...", ", ".join(missing))
    last_col = store.last_column()
    for offset, key in enumerate(missing, start=1):
        column = last_col + offset
        store.set_values(1, column, [[display_label(key)]])
        store.set_font_weight(1, column, "bold")

    return build_column_map(store)


def display_label(key: str) -> str:
    """'date' -> 'Date'; the rest of the key is left untouched."""
    return key[:1].upper() + key[1:]
