"""
Read the trading-history table out of a saved Account Details page.

The page renders one ``<table class="data-table">`` whose body cells carry a
``data-label`` attribute naming their column ("Date", "Symbol", "Net PnL",
...).  Each body row becomes a dict of label -> trimmed cell text.  When a
row contains a ``.symbol-badge`` element its text is stored under
``"Symbol Badge"`` so the normalizer can prefer it over the plain column.
"""

import logging
import os
from html.parser import HTMLParser
from typing import Dict, List, Optional

from trade_stats import COL_SYMBOL_BADGE

logger = logging.getLogger(__name__)

TABLE_CLASS = "data-table"
SECTION_CLASS = "data-table-section"
BADGE_CLASS = "symbol-badge"

# Elements that never get an end tag
VOID_TAGS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
}

# Opening one of these closes any still-open sibling cell, row or section
_SECTIONS = ("thead", "tbody", "tfoot")
IMPLIED_CLOSE = {
    "td": ("td", "th"),
    "th": ("td", "th"),
    "tr": ("td", "th", "tr"),
    "thead": ("td", "th", "tr") + _SECTIONS,
    "tbody": ("td", "th", "tr") + _SECTIONS,
    "tfoot": ("td", "th", "tr") + _SECTIONS,
}


class _TradeTableParser(HTMLParser):
    """Collects every ``table.data-table`` in the page with its body rows."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.tables: List[Dict[str, object]] = []
        self._stack: List[tuple] = []
        self._table: Optional[Dict[str, object]] = None
        self._table_depth = 0
        self._inner_tables = 0
        self._in_head = False
        self._row: Optional[Dict[str, str]] = None
        self._cell_label: Optional[str] = None
        self._cell_text: Optional[List[str]] = None
        self._badge_text: Optional[List[str]] = None
        self._badge_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in VOID_TAGS:
            return
        attr_map = dict(attrs)
        classes = (attr_map.get("class") or "").split()
        implied = IMPLIED_CLOSE.get(tag, ())
        while self._stack and self._stack[-1][0] in implied:
            depth = len(self._stack)
            closed, _ = self._stack.pop()
            self._close(closed, depth)
        self._stack.append((tag, classes))

        if self._table is None:
            if tag == "table" and TABLE_CLASS in classes:
                in_section = any(SECTION_CLASS in c for _, c in self._stack[:-1])
                self._table = {"in_section": in_section, "rows": []}
                self._table_depth = len(self._stack)
            return

        # Rows and cells of a table nested inside a cell belong to that cell
        if tag == "table":
            self._inner_tables += 1
            return
        if self._inner_tables:
            return

        if tag in ("thead", "tfoot"):
            self._in_head = True
        elif tag == "tr" and not self._in_head:
            self._row = {}
        elif tag == "td" and self._row is not None:
            self._cell_label = attr_map.get("data-label")
            self._cell_text = []
        if BADGE_CLASS in classes and self._row is not None and self._badge_text is None:
            self._badge_text = []
            self._badge_depth = len(self._stack)

    def handle_startendtag(self, tag, attrs):
        # <td/> style self-closing tags open nothing
        pass

    def handle_data(self, data):
        if self._cell_text is not None:
            self._cell_text.append(data)
        if self._badge_text is not None:
            self._badge_text.append(data)

    def handle_endtag(self, tag):
        if tag in VOID_TAGS:
            return
        for index in range(len(self._stack) - 1, -1, -1):
            if self._stack[index][0] == tag:
                break
        else:
            return
        # Close implicitly-closed children too (e.g. a missing </td>)
        while len(self._stack) > index:
            depth = len(self._stack)
            closed, _ = self._stack.pop()
            self._close(closed, depth)

    def _close(self, tag: str, depth: int) -> None:
        if self._badge_text is not None and depth == self._badge_depth:
            if self._row is not None:
                self._row[COL_SYMBOL_BADGE] = "".join(self._badge_text).strip()
            self._badge_text = None
        if self._table is None:
            return
        if self._inner_tables:
            if tag == "table":
                self._inner_tables -= 1
            return
        if tag == "td" and self._cell_text is not None:
            if self._cell_label and self._row is not None:
                self._row[self._cell_label] = "".join(self._cell_text).strip()
            self._cell_label = None
            self._cell_text = None
        elif tag == "tr" and self._row is not None:
            if self._row:
                self._table["rows"].append(self._row)
            self._row = None
        elif tag in ("thead", "tfoot"):
            self._in_head = False
        elif tag == "table" and depth == self._table_depth:
            self.finish_table()

    def finish_table(self) -> None:
        if self._table is not None:
            self.tables.append(self._table)
        self._table = None
        self._inner_tables = 0
        self._row = None
        self._in_head = False


def read_table_rows(html: str) -> Optional[List[Dict[str, str]]]:
    """Return the body rows of the trading-history table.

    A table inside ``.data-table-section`` wins over any other
    ``table.data-table``.  Returns None when the page has no such table yet
    and an empty list when the table exists but has no rows.
    """
    parser = _TradeTableParser()
    parser.feed(html or "")
    parser.close()
    parser.finish_table()
    if not parser.tables:
        return None
    chosen = next((t for t in parser.tables if t["in_section"]), parser.tables[0])
    rows = list(chosen["rows"])
    logger.debug("Read %d row(s) from trading history table", len(rows))
    return rows


def read_table_file(filepath: str) -> Optional[List[Dict[str, str]]]:
    """Read rows from a saved page; a missing file counts as "no table yet"."""
    if not os.path.exists(filepath):
        return None
    with open(filepath, encoding="utf-8", errors="replace") as f:
        return read_table_rows(f.read())
