"""
Keep the stats panel in sync with a saved Account Details page.

The page is often written before the trading table has loaded, and it is
rewritten in bursts while the site updates.  ``PageWatcher`` therefore:

* retries every ``poll_interval`` seconds, with no retry limit, until the
  table is present;
* after that, watches the file's modification time and waits for the file to
  stay unchanged for ``debounce`` seconds before recomputing, so a burst of
  writes results in one recompute.

Each recompute re-reads and re-parses the whole page; a later pass simply
replaces the previous one.
"""

import logging
import os
import threading
import time
from typing import Callable, Dict, List, Optional

from table_reader import read_table_file

logger = logging.getLogger(__name__)

Rows = List[Dict[str, str]]


class PageWatcher:
    """Poll a page file and hand freshly read rows to ``on_rows``."""

    def __init__(self, filepath: str, on_rows: Callable[[Rows], None], *,
                 poll_interval: float = 1.5, debounce: float = 0.5,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            filepath: saved HTML page to read
            on_rows: called with the table rows after every (re)read
            poll_interval: seconds between attempts while the table is missing,
                and between change checks afterwards
            debounce: quiet period required before a changed file is re-read
            sleep: replaced in tests
        """
        self.filepath = filepath
        self.on_rows = on_rows
        self.poll_interval = poll_interval
        self.debounce = debounce
        self._sleep = sleep
        self.passes = 0

    def _mtime(self) -> Optional[float]:
        try:
            return os.path.getmtime(self.filepath)
        except OSError:
            return None

    def wait_for_rows(self, stop: Optional[threading.Event] = None) -> Optional[Rows]:
        """Read the table, retrying until it exists.

        Returns None only when ``stop`` is set before the table shows up.
        """
        attempt = 0
        while stop is None or not stop.is_set():
            attempt += 1
            rows = read_table_file(self.filepath)
            if rows is not None:
                return rows
            logger.debug("No trading table in %s yet (attempt %d), retrying in %.1fs",
                         self.filepath, attempt, self.poll_interval)
            self._sleep(self.poll_interval)
        return None

    def _settle(self, mtime: Optional[float], stop: Optional[threading.Event]) -> Optional[float]:
        """Wait until the modification time stops changing for ``debounce`` seconds."""
        while stop is None or not stop.is_set():
            self._sleep(self.debounce)
            latest = self._mtime()
            if latest == mtime:
                return latest
            mtime = latest
        return mtime

    def refresh(self, stop: Optional[threading.Event] = None) -> bool:
        """Run one full pass: read the table (waiting if needed) and render it."""
        rows = self.wait_for_rows(stop)
        if rows is None:
            return False
        self.passes += 1
        logger.info("Recomputing stats from %d row(s) (pass %d)", len(rows), self.passes)
        self.on_rows(rows)
        return True

    def run(self, stop: Optional[threading.Event] = None) -> None:
        """Render once, then re-render after every settled change until ``stop`` is set."""
        if not self.refresh(stop):
            return
        last_mtime = self._mtime()
        while stop is None or not stop.is_set():
            self._sleep(self.poll_interval)
            mtime = self._mtime()
            if mtime == last_mtime:
                continue
            last_mtime = self._settle(mtime, stop)
            if stop is not None and stop.is_set():
                break
            self.refresh(stop)
