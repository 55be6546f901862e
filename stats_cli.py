#!/usr/bin/env python3
"""
Trade Stats - command-line report for a saved Account Details page.

Examples:
    trade-stats account.html
    trade-stats account.html --view asset --symbol MNQ
    trade-stats account.html --mode trade --breakdown
    trade-stats account.html --interactive
    trade-stats account.html --watch
"""

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from page_watcher import PageWatcher
from stats_config import load_settings
from stats_view import VIEW_MODES, PanelState, ViewSelection, build_panel, panel_cards, selection_title
from table_reader import read_table_file
from trade_stats import DAYS, STATS_MODES, TradeRecord, breakdown, export_records, parse_rows, symbol_list

NO_DATA_MESSAGE = ("No trading history data yet. Open Account Details and ensure "
                   "the table has loaded.")


def print_panel(panel: PanelState) -> None:
    """Print the stats panel for one selection."""
    print("\n" + "=" * 60)
    print(f"  TRADING STATS - {selection_title(panel.selection)}")
    print("=" * 60)
    if panel.record_count == 0 and panel.selection.view_mode == "all":
        print(NO_DATA_MESSAGE)
        return
    for label, value, _ in panel_cards(panel):
        print(f"{label:<26} {value:>20}")
    print(f"{'Rows':<26} {panel.record_count:>20}")


def print_breakdown(records: Sequence[TradeRecord], by: str, mode: str) -> None:
    df = breakdown(records, by=by, mode=mode)
    print(f"\n--- Breakdown by {by} ---")
    if df.empty:
        print("(no records)")
    else:
        print(df.round(2).to_string(index=False))


class StatsCLI:
    """Menu-driven stats panel, one menu entry per panel control."""

    def __init__(self, records: List[TradeRecord], mode: str = "day", default_day: str = "Mon"):
        self.records = records
        self.mode = mode
        self.default_day = default_day
        self.selection = ViewSelection()

    @property
    def symbols(self) -> List[str]:
        return sorted({r.symbol for r in self.records})

    def display_menu(self) -> None:
        print("\n" + "=" * 60)
        print("1. All")
        print("2. By asset")
        print("3. By day")
        print("4. Choose asset")
        print("5. Choose day")
        print("6. Breakdown by asset")
        print("7. Breakdown by day")
        print("8. Exit")
        print("=" * 60)

    def show(self) -> None:
        print_panel(build_panel(self.records, self.selection, self.mode))

    def choose_asset(self) -> None:
        symbols = self.symbols
        if not symbols:
            print("Error: No assets in the table.")
            return
        print(f"Assets: {', '.join(symbols)}")
        symbol = input("Asset: ").strip()
        if symbol not in symbols:
            print(f"Error: Unknown asset {symbol!r}.")
            return
        self.selection = self.selection.with_symbol(symbol)
        self.show()

    def choose_day(self) -> None:
        day = input("Day (Mon-Fri): ").strip().capitalize()[:3]
        if day not in DAYS:
            print(f"Error: Unknown day {day!r}.")
            return
        self.selection = self.selection.with_day(day)
        self.show()

    def run(self) -> None:
        """Run the interactive menu until the user exits."""
        self.show()
        while True:
            self.display_menu()
            choice = input("\nEnter your choice (1-8): ").strip()

            if choice == '1':
                self.selection = self.selection.switch("all")
                self.show()
            elif choice == '2':
                self.selection = self.selection.switch("asset", self.symbols)
                self.show()
            elif choice == '3':
                self.selection = self.selection.switch("day", default_day=self.default_day)
                self.show()
            elif choice == '4':
                self.choose_asset()
            elif choice == '5':
                self.choose_day()
            elif choice == '6':
                print_breakdown(self.records, "symbol", self.mode)
            elif choice == '7':
                print_breakdown(self.records, "day", self.mode)
            elif choice == '8':
                break
            else:
                print("\nError: Invalid choice. Please select 1-8.")


def parse_args(argv: Optional[Sequence[str]] = None, settings: Optional[dict] = None) -> argparse.Namespace:
    settings = settings or load_settings()
    ap = argparse.ArgumentParser(description="Trading stats from a saved Account Details page")
    ap.add_argument("page", help="Path to the saved HTML page")
    ap.add_argument("--mode", choices=STATS_MODES, default=settings["stats_mode"],
                    help="day: per-day rows with commission; trade: per-trade rows")
    ap.add_argument("--view", choices=VIEW_MODES, default="all")
    ap.add_argument("--symbol", help="Asset to show with --view asset")
    ap.add_argument("--day", choices=DAYS, type=str.capitalize,
                    help="Weekday (Mon..Fri) to show with --view day")
    ap.add_argument("--default-day", default=settings["default_day"])
    ap.add_argument("--breakdown", action="store_true", help="Also print per-asset and per-day tables")
    ap.add_argument("--export", metavar="FILE", help="Write parsed rows to .csv or .xlsx")
    ap.add_argument("--interactive", action="store_true", help="Menu-driven panel")
    ap.add_argument("--watch", action="store_true", help="Re-print whenever the page changes")
    ap.add_argument("--poll-interval", type=float, default=settings["poll_interval"])
    ap.add_argument("--debounce", type=float, default=settings["debounce"])
    ap.add_argument("--verbose", "-v", action="store_true")
    return ap.parse_args(argv)


def initial_selection(args: argparse.Namespace, records: Sequence[TradeRecord]) -> ViewSelection:
    """Selection for the first panel; raises ValueError for an asset not in the table."""
    selection = ViewSelection()
    if args.view == "asset":
        symbols = symbol_list(records)
        if args.symbol and args.symbol not in symbols:
            raise ValueError(f"Unknown asset {args.symbol!r}. Assets: {', '.join(symbols) or 'none'}")
        selection = selection.with_symbol(args.symbol) if args.symbol else \
            selection.switch("asset", symbols)
    elif args.view == "day":
        selection = selection.with_day(args.day) if args.day else \
            selection.switch("day", default_day=args.default_day)
    return selection


def report(args: argparse.Namespace, rows) -> bool:
    """Print the panel (and breakdowns); False when the selection is invalid."""
    records = parse_rows(rows, args.mode)
    try:
        selection = initial_selection(args, records)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return False
    print_panel(build_panel(records, selection, args.mode))
    if args.breakdown:
        print_breakdown(records, "symbol", args.mode)
        print_breakdown(records, "day", args.mode)
    return True


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.watch:
        watcher = PageWatcher(args.page, lambda rows: report(args, rows),
                              poll_interval=args.poll_interval, debounce=args.debounce)
        try:
            watcher.run()
        except KeyboardInterrupt:
            pass
        return 0

    try:
        rows = read_table_file(args.page)
    except OSError as e:
        print(f"Error: Could not read {args.page}: {e}", file=sys.stderr)
        return 1
    if rows is None:
        print(f"Error: No trading history table found in {args.page}", file=sys.stderr)
        return 1

    records = parse_rows(rows, args.mode)
    if args.interactive:
        StatsCLI(records, args.mode, args.default_day).run()
    elif not report(args, rows):
        return 1

    if args.export:
        try:
            export_records(records, args.export)
        except (OSError, ImportError, ValueError) as e:
            print(f"Error: Failed to export: {e}", file=sys.stderr)
            return 1
        print(f"\nRows exported to {args.export}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
