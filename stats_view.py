"""
View selection for the stats panel.

The panel shows one summary at a time: all records, one symbol, or one
weekday.  The selection is a frozen value; every change produces a new
selection and the panel is rebuilt from the records from scratch.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from trade_stats import (
    WORK_DAYS,
    StatsSummary,
    TradeRecord,
    compute_stats,
    format_money,
    format_num,
    format_pct,
    group_by_symbol,
    group_by_weekday,
    symbol_list,
)

VIEW_MODES = ("all", "asset", "day")
DEFAULT_DAY = WORK_DAYS[0]


@dataclass(frozen=True)
class ViewSelection:
    """Which slice of the records the panel is showing."""

    view_mode: str = "all"
    selected_symbol: Optional[str] = None
    selected_day: Optional[str] = None

    def switch(self, view_mode: str, symbols: Sequence[str] = (),
               default_day: str = DEFAULT_DAY) -> "ViewSelection":
        """Return the selection after pressing one of the view toggle buttons.

        ``asset`` keeps the current symbol if it is still listed, otherwise
        picks the first one in ``symbols``; ``day`` keeps the current weekday,
        otherwise uses ``default_day``; ``all`` clears both.
        """
        if view_mode not in VIEW_MODES:
            raise ValueError(f"Unknown view mode {view_mode!r}; expected one of {VIEW_MODES}")
        if view_mode == "asset":
            symbol = self.selected_symbol if self.selected_symbol in symbols else None
            if symbol is None and symbols:
                symbol = sorted(symbols)[0]
            return ViewSelection("asset", symbol, None)
        if view_mode == "day":
            return ViewSelection("day", None, self.selected_day or default_day)
        return ViewSelection()

    def with_symbol(self, symbol: str) -> "ViewSelection":
        return ViewSelection("asset", symbol, None)

    def with_day(self, day: str) -> "ViewSelection":
        return ViewSelection("day", None, day)


def select_records(records: Sequence[TradeRecord], selection: ViewSelection) -> List[TradeRecord]:
    """Records the aggregator should see for ``selection``.

    Falls back to every record when the selected key has no bucket.
    """
    if selection.view_mode == "asset" and selection.selected_symbol:
        by_symbol = group_by_symbol(records)
        if selection.selected_symbol in by_symbol:
            return by_symbol[selection.selected_symbol]
    elif selection.view_mode == "day" and selection.selected_day:
        by_day = group_by_weekday(records)
        if selection.selected_day in by_day:
            return by_day[selection.selected_day]
    return list(records)


@dataclass(frozen=True)
class PanelState:
    """Everything a front end needs to draw the panel once."""

    selection: ViewSelection
    stats: StatsSummary
    mode: str
    record_count: int
    symbols: List[str] = field(default_factory=list)
    days: List[str] = field(default_factory=lambda: list(WORK_DAYS))

    @property
    def win_rate_label(self) -> str:
        if self.mode == "trade":
            return "Win rate"
        if self.selection.view_mode == "asset":
            return "Day win rate (asset)"
        if self.selection.view_mode == "day":
            return "Day win rate (weekday)"
        return "Day win rate"


def build_panel(records: Sequence[TradeRecord], selection: Optional[ViewSelection] = None,
                mode: str = "day") -> PanelState:
    """Recompute the panel for ``selection``; nothing is carried over between calls."""
    selection = selection or ViewSelection()
    subset = select_records(records, selection)
    return PanelState(
        selection=selection,
        stats=compute_stats(subset, mode),
        mode=mode,
        record_count=len(subset),
        symbols=symbol_list(records),
        days=list(WORK_DAYS),
    )


def _tone(value: float) -> str:
    if value > 0:
        return "positive"
    if value < 0:
        return "negative"
    return ""


def panel_cards(panel: PanelState) -> List[Tuple[str, str, str]]:
    """Stat cards as (label, formatted value, tone) in display order.

    Tone is ``"positive"``, ``"negative"`` or ``""`` and only drives colour.
    """
    s = panel.stats
    if panel.mode == "trade":
        return [
            ("Net P&L", format_money(s.net_pnl), _tone(s.net_pnl)),
            ("Expectancy", format_money(s.expectancy), _tone(s.expectancy)),
            (panel.win_rate_label,
             f"{format_pct(s.win_rate)} ({s.winning_trades} / {s.losing_trades})", ""),
            ("Profit factor", format_num(s.profit_factor, 2), ""),
            ("Trades", str(s.total_trades), ""),
            ("Gross profit", format_money(s.gross_profit), _tone(s.gross_profit)),
            ("Gross loss", format_money(-s.gross_loss), _tone(-s.gross_loss)),
            ("Avg win", format_money(s.avg_win), _tone(s.avg_win)),
            ("Avg loss", format_money(-s.avg_loss), _tone(-s.avg_loss)),
            ("Largest win", format_money(s.largest_win), _tone(s.largest_win)),
            ("Largest loss", format_money(s.largest_loss), _tone(s.largest_loss)),
            ("Avg win %", format_pct(s.avg_win_pct), ""),
        ]
    return [
        ("Net P&L", format_money(s.net_pnl), _tone(s.net_pnl)),
        ("Expectancy", format_money(s.expectancy), _tone(s.expectancy)),
        (panel.win_rate_label,
         f"{format_pct(s.day_win_rate_pct)} ({s.profitable_days} / {s.losing_days})", ""),
        ("Profit factor", format_num(s.profit_factor, 2), ""),
        ("Gross PnL", format_money(s.gross_pnl), _tone(s.gross_pnl)),
        ("Commission", format_money(-s.total_commission), ""),
        ("Worst intraday", format_money(s.worst_intraday_low), "negative"),
        ("Worst day", format_money(s.worst_day_net), "negative"),
    ]


def selection_title(selection: ViewSelection) -> str:
    if selection.view_mode == "asset" and selection.selected_symbol:
        return f"By asset: {selection.selected_symbol}"
    if selection.view_mode == "day" and selection.selected_day:
        return f"By day: {selection.selected_day}"
    return "All"
