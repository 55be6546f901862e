"""
Trade Stats
===========

Core logic for turning the rows of an account "trading history" table into
performance statistics.  The table is read elsewhere (see ``table_reader``);
this module only deals with display strings and the numbers behind them.

Two aggregation modes are supported:

* ``day``   - each row is one trading day for one symbol (Net PnL, Commission,
  PnL High, PnL Low).  Win rate and profit factor are computed per calendar
  day.
* ``trade`` - each row is one trade summary (Net PnL, Win %, Avg Win,
  Avg Loss).  Win rate and profit factor are computed per row.

Everything here is a pure function of its input.  Records are frozen and every
summary is recomputed from scratch, so the same rows always give the same
numbers.
"""

import datetime as dt
import logging
import math
import re
import warnings
from dataclasses import asdict, dataclass, fields
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd

logger = logging.getLogger(__name__)

DAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
WORK_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri"]

STATS_MODES = ("day", "trade")

# Shown instead of infinity when there are no losses
PROFIT_FACTOR_CAP = 999.0

# Column labels used by the account table
COL_DATE = "Date"
COL_SYMBOL = "Symbol"
COL_SYMBOL_BADGE = "Symbol Badge"
COL_NET_PNL = "Net PnL"
COL_WIN_PCT = "Win %"
COL_AVG_WIN = "Avg Win"
COL_AVG_LOSS = "Avg Loss"
COL_COMMISSION = "Commission"
COL_PNL_HIGH = "PnL High"
COL_PNL_LOW = "PnL Low"

_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
# Words pandas resolves against the clock; a row's date must not depend on when it is read
_RELATIVE_DATE = re.compile(r"\b(?:now|today|tomorrow|yesterday)\b", re.IGNORECASE)


# ============================================================================
# Field parsers
# ============================================================================

def _leading_number(text: str) -> Optional[float]:
    match = _NUMBER_PREFIX.match(text)
    if not match:
        return None
    value = float(match.group())
    if not math.isfinite(value):
        return None
    return value


def parse_currency(text: Optional[str], parentheses: bool = True) -> float:
    """Parse a display amount such as ``"$1,234.56"`` or ``"-$12.00"``.

    When ``parentheses`` is True an accounting-style value like ``"(123.45)"``
    is read as negative.  The trade table never uses that notation and is
    parsed with ``parentheses=False``, in which case such text yields 0.

    Never raises; empty or unparsable input gives 0.0.
    """
    if not text or not isinstance(text, str):
        return 0.0
    trimmed = text.strip()
    cleaned = re.sub(r"[$,\s]", "", trimmed)
    if parentheses:
        cleaned = cleaned.replace("(", "").replace(")", "")
    value = _leading_number(cleaned)
    if value is None:
        return 0.0
    if parentheses and "(" in trimmed:
        return -abs(value)
    return value


def parse_percent(text: Optional[str]) -> float:
    """Parse ``"62.5%"`` into 62.5; 0.0 if it cannot be read."""
    if not text or not isinstance(text, str):
        return 0.0
    value = _leading_number(re.sub(r"[%\s]", "", text))
    return value if value is not None else 0.0


def parse_date(text: Optional[str]) -> Optional[dt.datetime]:
    """Parse a display date (ISO, ``MM/DD/YYYY``, ``Jan 2, 2024``...).

    Returns None when pandas cannot make sense of the string, and for
    relative words like ``"now"`` or ``"today"``.
    """
    if not text or not isinstance(text, str) or not text.strip():
        return None
    if _RELATIVE_DATE.search(text) or not any(ch.isdigit() for ch in text):
        return None
    try:
        with warnings.catch_warnings():
            # pandas warns when it has to fall back to dateutil guessing
            warnings.simplefilter("ignore")
            ts = pd.to_datetime(text.strip(), errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def weekday_index(date: Optional[dt.datetime]) -> Optional[int]:
    """Day of week with Sunday=0, or None when there is no date."""
    if date is None:
        return None
    return (date.weekday() + 1) % 7


# ============================================================================
# Records
# ============================================================================

@dataclass(frozen=True)
class TradeRecord:
    """One row of the account table after normalization.

    ``net_pnl`` already has commission taken out; ``gross_pnl`` adds it back.
    ``pnl_high``/``pnl_low`` are only known for day rows and ``win_pct`` only
    for trade rows.
    """

    date: Optional[dt.datetime]
    date_label: str
    symbol: str
    net_pnl: float
    commission: float = 0.0
    pnl_high: Optional[float] = None
    pnl_low: Optional[float] = None
    win_pct: Optional[float] = None

    @property
    def gross_pnl(self) -> float:
        return self.net_pnl + self.commission

    @property
    def day_of_week(self) -> Optional[int]:
        return weekday_index(self.date)

    @property
    def day_name(self) -> str:
        index = self.day_of_week
        return DAYS[index] if index is not None else ""


def _cell(row: Mapping[str, str], label: str) -> str:
    value = row.get(label)
    if value is None:
        return ""
    return str(value).strip()


def _row_symbol(row: Mapping[str, str]) -> str:
    # The badge carries the same symbol as the column, just styled
    badge = _cell(row, COL_SYMBOL_BADGE)
    return badge if badge else _cell(row, COL_SYMBOL)


def _optional_amount(text: str) -> Optional[float]:
    return parse_currency(text) if text else None


def normalize_day_row(row: Mapping[str, str]) -> Optional[TradeRecord]:
    """Build a record from a day row, or None if symbol/date is missing."""
    symbol = _row_symbol(row)
    date_label = _cell(row, COL_DATE)
    if not symbol or not date_label:
        return None
    return TradeRecord(
        date=parse_date(date_label),
        date_label=date_label,
        symbol=symbol,
        net_pnl=parse_currency(_cell(row, COL_NET_PNL)),
        commission=parse_currency(_cell(row, COL_COMMISSION)),
        pnl_high=_optional_amount(_cell(row, COL_PNL_HIGH)),
        pnl_low=_optional_amount(_cell(row, COL_PNL_LOW)),
    )


def normalize_trade_row(row: Mapping[str, str]) -> Optional[TradeRecord]:
    """Build a record from a trade row, or None if symbol/date is missing.

    Trade rows carry no commission, so ``gross_pnl == net_pnl``.
    """
    symbol = _row_symbol(row)
    date_label = _cell(row, COL_DATE)
    if not symbol or not date_label:
        return None
    return TradeRecord(
        date=parse_date(date_label),
        date_label=date_label,
        symbol=symbol,
        net_pnl=parse_currency(_cell(row, COL_NET_PNL), parentheses=False),
        win_pct=parse_percent(_cell(row, COL_WIN_PCT)),
    )


def _check_mode(mode: str) -> None:
    if mode not in STATS_MODES:
        raise ValueError(f"Unknown stats mode {mode!r}; expected one of {STATS_MODES}")


def parse_rows(rows: Iterable[Mapping[str, str]], mode: str = "day") -> List[TradeRecord]:
    """Normalize table rows in order, dropping rows without symbol or date."""
    _check_mode(mode)
    normalize = normalize_day_row if mode == "day" else normalize_trade_row
    records: List[TradeRecord] = []
    dropped = 0
    for row in rows:
        record = normalize(row)
        if record is None:
            dropped += 1
            continue
        records.append(record)
    if dropped:
        logger.debug("Dropped %d row(s) without symbol or date", dropped)
    return records


# ============================================================================
# Grouping
# ============================================================================

def group_by_symbol(records: Iterable[TradeRecord]) -> Dict[str, List[TradeRecord]]:
    """Bucket records by symbol, keeping the original order inside each bucket."""
    by_symbol: Dict[str, List[TradeRecord]] = {}
    for record in records:
        by_symbol.setdefault(record.symbol, []).append(record)
    return by_symbol


def symbol_list(records: Iterable[TradeRecord]) -> List[str]:
    return sorted({record.symbol for record in records})


def group_by_weekday(records: Iterable[TradeRecord]) -> Dict[str, List[TradeRecord]]:
    """Bucket records by weekday label.

    All seven days are present, possibly empty.  Records without a parseable
    date are left out of every bucket.
    """
    by_day: Dict[str, List[TradeRecord]] = {day: [] for day in DAYS}
    for record in records:
        if record.day_name in by_day:
            by_day[record.day_name].append(record)
    return by_day


# ============================================================================
# Summaries
# ============================================================================

@dataclass(frozen=True)
class TradeStats:
    """Per-trade summary.  The default value is the empty-input summary."""

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    gross_profit: float = 0.0
    gross_loss: float = 0.0
    profit_factor: float = 0.0
    net_pnl: float = 0.0
    expectancy: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    avg_win_pct: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class DayStats:
    """Per-day summary.  The default value is the empty-input summary."""

    profitable_days: int = 0
    losing_days: int = 0
    day_win_rate_pct: float = 0.0
    gross_pnl: float = 0.0
    total_commission: float = 0.0
    profit_factor: float = 0.0
    net_pnl: float = 0.0
    expectancy: float = 0.0
    worst_day_net: float = 0.0
    worst_intraday_low: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


StatsSummary = Union[TradeStats, DayStats]


def profit_factor(gains: float, losses: float) -> float:
    """Gains over absolute losses, capped at PROFIT_FACTOR_CAP when losses are 0."""
    losses = abs(losses)
    if losses > 0:
        return gains / losses
    return PROFIT_FACTOR_CAP if gains > 0 else 0.0


def expectancy(win_rate_pct: float, avg_win: float, avg_loss: float) -> float:
    """Expectancy = win_rate * avg_win - (1 - win_rate) * avg_loss.

    ``avg_loss`` is a positive magnitude and ``win_rate_pct`` is 0-100.
    """
    rate = win_rate_pct / 100
    return rate * avg_win - (1 - rate) * avg_loss


def compute_trade_stats(records: Sequence[TradeRecord]) -> TradeStats:
    """Summarize records one trade at a time.

    Trades with exactly zero P&L count toward the total but are neither
    winners nor losers.
    """
    if not records:
        return TradeStats()

    net_pnl = 0.0
    num_wins = 0
    num_losses = 0
    gross_profit = 0.0
    loser_pnl_sum = 0.0
    largest_win = 0.0
    largest_loss = 0.0
    win_pct_sum = 0.0
    win_pct_count = 0

    for record in records:
        pnl = record.net_pnl
        net_pnl += pnl
        if pnl > 0:
            num_wins += 1
            gross_profit += pnl
            largest_win = max(largest_win, pnl)
        elif pnl < 0:
            num_losses += 1
            loser_pnl_sum += pnl
            largest_loss = min(largest_loss, pnl)
        if record.win_pct is not None:
            win_pct_sum += record.win_pct
            win_pct_count += 1

    total = len(records)
    gross_loss = abs(loser_pnl_sum)
    win_rate = (num_wins / total) * 100 if total else 0.0
    avg_win = (gross_profit / num_wins) if num_wins else 0.0
    avg_loss = (gross_loss / num_losses) if num_losses else 0.0

    return TradeStats(
        total_trades=total,
        winning_trades=num_wins,
        losing_trades=num_losses,
        win_rate=win_rate,
        gross_profit=gross_profit,
        gross_loss=gross_loss,
        profit_factor=profit_factor(gross_profit, gross_loss),
        net_pnl=net_pnl,
        expectancy=expectancy(win_rate, avg_win, avg_loss),
        avg_win=avg_win,
        avg_loss=avg_loss,
        largest_win=largest_win,
        largest_loss=largest_loss,
        avg_win_pct=(win_pct_sum / win_pct_count) if win_pct_count else 0.0,
    )


def compute_day_stats(records: Sequence[TradeRecord]) -> DayStats:
    """Summarize records one calendar day at a time.

    Days are keyed by their display label.  A day is profitable when the net
    P&L of all its rows is positive; a zero day is neither profitable nor
    losing.  Profit factor uses each day's gross (pre-commission) total,
    while the gross P&L figure classifies every row by the sign of its own
    gross amount, so a row can be net-negative yet count as gross profit.
    """
    if not records:
        return DayStats()

    day_net: Dict[str, float] = {}
    day_gross: Dict[str, float] = {}
    net_pnl = 0.0
    total_commission = 0.0
    gross_profit = 0.0
    gross_loss = 0.0
    winner_pnl_sum = 0.0
    loser_pnl_sum = 0.0
    num_wins = 0
    num_losses = 0
    worst_day_net = 0.0
    pnl_lows: List[float] = []

    for record in records:
        key = record.date_label
        day_net[key] = day_net.get(key, 0.0) + record.net_pnl
        day_gross[key] = day_gross.get(key, 0.0) + record.gross_pnl

        net_pnl += record.net_pnl
        total_commission += record.commission
        gross = record.gross_pnl
        if gross > 0:
            gross_profit += gross
        elif gross < 0:
            gross_loss += gross

        if record.net_pnl > 0:
            num_wins += 1
            winner_pnl_sum += record.net_pnl
        elif record.net_pnl < 0:
            num_losses += 1
            loser_pnl_sum += abs(record.net_pnl)
            worst_day_net = min(worst_day_net, record.net_pnl)

        if record.pnl_low is not None:
            pnl_lows.append(record.pnl_low)

    profitable_days = sum(1 for total in day_net.values() if total > 0)
    losing_days = sum(1 for total in day_net.values() if total < 0)
    day_win_rate_pct = (profitable_days / len(day_net)) * 100 if day_net else 0.0

    gross_from_up_days = sum(total for total in day_gross.values() if total > 0)
    gross_from_down_days = sum(total for total in day_gross.values() if total < 0)

    avg_win = (winner_pnl_sum / num_wins) if num_wins else 0.0
    avg_loss = (loser_pnl_sum / num_losses) if num_losses else 0.0

    return DayStats(
        profitable_days=profitable_days,
        losing_days=losing_days,
        day_win_rate_pct=day_win_rate_pct,
        gross_pnl=gross_profit - abs(gross_loss),
        total_commission=total_commission,
        profit_factor=profit_factor(gross_from_up_days, gross_from_down_days),
        net_pnl=net_pnl,
        expectancy=expectancy(day_win_rate_pct, avg_win, avg_loss),
        worst_day_net=worst_day_net,
        worst_intraday_low=min(pnl_lows) if pnl_lows else worst_day_net,
    )


def compute_stats(records: Sequence[TradeRecord], mode: str = "day") -> StatsSummary:
    _check_mode(mode)
    if mode == "day":
        return compute_day_stats(records)
    return compute_trade_stats(records)


def empty_stats(mode: str = "day") -> StatsSummary:
    _check_mode(mode)
    return DayStats() if mode == "day" else TradeStats()


# ============================================================================
# Formatting
# ============================================================================

def format_money(value: Optional[float]) -> str:
    """``"$1,234.56"`` for gains, ``"-$1,234.56"`` for losses."""
    value = value or 0.0
    sign = "" if value >= 0 else "-"
    return f"{sign}${abs(value):,.2f}"


def format_pct(value: Optional[float]) -> str:
    return f"{value or 0.0:.1f}%"


def format_num(value: Optional[float], decimals: int = 2) -> str:
    return f"{value or 0.0:.{decimals}f}"


# ============================================================================
# Tables for display and export
# ============================================================================

def breakdown(records: Sequence[TradeRecord], by: str = "symbol", mode: str = "day") -> pd.DataFrame:
    """One summary row per bucket.

    Args:
        records: normalized records
        by: ``"symbol"`` (sorted symbols) or ``"day"`` (Sun..Sat)
        mode: stats mode used for every bucket

    Returns:
        DataFrame with a key column followed by every summary field.
    """
    if by == "symbol":
        buckets = group_by_symbol(records)
        keys = sorted(buckets)
    elif by == "day":
        buckets = group_by_weekday(records)
        keys = list(DAYS)
    else:
        raise ValueError(f"Unknown breakdown key {by!r}; expected 'symbol' or 'day'")

    summary_type = DayStats if mode == "day" else TradeStats
    columns = [by] + ["records"] + [f.name for f in fields(summary_type)]
    rows = []
    for key in keys:
        bucket = buckets.get(key, [])
        row = {by: key, "records": len(bucket)}
        row.update(compute_stats(bucket, mode).to_dict())
        rows.append(row)
    return pd.DataFrame(rows, columns=columns)


def records_frame(records: Iterable[TradeRecord]) -> pd.DataFrame:
    """Records as a DataFrame, one row per record in source order."""
    data = []
    for record in records:
        data.append({
            "Date": record.date_label,
            "Day": record.day_name,
            "Symbol": record.symbol,
            "Net P&L": record.net_pnl,
            "Commission": record.commission,
            "Gross P&L": record.gross_pnl,
            "P&L High": record.pnl_high,
            "P&L Low": record.pnl_low,
            "Win %": record.win_pct,
        })
    columns = ["Date", "Day", "Symbol", "Net P&L", "Commission", "Gross P&L",
               "P&L High", "P&L Low", "Win %"]
    return pd.DataFrame(data, columns=columns)


def export_records(records: Iterable[TradeRecord], filepath: str) -> None:
    """Write records to ``.xlsx`` (needs openpyxl) or otherwise CSV."""
    df = records_frame(records)
    if filepath.lower().endswith(".xlsx"):
        df.to_excel(filepath, index=False, engine="openpyxl")
    else:
        df.to_csv(filepath, index=False)
