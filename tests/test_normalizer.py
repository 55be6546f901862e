"""
Tests for turning table rows into TradeRecords.
"""

import pytest

from trade_stats import normalize_day_row, normalize_trade_row, parse_rows


def test_day_rows_drop_rows_without_symbol_or_date(day_rows):
    records = parse_rows(day_rows, "day")

    assert [r.symbol for r in records] == ["MNQ", "MES", "MNQ"]
    assert [r.date_label for r in records] == ["2024-01-02", "2024-01-03", "2024-01-05"]


def test_day_row_fields(day_rows):
    first, second, third = parse_rows(day_rows, "day")

    assert first.net_pnl == 250.0
    assert first.commission == 12.4
    assert first.gross_pnl == pytest.approx(262.4)
    assert first.pnl_high == 310.0
    assert first.pnl_low == -80.0
    assert first.win_pct is None
    assert first.day_of_week == 2
    assert first.day_name == "Tue"

    assert second.net_pnl == -120.5
    assert second.pnl_low == -150.0

    # Blank extrema cells stay unknown rather than reading as zero
    assert third.pnl_high is None
    assert third.pnl_low is None
    assert third.gross_pnl == 2.0


def test_badge_overrides_symbol_column():
    record = normalize_day_row({"Date": "2024-01-02", "Symbol": "MNQ Micro Nasdaq",
                                "Symbol Badge": "MNQ", "Net PnL": "$5.00"})
    assert record.symbol == "MNQ"


def test_empty_badge_falls_back_to_symbol_column():
    record = normalize_day_row({"Date": "2024-01-02", "Symbol": "MES", "Symbol Badge": " "})
    assert record.symbol == "MES"


def test_unparseable_date_keeps_record_without_weekday():
    record = normalize_day_row({"Date": "TBD", "Symbol": "MNQ", "Net PnL": "$5.00"})

    assert record is not None
    assert record.date is None
    assert record.day_of_week is None
    assert record.day_name == ""


def test_missing_columns_degrade_to_zero():
    record = normalize_day_row({"Date": "2024-01-02", "Symbol": "MNQ"})

    assert record.net_pnl == 0.0
    assert record.commission == 0.0
    assert record.gross_pnl == 0.0


def test_trade_rows(trade_rows):
    records = parse_rows(trade_rows, "trade")

    assert [r.net_pnl for r in records] == [100.0, -40.0, -10.0]
    assert [r.win_pct for r in records] == [60.0, 40.0, 20.0]
    assert all(r.commission == 0.0 for r in records)
    assert all(r.gross_pnl == r.net_pnl for r in records)
    assert [r.day_name for r in records] == ["Tue", "Wed", "Wed"]


def test_trade_row_does_not_read_parentheses_as_negative():
    record = normalize_trade_row({"Date": "2024-01-02", "Symbol": "AAA", "Net PnL": "(25.00)"})
    assert record.net_pnl == 0.0


def test_trade_row_dropped_without_symbol():
    assert normalize_trade_row({"Date": "2024-01-02", "Symbol": "", "Net PnL": "$1"}) is None


def test_records_are_frozen(day_rows):
    record = parse_rows(day_rows, "day")[0]
    with pytest.raises(AttributeError):
        record.net_pnl = 0.0


def test_unknown_mode_rejected(day_rows):
    with pytest.raises(ValueError):
        parse_rows(day_rows, "week")
