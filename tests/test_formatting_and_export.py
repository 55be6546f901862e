"""
Tests for display formatting, breakdown tables and export.
"""

import pandas as pd
import pytest

from trade_stats import (
    DAYS,
    breakdown,
    export_records,
    format_money,
    format_num,
    format_pct,
    records_frame,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (1234.56, "$1,234.56"),
        (-1234.56, "-$1,234.56"),
        (0.0, "$0.00"),
        (-0.0, "$0.00"),
        (None, "$0.00"),
        (1000000, "$1,000,000.00"),
    ],
)
def test_format_money(value, expected):
    assert format_money(value) == expected


def test_format_pct_and_num():
    assert format_pct(100 / 3) == "33.3%"
    assert format_pct(None) == "0.0%"
    assert format_num(2) == "2.00"
    assert format_num(999) == "999.00"
    assert format_num(1.23456, 3) == "1.235"
    assert format_num(None) == "0.00"


def test_breakdown_by_symbol(scenario_records):
    df = breakdown(scenario_records, by="symbol", mode="trade")

    assert list(df["symbol"]) == ["AAA", "BBB"]
    assert list(df["records"]) == [2, 1]
    assert list(df["net_pnl"]) == [60.0, -10.0]
    assert "win_rate" in df.columns


def test_breakdown_by_day_lists_every_weekday(scenario_records):
    df = breakdown(scenario_records, by="day", mode="day")

    assert list(df["day"]) == DAYS
    by_day = df.set_index("day")
    assert by_day.loc["Tue", "net_pnl"] == 100.0
    assert by_day.loc["Wed", "net_pnl"] == -50.0
    assert by_day.loc["Mon", "records"] == 0
    assert by_day.loc["Mon", "profit_factor"] == 0.0


def test_breakdown_rejects_unknown_key(scenario_records):
    with pytest.raises(ValueError):
        breakdown(scenario_records, by="month")


def test_records_frame_keeps_order(scenario_records):
    df = records_frame(scenario_records)

    assert list(df["Symbol"]) == ["AAA", "AAA", "BBB"]
    assert list(df["Day"]) == ["Tue", "Wed", "Wed"]
    assert list(df["Net P&L"]) == [100.0, -40.0, -10.0]


def test_records_frame_empty():
    df = records_frame([])
    assert df.empty
    assert "Net P&L" in df.columns


def test_export_csv(tmp_path, scenario_records):
    out = tmp_path / "rows.csv"
    export_records(scenario_records, str(out))

    df = pd.read_csv(out)
    assert list(df["Symbol"]) == ["AAA", "AAA", "BBB"]
    assert df["Net P&L"].sum() == pytest.approx(50.0)


def test_export_excel(tmp_path, scenario_records):
    pytest.importorskip("openpyxl")
    out = tmp_path / "rows.xlsx"
    export_records(scenario_records, str(out))

    df = pd.read_excel(out)
    assert len(df) == 3
