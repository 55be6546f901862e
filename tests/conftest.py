from __future__ import annotations

import pytest

from trade_stats import TradeRecord, parse_date


def _record(date_label, symbol, net_pnl, commission=0.0, pnl_low=None, pnl_high=None, win_pct=None):
    return TradeRecord(
        date=parse_date(date_label),
        date_label=date_label,
        symbol=symbol,
        net_pnl=net_pnl,
        commission=commission,
        pnl_high=pnl_high,
        pnl_low=pnl_low,
        win_pct=win_pct,
    )


@pytest.fixture
def make_record():
    """Factory for records built straight from values (no string parsing)."""
    return _record


@pytest.fixture
def scenario_records():
    """Tue +100 AAA, Wed -40 AAA, Wed -10 BBB."""
    return [
        _record("2024-01-02", "AAA", 100.0),
        _record("2024-01-03", "AAA", -40.0),
        _record("2024-01-03", "BBB", -10.0),
    ]


@pytest.fixture
def day_rows():
    """Rows as read from the per-day account table."""
    return [
        {"Date": "2024-01-02", "Symbol": "MNQ", "Symbol Badge": "MNQ", "Net PnL": "$250.00",
         "Commission": "$12.40", "PnL High": "$310.00", "PnL Low": "-$80.00"},
        {"Date": "2024-01-03", "Symbol": "MES", "Net PnL": "($120.50)",
         "Commission": "$6.20", "PnL High": "$40.00", "PnL Low": "($150.00)"},
        {"Date": "", "Symbol": "MNQ", "Net PnL": "$99.00"},
        {"Date": "2024-01-05", "Symbol": "", "Net PnL": "$10.00"},
        {"Date": "2024-01-05", "Symbol": "MNQ", "Net PnL": "-$3.00",
         "Commission": "$5.00", "PnL High": "", "PnL Low": ""},
    ]


@pytest.fixture
def trade_rows():
    """Rows as read from the per-trade account table."""
    return [
        {"Date": "01/02/2024", "Symbol": "AAA", "Net PnL": "$100.00", "Win %": "60.0%",
         "Avg Win": "$50.00", "Avg Loss": "$20.00"},
        {"Date": "01/03/2024", "Symbol": "AAA", "Net PnL": "-$40.00", "Win %": "40.0%",
         "Avg Win": "$30.00", "Avg Loss": "$25.00"},
        {"Date": "01/03/2024", "Symbol": "BBB", "Net PnL": "-$10.00", "Win %": "20.0%",
         "Avg Win": "$10.00", "Avg Loss": "$5.00"},
    ]


SAMPLE_PAGE = """
<html><body>
<div class="stats-summary-section"><h2>Summary</h2></div>
<table class="data-table"><tbody><tr><td data-label="Date">1999-01-01</td>
<td data-label="Symbol">DECOY</td></tr></tbody></table>
<div class="data-table-section">
  <table class="data-table">
    <thead><tr><th>Date</th><th>Symbol</th><th>Net PnL</th><th>Commission</th></tr></thead>
    <tbody>
      <tr>
        <td data-label="Date"> 2024-01-02 </td>
        <td data-label="Symbol"><span class="symbol-badge">MNQ</span> Micro Nasdaq</td>
        <td data-label="Net PnL">$1,250.00</td>
        <td data-label="Commission">$12.40</td>
        <td data-label="PnL High">$1,300.00</td>
        <td data-label="PnL Low">-$80.00</td>
      </tr>
      <tr>
        <td data-label="Date">2024-01-03</td>
        <td data-label="Symbol">S&amp;P</td>
        <td data-label="Net PnL">($120.50)</td>
        <td data-label="Commission">$6.20<br></td>
      </tr>
    </tbody>
  </table>
</div>
</body></html>
"""


@pytest.fixture
def sample_page_html():
    return SAMPLE_PAGE
