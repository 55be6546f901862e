"""
Trade Stats - Streamlit + Plotly Edition
========================================

Web panel for the trading stats of a saved Account Details page.
Run with: streamlit run app_streamlit.py
"""

import os

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from stats_config import load_settings, save_settings
from stats_view import ViewSelection, build_panel, panel_cards, selection_title
from table_reader import read_table_rows
from trade_stats import STATS_MODES, breakdown, format_money, parse_rows, records_frame

VIEW_LABELS = {"all": "All", "asset": "By asset", "day": "By day"}


# ============================================================================
# Page Configuration
# ============================================================================

st.set_page_config(
    page_title="Trading Stats",
    page_icon="📊",
    layout="wide",
)

settings = load_settings()

if 'selection' not in st.session_state:
    st.session_state.selection = ViewSelection()


# ============================================================================
# Main App
# ============================================================================

st.title("📊 Trading Stats")

with st.sidebar:
    st.subheader("📁 Account Page")
    uploaded_file = st.file_uploader("Upload saved Account Details page", type=["html", "htm"])
    st.divider()
    st.subheader("🎛️ Settings")
    mode = st.radio(
        "Stats mode",
        STATS_MODES,
        index=STATS_MODES.index(settings["stats_mode"]) if settings["stats_mode"] in STATS_MODES else 0,
        format_func=lambda m: "Per day (with commission)" if m == "day" else "Per trade",
    )
    if mode != settings["stats_mode"]:
        save_settings({"stats_mode": mode})

rows = None
if uploaded_file:
    try:
        html = uploaded_file.getvalue().decode("utf-8", errors="replace")
        rows = read_table_rows(html)
    except Exception as e:
        st.error(f"Error: {e}")

if rows is None:
    st.info("👈 Upload a saved Account Details page to get started")
    st.stop()

records = parse_rows(rows, mode)
if not records:
    st.info("No trading history data yet. Open Account Details and ensure the table has loaded.")
    st.stop()

# View toggle; every change rebuilds the panel from the records
symbols = sorted({r.symbol for r in records})
selection: ViewSelection = st.session_state.selection
view_mode = st.radio(
    "View",
    list(VIEW_LABELS),
    index=list(VIEW_LABELS).index(selection.view_mode),
    format_func=VIEW_LABELS.get,
    horizontal=True,
)
if view_mode != selection.view_mode:
    selection = selection.switch(view_mode, symbols, default_day=settings["default_day"])

panel = build_panel(records, selection, mode)
if view_mode == "asset" and panel.symbols:
    current = selection.selected_symbol if selection.selected_symbol in panel.symbols else panel.symbols[0]
    symbol = st.selectbox("Asset", panel.symbols, index=panel.symbols.index(current))
    selection = selection.with_symbol(symbol)
elif view_mode == "day":
    current = selection.selected_day if selection.selected_day in panel.days else panel.days[0]
    day = st.selectbox("Day", panel.days, index=panel.days.index(current))
    selection = selection.with_day(day)

st.session_state.selection = selection
panel = build_panel(records, selection, mode)

st.subheader(f"Trading Stats · {selection_title(selection)}")
cards = panel_cards(panel)
for start in range(0, len(cards), 4):
    cols = st.columns(4)
    for col, (label, value, _) in zip(cols, cards[start:start + 4]):
        with col:
            st.metric(label, value)

st.divider()

# Net P&L per bucket with Plotly
by = "day" if view_mode == "day" else "symbol"
table = breakdown(records, by=by, mode=mode)
if not table.empty:
    colors = ["#2ca02c" if v >= 0 else "#d62728" for v in table["net_pnl"]]
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=table[by],
        y=table["net_pnl"],
        marker_color=colors,
        name="Net P&L",
        hovertemplate="<b>%{x}</b><br>Net P&L: $%{y:,.2f}<extra></extra>",
    ))
    fig.update_layout(
        title=f"Net P&L by {'weekday' if by == 'day' else 'asset'}",
        xaxis_title="Weekday" if by == "day" else "Asset",
        yaxis_title="Net P&L ($)",
        template="plotly_white",
        height=400,
    )
    st.plotly_chart(fig, width='stretch')
    st.dataframe(table.round(2), width='stretch')

st.divider()

# Rows table
st.subheader("📋 Rows")
df_display = records_frame(records)
st.dataframe(
    df_display.assign(**{"Net P&L": df_display["Net P&L"].map(format_money)}),
    width='stretch',
)

# Export
st.divider()
st.subheader("💾 Export")

col1, col2 = st.columns(2)
with col1:
    st.download_button(
        label="Download CSV",
        data=df_display.to_csv(index=False),
        file_name="trading_stats_rows.csv",
        mime="text/csv",
    )

with col2:
    try:
        buffer = pd.ExcelWriter("temp.xlsx", engine="openpyxl")
        df_display.to_excel(buffer, index=False)
        buffer.close()
        with open("temp.xlsx", "rb") as f:
            excel_data = f.read()
        st.download_button(
            label="Download Excel",
            data=excel_data,
            file_name="trading_stats_rows.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
        os.remove("temp.xlsx")
    except ImportError:
        st.info("Install openpyxl for Excel export")
