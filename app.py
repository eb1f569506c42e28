import altair as alt
import pandas as pd
import streamlit as st
from typing import List, Optional

from funnel import dashboard as fd
from funnel.charts import monthly_sales_chart, rep_sales_chart, team_performance_chart
from funnel.data import get_dataset_path, load_dashboard_data, prepare_context
from funnel.errors import ParseError
from funnel.filters import FilterSelection
from funnel.formatting import format_currency_columns
from funnel.records import CSV_HEADERS, records_to_frame

alt.data_transformers.disable_max_rows()

ALL_TEAMS = "All Teams"
ALL_SOURCES = "All Sources"


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


def format_filter_summary(team: Optional[str], attribution_group: Optional[str], row_count: int) -> str:
    chips: List[str] = [
        f"Team: {team}" if team is not None else "Team: All",
        f"Source: {attribution_group}" if attribution_group is not None else "Source: All",
        f"Rows: {row_count:,}",
    ]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_page_header(title: str, filter_summary_html: str, export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(f"<div class='app-top-bar'><div class='page-title'>{title}</div></div>", unsafe_allow_html=True)
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )
    st.markdown(f"<div class='chip-row'>{filter_summary_html}</div>", unsafe_allow_html=True)


# ---------- UI setup ----------
st.set_page_config(page_title="Sales Performance Dashboard", layout="wide")
inject_base_styles()

try:
    data_ctx = load_dashboard_data()
except ParseError as exc:
    location = f" (row {exc.row}, column {exc.field})" if exc.row is not None else ""
    st.error(f"Could not load the sales dataset{location}: {exc}")
    st.stop()

if not data_ctx.get("records"):
    st.error(f"No sales records found. Place peek-funnel.csv at {get_dataset_path()}.")
    st.stop()

# ----- Sidebar: filters -----
with st.sidebar:
    st.markdown("### Filters")
    team_choice = st.selectbox("Team", [None] + data_ctx["teams"], index=0, format_func=lambda v: ALL_TEAMS if v is None else v)
    source_choice = st.selectbox(
        "Attribution", [None] + data_ctx["attribution_groups"], index=0, format_func=lambda v: ALL_SOURCES if v is None else v
    )

selection = FilterSelection(team=team_choice, attribution_group=source_choice)
ctx = prepare_context(selection, data_ctx)
filtered_records = ctx["filtered_records"]

render_page_header(
    "Sales Performance Dashboard",
    format_filter_summary(selection.team, selection.attribution_group, len(filtered_records)),
    export_df=records_to_frame(filtered_records).rename(columns=CSV_HEADERS),
    export_name="peek-funnel-filtered.csv",
)

if not filtered_records:
    st.info("No records match the selected filters.")

# ----- KPI tiles -----
kpis = fd.compute_summary(ctx)
display = kpis["display"]
cols = st.columns(4)
cols[0].metric("Total Revenue", display["total_revenue"], help="Sum of Closed RENR.")
cols[1].metric("Total Deals", display["total_deals"], help="Sum of Closes.")
cols[2].metric("Install Rate", display["install_rate"], help="Installs / Closes. Shown as — when there are no closes.")
cols[3].metric("Avg Deal Size", display["avg_deal_size"], help="Closed RENR / Closes. Shown as — when there are no closes.")

# ----- Charts -----
left, right = st.columns(2)
with left:
    st.subheader("Company Sales Over Time")
    st.altair_chart(monthly_sales_chart(fd.compute_monthly(ctx)), use_container_width=True)
with right:
    st.subheader("Sales by Representative")
    st.altair_chart(rep_sales_chart(fd.compute_reps(ctx)), use_container_width=True)

left, right = st.columns(2)
with left:
    st.subheader("Team Performance")
    st.altair_chart(team_performance_chart(fd.compute_teams(ctx)), use_container_width=True)
with right:
    st.subheader("Lost Opportunities Analysis")
    losses = pd.DataFrame(fd.compute_losses(ctx), columns=["rep", "lost_deals", "lost_revenue"])
    losses = format_currency_columns(losses, ["lost_revenue"]).rename(
        columns={"rep": "Representative", "lost_deals": "Lost Deals", "lost_revenue": "Lost Revenue"}
    )
    st.dataframe(losses, hide_index=True, use_container_width=True)
