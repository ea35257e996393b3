"""
Member Usage Report — Streamlit UI
Upload the usage export, review the summary, download the report workbook.
"""

import sys
from pathlib import Path

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

sys.path.insert(0, str(Path(__file__).resolve().parent))

from config import ReportConfig
from build_report import build_report, member_row, report_bytes
from model import UsageReportError, load_summary

# ---------------------------------------------------------------------------
# Palette
# ---------------------------------------------------------------------------
NAVY = "#051C2C"
BLUE = "#2251FF"
GREY = "#7F8C8D"
LIGHT = "#DDEBF7"
WHITE = "#FFFFFF"

CFG = ReportConfig()

# ---------------------------------------------------------------------------
# Page config & CSS
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title=CFG.report_title,
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.markdown(f"""
<style>
    .main .block-container {{ padding-top: 1.5rem; max-width: 1200px; }}
    [data-testid="collapsedControl"] {{ display: none; }}

    .mu-header {{
        background: {NAVY}; color: white;
        padding: 1.6rem 2rem; border-radius: 8px; margin-bottom: 1.2rem;
    }}
    .mu-header h1 {{ margin: 0; font-size: 1.5rem; font-weight: 600; }}
    .mu-header p {{ margin: 0.3rem 0 0 0; font-size: 0.82rem; opacity: 0.7; }}

    .kpi-row {{ display: flex; gap: 1rem; margin-bottom: 1.5rem; }}
    .kpi-card {{
        flex: 1; background: {WHITE}; border: 1px solid #E0E4E8;
        border-radius: 8px; padding: 1.1rem 1.4rem;
    }}
    .kpi-card .kpi-label {{
        font-size: 0.7rem; font-weight: 500; color: {GREY};
        text-transform: uppercase; letter-spacing: 0.05em; margin-bottom: 0.3rem;
    }}
    .kpi-card .kpi-value {{ font-size: 1.5rem; font-weight: 700; color: {NAVY}; }}
</style>
""", unsafe_allow_html=True)


def _render_header(subtitle: str):
    st.markdown(f"""
    <div class="mu-header">
        <h1>{CFG.report_title}</h1>
        <p>{subtitle}</p>
    </div>
    """, unsafe_allow_html=True)


def _kpi(label: str, value) -> str:
    return (f'<div class="kpi-card"><div class="kpi-label">{label}</div>'
            f'<div class="kpi-value">{value}</div></div>')


def _usage_chart(members: pd.DataFrame) -> go.Figure:
    by_dept = (
        members.groupby(CFG.all_members_headers[2])[CFG.all_members_headers[3]]
        .agg(["count", lambda s: int((s == 0).sum())])
    )
    by_dept.columns = ["members", "never"]
    fig = go.Figure()
    fig.add_bar(name="Active", x=by_dept.index, y=by_dept["members"] - by_dept["never"],
                marker_color=BLUE)
    fig.add_bar(name=CFG.never_used_placeholder.capitalize(), x=by_dept.index,
                y=by_dept["never"], marker_color=GREY)
    fig.update_layout(
        barmode="stack", height=380, plot_bgcolor=WHITE,
        margin=dict(l=20, r=20, t=30, b=20),
        legend=dict(orientation="h", y=1.08),
    )
    return fig


# ═══════════════════════════════════════════════════════════════════════════
# PAGE
# ═══════════════════════════════════════════════════════════════════════════
_render_header("Upload the member usage export &mdash; see who uses the service and who never did")

upload = st.file_uploader(
    "Usage workbook",
    type=[e.lstrip(".") for e in CFG.source_extensions],
    help=f"Must contain a sheet named '{CFG.source_sheet}' with the header in row 1.",
)

if upload is None:
    st.info(f"Waiting for a workbook with a '{CFG.source_sheet}' sheet.")
    st.stop()

try:
    summary = load_summary(upload, CFG)
    wb = build_report(summary, upload.name, CFG)
    excel_bytes = report_bytes(wb)
except UsageReportError as exc:
    st.error(str(exc))
    st.stop()

st.markdown(
    '<div class="kpi-row">'
    + _kpi(CFG.total_label, summary.total_members)
    + _kpi(CFG.never_used_label, summary.never_used_count)
    + '</div>',
    unsafe_allow_html=True,
)

members_df = pd.DataFrame(
    [member_row(m, CFG) for m in summary.members.values()],
    columns=CFG.all_members_headers,
)

tab_all, tab_never, tab_chart = st.tabs(
    [CFG.all_members_sheet, CFG.never_used_sheet, "By department"]
)
with tab_all:
    st.dataframe(members_df, use_container_width=True, hide_index=True, height=500)
with tab_never:
    st.dataframe(pd.DataFrame(
        [[m.name, m.username, m.department] for m in summary.never_used],
        columns=CFG.never_used_headers,
    ), use_container_width=True, hide_index=True)
with tab_chart:
    if members_df.empty:
        st.caption("No members found.")
    else:
        st.plotly_chart(_usage_chart(members_df), use_container_width=True)

st.divider()
st.download_button(
    "Download report as Excel",
    data=excel_bytes,
    file_name=CFG.output_file,
    mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    use_container_width=True,
)
