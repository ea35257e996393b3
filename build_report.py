"""
Build the member usage report workbook.
Run this script in the folder holding the usage export to generate
member_usage_report.xlsx.

Three sheets: a summary, the members who never used the service,
and the full per-member usage table.
"""

from __future__ import annotations

import datetime
import io
import logging
import os
import sys
from typing import Iterable, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import IllegalCharacterError

from config import MemberUsage, ReportConfig, UsageSummary
from locator import require_source_file
from model import UsageReportError, load_summary

log = logging.getLogger(__name__)

# ── Palette ──────────────────────────────────────────────────────────────
HEADER_BLUE = "DDEBF7"

# ── Styles ───────────────────────────────────────────────────────────────
header_fill = PatternFill(start_color=HEADER_BLUE, end_color=HEADER_BLUE, fill_type="solid")

title_font = Font(bold=True, size=16)
hdr_font = Font(bold=True)


class ReportWriteError(UsageReportError):
    """The report workbook could not be built or saved."""


# ═════════════════════════════════════════════════════════════════════════
# Column widths
# ═════════════════════════════════════════════════════════════════════════
def display_width(text: str) -> int:
    """Rendered width of `text`; CJK unified ideographs count double."""
    return sum(2 if "\u4e00" <= ch <= "\u9fff" else 1 for ch in text)


def clamp_width(width: int, lo: int = 10, hi: int = 50) -> int:
    return max(lo, min(hi, width))


def adjust_column_widths(ws, col_count, cfg: Optional[ReportConfig] = None):
    """Size each of the first `col_count` columns to its widest data cell."""
    cfg = cfg or ReportConfig()
    for c in range(1, col_count + 1):
        widest = 0
        for (cell,) in ws.iter_rows(min_row=2, min_col=c, max_col=c):
            if cell.value is None:
                continue
            widest = max(widest, display_width(str(cell.value)))
        ws.column_dimensions[get_column_letter(c)].width = clamp_width(
            widest, cfg.min_col_width, cfg.max_col_width
        )


def _style_header_row(ws, headers: List[str]):
    for c, h in enumerate(headers, 1):
        cell = ws.cell(row=1, column=c, value=h)
        cell.font = hdr_font
        cell.fill = header_fill


def _write_rows(ws, rows: Iterable[list], start_row: int = 2):
    for r, values in enumerate(rows, start_row):
        for c, value in enumerate(values, 1):
            ws.cell(row=r, column=c, value=value)


# ═════════════════════════════════════════════════════════════════════════
# SHEET 1: SUMMARY
# ═════════════════════════════════════════════════════════════════════════
def build_summary_sheet(wb, summary: UsageSummary, source_name: str,
                        generated_at: datetime.datetime, cfg: ReportConfig):
    ws = wb.active
    ws.title = cfg.summary_sheet

    ws["A1"] = cfg.report_title
    ws["A1"].font = title_font

    ws["A2"] = cfg.generated_label
    ws["B2"] = f"{cfg.source_prefix}{source_name}"
    ws["C2"] = generated_at.strftime("%Y-%m-%d %H:%M:%S")

    ws["A3"] = cfg.total_label
    ws["B3"] = summary.total_members
    ws["A4"] = cfg.never_used_label
    ws["B4"] = summary.never_used_count

    return ws


# ═════════════════════════════════════════════════════════════════════════
# SHEET 2: NEVER-USED MEMBERS
# ═════════════════════════════════════════════════════════════════════════
def build_never_used_sheet(wb, members: List[MemberUsage], cfg: ReportConfig):
    ws = wb.create_sheet(cfg.never_used_sheet)
    _style_header_row(ws, cfg.never_used_headers)
    _write_rows(ws, ([m.name, m.username, m.department] for m in members))
    adjust_column_widths(ws, len(cfg.never_used_headers), cfg)
    return ws


# ═════════════════════════════════════════════════════════════════════════
# SHEET 3: ALL MEMBERS USAGE
# ═════════════════════════════════════════════════════════════════════════
def member_row(m: MemberUsage, cfg: ReportConfig) -> list:
    return [
        m.name,
        m.username,
        m.department,
        m.used_days,
        m.last_used or cfg.never_used_placeholder,
        m.platform,
    ]


def build_all_members_sheet(wb, summary: UsageSummary, cfg: ReportConfig):
    ws = wb.create_sheet(cfg.all_members_sheet)
    _style_header_row(ws, cfg.all_members_headers)
    _write_rows(ws, (member_row(m, cfg) for m in summary.members.values()))
    adjust_column_widths(ws, len(cfg.all_members_headers), cfg)
    return ws


# ═════════════════════════════════════════════════════════════════════════
# Workbook assembly
# ═════════════════════════════════════════════════════════════════════════
def build_report(
    summary: UsageSummary,
    source_name: str,
    cfg: Optional[ReportConfig] = None,
    generated_at: Optional[datetime.datetime] = None,
) -> Workbook:
    cfg = cfg or ReportConfig()
    generated_at = generated_at or datetime.datetime.now()
    try:
        wb = Workbook()
        build_summary_sheet(wb, summary, source_name, generated_at, cfg)
        build_never_used_sheet(wb, summary.never_used, cfg)
        build_all_members_sheet(wb, summary, cfg)
    except (ValueError, IllegalCharacterError) as exc:
        raise ReportWriteError(f"Cannot populate report: {exc}") from exc
    return wb


def save_report(wb: Workbook, path: str) -> str:
    try:
        wb.save(path)
    except OSError as exc:
        raise ReportWriteError(f"Cannot save report to {path}: {exc}") from exc
    log.info("Saved report to %s", path)
    return path


def report_bytes(wb: Workbook) -> bytes:
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


# ═════════════════════════════════════════════════════════════════════════
# MAIN
# ═════════════════════════════════════════════════════════════════════════
def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def run(directory: str = ".", cfg: Optional[ReportConfig] = None) -> str:
    """Locate, aggregate and write the report. Returns the report path."""
    cfg = cfg or ReportConfig()

    source = require_source_file(
        directory, cfg.source_extensions, exclude=(cfg.output_file,)
    )
    print(f"Found file: {source}")

    summary = load_summary(os.path.join(directory, source), cfg)

    print(f"\n{cfg.report_title}")
    print("=" * len(cfg.report_title))
    print(f"{cfg.total_label}: {summary.total_members}")
    print(f"{cfg.never_used_label}: {summary.never_used_count}")

    wb = build_report(summary, source, cfg)
    out_path = save_report(wb, os.path.join(directory, cfg.output_file))

    print(f"\nReport written: {out_path}")
    print("Sheets:")
    print(f"  1. {cfg.summary_sheet}")
    print(f"  2. {cfg.never_used_sheet} ({summary.never_used_count})")
    print(f"  3. {cfg.all_members_sheet} ({summary.total_members})")
    return out_path


def main():
    _configure_logging()
    try:
        run()
    except UsageReportError as exc:
        log.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
