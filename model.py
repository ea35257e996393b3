"""
Member Usage Aggregation
Reads the per-day usage sheet and folds it into one record per account.
Rows are processed strictly in file order; the reducer is pure.
"""

from __future__ import annotations

import datetime
import logging
import math
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from config import MemberUsage, ReportConfig, UsageRecord, UsageSummary

log = logging.getLogger(__name__)


class UsageReportError(Exception):
    """Base class for fatal conditions of a report run."""


class MalformedInputError(UsageReportError):
    """The usage sheet is missing or the workbook cannot be read."""


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def _cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    if value is pd.NaT:
        return ""
    if isinstance(value, (datetime.datetime, pd.Timestamp)):
        if (value.hour, value.minute, value.second) == (0, 0, 0):
            return value.strftime("%Y-%m-%d")
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, datetime.date):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _trim(cells: List[str]) -> List[str]:
    end = len(cells)
    while end > 0 and cells[end - 1] == "":
        end -= 1
    return cells[:end]


def read_usage_rows(source, sheet_name: str) -> List[List[str]]:
    """All rows of `sheet_name` as display strings, trailing blanks dropped.

    `source` is a path or a binary file-like object. The workbook is closed
    before returning.
    """
    try:
        with pd.ExcelFile(source) as xls:
            if sheet_name not in xls.sheet_names:
                raise MalformedInputError(
                    f"Sheet '{sheet_name}' not found (have: {', '.join(map(str, xls.sheet_names))})"
                )
            frame = xls.parse(
                sheet_name, header=None, dtype=object, keep_default_na=False
            )
    except UsageReportError:
        raise
    except Exception as exc:
        raise MalformedInputError(f"Cannot read workbook {source}: {exc}") from exc

    return [_trim([_cell_text(v) for v in row]) for row in frame.itertuples(index=False)]


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------

def parse_record(row: Sequence[str], min_columns: int = 7) -> Optional[UsageRecord]:
    if len(row) < min_columns:
        return None
    date, name, username, department, status, last_used, platform = row[:7]
    return UsageRecord(
        date=date,
        name=name,
        username=username,
        department=department,
        status=status,
        last_used=last_used,
        platform=platform,
    )


def apply_record(
    member: Optional[MemberUsage],
    record: UsageRecord,
    cfg: Optional[ReportConfig] = None,
) -> MemberUsage:
    """Fold one record into a member's usage and return the new state.

    The marker is compared against the stored last-used *date*, not the
    previous row's marker, so repeated sentinel markers each count.
    """
    cfg = cfg or ReportConfig()
    if member is None:
        member = MemberUsage(
            name=record.name,
            username=record.username,
            department=record.department,
            platform=record.platform,
        )

    if record.status != cfg.used_status or record.last_used == member.last_used:
        return member

    last_used = member.last_used
    if record.date > last_used and record.last_used != cfg.none_marker:
        last_used = record.date

    return replace(
        member,
        used_days=member.used_days + 1,
        last_used=last_used,
        platform=record.platform,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def never_used(members: Dict[str, MemberUsage]) -> List[MemberUsage]:
    return [m for m in members.values() if m.used_days == 0]


def aggregate(
    rows: Iterable[Sequence[str]],
    cfg: Optional[ReportConfig] = None,
) -> UsageSummary:
    cfg = cfg or ReportConfig()
    members: Dict[str, MemberUsage] = {}

    for i, row in enumerate(rows):
        if i == 0:
            continue  # header
        record = parse_record(row, cfg.min_columns)
        if record is None:
            log.debug("Skipping incomplete row %d (%d columns)", i + 1, len(row))
            continue
        members[record.username] = apply_record(
            members.get(record.username), record, cfg
        )

    return UsageSummary(members=members, never_used=never_used(members))


def load_summary(source, cfg: Optional[ReportConfig] = None) -> UsageSummary:
    cfg = cfg or ReportConfig()
    rows = read_usage_rows(source, cfg.source_sheet)
    return aggregate(rows, cfg)
