from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class UsageRecord:
    """One row of the usage sheet: a member's status on a given date."""

    date: str
    name: str
    username: str
    department: str
    status: str
    last_used: str
    platform: str


@dataclass
class MemberUsage:
    """Aggregated usage for one account."""

    name: str
    username: str
    department: str
    used_days: int = 0
    last_used: str = ""
    platform: str = ""


@dataclass
class UsageSummary:
    """Output container returned by the aggregator."""

    members: Dict[str, MemberUsage] = field(default_factory=dict)
    never_used: List[MemberUsage] = field(default_factory=list)

    @property
    def total_members(self) -> int:
        return len(self.members)

    @property
    def never_used_count(self) -> int:
        return len(self.never_used)


@dataclass
class ReportConfig:
    """Every literal the reader and the report writer rely on."""

    source_extensions: Tuple[str, ...] = (".xlsx", ".xls")
    source_sheet: str = "member usage records"
    used_status: str = "used"
    none_marker: str = "--"
    min_columns: int = 7

    output_file: str = "member_usage_report.xlsx"
    report_title: str = "Member Usage Report"

    summary_sheet: str = "Summary"
    never_used_sheet: str = "Never-used members"
    all_members_sheet: str = "All members usage"

    generated_label: str = "Generated at"
    source_prefix: str = "Based on source file: "
    total_label: str = "Total members"
    never_used_label: str = "Never-used members"
    never_used_placeholder: str = "never used"

    never_used_headers: List[str] = field(
        default_factory=lambda: ["Name", "Account", "Department"]
    )
    all_members_headers: List[str] = field(
        default_factory=lambda: [
            "Name", "Account", "Department", "Used days", "Last used", "Platform",
        ]
    )

    min_col_width: int = 10
    max_col_width: int = 50
