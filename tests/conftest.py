"""
Pytest configuration and shared fixtures

Builds small usage workbooks with openpyxl so the reader and the report
writer can be exercised end to end.
"""

import sys
from pathlib import Path

import pytest
from openpyxl import Workbook

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

HEADER = ["Date", "Name", "Username", "Department", "Status", "Last used", "Platform"]


@pytest.fixture
def write_usage_workbook(tmp_path):
    """Return a factory writing `rows` (header excluded) to an .xlsx file."""

    def _write(rows, name="usage.xlsx", sheet="member usage records", header=True):
        wb = Workbook()
        ws = wb.active
        ws.title = sheet
        if header:
            ws.append(HEADER)
        for row in rows:
            ws.append(list(row))
        path = tmp_path / name
        wb.save(path)
        return path

    return _write


@pytest.fixture
def sample_rows():
    """Two accounts: alice used the service on two days, bob never did."""
    return [
        ["2024-01-01", "Alice", "alice", "Research", "used", "2024-01-01 09:00", "Windows"],
        ["2024-01-02", "Alice", "alice", "Research", "used", "2024-01-02 10:30", "macOS"],
        ["2024-01-01", "Bob", "bob", "Finance", "not used", "--", "--"],
    ]
