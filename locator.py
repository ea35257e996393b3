"""Find the usage workbook to read."""

from __future__ import annotations

import logging
import os
from typing import Iterable, Optional

from config import ReportConfig
from model import UsageReportError

log = logging.getLogger(__name__)


class SourceNotFoundError(UsageReportError):
    """No spreadsheet with a supported extension in the directory."""


def find_source_file(
    directory: str = ".",
    extensions: Iterable[str] = ReportConfig.source_extensions,
    exclude: Iterable[str] = (),
) -> Optional[str]:
    """Name of the first file in `directory` with a supported extension.

    Not recursive. Directory order decides between several candidates.
    Names in `exclude` (the report written by a previous run) are ignored.
    """
    exts = tuple(extensions)
    skip = set(exclude)
    with os.scandir(directory) as entries:
        for entry in entries:
            if not entry.is_file() or entry.name in skip:
                continue
            if os.path.splitext(entry.name)[1] in exts:
                log.info("Found source workbook %s", entry.name)
                return entry.name
    return None


def require_source_file(
    directory: str = ".",
    extensions: Iterable[str] = ReportConfig.source_extensions,
    exclude: Iterable[str] = (),
) -> str:
    exts = tuple(extensions)
    name = find_source_file(directory, exts, exclude)
    if name is None:
        raise SourceNotFoundError(
            f"No spreadsheet ({', '.join(exts)}) found in {os.path.abspath(directory)}"
        )
    return name
