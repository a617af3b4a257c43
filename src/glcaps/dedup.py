"""Lookup of existing reports in the remote database."""

import logging
from dataclasses import dataclass
from typing import Optional

from .remote import RemoteReportStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DedupResult:
    present: bool
    report_id: Optional[int] = None


def find_existing_report(fingerprint: str, store: RemoteReportStore) -> DedupResult:
    """Ask ``store`` whether a report with this exact description exists.

    Matching is an exact string comparison done by the store, results are
    not cached. ``RemoteUnavailable`` propagates to the caller.
    """
    present, report_id = store.exists(fingerprint)
    if present:
        logger.info("Report for %r already present (id %s)", fingerprint, report_id)
    else:
        logger.info("No report for %r in database", fingerprint)
    return DedupResult(present=present, report_id=report_id if present else None)
