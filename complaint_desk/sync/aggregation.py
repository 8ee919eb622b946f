"""
Dashboard statistics over a complaint list.
"""

from typing import Any, Iterable

from complaint_desk.schemas.common.enums import (
    PENDING_STATUSES,
    RESOLVED_STATUSES,
    ComplaintStatus,
)
from complaint_desk.schemas.complaint.complaint_analytics import ComplaintStats


def summarize(complaints: Iterable[Any]) -> ComplaintStats:
    """
    Count complaints per dashboard bucket.

    Raises:
        ValueError: On a status outside the known lifecycle
    """
    pending = in_progress = resolved = 0
    for complaint in complaints:
        raw = complaint.get("status") if isinstance(complaint, dict) else complaint.status
        status = ComplaintStatus(raw)
        if status in PENDING_STATUSES:
            pending += 1
        elif status in RESOLVED_STATUSES:
            resolved += 1
        else:
            in_progress += 1

    return ComplaintStats(
        total=pending + in_progress + resolved,
        pending=pending,
        in_progress=in_progress,
        resolved=resolved,
    )
